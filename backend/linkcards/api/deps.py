from functools import lru_cache

from linkcards.core.config import settings
from linkcards.services.content_store import ContentStore
from linkcards.services.link_resolver import LinkResolver, build_link_resolver


def get_content_store() -> ContentStore:
    return ContentStore(settings.content_path)


@lru_cache
def get_link_resolver() -> LinkResolver:
    return build_link_resolver(settings)
