from datetime import timedelta

from pydantic import ValidationError

from linkcards.core.config import settings
from linkcards.core.logging import get_logger
from linkcards.schemas.link import ScrapeResult
from linkcards.services.cache.stores import CacheStore, CacheStoreError

logger = get_logger('cache.link')

KEY_PREFIX = 'link:'


class LinkCache:
    """Per-URL scrape results, keyed by the literal URL string.

    Full scrapes are kept for ``ttl``; fallback results only for
    ``fallback_ttl`` so a transient failure is retried soon.
    """

    def __init__(
        self,
        store: CacheStore,
        ttl: timedelta | None = None,
        fallback_ttl: timedelta | None = None,
    ) -> None:
        self.store = store
        self.ttl = ttl if ttl is not None else timedelta(hours=settings.link_cache_ttl_hours)
        self.fallback_ttl = (
            fallback_ttl if fallback_ttl is not None else timedelta(hours=settings.fallback_cache_ttl_hours)
        )

    def get(self, url: str) -> ScrapeResult | None:
        try:
            raw = self.store.get(KEY_PREFIX + url)
        except CacheStoreError:
            logger.warning('Link cache read failed for %s, treating as miss', url, exc_info=True)
            return None

        if raw is None:
            logger.debug('Link cache miss: %s', url)
            return None

        try:
            return ScrapeResult.model_validate(raw)
        except ValidationError:
            logger.warning('Discarding malformed link cache entry for %s', url)
            return None

    def set(self, result: ScrapeResult, ttl: timedelta | None = None) -> None:
        if ttl is None:
            ttl = self.ttl_for(result)
        try:
            self.store.set(KEY_PREFIX + result.url, result.model_dump(mode='json'), ttl)
        except CacheStoreError:
            logger.warning('Link cache write failed for %s, skipping', result.url, exc_info=True)

    def ttl_for(self, result: ScrapeResult) -> timedelta:
        return self.fallback_ttl if result.fallback else self.ttl
