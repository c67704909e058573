from pathlib import Path

from linkcards.core.logging import get_logger
from linkcards.schemas.content import ContentDocument

logger = get_logger('service.content')


class ContentStore:
    """Read access to the site's content document (links, instagram, address)."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> ContentDocument:
        raw = self.path.read_text(encoding='utf-8')
        document = ContentDocument.model_validate_json(raw)
        logger.debug('Loaded content document with %d links from %s', len(document.links), self.path)
        return document
