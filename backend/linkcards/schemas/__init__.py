from linkcards.schemas.content import Address, ContentDocument
from linkcards.schemas.link import BatchSnapshot, LinkEntry, LinkMetadata, ScrapeResult, normalize_link_entry

__all__ = [
    'Address',
    'ContentDocument',
    'LinkEntry',
    'LinkMetadata',
    'ScrapeResult',
    'BatchSnapshot',
    'normalize_link_entry',
]
