from linkcards.models.base import Base
from linkcards.models.cache_entry import CacheEntry

__all__ = [
    'Base',
    'CacheEntry',
]
