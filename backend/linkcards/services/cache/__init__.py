from .batch_cache import BatchCache
from .link_cache import LinkCache
from .stores import CacheStore, CacheStoreError, FileCacheStore, MemoryCacheStore, SqlCacheStore, build_cache_store

__all__ = [
    'BatchCache',
    'LinkCache',
    'CacheStore',
    'CacheStoreError',
    'FileCacheStore',
    'MemoryCacheStore',
    'SqlCacheStore',
    'build_cache_store',
]
