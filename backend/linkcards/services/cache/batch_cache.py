from datetime import timedelta

from pydantic import ValidationError

from linkcards.core.config import settings
from linkcards.core.logging import get_logger
from linkcards.schemas.link import BatchSnapshot, LinkMetadata
from linkcards.services.cache.stores import CacheStore, CacheStoreError, Clock, as_utc, utcnow

logger = get_logger('cache.batch')

SNAPSHOT_KEY = 'links:snapshot'


class BatchCache:
    """Whole-list snapshot of resolved link metadata.

    A snapshot is served only while it is younger than ``ttl`` and holds as
    many records as the current link list. Edits that keep the count
    unchanged go unnoticed until the snapshot ages out.
    """

    def __init__(self, store: CacheStore, ttl: timedelta | None = None, clock: Clock = utcnow) -> None:
        self.store = store
        self.ttl = ttl if ttl is not None else timedelta(hours=settings.batch_cache_ttl_hours)
        self.clock = clock

    def get_snapshot(self, expected_count: int) -> list[LinkMetadata] | None:
        try:
            raw = self.store.get(SNAPSHOT_KEY)
        except CacheStoreError:
            logger.warning('Batch cache read failed, treating as miss', exc_info=True)
            return None

        if raw is None:
            return None

        try:
            snapshot = BatchSnapshot.model_validate(raw)
        except ValidationError:
            logger.warning('Discarding malformed batch snapshot')
            return None

        age = self.clock() - as_utc(snapshot.timestamp)
        if age >= self.ttl:
            logger.debug('Batch snapshot expired (age %s)', age)
            return None
        if len(snapshot.data) != expected_count:
            logger.debug('Batch snapshot holds %d links, expected %d', len(snapshot.data), expected_count)
            return None
        return snapshot.data

    def put_snapshot(self, data: list[LinkMetadata]) -> None:
        snapshot = BatchSnapshot(timestamp=self.clock(), data=data)
        try:
            self.store.set(SNAPSHOT_KEY, snapshot.model_dump(mode='json'))
        except CacheStoreError:
            logger.warning('Batch cache write failed, skipping', exc_info=True)
