import asyncio
from collections.abc import Sequence
from datetime import timedelta

import httpx

from linkcards.core.config import Settings
from linkcards.core.logging import get_logger
from linkcards.schemas.link import LinkEntry, LinkMetadata, ScrapeResult, normalize_link_entry
from linkcards.services.cache.batch_cache import BatchCache
from linkcards.services.cache.link_cache import LinkCache
from linkcards.services.cache.stores import CacheStore, build_cache_store
from linkcards.services.scraper.extractors import build_extractor
from linkcards.services.scraper.metadata_scraper import MetadataScraper

logger = get_logger('service.links')


def merge_metadata(entry: LinkEntry, scraped: ScrapeResult) -> LinkMetadata:
    return LinkMetadata(
        url=entry.url,
        title=entry.title or scraped.title,
        description=entry.description or scraped.description,
    )


class LinkResolver:
    """Turns the authored link list into display metadata.

    The batch snapshot is tried first; on a miss every link is resolved
    concurrently through the per-link cache and, failing that, the scraper.
    ``resolve`` always returns one record per entry, in input order.
    """

    def __init__(
        self,
        scraper: MetadataScraper,
        link_cache: LinkCache,
        batch_cache: BatchCache,
        max_concurrency: int = 0,
    ) -> None:
        self.scraper = scraper
        self.link_cache = link_cache
        self.batch_cache = batch_cache
        self.max_concurrency = max_concurrency

    async def resolve(self, entries: Sequence[str | dict | LinkEntry]) -> list[LinkMetadata]:
        normalized = [normalize_link_entry(entry) for entry in entries]

        # Cache stores may block on disk or database I/O.
        cached = await asyncio.to_thread(self.batch_cache.get_snapshot, len(normalized))
        if cached is not None:
            logger.debug('Serving %d links from batch snapshot', len(cached))
            return cached

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def resolve_one(entry: LinkEntry) -> LinkMetadata:
            if semaphore is None:
                return await self._resolve_entry(entry)
            async with semaphore:
                return await self._resolve_entry(entry)

        results = list(await asyncio.gather(*(resolve_one(entry) for entry in normalized)))
        await asyncio.to_thread(self.batch_cache.put_snapshot, results)
        logger.info('Resolved %d links', len(results))
        return results

    async def aclose(self) -> None:
        await self.scraper.aclose()

    async def _resolve_entry(self, entry: LinkEntry) -> LinkMetadata:
        scraped = await asyncio.to_thread(self.link_cache.get, entry.url)
        if scraped is None:
            scraped = await self.scraper.scrape(entry.url)
            await asyncio.to_thread(self.link_cache.set, scraped)
        return merge_metadata(entry, scraped)


def build_link_resolver(config: Settings, store: CacheStore | None = None) -> LinkResolver:
    if store is None:
        store = build_cache_store(config)
    scraper = MetadataScraper(
        client=httpx.AsyncClient(follow_redirects=True),
        max_bytes=config.scrape_max_bytes,
        extractor=build_extractor(config.metadata_extractor),
        timeout=config.scrape_timeout_seconds,
        retry_attempts=config.scrape_retry_attempts,
        retry_backoff=config.scrape_retry_backoff_seconds,
        user_agent=config.scraper_user_agent,
    )
    return LinkResolver(
        scraper=scraper,
        link_cache=LinkCache(
            store,
            ttl=timedelta(hours=config.link_cache_ttl_hours),
            fallback_ttl=timedelta(hours=config.fallback_cache_ttl_hours),
        ),
        batch_cache=BatchCache(store, ttl=timedelta(hours=config.batch_cache_ttl_hours)),
        max_concurrency=config.max_concurrent_scrapes,
    )
