import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from linkcards.core.config import settings
from linkcards.core.logging import get_logger
from linkcards.schemas.link import ScrapeResult
from linkcards.services.scraper.domain_title import domain_title, uses_domain_title
from linkcards.services.scraper.extractors import MetadataExtractor, build_extractor

logger = get_logger('scraper.metadata')

RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


class MetadataScraper:
    """Fetches a page and turns it into a :class:`ScrapeResult`.

    ``scrape`` never raises: transport errors, timeouts and non-2xx responses
    all degrade to a domain-derived title with no description.

    Args:
        client: Shared ``httpx.AsyncClient``; one is opened per call when omitted.
        extractor: Extraction strategy, see ``settings.metadata_extractor``.
        timeout: Per-request timeout in seconds.
        retry_attempts: Attempts for transport errors (HTTP status errors are not retried).
        max_bytes: Body bytes read per page; the rest is dropped.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        extractor: MetadataExtractor | None = None,
        timeout: float | None = None,
        retry_attempts: int | None = None,
        retry_backoff: float | None = None,
        user_agent: str | None = None,
        max_bytes: int | None = None,
    ) -> None:
        self.client = client
        self.max_bytes = max_bytes or settings.scrape_max_bytes
        self.extractor = extractor or build_extractor(settings.metadata_extractor)
        self.timeout = timeout if timeout is not None else settings.scrape_timeout_seconds
        self.retry_attempts = retry_attempts or settings.scrape_retry_attempts
        self.retry_backoff = retry_backoff if retry_backoff is not None else settings.scrape_retry_backoff_seconds
        self.headers = {
            'User-Agent': user_agent or settings.scraper_user_agent,
            'Accept': 'text/html,application/xhtml+xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
        }

    async def scrape(self, url: str) -> ScrapeResult:
        try:
            html = await self._fetch(url)
        except httpx.HTTPStatusError as exc:
            logger.warning('Scrape of %s returned HTTP %s', url, exc.response.status_code)
            return self.fallback(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning('Scrape of %s failed: %s', url, exc.__class__.__name__)
            return self.fallback(url)

        extracted = self.extractor.extract(html)
        if extracted.is_empty:
            logger.info('No metadata found on %s, using domain title', url)
            return self.fallback(url)

        title = extracted.title
        if not title or uses_domain_title(url):
            title = domain_title(url)
        return ScrapeResult(url=url, title=title, description=extracted.description)

    def fallback(self, url: str) -> ScrapeResult:
        return ScrapeResult(url=url, title=domain_title(url), fallback=True)

    async def _fetch(self, url: str) -> str:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_backoff, max=4),
            reraise=True,
        )
        return await retrying(self._get, url)

    async def _get(self, url: str) -> str:
        if self.client is not None:
            return await self._request(self.client, url)
        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await self._request(client, url)

    async def _request(self, client: httpx.AsyncClient, url: str) -> str:
        async with client.stream('GET', url, headers=self.headers, timeout=self.timeout) as response:
            response.raise_for_status()
            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) >= self.max_bytes:
                    logger.debug('Truncating %s at %d bytes', url, self.max_bytes)
                    break
            encoding = response.charset_encoding or 'utf-8'
        content = bytes(body[: self.max_bytes])
        try:
            return content.decode(encoding, errors='replace')
        except LookupError:
            return content.decode('utf-8', errors='replace')

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
