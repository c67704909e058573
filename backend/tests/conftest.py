"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from linkcards.services.cache.stores import MemoryCacheStore


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 16, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeWeb:
    """Serves canned pages through ``httpx.MockTransport`` and records requests."""

    def __init__(self):
        self.pages: dict[str, tuple[int, str, type[Exception] | None]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, html: str = '', status: int = 200, error: type[Exception] | None = None) -> None:
        self.pages[url] = (status, html, error)

    def calls(self, url: str | None = None) -> int:
        if url is None:
            return len(self.requests)
        return sum(1 for request in self.requests if str(request.url) == url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, html, error = self.pages.get(str(request.url), (404, 'not found', None))
        if error is not None:
            raise error(f'{error.__name__} for {request.url}', request=request)
        return httpx.Response(status, text=html, headers={'Content-Type': 'text/html; charset=utf-8'})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def page(title: str | None = None, og_title: str | None = None, description: str | None = None) -> str:
    head = []
    if og_title is not None:
        head.append(f'<meta property="og:title" content="{og_title}">')
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    if title is not None:
        head.append(f'<title>{title}</title>')
    return f'<!doctype html><html><head>{"".join(head)}</head><body></body></html>'


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def fake_web():
    return FakeWeb()


@pytest.fixture
def make_page():
    return page
