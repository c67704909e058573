import asyncio

import httpx

from linkcards.services.scraper.extractors import SoupMetadataExtractor
from linkcards.services.scraper.metadata_scraper import MetadataScraper


def _scrape(scraper: MetadataScraper, url: str):
    return asyncio.run(scraper.scrape(url))


def test_scrape_extracts_open_graph_metadata(fake_web, make_page):
    fake_web.add('https://zine.example.org/issue-3', make_page(title='Doc', og_title='Issue 3', description='Poems'))
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://zine.example.org/issue-3')

    assert result.url == 'https://zine.example.org/issue-3'
    assert result.title == 'Issue 3'
    assert result.description == 'Poems'
    assert result.fallback is False


def test_scrape_sends_crawler_user_agent(fake_web, make_page):
    fake_web.add('https://example.com/page', make_page(title='Page'))
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    _scrape(scraper, 'https://example.com/page')

    user_agent = fake_web.requests[0].headers['User-Agent']
    assert user_agent.startswith('facebookexternalhit/')


def test_scrape_applies_request_timeout(fake_web, make_page):
    fake_web.add('https://example.com/page', make_page(title='Page'))
    scraper = MetadataScraper(client=fake_web.client(), timeout=10, retry_attempts=1)

    _scrape(scraper, 'https://example.com/page')

    timeout = fake_web.requests[0].extensions['timeout']
    assert timeout['read'] == 10
    assert timeout['connect'] == 10


def test_scrape_non_2xx_falls_back_to_domain_title(fake_web):
    fake_web.add('https://example.com/page', '<title>Server Error</title>', status=500)
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://example.com/page')

    assert result.title == 'Example.com'
    assert result.description is None
    assert result.fallback is True


def test_scrape_connection_error_falls_back_to_domain_title(fake_web):
    fake_web.add('https://example.com/page', error=httpx.ConnectError)
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://example.com/page')

    assert result.model_dump() == {
        'url': 'https://example.com/page',
        'title': 'Example.com',
        'description': None,
        'fallback': True,
    }


def test_scrape_timeout_falls_back_to_domain_title(fake_web):
    fake_web.add('https://example.com/page', error=httpx.ReadTimeout)
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://example.com/page')

    assert result.title == 'Example.com'
    assert result.fallback is True


def test_scrape_retries_transport_errors(fake_web):
    fake_web.add('https://example.com/page', error=httpx.ConnectError)
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=3, retry_backoff=0)

    result = _scrape(scraper, 'https://example.com/page')

    assert result.fallback is True
    assert fake_web.calls('https://example.com/page') == 3


def test_scrape_does_not_retry_http_errors(fake_web):
    fake_web.add('https://example.com/missing', status=404)
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=3, retry_backoff=0)

    _scrape(scraper, 'https://example.com/missing')

    assert fake_web.calls('https://example.com/missing') == 1


def test_social_profiles_always_use_domain_title(fake_web, make_page):
    fake_web.add('https://instagram.com/alice', make_page(og_title='Instagram', description='Photos and videos'))
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://instagram.com/alice')

    assert result.title == '@alice on Instagram'
    assert result.description == 'Photos and videos'
    assert result.fallback is False


def test_linkedin_keeps_scraped_title(fake_web, make_page):
    fake_web.add('https://www.linkedin.com/in/jane-doe', make_page(og_title='Jane Doe - Editor'))
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://www.linkedin.com/in/jane-doe')

    assert result.title == 'Jane Doe - Editor'


def test_page_without_metadata_is_a_fallback(fake_web):
    fake_web.add('https://www.example.com/blank', '<html><body>nothing here</body></html>')
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://www.example.com/blank')

    assert result.title == 'Example.com'
    assert result.fallback is True


def test_description_only_page_gets_domain_title(fake_web, make_page):
    fake_web.add('https://example.com/about', make_page(description='About us'))
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'https://example.com/about')

    assert result.title == 'Example.com'
    assert result.description == 'About us'
    assert result.fallback is False


def test_scrape_decodes_entities(fake_web, make_page):
    fake_web.add('https://example.com/rock', make_page(title='Rock &amp; Roll'))
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    assert _scrape(scraper, 'https://example.com/rock').title == 'Rock & Roll'


def test_scrape_with_soup_extractor(fake_web, make_page):
    fake_web.add('https://example.com/rock', make_page(title='Ignored', og_title='Rock &amp; Roll'))
    scraper = MetadataScraper(client=fake_web.client(), extractor=SoupMetadataExtractor(), retry_attempts=1)

    assert _scrape(scraper, 'https://example.com/rock').title == 'Rock & Roll'


def test_scrape_malformed_url_returns_raw_string(fake_web):
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1)

    result = _scrape(scraper, 'not a url')

    assert result.title == 'not a url'
    assert result.fallback is True


def test_scrape_reads_at_most_max_bytes(fake_web):
    html = (
        '<html><head><meta property="og:title" content="Short"></head><body>'
        + 'x' * 5000
        + '<meta name="description" content="Too far down"></body></html>'
    )
    fake_web.add('https://example.com/huge', html)
    scraper = MetadataScraper(client=fake_web.client(), retry_attempts=1, max_bytes=200)

    result = _scrape(scraper, 'https://example.com/huge')

    assert result.title == 'Short'
    assert result.description is None


def test_aclose_closes_shared_client(fake_web):
    client = fake_web.client()
    scraper = MetadataScraper(client=client, retry_attempts=1)

    asyncio.run(scraper.aclose())

    assert client.is_closed
