import re
from dataclasses import dataclass
from typing import Protocol

from bs4 import BeautifulSoup

from linkcards.services.scraper.utils import clean_text, normalize_whitespace

TITLE_KEYS = ('og:title', 'twitter:title')
DESCRIPTION_KEYS = ('og:description', 'twitter:description', 'description')

TITLE_TAG_RE = re.compile(r'<title[^>]*>(.*?)</title\s*>', re.IGNORECASE | re.DOTALL)


@dataclass
class ExtractedMetadata:
    title: str | None = None
    description: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.description


class MetadataExtractor(Protocol):
    def extract(self, html: str) -> ExtractedMetadata: ...


def _meta_patterns(key: str) -> tuple[re.Pattern, re.Pattern]:
    name = re.escape(key)
    key_attr = rf'(?:property|name)\s*=\s*["\']{name}["\']'
    content_attr = r'content\s*=\s*(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\')'
    return (
        re.compile(rf'<meta\b[^>]*?{key_attr}[^>]*?{content_attr}', re.IGNORECASE | re.DOTALL),
        re.compile(rf'<meta\b[^>]*?{content_attr}[^>]*?{key_attr}', re.IGNORECASE | re.DOTALL),
    )


class RegexMetadataExtractor:
    """Pattern-based extraction of Open Graph / Twitter / standard meta tags."""

    def __init__(self) -> None:
        self._patterns = {key: _meta_patterns(key) for key in (*TITLE_KEYS, *DESCRIPTION_KEYS)}

    def extract(self, html: str) -> ExtractedMetadata:
        title = self._meta_content(html, TITLE_KEYS)
        if not title:
            match = TITLE_TAG_RE.search(html)
            title = clean_text(match.group(1)) if match else None
        return ExtractedMetadata(title=title, description=self._meta_content(html, DESCRIPTION_KEYS))

    def _meta_content(self, html: str, keys: tuple[str, ...]) -> str | None:
        for key in keys:
            for pattern in self._patterns[key]:
                match = pattern.search(html)
                if match:
                    value = match.group('dq') if match.group('dq') is not None else match.group('sq')
                    text = clean_text(value)
                    if text:
                        return text
        return None


class SoupMetadataExtractor:
    """Same priority rules as :class:`RegexMetadataExtractor`, on a parsed DOM."""

    def __init__(self, parser: str = 'lxml') -> None:
        self.parser = parser

    def extract(self, html: str) -> ExtractedMetadata:
        soup = BeautifulSoup(html, self.parser)
        title = self._meta_content(soup, TITLE_KEYS)
        if not title and soup.title:
            title = normalize_whitespace(soup.title.get_text(' ', strip=True)) or None
        return ExtractedMetadata(title=title, description=self._meta_content(soup, DESCRIPTION_KEYS))

    def _meta_content(self, soup: BeautifulSoup, names: tuple[str, ...]) -> str | None:
        for name in names:
            tag = soup.find('meta', attrs={'property': name}) or soup.find('meta', attrs={'name': name})
            if tag and tag.get('content'):
                # Attribute values arrive already entity-decoded.
                text = normalize_whitespace(tag['content'])
                if text:
                    return text
        return None


def build_extractor(kind: str) -> MetadataExtractor:
    if kind == 'soup':
        return SoupMetadataExtractor()
    if kind == 'regex':
        return RegexMetadataExtractor()
    raise ValueError(f'Unknown metadata extractor: {kind}')
