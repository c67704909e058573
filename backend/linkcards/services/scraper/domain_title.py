"""Human-readable titles derived from a URL alone.

Used whenever a page cannot supply a usable title, and always for the social
platforms whose scraped titles are generic.
"""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from linkcards.services.scraper.utils import host_matches, hostname_of


@dataclass(frozen=True)
class Platform:
    name: str
    domains: tuple[str, ...]
    path_pattern: re.Pattern
    template: str


PLATFORMS = (
    Platform('facebook', ('facebook.com', 'fb.com'), re.compile(r'^/([^/?#]+)'), '@{user} on Facebook'),
    Platform('instagram', ('instagram.com',), re.compile(r'^/([^/?#]+)'), '@{user} on Instagram'),
    Platform('x', ('x.com', 'twitter.com'), re.compile(r'^/([^/?#]+)'), '@{user} on X'),
    Platform('linkedin', ('linkedin.com',), re.compile(r'^/(?:in|company)/([^/?#]+)'), '{user} on LinkedIn'),
)

SOCIAL_TITLE_PLATFORMS = frozenset({'facebook', 'instagram', 'x'})


def detect_platform(url: str) -> Platform | None:
    host = hostname_of(url)
    if not host:
        return None
    for platform in PLATFORMS:
        if host_matches(host, platform.domains):
            return platform
    return None


def domain_title(url: str) -> str:
    host = hostname_of(url)
    if not host:
        return url

    platform = detect_platform(url)
    if platform is not None:
        match = platform.path_pattern.search(urlsplit(url).path)
        if match:
            return platform.template.format(user=match.group(1))

    return host[0].upper() + host[1:]


def uses_domain_title(url: str) -> bool:
    """True for platforms whose page titles are replaced by the domain title."""
    platform = detect_platform(url)
    return platform is not None and platform.name in SOCIAL_TITLE_PLATFORMS
