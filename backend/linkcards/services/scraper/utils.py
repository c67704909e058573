import html
import re
from urllib.parse import urlsplit


def normalize_whitespace(value: str) -> str:
    return re.sub(r'\s+', ' ', value).strip()


def clean_text(value: str | None) -> str | None:
    """Decode HTML character references and collapse whitespace."""
    if value is None:
        return None
    text = normalize_whitespace(html.unescape(value))
    return text or None


def hostname_of(url: str) -> str | None:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    host = host.lower()
    if host.startswith('www.'):
        host = host[4:]
    return host or None


def host_matches(host: str, domains: tuple[str, ...]) -> bool:
    return any(host == domain or host.endswith(f'.{domain}') for domain in domains)
