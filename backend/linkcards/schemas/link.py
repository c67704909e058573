from datetime import datetime

from pydantic import BaseModel, field_validator


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class LinkEntry(BaseModel):
    """A link as authored in the content document.

    ``title`` and ``description`` are manual overrides; blank strings are
    treated as absent so the scraped values show through.
    """

    url: str
    title: str | None = None
    description: str | None = None

    @field_validator('url', mode='before')
    @classmethod
    def strip_url(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator('title', 'description', mode='before')
    @classmethod
    def blank_overrides(cls, value):
        return _blank_to_none(value)


class ScrapeResult(BaseModel):
    url: str
    title: str
    description: str | None = None
    # Domain-title-only result from a failed or empty scrape.
    fallback: bool = False


class LinkMetadata(BaseModel):
    url: str
    title: str
    description: str | None = None


class BatchSnapshot(BaseModel):
    timestamp: datetime
    data: list[LinkMetadata]


def normalize_link_entry(entry: 'str | dict | LinkEntry') -> LinkEntry:
    if isinstance(entry, LinkEntry):
        return entry
    if isinstance(entry, str):
        return LinkEntry(url=entry)
    return LinkEntry.model_validate(entry)
