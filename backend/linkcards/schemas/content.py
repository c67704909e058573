from pydantic import BaseModel

from linkcards.schemas.link import LinkEntry


class Address(BaseModel):
    name: str
    address: str
    city: str
    state: str
    zip: str


class ContentDocument(BaseModel):
    instagram: str | None = None
    links: list[str | LinkEntry]
    address: Address | None = None
