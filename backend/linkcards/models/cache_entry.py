from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from linkcards.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class CacheEntry(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A cached JSON value; rows past ``expires_at`` read as absent."""

    __tablename__ = 'cache_entries'

    key: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    value: Mapped[dict] = mapped_column(JSON, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
