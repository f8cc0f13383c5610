from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from .db import Base
from .services.scoring import Score


IMAGE_FORMATS = (".jpg", ".gif", ".png")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, also on backends that store them naive (SQLite)."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Link(Base):
    __tablename__ = "links"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_link_upvotes"),
        CheckConstraint("downvotes >= 0", name="ck_link_downvotes"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    upvotes: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    downvotes: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False, index=True)

    @property
    def score(self) -> Score:
        return Score.of(self)

    @property
    def is_image(self) -> bool:
        # case-sensitive suffix match
        return (self.url or "").endswith(IMAGE_FORMATS)

    def __repr__(self) -> str:
        return f"<Link id={self.id} title={self.title!r} +{self.upvotes}/-{self.downvotes}>"
