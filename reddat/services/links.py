from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models import Link, utcnow


class LinkValidationError(ValueError):
    """Raised when a link is submitted with a blank title or url."""

    def __init__(self, fields: list[str]):
        self.fields = list(fields)
        self.errors = [f"{name.capitalize()} can't be blank" for name in self.fields]
        super().__init__("; ".join(self.errors))


class LinkNotFound(LookupError):
    def __init__(self, link_id: int):
        self.link_id = link_id
        super().__init__(f"Link {link_id} not found")


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def create_link(db: Session, title: Optional[str], url: Optional[str], now: Optional[datetime] = None) -> Link:
    missing = [name for name, value in (("title", title), ("url", url)) if _blank(value)]
    if missing:
        logger.debug("Rejected link submission, blank fields: {}", missing)
        raise LinkValidationError(missing)

    link = Link(
        title=title.strip(),
        url=url.strip(),
        upvotes=0,
        downvotes=0,
        created_at=now or utcnow(),
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    logger.info("Link {} created: {}", link.id, link.url)
    return link


def get_link(db: Session, link_id: int) -> Link:
    link = db.get(Link, link_id)
    if not link:
        raise LinkNotFound(link_id)
    return link


def _increment(db: Session, link_id: int, column) -> Link:
    # increment runs inside the UPDATE, never read-modify-write here
    result = db.execute(
        update(Link)
        .where(Link.id == link_id)
        .values({column: column + 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise LinkNotFound(link_id)
    db.commit()
    link = db.get(Link, link_id)
    db.refresh(link)
    return link


def upvote(db: Session, link_id: int) -> Link:
    link = _increment(db, link_id, Link.upvotes)
    logger.info("Link {} upvoted, now {}", link.id, link.score.formatted())
    return link


def downvote(db: Session, link_id: int) -> Link:
    link = _increment(db, link_id, Link.downvotes)
    logger.info("Link {} downvoted, now {}", link.id, link.score.formatted())
    return link


def hottest_first(db: Session) -> list[Link]:
    """All links by net score, highest first. Equal scores list the newest first."""
    stmt = select(Link).order_by(
        (Link.upvotes - Link.downvotes).desc(),
        Link.created_at.desc(),
        Link.id.desc(),
    )
    return list(db.scalars(stmt).all())


def newest_first(db: Session) -> list[Link]:
    stmt = select(Link).order_by(Link.created_at.desc(), Link.id.desc())
    return list(db.scalars(stmt).all())
