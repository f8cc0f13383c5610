from typing import Optional

from pydantic import BaseModel, ConfigDict


class LinkParams(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None


class LinkCreateRequest(BaseModel):
    link: LinkParams


class LinkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    upvotes: int
    downvotes: int


class LinkEnvelope(BaseModel):
    link: LinkOut


class LinkList(BaseModel):
    links: list[LinkOut]


class ErrorList(BaseModel):
    errors: list[str]
