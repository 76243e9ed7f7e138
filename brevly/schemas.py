"""
Pydantic schemas for request/response bodies of the HTTP layer.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateLinkRequest(BaseModel):
    """Request payload for creating a shortened link.

    Only the shape is checked here; the URL/alias rules live in LinkManager.
    """

    model_config = _camel

    url: str
    shortened_url: str


class CreatedLinkOut(BaseModel):
    model_config = _camel

    id: str
    url: str
    shortened_url: str
    created_at: datetime


class LinkOut(BaseModel):
    model_config = _camel

    id: str
    url: str
    shortened_url: str
    visits: int
    created_at: datetime
    updated_at: datetime


class LinkPageOut(BaseModel):
    model_config = _camel

    shortened_links: List[LinkOut]
    total: int
    page: int
    page_size: int
    total_pages: int


class MessageOut(BaseModel):
    message: str
