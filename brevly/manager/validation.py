"""
Input schemas for LinkManager operations (pydantic v2).

Each operation parses its raw input through one of these models. Rule
violations are collected by pydantic and flattened into a single
"Validation error: a, b" message by `validation_message`.
"""

import re
from typing import Literal, Optional
from urllib.parse import urlsplit

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_core import PydanticCustomError

ALIAS_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

URL_MAX_LENGTH = 2048
ALIAS_MAX_LENGTH = 50

# (PAGE_MAX - 1) * PAGE_SIZE_MAX stays below the bigint OFFSET limit of 2**63
PAGE_MAX = 10**9
PAGE_SIZE_MAX = 10**9

_HTTP_URL = TypeAdapter(HttpUrl)

ALIAS_CHARSET_MESSAGE = (
    "Shortened URL must contain only alphanumeric characters, hyphens, and underscores"
)


def _check_alias_charset(value: str) -> str:
    if value and not ALIAS_PATTERN.match(value):
        raise PydanticCustomError("alias_charset", ALIAS_CHARSET_MESSAGE)
    return value


def _check_uuid(value: str) -> str:
    if not UUID_PATTERN.match(value):
        raise PydanticCustomError("id_format", "Invalid ID format")
    return value


class CreateLinkInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(max_length=URL_MAX_LENGTH)
    shortened_url: str = Field(min_length=1, max_length=ALIAS_MAX_LENGTH)

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        # HttpUrl percent-encodes raw spaces in the path, so whitespace is refused first
        valid = not any(ch.isspace() or ord(ch) < 0x20 for ch in value)
        if valid:
            try:
                _HTTP_URL.validate_python(value)
                parts = urlsplit(value)
                valid = bool(parts.hostname)
                parts.port  # raises ValueError when out of range
            except (ValidationError, ValueError):
                valid = False
        if not valid:
            raise PydanticCustomError("url_format", "Invalid URL format")
        return value

    check_alias_charset = field_validator("shortened_url")(_check_alias_charset)


class ResolveLinkInput(BaseModel):
    """Alias lookup: same charset as creation, no upper length bound."""

    model_config = ConfigDict(frozen=True)

    shortened_url: str = Field(min_length=1)

    check_alias_charset = field_validator("shortened_url")(_check_alias_charset)


class LinkIdInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str

    check_id_format = field_validator("id")(_check_uuid)


class ListLinksInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_query: Optional[str] = None
    sort_by: Optional[Literal["createdAt", "url", "shortenedUrl", "visits"]] = None
    sort_direction: Optional[Literal["asc", "desc"]] = None
    page: int = Field(default=1, ge=1, le=PAGE_MAX)
    page_size: int = Field(default=20, ge=1, le=PAGE_SIZE_MAX)


def validation_message(exc: ValidationError) -> str:
    """Join every failed rule's message: 'Validation error: first, second'."""
    return "Validation error: " + ", ".join(err["msg"] for err in exc.errors())
