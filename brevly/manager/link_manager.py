"""
LinkManager module for Brevly.

Responsibilities:
    - Validate inputs for every use case (pydantic schemas)
    - Normalize target URLs before they are stored
    - Gate alias resolution on a live reachability check
    - Translate store outcomes into typed `Result` values

Design notes:
    - One public method per use case: create, get by id, resolve by alias,
      list, delete, export CSV.
    - Methods never raise. Validation, missing records, alias conflicts and
      unreachable targets come back as `Result.failure(kind, message)`;
      anything unexpected is logged and returned as ErrorKind.UNKNOWN.
    - Storage and the reachability checker are injected, so tests run on the
      in-memory store with a fake checker.
"""

import logging
import math
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..storage.base import BaseStorage, DuplicateAliasError
from .csv_export import render_csv
from .normalizer import normalize_url
from .reachability import ReachabilityChecker
from .result import ErrorKind, Result
from .validation import (
    CreateLinkInput,
    LinkIdInput,
    ListLinksInput,
    ResolveLinkInput,
    validation_message,
)

log = logging.getLogger("brevly.manager")

NOT_FOUND_MESSAGE = "Shortened link not found"
CONFLICT_MESSAGE = "Shortened URL already exists"
UNREACHABLE_MESSAGE = "Target URL is not accessible or invalid"
UNKNOWN_MESSAGE = "Unknown error occurred"


class LinkManager:
    """
    Coordinates validation, normalization and storage for shortened links.

    Args:
        storage (BaseStorage): Record store.
        checker (Optional[ReachabilityChecker]): Anything with an
            ``is_reachable(url) -> bool`` method. Defaults to a real
            HEAD→GET checker.
        default_page_size (int): Page size used by `list_links` when none is given.
    """

    def __init__(
        self,
        storage: BaseStorage,
        checker: Optional[ReachabilityChecker] = None,
        default_page_size: int = 20,
    ):
        self.storage = storage
        self.checker = checker or ReachabilityChecker()
        self.default_page_size = default_page_size

    # ---------------------------------------------------------------------
    # Create / read
    # ---------------------------------------------------------------------
    def create_link(self, url: Any, shortened_url: Any) -> Result[Dict[str, Any]]:
        """
        Create a shortened link.

        Rules:
            - url: absolute http(s) URL, at most 2048 characters.
            - shortened_url: 1-50 characters of [A-Za-z0-9_-].
            - The stored url is the normalized form.
            - A taken alias yields ErrorKind.CONFLICT.

        Returns:
            Result: On success ``{id, url, shortened_url, created_at}``.
        """
        try:
            data = CreateLinkInput(url=url, shortened_url=shortened_url)
        except ValidationError as exc:
            return Result.failure(ErrorKind.VALIDATION, validation_message(exc))

        try:
            created = self.storage.insert_link(normalize_url(data.url), data.shortened_url)
        except DuplicateAliasError:
            return Result.failure(ErrorKind.CONFLICT, CONFLICT_MESSAGE)
        except Exception:
            log.exception("Failed to create link %r", data.shortened_url)
            return Result.failure(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE)

        log.info("Created link %s -> %s", created["shortened_url"], created["url"])
        return Result.success(
            {
                "id": created["id"],
                "url": created["url"],
                "shortened_url": created["shortened_url"],
                "created_at": created["created_at"],
            }
        )

    def get_link_by_id(self, link_id: Any) -> Result[Dict[str, Any]]:
        """Return the full record for ``link_id`` (a hyphenated UUID)."""
        try:
            data = LinkIdInput(id=link_id)
        except ValidationError as exc:
            return Result.failure(ErrorKind.VALIDATION, validation_message(exc))

        try:
            link = self.storage.get_by_id(data.id)
        except Exception:
            log.exception("Failed to load link %s", data.id)
            return Result.failure(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE)

        if link is None:
            return Result.failure(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        return Result.success(link)

    def resolve_link(self, shortened_url: Any) -> Result[Dict[str, Any]]:
        """
        Resolve an alias, counting the visit only if the target answers.

        Flow:
            1. Validate the alias (charset, at least one character).
            2. Look it up; missing -> NOT_FOUND.
            3. Probe the target (HEAD, then GET if HEAD raised). Failure ->
               UNREACHABLE and the record is left untouched.
            4. Atomically increment visits in the store and return the
               updated record. If the row was deleted in the meantime the
               increment finds nothing and the result is NOT_FOUND.
        """
        try:
            data = ResolveLinkInput(shortened_url=shortened_url)
        except ValidationError as exc:
            return Result.failure(ErrorKind.VALIDATION, validation_message(exc))

        try:
            link = self.storage.get_by_alias(data.shortened_url)
            if link is None:
                return Result.failure(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

            if not self.checker.is_reachable(link["url"]):
                log.info("Resolution of %s refused: %s unreachable", data.shortened_url, link["url"])
                return Result.failure(ErrorKind.UNREACHABLE, UNREACHABLE_MESSAGE)

            updated = self.storage.increment_visits(link["id"])
        except Exception:
            log.exception("Failed to resolve %r", data.shortened_url)
            return Result.failure(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE)

        if updated is None:
            return Result.failure(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        return Result.success(updated)

    # ---------------------------------------------------------------------
    # Listing / export
    # ---------------------------------------------------------------------
    def list_links(
        self,
        search_query: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Search, sort and paginate links.

        Sorting applies only when both ``sort_by`` and ``sort_direction`` are
        given; otherwise the newest links come first.

        Returns:
            Result: ``{shortened_links, total, page, page_size, total_pages}``.
        """
        try:
            data = ListLinksInput(
                search_query=search_query,
                sort_by=sort_by,
                sort_direction=sort_direction,
                page=page,
                page_size=page_size if page_size is not None else self.default_page_size,
            )
        except ValidationError as exc:
            return Result.failure(ErrorKind.VALIDATION, validation_message(exc))

        if data.sort_by and data.sort_direction:
            order_by, direction = data.sort_by, data.sort_direction
        else:
            order_by, direction = "createdAt", "desc"

        try:
            rows, total = self.storage.list_links(
                search_query=data.search_query or None,
                sort_by=order_by,
                sort_direction=direction,
                offset=(data.page - 1) * data.page_size,
                limit=data.page_size,
            )
        except Exception:
            log.exception("Failed to list links")
            return Result.failure(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE)

        return Result.success(
            {
                "shortened_links": rows,
                "total": total,
                "page": data.page,
                "page_size": data.page_size,
                "total_pages": math.ceil(total / data.page_size),
            }
        )

    def export_csv(self) -> Result[str]:
        """Render every link, newest first, as CSV text."""
        try:
            rows, _ = self.storage.list_links(sort_by="createdAt", sort_direction="desc")
        except Exception:
            log.exception("Failed to export links")
            return Result.failure(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE)
        return Result.success(render_csv(rows))

    # ---------------------------------------------------------------------
    # Delete
    # ---------------------------------------------------------------------
    def delete_link(self, link_id: Any) -> Result[None]:
        """Delete by id. A second delete of the same id is NOT_FOUND."""
        try:
            data = LinkIdInput(id=link_id)
        except ValidationError as exc:
            return Result.failure(ErrorKind.VALIDATION, validation_message(exc))

        try:
            removed = self.storage.delete_link(data.id)
        except Exception:
            log.exception("Failed to delete link %s", data.id)
            return Result.failure(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE)

        if not removed:
            return Result.failure(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        log.info("Deleted link %s", data.id)
        return Result.success()
