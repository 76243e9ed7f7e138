"""
Base storage interface for Brevly.

Purpose:
    Define a small, stable contract that the in-memory and PostgreSQL record
    stores implement, so the manager and HTTP layer never care where
    shortened links live.

Record shape:
    Every method that returns a record returns a plain dict with the keys
    ``id, url, shortened_url, visits, created_at, updated_at``.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

# Public sort keys (camelCase, as clients send them) -> record keys.
SORT_FIELDS: Dict[str, str] = {
    "createdAt": "created_at",
    "url": "url",
    "shortenedUrl": "shortened_url",
    "visits": "visits",
}


class DuplicateAliasError(Exception):
    """Raised by a store when an insert violates alias uniqueness."""

    def __init__(self, shortened_url: str):
        super().__init__(f"Alias already stored: {shortened_url}")
        self.shortened_url = shortened_url


class BaseStorage(ABC):
    """Abstract base class for record stores."""

    def ensure_schema(self) -> None:
        """Create backing tables if the backend needs them. No-op by default."""
        return None

    @abstractmethod  # pragma: no cover
    def insert_link(self, url: str, shortened_url: str) -> Dict[str, Any]:
        """
        Insert a new record with a fresh id, zero visits and current timestamps.

        Returns:
            Dict[str, Any]: The stored record.

        Raises:
            DuplicateAliasError: If ``shortened_url`` is already taken.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_by_id(self, link_id: str) -> Optional[Dict[str, Any]]:
        """Return the record with this id, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_by_alias(self, shortened_url: str) -> Optional[Dict[str, Any]]:
        """Return the record with this alias, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def increment_visits(self, link_id: str) -> Optional[Dict[str, Any]]:
        """
        Atomically add one visit and bump ``updated_at``.

        Returns:
            Optional[Dict[str, Any]]: The updated record, or None if the id
            no longer exists.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_link(self, link_id: str) -> bool:
        """Delete a record by id. Returns True if a row was removed."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_links(
        self,
        search_query: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_direction: str = "desc",
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Filtered, sorted, paginated select.

        Args:
            search_query: Case-insensitive substring matched against url and alias.
            sort_by: One of the keys of ``SORT_FIELDS``.
            sort_direction: "asc" or "desc".
            offset: Rows to skip.
            limit: Max rows to return; None returns everything after offset.

        Returns:
            Tuple of (page rows, total matching rows before pagination).
        """
        raise NotImplementedError
