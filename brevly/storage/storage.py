"""
Storage module for Brevly (in-memory implementation).

Responsibilities:
    - Save shortened links keyed by id
    - Enforce alias uniqueness through a secondary index
    - Count visits atomically
    - Provide filtered/sorted/paginated listing

Design:
    - This is an in-memory reference implementation that satisfies the BaseStorage contract.
    - It keeps unit/integration tests fast and deterministic.
    - A single lock plays the role a database plays for the PostgreSQL store:
      every read-modify-write happens under it, so concurrent increments
      are never lost.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .base import SORT_FIELDS, BaseStorage, DuplicateAliasError


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.links = {
                id: {
                    "id": str,
                    "url": str,
                    "shortened_url": str,
                    "visits": int,
                    "created_at": datetime,
                    "updated_at": datetime,
                }
            }
            self.aliases = { shortened_url: id }
        """
        self.links: Dict[str, Dict[str, Any]] = {}
        self.aliases: Dict[str, str] = {}
        self._lock = threading.Lock()

    def insert_link(self, url: str, shortened_url: str) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        with self._lock:
            if shortened_url in self.aliases:
                raise DuplicateAliasError(shortened_url)
            link_id = str(uuid.uuid4())
            record = {
                "id": link_id,
                "url": url,
                "shortened_url": shortened_url,
                "visits": 0,
                "created_at": now,
                "updated_at": now,
            }
            self.links[link_id] = record
            self.aliases[shortened_url] = link_id
            return dict(record)

    def get_by_id(self, link_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self.links.get(link_id)
            return dict(record) if record else None

    def get_by_alias(self, shortened_url: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            link_id = self.aliases.get(shortened_url)
            if link_id is None:
                return None
            return dict(self.links[link_id])

    def increment_visits(self, link_id: str) -> Optional[Dict[str, Any]]:
        """
        Increment visits for a given id.

        Returns:
            Optional[Dict[str, Any]]: Copy of the updated record, None if the id is gone.
        """
        with self._lock:
            record = self.links.get(link_id)
            if record is None:
                return None
            record["visits"] += 1
            # updated_at never goes below created_at, even if the clock steps back
            record["updated_at"] = max(datetime.now(timezone.utc), record["created_at"])
            return dict(record)

    def delete_link(self, link_id: str) -> bool:
        with self._lock:
            record = self.links.pop(link_id, None)
            if record is None:
                return False
            self.aliases.pop(record["shortened_url"], None)
            return True

    def list_links(
        self,
        search_query: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_direction: str = "desc",
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Filter, sort and slice a snapshot of all records.

        Notes:
            - Matching mirrors SQL ILIKE '%q%' on url OR shortened_url.
            - Python's sort is stable, so ties keep insertion order.
        """
        key = SORT_FIELDS.get(sort_by)
        if key is None:
            raise ValueError(f"Unknown sort field: {sort_by!r}")

        with self._lock:
            rows = [dict(r) for r in self.links.values()]

        if search_query:
            needle = search_query.lower()
            rows = [
                r for r in rows
                if needle in r["url"].lower() or needle in r["shortened_url"].lower()
            ]

        rows.sort(key=lambda r: r[key], reverse=(sort_direction == "desc"))
        total = len(rows)
        end = None if limit is None else offset + limit
        return rows[offset:end], total
