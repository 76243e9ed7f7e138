"""
Global pytest fixtures for the Brevly test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory Storage for direct testing
    - Provide a LinkManager wired to that Storage and a fake reachability checker

No test touches the network: the checker fixture answers from a set of
URLs marked unreachable.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from brevly.manager.link_manager import LinkManager
from brevly.storage.storage import Storage


class FakeChecker:
    """Reachability checker double; every URL is reachable unless listed."""

    def __init__(self):
        self.unreachable = set()
        self.calls = []

    def is_reachable(self, url: str) -> bool:
        self.calls.append(url)
        return url not in self.unreachable

    def close(self) -> None:
        pass


@pytest.fixture
def storage() -> Storage:
    """Provide a fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def checker() -> FakeChecker:
    return FakeChecker()


@pytest.fixture
def manager(storage: Storage, checker: FakeChecker) -> LinkManager:
    """Provide a LinkManager wired to the storage and checker fixtures."""
    return LinkManager(storage=storage, checker=checker)


@pytest.fixture
def client(storage: Storage, checker: FakeChecker) -> TestClient:
    """
    Provide a fresh TestClient with a new app instance.

    The app shares the `storage` and `checker` fixtures so tests can seed
    or inspect the store directly.
    """
    app = create_app(storage=storage, checker=checker)
    return TestClient(app)
