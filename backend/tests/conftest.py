"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend and reset the module-level
singletons (session store, internship stores) so tests never leak state
into each other.
"""
import os
import sys
from pathlib import Path

import pytest

# Ensure the repo root is importable so `backend.*` resolves without install
REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "backend" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)

# main.py runs the startup guard at import time; tests always start from dev.
os.environ.pop("PORTAL_ENV", None)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_portal_env(monkeypatch: pytest.MonkeyPatch):
    """Start every test from a dev environment with in-memory stores.

    Behavior:
        - Clear PORTAL_ENV so the startup guard stays permissive.
        - Clear Firestore, session and login settings that a developer shell may carry.
    """
    for var in (
        "PORTAL_ENV",
        "INTERNSHIP_STORE_BACKEND",
        "FIRESTORE_PROJECT",
        "FIRESTORE_DATABASE",
        "FIRESTORE_DELIVERY_PROJECT",
        "FIRESTORE_DELIVERY_DATABASE",
        "PORTAL_LOGIN_URL",
        "PORTAL_SESSIONS_BACKEND",
        "FIREBASE_PROJECT",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def primary_store():
    from backend.internship.repo_memory import InMemoryPrimaryStore

    return InMemoryPrimaryStore()


@pytest.fixture
def delivery_store():
    from backend.internship.repo_memory import InMemoryDeliveryStore

    return InMemoryDeliveryStore()


@pytest.fixture(autouse=True)
def _reset_stores_and_sessions(monkeypatch: pytest.MonkeyPatch, _clear_portal_env):
    """Reset SESSION_STORE and the internship stores per test.

    Why:
        Web tests seed the stores and create sessions on module singletons;
        without a reset, records from one test would be visible in the next.
    """
    from backend.identity_access.stores import SessionStore
    from backend.web import main
    from backend.web.routes import internships

    monkeypatch.setattr(main, "SESSION_STORE", SessionStore())
    internships.set_stores(None, None)
    yield
    internships.set_stores(None, None)

