"""
Store configuration for the internship course page.

Intent:
    Provide a single place to read environment variables that control which
    document store adapters are wired (memory or Firestore) and where the
    primary and delivery stores live.

Why:
    The delivery namespace may live in a different Firestore project than the
    authoring data. Keeping both locations in one validated object avoids
    drift between the web layer and the adapters.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
import re


@dataclass(frozen=True)
class PortalConfig:
    environment: str
    store_backend: str  # "memory" | "firestore"
    firestore_project: str | None
    firestore_database: str | None
    delivery_project: str | None
    delivery_database: str | None
    login_url: str
    session_backend: str = "memory"  # "memory" | "firebase"
    firebase_project: str | None = None


_ALLOWED_BACKENDS = {"memory", "firestore"}
_ALLOWED_SESSION_BACKENDS = {"memory", "firebase"}
_PROJECT_RE = re.compile(r"^[a-z][a-z0-9-]{4,28}[a-z0-9]$")


def _opt_env(name: str) -> str | None:
    raw = (os.getenv(name) or "").strip()
    return raw or None


def _validate_project(name: str, value: str | None) -> None:
    if value is None:
        return
    if not _PROJECT_RE.match(value):
        raise ValueError(f"{name} must be a valid Google Cloud project id, got: {value!r}")


def _validate_login_url(value: str) -> None:
    if value.startswith("/") and not value.startswith("//"):
        return
    if value.startswith("https://"):
        return
    raise ValueError("PORTAL_LOGIN_URL must be a same-origin path or an https:// URL")


def load_portal_config() -> PortalConfig:
    """Read and validate portal settings from the environment.

    Behavior:
        - INTERNSHIP_STORE_BACKEND defaults to "memory" (dev/tests).
        - FIRESTORE_DELIVERY_* default to the primary FIRESTORE_* values.
        - PORTAL_SESSIONS_BACKEND defaults to "memory"; "firebase" verifies
          Firebase ID tokens for FIREBASE_PROJECT (default: FIRESTORE_PROJECT).
        - Raises ValueError naming the offending variable on invalid input.
    """
    environment = (os.getenv("PORTAL_ENV") or "dev").strip().lower() or "dev"
    backend = (os.getenv("INTERNSHIP_STORE_BACKEND") or "memory").strip().lower()
    if backend not in _ALLOWED_BACKENDS:
        raise ValueError(f"INTERNSHIP_STORE_BACKEND must be one of {sorted(_ALLOWED_BACKENDS)}, got: {backend!r}")

    project = _opt_env("FIRESTORE_PROJECT")
    database = _opt_env("FIRESTORE_DATABASE")
    delivery_project = _opt_env("FIRESTORE_DELIVERY_PROJECT") or project
    delivery_database = _opt_env("FIRESTORE_DELIVERY_DATABASE") or database
    _validate_project("FIRESTORE_PROJECT", project)
    _validate_project("FIRESTORE_DELIVERY_PROJECT", delivery_project)

    login_url = _opt_env("PORTAL_LOGIN_URL") or "/"
    _validate_login_url(login_url)

    session_backend = (os.getenv("PORTAL_SESSIONS_BACKEND") or "memory").strip().lower()
    if session_backend not in _ALLOWED_SESSION_BACKENDS:
        raise ValueError(
            f"PORTAL_SESSIONS_BACKEND must be one of {sorted(_ALLOWED_SESSION_BACKENDS)}, got: {session_backend!r}"
        )
    firebase_project = _opt_env("FIREBASE_PROJECT") or project
    _validate_project("FIREBASE_PROJECT", firebase_project)
    if session_backend == "firebase" and not firebase_project:
        raise ValueError("PORTAL_SESSIONS_BACKEND=firebase requires FIREBASE_PROJECT or FIRESTORE_PROJECT")

    return PortalConfig(
        environment=environment,
        store_backend=backend,
        firestore_project=project,
        firestore_database=database,
        delivery_project=delivery_project,
        delivery_database=delivery_database,
        login_url=login_url,
        session_backend=session_backend,
        firebase_project=firebase_project,
    )
