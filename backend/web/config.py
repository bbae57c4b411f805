"""
Configuration and startup security checks for the internship portal.

Why: Learner progress data lives in shared document stores; an accidental
deployment against the in-memory stores would silently show empty courses,
and in-memory sessions would reject every signed-in user.
This module provides a single guard that enforces minimal production safety
constraints without burdening local development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os

from backend.internship.config import load_portal_config


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure or unusable production configuration.

    Intent: Abort process startup when obviously broken settings are detected
    in production/staging. Development remains permissive for convenience.

    Checks:
    - Portal settings must parse (store backend, project ids, login URL).
    - INTERNSHIP_STORE_BACKEND must be "firestore" in prod-like envs.
    - FIRESTORE_PROJECT must be set in prod-like envs.
    - PORTAL_SESSIONS_BACKEND must be "firebase" in prod-like envs.
    """

    env = os.getenv("PORTAL_ENV", "dev")
    if not _is_prod_like(env):
        return  # dev/test remain permissive

    # 1) Settings must be valid at all
    try:
        cfg = load_portal_config()
    except ValueError as exc:
        raise SystemExit(f"Refusing to start: {exc}")

    # 2) In-memory stores are for development and tests only
    if cfg.store_backend != "firestore":
        raise SystemExit(
            "Refusing to start: INTERNSHIP_STORE_BACKEND=memory is not allowed in production/staging."
        )

    # 3) The primary project must be explicit; ambient credentials may point elsewhere
    if not cfg.firestore_project:
        raise SystemExit("Refusing to start: FIRESTORE_PROJECT is unset in production.")

    # 4) Sessions must be verifiable across instances; in-process sessions never are
    if cfg.session_backend != "firebase":
        raise SystemExit(
            "Refusing to start: PORTAL_SESSIONS_BACKEND=memory is not allowed in production/staging."
        )

