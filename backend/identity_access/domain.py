"""
Identity domain constants and simple helpers.

Why:
- Centralize allowed roles to avoid drift between the web layer and the
  internship use cases.
- Unknown or missing roles collapse to "student" (least privilege).
"""

from __future__ import annotations

from typing import Iterable

# Keep roles minimal and explicit. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({"student", "trainer", "admin", "superadmin"})

# Staff roles preview the student experience instead of owning access lists.
STAFF_ROLES = frozenset({"trainer", "admin", "superadmin"})

DEFAULT_ROLE = "student"


def normalize_role(value: object) -> str:
    """Return a recognised role name or the least-privileged default."""
    if not isinstance(value, str):
        return DEFAULT_ROLE
    role = value.strip().lower()
    return role if role in ALLOWED_ROLES else DEFAULT_ROLE


def is_staff_role(value: object) -> bool:
    return normalize_role(value) in STAFF_ROLES


def primary_role(roles: Iterable[object]) -> str:
    """Pick the most privileged recognised role from a session role list."""
    priority = ["superadmin", "admin", "trainer", "student"]
    lowered = [r.lower() for r in roles if isinstance(r, str)]
    for r in priority:
        if r in lowered:
            return r
    return DEFAULT_ROLE


__all__ = [
    "ALLOWED_ROLES",
    "STAFF_ROLES",
    "DEFAULT_ROLE",
    "normalize_role",
    "is_staff_role",
    "primary_role",
]
