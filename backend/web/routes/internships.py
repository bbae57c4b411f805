"""Internship course page API routes."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from backend.identity_access.domain import normalize_role
from backend.internship.config import PortalConfig, load_portal_config
from backend.internship.domain import Viewer
from backend.internship.ports import (
    CourseStoreUnavailable,
    DeliveryStoreProtocol,
    PrimaryStoreProtocol,
)
from backend.internship.presentation import CoursePageView, build_course_page
from backend.internship.usecases import (
    AggregateCoursePageUseCase,
    AggregateInput,
    ResolveAccessInput,
    ResolveChapterAccessUseCase,
)

internships_router = APIRouter(tags=["Internships"])

logger = logging.getLogger("portal.internship.routes")


# Stores are built lazily so .env and pytest environments are in place before
# any adapter reads its settings. Tests install in-memory stores via set_stores().
_PRIMARY: PrimaryStoreProtocol | None = None
_DELIVERY: DeliveryStoreProtocol | None = None


def _build_stores(cfg: PortalConfig) -> tuple[PrimaryStoreProtocol, DeliveryStoreProtocol]:
    if cfg.store_backend == "firestore":
        from backend.internship.repo_firestore import FirestoreDeliveryStore, FirestorePrimaryStore

        primary = FirestorePrimaryStore(project=cfg.firestore_project, database=cfg.firestore_database)
        delivery = FirestoreDeliveryStore(project=cfg.delivery_project, database=cfg.delivery_database)
        return primary, delivery
    from backend.internship.repo_memory import InMemoryDeliveryStore, InMemoryPrimaryStore

    return InMemoryPrimaryStore(), InMemoryDeliveryStore()


def get_stores() -> tuple[PrimaryStoreProtocol, DeliveryStoreProtocol]:
    global _PRIMARY, _DELIVERY
    if _PRIMARY is None or _DELIVERY is None:
        primary, delivery = _build_stores(load_portal_config())
        _PRIMARY = _PRIMARY or primary
        _DELIVERY = _DELIVERY or delivery
    return _PRIMARY, _DELIVERY


def set_stores(
    primary: PrimaryStoreProtocol | None,
    delivery: DeliveryStoreProtocol | None,
) -> None:
    """Allow tests or startup code to provide concrete stores (None resets)."""
    global _PRIMARY, _DELIVERY
    _PRIMARY = primary
    _DELIVERY = delivery


async def close_stores() -> None:
    """Release store clients on shutdown (adapters without `close` are skipped)."""
    for store in (_PRIMARY, _DELIVERY):
        close = getattr(store, "close", None)
        if close is None:
            continue
        try:
            await close()
        except Exception as exc:
            logger.warning("store close failed error=%s", exc.__class__.__name__)


def _private_headers() -> dict[str, str]:
    return {"Cache-Control": "private, no-store", "Vary": "Origin"}


async def resolve_viewer(request: Request) -> Optional[Viewer]:
    """Build the viewer from the session, with the role read from the user document.

    The session only proves identity. A missing, unrecognised or unreadable
    user document means "student" (least privilege).
    """
    user = getattr(request.state, "user", None) or {}
    sub = str(user.get("sub") or "").strip()
    if not sub:
        return None
    primary, _ = get_stores()
    try:
        stored = await primary.get_user_role(sub)
    except Exception as exc:
        logger.warning("user role lookup failed error=%s", exc.__class__.__name__)
        stored = None
    return Viewer(sub=sub, role=normalize_role(stored))


async def load_course_page(
    internship_id: str,
    course_id: str,
    viewer: Viewer,
    *,
    play: str | None = None,
) -> Optional[CoursePageView]:
    """Resolve access and aggregate the course concurrently, then build the view.

    Returns None when the course does not exist. Raises CourseStoreUnavailable
    when the course lookup fails.
    """
    primary, delivery = get_stores()
    unlocked, aggregate = await asyncio.gather(
        ResolveChapterAccessUseCase(primary).execute(
            ResolveAccessInput(viewer=viewer, internship_id=internship_id, course_id=course_id)
        ),
        AggregateCoursePageUseCase(primary, delivery).execute(
            AggregateInput(internship_id=internship_id, course_id=course_id, viewer=viewer)
        ),
    )
    if aggregate is None:
        return None
    return build_course_page(aggregate, unlocked, play=play)


@internships_router.get("/api/internships/{internship_id}/courses/{course_id}")
async def get_course_page(request: Request, internship_id: str, course_id: str, play: str | None = None):
    """Course page view model for the current viewer.

    Behavior:
        - 200 with the page view model (locked chapters carry no media or tests)
        - 404 when the course does not exist
        - 503 when the course store is unavailable

    Permissions:
        Any authenticated user. Students see their own unlocks; trainers and
        admins see the unlocks of the first enrolled student.
    """
    viewer = await resolve_viewer(request)
    if viewer is None:
        return JSONResponse({"error": "unauthenticated"}, status_code=401, headers=_private_headers())
    try:
        view = await load_course_page(internship_id, course_id, viewer, play=play)
    except CourseStoreUnavailable:
        return JSONResponse({"error": "unavailable"}, status_code=503, headers=_private_headers())
    if view is None:
        return JSONResponse({"error": "not_found"}, status_code=404, headers=_private_headers())
    return JSONResponse(view.to_dict(), headers=_private_headers())
