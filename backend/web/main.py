"Internship portal: course page service"
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
import logging
import os
import sys

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from backend.identity_access.domain import primary_role
from backend.identity_access.stores import SessionStore
from backend.identity_access.stores_firebase import FirebaseSessionStore
from backend.internship.config import PortalConfig, load_portal_config
from backend.internship.ports import CourseStoreUnavailable
from backend.internship.video import FRAME_ORIGINS
from backend.web import config as _cfg
from backend.web.components import CoursePage, EmptyState, Layout
from backend.web.routes.internships import close_stores, internships_router, load_course_page, resolve_viewer


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via PORTAL_ENABLE_DOTENV (default true outside
      pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("PORTAL_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("portal.web")
SESSION_COOKIE_NAME = "portal_session"


def _build_session_store(cfg: PortalConfig | None):
    """Firebase ID tokens when configured; in-memory sessions for dev and tests."""
    if cfg is not None and cfg.session_backend == "firebase" and cfg.firebase_project:
        return FirebaseSessionStore(cfg.firebase_project)
    return SessionStore()


def _load_config_or_none() -> PortalConfig | None:
    try:
        return load_portal_config()
    except ValueError as exc:
        logger.warning("Invalid portal config, using in-memory sessions: %s", exc)
        return None


SESSION_STORE = _build_session_store(_load_config_or_none())


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await close_stores()


app = FastAPI(title="Internship Portal", description="Internship course pages", version="0.1.0", lifespan=lifespan)

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

app.include_router(internships_router)


# --- Auth & Security Middleware -------------------------------------------------

def _is_public_path(path: str) -> bool:
    return path.startswith("/static/") or path in ("/health", "/favicon.ico")


def _login_url() -> str:
    try:
        return load_portal_config().login_url
    except ValueError as exc:
        logger.warning("Invalid portal config, using default login url: %s", exc)
        return "/"


@app.middleware("http")
async def auth_enforcement(request: Request, call_next):
    path = request.url.path
    if _is_public_path(path):
        return await call_next(request)

    sid = request.cookies.get(SESSION_COOKIE_NAME)
    rec = None
    if sid:
        try:
            rec = await run_in_threadpool(SESSION_STORE.get, sid)
        except Exception as exc:
            logger.warning("Session store get failed: %s", exc.__class__.__name__)

    if not rec:
        if path.startswith("/api/"):
            headers = {"Cache-Control": "private, no-store", "Vary": "Origin"}
            return JSONResponse({"error": "unauthenticated"}, status_code=401, headers=headers)
        return RedirectResponse(url=_login_url(), status_code=302)

    # Expose minimal, read-only user context for downstream handlers.
    request.state.user = {"sub": rec.sub, "name": rec.name, "role": primary_role(rec.roles), "roles": rec.roles}
    return await call_next(request)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    csp = (
        "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; font-src 'self' data:; connect-src 'self'; "
        f"frame-src {' '.join(FRAME_ORIGINS)};"
    )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


# --- Pages ----------------------------------------------------------------------

def _layout_response(
    request: Request,
    layout: Layout,
    *,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> HTMLResponse:
    """Render Layout and return an HTMLResponse.

    Behavior:
        - Personalized pages default to `Cache-Control: private, no-store`.
        - Merges caller-provided headers onto the response.
    """
    response = HTMLResponse(content=layout.render(), status_code=status_code)
    if getattr(request.state, "user", None) and not (headers and "Cache-Control" in headers):
        response.headers["Cache-Control"] = "private, no-store"
    if headers:
        for key, value in headers.items():
            response.headers[key] = value
    return response


def _internship_home(internship_id: str) -> str:
    return f"/internships/{internship_id}"


@app.get("/internships/{internship_id}/courses/{course_id}", response_class=HTMLResponse)
async def internship_course_page(request: Request, internship_id: str, course_id: str, play: str | None = None):
    """Render the internship course page for the signed-in viewer.

    Behavior:
        - 200 with chapters, unlocked media, progress tests and practice link
        - 404 "Course not found." with a single Go Back action
        - 503 when the course store is unavailable
        - `play=<chapter_id>:<video|recorded>` opens the inline player

    Permissions:
        Any authenticated user; chapter visibility follows the resolved access.
    """
    user = getattr(request.state, "user", None)
    headers = {"Cache-Control": "private, no-store"}
    home = _internship_home(internship_id)
    viewer = await resolve_viewer(request)
    if viewer is None:
        return RedirectResponse(url=_login_url(), status_code=302)

    try:
        view = await load_course_page(internship_id, course_id, viewer, play=play)
    except CourseStoreUnavailable:
        content = EmptyState(
            "Course is temporarily unavailable. Please try again later.",
            action_href=home,
        ).render()
        layout = Layout(title="Unavailable", content=content, user=user, current_path=request.url.path)
        return _layout_response(request, layout, status_code=503, headers=headers)

    if view is None:
        content = EmptyState("Course not found.", action_href=home).render()
        layout = Layout(title="Course not found", content=content, user=user, current_path=request.url.path)
        return _layout_response(request, layout, status_code=404, headers=headers)

    content = CoursePage(view, page_path=request.url.path, back_href=home).render()
    layout = Layout(title=view.course.title, content=content, user=user, current_path=request.url.path)
    return _layout_response(request, layout, headers=headers)


@app.get("/health")
async def health_check():
    # Minimal health endpoint used by orchestrators and tests.
    # Security: include no-store to avoid caching any runtime status.
    return JSONResponse({"status": "healthy"}, headers={"Cache-Control": "private, no-store"})
