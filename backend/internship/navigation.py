"""
Navigation targets for sibling pages owned by other services.

The course page never renders documents, assignments or practice sessions
itself. It only builds the URLs that hand over to:
    - the document viewers (`/view-ppt`, `/view-pdf-secure`)
    - the assignment attempt page (`/courses/{slug}/assignments/{test_id}`)
    - the full practice page (`/practice/{slug}`)

An empty course slug suppresses assignment and practice navigation.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Optional
from urllib.parse import quote, urlencode

_SLUG_RE = re.compile(r"[^a-z0-9]+")

PPT_VIEWER_PATH = "/view-ppt"
PDF_VIEWER_PATH = "/view-pdf-secure"

# viewer kind -> route
_VIEWERS = {
    "ppt": PPT_VIEWER_PATH,
    "pdf": PDF_VIEWER_PATH,
}


def make_course_slug(title: Optional[str]) -> str:
    """Build the URL slug of a course title (ASCII, lowercase, hyphenated)."""
    value = title or ""
    normalized = unicodedata.normalize("NFKD", value)
    ascii_value = normalized.encode("ascii", "ignore").decode("ascii").lower()
    return _SLUG_RE.sub("-", ascii_value).strip("-")


def document_viewer_target(kind: str, url: str, title: str) -> str:
    """Return the viewer route for a document URL with its display title."""
    path = _VIEWERS[kind]
    return f"{path}?{urlencode({'url': url, 'title': title}, quote_via=quote)}"


def assignment_target(slug: str, test_id: str) -> Optional[str]:
    if not slug:
        return None
    return f"/courses/{quote(slug, safe='')}/assignments/{quote(test_id, safe='')}"


def practice_target(slug: str) -> Optional[str]:
    if not slug:
        return None
    return f"/practice/{quote(slug, safe='')}"
