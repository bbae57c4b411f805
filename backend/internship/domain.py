"""
Domain types for the internship course page.

Why:
    Stored documents are loosely typed (fields may be missing, blank or of the
    wrong type). Parsing them once into explicit records keeps the use cases
    and the renderer free of dynamic property probing: an optional media field
    is either a non-empty string or None.

Behavior:
    Every `from_document` constructor is tolerant. Wrong types become
    "absent" instead of raising, so malformed data degrades the page rather
    than breaking it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from backend.identity_access.domain import is_staff_role, normalize_role


def _opt_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _opt_number(value: Any) -> Optional[float | int]:
    # bool is an int subclass but never a valid order/day/score.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _opt_label(value: Any) -> Optional[str]:
    """Display form of a stored scalar; whole floats drop their ".0"."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return _opt_str(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_timestamp(value: Any, *, now: Optional[datetime] = None) -> datetime:
    """Return a timezone-aware datetime for a stored timestamp.

    Firestore returns `DatetimeWithNanoseconds` (a datetime subclass). Naive
    datetimes are taken as UTC, ISO strings are parsed, anything else falls
    back to `now`.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return now or _utcnow()


@dataclass(frozen=True)
class Viewer:
    sub: str
    role: str = "student"

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", normalize_role(self.role))

    @property
    def is_staff(self) -> bool:
        return is_staff_role(self.role)


@dataclass(frozen=True)
class Course:
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    course_code: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Course":
        return cls(
            id=str(doc.get("id", "")),
            title=_opt_str(doc.get("title")),
            description=_opt_str(doc.get("description")),
            course_code=_opt_str(doc.get("courseCode")),
        )


# Stored document field -> ChapterMedia attribute
_MEDIA_FIELDS = {
    "video": "video",
    "pptUrl": "ppt_url",
    "pdfDocument": "pdf_document",
    "liveClassLink": "live_class_link",
    "recordedClassLink": "recorded_class_link",
    "classDocs": "class_docs",
    "referenceDocument": "reference_document",
}


@dataclass(frozen=True)
class ChapterMedia:
    """Optional media references of a chapter; None means "not offered"."""

    video: Optional[str] = None
    ppt_url: Optional[str] = None
    pdf_document: Optional[str] = None
    live_class_link: Optional[str] = None
    recorded_class_link: Optional[str] = None
    class_docs: Optional[str] = None
    reference_document: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "ChapterMedia":
        return cls(**{attr: _opt_str(doc.get(key)) for key, attr in _MEDIA_FIELDS.items()})


@dataclass(frozen=True)
class Chapter:
    id: str
    order: Optional[float | int] = None
    title: Optional[str] = None
    topics: Optional[str] = None
    media: ChapterMedia = field(default_factory=ChapterMedia)
    # stored order as shown on the badge, also when it is not numeric
    order_label: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Chapter":
        return cls(
            id=str(doc.get("id", "")),
            order=_opt_number(doc.get("order")),
            title=_opt_str(doc.get("title")),
            topics=_opt_str(doc.get("topics")),
            media=ChapterMedia.from_document(doc),
            order_label=_opt_label(doc.get("order")),
        )

    @property
    def display_order(self) -> Optional[str]:
        if self.order_label:
            return self.order_label
        return _opt_label(self.order)

    def resolved_order(self, position: int) -> float | int:
        """Explicit order when numeric, else 1-based position in the sorted list."""
        return self.order if self.order is not None else position + 1


@dataclass(frozen=True)
class ProgressTest:
    id: str
    title: Optional[str] = None
    name: Optional[str] = None
    day: Optional[float | int] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "ProgressTest":
        return cls(
            id=str(doc.get("id", "")),
            title=_opt_str(doc.get("title")),
            name=_opt_str(doc.get("name")),
            day=_opt_number(doc.get("day")),
        )


@dataclass(frozen=True)
class ResultSummary:
    pass_count: Any = None
    total_count: Any = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["ResultSummary"]:
        if not isinstance(value, Mapping):
            return None
        return cls(pass_count=value.get("passCount"), total_count=value.get("totalCount"))


RESULT_STATUSES = frozenset({"success", "partial", "fail"})


@dataclass(frozen=True)
class Submission:
    id: str
    submitted_at: datetime
    auto_score: Optional[float | int] = None
    result_status: str = "other"
    test_summary: Optional[ResultSummary] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any], *, now: Optional[datetime] = None) -> "Submission":
        status = doc.get("resultStatus")
        return cls(
            id=str(doc.get("id", "")),
            submitted_at=normalize_timestamp(doc.get("submittedAt"), now=now),
            auto_score=_opt_number(doc.get("autoScore")),
            result_status=status if isinstance(status, str) and status in RESULT_STATUSES else "other",
            test_summary=ResultSummary.from_value(doc.get("testSummary")),
        )


def read_chapter_access(profile: Optional[Mapping[str, Any]], course_id: str) -> list[str]:
    """Return the unlocked chapter ids stored on a student profile.

    Missing profile, missing mapping or a non-list entry all mean "nothing
    unlocked". Non-string ids are dropped and duplicates collapse while the
    stored order is kept.
    """
    if not isinstance(profile, Mapping):
        return []
    access = profile.get("chapterAccess")
    if not isinstance(access, Mapping):
        return []
    entry = access.get(course_id)
    if not isinstance(entry, list):
        return []
    return list(dict.fromkeys(item for item in entry if isinstance(item, str)))
