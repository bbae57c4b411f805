"""
View model for the internship course page.

Intent:
    Merge the course aggregate with the viewer's unlocked chapter ids into a
    render-ready structure shared by the JSON endpoint and the SSR page.

Security:
    Locked chapters carry no media and no tests. Their URLs are dropped here,
    before anything is serialised or rendered, so neither the JSON payload nor
    the HTML can leak them.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Optional

from backend.internship.domain import Chapter, Course, ProgressTest, Submission
from backend.internship.navigation import (
    assignment_target,
    document_viewer_target,
    make_course_slug,
    practice_target,
)
from backend.internship.usecases.course_page import CourseAggregate, OrderedChapter
from backend.internship.video import (
    PlayRef,
    VideoPlayerState,
    encode_play_param,
    is_frameable,
    parse_play_param,
)

LOCKED_NOTICE = "Locked - wait for your trainer to unlock this day."

STATUS_LABELS = {
    "success": "Completed",
    "partial": "Partial",
    "fail": "Failed",
}
DEFAULT_STATUS_LABEL = "Submitted"


def score_tier(score: float | int) -> str:
    if score >= 80:
        return "high"
    if score >= 50:
        return "medium"
    return "low"


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, DEFAULT_STATUS_LABEL)


@dataclass
class MediaAction:
    kind: str
    label: str
    href: Optional[str] = None
    # inline players only: play parameter after toggling ("" closes the player)
    play: Optional[str] = None
    active: bool = False
    external: bool = False

    @property
    def is_inline(self) -> bool:
        return self.play is not None


@dataclass
class SubmissionView:
    title: str
    status: str
    status_label: str
    submitted_on: str
    score_text: Optional[str] = None
    score_tier: Optional[str] = None
    summary_text: Optional[str] = None


@dataclass
class ProgressTestView:
    id: str
    label: str
    href: Optional[str] = None
    submission: Optional[SubmissionView] = None

    @property
    def submitted(self) -> bool:
        return self.submission is not None


@dataclass
class PlayerView:
    url: str
    title: str


@dataclass
class ChapterView:
    id: str
    title: str
    day_number: float | int
    unlocked: bool
    topics: Optional[str] = None
    order_badge: Optional[str] = None
    locked_notice: Optional[str] = None
    media: Optional[list[MediaAction]] = None
    tests: list[ProgressTestView] = field(default_factory=list)
    player: Optional[PlayerView] = None


@dataclass
class CourseHeaderView:
    id: str
    title: str
    description: Optional[str] = None
    course_code: Optional[str] = None


@dataclass
class CoursePageView:
    course: CourseHeaderView
    chapters: list[ChapterView]
    practice_href: Optional[str] = None
    play: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _format_number(value: float | int) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _base_title(chapter: Chapter, course: Course, fallback: str) -> str:
    return chapter.title or course.title or fallback


def _video_source(chapter: Chapter, kind: str) -> Optional[str]:
    if kind == "video":
        return chapter.media.video
    if kind == "recorded":
        return chapter.media.recorded_class_link
    return None


def _video_title(chapter: Chapter, course: Course, kind: str) -> str:
    if kind == "recorded":
        return f"{_base_title(chapter, course, 'Class')} - Recorded"
    return _base_title(chapter, course, "Topic Video")


def resolve_player(
    ref: Optional[PlayRef],
    aggregate: CourseAggregate,
    unlocked: set[str],
) -> tuple[VideoPlayerState, Optional[PlayRef]]:
    """Open the referenced video if it exists on an unlocked chapter."""
    if ref is None or ref.chapter_id not in unlocked:
        return VideoPlayerState(), None
    for oc in aggregate.chapters:
        if oc.chapter.id != ref.chapter_id:
            continue
        source = _video_source(oc.chapter, ref.kind)
        if not is_frameable(source):
            return VideoPlayerState(), None
        state = VideoPlayerState().toggle(oc.chapter.id, source, _video_title(oc.chapter, aggregate.course, ref.kind))
        return (state, ref) if state.is_open else (VideoPlayerState(), None)
    return VideoPlayerState(), None


def _inline_action(
    chapter: Chapter,
    course: Course,
    kind: str,
    label: str,
    state: VideoPlayerState,
    active_ref: Optional[PlayRef],
) -> MediaAction:
    source = _video_source(chapter, kind)
    if not is_frameable(source):
        # The CSP would block the iframe; link to the source instead.
        return MediaAction(kind=kind, label=label, href=source, external=True)
    following = state.toggle(chapter.id, source, _video_title(chapter, course, kind))
    play = encode_play_param(PlayRef(chapter.id, kind)) if following.is_open else ""
    active = active_ref is not None and active_ref == PlayRef(chapter.id, kind)
    return MediaAction(kind=kind, label=label, play=play, active=active)


def build_media_actions(
    chapter: Chapter,
    course: Course,
    state: VideoPlayerState,
    active_ref: Optional[PlayRef],
) -> list[MediaAction]:
    """Return the affordances for the media fields present on the chapter."""
    media = chapter.media
    actions: list[MediaAction] = []
    if media.video:
        actions.append(_inline_action(chapter, course, "video", "Topic Video", state, active_ref))
    if media.ppt_url:
        title = _base_title(chapter, course, "Presentation")
        actions.append(MediaAction(kind="ppt", label="View PPT", href=document_viewer_target("ppt", media.ppt_url, title)))
    if media.pdf_document:
        title = _base_title(chapter, course, "PDF Document")
        actions.append(MediaAction(kind="pdf", label="View PDF", href=document_viewer_target("pdf", media.pdf_document, title)))
    if media.live_class_link:
        actions.append(MediaAction(kind="live", label="Live Class", href=media.live_class_link, external=True))
    if media.recorded_class_link:
        actions.append(_inline_action(chapter, course, "recorded", "Recorded Class", state, active_ref))
    if media.class_docs:
        title = _base_title(chapter, course, "Class Docs")
        actions.append(MediaAction(kind="class_docs", label="Class Docs", href=document_viewer_target("ppt", media.class_docs, title)))
    if media.reference_document:
        title = f"{_base_title(chapter, course, 'Reference')} - Reference Document"
        actions.append(
            MediaAction(
                kind="reference",
                label="Reference Document",
                href=document_viewer_target("pdf", media.reference_document, title),
            )
        )
    return actions


def build_submission_view(test: ProgressTest, submission: Submission) -> SubmissionView:
    score = submission.auto_score
    summary = submission.test_summary
    return SubmissionView(
        title=test.title or test.name or "Progress Test",
        status=submission.result_status,
        status_label=status_label(submission.result_status),
        submitted_on=submission.submitted_at.date().isoformat(),
        score_text=f"{_format_number(score)}%" if score is not None else None,
        score_tier=score_tier(score) if score is not None else None,
        summary_text=(
            f"Tests: {summary.pass_count}/{summary.total_count} passed" if summary is not None else None
        ),
    )


def build_test_views(
    tests: Iterable[ProgressTest],
    day_number: float | int,
    slug: str,
    submissions: dict[str, Submission],
) -> list[ProgressTestView]:
    views: list[ProgressTestView] = []
    for test in tests:
        submission = submissions.get(test.id)
        views.append(
            ProgressTestView(
                id=test.id,
                label=test.title or test.name or f"Progress Test (Day {_format_number(day_number)})",
                href=assignment_target(slug, test.id),
                submission=build_submission_view(test, submission) if submission is not None else None,
            )
        )
    return views


def build_chapter_view(
    oc: OrderedChapter,
    aggregate: CourseAggregate,
    *,
    unlocked: bool,
    slug: str,
    state: VideoPlayerState,
    active_ref: Optional[PlayRef],
) -> ChapterView:
    chapter = oc.chapter
    view = ChapterView(
        id=chapter.id,
        title=chapter.title or "Untitled Chapter",
        day_number=oc.resolved_order,
        unlocked=unlocked,
        topics=chapter.topics,
        order_badge=f"#{chapter.display_order}" if chapter.display_order else None,
    )
    if not unlocked:
        view.locked_notice = LOCKED_NOTICE
        return view
    view.media = build_media_actions(chapter, aggregate.course, state, active_ref)
    view.tests = build_test_views(
        aggregate.tests_by_chapter.get(chapter.id, []),
        oc.resolved_order,
        slug,
        aggregate.submissions_by_test,
    )
    if state.is_playing(chapter.id):
        view.player = PlayerView(url=state.url, title=state.title)
    return view


def build_course_page(
    aggregate: CourseAggregate,
    unlocked: Iterable[str],
    *,
    play: Optional[str] = None,
) -> CoursePageView:
    """Build the page view model.

    Parameters:
        aggregate: Result of the course aggregation.
        unlocked: Chapter ids unlocked for the viewer.
        play: Optional `<chapter_id>:<video|recorded>` naming the open video.
    """
    unlocked_ids = set(unlocked)
    course = aggregate.course
    slug = make_course_slug(course.title)
    state, active_ref = resolve_player(parse_play_param(play), aggregate, unlocked_ids)
    chapters = [
        build_chapter_view(
            oc,
            aggregate,
            unlocked=oc.chapter.id in unlocked_ids,
            slug=slug,
            state=state,
            active_ref=active_ref,
        )
        for oc in aggregate.chapters
    ]
    return CoursePageView(
        course=CourseHeaderView(
            id=course.id,
            title=course.title or "Untitled Course",
            description=course.description,
            course_code=course.course_code,
        ),
        chapters=chapters,
        practice_href=practice_target(slug) if course.title else None,
        play=encode_play_param(active_ref),
    )
