"""
Course page view model: gating, media affordances, results and player.

The view model is the single choke point for locked content: whatever it
drops can never reach the JSON payload or the HTML.
"""
from __future__ import annotations

from datetime import datetime, timezone
import json

import pytest

from backend.internship.domain import Chapter, ChapterMedia, Course, ProgressTest, ResultSummary, Submission
from backend.internship.presentation import (
    LOCKED_NOTICE,
    build_course_page,
    score_tier,
    status_label,
)
from backend.internship.usecases.course_page import CourseAggregate, associate_tests, resolve_chapter_orders

SECRET_VIDEO = "https://youtu.be/SECRETvid01"
SECRET_PDF = "https://files.example/secret-day2.pdf"


def _aggregate(*, course_title: str | None = "Python Basics", submissions: dict | None = None) -> CourseAggregate:
    chapters = resolve_chapter_orders(
        [
            Chapter(
                id="ch1",
                order=1,
                title="Variables",
                topics="names, types",
                media=ChapterMedia(
                    video="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
                    ppt_url="https://files.example/day1.pptx",
                    pdf_document="https://files.example/day1.pdf",
                    live_class_link="https://meet.example/abc",
                    recorded_class_link="https://drive.google.com/file/d/REC1/view",
                    class_docs="https://files.example/docs1.pptx",
                    reference_document="https://files.example/ref1.pdf",
                ),
            ),
            Chapter(
                id="ch2",
                order=2,
                title="Loops",
                topics="for, while",
                media=ChapterMedia(video=SECRET_VIDEO, pdf_document=SECRET_PDF),
            ),
        ]
    )
    tests = [ProgressTest(id="t1", title="Day 1 Quiz", day=1), ProgressTest(id="t2", day=2)]
    return CourseAggregate(
        course=Course(id="c1", title=course_title, description="Intro", course_code="PY101"),
        chapters=chapters,
        tests=tests,
        tests_by_chapter=associate_tests(chapters, tests),
        submissions_by_test=submissions or {},
    )


def test_locked_chapter_carries_no_media_or_tests():
    page = build_course_page(_aggregate(), ["ch1"])
    locked = page.chapters[1]

    assert locked.id == "ch2"
    assert locked.unlocked is False
    assert locked.title == "Loops"
    assert locked.topics == "for, while"
    assert locked.locked_notice == LOCKED_NOTICE
    assert locked.media is None
    assert locked.tests == []
    assert locked.player is None
    payload = json.dumps(page.to_dict())
    assert SECRET_VIDEO not in payload
    assert SECRET_PDF not in payload
    assert "t2" not in [t["id"] for ch in page.to_dict()["chapters"] for t in ch["tests"]]


def test_nothing_unlocked_means_every_chapter_locked():
    page = build_course_page(_aggregate(), [])
    assert all(not ch.unlocked for ch in page.chapters)
    assert all(ch.media is None for ch in page.chapters)


def test_unknown_unlocked_ids_are_ignored():
    page = build_course_page(_aggregate(), ["ch-deleted"])
    assert [ch.unlocked for ch in page.chapters] == [False, False]


def test_media_actions_follow_fixed_order_and_targets():
    page = build_course_page(_aggregate(), ["ch1"])
    media = page.chapters[0].media
    assert [m.kind for m in media] == ["video", "ppt", "pdf", "live", "recorded", "class_docs", "reference"]

    by_kind = {m.kind: m for m in media}
    assert by_kind["video"].is_inline and by_kind["video"].play == "ch1:video"
    assert by_kind["recorded"].play == "ch1:recorded"
    assert by_kind["ppt"].href.startswith("/view-ppt?")
    assert by_kind["pdf"].href.startswith("/view-pdf-secure?")
    assert by_kind["class_docs"].href.startswith("/view-ppt?")
    assert by_kind["reference"].href.startswith("/view-pdf-secure?")
    assert "Reference%20Document" in by_kind["reference"].href
    assert by_kind["live"].href == "https://meet.example/abc"
    assert by_kind["live"].external


def test_unlocked_chapter_without_media_has_no_actions():
    agg = _aggregate()
    agg.chapters[1] = resolve_chapter_orders([Chapter(id="ch2", order=2, title="Loops")])[0]
    page = build_course_page(agg, ["ch2"])
    assert page.chapters[1].media == []


def test_play_param_opens_player_and_link_closes_it():
    page = build_course_page(_aggregate(), ["ch1"], play="ch1:video")
    chapter = page.chapters[0]

    assert page.play == "ch1:video"
    assert chapter.player is not None
    assert chapter.player.url == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert chapter.player.title == "Variables"
    video = next(m for m in chapter.media if m.kind == "video")
    recorded = next(m for m in chapter.media if m.kind == "recorded")
    assert video.active and video.play == ""
    assert not recorded.active and recorded.play == "ch1:recorded"


def test_recorded_player_title_and_embed():
    page = build_course_page(_aggregate(), ["ch1"], play="ch1:recorded")
    player = page.chapters[0].player
    assert player.title == "Variables - Recorded"
    assert player.url == "https://drive.google.com/file/d/REC1/preview"


def test_play_param_for_locked_chapter_is_ignored():
    page = build_course_page(_aggregate(), ["ch1"], play="ch2:video")
    assert page.play is None
    assert all(ch.player is None for ch in page.chapters)


def test_tests_labels_and_links():
    page = build_course_page(_aggregate(), ["ch1", "ch2"])
    t1 = page.chapters[0].tests[0]
    t2 = page.chapters[1].tests[0]
    assert t1.label == "Day 1 Quiz"
    assert t1.href == "/courses/python-basics/assignments/t1"
    assert t2.label == "Progress Test (Day 2)"
    assert not t1.submitted
    assert page.practice_href == "/practice/python-basics"


def test_submission_result_view():
    sub = Submission(
        id="s1",
        submitted_at=datetime(2025, 2, 10, 8, 30, tzinfo=timezone.utc),
        auto_score=45.0,
        result_status="fail",
        test_summary=ResultSummary(pass_count=2, total_count=5),
    )
    page = build_course_page(_aggregate(submissions={"t1": sub}), ["ch1"])
    view = page.chapters[0].tests[0]

    assert view.submitted
    result = view.submission
    assert result.title == "Day 1 Quiz"
    assert result.score_text == "45%"
    assert result.score_tier == "low"
    assert result.status_label == "Failed"
    assert result.summary_text == "Tests: 2/5 passed"
    assert result.submitted_on == "2025-02-10"


def test_submission_without_score_or_summary():
    sub = Submission(id="s1", submitted_at=datetime(2025, 2, 10, tzinfo=timezone.utc))
    page = build_course_page(_aggregate(submissions={"t1": sub}), ["ch1"])
    result = page.chapters[0].tests[0].submission
    assert result.score_text is None
    assert result.score_tier is None
    assert result.summary_text is None
    assert result.status_label == "Submitted"


@pytest.mark.parametrize(
    "score, tier",
    [(100, "high"), (80, "high"), (79.9, "medium"), (50, "medium"), (49.99, "low"), (0, "low")],
)
def test_score_tier_thresholds(score, tier):
    assert score_tier(score) == tier


def test_status_labels():
    assert status_label("success") == "Completed"
    assert status_label("partial") == "Partial"
    assert status_label("fail") == "Failed"
    assert status_label("other") == "Submitted"


def test_course_without_title_gets_placeholder_and_no_slug_links():
    page = build_course_page(_aggregate(course_title=None), ["ch1"])
    assert page.course.title == "Untitled Course"
    assert page.practice_href is None
    assert page.chapters[0].tests[0].href is None


def test_untitled_chapter_and_order_badge():
    agg = _aggregate()
    agg.chapters.append(resolve_chapter_orders([Chapter(id="a"), Chapter(id="ch3")])[1])
    page = build_course_page(agg, [])
    assert page.chapters[0].order_badge == "#1"
    untitled = page.chapters[2]
    assert untitled.title == "Untitled Chapter"
    assert untitled.order_badge is None
    assert untitled.day_number == 2


def test_video_host_outside_frame_origins_opens_in_new_tab():
    agg = _aggregate()
    agg.chapters[0] = resolve_chapter_orders(
        [Chapter(id="ch1", order=1, title="Variables", media=ChapterMedia(video="https://vimeo.com/12345"))]
    )[0]
    page = build_course_page(agg, ["ch1"], play="ch1:video")
    chapter = page.chapters[0]

    video = chapter.media[0]
    assert not video.is_inline
    assert video.external
    assert video.href == "https://vimeo.com/12345"
    # No iframe the CSP would block
    assert chapter.player is None
    assert page.play is None


def test_non_numeric_stored_order_keeps_its_badge():
    chapters = resolve_chapter_orders([Chapter.from_document({"id": "ch1", "order": "3", "title": "Loops"})])
    agg = CourseAggregate(
        course=Course(id="c1", title="Python Basics"),
        chapters=chapters,
        tests=[],
        tests_by_chapter={},
        submissions_by_test={},
    )
    view = build_course_page(agg, []).chapters[0]
    assert view.order_badge == "#3"
    # Positional fallback still drives the day number
    assert view.day_number == 1
