from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Callable, Optional

from backend.internship.domain import Chapter, Course, ProgressTest, Submission, Viewer
from backend.internship.ports import (
    CourseStoreUnavailable,
    DeliveryStoreProtocol,
    PrimaryStoreProtocol,
)

LOG = logging.getLogger("portal.internship.course_page")


@dataclass(frozen=True)
class OrderedChapter:
    chapter: Chapter
    resolved_order: float | int


@dataclass
class CourseAggregate:
    course: Course
    chapters: list[OrderedChapter] = field(default_factory=list)
    tests: list[ProgressTest] = field(default_factory=list)
    tests_by_chapter: dict[str, list[ProgressTest]] = field(default_factory=dict)
    submissions_by_test: dict[str, Submission] = field(default_factory=dict)


@dataclass
class AggregateInput:
    internship_id: str
    course_id: str
    viewer: Optional[Viewer] = None


def resolve_chapter_orders(chapters: list[Chapter]) -> list[OrderedChapter]:
    """Attach the resolved order (explicit or 1-based position) to each chapter."""
    return [OrderedChapter(chapter=ch, resolved_order=ch.resolved_order(idx)) for idx, ch in enumerate(chapters)]


def associate_tests(chapters: list[OrderedChapter], tests: list[ProgressTest]) -> dict[str, list[ProgressTest]]:
    """Map chapter id -> tests whose `day` equals the chapter's resolved order.

    Tests without a numeric day or without a matching chapter are dropped.
    Every chapter id is present in the result, possibly with an empty list.
    """
    return {
        oc.chapter.id: [t for t in tests if t.day is not None and t.day == oc.resolved_order]
        for oc in chapters
    }


class AggregateCoursePageUseCase:
    def __init__(
        self,
        primary: PrimaryStoreProtocol,
        delivery: DeliveryStoreProtocol,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._primary = primary
        self._delivery = delivery
        self._clock = clock

    async def execute(self, req: AggregateInput) -> Optional[CourseAggregate]:
        """Collect course, chapters, progress tests and the viewer's submissions.

        Behavior:
            - Returns None when the course does not exist; nothing else is
              fetched in that case.
            - Chapters keep the store order (ascending `order`).
            - Progress tests come from the delivery store; a failure there is
              logged and leaves the page without tests.
            - With a known viewer, one submission per test is fetched
              concurrently; a failing lookup only drops that test's result.

        Raises:
            CourseStoreUnavailable: the course lookup itself failed.
        """
        try:
            course_doc = await self._primary.get_course(req.internship_id, req.course_id)
        except Exception as exc:
            LOG.error(
                "course lookup failed internship=%s course=%s error=%s",
                req.internship_id,
                req.course_id,
                exc.__class__.__name__,
            )
            raise CourseStoreUnavailable(req.course_id) from exc
        if course_doc is None:
            return None

        course = Course.from_document(course_doc)
        chapters = resolve_chapter_orders(await self._load_chapters(req))
        tests = await self._load_tests(req.course_id)
        submissions: dict[str, Submission] = {}
        if req.viewer is not None and tests:
            submissions = await self._load_submissions(req.course_id, tests, req.viewer.sub)

        return CourseAggregate(
            course=course,
            chapters=chapters,
            tests=tests,
            tests_by_chapter=associate_tests(chapters, tests),
            submissions_by_test=submissions,
        )

    async def _load_chapters(self, req: AggregateInput) -> list[Chapter]:
        try:
            docs = await self._primary.list_chapters(req.internship_id, req.course_id)
        except Exception as exc:
            LOG.warning(
                "chapter listing failed internship=%s course=%s error=%s",
                req.internship_id,
                req.course_id,
                exc.__class__.__name__,
            )
            return []
        return [Chapter.from_document(doc) for doc in docs]

    async def _load_tests(self, course_id: str) -> list[ProgressTest]:
        try:
            docs = await self._delivery.list_progress_tests(course_id)
        except Exception as exc:
            LOG.warning("progress tests unavailable course=%s error=%s", course_id, exc.__class__.__name__)
            return []
        return [ProgressTest.from_document(doc) for doc in docs]

    async def _load_submissions(self, course_id: str, tests: list[ProgressTest], student_id: str) -> dict[str, Submission]:
        now = self._clock() if self._clock else None

        async def _one(test: ProgressTest) -> tuple[str, Optional[Submission]]:
            try:
                doc = await self._delivery.find_submission(course_id, test.id, student_id)
            except Exception as exc:
                LOG.warning(
                    "submission lookup failed course=%s test=%s error=%s",
                    course_id,
                    test.id,
                    exc.__class__.__name__,
                )
                return test.id, None
            if doc is None:
                return test.id, None
            return test.id, Submission.from_document(doc, now=now)

        results = await asyncio.gather(*(_one(test) for test in tests))
        # First match per test wins; duplicate test ids keep the earliest result.
        submissions: dict[str, Submission] = {}
        for test_id, submission in results:
            if submission is not None and test_id not in submissions:
                submissions[test_id] = submission
        return submissions
