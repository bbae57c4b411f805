"""Use case layer for the internship course page.

Re-export the use cases for convenient imports in routes and tests.
"""

from .access import ResolveAccessInput, ResolveChapterAccessUseCase
from .course_page import (
    AggregateCoursePageUseCase,
    AggregateInput,
    CourseAggregate,
    OrderedChapter,
)

__all__ = [
    "ResolveAccessInput",
    "ResolveChapterAccessUseCase",
    "AggregateCoursePageUseCase",
    "AggregateInput",
    "CourseAggregate",
    "OrderedChapter",
]
