# Portal component system
# Pure Python components for HTML generation

from .base import Component
from .layout import Layout
from .cards import ChapterCard, ProgressTestCard
from .course_page import CoursePage
from .states import EmptyState
from .video_player import VideoPlayer

__all__ = [
    "Component",
    "Layout",
    "ChapterCard",
    "ProgressTestCard",
    "CoursePage",
    "EmptyState",
    "VideoPlayer",
]
