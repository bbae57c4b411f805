"""
Card components for the internship course page.
"""

from .chapter import ChapterCard
from .progress_test import ProgressTestCard

__all__ = ["ChapterCard", "ProgressTestCard"]
