"""
Completion rules shared by chapter, subject and tracker rollups
"""
import logging
from typing import Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CompletionService:
    """
    Percentages and the "where am I" pointer over ordered chapters

    Every percentage in the API goes through ``percent`` so an empty
    denominator yields 0 everywhere instead of NaN/Infinity.
    """

    PRECISION = 2

    def percent(self, part: int, whole: int) -> float:
        """
        100 * part / whole, rounded

        Args:
            part: Completed items
            whole: Total items

        Returns:
            Percentage in [0, 100]; 0.0 when whole is 0
        """
        if not whole:
            return 0.0

        value = 100.0 * part / whole
        return round(min(max(value, 0.0), 100.0), self.PRECISION)

    def current_chapter(
        self,
        chapters: Sequence[T],
        is_done=lambda chapter: chapter.done
    ) -> Tuple[Optional[T], Optional[T]]:
        """
        Locate the previous (last completed) and current chapter

        Args:
            chapters: Chapters already sorted by seq_number
            is_done: Completion predicate

        Returns:
            Tuple of (prev_chapter, curr_chapter)
            - prev: last completed chapter in order, or None
            - curr: the chapter right after prev; the first chapter when
              nothing is completed; the last one when prev is the last
        """
        if not chapters:
            return None, None

        prev_index = None
        for index, chapter in enumerate(chapters):
            if is_done(chapter):
                prev_index = index

        if prev_index is None:
            return None, chapters[0]

        curr_index = min(prev_index + 1, len(chapters) - 1)
        return chapters[prev_index], chapters[curr_index]


# Global instance
completion_service = CompletionService()
