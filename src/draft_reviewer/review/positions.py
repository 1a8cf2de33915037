"""
Position Resolver

Maps (file, line) review findings to diff positions using a PositionIndex.
"""

import logging
from typing import Iterable, List, Tuple

from ..models.pr_diff import PositionEntry, PositionIndex
from ..models.review import Comment, MappedComment, UnmappedComment


logger = logging.getLogger(__name__)


class PositionNotFound(Exception):
    """A finding cannot be anchored to the diff"""
    def __init__(self, message: str, path: str, line: int):
        super().__init__(message)
        self.path = path
        self.line = line


class FileNotInDiff(PositionNotFound):
    """The file is not touched by the diff at all"""
    def __init__(self, path: str, line: int):
        super().__init__(f"file not in diff: {path}", path, line)


class LineNotInDiff(PositionNotFound):
    """The file is in the diff but the line lies outside every hunk (or was deleted)"""
    def __init__(self, path: str, line: int):
        super().__init__(f"line not in diff: {path}:{line}", path, line)


class PositionResolver:
    """
    Answers "which coordinate do I use to comment on file X at line N?".
    """

    def __init__(self, index: PositionIndex):
        """
        Initialize position resolver.

        Args:
            index: Position index built from the review diff
        """
        self.index = index

    def resolve(self, path: str, line: int) -> PositionEntry:
        """
        Resolve a new-file line to its diff coordinate.

        Args:
            path: Post-change file path
            line: Line number in the new version of the file

        Returns:
            PositionEntry for the line

        Raises:
            FileNotInDiff: The file has no entries in the index
            LineNotInDiff: The file is indexed but the line is not
        """
        if path not in self.index:
            raise FileNotInDiff(path, line)

        entry = self.index.lines_for(path).get(line)
        if entry is None:
            raise LineNotInDiff(path, line)

        return entry

    def map_comments(self, comments: Iterable[Comment]) -> Tuple[List[MappedComment], List[UnmappedComment]]:
        """
        Resolve every comment, routing failures to the unmapped bucket.

        Args:
            comments: Suggested comments with file line numbers

        Returns:
            Tuple of (mapped, unmapped), each in input order
        """
        mapped = []
        unmapped = []

        for comment in comments:
            try:
                entry = self.resolve(comment.path, comment.line)
            except PositionNotFound as e:
                logger.debug(f"Unmappable comment at {comment.location}: {e}")
                unmapped.append(UnmappedComment(comment=comment, reason=e))
                continue

            mapped.append(MappedComment(comment=comment, entry=entry))

        if unmapped:
            logger.info(f"{len(unmapped)} of {len(mapped) + len(unmapped)} comments fall outside the diff")
        return mapped, unmapped


def resolve(index: PositionIndex, path: str, line: int) -> PositionEntry:
    """Resolve a single (path, line) against an index."""
    return PositionResolver(index).resolve(path, line)


def map_comments(index: PositionIndex, comments: Iterable[Comment]) -> Tuple[List[MappedComment], List[UnmappedComment]]:
    """Partition comments into mapped and unmapped against an index."""
    return PositionResolver(index).map_comments(comments)
