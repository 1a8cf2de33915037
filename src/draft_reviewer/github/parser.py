"""
Unified Diff Parser

Parses unified diff text into a structured DiffDocument and builds the
position index used to anchor review comments to diff lines.
"""

import re
import logging
from typing import Dict, List, Optional, Tuple

from ..models.pr_diff import (
    DiffDocument,
    DiffLine,
    FileDiff,
    Hunk,
    LineKind,
    PositionEntry,
    PositionIndex,
)


logger = logging.getLogger(__name__)


class _HunkState:
    """Mutable walker state for the hunk currently being read."""

    def __init__(self, old_start: int, old_lines: int, new_start: int, new_lines: int, header_position: int):
        self.old_start = old_start
        self.old_lines = old_lines
        self.new_start = new_start
        self.new_lines = new_lines
        self.header_position = header_position
        self.old_line = old_start
        self.new_line = new_start
        self.old_remaining = old_lines
        self.new_remaining = new_lines
        self.lines: List[DiffLine] = []

    @property
    def is_open(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0

    def freeze(self) -> Hunk:
        return Hunk(
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
            header_position=self.header_position,
            lines=tuple(self.lines),
        )


class _FileState:
    """Mutable walker state for the file currently being read."""

    def __init__(self, path: str, old_path: Optional[str]):
        self.path = path
        self.old_path = old_path
        self.position = 0
        self.hunks: List[Hunk] = []

    def freeze(self) -> FileDiff:
        return FileDiff(path=self.path, old_path=self.old_path, hunks=tuple(self.hunks))


class UnifiedDiffParser:
    """
    Single-pass parser for `git diff` style unified diffs.

    Walks the diff line by line keeping only the current file and the
    current hunk as state. Positions follow the platform's legacy scheme:
    the counter resets to 0 per file and every hunk header, the first one
    included, takes the next position just like a diff line does.
    """

    def __init__(self):
        """Initialize unified diff parser."""
        self.file_header_prefix = 'diff --git '
        self.diff_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.binary_file_pattern = re.compile(r'^Binary files? .* differ')
        # git format-patch signature separator
        self.signature_separator = '-- '

    def parse(self, diff_text: str) -> DiffDocument:
        """
        Parse unified diff text into a DiffDocument.

        Args:
            diff_text: Raw unified diff

        Returns:
            Immutable DiffDocument, one FileDiff per `diff --git` header
        """
        files: List[FileDiff] = []
        current_file: Optional[_FileState] = None
        current_hunk: Optional[_HunkState] = None

        for line in (diff_text or '').splitlines():
            if line.startswith(self.file_header_prefix):
                if current_file:
                    self._close_hunk(current_file, current_hunk)
                    files.append(current_file.freeze())
                current_hunk = None

                old_path, new_path = self._parse_file_header(line[len(self.file_header_prefix):])
                current_file = _FileState(path=new_path, old_path=old_path)
                logger.debug(f"Parsing file diff: {new_path}")
                continue

            # Lines before the first file header carry no addressable content
            if current_file is None:
                continue

            header_match = self.diff_header_pattern.match(line)
            if header_match:
                self._close_hunk(current_file, current_hunk)
                current_hunk = self._open_hunk(current_file, header_match)
                continue

            if current_hunk is not None:
                if current_hunk.is_open:
                    self._read_hunk_line(current_file, current_hunk, line)
                    continue
                if line[:1] in (' ', '+', '-') and not self._is_trailer(line):
                    logger.debug(f"Line beyond declared hunk size in {current_file.path}")
                    self._read_hunk_line(current_file, current_hunk, line)
                    continue

            self._read_file_metadata(current_file, line)

        if current_file:
            self._close_hunk(current_file, current_hunk)
            files.append(current_file.freeze())

        document = DiffDocument(files=tuple(files))
        total_hunks = sum(len(f.hunks) for f in document)
        logger.info(f"Parsed diff: {len(document)} files, {total_hunks} hunks")
        return document

    def build_index(self, document: DiffDocument) -> PositionIndex:
        """
        Build the `path -> new line -> PositionEntry` lookup table.

        Only lines present in the new version of a file (context and added
        lines) receive an entry. Files without hunks are left out entirely.

        Args:
            document: Parsed DiffDocument

        Returns:
            Read-only PositionIndex
        """
        entries: Dict[str, Dict[int, PositionEntry]] = {}

        for file_diff in document:
            if file_diff.is_binary_or_rename_only:
                logger.debug(f"No hunks for {file_diff.path}, leaving it out of the index")
                continue

            file_entries = entries.setdefault(file_diff.path, {})
            for hunk in file_diff.hunks:
                for diff_line in hunk.lines:
                    if diff_line.kind == LineKind.REMOVED:
                        continue
                    file_entries[diff_line.new_line] = PositionEntry(
                        position=diff_line.position,
                        line=diff_line.new_line,
                    )

        logger.debug(f"Built position index for {len(entries)} files")
        return PositionIndex.from_dict(entries)

    def index(self, diff_text: str) -> PositionIndex:
        """Parse diff text and build its position index in one call."""
        return self.build_index(self.parse(diff_text))

    def _parse_file_header(self, rest: str) -> Tuple[Optional[str], str]:
        """
        Split the `a/<old> b/<new>` part of a `diff --git` header.

        Args:
            rest: Header text after `diff --git `

        Returns:
            Tuple of (old_path, new_path)
        """
        # Unchanged path: "a/P b/P", which splits unambiguously even if P contains " b/"
        if rest.startswith('a/') and (len(rest) - 5) % 2 == 0:
            half = (len(rest) - 5) // 2
            candidate = rest[2:2 + half]
            if rest == f"a/{candidate} b/{candidate}":
                return candidate, candidate

        idx = rest.find(' b/')
        if idx == -1:
            return None, rest

        old_path = rest[:idx]
        if old_path.startswith('a/'):
            old_path = old_path[2:]
        return old_path, rest[idx + 3:]

    def _open_hunk(self, file_state: _FileState, header_match: re.Match) -> _HunkState:
        file_state.position += 1

        old_start = int(header_match.group(1))
        old_lines = int(header_match.group(2) or 1)
        new_start = int(header_match.group(3))
        new_lines = int(header_match.group(4) or 1)

        return _HunkState(
            old_start=old_start,
            old_lines=old_lines,
            new_start=new_start,
            new_lines=new_lines,
            header_position=file_state.position,
        )

    def _close_hunk(self, file_state: _FileState, hunk_state: Optional[_HunkState]) -> None:
        if hunk_state is None:
            return
        if hunk_state.is_open:
            logger.debug(
                f"Hunk at {file_state.path}:{hunk_state.new_start} ended early "
                f"(-{hunk_state.old_remaining}/+{hunk_state.new_remaining} lines missing)"
            )
        file_state.hunks.append(hunk_state.freeze())

    def _read_hunk_line(self, file_state: _FileState, hunk: _HunkState, line: str) -> None:
        if line.startswith('\\'):
            # "\ No newline at end of file"
            return

        prefix = line[:1]

        # Editors that strip trailing whitespace turn empty context lines into ""
        if prefix == ' ' or line == '':
            file_state.position += 1
            hunk.lines.append(DiffLine(
                kind=LineKind.CONTEXT,
                content=line[1:],
                position=file_state.position,
                old_line=hunk.old_line,
                new_line=hunk.new_line,
            ))
            hunk.old_line += 1
            hunk.new_line += 1
            hunk.old_remaining -= 1
            hunk.new_remaining -= 1

        elif prefix == '+':
            file_state.position += 1
            hunk.lines.append(DiffLine(
                kind=LineKind.ADDED,
                content=line[1:],
                position=file_state.position,
                old_line=None,
                new_line=hunk.new_line,
            ))
            hunk.new_line += 1
            hunk.new_remaining -= 1

        elif prefix == '-':
            file_state.position += 1
            hunk.lines.append(DiffLine(
                kind=LineKind.REMOVED,
                content=line[1:],
                position=file_state.position,
                old_line=hunk.old_line,
                new_line=None,
            ))
            hunk.old_line += 1
            hunk.old_remaining -= 1

        else:
            logger.debug(f"Ignoring unexpected hunk line in {file_state.path}: {line[:40]!r}")

    def _is_trailer(self, line: str) -> bool:
        """File markers and the patch signature never continue a finished hunk."""
        return line.startswith('--- ') or line.startswith('+++ ') or line == self.signature_separator

    def _read_file_metadata(self, file_state: _FileState, line: str) -> None:
        """Handle the extended header lines between a file header and its first hunk."""
        if line.startswith('+++ '):
            target = line[4:].rstrip('\t')
            if target.startswith('b/'):
                file_state.path = target[2:]
        elif line.startswith('--- '):
            source = line[4:].rstrip('\t')
            if source.startswith('a/'):
                file_state.old_path = source[2:]
        elif self.binary_file_pattern.match(line):
            logger.debug(f"Binary file diff: {file_state.path}")
