"""
PR Diff Data Models

unified diff 파싱 결과와 코멘트 위치 인덱스 데이터 모델들
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple


class LineKind(Enum):
    """diff 라인 종류"""
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


class Side(Enum):
    """diff 라인이 속한 버전 (LEFT: 변경 전, RIGHT: 변경 후)"""
    LEFT = "LEFT"
    RIGHT = "RIGHT"


@dataclass(frozen=True)
class DiffLine:
    """hunk 안의 개별 라인"""
    kind: LineKind
    content: str
    position: int
    old_line: Optional[int]
    new_line: Optional[int]

    def __post_init__(self):
        """데이터 검증"""
        if self.position < 1:
            raise ValueError("Position must be positive")
        if self.kind == LineKind.REMOVED and self.new_line is not None:
            raise ValueError("Removed lines have no new line number")
        if self.kind == LineKind.ADDED and self.old_line is not None:
            raise ValueError("Added lines have no old line number")


@dataclass(frozen=True)
class Hunk:
    """`@@ ... @@` 헤더로 시작하는 diff 블록"""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header_position: int
    lines: Tuple[DiffLine, ...] = ()

    def __post_init__(self):
        """데이터 검증"""
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_lines < 0 or self.new_lines < 0:
            raise ValueError("Line counts must be non-negative")

    @property
    def added_lines(self) -> Tuple[DiffLine, ...]:
        return tuple(line for line in self.lines if line.kind == LineKind.ADDED)

    @property
    def removed_lines(self) -> Tuple[DiffLine, ...]:
        return tuple(line for line in self.lines if line.kind == LineKind.REMOVED)


@dataclass(frozen=True)
class FileDiff:
    """파일 하나의 변경사항"""
    path: str
    old_path: Optional[str] = None
    hunks: Tuple[Hunk, ...] = ()

    @property
    def is_binary_or_rename_only(self) -> bool:
        """hunk가 없는 파일 (바이너리, 이름 변경만 있는 경우 등)"""
        return not self.hunks


@dataclass(frozen=True)
class DiffDocument:
    """파싱된 unified diff 전체"""
    files: Tuple[FileDiff, ...] = ()

    def __iter__(self) -> Iterator[FileDiff]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def get_file(self, path: str) -> Optional[FileDiff]:
        """경로로 파일 변경사항 조회"""
        for file_diff in self.files:
            if file_diff.path == path:
                return file_diff
        return None


@dataclass(frozen=True)
class PositionEntry:
    """리뷰 코멘트를 붙일 수 있는 플랫폼 좌표"""
    position: int
    line: int
    side: Side = Side.RIGHT

    def __post_init__(self):
        """데이터 검증"""
        if self.position < 1:
            raise ValueError("Position must be positive")
        if self.line < 1:
            raise ValueError("Line number must be positive")


@dataclass(frozen=True)
class PositionIndex:
    """
    `path -> (new line -> PositionEntry)` 조회 테이블

    생성 이후에는 읽기 전용 매핑만 노출한다.
    """
    _entries: Mapping[str, Mapping[int, PositionEntry]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, entries: Dict[str, Dict[int, PositionEntry]]) -> "PositionIndex":
        frozen = {
            path: MappingProxyType(dict(lines))
            for path, lines in entries.items()
        }
        return cls(_entries=MappingProxyType(frozen))

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PositionIndex):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.files)))

    @property
    def files(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def lines_for(self, path: str) -> Mapping[int, PositionEntry]:
        """파일의 라인 매핑 반환 (파일이 없으면 KeyError)"""
        return self._entries[path]

    def get(self, path: str, line: int) -> Optional[PositionEntry]:
        return self._entries.get(path, {}).get(line)

    def to_dict(self) -> Dict[str, Dict[int, PositionEntry]]:
        return {path: dict(lines) for path, lines in self._entries.items()}
