"""
Data models for docs-toc.

This module defines the core data structures shared by the injection engine
(scanner, analyzer, transformer, injector) and the TOC generation pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Literal, Optional


@dataclass(frozen=True)
class MarkInfo:
    """A TOC start marker found in a document."""
    line_index: int  # 0-based
    original_text: str  # Untouched line text, user formatting preserved
    has_matching_end: bool = False
    matching_end_index: Optional[int] = None


@dataclass(frozen=True)
class EndInfo:
    """A TOC end marker found in a document."""
    line_index: int  # 0-based
    offset: int = 0  # Line count of the TOC block this end marker closed
    has_matching_mark: bool = False
    matching_mark_index: Optional[int] = None


class StaleRegionKind(Enum):
    """Classification of leftover content that needs cleanup."""
    ORPHAN_END = "orphan-end"
    COMPLETE = "complete"
    MOVED_CONTENT = "moved-content"

    @property
    def label(self) -> str:
        """Human readable label used in cleanup previews."""
        return _KIND_LABELS[self]


_KIND_LABELS = {
    StaleRegionKind.ORPHAN_END: "orphan end tag",
    StaleRegionKind.COMPLETE: "duplicate region",
    StaleRegionKind.MOVED_CONTENT: "moved content",
}


@dataclass(frozen=True)
class StaleRegion:
    """An inclusive line range scheduled for removal."""
    kind: StaleRegionKind
    start_line: int
    end_line: int

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def contains(self, line_index: int) -> bool:
        return self.start_line <= line_index <= self.end_line


@dataclass
class DocumentAnalysis:
    """Result of analyzing a document's TOC markers."""
    lines: list[str]
    marks: list[MarkInfo] = field(default_factory=list)
    ends: list[EndInfo] = field(default_factory=list)
    active_mark: Optional[MarkInfo] = None
    stale_regions: list[StaleRegion] = field(default_factory=list)
    move_detected: bool = False

    @property
    def has_stale_regions(self) -> bool:
        return bool(self.stale_regions)

    @property
    def active_span(self) -> Optional[tuple[int, int]]:
        """Inclusive range of the active block's old content plus its end marker."""
        mark = self.active_mark
        if mark is None or not mark.has_matching_end or mark.matching_end_index is None:
            return None
        return mark.line_index + 1, mark.matching_end_index


@dataclass
class RegionPreview:
    """Display information for one stale region."""
    region_index: int  # 1-based
    start_line: int  # 1-based
    end_line: int  # 1-based
    kind: StaleRegionKind
    first_line_content: str
    last_line_content: str
    line_count: int


@dataclass
class CleanupPreview:
    """What a cleanup would delete, shown to the user before confirmation."""
    needs_cleanup: bool
    regions: list[RegionPreview] = field(default_factory=list)
    summary: str = ""

    @property
    def total_lines(self) -> int:
        return sum(region.line_count for region in self.regions)


@dataclass
class CleanupInfo:
    """Payload handed to the cleanup confirmation callback."""
    regions: list[StaleRegion]
    total_lines: int
    description: str


CleanupConfirmCallback = Callable[[CleanupInfo], Awaitable[bool]]


class InjectionStatus(Enum):
    """Outcome categories of a single injection run."""
    UPDATED = "updated"
    READ_FAILURE = "read-failure"
    WRITE_FAILURE = "write-failure"
    NO_MARK = "no-mark"
    CLEANUP_CANCELLED = "cleanup-cancelled"
    CLEANUP_PENDING = "cleanup-pending"


@dataclass
class InjectionResult:
    """Result of updating one target document."""
    success: bool
    message: str
    cleaned_regions: int = 0
    move_detected: bool = False
    status: InjectionStatus = InjectionStatus.UPDATED


# ---------------------------------------------------------------------------
# TOC generation pipeline models
# ---------------------------------------------------------------------------

NodeType = Literal["dir", "file"]


@dataclass
class NodeMeta:
    """Metadata attached to a tree node by the enricher and the mapping rules."""
    title: Optional[str] = None
    order: Optional[int] = None
    ignore: Optional[bool] = None
    mapping_name: Optional[str] = None
    mapping_order: Optional[int] = None
    mapping_ignore: Optional[bool] = None

    @property
    def effective_order(self) -> Optional[int]:
        """Mapping order wins over front-matter order."""
        if self.mapping_order is not None:
            return self.mapping_order
        return self.order

    @property
    def is_ignored(self) -> bool:
        """Mapping ignore wins over front-matter ignore."""
        if self.mapping_ignore is not None:
            return self.mapping_ignore
        return bool(self.ignore)


@dataclass
class DocNode:
    """A file or directory in the docs tree."""
    name: str
    type: NodeType
    path: str  # POSIX path relative to the scan root
    link_path: Optional[str] = None  # Files only: path used in the rendered link
    children: list["DocNode"] = field(default_factory=list)
    meta: NodeMeta = field(default_factory=NodeMeta)

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    @property
    def display_name(self) -> str:
        """Mapping name, then front-matter title, then the bare file name."""
        if self.meta.mapping_name:
            return self.meta.mapping_name
        if self.meta.title:
            return self.meta.title
        if not self.is_dir and self.name.lower().endswith(".md"):
            return self.name[:-3]
        return self.name
