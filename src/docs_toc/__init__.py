"""
docs-toc

Keeps a table of contents for a directory of markdown files up to date:
- Scans the docs tree and renders a linked, sorted bullet list
- Injects it below a <!--toc--> mark in the target document
- Re-runs safely: the previous TOC is replaced, duplicates and leftovers
  from earlier runs are cleaned only after confirmation
"""

__version__ = "1.0.0"
__author__ = "docs-toc Team"

from .models import (
    MarkInfo,
    EndInfo,
    StaleRegion,
    StaleRegionKind,
    DocumentAnalysis,
    RegionPreview,
    CleanupPreview,
    CleanupInfo,
    InjectionResult,
    InjectionStatus,
    DocNode,
    NodeMeta,
)

# Injection engine
from .tag_scanner import TagScan, scan_tags
from .analyzer import analyze_document, is_toc_shaped
from .transformer import (
    build_cleanup_preview,
    transform_document,
    normalize_blank_lines,
)
from .injector import (
    InjectorOptions,
    update_document,
    update_document_sync,
)

# TOC generation pipeline
from .file_scanner import scan_docs
from .tree import build_tree_from_paths
from .metadata import enrich_tree, parse_front_matter
from .sorting import sort_tree, natural_compare, extract_sort_key, chinese_to_number
from .mapping import (
    Rename,
    Detailed,
    MappingRules,
    build_mapping_tree,
    apply_mapping,
)
from .renderer import render_to_markdown
from .config import ConfigError, TocConfig, UserConfig, resolve_config
from .runner import NoMarkdownFilesError, RunResult, generate_toc, run_toc

__all__ = [
    # Models
    "MarkInfo",
    "EndInfo",
    "StaleRegion",
    "StaleRegionKind",
    "DocumentAnalysis",
    "RegionPreview",
    "CleanupPreview",
    "CleanupInfo",
    "InjectionResult",
    "InjectionStatus",
    "DocNode",
    "NodeMeta",
    # Injection engine
    "TagScan",
    "scan_tags",
    "analyze_document",
    "is_toc_shaped",
    "build_cleanup_preview",
    "transform_document",
    "normalize_blank_lines",
    "InjectorOptions",
    "update_document",
    "update_document_sync",
    # Pipeline
    "scan_docs",
    "build_tree_from_paths",
    "enrich_tree",
    "parse_front_matter",
    "sort_tree",
    "natural_compare",
    "extract_sort_key",
    "chinese_to_number",
    "Rename",
    "Detailed",
    "MappingRules",
    "build_mapping_tree",
    "apply_mapping",
    "render_to_markdown",
    "ConfigError",
    "TocConfig",
    "UserConfig",
    "resolve_config",
    "NoMarkdownFilesError",
    "RunResult",
    "generate_toc",
    "run_toc",
]
