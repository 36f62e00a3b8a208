"""
End-to-end TOC generation: scan, build, enrich, map, sort, render, inject.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import TocConfig
from .file_scanner import scan_docs
from .injector import InjectorOptions, update_document
from .mapping import apply_mapping, build_mapping_tree
from .metadata import enrich_tree
from .models import InjectionResult
from .renderer import render_to_markdown
from .sorting import sort_tree
from .tree import build_tree_from_paths

logger = logging.getLogger(__name__)


class NoMarkdownFilesError(Exception):
    """Raised when the scan directory holds no markdown files."""
    pass


@dataclass
class RunResult:
    """Outcome of a full run."""
    readme_path: Path
    toc: str
    file_count: int
    injection: Optional[InjectionResult] = None

    @property
    def success(self) -> bool:
        return self.injection is not None and self.injection.success


def generate_toc(config: TocConfig) -> tuple[str, int]:
    """
    Generate the TOC markdown for the configured docs directory.

    Returns:
        Tuple of (rendered TOC, number of markdown files found).

    Raises:
        NoMarkdownFilesError: If no markdown files were found.
    """
    paths = scan_docs(config.scan_path, ignore=config.ignore, max_depth=config.max_depth)

    # Never list the target document inside its own TOC
    readme_rel = config.readme_scan_path
    if readme_rel is not None:
        paths = [path for path in paths if path != readme_rel]

    if not paths:
        raise NoMarkdownFilesError(f"No Markdown files found in {config.scan_path}")

    logger.info(f"Generating TOC for {len(paths)} files in {config.scan_path}")

    tree = build_tree_from_paths(paths, link_prefix=config.link_prefix)
    enrich_tree(tree, config.scan_path)
    apply_mapping(tree, build_mapping_tree(config.mapping))
    sort_tree(tree)

    return render_to_markdown(tree), len(paths)


async def run_toc(config: TocConfig, options: Optional[InjectorOptions] = None) -> RunResult:
    """
    Generate the TOC and inject it into the configured target document.

    Raises:
        NoMarkdownFilesError: If no markdown files were found.
    """
    toc, file_count = generate_toc(config)
    injection = await update_document(config.readme_path, toc, options)

    return RunResult(
        readme_path=config.readme_path,
        toc=toc,
        file_count=file_count,
        injection=injection,
    )
