"""
Command-line interface for docs-toc.

Generates a table of contents for a docs directory and writes it into the
target document at the <!--toc--> mark.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from .analyzer import analyze_document
from .config import ConfigError, TocConfig, resolve_config
from .injector import InjectorOptions, read_document
from .models import CleanupInfo, InjectionStatus
from .runner import NoMarkdownFilesError, RunResult, generate_toc, run_toc
from .tag_scanner import scan_tags
from .transformer import build_cleanup_preview

console = Console()


def _display_regions(info: CleanupInfo) -> None:
    """Show stale regions as a table."""
    table = Table(title="Stale Regions", show_header=True)
    table.add_column("#", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("Lines", style="green")
    table.add_column("Count", justify="right")

    for number, region in enumerate(info.regions, start=1):
        table.add_row(
            str(number),
            region.kind.label,
            f"{region.start_line + 1}-{region.end_line + 1}",
            str(region.line_count),
        )

    console.print(table)


async def confirm_cleanup(info: CleanupInfo) -> bool:
    """Ask the user whether stale regions may be deleted."""
    console.print(f"\n{info.description}\n", markup=False, highlight=False)
    _display_regions(info)
    return await asyncio.to_thread(
        Confirm.ask,
        f"Delete {info.total_lines} lines in {len(info.regions)} regions?",
        default=False,
        console=console,
    )


def _dry_run(config: TocConfig) -> None:
    """Print the generated TOC and what a real run would clean."""
    toc, file_count = generate_toc(config)
    console.print(Panel(toc.rstrip("\n") or "(empty)", title=f"TOC ({file_count} files)"))

    try:
        lines, _ = read_document(config.readme_path)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[yellow]Cannot read target document:[/yellow] {e}")
        return

    scan = scan_tags(lines)
    analysis = analyze_document(lines, scan.marks, scan.ends)
    if analysis.active_mark is None:
        console.print("[yellow]No <!--toc--> mark in the target document.[/yellow]")

    preview = build_cleanup_preview(analysis)
    if preview.needs_cleanup:
        console.print(preview.summary, markup=False, highlight=False)
    else:
        console.print("[green]No stale regions.[/green]")


@click.command()
@click.argument(
    "root",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path),
    help="Path to a YAML config file (default: toc.config.yaml in ROOT).",
)
@click.option(
    "--base-dir",
    "-d",
    type=str,
    help="Directory to scan, relative to ROOT (default: docs).",
)
@click.option(
    "--out",
    "-o",
    "out_file",
    type=str,
    help="Document to write the TOC into, relative to ROOT (default: README.md).",
)
@click.option(
    "--ignore",
    "-i",
    multiple=True,
    help="Extra glob pattern to exclude. Can be repeated.",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    help="Maximum directory depth to scan (default: 3).",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    default=False,
    help="Clean stale regions without asking.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the TOC and cleanup preview without writing.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
def main(
    root: Optional[Path],
    config_path: Optional[Path],
    base_dir: Optional[str],
    out_file: Optional[str],
    ignore: tuple[str, ...],
    max_depth: Optional[int],
    yes: bool,
    dry_run: bool,
    verbose: bool,
) -> None:
    """
    docs-toc - Keep a docs table of contents up to date.

    Scans the docs directory for markdown files and writes a linked TOC
    below the <!--toc--> mark of the target document. Safe to re-run: the
    previous TOC is replaced, and leftovers from earlier runs are cleaned
    after confirmation.

    Examples:

        docs-toc

        docs-toc ./my-project --base-dir guides --out INDEX.md --yes
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cwd = root or Path.cwd()

    try:
        config = resolve_config(
            cwd,
            config_path=config_path,
            base_dir=base_dir,
            out_file=out_file,
            ignore=list(ignore),
            max_depth=max_depth,
        )

        if verbose:
            console.print(f"  Scanning: {config.scan_path}")
            console.print(f"  Target:   {config.readme_path}")

        if dry_run:
            _dry_run(config)
            return

        options = InjectorOptions(on_cleanup_confirm=confirm_cleanup, auto_approve=yes)
        result = asyncio.run(run_toc(config, options))

    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {e}")
        sys.exit(1)
    except NoMarkdownFilesError as e:
        console.print(f"[red]Scan error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)

    _display_result(result, verbose)
    if not result.success:
        sys.exit(1)


def _display_result(result: RunResult, verbose: bool) -> None:
    """Display the outcome of a run."""
    injection = result.injection

    if injection.success:
        console.print(
            f"[bold green]Success![/bold green] TOC with {result.file_count} files "
            f"written to: {result.readme_path}"
        )
        if injection.cleaned_regions:
            console.print(f"[cyan]Stale regions cleaned:[/cyan] {injection.cleaned_regions}")
    elif injection.status == InjectionStatus.CLEANUP_PENDING:
        console.print(injection.message, markup=False, highlight=False)
        console.print("[yellow]Re-run with --yes to clean these regions.[/yellow]")
    else:
        console.print(f"[red]Error:[/red] {injection.message}", highlight=False)

    if injection.move_detected:
        console.print(
            "[yellow]The <!--toc--> mark appears to have been moved; "
            "old TOC content was found elsewhere.[/yellow]"
        )

    if verbose:
        console.print(f"\n[dim]Status: {injection.status.value}[/dim]")


def run_cli() -> None:
    """Entry point for the CLI."""
    main()


if __name__ == "__main__":
    run_cli()
