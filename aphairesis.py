#!/usr/bin/env python3
"""
Aphairesis: Ancient Greek ἀφαίρεσις (taking away)

Finds reinstallable dependency/build/cache directories inside a workspace
(node_modules, .venv, target, vendor/bundle, ...) and removes them to reclaim
disk space. Everything found can be recreated by the matching package
manager or build tool.

Default is a dry run that only reports what would be removed. Deleting needs
--apply and typing 'delete' at the prompt; --trash moves directories to the
Trash instead (requires the `trash` command).

Usage:
    aphairesis --root ~/code                   # Report findings
    aphairesis --root ~/code --list-all        # Report every match
    aphairesis --root ~/code --apply           # Delete after confirmation
    aphairesis --root ~/code --apply --trash   # Move to Trash instead
"""

import argparse
import logging
import pathlib
import shutil
import subprocess
import sys
from typing import Callable, Optional

from rich import box
from rich.markup import escape
from rich.table import Table

from auxiliary import format_kb, format_path_for_display
from console_ui import ConsoleUI
from file_operations import FileOperations, OperationType, TrashUnavailableError
from kenosis_config import SharedConfigManager
from reinstallable_scanner import (
    Match,
    PurgeError,
    discover,
    largest,
    size_matches,
    summarize_by_type,
    total_kb,
    validate_root,
)
from run_support import setup_logging
from size_estimator import path_size_kb

TOOL_NAME = "aphairesis"
CONFIRM_TOKEN = "delete"
LARGEST_LIMIT = 40

logger = logging.getLogger(__name__)


class Aphairesis:
    """Main application class for the scan-and-purge tool."""

    def __init__(
        self,
        args: argparse.Namespace,
        ui: Optional[ConsoleUI] = None,
        home: Optional[str] = None,
        sizer: Callable[[str], int] = path_size_kb,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.args = args
        self.ui = ui or ConsoleUI()
        self.home = home or str(pathlib.Path.home())
        self.sizer = sizer
        self.which = which
        self.root = ""
        self.operations = FileOperations(self.operation_type, which=which, runner=runner)

    @property
    def operation_type(self) -> OperationType:
        return OperationType.TRASH if self.args.trash else OperationType.REMOVE

    def _display(self, path: str) -> str:
        return format_path_for_display(path, self.home)

    # -- scanning ------------------------------------------------------------

    def scan(self) -> list[Match]:
        self.ui.print_section("Scanning for reinstallable directories")
        progress = self.ui.create_activity_progress()
        with progress:
            task = progress.add_task(f"Scanning {escape(self._display(self.root))}...", total=None)
            paths = discover(self.root)
            progress.update(task, description=f"Scan complete: {len(paths)} directories matched")

        if not paths:
            return []

        self.ui.print_section("Estimating reclaimable space")
        progress = self.ui.create_progress()
        with progress:
            task = progress.add_task("Sizing", total=len(paths))
            matches = size_matches(paths, sizer=self.sizer, progress=lambda _p: progress.advance(task))
        return matches

    # -- reporting -----------------------------------------------------------

    def report(self, matches: list[Match]):
        estimated = total_kb(matches)

        self.ui.print_section("Summary")
        self.ui.console.print(f"[bold]Found:[/bold] {len(matches)} directories under {escape(self._display(self.root))}")
        self.ui.console.print(f"[bold]Estimated reclaimable space:[/bold] {format_kb(estimated)}")
        logger.debug("Found %d directories under %s, %d KB", len(matches), self.root, estimated)

        table = Table(title="By Type", box=box.ROUNDED, show_lines=False)
        table.add_column("Size", justify="right", style="yellow", min_width=10)
        table.add_column("Count", justify="right", min_width=6)
        table.add_column("Type", style="cyan", min_width=14)
        for summary in summarize_by_type(matches):
            table.add_row(format_kb(summary.size_kb), str(summary.count), summary.label)
        self.ui.console.print()
        self.ui.console.print(table)

        self.ui.print_section("Largest Candidates")
        self._print_ranked(largest(matches, LARGEST_LIMIT))

    def _print_ranked(self, matches: list[Match], width: int = 3):
        for rank, match in enumerate(matches, 1):
            self.ui.print_plain(f"{rank:>{width}}. {format_kb(match.size_kb):>10}  {self._display(match.path)}")

    def dry_run_hints(self, matches: list[Match]):
        self.ui.console.print()
        self.ui.print_warning("DRY RUN (no deletions).")
        self.ui.print_plain(f"Total estimated space that would be freed: {format_kb(total_kb(matches))}")
        self.ui.console.print()
        self.ui.print_info("To delete these directories, rerun with:")
        self.ui.print_plain(f'  {TOOL_NAME} --root "{self.root}" --apply')
        if self.which("trash") is not None:
            self.ui.print_info("Or to move to Trash:")
            self.ui.print_plain(f'  {TOOL_NAME} --root "{self.root}" --apply --trash')

        self.ui.console.print()
        if self.args.list_all:
            self.ui.print_section("Full Candidate List")
            self._print_ranked(largest(matches), width=4)
        else:
            self.ui.print_warning("Skipping full list to keep output readable. Use --list-all to print everything.")

    # -- deletion ------------------------------------------------------------

    def confirm_delete(self, matches: list[Match]) -> bool:
        self.ui.print_section("Delete Plan")
        verb = "MOVE TO TRASH" if self.operation_type.reversible else "DELETE"
        self.ui.print_plain(f"ABOUT TO {verb} {len(matches)} directories under:")
        self.ui.print_plain(f"  {self.root}")
        self.ui.print_plain(f"Planned space to free (estimate): {format_kb(total_kb(matches))}")
        self.ui.console.print()
        return self.ui.confirm_token(f"Type EXACTLY: {CONFIRM_TOKEN}", CONFIRM_TOKEN)

    def purge(self, matches: list[Match]) -> int:
        planned = self.operations.plan_operations(matches, self.root)

        self.ui.print_section("Deleting")
        progress = self.ui.create_progress()
        with progress:
            task = progress.add_task("Deleting", total=len(planned))

            def advance(message: str):
                progress.update(task, description=message, advance=1)

            self.operations.progress_callback = advance
            batch = self.operations.execute_batch_operations(planned)

        self.ui.print_success(f"Deleted {len(batch.removed)} directories.")
        if batch.skipped:
            self.ui.print_warning(f"Skipped {len(batch.skipped)} directories (vanished or outside root).")
        if batch.failed:
            self.ui.print_error(f"Failed to delete {len(batch.failed)} directories:")
            for result in batch.failed:
                self.ui.print_error(f"  {escape(self._display(result.operation.match.path))}: {escape(str(result.error_message))}")
        self.ui.console.print(f"[bold]Estimated space freed:[/bold] {format_kb(batch.removed_kb)}")
        logger.info("Deleted %d directories, %d KB", len(batch.removed), batch.removed_kb)

        return 1 if batch.failed else 0

    # -- main entry point ----------------------------------------------------

    def run(self) -> int:
        try:
            self.root = validate_root(self.args.root, self.home)
        except PurgeError as e:
            self.ui.print_error(f"Error: {e}")
            return 1

        if self.args.apply:
            try:
                self.operations.ensure_available()
            except TrashUnavailableError as e:
                self.ui.print_error(f"Error: {e}")
                return 1

        matches = self.scan()
        if not matches:
            self.ui.print_success(f"No matching reinstallable directories found under: {escape(self._display(self.root))}")
            return 0

        self.report(matches)

        if not self.args.apply:
            self.dry_run_hints(matches)
            return 0

        if not self.confirm_delete(matches):
            self.ui.print_error("Error: Confirmation failed; exiting.")
            return 1

        return self.purge(matches)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser(defaults: Optional[dict] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description="Aphairesis: remove reinstallable dependency/build/cache directories inside a workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Targets (directories only):
  JS/TS:  node_modules, .next, dist, build, out, coverage, .turbo, .parcel-cache, .vite, .cache
  Python: .venv, venv, env, __pycache__, .pytest_cache, .mypy_cache, .ruff_cache, .tox, .uv
  Ruby:   vendor/bundle, vendor/cache, .bundle/cache
  Rust:   target

Safety:
  - Only deletes directories matching the patterns above
  - Skips .git directories entirely
  - Refuses unsafe roots (/, /Users, $HOME, etc.)
  - Requires typing 'delete' before applying
        """,
    )
    parser.add_argument("--root", required=True, help="Workspace root to scan")
    parser.add_argument("--apply", action="store_true", help="Perform deletions (otherwise dry run)")
    parser.add_argument("--trash", action="store_true", help="Move to Trash using the `trash` command")
    parser.add_argument("--list-all", action="store_true", help="In dry run, print every matched path")
    if defaults:
        parser.set_defaults(**defaults)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    defaults = SharedConfigManager().load().purge_defaults()
    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    app = Aphairesis(args)
    setup_logging(TOOL_NAME, console=app.ui.console)
    try:
        return app.run()
    except KeyboardInterrupt:
        app.ui.print_warning("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
