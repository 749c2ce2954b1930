#!/usr/bin/env python3
"""
Kenosis: Ancient Greek κένωσις (emptying)

A re-runnable disk cleanup tool for developer workstations. Runs a fixed
catalogue of cleanup tasks (package manager caches, build caches, Xcode
DerivedData, simulators), estimates what each can reclaim, and reports what
was actually freed by sampling free space before and after every task.

Dry run is the default; nothing is touched without --apply.

Usage:
    kenosis                                   # Dry run, safe profile
    kenosis --apply --yes --profile safe      # Unattended cleanup
    kenosis --apply --no-strict --only brew,node
    kenosis --apply --profile aggressive --include-volumes --include-global-caches
"""

import argparse
import logging
import pathlib
import shutil
import subprocess
import sys
from datetime import datetime
from typing import Callable, Mapping, Optional

from auxiliary import split_csv
from cleanup_config import TASK_CATALOGUE, Profile, RunConfig, select_tasks
from cleanup_tasks import TASK_REGISTRY, CleanupTask, TaskContext
from console_ui import ConsoleUI
from kenosis_config import SharedConfigManager
from run_support import LockError, RunLock, setup_logging
from size_estimator import free_bytes
from task_report import build_summary_table, summary_lines, totals_lines
from task_runner import RunCoordinator, RunResult

TOOL_NAME = "kenosis"

logger = logging.getLogger(__name__)


def run_config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        profile=Profile(args.profile),
        dry_run=args.dry_run,
        assume_yes=args.assume_yes,
        interactive=args.interactive,
        strict=args.strict,
        include_volumes=args.include_volumes,
        include_global_caches=args.include_global_caches,
        only=split_csv(args.only),
        skip=split_csv(args.skip),
    )


class Kenosis:
    """Main application class for the kenosis cleanup tool."""

    def __init__(
        self,
        args: argparse.Namespace,
        ui: Optional[ConsoleUI] = None,
        home: Optional[pathlib.Path] = None,
        tasks: Optional[Mapping[str, CleanupTask]] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        free_space: Optional[Callable[[], int]] = None,
        lock_dir: Optional[pathlib.Path] = None,
    ):
        self.args = args
        self.config = run_config_from_args(args)
        self.ui = ui or ConsoleUI()
        self.home = pathlib.Path(home) if home else pathlib.Path.home()
        self.tasks = tasks if tasks is not None else TASK_REGISTRY
        self.which = which
        self.runner = runner
        self.free_space = free_space or (lambda: free_bytes(self.home))
        self.lock_dir = lock_dir
        self.log_path: Optional[pathlib.Path] = None

    # -- confirmation --------------------------------------------------------

    def confirm_apply(self) -> bool:
        if self.config.dry_run or self.config.assume_yes:
            return True
        return self.ui.confirm("About to run cleanup in apply mode. Continue?", default=False)

    def confirm_risky(self, prompt: str) -> bool:
        return self.ui.confirm(prompt, default=False)

    # -- run -----------------------------------------------------------------

    def cleanup(self) -> RunResult:
        ctx = TaskContext(
            self.config,
            home=self.home,
            which=self.which,
            runner=self.runner,
            confirm=self.confirm_risky,
        )
        coordinator = RunCoordinator(self.tasks, ctx, free_space=self.free_space)
        return coordinator.run(select_tasks(self.config))

    def report(self, result: RunResult):
        self.ui.console.print()
        self.ui.console.print(build_summary_table(result))
        for line in summary_lines(result):
            logger.debug(line)
        for line in totals_lines(result):
            logger.info(line)
        logger.info("Tip: schedule with launchd using '--apply --yes --profile safe'.")

    def _run_locked(self) -> int:
        mode = "dry run" if self.config.dry_run else "apply"
        self.ui.print_header("Kenosis", f"Developer workstation cleanup ({mode})")
        self.ui.show_configuration(self.config.as_display_dict())

        logger.info("Cleanup run started at %s", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        logger.info(self.config.settings_line())
        if self.log_path:
            logger.debug("Logging to %s", self.log_path)

        if not self.confirm_apply():
            logger.error("Aborted by user before apply mode execution.")
            return 1

        result = self.cleanup()
        self.report(result)
        return 1 if result.failed else 0

    def run(self) -> int:
        self.log_path = setup_logging(TOOL_NAME, console=self.ui.console, home=self.home)

        try:
            with RunLock(TOOL_NAME, self.lock_dir):
                code = self._run_locked()
        except LockError as e:
            self.ui.print_error(str(e))
            return 1

        if code == 0:
            logger.info("Cleanup run completed.")
        else:
            logger.info("Cleanup run failed with exit code %d.", code)
        return code


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser(defaults: Optional[dict] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description="Kenosis: re-runnable developer workstation cleanup with safe defaults",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Tasks:
  {",".join(TASK_CATALOGUE)}

Examples:
  kenosis
  kenosis --apply --yes --profile safe
  kenosis --apply --yes --no-strict --only brew,node
  kenosis --apply --yes --profile aggressive --include-volumes --include-global-caches
        """,
    )
    parser.add_argument(
        "--profile",
        choices=[p.value for p in Profile],
        default=Profile.SAFE.value,
        help="Cleanup profile (default: safe)",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", dest="dry_run", action="store_true", help="Print commands without executing (default)")
    mode.add_argument("--apply", dest="dry_run", action="store_false", help="Execute commands")

    parser.add_argument("--yes", dest="assume_yes", action="store_true", help="Skip confirmation prompts")
    parser.add_argument("--interactive", action="store_true", help="Ask before risky operations")

    strict = parser.add_mutually_exclusive_group()
    strict.add_argument("--strict", dest="strict", action="store_true", help="Stop on first task with command failures (default)")
    strict.add_argument("--no-strict", dest="strict", action="store_false", help="Continue even if task commands fail")

    parser.add_argument("--include-volumes", action="store_true", help="Allow Docker volume pruning")
    parser.add_argument(
        "--include-global-caches", action="store_true", help="Allow global cache removal (Cargo/Go mod cache)"
    )
    parser.add_argument("--only", metavar="TASKS", default=None, help="Comma-separated task list to run")
    parser.add_argument("--skip", metavar="TASKS", default=None, help="Comma-separated task list to skip")

    parser.set_defaults(dry_run=True, strict=True)
    if defaults:
        parser.set_defaults(**defaults)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    defaults = SharedConfigManager().load().cleanup_defaults()
    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    app = Kenosis(args)
    try:
        return app.run()
    except KeyboardInterrupt:
        app.ui.print_warning("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
