#!/usr/bin/env python3
"""
Cleanup task catalogue for kenosis

Every task sits behind the same narrow interface so the run coordinator never
needs to know how a particular package manager is invoked:

    skip_reason(ctx) -> None when the task can run, else the SKIP note
    estimate(ctx)    -> reclaimable bytes (0 when not applicable)
    execute(ctx, run)-> runs operations through *run* and records outcomes

Tasks are idempotent: running one twice in a row is harmless.
"""

import logging
import pathlib
import shutil
import subprocess
from typing import Callable, Optional, Sequence

from cleanup_config import Profile, RunConfig
from size_estimator import parse_size_to_bytes, path_size_bytes
from task_runner import TaskRun, TaskStatus

logger = logging.getLogger(__name__)

QUERY_TIMEOUT = 60


class TaskContext:
    """Everything a task may consult: settings, home directory, tools, prompts"""

    def __init__(
        self,
        config: RunConfig,
        home: Optional[pathlib.Path] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.config = config
        self.home = pathlib.Path(home) if home else pathlib.Path.home()
        self.which = which
        self.runner = runner
        self._confirm = confirm

    @property
    def global_caches_enabled(self) -> bool:
        return self.config.global_caches_enabled

    def has_tool(self, name: str) -> bool:
        return self.which(name) is not None

    def query(self, argv: Sequence[str]) -> str:
        """Capture a tool's stdout for estimation; empty string on any failure"""
        try:
            result = self.runner(
                list(argv), check=False, capture_output=True, text=True, timeout=QUERY_TIMEOUT
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Query %s failed: %s", " ".join(argv), e)
            return ""
        if result.returncode != 0:
            return ""
        return (result.stdout or "").strip()

    def confirm_risky(self, prompt: str) -> bool:
        """Gate a risky operation.

        Only prompts in interactive mode without --yes; otherwise proceeds.
        """
        if self.config.assume_yes or not self.config.interactive:
            return True
        if self._confirm is None:
            return False
        return self._confirm(prompt)


class CleanupTask:
    """Base class for a named cleanup task"""

    name = ""
    tools: tuple[str, ...] = ()
    risky = False

    def unavailable_note(self) -> str:
        return f"{self.name} not installed"

    def skip_reason(self, ctx: TaskContext) -> Optional[str]:
        if self.is_available(ctx):
            return None
        return self.unavailable_note()

    def is_available(self, ctx: TaskContext) -> bool:
        return any(ctx.has_tool(tool) for tool in self.tools)

    def estimate(self, ctx: TaskContext) -> int:
        return 0

    def confirm(self, ctx: TaskContext, prompt: str) -> bool:
        """Gate one of this task's operations; only risky tasks ever prompt"""
        if not self.risky:
            return True
        return ctx.confirm_risky(prompt)

    def execute(self, ctx: TaskContext, run: TaskRun):
        raise NotImplementedError


class DockerTask(CleanupTask):
    name = "docker"
    tools = ("docker",)
    risky = True

    def estimate(self, ctx):
        if not ctx.has_tool("docker"):
            return 0
        output = ctx.query(["docker", "system", "df", "--format", "{{.Reclaimable}}"])
        total = 0
        for line in output.splitlines():
            # e.g. "1.2GB (45%)"
            token = line.strip().split(" ", 1)[0]
            total += parse_size_to_bytes(token)
        return total

    def execute(self, ctx, run):
        run.command("Docker safe prune", ["docker", "system", "prune", "-f"])

        if ctx.config.profile is Profile.AGGRESSIVE:
            run.command("Docker aggressive prune", ["docker", "system", "prune", "-af"])

        if ctx.config.include_volumes:
            if self.confirm(ctx, "Prune unused Docker volumes?"):
                run.command("Docker prune with volumes", ["docker", "system", "prune", "-af", "--volumes"])
                run.record(TaskStatus.OK, "pruned including volumes")
                return
            run.record(TaskStatus.SKIP, "volume prune declined")
            return

        run.record(TaskStatus.OK, "pruned containers/images/cache")


class GoTask(CleanupTask):
    name = "go"
    tools = ("go",)
    risky = True

    def estimate(self, ctx):
        if not ctx.has_tool("go"):
            return 0
        total = path_size_bytes(ctx.query(["go", "env", "GOCACHE"]))
        if ctx.global_caches_enabled:
            total += path_size_bytes(ctx.query(["go", "env", "GOMODCACHE"]))
        return total

    def execute(self, ctx, run):
        run.command("Go build/test cache cleanup", ["go", "clean", "-cache", "-testcache"])

        if ctx.global_caches_enabled and self.confirm(ctx, "Clear Go module cache (go clean -modcache)?"):
            run.command("Go module cache cleanup", ["go", "clean", "-modcache"])
            run.record(TaskStatus.OK, "cleared cache + modcache")
            return

        run.record(TaskStatus.OK, "cleared build/test cache")


class NodeTask(CleanupTask):
    name = "node"
    tools = ("npm", "yarn", "pnpm")

    def unavailable_note(self):
        return "no npm/yarn/pnpm found"

    def estimate(self, ctx):
        total = 0
        if ctx.has_tool("npm"):
            total += path_size_bytes(ctx.query(["npm", "config", "get", "cache"]))
        if ctx.has_tool("yarn"):
            total += path_size_bytes(ctx.home / "Library" / "Caches" / "Yarn")
        if ctx.has_tool("pnpm"):
            total += path_size_bytes(ctx.query(["pnpm", "store", "path"]))
        return total

    def execute(self, ctx, run):
        if ctx.has_tool("npm"):
            run.command("npm cache verify", ["npm", "cache", "verify"])
            run.command("npm cache clean", ["npm", "cache", "clean", "--force"])
        if ctx.has_tool("yarn"):
            run.command("yarn cache clean", ["yarn", "cache", "clean"])
        if ctx.has_tool("pnpm"):
            run.command("pnpm store prune", ["pnpm", "store", "prune"])
        run.record(TaskStatus.OK, "package manager caches cleaned")


class PythonTask(CleanupTask):
    name = "python"
    tools = ("uv", "pip")

    def unavailable_note(self):
        return "no uv/pip found"

    def estimate(self, ctx):
        total = 0
        if ctx.has_tool("uv"):
            total += path_size_bytes(ctx.query(["uv", "cache", "dir"]))
        if ctx.has_tool("pip"):
            total += path_size_bytes(ctx.query(["pip", "cache", "dir"]))
        return total

    def execute(self, ctx, run):
        if ctx.has_tool("uv"):
            run.command("uv cache prune", ["uv", "cache", "prune"])
        if ctx.has_tool("pip"):
            run.command("pip cache purge", ["pip", "cache", "purge"])
        run.record(TaskStatus.OK, "python caches pruned")


class RubyTask(CleanupTask):
    name = "ruby"
    tools = ("bundle",)

    def unavailable_note(self):
        return "bundler not installed"

    def execute(self, ctx, run):
        run.command("bundle clean", ["bundle", "clean", "--force"])
        run.record(TaskStatus.OK, "bundler cleaned")


class BrewTask(CleanupTask):
    name = "brew"
    tools = ("brew",)

    def estimate(self, ctx):
        if not ctx.has_tool("brew"):
            return 0
        return path_size_bytes(ctx.query(["brew", "--cache"]))

    def execute(self, ctx, run):
        run.command("brew cleanup", ["brew", "cleanup", "-s"])
        run.command("brew autoremove", ["brew", "autoremove"])
        run.record(TaskStatus.OK, "brew cleanup + autoremove")


class XcodeTask(CleanupTask):
    name = "xcode"

    def derived_data(self, ctx) -> pathlib.Path:
        return ctx.home / "Library" / "Developer" / "Xcode" / "DerivedData"

    def unavailable_note(self):
        return "DerivedData not found"

    def is_available(self, ctx):
        return self.derived_data(ctx).is_dir()

    def estimate(self, ctx):
        return path_size_bytes(self.derived_data(ctx))

    def execute(self, ctx, run):
        run.remove_paths("Remove Xcode DerivedData", [self.derived_data(ctx)])
        run.record(TaskStatus.OK, "DerivedData removed")


class IosSimulatorTask(CleanupTask):
    name = "ios_sim"
    tools = ("xcrun",)

    def unavailable_note(self):
        return "xcrun not installed"

    def execute(self, ctx, run):
        run.command("Delete unavailable iOS simulators", ["xcrun", "simctl", "delete", "unavailable"])
        run.record(TaskStatus.OK, "unavailable simulators deleted")


class GradleTask(CleanupTask):
    name = "gradle"

    def caches(self, ctx) -> pathlib.Path:
        return ctx.home / ".gradle" / "caches"

    def unavailable_note(self):
        return "~/.gradle/caches not found"

    def is_available(self, ctx):
        return self.caches(ctx).is_dir()

    def estimate(self, ctx):
        return path_size_bytes(self.caches(ctx))

    def execute(self, ctx, run):
        run.remove_paths("Remove Gradle caches", [self.caches(ctx)])
        run.record(TaskStatus.OK, "gradle caches removed")


class CargoTask(CleanupTask):
    name = "cargo"
    risky = True

    def cache_dirs(self, ctx) -> list[pathlib.Path]:
        cargo_home = ctx.home / ".cargo"
        return [cargo_home / "registry", cargo_home / "git"]

    def skip_reason(self, ctx):
        if not ctx.global_caches_enabled:
            return "global cache cleanup disabled"
        if not any(p.is_dir() for p in self.cache_dirs(ctx)):
            return "cargo global caches not found"
        return None

    def is_available(self, ctx):
        return self.skip_reason(ctx) is None

    def estimate(self, ctx):
        if not ctx.global_caches_enabled:
            return 0
        return sum(path_size_bytes(p) for p in self.cache_dirs(ctx))

    def execute(self, ctx, run):
        if self.confirm(ctx, "Delete Cargo global caches (~/.cargo/registry ~/.cargo/git)?"):
            run.remove_paths("Remove Cargo global caches", self.cache_dirs(ctx))
            run.record(TaskStatus.OK, "cargo global caches removed")
            return
        run.record(TaskStatus.SKIP, "cargo cache cleanup declined")


TASK_REGISTRY: dict[str, CleanupTask] = {
    task.name: task
    for task in (
        DockerTask(),
        GoTask(),
        NodeTask(),
        PythonTask(),
        RubyTask(),
        BrewTask(),
        XcodeTask(),
        IosSimulatorTask(),
        GradleTask(),
        CargoTask(),
    )
}
