"""End-to-end tests for the aphairesis CLI"""

import os
from unittest.mock import MagicMock

import pytest

from aphairesis import Aphairesis, build_parser
from conftest import FakeRunner, fake_which

SIZES_KB = {"node_modules": 500_000, "target": 200_000}


def stub_sizer(path):
    return SIZES_KB.get(os.path.basename(path), 1)


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "code"
    (root / "web" / "node_modules" / "react").mkdir(parents=True)
    (root / "api" / "target" / "debug").mkdir(parents=True)
    (root / "api" / "src").mkdir(parents=True)
    (root / ".git" / "node_modules").mkdir(parents=True)
    return root


def make_app(tmp_path, ui, argv, which=None, runner=None):
    args = build_parser().parse_args(argv)
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    return Aphairesis(args, ui=ui, home=str(home), sizer=stub_sizer, which=which or fake_which(), runner=runner or FakeRunner())


def output(ui):
    return ui.console.file.getvalue()


class TestDryRun:
    def test_reports_without_deleting(self, tmp_path, ui, workspace):
        app = make_app(tmp_path, ui, ["--root", str(workspace)])
        assert app.run() == 0

        text = output(ui)
        assert "Found: 2 directories" in text
        assert "Estimated reclaimable space: 683.59 MB" in text
        assert "By Type" in text
        assert "DRY RUN (no deletions)." in text
        assert "Use --list-all" in text
        assert "--apply --trash" not in text
        assert (workspace / "web" / "node_modules").is_dir()
        assert (workspace / ".git" / "node_modules").is_dir()

    def test_largest_first(self, tmp_path, ui, workspace):
        make_app(tmp_path, ui, ["--root", str(workspace)]).run()
        text = output(ui)
        assert text.index("488.28 MB") < text.index("195.31 MB")

    def test_list_all(self, tmp_path, ui, workspace):
        make_app(tmp_path, ui, ["--root", str(workspace), "--list-all"]).run()
        assert "Full Candidate List" in output(ui)

    def test_trash_hint_when_installed(self, tmp_path, ui, workspace):
        make_app(tmp_path, ui, ["--root", str(workspace)], which=fake_which("trash")).run()
        assert "--apply --trash" in output(ui)

    def test_nothing_found(self, tmp_path, ui):
        empty = tmp_path / "empty"
        (empty / "src").mkdir(parents=True)
        assert make_app(tmp_path, ui, ["--root", str(empty)]).run() == 0
        assert "No matching reinstallable directories found" in output(ui)


class TestRootValidation:
    def test_home_refused(self, tmp_path, ui):
        app = make_app(tmp_path, ui, ["--root", str(tmp_path / "home")])
        assert app.run() == 1
        assert "Refusing unsafe root" in ui.error_console.file.getvalue()

    def test_missing_directory(self, tmp_path, ui):
        app = make_app(tmp_path, ui, ["--root", str(tmp_path / "nope")])
        assert app.run() == 1
        assert "--root is not a directory" in ui.error_console.file.getvalue()

    def test_root_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestApply:
    def test_wrong_token_deletes_nothing(self, tmp_path, ui, workspace):
        ui.prompt = MagicMock(return_value="yes")
        app = make_app(tmp_path, ui, ["--root", str(workspace), "--apply"])
        assert app.run() == 1
        assert "Confirmation failed" in ui.error_console.file.getvalue()
        assert (workspace / "web" / "node_modules").is_dir()
        assert (workspace / "api" / "target").is_dir()

    def test_token_is_case_sensitive(self, tmp_path, ui, workspace):
        ui.prompt = MagicMock(return_value="DELETE")
        assert make_app(tmp_path, ui, ["--root", str(workspace), "--apply"]).run() == 1

    def test_confirmed_delete(self, tmp_path, ui, workspace):
        ui.prompt = MagicMock(return_value="delete")
        app = make_app(tmp_path, ui, ["--root", str(workspace), "--apply"])
        assert app.run() == 0

        ui.prompt.assert_called_once_with("Type EXACTLY: delete")
        assert not (workspace / "web" / "node_modules").exists()
        assert not (workspace / "api" / "target").exists()
        assert (workspace / "api" / "src").is_dir()
        assert (workspace / ".git" / "node_modules").is_dir()
        assert "Deleted 2 directories." in output(ui)

    def test_trash_requires_command(self, tmp_path, ui, workspace):
        ui.prompt = MagicMock(return_value="delete")
        app = make_app(tmp_path, ui, ["--root", str(workspace), "--apply", "--trash"])
        assert app.run() == 1
        assert "brew install trash" in ui.error_console.file.getvalue()
        ui.prompt.assert_not_called()

    def test_trash_strategy(self, tmp_path, ui, workspace):
        ui.prompt = MagicMock(return_value="delete")
        runner = FakeRunner()
        app = make_app(tmp_path, ui, ["--root", str(workspace), "--apply", "--trash"], which=fake_which("trash"), runner=runner)
        assert app.run() == 0
        assert [call[:2] for call in runner.calls] == [["trash", "--"], ["trash", "--"]]
        assert "MOVE TO TRASH" in output(ui)

    def test_trash_failure_exits_nonzero(self, tmp_path, ui, workspace):
        ui.prompt = MagicMock(return_value="delete")

        def runner(argv, check=False):
            return MagicMock(returncode=1)

        app = make_app(tmp_path, ui, ["--root", str(workspace), "--apply", "--trash"], which=fake_which("trash"), runner=runner)
        assert app.run() == 1
        assert "Failed to delete 2 directories" in ui.error_console.file.getvalue()
