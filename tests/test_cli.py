"""Tests for the docfolder CLI via Click's test runner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from docfolder.cli import main
from docfolder.document import EMPTY_DOCUMENT


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def opened(runner: CliRunner, home: Path, folder: Path) -> Path:
    """Home with the template folder already granted and remembered."""
    result = runner.invoke(main, ["open", str(folder), "--home", str(home)])
    assert result.exit_code == 0, result.output
    return home


class TestFolderCommands:
    """open, status, files, revoke, forget."""

    def test_help(self, runner: CliRunner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "open" in result.output
        assert "put" in result.output

    def test_open(self, runner: CliRunner, home: Path, folder: Path):
        result = runner.invoke(main, ["open", str(folder), "--home", str(home)])

        assert result.exit_code == 0
        assert "templates" in result.output
        assert "3 document(s)" in result.output
        assert json.loads((home / "handles.json").read_text())["directory"]["name"] == "templates"

    def test_open_missing_folder(self, runner: CliRunner, home: Path, tmp_path: Path):
        result = runner.invoke(main, ["open", str(tmp_path / "nope"), "--home", str(home)])
        assert result.exit_code == 1

    def test_files(self, runner: CliRunner, opened: Path):
        result = runner.invoke(main, ["files", "--home", str(opened)])

        assert result.exit_code == 0
        assert result.output.split() == ["alpha.json", "broken.json", "welcome.json"]

    def test_files_without_folder(self, runner: CliRunner, home: Path):
        result = runner.invoke(main, ["files", "--home", str(home)])
        assert result.exit_code == 1

    def test_status(self, runner: CliRunner, opened: Path):
        result = runner.invoke(main, ["status", "--home", str(opened)])

        assert result.exit_code == 0
        assert "templates" in result.output
        assert "granted" in result.output

    def test_status_nothing_remembered(self, runner: CliRunner, home: Path):
        result = runner.invoke(main, ["status", "--home", str(home)])

        assert result.exit_code == 0
        assert "No folder remembered" in result.output

    def test_status_unusable_record(self, runner: CliRunner, home: Path):
        """A record of an unknown kind is reported, not raised."""
        (home / "handles.json").write_text(json.dumps({
            "directory": {"kind": "browser", "name": "remote", "location": "opaque"}
        }))

        result = runner.invoke(main, ["status", "--home", str(home)])

        assert result.exit_code == 0
        assert "unusable" in result.output
        assert "denied" in result.output

    def test_revoke_then_status(self, runner: CliRunner, opened: Path):
        result = runner.invoke(main, ["revoke", "--home", str(opened)])
        assert result.exit_code == 0
        assert "revoked" in result.output

        result = runner.invoke(main, ["status", "--home", str(opened)])
        assert "needs permission" in result.output

    def test_revoked_folder_declined_is_forgotten(self, runner: CliRunner, opened: Path):
        """Declining the permission prompt clears the remembered folder."""
        runner.invoke(main, ["revoke", "--home", str(opened)])

        result = runner.invoke(main, ["files", "--home", str(opened)], input="n\n")
        assert result.exit_code == 1

        result = runner.invoke(main, ["status", "--home", str(opened)])
        assert "No folder remembered" in result.output

    def test_revoked_folder_granted_again(self, runner: CliRunner, opened: Path):
        runner.invoke(main, ["revoke", "--home", str(opened)])

        result = runner.invoke(main, ["files", "--home", str(opened)], input="y\n")

        assert result.exit_code == 0
        assert "welcome.json" in result.output

    def test_forget(self, runner: CliRunner, opened: Path):
        result = runner.invoke(main, ["forget", "--home", str(opened)])
        assert result.exit_code == 0

        result = runner.invoke(main, ["status", "--home", str(opened)])
        assert "No folder remembered" in result.output


class TestDocumentCommands:
    """show, new, put."""

    def test_show(self, runner: CliRunner, opened: Path):
        result = runner.invoke(main, ["show", "welcome.json", "--home", str(opened)])

        assert result.exit_code == 0
        assert "EmailLayout" in result.output

    def test_show_invalid(self, runner: CliRunner, opened: Path):
        result = runner.invoke(main, ["show", "broken.json", "--home", str(opened)])

        assert result.exit_code == 1
        assert "Could not load" in result.output

    def test_new(self, runner: CliRunner, opened: Path, folder: Path):
        result = runner.invoke(main, ["new", "note", "--home", str(opened)])

        assert result.exit_code == 0
        assert "note.json" in result.output
        assert json.loads((folder / "note.json").read_text()) == EMPTY_DOCUMENT

    def test_new_prompts(self, runner: CliRunner, opened: Path, folder: Path):
        result = runner.invoke(main, ["new", "--home", str(opened)], input="prompted\n")

        assert result.exit_code == 0
        assert (folder / "prompted.json").exists()

    def test_new_existing_declined(self, runner: CliRunner, opened: Path, folder: Path):
        before = (folder / "alpha.json").read_text()
        result = runner.invoke(main, ["new", "alpha", "--home", str(opened)], input="n\n")

        assert result.exit_code == 1
        assert (folder / "alpha.json").read_text() == before

    def test_new_existing_yes(self, runner: CliRunner, opened: Path, folder: Path):
        result = runner.invoke(main, ["new", "alpha", "--yes", "--home", str(opened)])

        assert result.exit_code == 0
        assert json.loads((folder / "alpha.json").read_text()) == EMPTY_DOCUMENT

    def test_put(self, runner: CliRunner, opened: Path, folder: Path, tmp_path: Path):
        source = tmp_path / "source.json"
        source.write_text(json.dumps({"title": "updated"}))

        result = runner.invoke(main, ["put", "alpha.json", str(source), "--home", str(opened)])

        assert result.exit_code == 0, result.output
        assert "Saved" in result.output
        assert (folder / "alpha.json").read_text() == json.dumps({"title": "updated"}, indent=2)

    def test_put_invalid_source(self, runner: CliRunner, opened: Path, tmp_path: Path):
        source = tmp_path / "source.json"
        source.write_text("[1, 2]")

        result = runner.invoke(main, ["put", "alpha.json", str(source), "--home", str(opened)])

        assert result.exit_code == 1
        assert "Invalid document" in result.output
