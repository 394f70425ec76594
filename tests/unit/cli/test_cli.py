"""Tests for the checkmate command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from checkmate.cli import __version__, app

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, review_yaml: str) -> Path:
    """File-backed storage and a local template under ``tmp_path``."""
    template = tmp_path / "review.yaml"
    template.write_text(review_yaml)
    monkeypatch.setenv("CHECKMATE_STORAGE_BACKEND", "file")
    monkeypatch.setenv("CHECKMATE_STORAGE_PATH", str(tmp_path / "storage.json"))
    monkeypatch.setenv("CHECKMATE_TEMPLATE_URL", str(template))
    return tmp_path


def _stored(workspace: Path) -> dict:
    return json.loads((workspace / "storage.json").read_text())


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------


class TestApp:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_subcommands_listed(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for name in ("template", "state", "options"):
            assert name in result.output


# -----------------------------------------------------------------------------
# template
# -----------------------------------------------------------------------------


class TestTemplateCommands:
    def test_show_configured(self, workspace: Path) -> None:
        result = runner.invoke(app, ["template", "show"])

        assert result.exit_code == 0
        assert "Team Review" in result.output
        assert "Check auth" in result.output

    def test_show_keys(self, workspace: Path) -> None:
        result = runner.invoke(app, ["template", "show", "--keys"])

        assert "security/check-auth" in result.output

    def test_show_json(self, workspace: Path) -> None:
        result = runner.invoke(app, ["template", "show", "--json"])

        data = json.loads(result.stdout)
        assert [s["name"] for s in data["sections"]] == ["Security", "Tests"]

    def test_show_unreadable_uses_fallback(self, workspace: Path) -> None:
        result = runner.invoke(app, ["template", "show", str(workspace / "missing.md")])

        assert result.exit_code == 0
        assert "Functionality" in result.output

    def test_validate_ok(self, workspace: Path) -> None:
        result = runner.invoke(app, ["template", "validate", str(workspace / "review.yaml")])

        assert result.exit_code == 0
        assert "2 sections, 3 items" in result.output

    def test_validate_bad_yaml(self, workspace: Path) -> None:
        bad = workspace / "bad.yaml"
        bad.write_text('sections:\n  - name: "Unterminated')

        result = runner.invoke(app, ["template", "validate", str(bad)])

        assert result.exit_code == 1
        assert "[yaml]" in result.output


# -----------------------------------------------------------------------------
# state
# -----------------------------------------------------------------------------


class TestStateCommands:
    def test_show_json_defaults(self, workspace: Path) -> None:
        result = runner.invoke(app, ["state", "show", "octo/repo#1", "--json"])

        assert result.exit_code == 0
        record = json.loads(result.stdout)
        assert record["items"]["security/check-auth"] == {"checked": False, "needsAttention": False}
        assert not (workspace / "storage.json").exists()

    def test_show_table(self, workspace: Path) -> None:
        result = runner.invoke(app, ["state", "show", "https://github.com/octo/repo/pull/1"])

        assert result.exit_code == 0
        assert "0/3" in result.output

    def test_show_bad_url(self, workspace: Path) -> None:
        result = runner.invoke(app, ["state", "show", "https://example.com/x"])

        assert result.exit_code == 1
        assert "[github]" in result.output

    def test_check_persists(self, workspace: Path) -> None:
        result = runner.invoke(
            app, ["state", "check", "octo/repo#1", "security/check-auth", "--attention"]
        )

        assert result.exit_code == 0
        record = _stored(workspace)["checkmate_checklist_state"]["octo/repo#1"]
        assert record["items"]["security/check-auth"] == {"checked": True, "needsAttention": True}

    def test_uncheck(self, workspace: Path) -> None:
        runner.invoke(app, ["state", "check", "octo/repo#1", "tests/unit-tests-pass"])
        runner.invoke(app, ["state", "check", "octo/repo#1", "tests/unit-tests-pass", "--uncheck"])

        record = _stored(workspace)["checkmate_checklist_state"]["octo/repo#1"]
        assert record["items"]["tests/unit-tests-pass"]["checked"] is False

    def test_summary(self, workspace: Path) -> None:
        runner.invoke(app, ["state", "check", "octo/repo#1", "security/check-auth"])

        result = runner.invoke(app, ["state", "summary", "octo/repo#1"])

        assert result.exit_code == 0
        assert result.output.startswith("# Code Review Summary\n")
        assert "## Security\n\n- ✅ Check auth\n- ❌ Validate input\n" in result.output

    def test_check_unknown_item(self, workspace: Path) -> None:
        result = runner.invoke(app, ["state", "check", "octo/repo#1", "security"])

        assert result.exit_code == 1
        assert "No item" in result.output

    def test_list(self, workspace: Path) -> None:
        runner.invoke(app, ["state", "check", "octo/repo#1", "security/check-auth"])
        runner.invoke(app, ["state", "check", "octo/repo#2", "security/check-auth"])

        result = runner.invoke(app, ["state", "list", "--json"])

        assert sorted(json.loads(result.stdout)) == ["octo/repo#1", "octo/repo#2"]

    def test_list_empty(self, workspace: Path) -> None:
        result = runner.invoke(app, ["state", "list"])
        assert "No stored checklist state" in result.output

    def test_reset(self, workspace: Path) -> None:
        runner.invoke(app, ["state", "check", "octo/repo#1", "security/check-auth"])

        result = runner.invoke(app, ["state", "reset", "octo/repo#1", "--yes"])

        assert result.exit_code == 0
        record = _stored(workspace)["checkmate_checklist_state"]["octo/repo#1"]
        assert not any(entry["checked"] for entry in record["items"].values())

    def test_reset_declined(self, workspace: Path) -> None:
        runner.invoke(app, ["state", "check", "octo/repo#1", "security/check-auth"])

        result = runner.invoke(app, ["state", "reset", "octo/repo#1"], input="n\n")

        assert result.exit_code == 1
        record = _stored(workspace)["checkmate_checklist_state"]["octo/repo#1"]
        assert record["items"]["security/check-auth"]["checked"] is True

    def test_prune(self, workspace: Path) -> None:
        (workspace / "storage.json").write_text(
            json.dumps(
                {
                    "checkmate_checklist_state": {
                        "octo/old#1": {"items": {}, "sections": {}, "lastUpdated": 1}
                    }
                }
            )
        )

        result = runner.invoke(app, ["state", "prune", "--days", "1"])

        assert result.exit_code == 0
        assert "Removed 1" in result.output
        assert _stored(workspace)["checkmate_checklist_state"] == {}

    def test_prune_needs_retention(self, workspace: Path) -> None:
        result = runner.invoke(app, ["state", "prune"])

        assert result.exit_code == 1
        assert "No retention period" in result.output

    def test_prune_env_retention(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHECKMATE_RETENTION_DAYS", "7")

        result = runner.invoke(app, ["state", "prune"])

        assert result.exit_code == 0
        assert "Removed 0" in result.output


# -----------------------------------------------------------------------------
# options
# -----------------------------------------------------------------------------


class TestOptionsCommands:
    def test_get_defaults(self, workspace: Path) -> None:
        result = runner.invoke(app, ["options", "get", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["theme"] == "auto"

    def test_set_merges(self, workspace: Path) -> None:
        runner.invoke(app, ["options", "set", "--template-url", "https://x/t.md"])
        result = runner.invoke(app, ["options", "set", "--theme", "dark"])

        assert result.exit_code == 0
        assert _stored(workspace)["checkmate_options"] == {
            "defaultTemplateUrl": "https://x/t.md",
            "theme": "dark",
        }

    def test_set_invalid_theme(self, workspace: Path) -> None:
        result = runner.invoke(app, ["options", "set", "--theme", "neon"])

        assert result.exit_code == 1
        assert "[storage]" in result.output

    def test_set_nothing(self, workspace: Path) -> None:
        result = runner.invoke(app, ["options", "set"])

        assert result.exit_code == 1
        assert "Nothing to set" in result.output
