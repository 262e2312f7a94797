"""Tests for the ripplescope command line."""

import json

import pytest
from typer.testing import CliRunner

from conftest import dedent
from ripplescope import __version__
from ripplescope.cli import app

runner = CliRunner()


@pytest.fixture
def versions(tmp_path):
    before = tmp_path / "before.ts"
    after = tmp_path / "after.ts"
    before.write_text(dedent("export function add(a: number, b: number): number { return a + b; }\n"))
    after.write_text(dedent("export function add(a: number): number { return a; }\n"))
    return before, after


@pytest.fixture
def project(write_project):
    return write_project(
        {
            "src/math.ts": "export function add(a: number): number { return a; }\n",
            "src/app.ts": """
            import { add } from './math';
            add(1);
            """,
        }
    )


class TestCli:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_snapshot_json(self, versions):
        _, after = versions
        result = runner.invoke(app, ["snapshot", str(after), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [f["name"] for f in data["functions"]] == ["add"]

    def test_snapshot_table(self, versions):
        _, after = versions
        result = runner.invoke(app, ["snapshot", str(after)])
        assert result.exit_code == 0
        assert "add" in result.stdout

    def test_diff_json(self, versions):
        before, after = versions
        result = runner.invoke(app, ["diff", str(before), str(after), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["has_breaking_changes"] is True
        assert data["impacted_names"] == ["add"]

    def test_diff_fail_on_breaking(self, versions):
        before, after = versions
        result = runner.invoke(app, ["diff", str(before), str(after), "--fail-on-breaking"])
        assert result.exit_code == 1

    def test_diff_identical_files_pass(self, versions):
        _, after = versions
        result = runner.invoke(app, ["diff", str(after), str(after), "--fail-on-breaking"])
        assert result.exit_code == 0

    def test_impact_json(self, project):
        result = runner.invoke(
            app,
            ["impact", str(project / "src/math.ts"), "--root", str(project), "--name", "add", "--json", "-w", "1"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["impacted_names"] == ["add"]
        [entry] = data["results"]
        assert entry["file_path"].endswith("src/app.ts")
        assert entry["evidence"] == {"tier": "usage", "line": 1}

    def test_analyze_json(self, project, versions):
        before, _ = versions
        result = runner.invoke(
            app,
            ["analyze", str(project / "src/math.ts"), "--before", str(before), "--root", str(project), "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["impacted_names"] == ["add"]
        assert len(data["downstream"]["results"]) == 1

    def test_analyze_table(self, project, versions):
        before, _ = versions
        result = runner.invoke(
            app, ["analyze", str(project / "src/math.ts"), "-b", str(before), "-r", str(project)]
        )
        assert result.exit_code == 0
        assert "app.ts" in result.stdout

    def test_missing_file_is_usage_error(self, tmp_path):
        result = runner.invoke(app, ["snapshot", str(tmp_path / "nope.ts")])
        assert result.exit_code == 2
