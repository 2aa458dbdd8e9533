"""
Integration tests for the truthgen command-line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from truthgen import __version__
from truthgen.cli import app

runner = CliRunner()


@pytest.fixture
def schema_file(write_schema, task_app_yaml):
    return write_schema(task_app_yaml)


@pytest.fixture(autouse=True)
def in_tmp_path(tmp_path, monkeypatch):
    """Run every command from an empty project directory."""
    monkeypatch.chdir(tmp_path)


class TestGenerateCommand:
    """Test `truthgen generate`."""

    def test_generate_writes_every_view(self, schema_file, tmp_path):
        result = runner.invoke(app, ["generate", str(schema_file), "-o", str(tmp_path / "out")])
        assert result.exit_code == 0, result.output
        written = sorted(p.name for p in (tmp_path / "out" / "views").iterdir())
        assert written == sorted(f"{name}.js" for name in [
            "TaskList", "TaskDetail", "TaskCreate", "TaskEdit", "TaskBoard", "TaskCalendar", "TaskDashboard",
        ])

    def test_generate_keeps_existing_files(self, schema_file, tmp_path):
        target = tmp_path / "out" / "views" / "TaskList.js"
        target.parent.mkdir(parents=True)
        target.write_text("// mine\n")

        result = runner.invoke(app, ["generate", str(schema_file), "-o", str(tmp_path / "out")])

        assert result.exit_code == 0, result.output
        assert target.read_text() == "// mine\n"
        assert "--force" in result.output

        runner.invoke(app, ["generate", str(schema_file), "-o", str(tmp_path / "out"), "--force"])
        assert target.read_text() != "// mine\n"

    def test_generate_only(self, schema_file, tmp_path):
        result = runner.invoke(
            app, ["generate", str(schema_file), "-o", str(tmp_path / "out"), "--only", "TaskBoard"]
        )
        assert result.exit_code == 0, result.output
        assert [p.name for p in (tmp_path / "out" / "views").iterdir()] == ["TaskBoard.js"]

    def test_dry_run_writes_nothing(self, schema_file, tmp_path):
        result = runner.invoke(app, ["generate", str(schema_file), "-o", str(tmp_path / "out"), "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output
        assert not (tmp_path / "out").exists()

    def test_invalid_view_fails_after_generating_others(self, write_schema, task_app_yaml, tmp_path):
        schema = write_schema(task_app_yaml.replace("dateField: dueDate", "dateField: title"))
        result = runner.invoke(app, ["generate", str(schema), "-o", str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "must be a date field" in result.output
        assert (tmp_path / "out" / "views" / "TaskList.js").exists()

    def test_default_schema_from_config(self, task_app_yaml, tmp_path):
        schema = tmp_path / "app" / "app.truth.yaml"
        schema.parent.mkdir(parents=True)
        schema.write_text(task_app_yaml)
        result = runner.invoke(app, ["generate", "--only", "TaskList"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "generated" / "views" / "TaskList.js").exists()


class TestOtherCommands:
    """Test the inspection commands."""

    def test_view_prints_module(self, schema_file):
        result = runner.invoke(app, ["view", str(schema_file), "TaskCreate"])
        assert result.exit_code == 0, result.output
        assert "export default function TaskCreate()" in result.output

    def test_view_unknown(self, schema_file):
        result = runner.invoke(app, ["view", str(schema_file), "Ghost"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_analyze_json(self, schema_file):
        result = runner.invoke(app, ["analyze", str(schema_file), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["healthScore"] == 60
        assert data["totalComplexity"] == 58

    def test_analyze_graph(self, schema_file):
        result = runner.invoke(app, ["analyze", str(schema_file), "--graph"])
        assert result.exit_code == 0, result.output
        graph = json.loads(result.stdout)
        assert {"nodes", "edges"} == set(graph)

    def test_analyze_summary(self, schema_file):
        result = runner.invoke(app, ["analyze", str(schema_file)])
        assert result.exit_code == 0, result.output
        assert "Health" in result.output

    def test_validate(self, schema_file):
        result = runner.invoke(app, ["validate", str(schema_file)])
        assert result.exit_code == 0, result.output
        assert "Valid" in result.output

    def test_validate_reports_problems(self, write_schema, task_app_yaml):
        schema = write_schema(task_app_yaml.replace("to: User", "to: Person"))
        result = runner.invoke(app, ["validate", str(schema)])
        assert result.exit_code == 1
        assert "Person" in result.output

    def test_validate_bad_yaml(self, write_schema):
        result = runner.invoke(app, ["validate", str(write_schema("name: [oops"))])
        assert result.exit_code == 1

    def test_templates(self):
        result = runner.invoke(app, ["templates"])
        assert result.exit_code == 0, result.output
        assert "kanban" in result.output

    def test_paths(self):
        result = runner.invoke(app, ["paths"])
        assert result.exit_code == 0, result.output
        assert "templates" in result.output

    def test_init_then_generate(self, tmp_path):
        result = runner.invoke(app, ["init", "Demo"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "truthgen.yaml").exists()
        assert (tmp_path / "app" / "app.truth.yaml").exists()

        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "generated" / "views" / "TaskCalendar.js").exists()

    def test_missing_explicit_config(self, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "nope.yaml"), "paths"])
        assert result.exit_code == 1

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output
