"""Tests for flow CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from flowtalk.core import logging_config
from flowtalk.core.flow import Flow
from flowtalk.frontends.cli.commands import describe_flow, inspect_flow, validate_flows
from flowtalk.frontends.cli.main import build_cli


@pytest.fixture
def flow_file(tmp_path, flow_document):
    path = tmp_path / "signup.json"
    path.write_text(json.dumps(flow_document))
    return path


@pytest.fixture
def broken_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(
        json.dumps(
            {
                "type": "flowchart",
                "vertices": {"a": {"type": "stadium"}, "sub": {"type": "subroutine"}},
                "edges": [{"start": "a", "end": "ghost"}],
            }
        )
    )
    return path


class TestDescribeFlow:
    """Tests for flow summaries."""

    def test_summary(self, flow_document):
        summary = describe_flow(Flow.from_dict(flow_document))

        assert summary["title"] == "Signup"
        assert summary["entries"] == ["start"]
        assert summary["vertices"][0] == {
            "id": "start",
            "kind": "entry",
            "text": "Start",
            "module": "ask-name",
            "src": None,
        }
        assert summary["vertices"][1]["src"] == "details.json"
        assert summary["edges"][1] == {
            "start": "details",
            "end": "done",
            "text": "",
            "stroke": "dotted",
        }


class TestInspectCommand:
    """Tests for flowtalk inspect."""

    def test_table_output(self, flow_file):
        result = CliRunner().invoke(inspect_flow, [str(flow_file)])

        assert result.exit_code == 0
        assert "Signup" in result.output
        assert "Entries: start" in result.output
        assert "ask-name" in result.output
        assert "details.json" in result.output

    def test_json_output(self, flow_file):
        result = CliRunner().invoke(inspect_flow, [str(flow_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["type"] == "flowchart"
        assert [v["id"] for v in data["vertices"]] == ["start", "details", "done"]

    def test_missing_file(self, tmp_path):
        result = CliRunner().invoke(inspect_flow, [str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_has_json_option(self):
        param_names = [p.name for p in inspect_flow.params]
        assert "json_output" in param_names


class TestValidateCommand:
    """Tests for flowtalk validate."""

    def test_valid_flow(self, flow_file):
        result = CliRunner().invoke(validate_flows, [str(flow_file)])

        assert result.exit_code == 0
        assert f"{flow_file}: ok" in result.output

    def test_reports_problems(self, flow_file, broken_file):
        result = CliRunner().invoke(validate_flows, [str(flow_file), str(broken_file)])

        assert result.exit_code == 1
        assert f"{broken_file}: 2 problem(s)" in result.output
        assert "references unknown vertex 'ghost'" in result.output
        assert "Subroutine 'sub' has no flow or src" in result.output
        assert "1 of 2 flow(s) invalid" in result.output

    def test_schema_errors(self, tmp_path):
        path = tmp_path / "untyped.json"
        path.write_text("{}")

        result = CliRunner().invoke(validate_flows, [str(path)])

        assert result.exit_code == 1
        assert "1 problem(s)" in result.output
        assert "Invalid flow document" in result.output

    def test_requires_sources(self):
        result = CliRunner().invoke(validate_flows, [])
        assert result.exit_code != 0


class TestRootCommand:
    """Tests for the flowtalk command group."""

    def test_commands_registered(self):
        cli = build_cli()
        assert set(cli.commands) == {"inspect", "validate"}

    def test_verbose_flag(self, flow_file, monkeypatch):
        levels = []
        monkeypatch.setattr(
            logging_config, "configure_logging", lambda level=None, **kwargs: levels.append(level)
        )

        result = CliRunner().invoke(build_cli(), ["-v", "validate", str(flow_file)])

        assert result.exit_code == 0
        assert "ok" in result.output
        assert levels == ["DEBUG"]


def test_example_flows_are_valid():
    """The bundled example flows pass validation."""
    example_dir = Path(__file__).parents[2] / "examples" / "signup"
    sources = [str(example_dir / "flow.json"), str(example_dir / "email.json")]

    result = CliRunner().invoke(validate_flows, sources)

    assert result.exit_code == 0, result.output
