"""Smoke tests: imports work, CLI --help works."""

from click.testing import CliRunner

from forcegraph.__main__ import main


def test_import():
    from forcegraph import layout_graph

    assert layout_graph is not None


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "Force-directed graph layout" in result.output
