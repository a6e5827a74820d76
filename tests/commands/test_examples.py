"""Tests for --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from shelfctl.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["items", "--examples"], ["shelfctl items list"]),
    (["items", "list", "--examples"], ["--collapse-series", "--filter issues"]),
    (["shelf", "--examples"], ["shelfctl shelf in-progress", "shelfctl shelf recent-series"]),
    (["shelf", "in-progress", "--examples"], ["--ebook"]),
    (["shelf", "recent", "--examples"], ["--limit 5"]),
    (["shelf", "continue-series", "--examples"], ["shelfctl shelf continue-series"]),
    (["shelf", "recent-series", "--examples"], ["--include rssfeed"]),
    (["filter", "--examples"], ["shelfctl filter encode genres Fantasy"]),
    (["filter", "encode", "--examples"], ["no-series"]),
    (["filter", "decode", "--examples"], ["tags.Y2xhc3NpYw%3D%3D"]),
]


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=["_".join(a for a in args if a != "--examples") for args, _ in EXAMPLES_COMMANDS],
)
def test_examples_output(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Examples for" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


class TestExamplesInHelp:
    @pytest.mark.parametrize(
        "args",
        [
            ["items", "list", "--help"],
            ["shelf", "--help"],
            ["filter", "decode", "--help"],
        ],
    )
    def test_examples_in_help(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "--examples" in result.output
        assert "Show sample invocations and exit." in result.output


class TestExamplesEagerExit:
    """--examples exits before argument validation."""

    def test_skips_required_library(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["items", "list", "--examples"])
        assert result.exit_code == 0

    def test_skips_required_user(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["shelf", "continue-series", "--examples"])
        assert result.exit_code == 0

    def test_skips_required_filter_args(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["filter", "encode", "--examples"])
        assert result.exit_code == 0
