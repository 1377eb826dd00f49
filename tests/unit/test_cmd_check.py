"""Unit tests for the check command."""

from __future__ import annotations

from click.testing import CliRunner

from todo_search.cli import cli

NO_CONFIG = "/nonexistent/config.toml"


def _check(*args: str):
    return CliRunner().invoke(cli, ["--no-color", "--config", NO_CONFIG, "-q", "check", *args])


class TestCheckCommand:
    def test_valid_query_prints_normalized_form(self) -> None:
        result = _check("a OR b AND c")
        assert result.exit_code == 0
        assert "(or a (and b c))" in result.output

    def test_success_message(self) -> None:
        result = CliRunner().invoke(
            cli, ["--no-color", "--config", NO_CONFIG, "check", "tag:x"]
        )
        assert result.exit_code == 0
        assert "Query is valid" in result.output

    def test_invalid_query_points_at_error(self) -> None:
        result = _check("a AND (b")
        assert result.exit_code == 1
        assert "Expected closing parenthesis" in result.output
        lines = result.output.splitlines()
        caret_line = next(line for line in lines if line.strip() == "^")
        assert caret_line.index("^") == 2 + len("a AND ")

    def test_tokens(self) -> None:
        result = _check("--tokens", "tag:urgent")
        assert result.exit_code == 0
        assert "prefix" in result.output
        assert "urgent" in result.output

    def test_ast(self) -> None:
        result = _check("--ast", "a OR b")
        assert result.exit_code == 0
        assert "OR" in result.output

    def test_tokens_shown_for_invalid_query(self) -> None:
        result = _check("--tokens", "(a")
        assert result.exit_code == 1
        assert "lparen" in result.output
