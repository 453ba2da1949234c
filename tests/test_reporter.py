"""Tests for error classification, suggestions and exit codes."""

from __future__ import annotations

import pytest

from curlgen.exceptions import (
    CommandSyntaxError,
    ConfigError,
    MissingArgumentError,
    PluginError,
    RequestValidationError,
    UnknownFlagError,
)
from curlgen.models import ConversionResult
from curlgen.reporter import classify, exit_code_for, suggestion_for


class TestClassify:
    def test_known_kind(self) -> None:
        result = classify(UnknownFlagError("--nope"), target="go")
        assert result.error_kind == "UnknownFlagError"
        assert result.message == "unknown option: --nope"
        assert result.offending_token == "--nope"
        assert result.stage == "parse"
        assert result.target == "go"
        assert result.code is None

    def test_other_errors_become_validation_errors(self) -> None:
        result = classify(PluginError("broken emitter"))
        assert result.error_kind == "ValidationError"
        assert result.stage == "registry"

    def test_syntax_error_kind(self) -> None:
        assert classify(CommandSyntaxError("unterminated quote")).error_kind == "SyntaxError"


class TestSuggestions:
    def test_close_flag(self) -> None:
        result = classify(UnknownFlagError("--hedaer"))
        assert suggestion_for(result) == "Did you mean '--header'?"

    def test_no_close_flag(self) -> None:
        result = classify(UnknownFlagError("--zzzzzzzz"))
        assert suggestion_for(result) == "This option is not supported. Remove it and try again."

    def test_syntax_error(self) -> None:
        hint = suggestion_for(classify(CommandSyntaxError("unterminated quote", token="'x")))
        assert hint is not None and "quote" in hint

    def test_missing_number(self) -> None:
        result = classify(MissingArgumentError("-m", "option -m requires a number of seconds, got 'x'"))
        assert suggestion_for(result) == "Give -m a number of seconds, e.g. '-m 30'."

    def test_missing_value(self) -> None:
        result = classify(MissingArgumentError("-H"))
        assert suggestion_for(result) == "Put the value right after -H, quoted if it contains spaces."

    def test_unknown_target(self) -> None:
        result = classify(RequestValidationError("unknown target", token="gox", stage="emit"))
        assert suggestion_for(result, ["python-requests", "go", "curl"]) == (
            "Did you mean 'go'? Run 'curlgen targets' to list them all."
        )
        assert suggestion_for(result) == "Run 'curlgen targets' to list the available targets."

    @pytest.mark.parametrize(
        ("message", "fragment"),
        [
            ("missing URL", "Add the request URL"),
            ("malformed header (expected 'Name: Value')", "-H 'Name: Value'"),
            ("unsupported method", "GET, POST"),
            ("unsupported URL scheme", "http://"),
            ("cannot fold non key-value data into query", "-G"),
        ],
    )
    def test_validation_hints(self, message: str, fragment: str) -> None:
        hint = suggestion_for(classify(RequestValidationError(message)))
        assert hint is not None and fragment in hint

    def test_no_hint(self) -> None:
        assert suggestion_for(classify(ConfigError("bad config"))) is None


class TestExitCodes:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (CommandSyntaxError("unterminated quote"), 3),
            (UnknownFlagError("--x"), 4),
            (MissingArgumentError("-H"), 5),
            (RequestValidationError("missing URL"), 2),
        ],
    )
    def test_failure_codes(self, exc, code: int) -> None:
        assert exit_code_for(classify(exc)) == code

    def test_success(self) -> None:
        assert exit_code_for(ConversionResult(code="x")) == 0
