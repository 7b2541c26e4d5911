"""
Tests for session configuration and the shared error types.
"""

import pytest
from zlang.config import SessionOptions, parse_operator_list
from zlang.errors import ErrorCollector, SourceLocation, ZlangError
from zlang.frontend.precedence import DEFAULT_PRECEDENCE


ENV_NAMES = ["ZLANG_PROMPT", "ZLANG_NO_EVAL", "ZLANG_OPERATORS", "ZLANG_LOG_LEVEL", "ZLANG_MAX_ERRORS"]


@pytest.fixture
def env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# =============================================================================
# SessionOptions
# =============================================================================

class TestSessionOptions:
    """Tests for defaults and environment overrides."""

    def test_defaults(self, env):
        options = SessionOptions.from_env()
        assert options == SessionOptions()
        assert options.prompt == "ready> "
        assert options.evaluate_expressions
        assert options.extra_operators == {}
        assert options.max_errors == 0

    def test_prompt(self, env):
        env.setenv("ZLANG_PROMPT", "zl> ")
        assert SessionOptions.from_env().prompt == "zl> "

    @pytest.mark.parametrize("value,expected", [
        ("1", False), ("true", False), ("YES", False), ("on", False),
        ("0", True), ("no", True),
    ])
    def test_no_eval(self, env, value, expected):
        env.setenv("ZLANG_NO_EVAL", value)
        assert SessionOptions.from_env().evaluate_expressions is expected

    def test_operators(self, env):
        env.setenv("ZLANG_OPERATORS", "%=40, |=5")
        assert SessionOptions.from_env().extra_operators == {"%": 40, "|": 5}

    def test_log_level(self, env):
        env.setenv("ZLANG_LOG_LEVEL", "debug")
        assert SessionOptions.from_env().log_level == "DEBUG"

    def test_invalid_log_level_ignored(self, env):
        env.setenv("ZLANG_LOG_LEVEL", "chatty")
        assert SessionOptions.from_env().log_level == "WARNING"

    def test_max_errors(self, env):
        env.setenv("ZLANG_MAX_ERRORS", "5")
        assert SessionOptions.from_env().max_errors == 5

    @pytest.mark.parametrize("value", ["many", "-1"])
    def test_invalid_max_errors_ignored(self, env, value):
        env.setenv("ZLANG_MAX_ERRORS", value)
        assert SessionOptions.from_env().max_errors == 0

    def test_build_precedence_default(self):
        assert SessionOptions().build_precedence() is DEFAULT_PRECEDENCE

    def test_build_precedence_extra(self):
        table = SessionOptions(extra_operators={"%": 40}).build_precedence()
        assert table.lookup("%").precedence == 40
        assert DEFAULT_PRECEDENCE.lookup("%") is None


class TestParseOperatorList:
    """Tests for parse_operator_list()."""

    def test_valid(self):
        assert parse_operator_list("%=40,|=5") == {"%": 40, "|": 5}

    def test_equals_is_not_an_operator(self):
        assert parse_operator_list("==15") == {}

    @pytest.mark.parametrize("entry", ["(=5", ")=5", ";=5", "#=5", ".=5", "a=5", "7=5"])
    def test_grammar_characters_skipped(self, entry, caplog):
        assert parse_operator_list(f"{entry},%=40") == {"%": 40}
        assert "ignoring operator entry" in caplog.text

    def test_env_cannot_register_comma(self, env):
        env.setenv("ZLANG_OPERATORS", ",=5")
        assert SessionOptions.from_env().extra_operators == {}

    def test_invalid_entries_skipped(self):
        assert parse_operator_list("%%=3,^=x,&=0,!=7,") == {"!": 7}


# =============================================================================
# Errors
# =============================================================================

class TestErrors:
    """Tests for ZlangError formatting and ErrorCollector."""

    def test_format_with_location_and_hint(self):
        error = ZlangError("bad thing", SourceLocation("a.zl", 3, 7), hint="try again")
        assert str(error) == "a.zl:3:7: error: bad thing\nhint: try again"

    def test_format_without_location(self):
        assert str(ZlangError("bad thing")) == "error: bad thing"

    def test_collector(self):
        collector = ErrorCollector()
        assert not collector.has_errors()
        collector.add(ZlangError("one"))
        collector.add(ZlangError("two"))
        assert collector.has_errors()
        assert collector.error_count() == 2
        assert collector.report() == "error: one\nerror: two\n2 errors"

    def test_collector_single(self):
        collector = ErrorCollector()
        collector.add(ZlangError("one"))
        assert collector.report().endswith("1 error")

    def test_collector_limit(self):
        collector = ErrorCollector(max_errors=1)
        for message in ["a", "b", "c"]:
            collector.add(ZlangError(message))
        assert len(collector.errors) == 1
        assert collector.error_count() == 3
        assert "... 2 more not shown" in collector.report()

    def test_clear(self):
        collector = ErrorCollector()
        collector.add(ZlangError("one"))
        collector.clear()
        assert not collector.has_errors()
        assert collector.errors == []
