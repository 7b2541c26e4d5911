"""
zlang Session Configuration
===========================

Options that shape an interactive session. Configuration can come from:
- Default values (defined here)
- Environment variables (SessionOptions.from_env)
- Command line flags (applied by the zlang CLI on top of the above)

Environment variables (all optional):
    ZLANG_PROMPT: Prompt printed before each unit (default: "ready> ")
    ZLANG_NO_EVAL: "1", "true", "yes" or "on" disables evaluation of
                   top-level expressions
    ZLANG_OPERATORS: Extra binary operators, e.g. "%=40,|=5"
    ZLANG_LOG_LEVEL: Logging level name (DEBUG, INFO, WARNING, ...)
    ZLANG_MAX_ERRORS: Errors kept for the final report (0 = all)
"""

from dataclasses import dataclass, field
from typing import Dict
import logging
import os

from zlang.frontend.precedence import (
    DEFAULT_PRECEDENCE,
    PrecedenceTable,
    is_operator_character,
)

logger = logging.getLogger(__name__)


_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class SessionOptions:
    """
    Configuration for a zlang session.

    Attributes:
        prompt: Text printed before each unit when input is interactive
        evaluate_expressions: Run top-level expressions after compiling them
        extra_operators: Operator character to precedence, added to the
                         default table when the session starts
        log_level: Logging level name used by the CLI
        max_errors: Errors kept for the final report (0 keeps all)
    """

    prompt: str = "ready> "
    evaluate_expressions: bool = True
    extra_operators: Dict[str, int] = field(default_factory=dict)
    log_level: str = "WARNING"
    max_errors: int = 0

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_env(cls) -> "SessionOptions":
        """
        Create SessionOptions from environment variables.

        Invalid values are ignored and the default is kept.

        Returns:
            SessionOptions with values from environment variables
        """
        options = cls()

        if (prompt := os.environ.get("ZLANG_PROMPT")) is not None:
            options.prompt = prompt

        if no_eval := os.environ.get("ZLANG_NO_EVAL"):
            options.evaluate_expressions = no_eval.strip().lower() not in _TRUE_VALUES

        if operators := os.environ.get("ZLANG_OPERATORS"):
            options.extra_operators = parse_operator_list(operators)

        if log_level := os.environ.get("ZLANG_LOG_LEVEL"):
            level = log_level.strip().upper()
            if isinstance(logging.getLevelName(level), int):
                options.log_level = level

        if max_errors := os.environ.get("ZLANG_MAX_ERRORS"):
            try:
                value = int(max_errors)
            except ValueError:
                pass  # Ignore invalid values
            else:
                if value >= 0:
                    options.max_errors = value

        return options

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def build_precedence(self) -> PrecedenceTable:
        """Return the operator table for a session using these options."""
        if not self.extra_operators:
            return DEFAULT_PRECEDENCE
        return DEFAULT_PRECEDENCE.with_operators(self.extra_operators)


def parse_operator_list(text: str) -> Dict[str, int]:
    """
    Parse an operator list such as "%=40,|=5".

    Entries that are not an operator character followed by '=' and a
    positive integer are skipped. Letters, digits, whitespace and
    punctuation the grammar uses (such as ',' or ')') are not
    operator characters.

    Returns:
        Operator character to precedence
    """
    operators: Dict[str, int] = {}
    for entry in text.split(","):
        char, sep, precedence = entry.strip().rpartition("=")
        if not sep or not is_operator_character(char):
            logger.warning(f"ignoring operator entry {entry!r}")
            continue
        try:
            value = int(precedence)
        except ValueError:
            logger.warning(f"ignoring operator entry {entry!r}")
            continue
        if value <= 0:
            logger.warning(f"ignoring operator entry {entry!r}")
            continue
        operators[char] = value
    return operators
