"""
zlang Frontend Error Hierarchy
==============================

Parse errors raised by the recursive descent parser. The lexer never
raises: every character is classified into some token, so all syntax
problems surface here, at the granularity of a top-level unit.

Exception Hierarchy
-------------------
ParseError (base for all syntax errors)
├── UnexpectedTokenError - token cannot start an expression
├── MissingTokenError - expected keyword or punctuation not found
│   └── MissingFunctionNameError - prototype does not start with a name
├── MalformedNumberError - numeric text rejected by float parsing
├── NestingTooDeepError - expression nested past the parser depth limit
└── ParseFailedError - aggregate report from parse_source()

A ParseError is never fatal to an interactive session: the session
records it, skips one token and carries on with the next unit.
"""

from typing import Optional

from zlang.errors import ZlangError, SourceLocation


class ParseError(ZlangError):
    """
    Syntax error in a top-level unit.

    Examples:
        - Stray ')' where an expression should start
        - 'if' without 'then'
        - 'def' followed by a number instead of a name
    """
    pass


class UnexpectedTokenError(ParseError):
    """
    A token that cannot start a primary expression.

    Attributes:
        found: Text of the offending token
        expected: What the parser was looking for
    """

    def __init__(
        self,
        found: str,
        expected: str = "an expression",
        location: Optional[SourceLocation] = None,
    ):
        self.found = found
        self.expected = expected
        super().__init__(
            f"unknown token '{found}' when expecting {expected}",
            location=location,
        )


class MissingTokenError(ParseError):
    """
    Required token is missing.

    Raised when a required keyword or punctuation ('then', 'else', 'in',
    '=', ',', ')') is not found where the grammar demands it.

    Attributes:
        expected: Description of the missing token
        found: Text of the token found instead
    """

    def __init__(
        self,
        expected: str,
        found: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        message = f"expected {expected}"
        if found is not None:
            message += f", found '{found}'"
        super().__init__(message, location=location, hint=hint)


class MissingFunctionNameError(MissingTokenError):
    """Prototype in a 'def' or 'extern' that does not begin with a name."""

    def __init__(
        self,
        found: Optional[str] = None,
        location: Optional[SourceLocation] = None,
    ):
        super().__init__(
            "function name in prototype",
            found=found,
            location=location,
            hint="prototypes look like: name(arg1 arg2)",
        )


class MalformedNumberError(ParseError):
    """
    Numeric literal that is not a valid decimal float.

    The lexer greedily collects digits and dots, so text such as
    '3.4.5' or a lone '.' reaches the parser as a number token
    without a value.
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
    ):
        self.text = text
        super().__init__(
            f"malformed number '{text}'",
            location=location,
            hint="numbers have at most one decimal point, e.g. 3.45",
        )


class NestingTooDeepError(ParseError):
    """
    Expression nested more deeply than the parser allows.

    Parentheses, call arguments and the parts of 'if' and 'for' each
    open a new level. The limit keeps deep input from exhausting the
    Python stack.

    Attributes:
        limit: Deepest nesting the parser accepts
    """

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
    ):
        self.limit = limit
        super().__init__(
            f"expression nested too deeply (limit is {limit} levels)",
            location=location,
            hint="split the expression into smaller functions",
        )


class ParseFailedError(ParseError):
    """
    Aggregate error containing every failure of a parse_source() run.

    The message is already a formatted report and is passed through
    without another prefix.
    """

    def _format_message(self) -> str:
        """Return message as-is - it's already a formatted report."""
        return self.message
