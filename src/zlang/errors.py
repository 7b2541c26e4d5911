"""
zlang Error Hierarchy
=====================

This module defines the root of the exception hierarchy for zlang.
All exceptions inherit from ZlangError, allowing callers (most notably
the interactive session loop) to catch every language-level failure
with a single except clause while letting genuine bugs propagate.

Exception Hierarchy
-------------------
ZlangError (base)
├── ParseError (zlang.frontend.errors) - malformed top-level units
│   ├── UnexpectedTokenError - token cannot start an expression
│   ├── MissingTokenError - required keyword/punctuation absent
│   │   └── MissingFunctionNameError - prototype without a name
│   └── MalformedNumberError - numeric text that is not a float
└── BackendError (zlang.backend.errors) - lowering and evaluation
    ├── LoweringError - unknown names, arity, operators
    ├── HandleError - compiled handle contract violations
    └── EvaluationError - failures while running code

Error messages follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ZlangError(Exception):
    """
    Base exception for all zlang errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional["SourceLocation"] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example output:
            <stdin>:3:7: error: expected 'then'
            hint: an if expression needs both 'then' and 'else'
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source (or "<stdin>" for interactive input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Error Collection for Session Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects the errors of an interactive session for summary reporting.

    The session never stops on an error; it records each one here and
    moves on to the next top-level unit.

    Example:
        collector = ErrorCollector()
        for result in session:
            if result.error:
                collector.add(result.error)

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 0):
        """
        Initialize the error collector.

        Args:
            max_errors: Errors to keep for the report (0 keeps all of them)
        """
        self.errors: List[ZlangError] = []
        self.max_errors = max_errors
        self._total = 0

    def add(self, error: ZlangError) -> None:
        """Add an error to the collection."""
        self._total += 1
        if self.max_errors and len(self.errors) >= self.max_errors:
            return
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return self._total > 0

    def error_count(self) -> int:
        """Return the number of errors seen, including ones not kept."""
        return self._total

    def report(self) -> str:
        """Format all kept errors followed by a summary line."""
        lines = []

        for error in self.errors:
            lines.append(str(error))

        dropped = self._total - len(self.errors)
        if dropped:
            lines.append(f"... {dropped} more not shown")

        error_word = "error" if self._total == 1 else "errors"
        lines.append(f"{self._total} {error_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
        self._total = 0
