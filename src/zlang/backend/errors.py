"""
zlang Backend Error Hierarchy
=============================

Errors raised while lowering parsed units and running them.

Exception Hierarchy
-------------------
BackendError (base for all backend errors)
├── LoweringError - unit rejected at compile time
│   ├── UnknownVariableError - name is not a parameter or loop variable
│   ├── UnknownFunctionError - call to an undeclared function
│   ├── ArgumentCountError - call with the wrong number of arguments
│   ├── InvalidOperatorError - binary operator with no lowering
│   ├── DuplicateParameterError - parameter name repeated in a prototype
│   └── ExpressionTooDeepError - tree too deep to lower recursively
├── HandleError - compiled handle used outside its lifetime
└── EvaluationError - failure while running compiled code

Like parse errors, backend errors end the current unit only; the
session reports them and continues.
"""

from typing import Optional

from zlang.errors import ZlangError, SourceLocation


class BackendError(ZlangError):
    """Base class for backend errors."""
    pass


# =============================================================================
# Lowering Errors
# =============================================================================

class LoweringError(BackendError):
    """A parsed unit that cannot be turned into executable form."""
    pass


class UnknownVariableError(LoweringError):
    """Reference to a name that is not in scope."""

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        self.name = name
        super().__init__(f"unknown variable name '{name}'", location=location)


class UnknownFunctionError(LoweringError):
    """Call to a function that was never defined or declared."""

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        self.name = name
        super().__init__(
            f"unknown function referenced '{name}'",
            location=location,
            hint=f"define it with 'def {name}(...)' or declare it with 'extern {name}(...)'",
        )


class ArgumentCountError(LoweringError):
    """Call whose argument count differs from the callee's arity."""

    def __init__(
        self,
        name: str,
        expected: int,
        actual: int,
        location: Optional[SourceLocation] = None,
    ):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"incorrect number of arguments passed to '{name}': "
            f"expected {expected}, got {actual}",
            location=location,
        )


class InvalidOperatorError(LoweringError):
    """Binary operator that parses but has no meaning in the backend."""

    def __init__(self, operator: str, location: Optional[SourceLocation] = None):
        self.operator = operator
        super().__init__(f"invalid binary operator '{operator}'", location=location)


class DuplicateParameterError(LoweringError):
    """Prototype that names the same parameter more than once."""

    def __init__(
        self,
        function: str,
        parameter: str,
        location: Optional[SourceLocation] = None,
    ):
        self.function = function
        self.parameter = parameter
        super().__init__(
            f"duplicate parameter '{parameter}' in '{function}'",
            location=location,
        )


class ExpressionTooDeepError(LoweringError):
    """
    Function body whose tree is too deep to lower.

    Long operator chains parse iteratively but form a deep left-leaning
    tree, which lowering walks recursively.
    """

    def __init__(self, function: str, location: Optional[SourceLocation] = None):
        self.function = function
        super().__init__(
            f"expression too deeply nested in '{function}'",
            location=location,
            hint="split long operator chains across several functions",
        )


# =============================================================================
# Runtime Errors
# =============================================================================

class HandleError(BackendError):
    """
    Handle used outside its lifetime.

    Examples:
        - Evaluating or retiring a handle that was already retired
        - Compiling a second anonymous expression before retiring the first
    """
    pass


class EvaluationError(BackendError):
    """Failure while running compiled code, such as an unresolved extern."""
    pass
