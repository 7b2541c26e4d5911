"""
zlang Backends
==============

A backend accepts parsed top-level units and makes them runnable.
The Backend base class defines the compile / evaluate / retire calls
made by a session; InterpreterBackend implements them by lowering the
AST into Python closures.

Host functions reachable through 'extern' (putchard, printd) are
defined in zlang.backend.library.
"""

from zlang.backend.base import Backend, CompiledHandle
from zlang.backend.errors import (
    BackendError,
    LoweringError,
    UnknownVariableError,
    UnknownFunctionError,
    ArgumentCountError,
    InvalidOperatorError,
    DuplicateParameterError,
    ExpressionTooDeepError,
    HandleError,
    EvaluationError,
)
from zlang.backend.library import HostFunction, make_library
from zlang.backend.interpreter import InterpreterBackend

__all__ = [
    "Backend",
    "CompiledHandle",
    "BackendError",
    "LoweringError",
    "UnknownVariableError",
    "UnknownFunctionError",
    "ArgumentCountError",
    "InvalidOperatorError",
    "DuplicateParameterError",
    "ExpressionTooDeepError",
    "HandleError",
    "EvaluationError",
    "HostFunction",
    "make_library",
    "InterpreterBackend",
]
