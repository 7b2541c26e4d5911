"""
zlang - A Small Interactive Expression Language
===============================================

zlang is a tiny functional language in which every value is a
double-precision float. A session accepts three kinds of top-level
units, one after another:

    def fib(x) if x < 3 then 1 else fib(x-1) + fib(x-2)
    extern printd(x)
    fib(10)

Definitions and extern declarations are compiled as they arrive;
bare expressions are compiled, evaluated and discarded.

Main Components
---------------
- **frontend**: lexer, precedence table, AST, parser and session
- **backend**: the backend interface and an interpreter that runs
  lowered code in-process
- **cli**: the zlang read-eval-print command

Quick Start
-----------
Parse source into AST nodes:
    >>> from zlang import parse_source
    >>> [node.name for node in parse_source("def one() 1; extern sin(x)")]
    ['one', 'sin']

Run a session:
    >>> from zlang import Session, InterpreterBackend
    >>> session = Session("def sq(x) x*x sq(12)", backend=InterpreterBackend())
    >>> [result.value for result in session]
    [None, 144.0]

Or use the command-line tool:
    $ echo "4 + 5;" | zlang
"""

__version__ = "1.0.0"
__author__ = "zlang Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from zlang.errors import ZlangError, SourceLocation, ErrorCollector
from zlang.frontend.session import Session, SessionState, UnitKind, UnitResult
from zlang.frontend.parser import Parser, parse_source, parse_expression
from zlang.frontend.lexer import Lexer
from zlang.frontend.errors import ParseError
from zlang.backend.base import Backend, CompiledHandle
from zlang.backend.errors import BackendError
from zlang.backend.interpreter import InterpreterBackend
from zlang.config import SessionOptions

__all__ = [
    # Version
    "__version__",
    # Errors
    "ZlangError",
    "SourceLocation",
    "ErrorCollector",
    "ParseError",
    "BackendError",
    # Front end
    "Lexer",
    "Parser",
    "parse_source",
    "parse_expression",
    "Session",
    "SessionState",
    "UnitKind",
    "UnitResult",
    # Backend
    "Backend",
    "CompiledHandle",
    "InterpreterBackend",
    # Configuration
    "SessionOptions",
]
