"""
zlang Interactive Session
=========================

A Session drives the lexer and parser over a character source one
top-level unit at a time and hands every successfully parsed unit to a
backend. It is the read-eval loop without any terminal handling; the
zlang command line tool adds the prompt and the messages.

Top-Level Units
---------------
The current token alone decides what happens next:

    end of input  -> the session is done
    ';'           -> consumed, produces no node
    'def'         -> function definition
    'extern'      -> extern declaration
    anything else -> bare expression, wrapped in an anonymous function

Error Recovery
--------------
When a unit fails to parse, the error is recorded, exactly one token
is skipped and the session carries on with the next unit. Nothing from
the failed unit reaches the backend. This always makes progress, at
the cost of a few follow-on errors until the input lines up with the
start of a unit again.

Backend Protocol
----------------
For each parsed unit the session calls backend.compile(node). For an
anonymous expression it then calls backend.evaluate(handle) (unless
evaluation is disabled) and always backend.retire(handle), before the
next unit is parsed. BackendError is recorded like a parse error; any
other exception is a bug and propagates.

Example Usage
-------------
>>> from zlang.frontend.session import Session
>>> from zlang.backend.interpreter import InterpreterBackend
>>> session = Session("def sq(x) x*x; sq(4)", backend=InterpreterBackend())
>>> [result.kind.name for result in session]
['DEFINITION', 'SEPARATOR', 'EXPRESSION']
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterator, Optional, TextIO, Union
import logging

from zlang.backend.errors import BackendError
from zlang.config import SessionOptions
from zlang.errors import ErrorCollector, ZlangError
from zlang.frontend.ast import ASTNode
from zlang.frontend.errors import ParseError
from zlang.frontend.lexer import Lexer, TokenType
from zlang.frontend.parser import Parser
from zlang.frontend.precedence import PrecedenceTable

if TYPE_CHECKING:
    from zlang.backend.base import Backend, CompiledHandle

logger = logging.getLogger(__name__)


# =============================================================================
# Session State and Results
# =============================================================================

class SessionState(Enum):
    """Where a session is in its input."""
    START = auto()          # No token read yet
    AWAITING_UNIT = auto()  # Current token starts the next unit
    DONE = auto()           # End of input reached (terminal)


class UnitKind(Enum):
    """Classification of a top-level unit."""
    DEFINITION = auto()
    EXTERN = auto()
    EXPRESSION = auto()
    SEPARATOR = auto()


@dataclass
class UnitResult:
    """
    Outcome of one top-level unit.

    Attributes:
        kind: What kind of unit it was
        node: The parsed node (None for separators and parse failures)
        error: The parse or backend error, if the unit failed
        handle: Backend handle, when the unit compiled
        value: Result of evaluating an anonymous expression
    """
    kind: UnitKind
    node: Optional[ASTNode] = None
    error: Optional[ZlangError] = None
    handle: Optional["CompiledHandle"] = None
    value: Optional[float] = None

    @property
    def ok(self) -> bool:
        """True if the unit parsed and, when a backend is attached, compiled."""
        return self.error is None

    @property
    def name(self) -> Optional[str]:
        """Name of the defined, declared or anonymous function."""
        return getattr(self.node, "name", None)


# =============================================================================
# Session
# =============================================================================

class Session:
    """
    One interactive session: a Lexer/Parser pair plus an optional backend.

    Sessions share no state with each other. Without a backend a session
    only parses, which is what the --ast mode of the CLI uses.

    Usage:
        session = Session(sys.stdin, backend=InterpreterBackend())
        for result in session:
            if result.error:
                print(result.error)

    Attributes:
        backend: Receiver of parsed units (optional)
        options: Session configuration
        errors: Every error recorded so far
        state: Current SessionState
    """

    def __init__(
        self,
        source: Union[str, TextIO],
        backend: Optional["Backend"] = None,
        options: Optional[SessionOptions] = None,
        filename: Optional[str] = None,
        precedence: Optional[PrecedenceTable] = None,
    ):
        """
        Initialize the session.

        Args:
            source: Source text or text stream
            backend: Backend to compile units with (None parses only)
            options: Session configuration (default: SessionOptions())
            filename: Name of the source for error messages
            precedence: Operator table (default: options.build_precedence())
        """
        self.backend = backend
        self.options = options if options is not None else SessionOptions()

        if filename is None:
            filename = getattr(source, "name", None) if not isinstance(source, str) else None
            filename = filename or "<input>"

        if precedence is None:
            precedence = self.options.build_precedence()

        self.lexer = Lexer(source, filename)
        self.parser = Parser(self.lexer, precedence)
        self.errors = ErrorCollector(self.options.max_errors)
        self.state = SessionState.START

    def __iter__(self) -> Iterator[UnitResult]:
        """Yield the result of each unit until end of input."""
        while True:
            result = self.step()
            if result is None:
                return
            yield result

    def run(self) -> ErrorCollector:
        """Process the whole source and return the collected errors."""
        for _ in self:
            pass
        return self.errors

    @property
    def done(self) -> bool:
        return self.state == SessionState.DONE

    def step(self) -> Optional[UnitResult]:
        """
        Process exactly one top-level unit.

        Returns:
            The unit's result, or None once end of input is reached
        """
        if self.state == SessionState.DONE:
            return None

        if self.state == SessionState.START:
            self.parser.advance()
            self.state = SessionState.AWAITING_UNIT

        token = self.parser.current

        if token.type == TokenType.EOF:
            logger.debug("end of input, session done")
            self.state = SessionState.DONE
            return None

        if token.is_symbol(";"):
            self.parser.advance()
            return UnitResult(UnitKind.SEPARATOR)

        if token.type == TokenType.DEF:
            kind, production = UnitKind.DEFINITION, self.parser.parse_definition
        elif token.type == TokenType.EXTERN:
            kind, production = UnitKind.EXTERN, self.parser.parse_extern
        else:
            kind, production = UnitKind.EXPRESSION, self.parser.parse_top_level_expr

        try:
            node = production()
        except ParseError as e:
            logger.debug(f"parse failed at {token.location}, skipping one token")
            self.errors.add(e)
            self.parser.advance()
            return UnitResult(kind, error=e)

        logger.debug(f"parsed {kind.name.lower()} {getattr(node, 'name', '')}")
        result = UnitResult(kind, node=node)

        if self.backend is not None:
            self._dispatch(result)

        return result

    # =========================================================================
    # Backend Dispatch
    # =========================================================================

    def _dispatch(self, result: UnitResult) -> None:
        """Compile a parsed unit and run it if it is an anonymous expression."""
        try:
            result.handle = self.backend.compile(result.node)
        except BackendError as e:
            self.errors.add(e)
            result.error = e
            return

        if result.kind != UnitKind.EXPRESSION:
            return

        try:
            if self.options.evaluate_expressions:
                result.value = self.backend.evaluate(result.handle)
        except BackendError as e:
            self.errors.add(e)
            result.error = e
        finally:
            self.backend.retire(result.handle)
