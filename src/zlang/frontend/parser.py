"""
zlang Recursive Descent Parser
==============================

This module implements the parser for zlang. It pulls tokens from a
Lexer one at a time, holding only the current token, and builds AST
nodes for one top-level unit per call.

Grammar (Simplified EBNF)
-------------------------
top_level       ::= definition | extern | expression | ';'
definition      ::= 'def' prototype expression
extern          ::= 'extern' prototype
prototype       ::= IDENTIFIER '(' IDENTIFIER* ')'

expression      ::= primary binop_rhs
binop_rhs       ::= (BINOP primary)*
primary         ::= identifier_expr | NUMBER | paren_expr | if_expr | for_expr
identifier_expr ::= IDENTIFIER | IDENTIFIER '(' (expression (',' expression)*)? ')'
paren_expr      ::= '(' expression ')'
if_expr         ::= 'if' expression 'then' expression 'else' expression
for_expr        ::= 'for' IDENTIFIER '=' expression ',' expression
                    (',' expression)? 'in' expression

Binary Operators
----------------
Binary chains are resolved by precedence climbing against a
PrecedenceTable (see zlang.frontend.precedence), so the grammar has no
rule per precedence level. Any token the table does not know ends the
chain.

Error Handling
--------------
Every production either returns a node or raises a ParseError. There
is no backtracking and no partial node is ever returned; resynchronizing
after an error is left to the caller (see zlang.frontend.session).

Nesting is bounded by max_depth (MAX_NESTING_DEPTH by default), so
deeply nested input fails with NestingTooDeepError instead of
exhausting the Python stack.

Example Usage
-------------
>>> from zlang.frontend.lexer import Lexer
>>> from zlang.frontend.parser import Parser
>>> parser = Parser(Lexer("def add(a b) a + b"))
>>> parser.advance()
Token(DEF, 'def', 1:1)
>>> parser.parse_definition().name
'add'
"""

from typing import Optional, TextIO
import logging

from zlang.errors import ErrorCollector
from zlang.frontend.ast import (
    ANONYMOUS_FUNCTION_NAME,
    ASTNode,
    BinaryExpr,
    CallExpr,
    Expression,
    ForExpr,
    FunctionNode,
    IfExpr,
    NumberExpr,
    PrototypeNode,
    VariableExpr,
)
from zlang.frontend.errors import (
    MalformedNumberError,
    MissingFunctionNameError,
    MissingTokenError,
    NestingTooDeepError,
    ParseError,
    ParseFailedError,
    UnexpectedTokenError,
)
from zlang.frontend.lexer import Lexer, Token, TokenType
from zlang.frontend.precedence import DEFAULT_PRECEDENCE, PrecedenceTable

logger = logging.getLogger(__name__)


# Deepest expression nesting the parser accepts; each level costs a few
# Python frames.
MAX_NESTING_DEPTH = 100


class Parser:
    """
    Recursive descent parser for zlang.

    The parser owns exactly one piece of mutable state, the current
    token. It must be primed with advance() before the first
    production is called.

    Attributes:
        lexer: Token source
        precedence: Binary operator table, read-only
        current: The current (not yet consumed) token, None until primed
        max_depth: Deepest expression nesting accepted
    """

    def __init__(
        self,
        lexer: Lexer,
        precedence: Optional[PrecedenceTable] = None,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        """
        Initialize the parser.

        Args:
            lexer: The lexer to pull tokens from
            precedence: Operator table (defaults to DEFAULT_PRECEDENCE)
            max_depth: Deepest expression nesting accepted
        """
        self.lexer = lexer
        self.precedence = precedence if precedence is not None else DEFAULT_PRECEDENCE
        self.max_depth = max_depth
        self.current: Optional[Token] = None
        self._depth = 0

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def advance(self) -> Token:
        """Read the next token from the lexer and make it current."""
        self.current = self.lexer.next_token()
        logger.debug(f"token {self.current!r}")
        return self.current

    def _check_symbol(self, char: str) -> bool:
        """Check if the current token is the given symbol."""
        return self.current.is_symbol(char)

    def _found(self) -> str:
        """Describe the current token for diagnostics."""
        return self.current.describe()

    def _expect_symbol(self, char: str, description: Optional[str] = None) -> Token:
        """
        Expect and consume a specific symbol.

        Args:
            char: The expected symbol character
            description: What to call it in the error message

        Returns:
            The consumed token

        Raises:
            MissingTokenError: If the symbol is not found
        """
        if self._check_symbol(char):
            token = self.current
            self.advance()
            return token

        raise MissingTokenError(
            description or f"'{char}'",
            found=self._found(),
            location=self.current.location,
        )

    def _expect(self, token_type: TokenType, description: str) -> Token:
        """
        Expect and consume a token of a specific type.

        Raises:
            MissingTokenError: If the current token has another type
        """
        if self.current.type == token_type:
            token = self.current
            self.advance()
            return token

        raise MissingTokenError(
            description,
            found=self._found(),
            location=self.current.location,
        )

    # =========================================================================
    # Primary Expressions
    # =========================================================================

    def parse_primary(self) -> Expression:
        """
        Parse a primary expression, dispatching on the current token.

        Raises:
            UnexpectedTokenError: If the token cannot start an expression
        """
        token = self.current

        if token.type == TokenType.IDENTIFIER:
            return self.parse_identifier_expr()
        if token.type == TokenType.NUMBER:
            return self.parse_number_expr()
        if token.is_symbol("("):
            return self.parse_paren_expr()
        if token.type == TokenType.IF:
            return self.parse_if_expr()
        if token.type == TokenType.FOR:
            return self.parse_for_expr()

        raise UnexpectedTokenError(token.describe(), location=token.location)

    def parse_number_expr(self) -> NumberExpr:
        """
        Parse a numeric literal.

        Raises:
            MalformedNumberError: If the literal text is not a valid float
        """
        token = self.current
        if token.value is None:
            raise MalformedNumberError(token.lexeme, location=token.location)

        self.advance()
        return NumberExpr(token.value, location=token.location)

    def parse_paren_expr(self) -> Expression:
        """
        Parse a parenthesized expression: '(' expression ')'.

        Parentheses only group; no node is created for them.
        """
        self.advance()  # consume '('
        expr = self.parse_expression()
        self._expect_symbol(")")
        return expr

    def parse_identifier_expr(self) -> Expression:
        """
        Parse a variable reference or a function call.

        An identifier followed by '(' is a call; its arguments are full
        expressions separated by commas.
        """
        token = self.current
        name = token.value
        self.advance()  # consume identifier

        if not self._check_symbol("("):
            return VariableExpr(name, location=token.location)

        self.advance()  # consume '('
        arguments = []
        if not self._check_symbol(")"):
            while True:
                arguments.append(self.parse_expression())

                if self._check_symbol(")"):
                    break

                if not self._check_symbol(","):
                    raise MissingTokenError(
                        "')' or ',' in argument list",
                        found=self._found(),
                        location=self.current.location,
                    )
                self.advance()  # consume ','

        self.advance()  # consume ')'
        return CallExpr(name, tuple(arguments), location=token.location)

    # =========================================================================
    # Control Flow Expressions
    # =========================================================================

    def parse_if_expr(self) -> IfExpr:
        """Parse: 'if' expression 'then' expression 'else' expression."""
        token = self.current
        self.advance()  # consume 'if'

        condition = self.parse_expression()
        self._expect(TokenType.THEN, "'then'")
        then_branch = self.parse_expression()
        self._expect(TokenType.ELSE, "'else'")
        else_branch = self.parse_expression()

        return IfExpr(condition, then_branch, else_branch, location=token.location)

    def parse_for_expr(self) -> ForExpr:
        """
        Parse: 'for' IDENTIFIER '=' start ',' end (',' step)? 'in' body.

        A missing step is kept as None rather than replaced by a literal.
        """
        token = self.current
        self.advance()  # consume 'for'

        variable = self._expect(TokenType.IDENTIFIER, "identifier after 'for'").value
        self._expect_symbol("=", "'=' after 'for'")

        start = self.parse_expression()
        self._expect_symbol(",", "',' after for start value")
        end = self.parse_expression()

        step = None
        if self._check_symbol(","):
            self.advance()
            step = self.parse_expression()

        self._expect(TokenType.IN, "'in' after 'for'")
        body = self.parse_expression()

        return ForExpr(variable, start, end, step, body, location=token.location)

    # =========================================================================
    # Binary Expressions (Precedence Climbing)
    # =========================================================================

    def parse_expression(self) -> Expression:
        """
        Parse a primary followed by any chain of binary operators.

        Raises:
            NestingTooDeepError: If expressions are nested more than
                                 max_depth levels deep
        """
        if self._depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth, location=self.current.location)

        self._depth += 1
        try:
            lhs = self.parse_primary()
            return self.parse_binop_rhs(0, lhs)
        finally:
            self._depth -= 1

    def parse_binop_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Absorb binary operators binding at least as tightly as min_precedence.

        Each pass consumes one operator and its right operand. If the
        operator after that binds more tightly, it takes the right operand
        first by recursing with a higher minimum. Equal precedence
        therefore groups to the left: 1 - 2 - 3 is (1 - 2) - 3.

        Args:
            min_precedence: Weakest operator this call may consume
            lhs: Expression parsed so far

        Returns:
            The combined expression
        """
        while True:
            token_precedence = self.precedence.precedence_of(self.current)
            if token_precedence < min_precedence:
                return lhs

            operator = self.current
            self.advance()  # consume operator

            rhs = self.parse_primary()

            next_precedence = self.precedence.precedence_of(self.current)
            if token_precedence < next_precedence:
                rhs = self.parse_binop_rhs(token_precedence + 1, rhs)

            lhs = BinaryExpr(operator.value, lhs, rhs, location=operator.location)

    # =========================================================================
    # Top-Level Units
    # =========================================================================

    def parse_prototype(self) -> PrototypeNode:
        """
        Parse: IDENTIFIER '(' IDENTIFIER* ')'.

        Parameter names are separated by whitespace only.

        Raises:
            MissingFunctionNameError: If the prototype has no name
            MissingTokenError: If '(' or ')' is missing
        """
        token = self.current
        if token.type != TokenType.IDENTIFIER:
            raise MissingFunctionNameError(found=self._found(), location=token.location)
        name = token.value
        self.advance()

        self._expect_symbol("(", "'(' in prototype")

        parameters = []
        while self.current.type == TokenType.IDENTIFIER:
            parameters.append(self.current.value)
            self.advance()

        self._expect_symbol(")", "')' in prototype")

        return PrototypeNode(name, tuple(parameters), location=token.location)

    def parse_definition(self) -> FunctionNode:
        """Parse: 'def' prototype expression."""
        token = self.current
        self.advance()  # consume 'def'

        prototype = self.parse_prototype()
        body = self.parse_expression()
        return FunctionNode(prototype, body, location=token.location)

    def parse_extern(self) -> PrototypeNode:
        """Parse: 'extern' prototype."""
        self.advance()  # consume 'extern'
        return self.parse_prototype()

    def parse_top_level_expr(self) -> FunctionNode:
        """
        Parse a bare expression and wrap it in an anonymous function.

        The wrapper always has the same name and no parameters.
        """
        location = self.current.location
        body = self.parse_expression()
        prototype = PrototypeNode(ANONYMOUS_FUNCTION_NAME, (), location=location)
        return FunctionNode(prototype, body, location=location)

    def parse_top_level(self) -> ASTNode:
        """
        Parse one definition, extern or bare expression.

        The current token must not be ';' or EOF.
        """
        if self.current.type == TokenType.DEF:
            return self.parse_definition()
        if self.current.type == TokenType.EXTERN:
            return self.parse_extern()
        return self.parse_top_level_expr()


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str | TextIO,
    filename: str = "<input>",
    precedence: Optional[PrecedenceTable] = None,
) -> list[ASTNode]:
    """
    Parse a whole source into its top-level nodes.

    Every unit is parsed; after a failed unit one token is skipped and
    parsing continues, so all errors are reported together.

    Args:
        source: Source text or text stream
        filename: Source filename for error messages
        precedence: Operator table (defaults to DEFAULT_PRECEDENCE)

    Returns:
        FunctionNode and PrototypeNode objects in source order

    Raises:
        ParseFailedError: If any unit failed to parse
    """
    parser = Parser(Lexer(source, filename), precedence)
    parser.advance()

    nodes: list[ASTNode] = []
    errors = ErrorCollector()

    while parser.current.type != TokenType.EOF:
        if parser.current.is_symbol(";"):
            parser.advance()
            continue
        try:
            nodes.append(parser.parse_top_level())
        except ParseError as e:
            errors.add(e)
            parser.advance()

    if errors.has_errors():
        raise ParseFailedError(errors.report())

    return nodes


def parse_expression(text: str, precedence: Optional[PrecedenceTable] = None) -> Expression:
    """
    Parse a single expression.

    Args:
        text: Expression source, e.g. "1 + 2 * 3"
        precedence: Operator table (defaults to DEFAULT_PRECEDENCE)

    Returns:
        The expression's AST

    Raises:
        ParseError: If the text is not exactly one expression
    """
    parser = Parser(Lexer(text, "<expr>"), precedence)
    parser.advance()
    expr = parser.parse_expression()

    if parser.current.type != TokenType.EOF:
        raise MissingTokenError(
            "end of expression",
            found=parser.current.describe(),
            location=parser.current.location,
        )

    return expr
