"""
zlang Front End
===============

Turns zlang source text into abstract syntax trees:

- A streaming lexer that reads one character at a time
- A precedence table for binary operators
- Immutable AST node types with a visitor and a debug printer
- A recursive descent parser using precedence climbing

Pipeline
--------
    characters -> Lexer -> tokens -> Parser -> AST -> backend

The interactive driver that ties the parser to a backend lives in
zlang.frontend.session.

Usage
-----
>>> from zlang.frontend import parse_expression
>>> parse_expression("1 + 2 * 3")
BinaryExpr(operator='+', left=NumberExpr(value=1.0), right=BinaryExpr(operator='*', left=NumberExpr(value=2.0), right=NumberExpr(value=3.0)))
"""

from zlang.frontend.lexer import Lexer, Token, TokenType, KEYWORDS
from zlang.frontend.precedence import (
    Associativity,
    OperatorInfo,
    PrecedenceTable,
    DEFAULT_PRECEDENCE,
    NO_PRECEDENCE,
)
from zlang.frontend.ast import (
    ANONYMOUS_FUNCTION_NAME,
    ASTNode,
    ASTPrinter,
    ASTVisitor,
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
    ParseError,
    UnexpectedTokenError,
    MissingTokenError,
    MissingFunctionNameError,
    MalformedNumberError,
    NestingTooDeepError,
    ParseFailedError,
)
from zlang.frontend.parser import Parser, parse_source, parse_expression

__all__ = [
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "KEYWORDS",
    # Precedence
    "Associativity",
    "OperatorInfo",
    "PrecedenceTable",
    "DEFAULT_PRECEDENCE",
    "NO_PRECEDENCE",
    # AST
    "ANONYMOUS_FUNCTION_NAME",
    "ASTNode",
    "ASTPrinter",
    "ASTVisitor",
    "BinaryExpr",
    "CallExpr",
    "Expression",
    "ForExpr",
    "FunctionNode",
    "IfExpr",
    "NumberExpr",
    "PrototypeNode",
    "VariableExpr",
    # Errors
    "ParseError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "MissingFunctionNameError",
    "MalformedNumberError",
    "NestingTooDeepError",
    "ParseFailedError",
    # Parser
    "Parser",
    "parse_source",
    "parse_expression",
]
