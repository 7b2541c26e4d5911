"""
zlang Abstract Syntax Tree (AST) Definitions
============================================

This module defines the AST node types produced by the zlang parser.
Every value in zlang is a double-precision float, so nodes carry no
type information.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions
│   ├── NumberExpr - numeric literal
│   ├── VariableExpr - parameter or loop variable reference
│   ├── BinaryExpr - binary operator application
│   ├── CallExpr - function call
│   ├── IfExpr - if/then/else (both branches required)
│   └── ForExpr - for/in loop with optional step
├── PrototypeNode - function name and parameter names
└── FunctionNode - prototype plus body expression

Design Notes
------------
- All nodes are frozen dataclasses; sequences are tuples, so a tree
  cannot be modified once built
- Each node may carry its source location; it is ignored by equality
  so trees can be compared structurally
- Nodes have no lowering behaviour. Backends walk the tree with an
  ASTVisitor, keeping this module free of backend dependencies
"""

from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from typing import Any, Iterator, Optional

from zlang.errors import SourceLocation


# Name given to the function that wraps a bare top-level expression.
# '_' never appears in an identifier, so no user function can use it.
ANONYMOUS_FUNCTION_NAME = "__anon_expr"


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts (optional,
                  keyword-only, not part of equality)
    """
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True
    )


@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for all expression nodes. Every expression yields a float."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberExpr(Expression):
    """
    Numeric literal.

    Example: 1.0, 42, .5
    """
    value: float


@dataclass(frozen=True)
class VariableExpr(Expression):
    """
    Reference to a parameter or loop variable.

    The parser does not check the name exists; that happens at lowering.
    """
    name: str


@dataclass(frozen=True)
class BinaryExpr(Expression):
    """
    Binary operator application.

    Attributes:
        operator: The operator character ('+', '<', ...)
        left: Left operand
        right: Right operand
    """
    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class CallExpr(Expression):
    """
    Function call.

    Attributes:
        callee: Name of the function being called
        arguments: Argument expressions in source order
    """
    callee: str
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class IfExpr(Expression):
    """
    Conditional expression: if cond then a else b.

    The condition is true when it is not 0.0.
    """
    condition: Expression
    then_branch: Expression
    else_branch: Expression


@dataclass(frozen=True)
class ForExpr(Expression):
    """
    Loop expression: for var = start, end[, step] in body.

    Attributes:
        variable: Induction variable name
        start: Initial value
        end: Loop condition, evaluated each iteration
        step: Increment, or None when omitted (backends default to 1.0)
        body: Loop body
    """
    variable: str
    start: Expression
    end: Expression
    step: Optional[Expression]
    body: Expression


# =============================================================================
# Top-Level Nodes
# =============================================================================

@dataclass(frozen=True)
class PrototypeNode(ASTNode):
    """
    Function signature: name and parameter names.

    Used on its own for 'extern' declarations and inside FunctionNode
    for definitions. Duplicate parameter names are not rejected here.
    """
    name: str
    parameters: tuple[str, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def is_anonymous(self) -> bool:
        return self.name == ANONYMOUS_FUNCTION_NAME


@dataclass(frozen=True)
class FunctionNode(ASTNode):
    """
    Function definition.

    Represents either a 'def' or the anonymous wrapper around a bare
    top-level expression.
    """
    prototype: PrototypeNode
    body: Expression

    @property
    def name(self) -> str:
        return self.prototype.name

    @property
    def is_anonymous(self) -> bool:
        return self.prototype.is_anonymous


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for tree walkers.

    visit() calls visit_<ClassName> when the subclass defines it and
    generic_visit() otherwise. The default generic_visit() descends into
    every child node, so a walker only overrides the node types it
    needs:

        class NameCollector(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_VariableExpr(self, node):
                self.names.append(node.name)
    """

    def visit(self, node: ASTNode) -> Any:
        handler = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return handler(node)

    def generic_visit(self, node: ASTNode) -> None:
        for child in _children(node):
            self.visit(child)


def _children(node: ASTNode) -> Iterator[ASTNode]:
    """Yield the direct child nodes of node in field order."""
    for node_field in fields(node):
        value = getattr(node, node_field.name)
        items = value if isinstance(value, tuple) else (value,)
        for item in items:
            if isinstance(item, ASTNode):
                yield item


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Indented dump of a tree, one node per line.

    >>> print(ASTPrinter().print(BinaryExpr("+", NumberExpr(1.0), VariableExpr("x"))))
    Binary: +
      Number: 1
      Variable: x
    """

    def __init__(self):
        self.lines: list[str] = []
        self.depth = 0

    def print(self, node: ASTNode) -> str:
        self.lines = []
        self.depth = 0
        self.visit(node)
        return "\n".join(self.lines)

    def _emit(self, text: str) -> None:
        self.lines.append("  " * self.depth + text)

    @contextmanager
    def _nested(self, heading: Optional[str] = None):
        """Emit an optional heading, then indent what follows one level."""
        if heading is not None:
            self._emit(heading)
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def _labelled(self, label: str, node: ASTNode) -> None:
        with self._nested(f"{label}:"):
            self.visit(node)

    def visit_FunctionNode(self, node: FunctionNode):
        with self._nested(f"Function: {node.name}({' '.join(node.prototype.parameters)})"):
            self.visit(node.body)

    def visit_PrototypeNode(self, node: PrototypeNode):
        self._emit(f"Extern: {node.name}({' '.join(node.parameters)})")

    def visit_NumberExpr(self, node: NumberExpr):
        self._emit(f"Number: {node.value:g}")

    def visit_VariableExpr(self, node: VariableExpr):
        self._emit(f"Variable: {node.name}")

    def visit_BinaryExpr(self, node: BinaryExpr):
        with self._nested(f"Binary: {node.operator}"):
            self.visit(node.left)
            self.visit(node.right)

    def visit_CallExpr(self, node: CallExpr):
        with self._nested(f"Call: {node.callee} ({len(node.arguments)} args)"):
            for argument in node.arguments:
                self.visit(argument)

    def visit_IfExpr(self, node: IfExpr):
        with self._nested("If"):
            self._labelled("Cond", node.condition)
            self._labelled("Then", node.then_branch)
            self._labelled("Else", node.else_branch)

    def visit_ForExpr(self, node: ForExpr):
        with self._nested(f"For: {node.variable}"):
            self._labelled("Start", node.start)
            self._labelled("End", node.end)
            if node.step is not None:
                self._labelled("Step", node.step)
            self._labelled("Body", node.body)
