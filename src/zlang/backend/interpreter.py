"""
zlang Interpreter Backend
=========================

Executes zlang by lowering each function body into a tree of Python
closures. Lowering happens once, at compile time, and performs every
check that does not depend on runtime values:

- Variable references must name a parameter or an enclosing loop variable
- Called functions must already be defined or declared with 'extern'
- Calls must pass as many arguments as the callee's prototype declares
- Binary operators must be one of + - * / < >
- Parameter names must be unique within a prototype
- The body must be shallow enough to walk without exhausting the stack

Runtime Semantics
-----------------
All values are IEEE doubles. Division by zero yields inf or nan
rather than raising. '<' and '>' yield 1.0 or 0.0 and are true when
either operand is nan (unordered comparison). Conditions of 'if' and
'for' are true when the value is neither 0.0 nor nan.

A 'for' loop binds its variable to the start value and then repeats:
run the body, compute the step (1.0 when omitted), evaluate the end
condition with the current value, stop when it is false, otherwise
continue with value + step. The loop itself evaluates to 0.0 and any
variable it shadowed is visible again afterwards.

Calls are resolved by name when they run, so a function may call
itself or a function that is redefined later. Functions that were
only declared with 'extern' resolve against the host library
(see zlang.backend.library).

Example Usage
-------------
>>> from zlang.backend.interpreter import InterpreterBackend
>>> from zlang.frontend.parser import parse_source
>>> backend = InterpreterBackend()
>>> for node in parse_source("def double(x) x * 2"):
...     handle = backend.compile(node)
>>> anon, = parse_source("double(21)")
>>> handle = backend.compile(anon)
>>> backend.evaluate(handle)
42.0
>>> backend.retire(handle)
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TextIO, Union
import logging
import math

from zlang.backend.base import Backend, CompiledHandle
from zlang.backend.errors import (
    ArgumentCountError,
    DuplicateParameterError,
    EvaluationError,
    ExpressionTooDeepError,
    HandleError,
    InvalidOperatorError,
    LoweringError,
    UnknownFunctionError,
    UnknownVariableError,
)
from zlang.backend.library import HostFunction, make_library
from zlang.frontend.ast import (
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

logger = logging.getLogger(__name__)


# Lowered code: takes the variable bindings of the current call, returns a value
Code = Callable[[Dict[str, float]], float]

_UNBOUND = object()


# =============================================================================
# Operator Semantics
# =============================================================================

def _divide(left: float, right: float) -> float:
    """IEEE division: x/0 is +-inf, 0/0 and nan/0 are nan."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _less(left: float, right: float) -> float:
    return 0.0 if left >= right else 1.0


def _greater(left: float, right: float) -> float:
    return 0.0 if left <= right else 1.0


BINARY_OPERATORS: Dict[str, Callable[[float, float], float]] = {
    "+": lambda left, right: left + right,
    "-": lambda left, right: left - right,
    "*": lambda left, right: left * right,
    "/": _divide,
    "<": _less,
    ">": _greater,
}


def is_true(value: float) -> bool:
    """Truth of a condition: ordered and not equal to 0.0."""
    return value == value and value != 0.0


# =============================================================================
# Compiled Function Record
# =============================================================================

@dataclass
class CompiledFunction:
    """
    A function with a lowered body.

    Attributes:
        prototype: Name and parameters
        body: Lowered body
        handle: Handle returned when it was compiled
    """
    prototype: PrototypeNode
    body: Code
    handle: CompiledHandle


# =============================================================================
# Lowering
# =============================================================================

class Lowering(ASTVisitor):
    """
    Turns an expression tree into closures.

    Each visit_* method returns Code. Names in scope are tracked as a
    stack so loop variables can shadow parameters.
    """

    def __init__(self, backend: "InterpreterBackend", prototype: PrototypeNode):
        self.backend = backend
        self.prototype = prototype
        self.scope: List[str] = list(prototype.parameters)

    def lower(self, node: Expression) -> Code:
        try:
            return self.visit(node)
        except RecursionError:
            raise ExpressionTooDeepError(self.prototype.name, location=node.location) from None

    def generic_visit(self, node):
        raise LoweringError(
            f"cannot lower {node.__class__.__name__}",
            location=node.location,
        )

    def visit_NumberExpr(self, node: NumberExpr) -> Code:
        value = node.value
        return lambda env: value

    def visit_VariableExpr(self, node: VariableExpr) -> Code:
        name = node.name
        if name not in self.scope:
            raise UnknownVariableError(name, location=node.location)
        return lambda env: env[name]

    def visit_BinaryExpr(self, node: BinaryExpr) -> Code:
        operation = BINARY_OPERATORS.get(node.operator)
        if operation is None:
            raise InvalidOperatorError(node.operator, location=node.location)

        left = self.visit(node.left)
        right = self.visit(node.right)
        return lambda env: operation(left(env), right(env))

    def visit_CallExpr(self, node: CallExpr) -> Code:
        callee = node.callee
        prototype = self.backend.lookup_prototype(callee)
        if prototype is None:
            raise UnknownFunctionError(callee, location=node.location)
        if prototype.arity != len(node.arguments):
            raise ArgumentCountError(
                callee, prototype.arity, len(node.arguments), location=node.location
            )

        arguments = [self.visit(argument) for argument in node.arguments]
        call = self.backend.call_function
        return lambda env: call(callee, [argument(env) for argument in arguments])

    def visit_IfExpr(self, node: IfExpr) -> Code:
        condition = self.visit(node.condition)
        then_branch = self.visit(node.then_branch)
        else_branch = self.visit(node.else_branch)

        def run_if(env: Dict[str, float]) -> float:
            if is_true(condition(env)):
                return then_branch(env)
            return else_branch(env)

        return run_if

    def visit_ForExpr(self, node: ForExpr) -> Code:
        variable = node.variable

        # The start value is computed before the variable is in scope
        start = self.visit(node.start)

        self.scope.append(variable)
        try:
            body = self.visit(node.body)
            step = self.visit(node.step) if node.step is not None else None
            end = self.visit(node.end)
        finally:
            self.scope.pop()

        def run_for(env: Dict[str, float]) -> float:
            value = start(env)
            shadowed = env.get(variable, _UNBOUND)
            env[variable] = value
            try:
                while True:
                    body(env)
                    increment = step(env) if step is not None else 1.0
                    next_value = env[variable] + increment
                    if not is_true(end(env)):
                        break
                    env[variable] = next_value
            finally:
                if shadowed is _UNBOUND:
                    del env[variable]
                else:
                    env[variable] = shadowed
            return 0.0

        return run_for


# =============================================================================
# Backend
# =============================================================================

class InterpreterBackend(Backend):
    """
    Backend that runs zlang in the Python process.

    Functions live in a single table keyed by name; compiling a
    definition with an existing name replaces it. At most one anonymous
    expression may be compiled at a time, and it must be retired before
    the next one is compiled.

    Attributes:
        library: Host functions available to 'extern' declarations
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        library: Optional[Dict[str, HostFunction]] = None,
    ):
        """
        Initialize the backend.

        Args:
            output: Stream for host library output (default: stderr)
            library: Host symbol table (default: make_library(output))
        """
        self.library = library if library is not None else make_library(output)

        self._prototypes: Dict[str, PrototypeNode] = {}
        self._functions: Dict[str, CompiledFunction] = {}
        self._handles: Dict[str, CompiledHandle] = {}
        self._live_anonymous: Optional[CompiledHandle] = None
        self._serial = 0

    # =========================================================================
    # Backend Interface
    # =========================================================================

    def compile(self, node: Union[FunctionNode, PrototypeNode]) -> CompiledHandle:
        """
        Compile a definition, extern declaration or anonymous wrapper.

        Raises:
            LoweringError: If the unit is rejected
            HandleError: If an anonymous expression is still live
        """
        if isinstance(node, PrototypeNode):
            return self._compile_extern(node)
        if isinstance(node, FunctionNode):
            return self._compile_function(node)
        raise LoweringError(f"cannot compile {node.__class__.__name__}")

    def evaluate(self, handle: CompiledHandle) -> float:
        """
        Run a compiled zero-argument function.

        Raises:
            HandleError: If the handle is stale or takes arguments
            EvaluationError: If running the code fails
        """
        self._check_live(handle)
        if handle.arity != 0:
            raise HandleError(
                f"cannot evaluate '{handle.name}': it takes {handle.arity} argument(s)"
            )

        try:
            value = self.call_function(handle.name, [])
        except RecursionError as e:
            raise EvaluationError(f"recursion too deep in '{handle.name}'") from e

        logger.debug(f"evaluated {handle.name} -> {value!r}")
        return value

    def retire(self, handle: CompiledHandle) -> None:
        """
        Remove a compiled function or declaration.

        Raises:
            HandleError: If the handle was already retired or replaced
        """
        self._check_live(handle)

        del self._handles[handle.name]
        self._prototypes.pop(handle.name, None)
        self._functions.pop(handle.name, None)
        if self._live_anonymous == handle:
            self._live_anonymous = None

        logger.debug(f"retired {handle.name} (#{handle.serial})")

    # =========================================================================
    # Lookup and Calls
    # =========================================================================

    def lookup_prototype(self, name: str) -> Optional[PrototypeNode]:
        """Return the prototype declared or defined under a name, or None."""
        return self._prototypes.get(name)

    def is_defined(self, name: str) -> bool:
        """True if the name has a compiled body (not only an extern)."""
        return name in self._functions

    def call_function(self, name: str, arguments: List[float]) -> float:
        """
        Call a function by name with already evaluated arguments.

        Defined functions take priority over the host library.

        Raises:
            EvaluationError: If the name cannot be resolved or the
                             argument count does not match
        """
        function = self._functions.get(name)
        if function is not None:
            parameters = function.prototype.parameters
            if len(parameters) != len(arguments):
                raise EvaluationError(
                    f"'{name}' takes {len(parameters)} argument(s), got {len(arguments)}"
                )
            return function.body(dict(zip(parameters, arguments)))

        host = self.library.get(name)
        if host is None:
            raise EvaluationError(
                f"unresolved external symbol '{name}'",
                hint="only host library functions can be used without a definition",
            )
        if host.arity != len(arguments):
            raise EvaluationError(
                f"host function '{name}' takes {host.arity} argument(s), got {len(arguments)}"
            )

        try:
            return float(host.function(*arguments))
        except (ValueError, OverflowError) as e:
            raise EvaluationError(f"host function '{name}' failed: {e}") from e

    # =========================================================================
    # Compilation Helpers
    # =========================================================================

    def _compile_extern(self, prototype: PrototypeNode) -> CompiledHandle:
        self._check_parameters(prototype)

        existing = self._functions.get(prototype.name)
        if existing is not None and existing.prototype.arity != prototype.arity:
            del self._functions[prototype.name]

        self._prototypes[prototype.name] = prototype
        handle = self._new_handle(prototype)
        logger.debug(f"declared extern {prototype.name}/{prototype.arity}")
        return handle

    def _compile_function(self, node: FunctionNode) -> CompiledHandle:
        prototype = node.prototype

        if prototype.is_anonymous and self._live_anonymous is not None:
            raise HandleError(
                f"'{prototype.name}' is still live and must be retired first",
                location=node.location,
            )

        self._check_parameters(prototype)

        # Register the prototype before lowering so the body can call itself
        previous = self._prototypes.get(prototype.name)
        self._prototypes[prototype.name] = prototype
        try:
            body = Lowering(self, prototype).lower(node.body)
        except LoweringError:
            if previous is None:
                del self._prototypes[prototype.name]
            else:
                self._prototypes[prototype.name] = previous
            raise

        handle = self._new_handle(prototype)
        self._functions[prototype.name] = CompiledFunction(prototype, body, handle)
        if prototype.is_anonymous:
            self._live_anonymous = handle

        logger.debug(f"compiled {prototype.name}/{prototype.arity} (#{handle.serial})")
        return handle

    def _check_parameters(self, prototype: PrototypeNode) -> None:
        """Reject prototypes that repeat a parameter name."""
        seen = set()
        for parameter in prototype.parameters:
            if parameter in seen:
                raise DuplicateParameterError(
                    prototype.name, parameter, location=prototype.location
                )
            seen.add(parameter)

    def _new_handle(self, prototype: PrototypeNode) -> CompiledHandle:
        self._serial += 1
        handle = CompiledHandle(
            name=prototype.name,
            arity=prototype.arity,
            anonymous=prototype.is_anonymous,
            serial=self._serial,
        )
        self._handles[prototype.name] = handle
        return handle

    def _check_live(self, handle: CompiledHandle) -> None:
        if self._handles.get(handle.name) != handle:
            raise HandleError(f"handle for '{handle.name}' (#{handle.serial}) is no longer live")
