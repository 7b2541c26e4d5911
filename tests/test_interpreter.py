"""
Interpreter Backend Test Suite
==============================

Tests for lowering and evaluating zlang with InterpreterBackend.

Test Organization
-----------------
- TestArithmetic: operators and IEEE behaviour
- TestFunctions: definitions, calls and recursion
- TestControlFlow: if and for semantics
- TestLoweringErrors: compile-time rejection
- TestHandles: compile / evaluate / retire contract
- TestLibrary: putchard and printd
"""

import io
import math

import pytest
from zlang.backend.errors import (
    ArgumentCountError,
    BackendError,
    DuplicateParameterError,
    EvaluationError,
    ExpressionTooDeepError,
    HandleError,
    InvalidOperatorError,
    UnknownFunctionError,
    UnknownVariableError,
)
from zlang.backend.interpreter import InterpreterBackend, is_true
from zlang.backend.library import make_library
from zlang.frontend.ast import FunctionNode
from zlang.frontend.parser import parse_source
from zlang.frontend.precedence import DEFAULT_PRECEDENCE


# =============================================================================
# Helpers
# =============================================================================

def run(source: str, backend: InterpreterBackend = None) -> list:
    """
    Compile every unit of source and evaluate the anonymous ones.

    Returns:
        Values of the top-level expressions in order
    """
    backend = backend or InterpreterBackend(output=io.StringIO())
    values = []
    for node in parse_source(source, "<test>", DEFAULT_PRECEDENCE.with_operators({"%": 40})):
        handle = backend.compile(node)
        if isinstance(node, FunctionNode) and node.is_anonymous:
            try:
                values.append(backend.evaluate(handle))
            finally:
                backend.retire(handle)
    return values


def evaluate(source: str) -> float:
    """Evaluate the last top-level expression of source."""
    return run(source)[-1]


# =============================================================================
# Arithmetic
# =============================================================================

class TestArithmetic:
    """Tests for binary operators."""

    def test_basic(self):
        assert evaluate("1 + 2 * 3") == 7.0
        assert evaluate("(1 + 2) * 3") == 9.0
        assert evaluate("1 - 2 - 3") == -4.0
        assert evaluate("8 / 4 / 2") == 1.0

    def test_comparisons(self):
        assert evaluate("1 < 2") == 1.0
        assert evaluate("2 < 1") == 0.0
        assert evaluate("2 > 1") == 1.0
        assert evaluate("1 > 1") == 0.0

    def test_division_by_zero(self):
        assert evaluate("1 / 0") == math.inf
        assert evaluate("0 - 1 / 0") == -math.inf
        assert math.isnan(evaluate("0 / 0"))

    def test_nan_comparison_is_unordered(self):
        assert evaluate("0/0 < 1") == 1.0
        assert evaluate("0/0 > 1") == 1.0

    def test_is_true(self):
        assert is_true(1.0)
        assert is_true(-0.5)
        assert not is_true(0.0)
        assert not is_true(-0.0)
        assert not is_true(math.nan)


# =============================================================================
# Functions
# =============================================================================

class TestFunctions:
    """Tests for definitions and calls."""

    def test_call(self):
        assert evaluate("def add(a b) a + b; add(3, 4)") == 7.0

    def test_argument_order(self):
        assert evaluate("def sub(a b) a - b; sub(10, 4)") == 6.0

    def test_recursion(self):
        source = """
        def fib(x)
          if x < 3 then
            1
          else
            fib(x-1) + fib(x-2)
        fib(10)
        """
        assert evaluate(source) == 55.0

    def test_nested_calls(self):
        assert evaluate("def sq(x) x*x; def quad(x) sq(sq(x)); quad(2)") == 16.0

    def test_redefinition_replaces(self):
        assert run("def f() 1; f(); def f() 2; f()") == [1.0, 2.0]

    def test_callers_see_redefinition(self):
        """Calls resolve by name when they run."""
        assert run("def g() 1; def f() g(); def g() 5; f()") == [5.0]

    def test_failed_redefinition_keeps_previous(self):
        backend = InterpreterBackend()
        run("def f() 1", backend)
        with pytest.raises(UnknownVariableError):
            run("def f() y", backend)
        assert run("f()", backend) == [1.0]

    def test_failed_definition_is_not_declared(self):
        backend = InterpreterBackend()
        with pytest.raises(UnknownVariableError):
            run("def f() y", backend)
        with pytest.raises(UnknownFunctionError):
            run("f()", backend)

    def test_parameters_are_local(self):
        assert evaluate("def f(x) x + 1; def g(x) f(x * 10) + x; g(2)") == 23.0


# =============================================================================
# Control Flow
# =============================================================================

class TestControlFlow:
    """Tests for if and for."""

    def test_if(self):
        assert evaluate("if 1 then 10 else 20") == 10.0
        assert evaluate("if 0 then 10 else 20") == 20.0

    def test_if_nan_is_false(self):
        assert evaluate("if 0/0 then 10 else 20") == 20.0

    def test_for_returns_zero(self):
        assert evaluate("for i = 1, i < 5 in i") == 0.0

    def test_for_iterations(self):
        output = io.StringIO()
        backend = InterpreterBackend(output=output)
        run("extern printd(x); for i = 1, i < 4 in printd(i)", backend)
        assert output.getvalue() == "1.000000\n2.000000\n3.000000\n4.000000\n"

    def test_for_body_runs_at_least_once(self):
        output = io.StringIO()
        backend = InterpreterBackend(output=output)
        run("extern printd(x); for i = 5, 0 in printd(i)", backend)
        assert output.getvalue() == "5.000000\n"

    def test_for_with_step(self):
        output = io.StringIO()
        backend = InterpreterBackend(output=output)
        run("extern printd(x); for i = 0, i < 10, 3 in printd(i)", backend)
        assert output.getvalue() == "0.000000\n3.000000\n6.000000\n9.000000\n12.000000\n"

    def test_for_end_sees_current_value(self):
        """The end condition sees the value from before the step."""
        output = io.StringIO()
        backend = InterpreterBackend(output=output)
        run("extern printd(x); for i = 1, i < 2 in printd(i)", backend)
        assert output.getvalue() == "1.000000\n2.000000\n"

    def test_for_shadows_and_restores_parameter(self):
        source = "def f(i) (for i = 1, i < 3 in i) + i; f(42)"
        assert evaluate(source) == 42.0

    def test_loop_variable_out_of_scope_after_loop(self):
        with pytest.raises(UnknownVariableError):
            run("def f() (for i = 1, i < 3 in 0) + i")

    def test_start_evaluated_without_loop_variable(self):
        with pytest.raises(UnknownVariableError):
            run("for i = i, i < 3 in 0")


# =============================================================================
# Lowering Errors
# =============================================================================

class TestLoweringErrors:
    """Tests for errors detected at compile time."""

    def test_unknown_variable(self):
        with pytest.raises(UnknownVariableError) as exc_info:
            run("def f(x) y")
        assert "unknown variable name" in str(exc_info.value)
        assert exc_info.value.location is not None

    def test_unknown_function(self):
        with pytest.raises(UnknownFunctionError) as exc_info:
            run("nothere(1)")
        assert "unknown function referenced" in str(exc_info.value)

    def test_argument_count(self):
        with pytest.raises(ArgumentCountError) as exc_info:
            run("def f(a b) a; f(1)")
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 1
        assert "incorrect number of arguments" in str(exc_info.value)

    def test_invalid_operator(self):
        with pytest.raises(InvalidOperatorError) as exc_info:
            run("1 % 2")
        assert "invalid binary operator" in str(exc_info.value)

    def test_duplicate_parameters(self):
        with pytest.raises(DuplicateParameterError) as exc_info:
            run("def f(x x) x")
        assert exc_info.value.parameter == "x"

    def test_duplicate_extern_parameters(self):
        with pytest.raises(DuplicateParameterError):
            run("extern g(a a)")

    def test_all_are_backend_errors(self):
        for source in ["y", "nothere()", "1 % 2", "def f(x x) 1"]:
            with pytest.raises(BackendError):
                run(source)


# =============================================================================
# Handles
# =============================================================================

class TestHandles:
    """Tests for the compile / evaluate / retire contract."""

    def anon(self, source: str):
        node, = parse_source(source)
        return node

    def test_handle_fields(self):
        backend = InterpreterBackend()
        handle = backend.compile(self.anon("1"))
        assert handle.name == "__anon_expr"
        assert handle.arity == 0
        assert handle.anonymous

    def test_second_anonymous_requires_retire(self):
        backend = InterpreterBackend()
        first = backend.compile(self.anon("1"))
        with pytest.raises(HandleError):
            backend.compile(self.anon("2"))
        assert backend.evaluate(first) == 1.0
        backend.retire(first)
        second = backend.compile(self.anon("2"))
        assert backend.evaluate(second) == 2.0
        assert second.serial != first.serial

    def test_retired_handle_is_stale(self):
        backend = InterpreterBackend()
        handle = backend.compile(self.anon("1"))
        backend.retire(handle)
        with pytest.raises(HandleError):
            backend.evaluate(handle)
        with pytest.raises(HandleError):
            backend.retire(handle)

    def test_replaced_handle_is_stale(self):
        backend = InterpreterBackend()
        old, = [backend.compile(n) for n in parse_source("def f() 1")]
        backend.compile(parse_source("def f() 2")[0])
        with pytest.raises(HandleError):
            backend.evaluate(old)

    def test_evaluate_requires_zero_arity(self):
        backend = InterpreterBackend()
        handle = backend.compile(parse_source("def f(x) x")[0])
        with pytest.raises(HandleError):
            backend.evaluate(handle)

    def test_evaluate_named_function(self):
        backend = InterpreterBackend()
        handle = backend.compile(parse_source("def answer() 42")[0])
        assert backend.evaluate(handle) == 42.0

    def test_retire_removes_function(self):
        backend = InterpreterBackend()
        handle = backend.compile(parse_source("def f() 1")[0])
        backend.retire(handle)
        assert not backend.is_defined("f")
        assert backend.lookup_prototype("f") is None

    def test_deep_recursion_is_an_evaluation_error(self):
        with pytest.raises(EvaluationError):
            run("def forever(x) forever(x + 1); forever(0)")

    def test_long_chain_is_a_lowering_error(self):
        backend = InterpreterBackend()
        with pytest.raises(ExpressionTooDeepError) as exc_info:
            run(" + ".join(["1"] * 3000), backend)
        assert exc_info.value.function == "__anon_expr"
        assert "too deeply nested" in str(exc_info.value)
        assert run("2", backend) == [2.0]

    def test_failed_deep_definition_is_not_declared(self):
        backend = InterpreterBackend()
        with pytest.raises(ExpressionTooDeepError):
            run("def big(x) " + " + ".join(["x"] * 3000), backend)
        assert backend.lookup_prototype("big") is None


# =============================================================================
# Host Library
# =============================================================================

class TestLibrary:
    """Tests for functions reachable through extern."""

    def test_putchard(self):
        output = io.StringIO()
        values = run("extern putchard(c); putchard(72) + putchard(105)", InterpreterBackend(output=output))
        assert output.getvalue() == "Hi"
        assert values == [0.0]

    def test_printd(self):
        output = io.StringIO()
        run("extern printd(x); printd(1.5)", InterpreterBackend(output=output))
        assert output.getvalue() == "1.500000\n"

    def test_unresolved_extern(self):
        with pytest.raises(EvaluationError) as exc_info:
            run("extern cos(x); cos(0)")
        assert "cos" in str(exc_info.value)

    def test_extern_arity_mismatch_with_host(self):
        with pytest.raises(EvaluationError):
            run("extern printd(a b); printd(1, 2)")

    def test_host_failure(self):
        with pytest.raises(EvaluationError):
            run("extern putchard(c); putchard(0 - 1)")

    def test_definition_takes_priority(self):
        assert evaluate("def printd(x) x * 2; printd(4)") == 8.0

    def test_custom_library(self):
        library = make_library(io.StringIO())
        del library["printd"]
        backend = InterpreterBackend(library=library)
        with pytest.raises(EvaluationError):
            run("extern printd(x); printd(1)", backend)
