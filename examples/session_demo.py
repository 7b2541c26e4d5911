#!/usr/bin/env python3
"""
zlang Session Demo
==================

This script demonstrates how to use zlang from Python to:
1. Parse source into AST nodes and print them
2. Run an interactive-style session against the interpreter
3. Recover from errors without losing the session
4. Add an operator to the precedence table

Usage:
    source .venv/bin/activate
    python examples/session_demo.py
"""

import io

from zlang import InterpreterBackend, Session, SessionOptions, parse_source
from zlang.frontend.ast import ASTPrinter


MANDELBROT_ROW = """
extern putchard(char);

def printdensity(d)
  if d > 8 then
    putchard(32)    # ' '
  else if d > 4 then
    putchard(46)    # '.'
  else if d > 2 then
    putchard(43)    # '+'
  else
    putchard(42);   # '*'

def step(x) printdensity(x)

for i = 0, i < 12 in step(i);
putchard(10);
"""


def main():
    # ==========================================================================
    # 1. Parse and print the syntax tree
    # ==========================================================================

    print("Syntax tree of fib:")
    printer = ASTPrinter()
    for node in parse_source("def fib(x) if x < 3 then 1 else fib(x-1) + fib(x-2)"):
        print(printer.print(node))

    # ==========================================================================
    # 2. Run a session
    # ==========================================================================
    # Output from putchard/printd goes to the backend's output stream.

    output = io.StringIO()
    session = Session(MANDELBROT_ROW, backend=InterpreterBackend(output=output))
    for result in session:
        if result.error:
            print(result.error)
    print("\nputchard output:")
    print(output.getvalue())

    # ==========================================================================
    # 3. Error recovery
    # ==========================================================================
    # The stray ')' is reported, one token is skipped, and parsing resumes.

    print("Recovering from a stray ')':")
    for result in Session(") def foo() 1 foo() + 1", backend=InterpreterBackend()):
        if result.error:
            print(f"  {result.error}")
        elif result.value is not None:
            print(f"  Evaluated to {result.value:f}")
        else:
            print(f"  {result.kind.name.lower()}: {result.name}")

    # ==========================================================================
    # 4. Extra operators
    # ==========================================================================
    # The parser accepts '%' once it is in the table; the interpreter has
    # no lowering for it and reports an invalid operator.

    options = SessionOptions(extra_operators={"%": 40})
    result = Session("7 % 2", backend=InterpreterBackend(), options=options).step()
    print(f"\n'%' with extra_operators: {result.error}")


if __name__ == "__main__":
    main()
