"""
zlang - Read-Eval-Print Command-Line Interface
==============================================

This module implements the zlang command. It reads zlang source from a
file or standard input, one top-level unit at a time, and reports on
each unit as soon as it has been handled.

Usage Examples
--------------
Interactive session:
    $ zlang
    ready> def sq(x) x*x;
    Parsed a function definition: sq
    ready> ready> sq(7);
    Evaluated to 49.000000

The prompt is printed before every unit, including each ';', so a line
ending in ';' is followed by two prompts.

Run a file:
    $ zlang mandel.zl

Dump the syntax tree instead of running:
    $ echo "1 + 2 * 3" | zlang --ast

Environment
-----------
Defaults come from ZLANG_* environment variables (see zlang.config);
command line flags override them.

Exit Codes
----------
0 - Success (errors in interactive or piped input are reported only)
1 - SOURCE_FILE produced parse or backend errors
2 - Invalid arguments
3 - Internal error
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

import click

from zlang import __version__
from zlang.backend.interpreter import InterpreterBackend
from zlang.cli.errors import ExitCode, handle_cli_exception
from zlang.config import SessionOptions
from zlang.errors import ZlangError
from zlang.frontend.ast import ASTPrinter
from zlang.frontend.session import Session, UnitKind, UnitResult

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def setup_logging(verbose: bool, level_name: str) -> None:
    """Configure logging based on verbosity and configured level."""
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s",
    )


def describe_result(result: UnitResult) -> Optional[str]:
    """
    Feedback line for one unit, or None when there is nothing to say.

    Errors are formatted by the exception itself.
    """
    if result.error is not None:
        return str(result.error)

    if result.kind == UnitKind.DEFINITION:
        return f"Parsed a function definition: {result.name}"
    if result.kind == UnitKind.EXTERN:
        return f"Parsed an extern: {result.name}"
    if result.kind == UnitKind.EXPRESSION:
        if result.value is None:
            return "Parsed a top-level expression"
        return f"Evaluated to {result.value:f}"
    return None


def run_session(session: Session, interactive: bool, dump_ast: bool) -> None:
    """
    Drive a session to the end of its input, echoing per-unit feedback.

    Args:
        session: The session to run
        interactive: Print the prompt before each unit
        dump_ast: Print each parsed node instead of the usual feedback
    """
    printer = ASTPrinter()
    prompt = session.options.prompt

    while True:
        if interactive:
            click.echo(prompt, err=True, nl=False)

        result = session.step()
        if result is None:
            break

        if dump_ast and result.node is not None:
            try:
                click.echo(printer.print(result.node))
            except RecursionError:
                error = ZlangError(f"syntax tree of '{result.name}' is too deep to print")
                session.errors.add(error)
                click.echo(str(error), err=True)
            continue

        if (message := describe_result(result)) is not None:
            click.echo(message, err=True)

    if interactive:
        click.echo(err=True)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "source_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--ast",
    "dump_ast",
    is_flag=True,
    help="Print the syntax tree of each unit instead of running it",
)
@click.option(
    "--no-eval",
    is_flag=True,
    help="Compile top-level expressions without evaluating them",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Debug logging and an error summary at the end",
)
@click.version_option(version=__version__, prog_name="zlang")
def main(
    source_file: Optional[Path],
    dump_ast: bool,
    no_eval: bool,
    verbose: bool,
) -> None:
    """
    Run zlang source interactively or from a file.

    SOURCE_FILE is read if given, otherwise standard input. A prompt is
    shown only when standard input is a terminal.

    \b
    Examples:
        zlang                        # Interactive session
        zlang program.zl             # Run a file
        echo "4 + 5;" | zlang        # Evaluate piped input
        zlang --ast program.zl       # Show syntax trees
    """
    options = SessionOptions.from_env()
    if no_eval:
        options.evaluate_expressions = False

    setup_logging(verbose, options.log_level)

    try:
        if source_file is not None:
            with open(source_file, encoding="utf-8") as stream:
                errors = _run(stream, str(source_file), options, dump_ast, interactive=False)
        else:
            stdin = click.get_text_stream("stdin")
            errors = _run(stdin, "<stdin>", options, dump_ast, interactive=stdin.isatty())
    except Exception as e:
        handle_cli_exception(e, verbose)

    if verbose and errors.has_errors():
        click.echo(errors.report(), err=True)

    if source_file is not None and errors.has_errors():
        sys.exit(ExitCode.SOURCE_ERROR)


def _run(
    stream: TextIO,
    filename: str,
    options: SessionOptions,
    dump_ast: bool,
    interactive: bool,
):
    backend = None if dump_ast else InterpreterBackend()
    session = Session(stream, backend=backend, options=options, filename=filename)
    logger.debug(f"session started on {filename}")
    run_session(session, interactive, dump_ast)
    return session.errors


if __name__ == "__main__":
    main()
