"""
Host Library
============

Functions implemented in Python that zlang code can call after
declaring them with 'extern':

    extern putchard(x)   # write the character with code x
    extern printd(x)     # write x as "%f" followed by a newline

Both return 0.0. Output goes to the stream given to make_library(),
standard error by default, so it does not mix with piped results.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, TextIO
import sys


@dataclass(frozen=True)
class HostFunction:
    """
    A library function callable from zlang.

    Attributes:
        name: Symbol name used in 'extern' declarations
        arity: Number of float arguments
        function: Python callable taking floats and returning a float
    """
    name: str
    arity: int
    function: Callable[..., float]


def make_library(output: Optional[TextIO] = None) -> Dict[str, HostFunction]:
    """
    Build the host symbol table.

    Args:
        output: Stream the functions write to (default: sys.stderr at call time)

    Returns:
        Symbol name to HostFunction
    """

    def stream() -> TextIO:
        return output if output is not None else sys.stderr

    def putchard(x: float) -> float:
        out = stream()
        out.write(chr(int(x)))
        out.flush()
        return 0.0

    def printd(x: float) -> float:
        out = stream()
        out.write(f"{x:f}\n")
        out.flush()
        return 0.0

    return {
        "putchard": HostFunction("putchard", 1, putchard),
        "printd": HostFunction("printd", 1, printd),
    }
