"""
Backend Interface
=================

A backend receives each successfully parsed top-level unit and turns it
into something that can run. The session talks to it through three
calls, always in this order for a unit and never overlapping the parse
of the next unit:

    compile(node)    - accept a FunctionNode or an extern PrototypeNode
    evaluate(handle) - run a compiled zero-argument function
    retire(handle)   - drop a compiled function (used for the anonymous
                       wrapper of each top-level expression)

The session never looks inside a handle.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from zlang.frontend.ast import FunctionNode, PrototypeNode


@dataclass(frozen=True)
class CompiledHandle:
    """
    Opaque reference to a compiled unit.

    Attributes:
        name: Function name
        arity: Number of parameters
        anonymous: True for the wrapper of a top-level expression
        serial: Compile counter value, unique per backend instance
    """
    name: str
    arity: int
    anonymous: bool
    serial: int


class Backend(ABC):
    """
    Abstract base class for backends.

    All failures are reported by raising BackendError (or a subclass).
    """

    @abstractmethod
    def compile(self, node: Union["FunctionNode", "PrototypeNode"]) -> CompiledHandle:
        """Compile a definition, extern declaration or anonymous wrapper."""

    @abstractmethod
    def evaluate(self, handle: CompiledHandle) -> float:
        """Run a compiled zero-argument function and return its value."""

    @abstractmethod
    def retire(self, handle: CompiledHandle) -> None:
        """Release a compiled function. The handle is unusable afterwards."""
