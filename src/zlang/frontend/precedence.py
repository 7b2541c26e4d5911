"""
Binary Operator Precedence
==========================

The parser resolves chains of binary operators by precedence climbing.
This module supplies the table it consults: a mapping from a single
operator character to its precedence and associativity.

A table is built once, when a session starts, and is read-only from
then on. Extra operators (from configuration) are added by building a
new table with with_operators(), never by changing an existing one.

Default Operators
-----------------
    <  >    10   (comparison, lowest)
    +  -    20
    *  /    40   (highest)

All operators are left-associative.

Operators are single characters other than letters, digits, whitespace
and the punctuation in RESERVED_CHARACTERS.
"""

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Mapping, Optional, Union

from zlang.frontend.lexer import Token, TokenType


# Returned for anything that is not a binary operator; below every real
# precedence, so it always ends a binary chain.
NO_PRECEDENCE = -1

# Characters the grammar already gives a meaning to
RESERVED_CHARACTERS = frozenset("(),;=#.")


def is_operator_character(char: str) -> bool:
    """
    Check whether a character may be registered as a binary operator.

    Letters, digits and whitespace belong to other tokens, and the
    reserved characters are punctuation the parser relies on.
    """
    return (
        len(char) == 1
        and not char.isalnum()
        and not char.isspace()
        and char not in RESERVED_CHARACTERS
    )


class Associativity(Enum):
    """How operators of equal precedence group."""
    LEFT = auto()


@dataclass(frozen=True)
class OperatorInfo:
    """
    Precedence entry for one operator.

    Attributes:
        precedence: Binding strength; higher binds tighter
        associativity: Grouping of equal-precedence chains
    """
    precedence: int
    associativity: Associativity = Associativity.LEFT


class PrecedenceTable:
    """
    Read-only mapping of operator characters to OperatorInfo.

    Example:
        >>> table = PrecedenceTable({"+": 20, "*": 40})
        >>> table.lookup("*").precedence
        40
        >>> table.lookup("?") is None
        True
    """

    def __init__(self, operators: Mapping[str, Union[int, OperatorInfo]]):
        """
        Build and validate a table.

        Args:
            operators: Operator character to precedence (or OperatorInfo)

        Raises:
            ValueError: If a key is not a single operator character
                        or a precedence is not a positive integer
        """
        entries: dict[str, OperatorInfo] = {}
        for char, info in operators.items():
            if not isinstance(char, str) or len(char) != 1:
                raise ValueError(f"operator must be a single character, got {char!r}")
            if not is_operator_character(char):
                raise ValueError(f"{char!r} cannot be used as an operator")
            if not isinstance(info, OperatorInfo):
                info = OperatorInfo(info)
            if isinstance(info.precedence, bool) or not isinstance(info.precedence, int):
                raise ValueError(f"precedence of '{char}' must be an integer")
            if info.precedence <= 0:
                raise ValueError(f"precedence of '{char}' must be positive, got {info.precedence}")
            entries[char] = info

        self._operators = MappingProxyType(entries)

    @property
    def operators(self) -> Mapping[str, OperatorInfo]:
        """Read-only view of the table."""
        return self._operators

    def lookup(self, char: str) -> Optional[OperatorInfo]:
        """Return the entry for an operator character, or None."""
        return self._operators.get(char)

    def precedence_of(self, token: Token) -> int:
        """
        Precedence of the token as a binary operator.

        Returns:
            The operator's precedence, or NO_PRECEDENCE for keywords,
            identifiers, numbers, EOF and unknown symbols
        """
        if token.type != TokenType.SYMBOL:
            return NO_PRECEDENCE
        info = self._operators.get(token.value)
        if info is None:
            return NO_PRECEDENCE
        return info.precedence

    def with_operators(self, extra: Mapping[str, Union[int, OperatorInfo]]) -> "PrecedenceTable":
        """Return a new table with extra operators added or overridden."""
        merged: dict[str, Union[int, OperatorInfo]] = dict(self._operators)
        merged.update(extra)
        return PrecedenceTable(merged)

    def __contains__(self, char: object) -> bool:
        return char in self._operators

    def __len__(self) -> int:
        return len(self._operators)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{c!r}: {i.precedence}" for c, i in self._operators.items())
        return f"PrecedenceTable({{{pairs}}})"


DEFAULT_PRECEDENCE = PrecedenceTable({
    "<": 10,
    ">": 10,
    "+": 20,
    "-": 20,
    "*": 40,
    "/": 40,
})
