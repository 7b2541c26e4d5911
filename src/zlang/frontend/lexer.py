"""
zlang Lexer (Tokenizer)
=======================

This module implements the lexer for zlang. It converts a character
stream into tokens for the parser, one token per request.

The lexer pulls characters from its source one at a time and keeps
exactly one character of lookahead, so it works equally well on a
string, a file or an interactive terminal where input arrives line
by line.

Token Categories
----------------
- Keywords: def, extern, if, then, else, for, in
- Identifiers: function, parameter and loop variable names
- Numbers: decimal floating point (123, 4.5, .5)
- Symbols: any other single character (+, (, ;, ...)
- EOF: end of input (sticky)

Comments
--------
- Single-line: # comment

Malformed Numbers
-----------------
Digits and dots are collected greedily, so '3.4.5' is a single number
token. Its text is not a valid float; the token is produced with value
None and the parser reports it. The lexer itself never rejects input.

Example Usage
-------------
>>> from zlang.frontend.lexer import Lexer
>>> lexer = Lexer("def add(a b) a + b", "<test>")
>>> for token in lexer.tokenize():
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'add', 1:5)
Token(SYMBOL, '(', 1:8)
Token(IDENTIFIER, 'a', 1:9)
Token(IDENTIFIER, 'b', 1:11)
Token(SYMBOL, ')', 1:12)
Token(IDENTIFIER, 'a', 1:14)
Token(SYMBOL, '+', 1:16)
Token(IDENTIFIER, 'b', 1:18)
Token(EOF, 1:19)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, TextIO
import io
import logging
import string

from zlang.errors import SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for zlang.

    Keywords get their own types so the parser can dispatch on the
    type alone. Operators and punctuation are all SYMBOL tokens; the
    character itself is the token value.
    """

    # === Structural Tokens ===
    EOF = auto()            # End of input

    # === Keywords ===
    DEF = auto()            # def
    EXTERN = auto()         # extern
    IF = auto()             # if
    THEN = auto()           # then
    ELSE = auto()           # else
    FOR = auto()            # for
    IN = auto()             # in

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # Function/variable names
    NUMBER = auto()         # Floating point literals

    # === Everything Else ===
    SYMBOL = auto()         # Any other single character


# Map keyword strings to their token types
KEYWORDS: dict[str, TokenType] = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
    "if": TokenType.IF,
    "then": TokenType.THEN,
    "else": TokenType.ELSE,
    "for": TokenType.FOR,
    "in": TokenType.IN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from zlang source.

    Attributes:
        type: The TokenType classification
        value: Identifier/keyword text, float for numbers (None when the
               text is not a valid number), the character for symbols,
               None for EOF
        lexeme: The raw source text of the token ("" for EOF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source
    """
    type: TokenType
    value: str | float | None
    lexeme: str
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.type == TokenType.EOF:
            return f"Token({self.type.name}, {self.line}:{self.column})"
        if self.type == TokenType.NUMBER:
            return f"Token({self.type.name}, {self.lexeme}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_symbol(self, char: str) -> bool:
        """Return True if this is the SYMBOL token for the given character."""
        return self.type == TokenType.SYMBOL and self.value == char

    def describe(self) -> str:
        """Short human-readable text for diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        return self.lexeme


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes zlang source, one token per call.

    The lexer owns the only state that survives between token requests:
    the next unconsumed character. Each Lexer instance is independent,
    so several sessions can run side by side.

    Usage:
        lexer = Lexer(sys.stdin, "<stdin>")
        token = lexer.next_token()

    Attributes:
        filename: Name of the source (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits

    # Characters that start and continue a number
    NUMBER_CHARS = string.digits + "."

    # Same set as C isspace()
    WHITESPACE = " \t\n\r\v\f"

    # End of a '#' comment
    COMMENT_END = "\n\r"

    def __init__(self, source: str | TextIO, filename: str = "<input>"):
        """
        Initialize the lexer.

        Args:
            source: Source text, or a text stream read one character at a time
            filename: Name of the source (for error messages)
        """
        if isinstance(source, str):
            source = io.StringIO(source)
        self._stream = source
        self.filename = filename

        # Lookahead character; "" once the end of input has been seen.
        # Primed with a space so the first call starts by reading input.
        self._last_char = " "
        self._at_eof = False

        # Position of the lookahead character
        self._line = 1
        self._column = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens until end of input.

        Yields:
            Token objects, ending with a single EOF token
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def next_token(self) -> Token:
        """
        Consume characters and return the next token.

        Returns:
            The next Token; EOF forever once input is exhausted
        """
        while True:
            self._skip_whitespace()

            char = self._last_char
            start_line = self._line
            start_column = self._column

            if char == "":
                return self._make_token(TokenType.EOF, None, "", start_line, start_column)

            if char in self.IDENT_START:
                return self._scan_identifier(start_line, start_column)

            if char in self.NUMBER_CHARS:
                return self._scan_number(start_line, start_column)

            if char == "#":
                self._skip_comment()
                continue

            self._advance()
            return self._make_token(TokenType.SYMBOL, char, char, start_line, start_column)

    @property
    def at_eof(self) -> bool:
        """True once the source has reported end of input."""
        return self._at_eof

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _advance(self) -> None:
        """
        Replace the lookahead with the next character from the source.

        Once the source is exhausted it is never read again.
        """
        if self._at_eof:
            self._last_char = ""
            return

        previous = self._last_char
        char = self._stream.read(1)

        if not char:
            self._at_eof = True
            logger.debug(f"{self.filename}: end of input")

        # EOF is positioned just past the last character
        if previous == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        self._last_char = char

    def _make_token(
        self,
        token_type: TokenType,
        value: str | float | None,
        lexeme: str,
        line: int,
        column: int,
    ) -> Token:
        """Create a token at the given start position."""
        return Token(
            type=token_type,
            value=value,
            lexeme=lexeme,
            line=line,
            column=max(column, 1),
            filename=self.filename,
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace(self) -> None:
        """Skip whitespace characters."""
        while self._last_char and self._last_char in self.WHITESPACE:
            self._advance()

    def _skip_comment(self) -> None:
        """Skip a '#' comment up to, not including, the end of the line."""
        self._advance()
        while self._last_char and self._last_char not in self.COMMENT_END:
            self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        """
        Scan an identifier or keyword.

        Identifiers start with a letter and continue with letters and
        digits. Keywords are distinguished by checking the keyword table.
        """
        chars = []
        while self._last_char and self._last_char in self.IDENT_CHARS:
            chars.append(self._last_char)
            self._advance()

        name = "".join(chars)
        token_type = KEYWORDS.get(name, TokenType.IDENTIFIER)
        return self._make_token(token_type, name, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """
        Scan a numeric literal.

        Digits and dots are consumed greedily; the text is then handed
        to float(). Text float() rejects gives a NUMBER token whose
        value is None.
        """
        chars = []
        while self._last_char and self._last_char in self.NUMBER_CHARS:
            chars.append(self._last_char)
            self._advance()

        text = "".join(chars)
        value: Optional[float]
        try:
            value = float(text)
        except ValueError:
            logger.debug(f"{self.filename}:{start_line}:{start_column}: malformed number {text!r}")
            value = None

        return self._make_token(TokenType.NUMBER, value, text, start_line, start_column)
