"""
Lexical analyzer for the PseudoLang pseudocode language.

This module provides core components for converting raw source code into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Immutable token with type, text, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace, `//` line comments and `/* ... */` block comments
    - Two-character lookahead for `<-`, `<=`, `>=` and `!=`
    - Recognizes:
        * Identifiers and case-sensitive keywords
        * Fused two-word keywords (`end if`, `end loop`, `end procedure`)
        * Integer literals (digit runs, kept verbatim)
        * Double-quoted strings (no escapes, may not span lines)
        * Operators and punctuation

Raises:
    UnterminatedCommentError: If a block comment is never closed.
    UnterminatedStringError: If a string reaches a newline or end of input (strict mode).

Example:
    >>> tokens = tokenize("declare x <- 5;")
    >>> tokens[0]
    Token(DECLARE, 'declare', 1:1)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

import logging
from dataclasses import dataclass

from pseudolang.pseudo_constants import (
    TokenType,
    keyword_map,
    multi_word_keyword_map,
    multi_word_openers,
    symbol_map,
)
from pseudolang.pseudo_errors import (
    SourceLocation,
    UnterminatedCommentError,
    UnterminatedStringError,
)

logger = logging.getLogger(__name__)


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"read past end of source at position={self.position}, line={self.line}"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)

    def mark(self) -> tuple[int, int, int]:
        """Returns the cursor state for a later `reset`."""
        return self.position, self.line, self.column

    def reset(self, state: tuple[int, int, int]) -> None:
        self.position, self.line, self.column = state


@dataclass(frozen=True)
class Token:
    """A single lexical token.

    Attributes:
        type (TokenType): The token category.
        value (str): The exact source text (fused keywords use a single space).
        line (int): The 1-based line of the first character.
        col (int): The 1-based column of the first character.
    """

    type: TokenType
    value: str
    line: int = 0
    col: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, {self.line}:{self.col})"


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def _is_ident_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def _is_digit(ch: str) -> bool:
    return ch.isascii() and ch.isdigit()


class Lexer:
    """Lexical analyzer for PseudoLang.

    The Lexer is one-shot: `tokenize()` consumes the whole stream and always
    ends the result with a single EOF token.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        filename (str): Name used in error locations.
        strict (bool): Raise on unterminated strings instead of emitting an
            UNTERMINATED_STRING token.
    """

    def __init__(
        self, stream: CharacterStream, filename: str = "<input>", strict: bool = True
    ) -> None:
        self.stream = stream
        self.filename = filename
        self.strict = strict

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def location(self, line: int, col: int) -> SourceLocation:
        return SourceLocation(line, col, self.filename)

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek().isspace():
            self.advance()

    def skip_trivia(self) -> None:
        """Skips whitespace and both comment forms until a token starts."""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch.isspace():
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                self.skip_line_comment()
            elif ch == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            else:
                break

    def skip_line_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        line, col = self.stream.line, self.stream.column
        self.advance()  # /
        self.advance()  # *
        while not self.stream.end_of_file():
            if self.peek() == "*" and self.peek(1) == "/":
                self.advance()
                self.advance()
                return
            self.advance()
        raise UnterminatedCommentError(self.location(line, col))

    def read_word(self) -> str:
        word = ""
        while not self.stream.end_of_file() and _is_ident_char(self.peek()):
            word += self.advance()
        return word

    def match_symbol(self) -> Token | None:
        """Matches the longest operator or punctuation at the cursor."""
        line, col = self.stream.line, self.stream.column
        for spelling, token_type in symbol_map.items():
            if all(self.peek(i) == c for i, c in enumerate(spelling)):
                for _ in spelling:
                    self.advance()
                return Token(token_type, spelling, line, col)
        return None

    def scan_string(self) -> Token:
        line, col = self.stream.line, self.stream.column
        self.advance()  # opening quote
        text = ""
        while not self.stream.end_of_file() and self.peek() not in ('"', "\n"):
            text += self.advance()
        if self.peek() == '"':
            self.advance()
            return Token(TokenType.STRING, text, line, col)
        if self.strict:
            raise UnterminatedStringError(self.location(line, col))
        return Token(TokenType.UNTERMINATED_STRING, text, line, col)

    def scan_word(self) -> Token:
        line, col = self.stream.line, self.stream.column
        word = self.read_word()

        if word in multi_word_openers:
            fused = self.try_fuse(word, line, col)
            if fused is not None:
                return fused

        if word in keyword_map:
            return Token(keyword_map[word], word, line, col)
        return Token(TokenType.IDENT, word, line, col)

    def try_fuse(self, first: str, line: int, col: int) -> Token | None:
        """Attempts to read a second word completing a fused keyword.

        The cursor is restored to just after `first` when no fused keyword matches.
        """
        saved = self.stream.mark()
        self.skip_whitespace()
        if _is_ident_start(self.peek()):
            phrase = f"{first} {self.read_word()}"
            if phrase in multi_word_keyword_map:
                return Token(multi_word_keyword_map[phrase], phrase, line, col)
        self.stream.reset(saved)
        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream."""
        self.skip_trivia()
        line, col = self.stream.line, self.stream.column

        if self.stream.end_of_file():
            return Token(TokenType.EOF, "", line, col)

        ch = self.peek()
        if _is_ident_start(ch):
            return self.scan_word()
        if _is_digit(ch):
            digits = ""
            while not self.stream.end_of_file() and _is_digit(self.peek()):
                digits += self.advance()
            return Token(TokenType.NUMBER, digits, line, col)
        if ch == '"':
            return self.scan_string()

        token = self.match_symbol()
        if token is not None:
            return token

        # `!` without `=` lands here too: the language has no unary `!`
        return Token(TokenType.UNKNOWN, self.advance(), line, col)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == TokenType.EOF:
                break
            if tok.type == TokenType.UNKNOWN:
                logger.debug("unknown character %r at %d:%d", tok.value, tok.line, tok.col)
        logger.debug("lexed %d tokens from %s", len(tokens), self.filename)
        return tokens


def tokenize(source: str, filename: str = "<input>", strict: bool = True) -> list[Token]:
    """Tokenizes `source` into a list ending with an EOF token."""
    return Lexer(CharacterStream(source), filename=filename, strict=strict).tokenize()


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]
