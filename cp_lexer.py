#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


# ==========================
# Tokens and lexer
# ==========================

class TokenKind(Enum):
    # Special
    EOF = auto()

    IDENT = auto()  # identifier, e.g. FungibleToken, from, etc.
    INT = auto()  # decimal, binary or octal literal, e.g. 42, 1_000, 0b101, 1.5, etc.
    HEX = auto()  # hexadecimal literal, e.g. 0x01, 0xf8d6e0586b0a20c7, etc.
    STRING = auto()  # string literal, e.g. "./Token.cdc", etc.

    # Keywords
    IMPORT = auto()

    # Punctuation
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    COMMA = auto()  # ,
    COLON = auto()  # :
    SEMI = auto()  # ;
    DOT = auto()  # .
    LT = auto()  # <
    GT = auto()  # >

    # Any other operator character; the import scanner never needs to tell them apart
    OPERATOR = auto()


KEYWORDS = {
    "import": TokenKind.IMPORT,
}

PUNCTUATION = {
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
    ";": TokenKind.SEMI,
    ".": TokenKind.DOT,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
}

OPERATOR_CHARS = "+-*/%&|^~!=?@#"


@dataclass
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"{self.text!r}" if self.kind != TokenKind.EOF else "end-of-file"


@dataclass
class LexerError(Exception):
    message: str
    filename: str
    line: int
    column: int


# Constants for literal validation
HEX_CHARS = "0123456789abcdefABCDEF"
BIN_CHARS = "01"
OCT_CHARS = "01234567"
SIMPLE_ESCAPES = ("0", "\\", "t", "n", "r", '"', "'")


class Lexer:
    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.length = len(source)
        self.index = 0
        self.line = 1
        self.column = 1

    @classmethod
    def from_source(cls, source: str, filename: str = "<input>") -> "Lexer":
        return cls(source, filename)

    # --- low-level char utilities ---

    def _at_end(self) -> bool:
        return self.index >= self.length

    def _peek(self) -> str:
        if self._at_end():
            return "\0"
        return self.source[self.index]

    def _peek_next(self) -> str:
        if self.index + 1 >= self.length:
            return "\0"
        return self.source[self.index + 1]

    def _advance(self) -> str:
        c = self._peek()
        if not self._at_end():
            self.index += 1
            if c == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return c

    def _error(self, message: str, line: int, column: int) -> LexerError:
        return LexerError(message, self.filename, line, column)

    # --- main API ---

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            tok = self._next_token()
            tokens.append(tok)
            if tok.kind is TokenKind.EOF:
                break
        return tokens

    def _next_token(self) -> Token:
        self._skip_ws_and_comments()
        start_line, start_col = self.line, self.column

        if self._at_end():
            return Token(TokenKind.EOF, "", start_line, start_col)

        c = self._advance()

        # identifiers / keywords
        if c.isalpha() or c == "_":
            ident = [c]
            while self._peek().isalnum() or self._peek() == "_":
                ident.append(self._advance())
            text = "".join(ident)
            return Token(KEYWORDS.get(text, TokenKind.IDENT), text, start_line, start_col)

        if c.isdigit():
            return self._read_number(c, start_line, start_col)

        if c == '"':
            text = self._read_string_literal(start_line, start_col)
            return Token(TokenKind.STRING, text, start_line, start_col)

        if c in PUNCTUATION:
            return Token(PUNCTUATION[c], c, start_line, start_col)

        if c in OPERATOR_CHARS:
            return Token(TokenKind.OPERATOR, c, start_line, start_col)

        raise self._error(f"[LEX-0040] unexpected character {c!r} at {start_line}:{start_col}", start_line, start_col)

    def _read_string_literal(self, start_line: int, start_col: int) -> str:
        # The raw text between the quotes is kept (escapes included) so that it
        # matches the literal as it is spelled in the source.
        chars: List[str] = []
        while True:
            ch = self._peek()

            if self._at_end() or ch == "\n":
                raise self._error("[LEX-0010] unterminated string literal", start_line, start_col)
            if ch == "\\":
                chars.append(self._read_valid_escape())
                continue
            if ch == '"':
                self._advance()
                break

            chars.append(self._advance())

        return "".join(chars)

    def _read_valid_escape(self) -> str:
        line, column = self.line, self.column
        chars: List[str] = [self._advance()]  # backslash
        esc = self._peek()
        if self._at_end():
            raise self._error("[LEX-0010] unterminated string literal", line, column)
        if esc in SIMPLE_ESCAPES:
            chars.append(self._advance())
        elif esc == "u":
            # \u{X} .. \u{XXXXXXXX}
            chars.append(self._advance())
            if self._peek() != "{":
                raise self._error("[LEX-0021] invalid unicode escape sequence, expected '{' after \\u", line, column)
            chars.append(self._advance())
            digits = 0
            while self._peek() in HEX_CHARS:
                chars.append(self._advance())
                digits += 1
            if not 1 <= digits <= 8 or self._peek() != "}":
                raise self._error("[LEX-0021] invalid unicode escape sequence, expected 1 to 8 hex digits and '}'",
                                  line, column)
            chars.append(self._advance())
        else:
            raise self._error(f"[LEX-0020] unknown escape sequence \\{esc}", line, column)
        return "".join(chars)

    def _read_number(self, c: str, start_line: int, start_col: int) -> Token:
        digits = [c]
        kind = TokenKind.INT

        if c == "0" and self._peek() in "xXbBoO":
            prefix = self._advance()
            digits.append(prefix)
            allowed = {"x": HEX_CHARS, "b": BIN_CHARS, "o": OCT_CHARS}[prefix.lower()]
            if prefix in "xX":
                kind = TokenKind.HEX
            count = 0
            while self._peek() in allowed or self._peek() == "_":
                if self._peek() != "_":
                    count += 1
                digits.append(self._advance())
            if count == 0:
                raise self._error(f"[LEX-0030] missing digits after '0{prefix}' prefix", start_line, start_col)
        else:
            while self._peek().isdigit() or self._peek() == "_":
                digits.append(self._advance())
            # fixed-point literal, e.g. 1.5
            if self._peek() == "." and self._peek_next().isdigit():
                digits.append(self._advance())
                while self._peek().isdigit() or self._peek() == "_":
                    digits.append(self._advance())

        if self._peek().isalnum() or self._peek() == "_":
            raise self._error(f"[LEX-0031] invalid character '{self._peek()}' after number literal",
                              self.line, self.column)
        return Token(kind, "".join(digits), start_line, start_col)

    def _skip_ws_and_comments(self) -> None:
        while True:
            c = self._peek()
            if c in (" ", "\t", "\r", "\n"):
                self._advance()
                continue
            if c == "/" and self._peek_next() == "/":
                # line comment
                self._advance()  # '/'
                self._advance()  # second '/'
                while self._peek() != "\n" and not self._at_end():
                    self._advance()
                continue
            if c == "/" and self._peek_next() == "*":
                self._skip_block_comment()
                continue
            break

    def _skip_block_comment(self) -> None:
        # block comments nest: /* outer /* inner */ still outer */
        start_line, start_col = self.line, self.column
        self._advance()  # '/'
        self._advance()  # '*'
        depth = 1
        while depth > 0:
            if self._at_end():
                raise self._error("[LEX-0070] unterminated block comment", start_line, start_col)
            if self._peek() == "/" and self._peek_next() == "*":
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == "*" and self._peek_next() == "/":
                self._advance()
                self._advance()
                depth -= 1
            else:
                self._advance()
