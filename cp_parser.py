#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Callable, List, Optional

from cp_address import Address
from cp_ast import Span, AddressLocation, IdentifierLocation, StringLocation, ImportLocation, ImportDeclaration, Program
from cp_lexer import TokenKind, Token, Lexer


# ==========================
# Parser
# ==========================

@dataclass
class ParseError(Exception):
    message: str
    token: Optional[Token] = None
    filename: Optional[str] = None


# Signature of the parsing capability handed to the preprocessor and the resolver.
ProgramParser = Callable[[str, str], Program]

OPENERS = {
    TokenKind.LBRACE: TokenKind.RBRACE,
    TokenKind.LPAREN: TokenKind.RPAREN,
    TokenKind.LBRACKET: TokenKind.RBRACKET,
}
CLOSERS = {closer: opener for opener, closer in OPENERS.items()}


class Parser:
    """
    Import-declaration parser.

    Only top-level `import` declarations are turned into AST nodes; the rest of the
    program is scanned token by token, checking that brackets balance.
    """

    def __init__(self, tokens: List[Token], filename: Optional[str] = None) -> None:
        self.tokens = tokens
        self.index = 0
        self.filename = filename

    @classmethod
    def from_source(cls, source: str, filename: str = "<input>") -> "Parser":
        lexer = Lexer.from_source(source, filename)
        tokens = lexer.tokenize()
        return cls(tokens, filename)

    # --- token utilities ---

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _last(self) -> Token:
        return self.tokens[self.index - 1 if self.index > 0 else 0]

    def _at_end(self) -> bool:
        return self._peek().kind is TokenKind.EOF

    def _advance(self) -> Token:
        tok = self._peek()
        if not self._at_end():
            self.index += 1
        return tok

    def _check(self, kind: TokenKind) -> bool:
        return self._peek().kind is kind

    def _match(self, *kinds: TokenKind) -> bool:
        if self._peek().kind in kinds:
            self._advance()
            return True
        return False

    def _expect(self, kind: TokenKind, msg: str) -> Token:
        if not self._check(kind):
            raise ParseError(f"{msg}, got {self._peek()} instead", self._peek(), self.filename)
        return self._advance()

    def _span_start(self) -> Span:
        here = self._peek()
        return Span(here.line, here.column, here.line, here.column)

    def _extend_span(self, start: Span) -> Span:
        here = self._last()
        # string tokens carry their text without the quotes
        width = len(here.text) + (2 if here.kind is TokenKind.STRING else 0)
        return Span(
            start.start_line,
            start.start_column,
            here.line,
            here.column + width,
        )

    # --- entry point ---

    def parse_program(self, filename: Optional[str] = None) -> Program:
        if filename is not None:
            self.filename = filename

        start = self._span_start()
        imports: List[ImportDeclaration] = []
        open_brackets: List[Token] = []

        while not self._at_end():
            if self._check(TokenKind.IMPORT) and not open_brackets:
                imports.append(self._parse_import())
                continue

            tok = self._advance()
            if tok.kind in OPENERS:
                open_brackets.append(tok)
            elif tok.kind in CLOSERS:
                if not open_brackets:
                    raise ParseError(f"[PAR-0020] unmatched closing {tok}", tok, self.filename)
                opener = open_brackets.pop()
                if CLOSERS[tok.kind] is not opener.kind:
                    raise ParseError(
                        f"[PAR-0021] mismatched closing {tok} for {opener} opened at {opener.line}:{opener.column}",
                        tok,
                        self.filename,
                    )

        if open_brackets:
            opener = open_brackets[-1]
            raise ParseError(f"[PAR-0022] unclosed {opener} at end of file", opener, self.filename)

        return Program(imports, span=self._extend_span(start), filename=self.filename)

    # --- declarations ---

    def _parse_import(self) -> ImportDeclaration:
        # import <location>
        # import <Ident>
        # import <Ident ( "," Ident )*> from <location>
        start = self._span_start()
        self._advance()  # 'import'

        identifiers: List[str] = []
        if self._check(TokenKind.IDENT):
            if self._is_bare_identifier_import():
                name = self._advance().text
                return ImportDeclaration(identifiers, IdentifierLocation(name), span=self._extend_span(start))

            identifiers.append(self._advance().text)
            while self._match(TokenKind.COMMA):
                ident = self._expect(TokenKind.IDENT, "[PAR-0010] expected imported name after ','")
                identifiers.append(ident.text)

            from_tok = self._peek()
            if not self._is_from(from_tok):
                raise ParseError(
                    f"[PAR-0011] expected 'from' after imported names, got {from_tok} instead",
                    from_tok,
                    self.filename,
                )
            self._advance()

        location = self._parse_import_location()
        return ImportDeclaration(identifiers, location, span=self._extend_span(start))

    @staticmethod
    def _is_from(tok: Token) -> bool:
        return tok.kind is TokenKind.IDENT and tok.text == "from"

    def _is_bare_identifier_import(self) -> bool:
        # `import Crypto`: a single name with no `from` clause. A location right after
        # the name means `from` is missing, which stays an error.
        after = self.tokens[self.index + 1]
        if after.kind in (TokenKind.COMMA, TokenKind.STRING, TokenKind.HEX):
            return False
        return not self._is_from(after)

    def _parse_import_location(self) -> ImportLocation:
        tok = self._peek()
        if tok.kind is TokenKind.STRING:
            self._advance()
            return StringLocation(tok.text)
        if tok.kind is TokenKind.HEX:
            self._advance()
            return AddressLocation(Address.from_hex(tok.text))
        raise ParseError(
            f"[PAR-0012] expected import location (string or address), got {tok} instead",
            tok,
            self.filename,
        )


def parse_program(source: str, filename: str = "<input>") -> Program:
    """Tokenize and parse `source`; raises LexerError or ParseError."""
    tokens = Lexer(source, filename=filename).tokenize()
    return Parser(tokens, filename=filename).parse_program()
