"""
Turns Lox source text into a list of tokens in a single left-to-right pass.
"""

from typing import Any, List, Optional

from lox.lox_errors import Diagnostics
from lox.lox_tokens import KEYWORDS, Token, TokenType


class Scanner:
    """Scans a complete source string. Lexical errors are reported to the
    diagnostics and scanning continues, so one run can report several."""

    _SINGLE = {
        '(': TokenType.LEFT_PAREN,
        ')': TokenType.RIGHT_PAREN,
        '{': TokenType.LEFT_BRACE,
        '}': TokenType.RIGHT_BRACE,
        ',': TokenType.COMMA,
        '.': TokenType.DOT,
        '-': TokenType.MINUS,
        '+': TokenType.PLUS,
        ';': TokenType.SEMICOLON,
        '*': TokenType.STAR,
    }

    # char -> (type if followed by '=', type otherwise)
    _PAIRED = {
        '!': (TokenType.BANG_EQUAL, TokenType.BANG),
        '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        '<': (TokenType.LESS_EQUAL, TokenType.LESS),
        '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }

    def __init__(self, source: str, diagnostics: Optional[Diagnostics] = None):
        self.source = source
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.tokens: List[Token] = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        while not self._is_at_end():
            self.start = self.current
            self._scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def _scan_token(self):
        c = self._advance()

        if c in self._SINGLE:
            self._add_token(self._SINGLE[c])
            return
        if c in self._PAIRED:
            matched, single = self._PAIRED[c]
            self._add_token(matched if self._match('=') else single)
            return

        match c:
            case '/':
                if self._match('/'):
                    # Line comment runs to the end of the line.
                    while self._peek() != '\n' and not self._is_at_end():
                        self._advance()
                else:
                    self._add_token(TokenType.SLASH)
            case ' ' | '\r' | '\t':
                pass
            case '\n':
                self.line += 1
            case '"':
                self._string()
            case _:
                if self._is_digit(c):
                    self._number()
                elif self._is_alpha(c):
                    self._identifier()
                else:
                    self.diagnostics.error(self.line, "Unexpected character.")

    def _string(self):
        start_line = self.line
        while self._peek() != '"' and not self._is_at_end():
            if self._peek() == '\n':
                self.line += 1
            self._advance()

        if self._is_at_end():
            self.diagnostics.error(start_line, "Unterminated string.")
            return

        self._advance()  # closing quote
        value = self.source[self.start + 1:self.current - 1]
        self._add_token(TokenType.STRING, value, line=start_line)

    def _number(self):
        while self._is_digit(self._peek()):
            self._advance()

        # A fractional part needs at least one digit after the dot.
        if self._peek() == '.' and self._is_digit(self._peek_next()):
            self._advance()
            while self._is_digit(self._peek()):
                self._advance()

        self._add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def _identifier(self):
        while self._is_alphanumeric(self._peek()):
            self._advance()

        text = self.source[self.start:self.current]
        self._add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    @staticmethod
    def _is_digit(c: str) -> bool:
        return '0' <= c <= '9'

    @staticmethod
    def _is_alpha(c: str) -> bool:
        return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'

    def _is_alphanumeric(self, c: str) -> bool:
        return self._is_alpha(c) or self._is_digit(c)

    def _match(self, expected: str) -> bool:
        if self._is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def _peek(self) -> str:
        if self._is_at_end():
            return '\0'
        return self.source[self.current]

    def _peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def _advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def _is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def _add_token(self, type: TokenType, literal: Any = None, line: Optional[int] = None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(type, text, literal, self.line if line is None else line))
