"""
Lexer for Monkey

Turns Monkey source text into a flat token list ending in EOF.

- Every token records the 1-based line and column where it starts
- Unknown characters become ILLEGAL tokens rather than exceptions, so they
  surface through the parser's error list like any other syntax problem
"""

from typing import List

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

_DIGITS = frozenset("0123456789")


def _is_ident_start(ch: str) -> bool:
    return ch == '_' or (ch.isascii() and ch.isalpha())


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or ch in _DIGITS


class Lexer:
    """Monkey lexer. Whitespace (including newlines) only separates tokens."""

    # Keyword mapping
    KEYWORDS = {
        'fn': TT.FUNCTION,
        'let': TT.LET,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'if': TT.IF,
        'else': TT.ELSE,
        'return': TT.RETURN,
    }

    # Tried in order, so two-character operators must precede their prefixes
    OPERATORS = [
        ('==', TT.EQ),
        ('!=', TT.NOT_EQ),

        ('=', TT.ASSIGN),
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('!', TT.BANG),
        ('*', TT.ASTERISK),
        ('/', TT.SLASH),
        ('<', TT.LT),
        ('>', TT.GT),
        (',', TT.COMMA),
        (';', TT.SEMICOLON),
        ('(', TT.LPAREN),
        (')', TT.RPAREN),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Scan the whole source; the last token is always EOF"""
        while self.pos < len(self.source):
            self.scan_token()

        self.emit(TT.EOF, "", self.line, self.column)
        return self.tokens

    def scan_token(self):
        if self.skip_whitespace():
            return

        ch = self.peek()

        if ch in _DIGITS:
            self.scan_number()
            return

        if _is_ident_start(ch):
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_number(self):
        """Scan decimal integer literal. Range checking is the parser's job."""
        line, column = self.line, self.column
        value = ''

        while self.peek() in _DIGITS:
            value += self.advance()

        self.emit(TT.INT, value, line, column)

    def scan_identifier(self):
        """Identifiers are ASCII letters, digits and underscores; keywords win"""
        line, column = self.line, self.column
        value = ''

        while _is_ident_char(self.peek()):
            value += self.advance()

        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value, line, column)

    def scan_operator(self):
        """Operators and delimiters; anything else is ILLEGAL"""
        line, column = self.line, self.column

        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str, line, column)
                return

        self.emit(TT.ILLEGAL, self.advance(), line, column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self) -> str:
        """Current character, or NUL at end of input"""
        return self.source[self.pos] if self.pos < len(self.source) else "\0"

    def advance(self, n: int = 1) -> str:
        """Consume up to n characters, keeping line and column in step"""
        taken = self.source[self.pos:self.pos + n]
        self.pos += len(taken)

        for ch in taken:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1

        return taken

    def skip_whitespace(self) -> bool:
        """Skip whitespace, return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\n', '\r'):
            self.advance()
            skipped = True
        return skipped

    def emit(self, token_type: TT, value: str, line: int, column: int):
        """Emit a token starting at (line, column)"""
        self.tokens.append(Tok(type=token_type, value=value, line=line, column=column))


def tokenize(source: str) -> List[Tok]:
    """Shorthand for Lexer(source).tokenize()"""
    return Lexer(source).tokenize()
