"""Lexical analysis: source text to a finite list of Tokens.

```
"("  ")"  "."  "="                     ; punctuation
"λ" | "\\" | "lambda"                   ; lambda marker
[a-z][a-z0-9]*                          ; identifier, unless it is a keyword (env, unbind, help)
"#" <anything up to end of line>       ; comment, ignored
" " | "\\t" | "\\r"                       ; whitespace, ignored
"\\n"                                    ; newline, significant: terminates statements
```

Unknown characters are reported and skipped, so one stray character does not stop the rest of the input from being
lexed. The token list always ends with a NEWLINE followed by EOF.
"""

from dataclasses import dataclass
from enum import Enum

from lambdalearner.lang.error import LexError
from lambdalearner.lang.log import Logger


class TokenType(Enum):
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LAMBDA = "λ"
    DOT = "."
    EQUALS = "="
    IDENTIFIER = "identifier"
    ENV = "env"
    UNBIND = "unbind"
    HELP = "help"
    NEWLINE = "newline"
    EOF = "eof"
    ERROR = "error"


@dataclass(frozen=True)
class Token:
    """Lexeme with its location. start is the 1-based column of the first character."""
    type: TokenType
    lexeme: str
    line: int
    start: int
    length: int

    @property
    def is_eof(self):
        return self.type is TokenType.EOF

    def __str__(self):
        return "<newline>" if self.type is TokenType.NEWLINE else self.lexeme


class Lexer:
    """Restartable lexer: call reset (or pass source to tokenize) to reuse the same instance on new input."""
    KEYWORDS = {
        "lambda": TokenType.LAMBDA,
        "env": TokenType.ENV,
        "unbind": TokenType.UNBIND,
        "help": TokenType.HELP,
    }
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "λ": TokenType.LAMBDA,
        "\\": TokenType.LAMBDA,
        ".": TokenType.DOT,
        "=": TokenType.EQUALS,
    }
    WHITESPACE = " \r\t"

    def __init__(self, source="", logger=None):
        self.logger = logger if logger is not None else Logger()
        self.reset(source)

    def reset(self, source):
        """Replaces the source and rewinds the lexer."""
        self.source = source
        self.tokens = []
        self.errors = []

        self._start = 0
        self._current = 0
        self._line = 1
        self._line_start = 0

    def tokenize(self, source=None):
        """Returns the list of tokens of source (or of the current source, if None). Errors are reported through the
        logger and collected in self.errors.
        """
        self.reset(self.source if source is None else source)

        while not self._at_end():
            self._start = self._current
            self._scan_token()

        if not self.tokens or self.tokens[-1].type is not TokenType.NEWLINE:
            self._start = self._current
            self.tokens.append(self._make_token(TokenType.NEWLINE, "<newline>"))

        self._start = self._current
        self.tokens.append(self._make_token(TokenType.EOF, ""))

        return self.tokens

    def _scan_token(self):
        char = self._advance()

        if char in Lexer.SINGLE:
            self._add_token(Lexer.SINGLE[char])
        elif char in Lexer.WHITESPACE:
            pass
        elif char == "\n":
            self._add_token(TokenType.NEWLINE)
            self._line += 1
            self._line_start = self._current
        elif char == "#":
            while not self._at_end() and self._peek() != "\n":
                self._advance()
        elif Lexer.is_identifier_start(char):
            self._identifier()
        else:
            self._error(char)

    def _identifier(self):
        while not self._at_end() and Lexer.is_identifier_part(self._peek()):
            self._advance()

        text = self.source[self._start:self._current]
        self._add_token(Lexer.KEYWORDS.get(text, TokenType.IDENTIFIER))

    def _error(self, char):
        """Reports the character just consumed. Lexing continues with the next character."""
        column = self._start - self._line_start + 1
        token = Token(TokenType.ERROR, char, self._line, column, 1)

        error = LexError(char, self._line, column, self._current_line())
        self.errors.append(error)
        self.logger.report_error(token, error.raw_msg)

    @staticmethod
    def is_identifier_start(char):
        return "a" <= char <= "z"

    @staticmethod
    def is_identifier_part(char):
        return "a" <= char <= "z" or "0" <= char <= "9"

    def _current_line(self):
        end = self.source.find("\n", self._line_start)
        return self.source[self._line_start:end if end != -1 else len(self.source)]

    def _peek(self):
        return self.source[self._current]

    def _advance(self):
        char = self.source[self._current]
        self._current += 1
        return char

    def _at_end(self):
        return self._current >= len(self.source)

    def _add_token(self, token_type):
        self.tokens.append(self._make_token(token_type, self.source[self._start:self._current]))

    def _make_token(self, token_type, lexeme):
        return Token(
            token_type,
            lexeme,
            self._line,
            self._start - self._line_start + 1,
            self._current - self._start
        )


def tokenize(source, logger=None):
    """Shortcut for Lexer(logger=logger).tokenize(source)."""
    return Lexer(logger=logger).tokenize(source)
