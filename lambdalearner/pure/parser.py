"""Recursive descent parser: tokens to term trees and statements.

```
<program>     ::= <statement>*
<statement>   ::= <binding> | <command> | <term> NEWLINE
<binding>     ::= IDENTIFIER "=" <term> NEWLINE
<command>     ::= "env" NEWLINE | "help" NEWLINE | "unbind" IDENTIFIER NEWLINE

<term>        ::= "λ" IDENTIFIER+ "." <term>   ; abstraction bodies are greedy: λx.x y = λx.(x y)
                | <application>
<application> ::= <atom> <atom>*              ; associating by left: a b c = ((a b) c)
<atom>        ::= "(" <term> ")" | IDENTIFIER | "λ" IDENTIFIER+ "." <term>
```

Multi-parameter abstractions (λx y. e) are curried into nested single-parameter abstractions. Every binder receives a
fresh id from a counter owned by the parser, and each variable occurrence is resolved to the id of the innermost
enclosing binder with its name (0 if there is none, i.e. the variable is free).

Errors are reported through the logger with their location. Statement parsing recovers by skipping to the next
newline, so that one bad statement does not hide the others.
"""

from enum import Enum

from lambdalearner.lang.error import ParseError
from lambdalearner.lang.log import Logger
from lambdalearner.pure.lexer import TokenType
from lambdalearner.pure.term import Abstraction, Application, Variable
from lambdalearner.pure.transform import recursion_limit, stringify


NESTING_ERROR = "Expression nested too deeply"


class TermStmt:
    """A term to be evaluated."""

    def __init__(self, term):
        self.term = term

    def __repr__(self):
        return f"TermStmt({self.term!r})"


class BindingStmt:
    """name = term"""

    def __init__(self, name, term):
        self.name = name
        self.term = term

    def __repr__(self):
        return f"BindingStmt(name='{self.name}', term={self.term!r})"


class CommandType(Enum):
    NONE = "none"
    ENV = "env"
    UNBIND = "unbind"
    HELP = "help"


class CommandStmt:
    """Interpreter command. argument is only used by unbind."""

    def __init__(self, type, argument=None):
        self.type = type
        self.argument = argument

    def __repr__(self):
        return f"CommandStmt(type={self.type}, argument={self.argument!r})"


class AbstractionIndexList:
    """Stack of binder ids per name. Pushing a name on entering its abstraction and popping it on exit means nested
    binders with the same name resolve to the innermost one.
    """

    def __init__(self, start_index=1):
        self.counter = start_index
        self.ids = {}

    def push(self, name):
        self.ids.setdefault(name, []).append(self.counter)
        self.counter += 1

    def pop(self, name):
        self.ids[name].pop()
        if not self.ids[name]:
            del self.ids[name]

    def get(self, name):
        """Id of the innermost binder of name, or 0 if name is not bound."""
        return self.ids[name][-1] if self.has(name) else 0

    def has(self, name):
        return name in self.ids


class Parser:
    """Parses one token list at a time. The id counter survives set_tokens, so ids stay unique across inputs."""

    def __init__(self, tokens=None, logger=None, start_index=1):
        self.logger = logger if logger is not None else Logger()
        self.id_list = AbstractionIndexList(start_index)
        self.set_tokens(tokens if tokens is not None else [])

    def set_tokens(self, tokens):
        self.tokens = list(tokens)
        self.current = 0

    def current_index(self):
        """Next id the parser will hand out."""
        return self.id_list.counter

    def parse(self):
        """Parses every statement. Malformed statements are reported and skipped."""
        statements = []
        with recursion_limit():
            while not self._at_end():
                stmt = self._statement()
                if stmt is not None:
                    statements.append(stmt)
        return statements

    def parse_term(self):
        """Parses the tokens as exactly one term. Returns None (after reporting) if they are not a single valid term,
        or if the term has a known non-terminating shape.
        """
        if self._at_end():
            return None

        try:
            with recursion_limit():
                term = self._term_statement().term
                if not self._at_end():
                    raise self._error(self._peek(), f"Unexpected token '{self._peek()}'")
                nonterminating = Parser.is_nonterminating_pattern(term)
        except ParseError:
            return None
        except RecursionError:
            self._error(self._peek(), NESTING_ERROR)
            return None

        if nonterminating:
            msg = "Non-terminating expression detected. This would lead to infinite reduction."
            self.logger.report_error(None, msg)
            return None

        return term

    @staticmethod
    def is_nonterminating_pattern(term):
        """Literal check for a few self-application shapes. This is a usability guard only: whether a term has a
        normal form is undecidable in general.
        """
        expr = stringify(term)
        return "(λx. x x x)" in expr or "(λx. (x x))" in expr or ("x x" in expr and "λx" in expr)

    def _statement(self):
        try:
            while self._match(TokenType.NEWLINE):
                pass

            if self._at_end():
                return None
            elif self._check(TokenType.IDENTIFIER) and self._check_next(TokenType.EQUALS):
                return self._binding_statement()
            elif self._match(TokenType.ENV):
                return self._command_statement(CommandType.ENV)
            elif self._match(TokenType.HELP):
                return self._command_statement(CommandType.HELP)
            elif self._match(TokenType.UNBIND):
                return self._unbind_statement()

            return self._term_statement()

        except ParseError:
            self._synchronize()
            return None

        except RecursionError:
            self._error(self._peek(), NESTING_ERROR)
            self._synchronize()
            return None

    def _binding_statement(self):
        name = self._consume(TokenType.IDENTIFIER, "Expected identifier")
        self._consume(TokenType.EQUALS, "Expected '=' after identifier")
        term = self._term()
        self._consume(TokenType.NEWLINE, "Expected newline after binding")
        return BindingStmt(name.lexeme, term)

    def _command_statement(self, command_type):
        self._consume(TokenType.NEWLINE, f"Expected newline after {command_type.value} command")
        return CommandStmt(command_type)

    def _unbind_statement(self):
        name = self._consume(TokenType.IDENTIFIER, "Expected identifier after unbind")
        self._consume(TokenType.NEWLINE, "Expected newline after unbind statement")
        return CommandStmt(CommandType.UNBIND, name.lexeme)

    def _term_statement(self):
        term = self._term()
        self._consume(TokenType.NEWLINE, "Expected newline after term")
        return TermStmt(term)

    def _term(self):
        if self._match(TokenType.LAMBDA):
            return self._abstraction()
        return self._application()

    def _abstraction(self):
        """Called after the lambda marker has been consumed."""
        names = [self._consume(TokenType.IDENTIFIER, "Expected identifier after lambda").lexeme]
        while self._check(TokenType.IDENTIFIER):
            names.append(self._advance().lexeme)

        self._consume(TokenType.DOT, "Expected '.' after lambda parameters")

        for name in names:
            self.id_list.push(name)

        try:
            result = self._term()
        except (ParseError, RecursionError):
            for name in names:
                self.id_list.pop(name)
            raise

        for name in reversed(names):  # innermost first
            result = Abstraction(name, self.id_list.get(name), result)
            self.id_list.pop(name)

        return result

    def _application(self):
        term = self._atom()
        while self._check(TokenType.LEFT_PAREN) or self._check(TokenType.IDENTIFIER) or self._check(TokenType.LAMBDA):
            term = Application(term, self._atom())
        return term

    def _atom(self):
        if self._match(TokenType.LEFT_PAREN):
            term = self._term()
            self._consume(TokenType.RIGHT_PAREN, "Expected ')' after expression")
            return term

        elif self._match(TokenType.IDENTIFIER):
            name = self._previous().lexeme
            return Variable(name, self.id_list.get(name))

        elif self._match(TokenType.LAMBDA):
            return self._abstraction()

        raise self._error(self._peek(), "Expected expression")

    def _match(self, token_type):
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _check(self, token_type):
        return not self._at_end() and self._peek().type is token_type

    def _check_next(self, token_type):
        return self.current + 1 < len(self.tokens) and self.tokens[self.current + 1].type is token_type

    def _advance(self):
        if not self._at_end():
            self.current += 1
        return self._previous()

    def _consume(self, token_type, msg):
        if self._check(token_type):
            return self._advance()
        raise self._error(self._peek(), msg)

    def _synchronize(self):
        """Skips tokens up to and including the next newline."""
        self._advance()
        while not self._at_end():
            if self._previous().type is TokenType.NEWLINE:
                return
            self._advance()

    def _at_end(self):
        return not self.tokens or self._peek().type is TokenType.EOF

    def _peek(self):
        return self.tokens[self.current]

    def _previous(self):
        return self.tokens[self.current - 1]

    def _error(self, token, msg):
        """Reports msg at token and returns (does not raise) the corresponding ParseError."""
        self.logger.report_error(token, msg)
        return ParseError(msg, token)
