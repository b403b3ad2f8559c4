"""Interpreter session: the public API of lambdalearner.

An Interpreter owns the named terms of a session (built-ins plus user bindings) and runs the pipeline

    source --Lexer--> tokens --Parser--> term --BindingResolver--> expanded term --Reducer--> normal form

appending every step to its Logger. Nothing here raises past evaluate/interpret: failures come back as values and as
ERROR log entries.
"""

from collections import defaultdict
from dataclasses import dataclass, field, replace
import threading

from lambdalearner.lang.builtins import definitions
from lambdalearner.lang.error import GenericException, ParseError, escape
from lambdalearner.lang.log import Logger, LogKind, Verbosity
from lambdalearner.pure.hashing import structure_hash
from lambdalearner.pure.lexer import Lexer
from lambdalearner.pure.parser import BindingStmt, CommandStmt, CommandType, Parser, TermStmt
from lambdalearner.pure.reducer import Reducer
from lambdalearner.pure.resolver import BindingResolver
from lambdalearner.pure.transform import stringify


HELP = """Available commands:
env              - Show current environment
unbind <name>    - Remove binding
help             - Show this help

Examples:
\\x. x           - Identity function
(\\x. x) y       - Application
\\t. \\f. t       - Church true
\\t. \\f. f       - Church false
two = \\f x. f (f x)  - Bind a name

Built-in terms:
true  - Church boolean true
false - Church boolean false
and   - Church boolean AND
or    - Church boolean OR
not   - Church boolean NOT"""


def _unknown_error(exc):
    return GenericException(escape(f"unknown error: '{type(exc).__name__}: {exc}'"), internal=True)


@dataclass
class InterpreterOptions:
    verbosity: Verbosity = Verbosity.NONE
    transports: list = field(default_factory=list)
    rename_free_vars: bool = False
    show_equivalent: bool = True


class Interpreter:
    """Governs an interpreter session, with control over the named terms in scope. Only one evaluation runs at a time
    per interpreter.
    """

    def __init__(self, options=None, **kwargs):
        self.options = replace(options or InterpreterOptions(), **kwargs)
        self.logger = Logger(self.options.verbosity, self.options.transports)

        self.lexer = Lexer(logger=self.logger)
        self.parser = Parser(logger=self.logger)

        self.bindings = {}                          # name: term
        self.structure_hashes = defaultdict(list)   # structure hash: names of bindings with that hash
        self.resolver = BindingResolver(self.bindings, self.logger)

        self._lock = threading.RLock()

        self._load_builtins()

    def _load_builtins(self):
        for names, source in definitions():
            term = self._parse_term(source)
            if term is None:
                raise GenericException("built-in '{}' could not be parsed", names[0], internal=True)
            for name in names:
                self.bind(name, term)

        self.logger.clear()

    def _parse_term(self, source):
        self.parser.set_tokens(self.lexer.tokenize(source))
        return self.parser.parse_term()

    def set_options(self, verbosity=None, transports=None, rename_free_vars=None, show_equivalent=None):
        """Reconfigures logging and reduction for subsequent evaluations. Options that are None are left unchanged."""
        changes = {
            "verbosity": verbosity,
            "transports": transports,
            "rename_free_vars": rename_free_vars,
            "show_equivalent": show_equivalent,
        }
        with self._lock:
            self.options = replace(self.options, **{key: val for key, val in changes.items() if val is not None})
            self.logger.set_options(verbosity=self.options.verbosity, transports=self.options.transports)
            self.resolver = BindingResolver(self.bindings, self.logger)

    def evaluate(self, source):
        """Evaluates source as a single term. Returns (normal form, None) on success, (None, error) otherwise."""
        with self._lock:
            self._start(source)

            try:
                term = self._parse_term(source)
                if term is None:
                    error = ParseError("Failed to parse expression")
                    self.logger.report_error(None, error.raw_msg)
                    return None, error

                self.logger.log(stringify(term), LogKind.PARSED_INPUT)
                return self._run(term), None

            except GenericException as error:
                self.logger.report_error(None, error.raw_msg)
                return None, error

            except Exception as exc:
                error = _unknown_error(exc)
                self.logger.report_error(None, error.raw_msg)
                return None, error

    def interpret(self, source):
        """Runs every statement in source (bindings, commands and terms), in order. A statement that fails is reported
        and does not stop the others. Returns the outputs: normal forms, binding notes and command results.
        """
        with self._lock:
            self._start(source)

            self.parser.set_tokens(self.lexer.tokenize(source))
            outputs = []

            for stmt in self.parser.parse():
                try:
                    output = self._execute(stmt)
                except GenericException as error:
                    self.logger.report_error(None, error.raw_msg)
                    continue
                except Exception as exc:
                    self.logger.report_error(None, _unknown_error(exc).raw_msg)
                    continue

                outputs.append(output)

            return outputs

    def _execute(self, stmt):
        if isinstance(stmt, BindingStmt):
            self.bind(stmt.name, stmt.term)
            output = f"Bound '{stmt.name}'"
            self.logger.log(output)
            return output

        elif isinstance(stmt, CommandStmt):
            output = self.handle_command(stmt)
            self.logger.log(output)
            return output

        elif isinstance(stmt, TermStmt):
            self.logger.log_term(stringify(stmt.term))
            if Parser.is_nonterminating_pattern(stmt.term):
                msg = "Non-terminating expression detected. This would lead to infinite reduction."
                raise GenericException(msg)
            return stringify(self._run(stmt.term))

        raise GenericException("unknown statement '{}'", repr(stmt), internal=True)

    def _start(self, source):
        self.logger.clear()
        self.logger.set_options(source=source)
        self.logger.log_input(source)

    def _run(self, term):
        """Resolves and reduces term, logging the result and, if enabled, the named terms it is equivalent to."""
        resolved = self.resolver.resolve_term(term)
        result = Reducer(self.options.rename_free_vars, self.logger).reduce_term(resolved)

        result_id = self.logger.log_result(stringify(result))

        if self.options.show_equivalent:
            names = self.equivalent_names(result)
            if names:
                self.logger.log_equivalence(names, parent_id=result_id)

        return result

    def equivalent_names(self, term):
        """Names of bindings whose structure hash matches term's."""
        return list(self.structure_hashes.get(structure_hash(term), []))

    def bind(self, name, term):
        """Binds name to term, replacing any previous binding of name."""
        with self._lock:
            if name in self.bindings:
                self._delete_hash(name)
            self.bindings[name] = term
            self.structure_hashes[structure_hash(term)].append(name)

    def unbind(self, name):
        with self._lock:
            if name not in self.bindings:
                return f"'{name}' was not bound"
            self._delete_hash(name)
            del self.bindings[name]
            return f"Unbound '{name}'"

    def _delete_hash(self, name):
        key = structure_hash(self.bindings[name])
        names = self.structure_hashes.get(key, [])
        if name in names:
            names.remove(name)
        if not names:
            self.structure_hashes.pop(key, None)

    def handle_command(self, command):
        """Runs command: a CommandStmt, or its source form ("env", "help", "unbind <name>"). Returns the output."""
        if isinstance(command, str):
            command = Interpreter.parse_command(command)

        with self._lock:
            if command.type is CommandType.ENV:
                return self.env()
            elif command.type is CommandType.UNBIND:
                if command.argument is None:
                    return "Missing argument for unbind"
                return self.unbind(command.argument)
            elif command.type is CommandType.HELP:
                return HELP
            return "Unknown command"

    @staticmethod
    def parse_command(command):
        name, *args = command.split() or [""]
        try:
            command_type = CommandType(name)
        except ValueError:
            command_type = CommandType.NONE
        return CommandStmt(command_type, args[0] if args else None)

    def env(self):
        """Every current binding, one per line."""
        result = "Current bindings:\n"
        for name, term in self.bindings.items():
            result += f"{name}:\t{stringify(term)}\n"
        return result
