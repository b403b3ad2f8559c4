"""Log side-channel for the interpreter. Every evaluation appends LogEntries that together form an audit trail of the
derivation: input echo, δ-expansions, α/β steps, the final result, equivalence notes and errors. The shell (or any
other consumer) receives entries through transports as they are recorded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
import threading
import uuid


class Verbosity(IntEnum):
    """How much of the derivation is logged: NONE logs results and errors, LOW adds every step, HIGH adds
    explanations.
    """
    NONE = 0
    LOW = 1
    HIGH = 2


class LogKind(Enum):
    NORMAL = "normal"
    INPUT_ECHO = "input_echo"
    PARSED_INPUT = "parsed_input"
    ORIGINAL_TERM = "original_term"
    ALPHA_REDUCTION = "alpha_reduction"
    BETA_REDUCTION = "beta_reduction"
    DELTA_EXPANSION = "delta_expansion"
    DELTA_SUMMARY = "delta_summary"
    FINAL_RESULT = "final_result"
    EQUIVALENCE = "equivalence"
    FREE_RENAME = "free_rename"
    ERROR = "error"


REDUCTION_KINDS = (
    LogKind.ORIGINAL_TERM,
    LogKind.ALPHA_REDUCTION,
    LogKind.BETA_REDUCTION,
    LogKind.DELTA_EXPANSION,
    LogKind.FINAL_RESULT,
    LogKind.EQUIVALENCE,
)


@dataclass(frozen=True)
class LogEntry:
    """One immutable line of the log. parent_id links context lines (e.g. an error's source excerpt) to the entry
    they belong to.
    """
    message: str
    kind: LogKind
    sequence: int
    parent_id: uuid.UUID = None
    details: str = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def formatted(self):
        """Display form of this entry."""
        if self.kind is LogKind.INPUT_ECHO:
            return f"λ> {self.message}"
        elif self.kind in (LogKind.PARSED_INPUT, LogKind.ORIGINAL_TERM):
            return f"λ > {self.message}"
        elif self.kind is LogKind.ALPHA_REDUCTION:
            return f"    {self.details}" if self.details else f"α > {self.message}"
        elif self.kind is LogKind.BETA_REDUCTION:
            base = f"β > {self.message}"
            return f"{base}\n    {self.details}" if self.details else base
        elif self.kind is LogKind.DELTA_EXPANSION:
            return f"    δ > {self.message}"
        elif self.kind is LogKind.DELTA_SUMMARY:
            return f"Δ > {self.message}"
        elif self.kind is LogKind.FINAL_RESULT:
            return f">>> {self.message}"
        elif self.kind is LogKind.EQUIVALENCE:
            return f"    ↳ {self.message}"
        elif self.kind is LogKind.FREE_RENAME:
            return f"ε > {self.message}"
        elif self.kind is LogKind.ERROR and self.parent_id is not None:
            return self.message  # source excerpt under its error
        elif self.kind is LogKind.ERROR:
            base = f"Error: {self.message}"
            if self.details:
                base += "\n" + "\n".join(f"    {line}" for line in self.details.split("\n"))
            return base
        return self.message

    @property
    def indentation(self):
        """Nesting level used when rendering this entry."""
        if self.kind in (LogKind.DELTA_EXPANSION, LogKind.EQUIVALENCE):
            return 1
        elif self.kind is LogKind.BETA_REDUCTION and self.details:
            return 1
        return 0

    def __lt__(self, other):
        return (self.sequence, self.timestamp) < (other.sequence, other.timestamp)


class Logger:
    """Append-only store of LogEntries. Transports are callables that receive each entry as it is recorded."""

    def __init__(self, verbosity=Verbosity.NONE, transports=None, source=None):
        self.entries = []
        self.has_error = False

        self.verbosity = Verbosity(verbosity)
        self.transports = list(transports) if transports else []
        self.source = source.split("\n") if source else []

        self._sequence = 0
        self._lock = threading.Lock()

    def set_options(self, verbosity=None, transports=None, source=None):
        """Updates any option that is not None."""
        if verbosity is not None:
            self.verbosity = Verbosity(verbosity)
        if transports is not None:
            self.transports = list(transports)
        if source is not None:
            self.source = source.split("\n")

    def _next_sequence(self):
        with self._lock:
            self._sequence += 1
            return self._sequence

    def log(self, message, kind=LogKind.NORMAL, parent_id=None, details=None):
        """Records an entry regardless of verbosity and returns its id."""
        entry = LogEntry(message, kind, self._next_sequence(), parent_id=parent_id, details=details)
        self.entries.append(entry)

        for transport in self.transports:
            transport(entry)

        return entry.id

    def vlog(self, message, kind=LogKind.NORMAL, parent_id=None, details=None):
        """Records an entry only if verbosity is at least LOW. Returns the entry id, or None if nothing was logged."""
        if self.verbosity < Verbosity.LOW:
            return None
        return self.log(message, kind, parent_id, details)

    def vvlog(self, message, kind=LogKind.NORMAL, parent_id=None, details=None):
        """Records an entry only if verbosity is HIGH."""
        if self.verbosity < Verbosity.HIGH:
            return None
        return self.log(message, kind, parent_id, details)

    def log_input(self, source):
        return self.log(source, LogKind.INPUT_ECHO)

    def log_term(self, term, parent_id=None):
        return self.vlog(term, LogKind.ORIGINAL_TERM, parent_id)

    def log_alpha(self, term, explanation=None, parent_id=None):
        return self.vlog(term, LogKind.ALPHA_REDUCTION, parent_id, explanation)

    def log_beta(self, term, original=None, result=None, parent_id=None):
        explanation = None
        if original is not None and result is not None and self.verbosity >= Verbosity.HIGH:
            explanation = f"Beta reducing '{original}' into '{result}'"
        return self.vlog(term, LogKind.BETA_REDUCTION, parent_id, explanation)

    def log_delta(self, name, expanded, parent_id=None):
        return self.vlog(f"expanded '{name}' into '{expanded}'", LogKind.DELTA_EXPANSION, parent_id)

    def log_delta_summary(self, term, parent_id=None):
        return self.vlog(term, LogKind.DELTA_SUMMARY, parent_id)

    def log_free_rename(self, name, new_name, parent_id=None):
        return self.vlog(f"'{name}' → '{new_name}'", LogKind.FREE_RENAME, parent_id)

    def log_result(self, term, parent_id=None):
        return self.log(term, LogKind.FINAL_RESULT, parent_id)

    def log_equivalence(self, names, parent_id=None):
        return self.log(f"equivalent to: {', '.join(names)}", LogKind.EQUIVALENCE, parent_id)

    def report_error(self, token, message, verbose=True, parent_id=None):
        """Records an error located at token (see lexer.Token). If the offending source line is known, a child entry
        with the line and a caret indicator is recorded as well. token may be None for errors without a location.
        """
        self.has_error = True

        if token is None:
            return self.log(message, LogKind.ERROR, parent_id)

        if token.is_eof:
            location = "end of file"
        else:
            location = f"line {token.line} [{token.start}, {token.start + token.length}]"
        error_id = self.log(f"{location}: {message}", LogKind.ERROR, parent_id)

        if verbose and 0 < token.line <= len(self.source):
            self._log_error_context(token, error_id)

        return error_id

    def _log_error_context(self, token, parent_id):
        line = self.source[token.line - 1]
        indicator = " " * max(token.start - 1, 0) + "^" * max(token.length, 1)
        if token.is_eof:
            indicator += "^"
        self.log(f"{line}\n{indicator}", LogKind.ERROR, parent_id)

    def clear(self):
        """Drops all entries and restarts sequence numbering."""
        with self._lock:
            self.entries = []
            self.has_error = False
            self._sequence = 0

    def children(self, parent_id):
        return [entry for entry in self.entries if entry.parent_id == parent_id]

    def reduction_steps(self):
        """Entries that make up the derivation itself (no echoes or errors)."""
        return [entry for entry in self.entries if entry.kind in REDUCTION_KINDS]

    def formatted(self):
        return "\n".join(entry.formatted for entry in sorted(self.entries))
