"""Error handling for the lambdalearner interpreter. Only GenericExceptions should be encountered during evaluation: if
another type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


def escape(text):
    """Escapes braces in text so that it can be used as a GenericException message template."""
    return text.replace("{", "{{").replace("}", "}}")


class GenericException(Exception):
    """Templates an error message so that it can be used to throw an interpreter error."""

    def __init__(self, msg, exprs=None, internal=False):
        """Parses args for GenericException."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.raw_msg = msg.format(*exprs)
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.internal = internal

        super().__init__(self.raw_msg)


class LexError(GenericException):
    """Unscannable character. Recorded by the lexer, never raised past it."""

    def __init__(self, char, line, column, source_line=""):
        super().__init__("Unexpected character: '{1}'", (source_line, char))
        self.char = char
        self.line = line
        self.column = column


class ParseError(GenericException):
    """Malformed grammar. token is the offending token, if known."""

    def __init__(self, msg="Parsing error", token=None):
        super().__init__(escape(msg))
        self.token = token


class RecursionDepthError(GenericException):
    """Reduction (or expansion) nested deeper than the recursion bound. term is the textual form of the term that was
    being reduced when the bound was hit.
    """

    def __init__(self, term):
        msg = ("Non-terminating reduction detected in expression: {}\n"
               "This expression appears to reduce infinitely. Common examples of such terms include:\n"
               "- (λx.x x x) (λx.x x x)  [The omega combinator]\n"
               "- Terms with circular substitutions")
        super().__init__(msg, term)
        self.term = term


class TransformError(GenericException):
    """Failure while walking a term tree: an unknown term variant (internal) or a term nested too deeply."""

    def __init__(self, msg, internal=True):
        super().__init__(escape(msg), internal=internal)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom interpreter errors."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to interpreting a line."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after a line was interpreted successfully."""
        self.traceback[path] = (None, None)

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # keep registered files, drop lines

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("beta normal form might exist, but maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(escape(f"unknown error: '{exc_type.__name__}: {exc_val}'"), internal=True))
            do_exit = True

        return not do_exit
