"""Handles interactive mode for the lambdalearner interpreter. Uses cmd as backend."""

import cmd
import sys

from termcolor import colored

from lambdalearner.lang.error import ErrorHandler
from lambdalearner.lang.log import LogKind


SHELL = "<stdin>"

COLORS = {
    LogKind.ERROR: "red",
    LogKind.FINAL_RESULT: "green",
    LogKind.EQUIVALENCE: "cyan",
    LogKind.ALPHA_REDUCTION: "yellow",
    LogKind.BETA_REDUCTION: "yellow",
    LogKind.DELTA_EXPANSION: "blue",
    LogKind.DELTA_SUMMARY: "blue",
    LogKind.FREE_RENAME: "magenta",
}


class Printer:
    """Log transport that prints entries as they are recorded. Kinds in skip are not printed."""

    def __init__(self, skip=(LogKind.INPUT_ECHO,), color=True, file=None):
        self.skip = set(skip)
        self.color = color
        self.file = file

    def __call__(self, entry):
        if entry.kind in self.skip:
            return

        text = entry.formatted
        if self.color and entry.kind in COLORS:
            text = colored(text, COLORS[entry.kind])

        print(text, file=self.file if self.file is not None else sys.stdout)


class Shell(cmd.Cmd):
    """Lambda calculus interpreter shell. Output reaches the user through the interpreter's log transports."""
    intro = "Lambda calculus interpreter :: lambdalearner\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "

    def __init__(self, interpreter, error_handler=None, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.interpreter = interpreter
        self.error_handler = error_handler if error_handler is not None else ErrorHandler(fatal=False)
        self.error_handler.register_file(SHELL)

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Runs a line of statements. Lines with unbalanced parentheses are continued on the next line."""
        with self.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line = self._tmp_line + line

            if line.count("(") > line.count(")"):
                self._tmp_line = line + " "
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.error_handler.register_line(SHELL, line, self.line_num)
            self.interpreter.interpret(line)
            self.error_handler.remove_line(SHELL)

    def do_help(self, arg):
        """Prints the interpreter's command summary instead of cmd's docs."""
        print(self.interpreter.handle_command("help"))

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
