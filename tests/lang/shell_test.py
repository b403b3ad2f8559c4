import contextlib
import io
import os
import tempfile
import unittest

from lambdalearner import main
from lambdalearner.lang.error import ErrorHandler
from lambdalearner.lang.interpreter import Interpreter
from lambdalearner.lang.log import LogEntry, LogKind
from lambdalearner.lang.shell import Printer, Shell


class PrinterTestCase(unittest.TestCase):

    def test_print(self):
        out = io.StringIO()
        printer = Printer(color=False, file=out)

        printer(LogEntry("(λx. x) y", LogKind.INPUT_ECHO, 1))
        printer(LogEntry("y", LogKind.FINAL_RESULT, 2))
        self.assertEqual(">>> y\n", out.getvalue())

        Printer(skip=(), color=False, file=out)(LogEntry("a", LogKind.INPUT_ECHO, 3))
        self.assertEqual(">>> y\nλ> a\n", out.getvalue())


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.shell = Shell(Interpreter(transports=[Printer(color=False, file=self.out)]), ErrorHandler(fatal=False))

    def test_default(self):
        self.shell.onecmd("(λx. x) y")
        self.assertEqual(">>> y\n", self.out.getvalue())

        self.shell.onecmd("two2 = λf x. f (f x)")
        self.assertIn("Bound 'two2'", self.out.getvalue())

    def test_continuation(self):
        self.shell.onecmd("(λx.")
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.assertEqual("", self.out.getvalue())

        self.shell.onecmd("x) y")
        self.assertEqual(Shell.prompt, self.shell.prompt)
        self.assertEqual(">>> y\n", self.out.getvalue())

    def test_errors(self):
        self.shell.onecmd("(λx.")
        self.shell.onecmd(")")
        self.assertIn("Error: ", self.out.getvalue())

    def test_commands(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.shell.onecmd("help")
        self.assertIn("Available commands:", out.getvalue())

        self.assertTrue(self.shell.onecmd("exit"))
        self.assertFalse(self.shell.emptyline())


class MainTestCase(unittest.TestCase):

    def test_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".lc", delete=False, encoding="utf-8") as file:
            file.write("# church numerals\nsix = plus three three\nfirst (pair a b)\n(λx. x) y\n")

        try:
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                main.main([file.name])
            self.assertEqual(["Bound 'six'", "a", "y"], out.getvalue().splitlines())
        finally:
            os.remove(file.name)

    def test_missing_file(self):
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertRaises(SystemExit, main.main, [os.path.join(tempfile.gettempdir(), "missing", "none.lc")])


if __name__ == '__main__':
    unittest.main()
