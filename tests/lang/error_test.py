import contextlib
import io
import unittest

from lambdalearner.lang.error import (ErrorHandler, GenericException, LexError, ParseError, RecursionDepthError,
                                      TransformError, escape)


class GenericExceptionTestCase(unittest.TestCase):

    def test_escape(self):
        cases = {
            "plain": "plain",
            "{x}": "{{x}}",
            "λx. {": "λx. {{",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, escape(case), case)
            self.assertEqual(case, escape(case).format(), case)

    def test_messages(self):
        self.assertEqual("'a.lc' could not be opened", GenericException("'{}' could not be opened", "a.lc").raw_msg)
        self.assertEqual("no exprs", GenericException("no exprs").raw_msg)
        self.assertEqual("bad {x}", ParseError("bad {x}").raw_msg)
        self.assertEqual("bad {x}", str(ParseError("bad {x}")))

        error = LexError("$", 1, 4, "ab $")
        self.assertEqual("Unexpected character: '$'", error.raw_msg)
        self.assertEqual((1, 4), (error.line, error.column))

        error = RecursionDepthError("(y y)")
        self.assertIn("expression: (y y)\n", error.raw_msg)
        self.assertEqual("(y y)", error.term)

        self.assertTrue(TransformError("unknown").internal)
        self.assertFalse(TransformError("too deep", internal=False).internal)


class ErrorHandlerTestCase(unittest.TestCase):

    def run_handler(self, handler, error):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            with handler:
                raise error
        return out.getvalue()

    def test_throw(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("a.lc")
        handler.register_line("a.lc", "(λx. x) y", 3)

        output = self.run_handler(handler, GenericException("'{}' went wrong", "y"))
        self.assertIn("File 'a.lc', line 3:\n    (λx. x) y\n", output)
        self.assertIn("error: ", output)
        self.assertIn("went wrong", output)
        self.assertNotIn("Traceback:", output)
        self.assertNotIn("[internal]", output)
        self.assertEqual({"a.lc": (None, None)}, handler.traceback)

    def test_traceback(self):
        handler = ErrorHandler(fatal=False)
        handler.register_line("a.lc", "b", 1)
        handler.register_line("b.lc", "x y", 2)

        output = self.run_handler(handler, ParseError("bad"))
        self.assertTrue(output.startswith("Traceback:\n  File 'a.lc', line 1:\n"), output)
        self.assertIn("File 'b.lc', line 2:", output)

        handler.register_line("a.lc", "b", 1)
        handler.remove_line("a.lc")
        self.assertNotIn("a.lc", self.run_handler(handler, ParseError("bad")))

    def test_fatal(self):
        with self.assertRaises(SystemExit) as context:
            self.run_handler(ErrorHandler(), GenericException("bad"))
        self.assertEqual(1, context.exception.code)

        self.assertRaises(SystemExit, self.run_handler, ErrorHandler(fatal=False), SystemExit(0))

    def test_suppressed(self):
        cases = {
            KeyboardInterrupt(): "keyboard interrupt",
            RecursionError(): "maximum recursion depth exceeded",
            RecursionDepthError("(y y)"): "Non-terminating reduction",
        }
        for error, expected in cases.items():
            self.assertIn(expected, self.run_handler(ErrorHandler(fatal=False), error), error)

    def test_unknown(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            with self.assertRaises(ValueError):
                with ErrorHandler(fatal=False):
                    raise ValueError("boom {0}")
        self.assertIn("[internal]", out.getvalue())
        self.assertIn("unknown error: 'ValueError: boom {0}'", out.getvalue())

        with contextlib.redirect_stdout(io.StringIO()):
            with ErrorHandler(fatal=False):
                pass


if __name__ == '__main__':
    unittest.main()
