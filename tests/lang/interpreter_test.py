import unittest

from lambdalearner.lang.error import ParseError, RecursionDepthError
from lambdalearner.lang.interpreter import HELP, Interpreter, InterpreterOptions
from lambdalearner.lang.log import LogKind, Verbosity
from lambdalearner.pure.term import Abstraction, Variable


class InterpreterTestCase(unittest.TestCase):

    def setUp(self):
        self.interpreter = Interpreter()

    def evaluate(self, source):
        result, error = self.interpreter.evaluate(source)
        self.assertIsNone(error, source)
        return result

    def test_evaluate(self):
        cases = {
            "(λx. x) y": "y",
            "(λx. λy. x) a b": "a",
            "and true false": "false",
            "and true true": "true",
            "or false true": "true",
            "not true": "false",
            "if false a b": "b",
            "first (pair a b)": "a",
            "second (pair a b)": "b",
            "car (cons a b)": "a",
            "null nil": "true",
            "isempty (pair a b)": "false",
            "datum (tree d l r)": "d",
            "right (tree d l r)": "r",
            "iszero zero": "true",
            "iszero one": "false",
            "incr two": "three",
            "plus two three": "five",
            "times two two": "four",
            "(λt.λf.t) x y": "x",
            "(λa.λb.a b false) true false": "false",
        }
        for case, expected in cases.items():
            self.assertTrue(self.evaluate(case).alpha_equals(self.evaluate(expected)), case)

    def test_capture_avoidance(self):
        result = self.evaluate("(λx. λy. x) y")
        self.assertIsInstance(result, Abstraction)
        self.assertNotEqual("y", result.name)
        self.assertEqual("y", result.body.name)
        self.assertTrue(result.body.is_free)

    def test_errors(self):
        should_fail = {
            "(x": ParseError,
            "": ParseError,
            "λx.": ParseError,
            "(λx. x x) (λx. x x)": ParseError,
            "(λy. y y) (λy. y y)": RecursionDepthError,
        }
        for case, error_type in should_fail.items():
            result, error = self.interpreter.evaluate(case)
            self.assertIsNone(result, case)
            self.assertIsInstance(error, error_type, case)
            self.assertTrue(self.interpreter.logger.has_error, case)
            self.assertEqual(LogKind.ERROR, self.interpreter.logger.entries[-1].kind, case)

        self.interpreter.evaluate("(λx. x x) (λx. x x)")
        messages = [entry.message for entry in self.interpreter.logger.entries]
        self.assertIn("Non-terminating expression detected. This would lead to infinite reduction.", messages)

    def test_log(self):
        self.interpreter.evaluate("(λx. x) y")
        entries = self.interpreter.logger.entries
        self.assertEqual([LogKind.INPUT_ECHO, LogKind.PARSED_INPUT, LogKind.FINAL_RESULT], [e.kind for e in entries])
        self.assertEqual(["(λx. x) y", "((λx. x) y)", "y"], [entry.message for entry in entries])
        self.assertEqual([1, 2, 3], [entry.sequence for entry in entries])

        self.interpreter.set_options(verbosity=Verbosity.LOW)
        self.interpreter.evaluate("(λx. x) y")
        kinds = [entry.kind for entry in self.interpreter.logger.entries]
        self.assertIn(LogKind.BETA_REDUCTION, kinds)
        self.assertNotIn(LogKind.DELTA_EXPANSION, kinds)

        self.interpreter.evaluate("not true")
        kinds = [entry.kind for entry in self.interpreter.logger.entries]
        self.assertIn(LogKind.DELTA_EXPANSION, kinds)
        self.assertIn(LogKind.DELTA_SUMMARY, kinds)

    def test_equivalence(self):
        self.interpreter.evaluate("plus two three")
        logger = self.interpreter.logger

        result = next(entry for entry in logger.entries if entry.kind is LogKind.FINAL_RESULT)
        equivalence = logger.children(result.id)
        self.assertEqual(1, len(equivalence))
        self.assertEqual(LogKind.EQUIVALENCE, equivalence[0].kind)
        self.assertIn("five", equivalence[0].message)

        self.assertIn("false", self.interpreter.equivalent_names(self.evaluate("λa b. b")))
        self.assertIn("zero", self.interpreter.equivalent_names(self.evaluate("λa b. b")))
        self.assertEqual([], self.interpreter.equivalent_names(self.evaluate("a")))

        self.interpreter.set_options(show_equivalent=False)
        self.interpreter.evaluate("plus two three")
        self.assertNotIn(LogKind.EQUIVALENCE, [entry.kind for entry in self.interpreter.logger.entries])

    def test_interpret(self):
        outputs = self.interpreter.interpret("double = λf x. f (f x)\ndouble g c\n")
        self.assertEqual(["Bound 'double'", "(g (g c))"], outputs)
        self.assertIn("double", self.interpreter.equivalent_names(self.evaluate("two")))

        outputs = self.interpreter.interpret("(x\ny\n(λx. x x) (λx. x x)\nz\n")
        self.assertEqual(["y", "z"], outputs)
        self.assertTrue(self.interpreter.logger.has_error)

    def test_deep_nesting(self):
        depth = 400
        source = "λa. " + "f (" * depth + "a" + ")" * depth
        expected = "(λa. " + "(f " * depth + "a" + ")" * depth + ")"

        result = self.evaluate(source)
        self.assertIsInstance(result, Abstraction)
        self.assertEqual(expected, str(result))

        self.assertEqual([expected, "q"], self.interpreter.interpret(source + "\nq\n"))
        self.assertFalse(self.interpreter.logger.has_error)

        outputs = self.interpreter.interpret("f (" * 5000 + "a" + ")" * 5000 + "\nq\n")
        self.assertEqual(["q"], outputs)
        self.assertTrue(self.interpreter.logger.has_error)

    def test_interpret_log(self):
        self.interpreter.interpret("(λx. x) y\n")
        self.assertNotIn(LogKind.ORIGINAL_TERM, [entry.kind for entry in self.interpreter.logger.entries])

        self.interpreter.set_options(verbosity=Verbosity.LOW)
        self.interpreter.interpret("(λx. x) y\n")
        entries = self.interpreter.logger.entries
        self.assertEqual([LogKind.INPUT_ECHO, LogKind.ORIGINAL_TERM], [entry.kind for entry in entries[:2]])
        self.assertEqual("((λx. x) y)", entries[1].message)
        self.assertEqual(LogKind.BETA_REDUCTION, entries[2].kind)

    def test_rebind(self):
        self.interpreter.interpret("true = λa. a\n")
        self.assertEqual("(λa. a)", str(self.interpreter.bindings["true"]))
        self.assertNotIn("true", self.interpreter.equivalent_names(self.evaluate("λt f. t")))
        self.assertIn("true", self.interpreter.equivalent_names(self.evaluate("λq. q")))

    def test_unbind(self):
        self.assertEqual(["Unbound 'two'"], self.interpreter.interpret("unbind two\n"))
        self.assertNotIn("two", self.interpreter.bindings)
        self.assertNotIn("two:", self.interpreter.env())
        self.assertNotIn("two", self.interpreter.equivalent_names(self.evaluate("λf x. f (f x)")))

        result = self.evaluate("two")
        self.assertIsInstance(result, Variable)
        self.assertEqual("two", result.name)
        self.assertTrue(result.is_free)

        self.assertEqual("'two' was not bound", self.interpreter.handle_command("unbind two"))

    def test_handle_command(self):
        cases = {
            "help": HELP,
            "unbind": "Missing argument for unbind",
            "bogus": "Unknown command",
            "": "Unknown command",
            "unbind nothing": "'nothing' was not bound",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.interpreter.handle_command(case), case)

        env = self.interpreter.handle_command("env")
        self.assertTrue(env.startswith("Current bindings:\n"))
        self.assertIn("true:\t(λt. (λf. t))\n", env)

        self.assertEqual([HELP], self.interpreter.interpret("help\n"))

    def test_options(self):
        interpreter = Interpreter(rename_free_vars=True)
        self.assertEqual("(X`0 X`1)", str(interpreter.evaluate("f y")[0]))

        received = []
        interpreter = Interpreter(InterpreterOptions(transports=[received.append]), show_equivalent=False)
        interpreter.evaluate("a")
        self.assertEqual([LogKind.INPUT_ECHO, LogKind.PARSED_INPUT, LogKind.FINAL_RESULT], [e.kind for e in received])

        interpreter.set_options(rename_free_vars=True, verbosity=Verbosity.HIGH)
        self.assertTrue(interpreter.options.rename_free_vars)
        self.assertFalse(interpreter.options.show_equivalent)
        self.assertEqual(Verbosity.HIGH, interpreter.logger.verbosity)

    def test_ids_unique(self):
        index = self.interpreter.parser.current_index()
        self.interpreter.evaluate("λx. x")
        self.assertGreater(self.interpreter.parser.current_index(), index)


if __name__ == '__main__':
    unittest.main()
