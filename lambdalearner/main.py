"""Uses the lambdalearner interpreter to run files of statements or to start the interactive shell. Also uses the error
handling context manager. Called from the lambdalearner console script.
"""

import argparse
import sys

from lambdalearner.lang.error import ErrorHandler, GenericException
from lambdalearner.lang.interpreter import Interpreter
from lambdalearner.lang.log import LogKind, Verbosity
from lambdalearner.lang.shell import Printer, Shell


# in file mode, results and command output are printed from interpret's return value
FILE_SKIP = (LogKind.INPUT_ECHO, LogKind.FINAL_RESULT, LogKind.NORMAL)


def make_parser():
    parser = argparse.ArgumentParser(prog="lambdalearner", description="Untyped lambda calculus interpreter.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="log reduction steps (-v) and their explanations (-vv)")
    parser.add_argument("--rename-free", action="store_true", help="rename free variables to X`0, X`1, ...")
    parser.add_argument("--no-equivalent", action="store_true", help="do not list bindings equivalent to results")
    return parser


def main(argv=None):
    """Runs lambdalearner. Called from the lambdalearner console script."""
    with ErrorHandler() as error_handler:
        args = make_parser().parse_args(argv)

        options = {
            "verbosity": Verbosity(min(args.verbose, Verbosity.HIGH)),
            "rename_free_vars": args.rename_free,
            "show_equivalent": not args.no_equivalent,
        }

        if args.file is not None:
            error_handler.register_file(args.file)
            try:
                with open(args.file, encoding="utf-8") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", args.file)

            interpreter = Interpreter(transports=[Printer(skip=FILE_SKIP)], **options)
            for output in interpreter.interpret(source):
                print(output)

            if interpreter.logger.has_error:
                sys.exit(1)

        else:
            Shell(Interpreter(transports=[Printer()], **options)).cmdloop()


if __name__ == "__main__":
    main()
