"""β-reduction to normal form.

The reducer walks the tree in post-order: for an application it reduces the function and the argument to normal form
first, then, if the function is an abstraction, contracts the redex and reduces the result again. Contraction works in
place: the argument is cloned into every slot its binder's variables occupied, and the abstraction's body is spliced
into the slot the application occupied (or becomes the new root).

Substitution itself is by binder id, so it can never capture a variable. Names still matter for the printed form, so
before contracting, every binder inside the abstraction's body whose name also occurs in the argument is α-renamed to a
fresh name X0, X1, ... that cannot be typed by a user.

Sources: https://plato.stanford.edu/entries/lambda-calculus/#Com,
         http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR
"""

import itertools

from lambdalearner.lang.error import RecursionDepthError, TransformError
from lambdalearner.lang.log import Logger, Verbosity
from lambdalearner.pure.term import Abstraction, Application, Variable
from lambdalearner.pure.transform import recursion_limit, stringify


MAX_RECURSION_DEPTH = 1000


def _describe(term):
    """stringify, for error messages about terms that may be too deep to print."""
    try:
        return stringify(term)
    except (RecursionError, TransformError):
        return f"<{type(term).__name__} nested too deeply to display>"


class Reducer:
    """One reducer per evaluation: the fresh-name counters live as long as the instance."""

    def __init__(self, rename_free_vars=False, logger=None):
        self.rename_free_vars = rename_free_vars
        self.logger = logger if logger is not None else Logger()

        self.redex = None
        self._names = itertools.count()
        self._free_names = itertools.count()
        self._ids = itertools.count(-1, -1)  # parsers count up from 1, so renamed binders never clash with them

    def reduce_term(self, term):
        """Returns the normal form of a clone of term. term itself is left untouched. Raises RecursionDepthError if
        reduction nests deeper than MAX_RECURSION_DEPTH.
        """
        with recursion_limit():
            self.redex = term.clone()
            try:
                return self.reduce(self.redex, 0)
            except RecursionError:
                raise RecursionDepthError(_describe(self.redex))

    def reduce(self, term, depth):
        if depth > MAX_RECURSION_DEPTH:
            raise RecursionDepthError(_describe(term))

        if isinstance(term, Abstraction):
            term.body = self.reduce(term.body, depth + 1)
            return term
        elif isinstance(term, Application):
            return self._reduce_application(term, depth)
        elif isinstance(term, Variable):
            return self._reduce_variable(term)

        raise TransformError(f"Unknown term type: {type(term).__name__}")

    def _reduce_application(self, application, depth):
        function = self.reduce(application.function, depth + 1)
        application.function = function

        argument = self.reduce(application.argument, depth + 1)
        application.argument = argument

        if not isinstance(function, Abstraction):
            return application  # already in normal form

        self._avoid_capture(function, argument)

        if self.logger.verbosity >= Verbosity.HIGH:
            original, result = stringify(argument), stringify(function)
        else:
            original = result = None

        reduct = function.beta_reduce(argument)

        parent = application.parent
        if parent is None:
            self.redex = reduct
        else:
            parent.replace_child(application, reduct)

        if self.logger.verbosity >= Verbosity.LOW:
            self.logger.log_beta(stringify(self.redex), original, result)

        return self.reduce(reduct, depth + 1)

    def _avoid_capture(self, abstraction, argument):
        """α-renames every binder in abstraction's body whose name occurs in argument."""
        names = argument.names()
        conflicting = [binder for binder in abstraction.body.binders() if binder.name in names]

        for binder in conflicting:
            new_name = self.new_name()
            binder.alpha_reduce(new_name, next(self._ids))

            if self.logger.verbosity >= Verbosity.LOW:
                self.logger.log_alpha(stringify(binder))
            self.logger.vvlog(f"Alpha reducing with name '{new_name}'")

        if conflicting and self.logger.verbosity >= Verbosity.LOW:
            self.logger.log_alpha(stringify(self.redex))

    def _reduce_variable(self, variable):
        if self.rename_free_vars and variable.is_free and not variable.free_renamed:
            new_name = self.new_free_name()
            self.logger.vvlog(f"Renaming free variable '{variable.name}' to '{new_name}'")
            self.logger.log_free_rename(variable.name, new_name)
            variable.rename_free(new_name)
        return variable

    def new_name(self):
        return f"X{next(self._names)}"

    def new_free_name(self):
        return f"X`{next(self._free_names)}"
