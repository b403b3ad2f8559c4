"""δ-expansion: replacing free variables by the named terms they refer to."""

from lambdalearner.lang.error import RecursionDepthError
from lambdalearner.lang.log import Logger
from lambdalearner.pure.term import Variable
from lambdalearner.pure.transform import recursion_limit, stringify


MAX_EXPANSION_DEPTH = 1000


class BindingResolver:
    """Expands free variables that name a binding, transitively. bindings is never mutated: every expansion splices in
    a fresh clone of the bound term.
    """

    def __init__(self, bindings, logger=None):
        self.bindings = bindings
        self.logger = logger if logger is not None else Logger()
        self.expanded = False

    def resolve_term(self, term):
        """Returns term with every binding expanded. term itself is rewritten in place where possible. Logs one
        δ-expansion per expansion and, if anything was expanded, a Δ summary of the resolved term.
        """
        self.expanded = False

        with recursion_limit():
            try:
                resolved = self.resolve(term, 0)
            except RecursionError:
                raise RecursionDepthError(stringify(term))

        if self.expanded:
            self.logger.log_delta_summary(stringify(resolved))

        return resolved

    def resolve(self, term, depth):
        if depth > MAX_EXPANSION_DEPTH:
            raise RecursionDepthError(stringify(term))

        for node in term.nodes:
            resolved = self.resolve(node, depth + 1)
            if resolved is not node:
                term.replace_child(node, resolved)

        if not isinstance(term, Variable) or not term.is_free or term.name not in self.bindings:
            return term

        binding = self.bindings[term.name]
        self.logger.log_delta(term.name, stringify(binding))
        self.expanded = True

        return self.resolve(binding.clone(term.parent), depth + 1)
