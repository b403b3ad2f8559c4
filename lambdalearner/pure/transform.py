"""Generic folds over term trees. Used for printing and hashing.

The depth bound is threaded through the recursion as an explicit parameter, so concurrent transforms never share
state.
"""

from contextlib import contextmanager
import sys
import threading

from lambdalearner.lang.error import TransformError
from lambdalearner.pure.term import Abstraction, Application, Variable


MAX_TRANSFORM_DEPTH = 1000
PYTHON_RECURSION_LIMIT = 10000  # each level of a term walk costs a few Python frames

_limit_lock = threading.Lock()
_limit_users = 0
_previous_limit = None


@contextmanager
def recursion_limit(limit=PYTHON_RECURSION_LIMIT):
    """Temporarily raises Python's recursion limit to at least limit, so that the depth bounds of this package are hit
    before Python's own.

    The limit is process-wide, so overlapping contexts (nested, or on other threads) are counted: the limit is restored
    only when the last of them exits.
    """
    global _limit_users, _previous_limit

    with _limit_lock:
        if _limit_users == 0:
            _previous_limit = sys.getrecursionlimit()
        _limit_users += 1
        if sys.getrecursionlimit() < limit:
            sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        with _limit_lock:
            _limit_users -= 1
            if _limit_users == 0:
                sys.setrecursionlimit(_previous_limit)


def transform(root, absf, appf, vf):
    """Post-order fold of root: vf(variable), absf(abstraction, body_value), appf(application, function_value,
    argument_value). Raises TransformError if root is nested deeper than MAX_TRANSFORM_DEPTH.
    """

    def _transform(term, depth):
        if depth > MAX_TRANSFORM_DEPTH:
            raise TransformError("Maximum transform depth exceeded - possible infinite recursion", internal=False)

        if isinstance(term, Abstraction):
            return absf(term, _transform(term.body, depth + 1))
        elif isinstance(term, Application):
            function = _transform(term.function, depth + 1)
            argument = _transform(term.argument, depth + 1)
            return appf(term, function, argument)
        elif isinstance(term, Variable):
            return vf(term)

        raise TransformError(f"Unknown term type: {type(term).__name__}")

    with recursion_limit():
        return _transform(root, 0)


def stringify(term):
    """Fully parenthesized textual form: (λx. (f x))."""
    if term is None:
        return "nil"
    return transform(
        term,
        lambda abs_, body: f"(λ{abs_.name}. {body})",
        lambda __, function, argument: f"({function} {argument})",
        lambda var: var.name
    )


def clone(term, parent=None):
    """Deep copy of term, anchored to parent."""
    return term.clone(parent)
