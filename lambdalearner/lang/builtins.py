"""Built-in named terms, loaded once when an Interpreter starts. Keys may list aliases separated by '|'. Definitions
may refer to other built-ins by name: they are expanded lazily, at evaluation time.

Natural numbers are encoded as Church numerals: n is the function that applies f to x n times.

Source: https://en.wikipedia.org/wiki/Church_encoding#Calculation_with_Church_numerals
"""

from lambdalearner.lang.error import GenericException


NUMERALS = ["zero", "one", "two", "three", "four", "five"]


def cnumber(num):
    """Returns the source of num as a Church numeral (cnum = Church numeral), in fully parenthesized form."""
    try:
        assert not isinstance(num, (bool, float))
        num = int(num)
        assert num >= 0
    except (AssertionError, TypeError, ValueError):
        raise GenericException("expected natural number, got '{}'", str(num), internal=True)

    application = "x"
    for _ in range(num):
        application = f"(f {application})"

    return f"(λf. (λx. {application}))"


DEFINITIONS = {
    # logic
    "true": "(λt. (λf. t))",
    "false": "(λt. (λf. f))",
    "and": "(λa. (λb. ((a b) a)))",
    "or": "(λa. (λb. ((a a) b)))",
    "not": "(λb. ((b false) true))",
    "if": "(λp. (λa. (λb. ((p a) b))))",

    # lists
    "pair|cons": "(λx. (λy. (λf. ((f x) y))))",
    "first|car": "(λp. (p true))",
    "second|cdr": "(λp. (p false))",
    "nil|empty": "(λx. true)",
    "null|isempty": "(λp. (p (λx. (λy. false))))",

    # binary trees
    "tree": "(λd. (λl. (λr. ((pair d) ((pair l) r)))))",
    "datum": "(λt. (first t))",
    "left": "(λt. (first (second t)))",
    "right": "(λt. (second (second t)))",

    # arithmetic
    **{name: cnumber(num) for num, name in enumerate(NUMERALS)},
    "incr": "(λn. (λf. (λy. (f ((n f) y)))))",
    "plus": "(λm. (λn. ((m incr) n)))",
    "times": "(λm. (λn. ((m (plus n)) zero)))",
    "iszero": "(λn. ((n (λy. false)) true))",
}


def definitions():
    """Yields (names, source) for every built-in: names holds the name and its aliases."""
    for key, source in DEFINITIONS.items():
        yield key.split("|"), source
