"""Term hashing, used to recognize results that are equivalent to named terms.

Both hashes fold the term in post-order while drawing from a seeded linear congruential generator, so the shape of
the term, the order of its nodes and its names all influence the result. Each node kind mixes in its own small primes.

- term_hash: incorporates literal names. Coarse deduplication only.
- structure_hash: replaces every name by a synthetic id assigned in traversal order, so α-equivalent terms (λx.x and
  λy.y) hash the same.

Neither is a cryptographic hash, and collisions are possible: equivalence reported from these hashes is a hint, not a
proof of semantic equality.
"""

from lambdalearner.pure.transform import transform


MASK_32 = 0xFFFFFFFF
MASK_64 = 0xFFFFFFFFFFFFFFFF

VALUE_SEED = "c4lcvlv5"
STRUCTURE_SEED = "l4mbda"


def _signed(value, bits):
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >> (bits - 1) else value


def hash32(string):
    """Java-style 32-bit string hash: h = h * 31 + c."""
    result = 0
    for char in string:
        result = _signed((result << 5) - result + ord(char), 32)
    return result


class RNG:
    """64-bit linear congruential generator yielding floats in [0, 1]."""
    MULTIPLIER = 2862933555777941757
    INCREMENT = 3037000493

    def __init__(self, seed):
        self.state = hash32(seed) & MASK_64

    def next(self):
        self.state = (self.state * RNG.MULTIPLIER + RNG.INCREMENT) & MASK_64
        return ((self.state >> 32) & MASK_32) / MASK_32

    def next_int(self):
        return int(self.next() * 10000)


def _wrap(value):
    return _signed(value, 64)


def term_hash(term):
    """Value hash of term: literal names are part of the hash."""
    rand = RNG(VALUE_SEED)

    return transform(
        term,
        lambda abs_, body: _wrap((rand.next_int() ^ 7919) + 17 * hash32(abs_.name) + body),
        lambda __, function, argument: _wrap((rand.next_int() ^ 7907) + 13 * function + 19 * argument),
        lambda var: _wrap((rand.next_int() ^ 7901) + 23 * hash32(var.name))
    )


def structure_hash(term):
    """Hash of term up to the names of its variables."""
    rand = RNG(STRUCTURE_SEED)
    ids = {}

    def id_for(name):
        if name not in ids:
            ids[name] = rand.next_int()
        return ids[name]

    def absf(abs_, body):
        rand_int = rand.next_int()
        return _wrap((rand_int ^ 7877) + 29 * id_for(abs_.name) + body)

    def appf(__, function, argument):
        return _wrap((rand.next_int() ^ 7867) + 31 * function + 37 * argument)

    def vf(var):
        rand_int = rand.next_int()
        return _wrap((rand_int ^ 7853) + 41 * id_for(var.name))

    return transform(term, absf, appf, vf)


def structurally_equivalent(term, other):
    return structure_hash(term) == structure_hash(other)
