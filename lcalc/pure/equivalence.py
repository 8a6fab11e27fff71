"""Alpha-equivalence: equality of two λ-terms up to consistent renaming of bound variables.

Each side keeps its own map of the parameter names in scope to the depth of the binder that introduced them (de
Bruijn levels). Two variables are equivalent if both are bound at the same depth, or if both are free and have
literally the same name. A bound variable is never equivalent to a free one.
"""

from lcalc.lang.error import internal_error
from lcalc.pure.evaluate import evaluate
from lcalc.pure.term import Abstraction, Application, Let, Variable


def alpha_equivalent(a, b):
    """Whether a and b are equal up to renaming of bound variables."""

    def _equivalent(a, b, a_depths, b_depths, depth):
        if type(a) is not type(b):
            return False

        if isinstance(a, Variable):
            a_depth = a_depths.get(a.name)
            b_depth = b_depths.get(b.name)
            if a_depth is None and b_depth is None:
                return a.name == b.name
            return a_depth == b_depth

        elif isinstance(a, Application):
            return (_equivalent(a.fn, b.fn, a_depths, b_depths, depth)
                    and _equivalent(a.arg, b.arg, a_depths, b_depths, depth))

        elif isinstance(a, Abstraction):
            return _equivalent(a.body, b.body, {**a_depths, a.param: depth}, {**b_depths, b.param: depth}, depth + 1)

        elif isinstance(a, Let):
            return a.name == b.name and _equivalent(a.value, b.value, a_depths, b_depths, depth)

        raise internal_error(a, "alpha_equivalent")

    return _equivalent(a, b, {}, {}, 0)


def normal_equivalent(context, a, b):
    """Whether a is alpha-equivalent to the normal form of b under context. b itself is left untouched, and is
    normalized without tracing. Used to find defined names that a result could be printed as.
    """
    return alpha_equivalent(a, evaluate(context, b))
