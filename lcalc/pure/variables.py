"""Free and bound variable analysis.

Both walks keep a mapping of the binders in scope. Entering an Abstraction whose parameter is already in scope replaces
the entry (the inner binder shadows the outer one), it never merges them.
"""

from lcalc.lang.error import internal_error
from lcalc.pure.term import Abstraction, Application, Let, Variable


FRESH_MARKER = "'"


def free_variables(term, max_depth=None):
    """Returns every Variable node in term that is not bound by an enclosing Abstraction of term, in depth-first order.
    If max_depth is given, the walk does not descend past max_depth nested binders.
    """
    found = []

    def _walk(node, scope, depth):
        if isinstance(node, Variable):
            if node.name not in scope:
                found.append(node)
        elif isinstance(node, Application):
            _walk(node.fn, scope, depth)
            _walk(node.arg, scope, depth)
        elif isinstance(node, Abstraction):
            if max_depth is None or depth < max_depth:
                _walk(node.body, {**scope, node.param: node}, depth + 1)
        elif isinstance(node, Let):
            _walk(node.value, scope, depth)
        else:
            raise internal_error(node, "free_variables")

    _walk(term, {}, 0)
    return found


def free_names(term):
    """Names of free_variables(term), without duplicates, in order of first occurrence."""
    return list(dict.fromkeys(var.name for var in free_variables(term)))


def bound_variables(term, max_depth=None):
    """Returns a dict of name: [Abstractions] listing, for every parameter name, each binder in term that introduces
    it, outermost first (the innermost binder is last). Binders are listed whether or not their body uses the name:
    any of them would capture a free variable of that name substituted into its body. If max_depth is given, binders
    nested deeper than max_depth levels are not reported.
    """
    found = {}

    def _walk(node, depth):
        if isinstance(node, Variable):
            return
        elif isinstance(node, Application):
            _walk(node.fn, depth)
            _walk(node.arg, depth)
        elif isinstance(node, Abstraction):
            if max_depth is None or depth < max_depth:
                found.setdefault(node.param, []).append(node)
                _walk(node.body, depth + 1)
        elif isinstance(node, Let):
            _walk(node.value, depth)
        else:
            raise internal_error(node, "bound_variables")

    _walk(term, 0)
    return found


def names(term):
    """Every variable and parameter name that occurs anywhere in term."""
    result = set()
    for node in term.walk():
        if isinstance(node, Variable):
            result.add(node.name)
        elif isinstance(node, Abstraction):
            result.add(node.param)
    return result


def fresh_name(name, taken=()):
    """Returns name with the fresh marker appended (name', name'', ...) as many times as needed to avoid taken."""
    fresh = name + FRESH_MARKER
    while fresh in taken:
        fresh += FRESH_MARKER
    return fresh
