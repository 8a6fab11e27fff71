"""Capture-avoiding normal-order beta reduction.

One reduction step of a redex (λx.M) N:
    1. α: every binder inside M that introduces a name free in N is renamed to a fresh name, so that N's free
       variables cannot be captured once substituted
    2. β: every occurrence of x in M (stopping at binders that re-bind x) is overwritten with its own clone of N, and
       M replaces the redex in its parent

The search for a redex follows the function spine first: in `f a`, only f (and, if f is an abstraction, the redex
itself) is searched, never a. Abstraction bodies are searched when the abstraction itself is not applied.

Both α and β mutate the tree in place. Callers that need the original term must clone it first.
"""

from lcalc.lang.error import internal_error
from lcalc.pure.term import Abstraction, Application, Let, Slot, Variable
from lcalc.pure.variables import bound_variables, free_names, fresh_name, names


def alpha_convert(term, old, new):
    """In-place renaming of every occurrence of old in term that is free in term to new. Returns term.

    Descent stops at binders that re-bind old (those occurrences belong to the inner binder). A binder that already
    uses new would capture the renamed occurrences, so it is renamed first to an even fresher name.
    """
    if isinstance(term, Variable):
        if term.name == old:
            term.name = new

    elif isinstance(term, Application):
        term.fn = alpha_convert(term.fn, old, new)
        term.arg = alpha_convert(term.arg, old, new)

    elif isinstance(term, Abstraction):
        if term.param == old:
            return term  # shadowed

        if term.param == new:
            rename_binder(term, fresh_name(new, names(term) | {old}))

        term.body = alpha_convert(term.body, old, new)

    elif isinstance(term, Let):
        term.value = alpha_convert(term.value, old, new)

    else:
        raise internal_error(term, "alpha_convert")

    return term


def rename_binder(lam, new):
    """In-place alpha-conversion of abstraction lam: its parameter and every occurrence bound by it become new."""
    old = lam.param
    lam.param = new
    lam.body = alpha_convert(lam.body, old, new)
    return lam


def find_substitution_sites(slot, name):
    """Returns a Slot for every occurrence of name in the term held by slot that is free in that term. Abstractions
    that re-bind name are not entered.
    """
    node = slot.get()
    if isinstance(node, Variable):
        return [slot] if node.name == name else []

    elif isinstance(node, Application):
        return find_substitution_sites(Slot(node, 0), name) + find_substitution_sites(Slot(node, 1), name)

    elif isinstance(node, Abstraction):
        if node.param == name:
            return []
        return find_substitution_sites(Slot(node, 0), name)

    raise internal_error(node, "find_substitution_sites")


def substitute(lam, sites, value):
    """Overwrites every site with its own clone of value and returns lam's (rewritten) body."""
    for site in sites:
        site.set(value.clone())
    return lam.body


class NormalOrderReducer:
    """Reduces a whole tree one step at a time. The tree is kept (at self.nodes[0]) so that the tracer can render the
    entire term while a step rewrites part of it.

    tracer, if given, must provide alpha(reducer, binder, old, new, apply) and beta(reducer, fn, arg, sites, apply),
    each of which must call apply() exactly once.
    """

    def __init__(self, tree, tracer=None):
        self.nodes = [tree]
        self.tracer = tracer
        self.steps = 0

    @property
    def tree(self):
        return self.nodes[0]

    def reduce_one_step(self):
        """Performs one α-conversions + β-reduction step. Returns the new tree, or None if it is in normal form."""
        if self._reduce(Slot(self, 0)):
            return self.tree
        return None

    def normalize(self):
        """Reduces until no step is available and returns the normal form. Never returns if there is none."""
        while self.reduce_one_step() is not None:
            pass
        return self.tree

    def _reduce(self, slot):
        term = slot.get()
        if isinstance(term, Application):
            return self._beta_reduce(slot)
        elif isinstance(term, Abstraction):
            return self._reduce(Slot(term, 0))
        elif isinstance(term, (Variable, Let)):
            return False
        raise internal_error(term, "reduce")

    def _beta_reduce(self, slot):
        app = slot.get()
        fn = app.fn

        if isinstance(fn, Abstraction):
            self._avoid_capture(fn, app.arg)

            # find the substitutions first so they can be highlighted
            sites = find_substitution_sites(Slot(fn, 0), fn.param)

            def apply():
                slot.set(substitute(fn, sites, app.arg))

            self.steps += 1
            if self.tracer is None:
                apply()
            else:
                self.tracer.beta(self, fn, app.arg, sites, apply)
            return True

        elif isinstance(fn, Application):
            return self._beta_reduce(Slot(app, 0))

        return False

    def _avoid_capture(self, fn, arg):
        """Renames every binder in fn's body that would capture a free variable of arg."""
        free = free_names(arg)
        if not free:
            return

        bound = bound_variables(fn.body)
        for name in free:
            for binder in bound.get(name, []):
                new = fresh_name(name, names(binder) | set(free))

                def apply(binder=binder, new=new):
                    rename_binder(binder, new)

                self.steps += 1
                if self.tracer is None:
                    apply()
                else:
                    self.tracer.alpha(self, binder, name, new, apply)


def reduce_one_step(term, tracer=None):
    """Performs one reduction step on term (in place). Returns the rewritten term, or None if term is normal."""
    return NormalOrderReducer(term, tracer).reduce_one_step()
