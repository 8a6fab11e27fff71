"""Evaluation of a single parsed statement against a session Context."""

from lcalc.lang.error import internal_error
from lcalc.pure.reduce import NormalOrderReducer
from lcalc.pure.term import Abstraction, Application, Let, Variable
from lcalc.pure.variables import free_variables


def _replace_vars_once(context, free, term):
    """Returns (clone of term, whether anything was replaced). In the clone, every Variable whose id is in free and
    whose name is bound in context is replaced by a clone of the bound term.
    """
    if isinstance(term, Variable):
        value = context.lookup(term.name)
        if id(term) in free and value is not None:
            return value.clone(), True
        return term.clone(), False

    elif isinstance(term, Application):
        fn, fn_changed = _replace_vars_once(context, free, term.fn)
        arg, arg_changed = _replace_vars_once(context, free, term.arg)
        return Application(fn, arg, term.loc), fn_changed or arg_changed

    elif isinstance(term, Abstraction):
        body, changed = _replace_vars_once(context, free, term.body)
        return Abstraction(term.param, body, term.loc, term.param_loc), changed

    raise internal_error(term, "replace_vars")


def replace_vars(context, term):
    """Returns a clone of term in which free variables naming context bindings are inlined, repeatedly, until no
    free variable names a binding. Does not terminate if a binding (indirectly) refers to itself.
    """
    while True:
        free = {id(var) for var in free_variables(term)}
        term, changed = _replace_vars_once(context, free, term)
        if not changed:
            return term


def evaluate(context, term, tracer=None):
    """Evaluates term under context.

    A Let binds its name to a clone of its value in context and returns the value itself, unevaluated. Any other term
    is cloned, has its context-bound free variables inlined, and is beta-reduced to normal form, which is returned.
    term is never modified. Does not return if term has no normal form.
    """
    # lets are not an expression that we can evaluate, so don't even put them through the reducer
    if isinstance(term, Let):
        exists = context.define(term.name, term.value.clone())
        if tracer is not None:
            tracer.define(term.name, exists)
        return term.value

    reducer = NormalOrderReducer(replace_vars(context, term), tracer)
    if tracer is not None:
        tracer.start(reducer)

    result = reducer.normalize()

    if tracer is not None:
        tracer.done(reducer)
    return result
