"""Pretty-printing of λ-terms, with an optional second line underlining highlighted sub-terms.

highlight() produces two strings of the same printed width: the term, and an underline line in which every character
of a highlighted sub-term is marked. Markers are colored with termcolor.
"""

from termcolor import colored

from lcalc.lang.error import internal_error
from lcalc.pure.context import Flags
from lcalc.pure.term import Abstraction, Application, Let, Variable


UNDERLINE = "‾"
ALPHA_HIGHLIGHT = colored(UNDERLINE, "green", attrs=["bold"])
BETA_VAR_HIGHLIGHT = colored("^", "yellow", attrs=["bold"])
BETA_SUB_HIGHLIGHT = colored(UNDERLINE, "blue", attrs=["bold"])
BETA_ARG_HIGHLIGHT = colored(UNDERLINE, "green", attrs=["bold"])


def _never(node):
    return None


class _Highlighter:
    """Walk state of a single highlight() call."""

    def __init__(self, flags, pred=_never, arg_pred=_never, replacer=None):
        self.flags = flags if flags is not None else Flags()
        self.pred = pred
        self.arg_pred = arg_pred
        self.replacer = replacer

        self.combined_args = set()  # params already printed in the current λx y z. group
        self.ulines = []            # markers of the enclosing highlighted sub-terms
        self.top = []
        self.bot = []

    def add(self, text, under):
        self.top.append(text)
        self.bot.append(under * len(text))

    def walk(self, expr, combine=False, omit_lambda_parens=False):
        marker = self.pred(expr)
        if marker is not None:
            self.ulines.append(marker)
        under = self.ulines[-1] if self.ulines else " "

        replacement = self.replacer(expr) if self.replacer is not None else None
        if replacement is not None:
            self.add(replacement, under)

        elif isinstance(expr, Variable):
            self.add(expr.name, under)

        elif isinstance(expr, Application):
            self.walk(expr.fn)
            self.add(" ", under)

            # omit brackets if possible
            close = not self.flags.abbrev_parens or not isinstance(expr.arg, Variable)
            if close:
                self.add("(", under)

            omit_parens = self.flags.abbrev_parens and isinstance(expr.arg, Abstraction)
            self.walk(expr.arg, omit_lambda_parens=omit_parens)

            if close:
                self.add(")", under)

        elif isinstance(expr, Abstraction):
            self.walk_abstraction(expr, under, combine, omit_lambda_parens)

        elif isinstance(expr, Let):
            self.add("let ", " ")
            self.add(expr.name, under)
            self.add(" = ", " ")
            self.walk(expr.value)

        else:
            raise internal_error(expr, "highlight")

        if marker is not None:
            self.ulines.pop()

    def walk_abstraction(self, expr, under, combine, omit_lambda_parens):
        close = False
        if not combine:
            if not omit_lambda_parens:
                close = True
                self.add("(", under)
            self.add("\\" if self.flags.haskell_style else "λ", under)

        arg_marker = self.arg_pred(expr)
        self.add(expr.param, arg_marker if arg_marker is not None else under)

        if self.flags.abbrev_lambda:
            self.combined_args.add(expr.param)

        inner = expr.body if isinstance(expr.body, Abstraction) else None
        if self.flags.abbrev_lambda and inner is not None and inner.param not in self.combined_args:
            self.add(" ", under)
            self.walk(inner, combine=True)
        else:
            omit_next_parens = False
            if self.flags.abbrev_lambda and inner is not None:
                # a repeated name would make λx y x. ambiguous, so start a new group: λx y.λx.( ... )
                self.combined_args.clear()
                omit_next_parens = True

            self.add(" -> " if self.flags.haskell_style else ".", under)
            self.walk(expr.body, omit_lambda_parens=omit_next_parens)

        self.combined_args.discard(expr.param)
        if close:
            self.add(")", under)

    def result(self):
        return "".join(self.top), "".join(self.bot)


def highlight(expr, pred, arg_pred, flags=None):
    """Returns (text, underline) for expr. pred(node) returns the marker to underline node with (its descendants
    inherit it), or None; arg_pred(abstraction) returns the marker for that abstraction's parameter only, or None.
    Nodes are compared by identity.
    """
    highlighter = _Highlighter(flags, pred, arg_pred)
    highlighter.walk(expr)
    return highlighter.result()


def render(expr, flags=None, replace=None):
    """Returns expr as text. replace(node), if given, may return a string to print in place of node."""
    highlighter = _Highlighter(flags, replacer=replace)
    highlighter.walk(expr)
    return highlighter.result()[0]


def log_alpha_conversion(whole, binder, flags=None):
    """Highlights binder, the abstraction being alpha-converted, within whole."""
    return highlight(whole, lambda node: ALPHA_HIGHLIGHT if node is binder else None, _never, flags)


def log_beta_reduction(whole, fn, arg, sites, flags=None):
    """Highlights, within whole, the argument being substituted, the parameter of fn it replaces and every
    substitution site (the nodes currently held by the sites' Slots).
    """
    subs = {id(site.get()) for site in sites}

    def pred(node):
        if node is arg:
            return BETA_ARG_HIGHLIGHT
        elif id(node) in subs:
            return BETA_SUB_HIGHLIGHT
        return None

    return highlight(whole, pred, lambda lam: BETA_VAR_HIGHLIGHT if lam is fn else None, flags)
