"""Session-scoped state: display/trace flags and the names bound by `let`."""

from dataclasses import dataclass, field, fields


@dataclass
class Flags:
    """Display and trace configuration, passed explicitly to evaluation and printing."""
    abbrev_lambda: bool = False    # λx.λy.x printed as λx y.x
    abbrev_parens: bool = False    # omit parentheses around variable and λ arguments
    haskell_style: bool = False    # \x -> x instead of λx.x
    trace: bool = False            # print every reduction step
    full_trace: bool = False       # with trace, also print highlighted before/after terms
    var_replacement: bool = False  # print results with defined names substituted back in

    def toggle(self, name):
        """Flips flag name and returns its new value."""
        if name not in {f.name for f in fields(self)}:
            raise AttributeError(f"no such flag '{name}'")
        setattr(self, name, not getattr(self, name))
        return getattr(self, name)


@dataclass
class Context:
    """Flags plus the mapping of let-bound names to the (unevaluated) terms they stand for. Every bound term is owned
    by the Context: callers get clones when they need to modify one.
    """
    flags: Flags = field(default_factory=Flags)
    vars: dict = field(default_factory=dict)

    def define(self, name, value):
        """Binds name to value, replacing any previous binding. Returns whether name was already bound."""
        exists = name in self.vars
        self.vars[name] = value
        return exists

    def lookup(self, name):
        """Returns the term bound to name, or None."""
        return self.vars.get(name)
