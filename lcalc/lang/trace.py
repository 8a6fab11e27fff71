"""Step-by-step trace output of an evaluation. Output only: a Tracer never changes what a reduction computes.

```
0. (λx.x) ((λy.y))
1. β-red: x <- (λy.y)
*. done.
```
"""

import sys

from termcolor import colored

from lcalc.lang.printer import log_alpha_conversion, log_beta_reduction, render


def bullet(text):
    """Bold step number/marker, as printed at the start of every trace line."""
    return colored(f"{text}.", attrs=["bold"])


class Tracer:
    """Prints the steps of a NormalOrderReducer (see lcalc.pure.reduce) according to flags.trace and flags.full_trace.
    """

    def __init__(self, flags, file=None):
        self.flags = flags
        self.file = file if file is not None else sys.stdout

    def line(self, *args):
        if self.flags.trace:
            print(*args, file=self.file)

    def start(self, reducer):
        self.line(bullet(0), render(reducer.tree, self.flags))

    def done(self, reducer):
        self.line(bullet("*"), colored("done.", "blue", attrs=["bold"]))

    def define(self, name, exists):
        action = "redefined:" if exists else "defined:"
        self.line(bullet("*"), colored(action, "blue", attrs=["bold"]), colored(name, attrs=["bold"]))

    def alpha(self, reducer, binder, old, new, apply):
        self.line(bullet(reducer.steps), colored("α-con:", "green"), colored(old, attrs=["bold"]), "<-", new)
        self._transform(apply, lambda: log_alpha_conversion(reducer.tree, binder, self.flags))

    def beta(self, reducer, fn, arg, sites, apply):
        self.line(bullet(reducer.steps), colored("β-red:", "yellow"), colored(fn.param, attrs=["bold"]), "<-",
                  render(arg, self.flags))
        self._transform(apply, lambda: log_beta_reduction(reducer.tree, fn, arg, sites, self.flags))

    def _transform(self, apply, log):
        """Calls apply; with full tracing, prints the highlighted term (from log) before and after."""
        full = self.flags.trace and self.flags.full_trace
        if full:
            text, underline = log()
            print(f"     {text}", file=self.file)
            print(f"     {underline}", file=self.file)

        apply()

        if full:
            text, underline = log()
            print(f"   > {text}", file=self.file)
            print(f"     {underline}\n", file=self.file)
