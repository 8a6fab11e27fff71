"""Pure lambda calculus term representation.

A λ-term is one of

```
M, N ::= x          Variable(x)
       | λx.M       Abstraction(x, M)     the body extends as far right as possible: λx.x y = λx.(x y)
       | M N        Application(M, N)     left-associative: a b c = (a b) c
```

plus a fourth, non-reducible node: `let x = M` (Let(x, M)), which binds a name in the session context.

Every composite term exclusively owns its children, which are kept in its `nodes` list, so a term is always a tree.
Copies are only ever made through `clone`: substitution relies on every occurrence site receiving its own, independent
clone of the argument.
"""

from abc import abstractmethod, ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """Span of source text a node was parsed from. Only used for diagnostics."""
    begin: int = 0
    length: int = 0

    @property
    def end(self):
        return self.begin + self.length


class LambdaTerm(ABC):
    """Superclass of every node in a λ-term tree."""

    def __init__(self, loc=None):
        self.loc = loc if loc is not None else Location()
        self._cls = type(self).__name__
        self.nodes = []

    @abstractmethod
    def clone(self):
        """Returns a deep copy of this term: no node of the copy is shared with self."""

    def walk(self):
        """Yields every node of this term, parents before children, left before right."""
        yield self
        for node in self.nodes:
            yield from node.walk()

    def display(self, indents=0):
        """Debug dump of the tree, one node per line with children indented under their parent:

        Application(nodes=[
            Abstraction(param='x', nodes=[
                Variable(name='x')
            ]),
            Variable(name='y')
        ])
        """
        pad = "    " * indents
        head = f"{pad}{self._cls}({self._fields()}"
        if not self.nodes:
            return head + ")"

        children = ",\n".join(node.display(indents + 1) for node in self.nodes)
        sep = ", " if self._fields() else ""
        return f"{head}{sep}nodes=[\n{children}\n{pad}])"

    def _fields(self):
        return ""

    def __eq__(self, other):
        """Exact structural equality: same shape and same names. See equivalence.py for equality up to renaming."""
        return (isinstance(other, type(self)) and self._fields() == other._fields()
                and len(self.nodes) == len(other.nodes) and all(a == b for a, b in zip(self.nodes, other.nodes)))

    # terms are mutable and identity is what tree walks rely on, so hash by identity
    __hash__ = object.__hash__

    def __str__(self):
        return self.display()


class Variable(LambdaTerm):
    """Variable in lambda calculus: a reference to a binder (or to a name defined in the context) by name."""

    def __init__(self, name, loc=None):
        super().__init__(loc)
        self.name = name

    def clone(self):
        return Variable(self.name, self.loc)

    def _fields(self):
        return f"name='{self.name}'"

    def __repr__(self):
        return f"Variable('{self.name}')"


class Application(LambdaTerm):
    """Application of fn to arg."""

    def __init__(self, fn, arg, loc=None):
        super().__init__(loc)
        self.nodes = [fn, arg]

    @property
    def fn(self):
        return self.nodes[0]

    @fn.setter
    def fn(self, node):
        self.nodes[0] = node

    @property
    def arg(self):
        return self.nodes[1]

    @arg.setter
    def arg(self, node):
        self.nodes[1] = node

    def clone(self):
        return Application(self.fn.clone(), self.arg.clone(), self.loc)

    def __repr__(self):
        return f"Application({self.fn!r}, {self.arg!r})"


class Abstraction(LambdaTerm):
    """Abstraction: binds param within body."""

    def __init__(self, param, body, loc=None, param_loc=None):
        super().__init__(loc)
        self.param = param
        self.param_loc = param_loc if param_loc is not None else Location()
        self.nodes = [body]

    @property
    def body(self):
        return self.nodes[0]

    @body.setter
    def body(self, node):
        self.nodes[0] = node

    def clone(self):
        return Abstraction(self.param, self.body.clone(), self.loc, self.param_loc)

    def _fields(self):
        return f"param='{self.param}'"

    def __repr__(self):
        return f"Abstraction('{self.param}', {self.body!r})"


class Let(LambdaTerm):
    """Top-level `let name = value` directive. Not an expression: it is never reduced, only recorded in a Context."""

    def __init__(self, name, value, loc=None):
        super().__init__(loc)
        self.name = name
        self.nodes = [value]

    @property
    def value(self):
        return self.nodes[0]

    @value.setter
    def value(self, node):
        self.nodes[0] = node

    def clone(self):
        return Let(self.name, self.value.clone(), self.loc)

    def _fields(self):
        return f"name='{self.name}'"

    def __repr__(self):
        return f"Let('{self.name}', {self.value!r})"


class Slot:
    """Rewritable reference to one child position of a node, i.e. owner.nodes[index]. Substitution sites are Slots so
    that the variable found there can be overwritten in its parent. Any object with a `nodes` list can own a Slot.
    """
    __slots__ = ("owner", "index")

    def __init__(self, owner, index):
        self.owner = owner
        self.index = index

    def get(self):
        return self.owner.nodes[self.index]

    def set(self, node):
        self.owner.nodes[self.index] = node

    def __eq__(self, other):
        return isinstance(other, Slot) and self.owner is other.owner and self.index == other.index

    def __hash__(self):
        return hash((id(self.owner), self.index))

    def __repr__(self):
        return f"Slot({type(self.owner).__name__}, {self.index})"
