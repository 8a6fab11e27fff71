"""Interactive evaluator for the untyped lambda calculus."""

__version__ = "0.1.0"
