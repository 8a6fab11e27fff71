"""Term representation, reduction engine and alpha-equivalence. Performs no I/O."""
