"""Parsing, printing, tracing and the interactive shell, layered on top of lcalc.pure."""
