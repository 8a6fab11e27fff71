"""Error reporting for lcalc. User mistakes (bad syntax, unknown commands, missing files) are GenericExceptions and are
reported by an ErrorHandler. Any other exception reaching an ErrorHandler is a bug in lcalc: it is reported as an
internal error and the process exits.
"""

import sys

from termcolor import colored


def bold(text, color=None):
    return colored(text, color, attrs=["bold"])


class GenericException(Exception):
    """A user-facing lcalc error or warning.

    msg is a str.format template whose {} slots are filled with exprs, printed in bold. exprs[0] is the source the
    error is about, and [start, end) is the span of it that diagnose() underlines (the whole of it by default).
    internal marks a bug in lcalc itself rather than in the user's input.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        exprs = [exprs] if isinstance(exprs, str) else list(exprs or [""])
        super().__init__(msg.format(*exprs))

        self.msg = msg.format(*map(bold, exprs))
        self.expr = exprs[0]
        self.start = start
        self.end = len(self.expr) if end == -1 else end
        self.diagnosis = diagnosis
        self.internal = internal


def internal_error(node, where):
    """Returns the error for a tree walk in where that met something other than the four λ-term classes. Only a bug can
    build such a tree.
    """
    return GenericException("{}: unrecognized λ-term node '{}'", (where, type(node).__name__), internal=True)


class ErrorHandler:
    """Context manager reporting the GenericExceptions raised inside it, together with the lines being evaluated.

    Lines in progress are registered per file, in load order, so an error in a file loaded from the shell (or from
    another file) is shown with the whole chain. If fatal, a reported error ends the process; internal errors always do.
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, file=None):
        self.fatal = fatal
        self.file = file if file is not None else sys.stderr
        self.traceback = {}  # path: (line, line_num), (None, None) when no line of path is in progress

    def register_file(self, path):
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Marks line line_num of path as in progress. Call before evaluating it."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Marks path as having no line in progress. Call once a line evaluated cleanly."""
        self.traceback[path] = (None, None)

    def remove_file(self, path):
        self.traceback.pop(path, None)

    def _in_progress(self):
        return [(path, line, line_num) for path, (line, line_num) in self.traceback.items() if line is not None]

    def _where(self):
        """'file:line: ' of the innermost line in progress, or ''."""
        frames = self._in_progress()
        if not frames:
            return ""
        path, _, line_num = frames[-1]
        return bold(f"{path}:{line_num}: ")

    def _header(self):
        frames = self._in_progress()
        if len(frames) < 2:
            return self._where()
        return "Traceback:\n" + "".join(f"  File '{path}', line {line_num}:\n    {line}\n"
                                        for path, line, line_num in frames)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns error.expr with [error.start, error.end) highlighted, over a ^~~ marker."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start, end = error.start, max(error.end, error.start + 1)

        source = error.expr[:start] + bold(error.expr[start:end], color) + error.expr[end:]
        marker = " " * start + bold("^" + "~" * (end - start - 1), color)
        return f"  {source}\n  {marker}"

    def _print(self, error, prefix, warning=False):
        print(prefix + error.msg, file=self.file)
        if error.diagnosis and error.expr and not error.internal:
            print(ErrorHandler.diagnose(error, warning), file=self.file)

    def warn(self, *args, **kwargs):
        """Prints the warning GenericException(*args, **kwargs). Never exits."""
        self._print(GenericException(*args, **kwargs), self._where() + bold("warning: ", ErrorHandler.WARNING), True)

    def throw(self, error):
        """Prints error. Exits if this handler is fatal or error is internal; otherwise every line in progress is
        abandoned.
        """
        prefix = self._header()
        if error.internal:
            prefix += bold("[internal] ", ErrorHandler.ERROR)
        self._print(error, prefix + bold("error: ", ErrorHandler.ERROR))

        if self.fatal or error.internal:
            sys.exit(1)
        for path in self.traceback:
            self.traceback[path] = (None, None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or issubclass(exc_type, SystemExit):
            return False

        if issubclass(exc_type, GenericException):
            error = exc_val
        elif issubclass(exc_type, KeyboardInterrupt):
            error = GenericException("keyboard interrupt")
        elif issubclass(exc_type, RecursionError):
            error = GenericException("λ-term is nested too deeply (maximum recursion depth exceeded)")
        else:
            error = GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True)

        self.throw(error)  # raises SystemExit if the error is fatal
        return True
