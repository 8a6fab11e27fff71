"""Session control for lcalc: evaluation of single lines, REPL commands and file loading. Used by both the interactive
shell and file interpretation mode.
"""

import sys

from termcolor import colored

from lcalc.lang.error import GenericException
from lcalc.lang.lexical import parse
from lcalc.lang.printer import render
from lcalc.lang.trace import Tracer, bullet
from lcalc.pure.context import Context
from lcalc.pure.equivalence import normal_equivalent
from lcalc.pure.evaluate import evaluate


class Session:
    """Governs a lcalc session: owns the Context (flags and let-bound names) that every evaluated line shares."""
    SH_FILE = "<in>"  # command-line interpreter filename

    COMMANDS = {  # command: (flag, description)
        ":p": ("abbrev_parens", "parenthesis omission"),
        ":h": ("haskell_style", "haskell-style printing"),
        ":c": ("abbrev_lambda", "curried abbreviation"),
        ":t": ("trace", "tracing"),
        ":v": ("var_replacement", "reverse variable substitution"),
        ":ft": ("full_trace", "full tracing"),
    }

    def __init__(self, error_handler, context=None, out=None):
        self.error_handler = error_handler
        self.error_handler.register_file(Session.SH_FILE)

        self.context = context if context is not None else Context()
        self.out = out if out is not None else sys.stdout
        self.line_num = 0

    def eval_line(self, line, path=SH_FILE, line_num=None, show=True):
        """Evaluates one line: a command, a comment, or a statement. Returns the statement's result (None for anything
        else). If show, the result is printed. Raises GenericException on user error.
        """
        line = line.strip()
        if not line or line.startswith("#"):
            return None

        if line_num is None:
            self.line_num += 1
            line_num = self.line_num

        self.error_handler.register_line(path, line, line_num)  # in case error is raised

        if line.startswith(":"):
            self.run_command(line)
            result = None
        else:
            stmt = parse(line)
            result = evaluate(self.context, stmt, Tracer(self.context.flags, self.out))
            if show:
                self.print_replacing_vars(result)

        self.error_handler.remove_line(path)  # error was not raised
        return result

    def run_command(self, command):
        """Runs a ':' command. ':q' is not a command here: quitting is up to the shell."""
        if command in Session.COMMANDS:
            flag, description = Session.COMMANDS[command]
            enabled = self.context.flags.toggle(flag)

            if enabled:
                state = colored("enabled", "green", attrs=["bold"])
            else:
                state = colored("disabled", "red", attrs=["bold"])
            print(bullet("*"), description, state, file=self.out)

        elif command == ":load" or command.startswith(":load "):
            path = command[len(":load"):].strip()
            if not path:
                raise GenericException("expected path for '{}'", ":load", diagnosis=False)
            self.load_file(path)

        else:
            raise GenericException("unknown command '{}'", command, diagnosis=False)

        print(file=self.out)

    def load_file(self, path, show=False):
        """Evaluates every line of the file at path in this session; results are only printed if show. Loading stops
        at the first line that raises an error. Errors, including a file that cannot be opened, are reported by the
        error handler, which exits if it is fatal. Returns whether the whole file was loaded.
        """
        try:
            with open(path, "r", encoding="utf-8") as file:
                lines = file.read().splitlines()
        except OSError:
            self.error_handler.throw(GenericException("'{}' could not be opened", path, diagnosis=False))
            return False

        self.error_handler.register_file(path)
        try:
            for line_num, line in enumerate(lines):
                self.eval_line(line, path, line_num + 1, show)

        except GenericException as error:
            self.error_handler.throw(error)  # exits unless the session is interactive
            self.error_handler.warn("file '{}' not loaded completely ({} of {} lines)", (path, str(line_num),
                                    str(len(lines))), diagnosis=False)
            return False

        finally:
            self.error_handler.remove_file(path)

        count = f"{len(lines)} line{'' if len(lines) == 1 else 's'}"
        print(bullet("*"), f"loaded {count} from '{path}'", file=self.out)
        return True

    def defined_name(self, term):
        """Returns the first name in the context whose normal form is alpha-equivalent to term, or None."""
        for name, value in self.context.vars.items():
            if normal_equivalent(self.context, term, value):
                return name
        return None

    def print_replacing_vars(self, term):
        """Prints term and, with reverse substitution on, term with sub-terms replaced by the names defining them."""
        flags = self.context.flags
        normal = render(term, flags)
        print(normal, file=self.out)

        if flags.var_replacement:
            replaced = render(term, flags, replace=self.defined_name)
            if replaced != normal:
                print(f"= {replaced}", file=self.out)

        print(file=self.out)
