"""Runs lcalc: loads the files given on the command line into one session, then (unless --batch) starts the interactive
shell on that session. Installed as the `lcalc` script.
"""

import argparse

from lcalc.lang.error import ErrorHandler
from lcalc.lang.session import Session
from lcalc.lang.shell import Shell
from lcalc.pure.context import Context


def main(argv=None):
    """Runs lcalc interpreter. Called from lcalc executable script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="lcalc", description="Interactive evaluator for the untyped λ-calculus.")
        parser.add_argument("files", help="files to load, one statement per line", nargs="*")
        parser.add_argument("--batch", action="store_true",
                            help="print the result of every statement while loading files, then exit instead of "
                                 "starting the interactive shell")
        parser.add_argument("--trace", action="store_true", help="trace reductions while loading files")
        args = parser.parse_args(argv)

        context = Context()
        context.flags.trace = args.trace
        sess = Session(error_handler, context)

        # a file that fails to load only ends the process in batch mode; the shell still starts
        error_handler.fatal = args.batch
        for path in args.files:
            sess.load_file(path, show=args.batch)

        if not args.batch:
            # by default, trace and try to back-substitute variables
            context.flags.trace = True
            context.flags.var_replacement = True

            Shell(sess).cmdloop()


if __name__ == "__main__":
    main()
