"""Interactive mode: a cmd.Cmd loop that feeds every line to a Session."""

import cmd


class Shell(cmd.Cmd):
    """λ> prompt over a Session. Errors are reported by the session's ErrorHandler and never end the loop."""
    intro = "lcalc :: untyped λ-calculus\nType 'help' for more information, ':q' to quit."
    prompt = "λ> "
    QUIT = ":q"

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess

    def default(self, line):
        """Every line that is not help/exit is a statement or ':' command."""
        if line.strip() == Shell.QUIT:
            return True

        # cmd.Cmd gives up on any exception, so report here
        with self.sess.error_handler:
            self.sess.eval_line(line)
        return False

    def do_help(self, arg):
        """Prints a usage guide instead of cmd's per-command docs."""
        print("Type a λ-term such as '(λx.x) y' (or '(\\x -> x) y') to reduce it to normal form.\n"
              "'let I = λx.x' binds the name 'I', which can then be used in later terms.\n\n"
              "Commands:\n"
              "  :t        toggle tracing of every α-conversion and β-reduction\n"
              "  :ft       toggle full tracing (highlights the affected sub-terms)\n"
              "  :v        toggle printing results with defined names substituted back\n"
              "  :p        toggle omission of redundant parentheses\n"
              "  :c        toggle curried abbreviation (λx y.x)\n"
              "  :h        toggle haskell-style printing (\\x -> x)\n"
              "  :load F   evaluate every line of file F\n"
              "  :q        quit")

    def emptyline(self):
        # cmd.Cmd would repeat the previous line
        return False

    def do_EOF(self, arg):
        print()
        return True

    def do_exit(self, arg):
        return True
