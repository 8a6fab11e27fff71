import io
import os
import re
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from lcalc.lang.error import ErrorHandler, GenericException
from lcalc.lang.lexical import parse
from lcalc.lang.session import Session
from lcalc.lang.shell import Shell
from lcalc.main import main

ANSI = re.compile(r"\x1b\[[0-9;]*m")


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.sess = Session(ErrorHandler(fatal=False, file=self.err), out=self.out)
        self.files = []

    def tearDown(self):
        for path in self.files:
            os.remove(path)

    def output(self):
        return ANSI.sub("", self.out.getvalue()).splitlines()

    def write_file(self, *lines):
        with tempfile.NamedTemporaryFile("w", suffix=".lc", delete=False, encoding="utf-8") as file:
            file.write("\n".join(lines) + "\n")
        self.files.append(file.name)
        return file.name

    def test_eval_line(self):
        self.sess.eval_line("let I = λx.x")
        result = self.sess.eval_line("I y")

        self.assertEqual(parse("y"), result)
        self.assertEqual(["(λx.x)", "", "y", ""], self.output())

    def test_comments_and_blank_lines(self):
        for line in ["", "   ", "# (λx.x) y", "  # comment"]:
            self.assertIsNone(self.sess.eval_line(line), line)
        self.assertEqual([], self.output())

    def test_hidden_result(self):
        self.assertEqual(parse("y"), self.sess.eval_line("(λx.x) y", show=False))
        self.assertEqual([], self.output())

    def test_var_replacement(self):
        self.sess.context.flags.var_replacement = True
        self.sess.eval_line("let I = λx.x")
        self.sess.eval_line("let K = λx y.x")
        self.out.truncate(0)
        self.out.seek(0)

        self.sess.eval_line("K (λa.a)")
        self.assertEqual(["(λy.(λa.a))", "= (λy.I)", ""], self.output())

    def test_no_replacement_line_when_unchanged(self):
        self.sess.context.flags.var_replacement = True
        self.sess.eval_line("x y")
        self.assertEqual(["x (y)", ""], self.output())

    def test_trace(self):
        self.sess.eval_line(":t")
        self.sess.eval_line("(λx.x) y")

        expected = ["*. tracing enabled", "", "0. (λx.x) (y)", "1. β-red: x <- y", "*. done.", "y", ""]
        self.assertEqual(expected, self.output())

    def test_commands(self):
        flags = self.sess.context.flags
        for command, (flag, description) in Session.COMMANDS.items():
            self.sess.eval_line(command)
            self.assertTrue(getattr(flags, flag), command)
            self.sess.eval_line(command)
            self.assertFalse(getattr(flags, flag), command)

        self.assertEqual(["*. parenthesis omission enabled", "", "*. parenthesis omission disabled", ""],
                         self.output()[:4])

    def test_bad_commands(self):
        for command in [":x", ":load", ":load   ", ":q"]:
            self.assertRaises(GenericException, self.sess.eval_line, command)

    def test_parse_error(self):
        self.assertRaises(GenericException, self.sess.eval_line, "(λx.x")

    def test_error_is_reported_in_handler(self):
        with self.sess.error_handler:
            self.sess.eval_line(":x")
        self.assertIn("unknown command ':x'", ANSI.sub("", self.err.getvalue()))

    def test_load_file(self):
        path = self.write_file("# combinators", "let I = λx.x", "", "let K = λx y.x", "K I z")

        self.assertTrue(self.sess.load_file(path))
        self.assertEqual(parse("λx.x"), self.sess.context.lookup("I"))
        self.assertEqual([f"*. loaded 5 lines from '{path}'"], self.output())
        self.assertNotIn(path, self.sess.error_handler.traceback)

    def test_load_file_show(self):
        path = self.write_file("(λx.x) y")

        self.assertTrue(self.sess.load_file(path, show=True))
        self.assertEqual(["y", "", f"*. loaded 1 line from '{path}'"], self.output())

    def test_load_command(self):
        path = self.write_file("let I = λx.x")

        self.sess.eval_line(f":load {path}")
        self.assertEqual(parse("λx.x"), self.sess.context.lookup("I"))

    def test_partial_load(self):
        path = self.write_file("let I = λx.x", "let = x", "let K = λx y.x")

        self.assertFalse(self.sess.load_file(path))
        self.assertIsNotNone(self.sess.context.lookup("I"))
        self.assertIsNone(self.sess.context.lookup("K"))

        errors = ANSI.sub("", self.err.getvalue())
        self.assertIn(f"{path}:2: error: 'let = x' expects identifier after 'let'", errors)
        self.assertIn(f"file '{path}' not loaded completely (1 of 3 lines)", errors)

    def test_partial_load_is_fatal(self):
        path = self.write_file("let = x")
        sess = Session(ErrorHandler(fatal=True, file=self.err), out=self.out)
        self.assertRaises(SystemExit, sess.load_file, path)

    def test_missing_file(self):
        path = self.write_file("x")
        os.remove(path)
        self.files.remove(path)

        self.assertFalse(self.sess.load_file(path))
        self.assertIn(f"error: '{path}' could not be opened", ANSI.sub("", self.err.getvalue()))

    def test_missing_file_is_fatal(self):
        sess = Session(ErrorHandler(fatal=True, file=self.err), out=self.out)
        self.assertRaises(SystemExit, sess.load_file, os.path.join(tempfile.gettempdir(), "missing", "defs.lc"))

    def test_load_command_with_missing_file(self):
        with self.sess.error_handler:
            self.sess.eval_line(":load /nonexistent/defs.lc")
        self.assertIn("could not be opened", ANSI.sub("", self.err.getvalue()))


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.shell = Shell(Session(ErrorHandler(fatal=False, file=self.err), out=self.out))

    def test_statements(self):
        self.assertFalse(self.shell.onecmd("let I = λx.x"))
        self.assertFalse(self.shell.onecmd("I z"))
        self.assertEqual(["(λx.x)", "", "z", ""], ANSI.sub("", self.out.getvalue()).splitlines())

    def test_errors_do_not_stop_shell(self):
        self.assertFalse(self.shell.onecmd("(λx.x"))
        self.assertFalse(self.shell.onecmd(":nope"))
        self.assertIn("unknown command ':nope'", ANSI.sub("", self.err.getvalue()))

    def test_quit(self):
        self.assertTrue(self.shell.onecmd(":q"))
        self.assertTrue(self.shell.onecmd("exit"))
        with redirect_stdout(io.StringIO()):
            self.assertTrue(self.shell.onecmd("EOF"))

    def test_empty_line(self):
        self.assertFalse(self.shell.onecmd(""))


class MainTestCase(unittest.TestCase):

    def write_file(self, *lines):
        with tempfile.NamedTemporaryFile("w", suffix=".lc", delete=False, encoding="utf-8") as file:
            file.write("\n".join(lines) + "\n")
        self.addCleanup(os.remove, file.name)
        return file.name

    def test_batch(self):
        path = self.write_file("let K = λx y.x", "K a b")

        out = io.StringIO()
        with redirect_stdout(out):
            main(["--batch", path])

        lines = ANSI.sub("", out.getvalue()).splitlines()
        self.assertEqual(["(λx.(λy.x))", "", "a", "", f"*. loaded 2 lines from '{path}'"], lines)

    def test_batch_trace(self):
        path = self.write_file("(λx.x) y")

        out = io.StringIO()
        with redirect_stdout(out):
            main(["--batch", "--trace", path])

        lines = ANSI.sub("", out.getvalue()).splitlines()
        self.assertIn("1. β-red: x <- y", lines)

    def test_batch_error_exits(self):
        path = self.write_file("let = x")

        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(["--batch", path])

    def test_batch_missing_file_exits(self):
        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(["--batch", "/nonexistent/defs.lc"])

    def test_shell_starts_after_bad_files(self):
        path = self.write_file("let I = λx.x", "(λx.", "let K = λx y.x")

        err = io.StringIO()
        with mock.patch.object(Shell, "cmdloop") as cmdloop, redirect_stdout(io.StringIO()), redirect_stderr(err):
            main([path, "/nonexistent/defs.lc"])

        cmdloop.assert_called_once_with()
        errors = ANSI.sub("", err.getvalue())
        self.assertIn(f"file '{path}' not loaded completely (1 of 3 lines)", errors)
        self.assertIn("'/nonexistent/defs.lc' could not be opened", errors)

    def test_shell_sees_loaded_definitions(self):
        path = self.write_file("let I = λx.x", "let = x")
        sessions = []

        def cmdloop(shell):
            sessions.append(shell.sess)

        with mock.patch.object(Shell, "cmdloop", cmdloop), redirect_stdout(io.StringIO()), \
                redirect_stderr(io.StringIO()):
            main([path])

        self.assertEqual(1, len(sessions))
        self.assertEqual(parse("λx.x"), sessions[0].context.lookup("I"))
        self.assertFalse(sessions[0].error_handler.fatal)


if __name__ == '__main__':
    unittest.main()
