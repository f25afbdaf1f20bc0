import contextlib
import io
import os
import tempfile
import unittest

from lox.main import EX_DATAERR, EX_NOINPUT, EX_SOFTWARE, main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def run_main(self, source, *flags):
        path = os.path.join(self.tmp.name, "script.lox")
        with open(path, "w") as file:
            file.write(source)

        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main([*flags, path])
        return code, out.getvalue(), err.getvalue()

    def test_exit_codes(self):
        cases = {
            "print 1 + 1;": 0,
            "print ;": EX_DATAERR,
            "return 1;": EX_DATAERR,
            "print 1 + nil;": EX_SOFTWARE,
        }
        for source, expected in cases.items():
            code, __, __ = self.run_main(source)
            self.assertEqual(expected, code, source)

    def test_output(self):
        code, out, err = self.run_main('var s = "a"; for (var i = 0; i < 3; i = i + 1) s = s + "b"; print s;')

        self.assertEqual(0, code)
        self.assertEqual("abbb\n", out)
        self.assertEqual("", err)

    def test_missing_file(self):
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = main([os.path.join(self.tmp.name, "missing.lox")])

        self.assertEqual(EX_NOINPUT, code)
        self.assertIn("could not be opened", err.getvalue())

    def test_dumps(self):
        code, out, __ = self.run_main("print 1 + 2;", "--ast")
        self.assertEqual(0, code)
        self.assertEqual("(print (+ 1 2))\n", out)

        code, out, __ = self.run_main("print 1;", "--tokens")
        self.assertEqual(0, code)
        self.assertEqual(["PRINT@1", "NUMBER(1.0)@1", "SEMICOLON@1", "EOF@1"], out.split())

        code, out, __ = self.run_main("print ;", "--ast")
        self.assertEqual(EX_DATAERR, code)
        self.assertEqual("", out)


if __name__ == '__main__':
    unittest.main()
