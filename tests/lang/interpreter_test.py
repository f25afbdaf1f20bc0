import gc
import io
import math
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.interpreter import ERROR, Interpreter, NO_VALUE
from lox.lang.objects import LoxInstance, UserFunction
from lox.lang.session import Session
from lox.syntax.tree import Expression, Grouping, Literal


class LoxTestCase(unittest.TestCase):
    """Runs lox source through a fresh Session with captured output."""

    def setUp(self):
        self.out = io.StringIO()
        self.handler = ErrorHandler(fatal=False, stream=io.StringIO())
        self.sess = Session(self.handler, stdout=self.out)

    def run_lox(self, text):
        return self.sess.execute(text)

    def last_message(self):
        return self.handler.diagnostics[-1][-1]


class ExpressionTestCase(LoxTestCase):

    def test_arithmetic(self):
        cases = {
            "1 + 2 * 3;": 7.0,
            "(1 + 2) * 3;": 9.0,
            "10 - 4 - 3;": 3.0,
            "7 / 2;": 3.5,
            "-4 * -1;": 4.0,
            '"a" + "b" + "c";': "abc",
            "1 < 2;": True,
            "2 <= 2;": True,
            "1 > 2;": False,
            "3 >= 4;": False,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.run_lox(case), case)

    def test_division_by_zero(self):
        self.assertEqual(math.inf, self.run_lox("1 / 0;"))
        self.assertEqual(-math.inf, self.run_lox("-1 / 0;"))
        self.assertTrue(math.isnan(self.run_lox("0 / 0;")))

    def test_equality(self):
        cases = {
            '1 == "1";': False,
            "nil == nil;": True,
            "nil == false;": False,
            "false == false;": True,
            "1 == true;": False,
            "0 == false;": False,
            '"a" == "a";': True,
            "2 == 2.0;": True,
            "1 != 2;": True,
            "nil != nil;": False,
        }
        for case, expected in cases.items():
            self.assertIs(expected, self.run_lox(case), case)

    def test_truthiness(self):
        cases = {
            "!nil;": True,
            "!false;": True,
            "!0;": False,
            '!"";': False,
            "!!true;": True,
        }
        for case, expected in cases.items():
            self.assertIs(expected, self.run_lox(case), case)

    def test_logical(self):
        cases = {
            '"" and 1;': 1.0,
            "nil and 1;": None,
            "nil or 2;": 2.0,
            "3 or 2;": 3.0,
            "false or nil;": None,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.run_lox(case), case)

        self.run_lox("var called = false; fn f() { called = true; return true; }")
        self.assertIs(False, self.run_lox("false and f(); called;"))
        self.assertIs(False, self.run_lox("true or f(); called;"))
        self.assertIs(True, self.run_lox("nil or f(); called;"))

    def test_type_errors(self):
        cases = {
            '1 + "x";': "operands must be two numbers or two strings",
            '"x" + nil;': "operands must be two numbers or two strings",
            '-"a";': "operand must be a number",
            "-nil;": "operand must be a number",
            '1 < "a";': "operands must be numbers",
            "true * 2;": "operands must be numbers",
            '"a" - "b";': "operands must be numbers",
        }
        for case, message in cases.items():
            self.assertIs(ERROR, self.run_lox(case), case)
            self.assertTrue(self.handler.had_runtime_error, case)
            self.assertEqual(message, self.last_message(), case)

    def test_stringify(self):
        self.run_lox(
            'print 3; print 2.5; print "str"; print nil; print true; print -0.5;\n'
            "fn f() {} print f; print fn () {}; print clock;\n"
            "class C { m() {} } print C; print C(); print C().m;"
        )
        self.assertEqual(
            "3\n2.5\nstr\nnil\ntrue\n-0.5\n<fn f>\n<fn anonymous>\n<native fn>\n<class C>\n<instance of C>\n<fn m>\n",
            self.out.getvalue()
        )


class VariableTestCase(LoxTestCase):

    def test_globals(self):
        self.assertIs(NO_VALUE, self.run_lox("var a = 1; var b;"))
        self.assertEqual(1.0, self.run_lox("a;"))
        self.assertIsNone(self.run_lox("b;"))
        self.assertEqual(5.0, self.run_lox("a = 5;"))
        self.assertEqual(5.0, self.run_lox("a;"))
        self.assertIs(NO_VALUE, self.run_lox("var a = 2;"))  # redeclaring a global is legal
        self.assertEqual(2.0, self.run_lox("a;"))

    def test_undefined(self):
        should_fail = ["nope;", "nope = 1;", "{ nope = 1; }", "fn f() { return nope; } f();"]
        for case in should_fail:
            self.assertIs(ERROR, self.run_lox(case), case)
            self.assertEqual("undefined variable 'nope'", self.last_message(), case)

    def test_blocks(self):
        self.run_lox(
            "var a = 1;\n"
            "{\n"
            "  var a = 2;\n"
            "  {\n"
            "    var a = 3;\n"
            "    print a;\n"
            "  }\n"
            "  print a;\n"
            "  a = 4;\n"
            "}\n"
            "print a;\n"
        )
        self.assertEqual("3\n2\n1\n", self.out.getvalue())

    def test_shadowing_closure(self):
        self.run_lox('var a = "global"; { fn show(){ print a; } var a = "local"; show(); }')
        self.assertEqual("global\n", self.out.getvalue())

    def test_control_flow(self):
        self.run_lox(
            "var i = 0;\n"
            "while (i < 3) { print i; i = i + 1; }\n"
            "if (i == 3) print \"three\"; else print \"other\";\n"
            "if (nil) print \"no\";\n"
            "for (var j = 0; j < 2; j = j + 1) print j;\n"
        )
        self.assertEqual("0\n1\n2\nthree\n0\n1\n", self.out.getvalue())

        self.assertIs(ERROR, self.run_lox("j;"))  # loop variables are scoped to the loop

    def test_for_closures(self):
        self.run_lox(
            "var fs = nil;\n"
            "for (var i = 0; i < 3; i = i + 1) { fn show() { print i; } if (i == 1) fs = show; }\n"
            "fs();\n"
        )
        self.assertEqual("3\n", self.out.getvalue())


class FunctionTestCase(LoxTestCase):

    def test_calls(self):
        self.run_lox("fn add(a, b) { return a + b; } fn none() {} fn early() { return; print 1; }")

        self.assertEqual(5.0, self.run_lox("add(2, 3);"))
        self.assertIsNone(self.run_lox("none();"))
        self.assertIsNone(self.run_lox("early();"))
        self.assertEqual("", self.out.getvalue())

    def test_recursion(self):
        self.run_lox("fn fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }")
        self.assertEqual(55.0, self.run_lox("fib(10);"))

    def test_nested_return(self):
        self.run_lox(
            "fn find() {\n"
            "  var i = 0;\n"
            "  while (true) {\n"
            "    { if (i == 4) return i * 10; }\n"
            "    i = i + 1;\n"
            "  }\n"
            "}\n"
        )
        self.assertEqual(40.0, self.run_lox("find();"))

    def test_closure_counter(self):
        self.run_lox("fn make(){ var x = 1; fn inc(){ x = x + 1; return x; } return inc; } var c = make();")
        self.assertEqual(2.0, self.run_lox("c();"))
        self.assertEqual(3.0, self.run_lox("c();"))

        self.assertEqual(3.0, self.run_lox("var d = make(); d(); d();"))

    def test_shared_closure(self):
        self.run_lox(
            "var get; var set;\n"
            "fn pair() { var v = 0; fn g() { return v; } fn s(n) { v = n; } get = g; set = s; }\n"
            "pair();\n"
            "set(9);\n"
        )
        self.assertEqual(9.0, self.run_lox("get();"))

    def test_anonymous(self):
        self.run_lox("var twice = fn (f, x) { return f(f(x)); };")
        self.assertEqual(12.0, self.run_lox("twice(fn (n) { return n * 2; }, 3);"))
        self.assertEqual(1.0, self.run_lox("fn () { return 1; }();"))

    def test_call_errors(self):
        self.run_lox("fn one(a) { return a; }")
        cases = {
            '"str"();': "can only call functions and classes",
            "nil();": "can only call functions and classes",
            "one();": "expected 1 arguments but got 0",
            "one(1, 2);": "expected 1 arguments but got 2",
            "clock(1);": "expected 0 arguments but got 1",
        }
        for case, message in cases.items():
            self.assertIs(ERROR, self.run_lox(case), case)
            self.assertEqual(message, self.last_message(), case)

    def test_stack_overflow(self):
        self.run_lox("fn r() { return r(); }")
        self.assertIs(ERROR, self.run_lox("r();"))
        self.assertEqual("stack overflow", self.last_message())

        self.assertEqual(1.0, self.run_lox("1;"))  # the session is still usable

    def test_deep_evaluation(self):
        node = Literal(1.0)
        for __ in range(5000):
            node = Grouping(node)

        self.assertIs(ERROR, self.sess.interpreter.interpret([Expression(node)]))
        self.assertTrue(self.handler.had_runtime_error)
        self.assertEqual("stack overflow", self.last_message())
        self.assertIs(self.sess.globals, self.sess.interpreter.environment)

    def test_distance_table_released(self):
        self.run_lox("{ var a = 1; print a; }")
        gc.collect()
        self.assertEqual(0, len(self.sess.interpreter.locals))

        self.run_lox("fn make() { var n = 0; fn inc() { n = n + 1; return n; } return inc; }\nvar c = make();")
        gc.collect()
        self.assertGreater(len(self.sess.interpreter.locals), 0)  # still reachable through c and make
        self.assertEqual(1.0, self.run_lox("c();"))
        self.assertEqual(2.0, self.run_lox("c();"))

    def test_natives(self):
        self.assertIsInstance(self.run_lox("clock();"), float)

        self.sess.register_native("double", 1, lambda x: x * 2)
        self.assertEqual(8.0, self.run_lox("double(4);"))


class ClassTestCase(LoxTestCase):

    def setUp(self):
        super().setUp()
        self.run_lox("class Cls { init(n) { this.v = n; } get() { return this.v; } }")

    def test_construction(self):
        self.assertEqual(5.0, self.run_lox("Cls(5).get();"))
        self.assertIsInstance(self.run_lox("Cls(1);"), LoxInstance)

    def test_arity(self):
        cases = {
            "Cls(5).get(1);": "expected 0 arguments but got 1",
            "Cls();": "expected 1 arguments but got 0",
        }
        for case, message in cases.items():
            self.assertIs(ERROR, self.run_lox(case), case)
            self.assertEqual(message, self.last_message(), case)

        self.run_lox("class Empty {}")
        self.assertIsInstance(self.run_lox("Empty();"), LoxInstance)
        self.assertIs(ERROR, self.run_lox("Empty(1);"))

    def test_fields(self):
        self.run_lox("var o = Cls(1);")
        self.assertEqual(3.0, self.run_lox("o.v = 3;"))
        self.assertEqual(3.0, self.run_lox("o.get();"))
        self.assertEqual("new", self.run_lox('o.extra = "new"; o.extra;'))

        self.run_lox("o.get = fn () { return 42; };")  # fields shadow methods
        self.assertEqual(42.0, self.run_lox("o.get();"))

    def test_initializer_returns_instance(self):
        self.run_lox("var o = Cls(1);")
        result = self.run_lox("o.init(7);")
        self.assertIs(result, self.sess.globals.values["o"])
        self.assertEqual(7.0, self.run_lox("o.v;"))

        self.run_lox("class Early { init() { this.a = 1; return; this.a = 2; } }")
        self.assertEqual(1.0, self.run_lox("Early().a;"))

    def test_bound_methods(self):
        self.run_lox("var a = Cls(1); var b = Cls(2); var m = a.get; b.get = m;")
        self.assertEqual(1.0, self.run_lox("b.get();"))
        self.assertIsInstance(self.run_lox("m;"), UserFunction)

        self.run_lox(
            "class Counter {\n"
            "  init() { this.n = 0; }\n"
            "  incrementer() { return fn () { this.n = this.n + 1; return this.n; }; }\n"
            "}\n"
            "var c = Counter(); var inc = c.incrementer(); inc(); inc();"
        )
        self.assertEqual(2.0, self.run_lox("c.n;"))

    def test_property_errors(self):
        cases = {
            "1.x;": "only instances have properties",
            "nil.x;": "only instances have properties",
            "var n = 1; n.x = 2;": "only instances have fields",
            "Cls(1).nope;": "undefined property 'nope'",
            "Cls.get;": "only instances have properties",
        }
        for case, message in cases.items():
            self.assertIs(ERROR, self.run_lox(case), case)
            self.assertEqual(message, self.last_message(), case)


class HelperTestCase(unittest.TestCase):

    def test_is_equal(self):
        should_pass = [(None, None), (1.0, 1.0), ("a", "a"), (True, True)]
        for left, right in should_pass:
            self.assertTrue(Interpreter.is_equal(left, right), (left, right))

        should_fail = [(None, False), (1.0, True), (0.0, False), ("1", 1.0), (1.0, None)]
        for left, right in should_fail:
            self.assertFalse(Interpreter.is_equal(left, right), (left, right))

    def test_stringify(self):
        cases = {None: "nil", True: "true", False: "false", 3.0: "3", 0.25: "0.25", "s": "s"}
        for case, expected in cases.items():
            self.assertEqual(expected, Interpreter.stringify(case), case)


if __name__ == '__main__':
    unittest.main()
