import unittest

from xod.lang.environment import Environment
from xod.lang.error import (ArityMismatch, DivisionByZero, DomainError, EmptyList, IndexOutOfRange, NegativeResult,
                            NotFound, Overflow, TypeMismatch, UndefinedVariable, UnknownFunction)
from xod.lang.evaluator import Evaluator
from xod.lang.parser import parse


def run(source, environment=None, width=64, warn=None):
    """Returns the output lines of source, evaluated against environment."""
    if environment is None:
        environment = Environment()
    return Evaluator(environment, [], width, warn).execute(parse(source))


class EvaluatorTestCase(unittest.TestCase):

    def test_display(self):
        should_pass = {
            "hex(255)": ["0xff"],
            "bin(3)": ["0b11"],
            "oct(8)": ["0o10"],
            "dec(0xff)": ["255"],
            "(0xf0 & 0x3c) | 1": ["49"],
            "0b1010 ^ 0b0110": ["12"],
            "1 << 4": ["16"],
            "~0": [str(2 ** 64 - 1)],
            "7 / 2; 7 % 2": ["3", "1"],
            "2 ** 10": ["1024"],
            "x = 1": [],
            "[1, 2] == [1, 2]": ["1"],
            "[1] != 1": ["1"],
            "hex([1, 255])": ["[0x1, 0xff]"],
            "bool(7); bool(0)": ["1", "0"],
            "log(2, 1024)": ["10"],
            "log(10, 999)": ["2"],
            "range(1, 4)": ["[1, 2, 3]"],
            "range(2, 2)": ["[]"],
            "[]": ["[]"],
            "hex(hex(1))": ["0x1", "0x1"],
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_errors(self):
        should_raise = {
            "3 - 5": NegativeResult,
            "5 / 0": DivisionByZero,
            "5 % 0": DivisionByZero,
            "2 ** 64": Overflow,
            "0xffffffffffffffff + 1": Overflow,
            "0x10000000000000000": Overflow,
            "y": UndefinedVariable,
            "foo(1)": UnknownFunction,
            "hex(1, 2)": ArityMismatch,
            "range(1)": ArityMismatch,
            "front()": ArityMismatch,
            "~[1]": TypeMismatch,
            "[1] & 1": TypeMismatch,
            "[1] < [2]": TypeMismatch,
            "bool([])": TypeMismatch,
            "append(1, 2)": TypeMismatch,
            "for(i in 5) { i }": TypeMismatch,
            "if([1]) { }": TypeMismatch,
            "1[0]": TypeMismatch,
            "[1][[0]]": TypeMismatch,
            "front([])": EmptyList,
            "back([])": EmptyList,
            "index([1, 2], 3)": NotFound,
            "[4, 5][2]": IndexOutOfRange,
            "log(1, 5)": DomainError,
            "log(2, 0)": DomainError,
            "range(5, 1)": DomainError,
            "for(i in range(5, 1)) { }": DomainError,
            "range(0, 1 << 40)": DomainError,
            "range(0, 0x100001)": DomainError,
        }
        for case, error in should_raise.items():
            self.assertRaises(error, run, case)

    def test_error_spans(self):
        with self.assertRaises(NegativeResult) as context:
            run("x = 3  -  5")
        self.assertEqual((4, 11), (context.exception.start, context.exception.end))

        with self.assertRaises(Overflow) as context:
            run("hex( 0X1FF )", width=8)
        self.assertEqual((5, 10), (context.exception.start, context.exception.end))

    def test_range_limit(self):
        environment = Environment()
        run("xs = range(1, 0x100001)", environment)
        self.assertEqual(Evaluator.RANGE_LIMIT, len(environment.lookup("xs")))

        with self.assertRaises(DomainError) as context:
            run("xs = range(0, 1 << 40)")
        self.assertIn("too long", str(context.exception))

    def test_width(self):
        self.assertEqual(["255"], run("~0", width=8))
        self.assertEqual(["0"], run("0x80 << 1", width=8))
        self.assertRaises(Overflow, run, "0x1ff", width=8)
        self.assertRaises(Overflow, run, "16 * 16", width=8)

    def test_for_range(self):
        environment = Environment()
        self.assertEqual(["0b0", "0b1", "0b10", "0b11"], run("for(x in range(0, 4)) { bin(x) }", environment))
        self.assertEqual(3, environment.lookup("x"))  # stays bound after the loop

        self.assertEqual(["0b1", "0b10", "0b11", "0b100"], run("for(x in range(1, 5)) { bin(x) }"))
        self.assertEqual([], run("for(x in range(3, 3)) { bin(x) }"))

    def test_for_list(self):
        environment = Environment({"xs": (4, 5)})
        self.assertEqual(["0x4", "4", "0x5", "5"], run("for(i in xs) { hex(i); i }", environment))
        self.assertEqual(["1", "2", "3"], run("for(i in append([1, 2], 3)) { i }"))

    def test_while(self):
        environment = Environment()
        self.assertEqual([], run("x = 0; while(x < 8) { x = x + 1 }", environment))
        self.assertEqual(8, environment.lookup("x"))

        environment = Environment({"n": 0b1011})
        self.assertEqual(["1", "1", "0", "1"], run("while(n != 0) { n & 1; n = n >> 1 }", environment))

    def test_if(self):
        self.assertEqual([], run("if(0) { hex(1) }"))
        self.assertEqual(["0x1"], run("if(2 > 1) { hex(1) }"))
        self.assertEqual([], run("if(1) { }"))

        environment = Environment({"x": 3})
        run("if((x % 2) == 1) { y = x * 2 }", environment)
        self.assertEqual(6, environment.lookup("y"))

    def test_lists(self):
        environment = Environment()
        self.assertEqual(["[1, 2, 3]", "[1, 2]"], run("xs = [1, 2]; append(xs, 3); xs", environment))
        self.assertEqual((1, 2), environment.lookup("xs"))

        run("xs = prepend(xs, 0)", environment)
        self.assertEqual((0, 1, 2), environment.lookup("xs"))

        should_pass = {"front(xs)": ["0"], "back(xs)": ["2"], "index(xs, 2)": ["2"], "xs[1]": ["1"],
                       "[[1, 2], [3]][0][1]": ["2"], "index([[1], [2]], [2])": ["1"]}
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case, environment), case)

    def test_partial_effects(self):
        environment = Environment()
        self.assertRaises(DivisionByZero, run, "x = 1; y = 1 / 0; z = 2", environment)
        self.assertEqual({"x": 1}, environment.bindings)

        output = []
        evaluator = Evaluator(environment, output)
        self.assertRaises(NegativeResult, evaluator.execute, parse("for(i in range(0, 3)) { hex(i); 1 - i }"))
        self.assertEqual(["0x0", "1", "0x1", "0", "0x2"], output)
        self.assertEqual(2, environment.lookup("i"))

    def test_warn(self):
        warnings = []
        self.assertEqual(["0"], run("1 << 64", warn=lambda *args: warnings.append(args)))
        self.assertEqual(1, len(warnings))

    def test_hex_round_trip(self):
        for value in [0, 1, 255, 256, 0xdeadbeef, 2 ** 63, 2 ** 64 - 1]:
            text, = run(f"hex({value})")
            self.assertEqual([str(value)], run(text), value)


if __name__ == '__main__':
    unittest.main()
