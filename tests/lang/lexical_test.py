import types
import unittest

from xod.lang.error import LexError
from xod.lang.lexical import Token, tokenize, tokens


class TokenizeTestCase(unittest.TestCase):

    def test_integers(self):
        should_raise = ["0x", "0b", "0O", "0b102", "0o8", "12ab", "0xfg"]
        for case in should_raise:
            self.assertRaises(LexError, tokens, case)

        should_pass = {
            "42": (42, 10),
            "007": (7, 10),
            "0xff": (255, 16),
            "0XFF": (255, 16),
            "0o10": (8, 8),
            "0O17": (15, 8),
            "0b11": (3, 2),
            "0B0": (0, 2),
        }
        for case, (value, base) in should_pass.items():
            token, eof = tokens(case)
            self.assertEqual(Token(Token.INT, value, 0, case), token, case)
            self.assertEqual(base, token.base, case)
            self.assertTrue(eof.is_(Token.EOF), case)

    def test_identifiers_and_keywords(self):
        kinds = [token.kind for token in tokens("for x_1 in _y if while")]
        self.assertEqual([Token.KEYWORD, Token.IDENT, Token.KEYWORD, Token.IDENT, Token.KEYWORD, Token.KEYWORD,
                          Token.EOF], kinds)

    def test_operators(self):
        should_pass = {
            "a<<b": ["a", "<<", "b"],
            "a <= b >> 2": ["a", "<=", "b", ">>", "2"],
            "2**3!=4": ["2", "**", "3", "!=", "4"],
            "x=~y": ["x", "=", "~", "y"],
            "a==b": ["a", "==", "b"],
            "!a": ["!", "a"],
            "f(a, [b]);": ["f", "(", "a", ",", "[", "b", "]", ")", ";"],
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, [token.text for token in tokens(case)[:-1]], case)

    def test_newline_is_separator(self):
        token = tokens("a\nb")[1]
        self.assertEqual(Token.PUNCT, token.kind)
        self.assertEqual(";", token.value)

    def test_error_offset(self):
        should_raise = {"1 + $": 4, "@": 0, "x = 0b12": 7, "0x": 0}
        for case, offset in should_raise.items():
            with self.assertRaises(LexError, msg=case) as context:
                tokens(case)
            self.assertEqual(offset, context.exception.start, case)

    def test_lazy(self):
        generated = tokenize("1 $")
        self.assertIsInstance(generated, types.GeneratorType)
        self.assertEqual(1, next(generated).value)
        self.assertRaises(LexError, next, generated)

        # each call starts over
        self.assertEqual(tokens("1"), tokens("1"))


if __name__ == '__main__':
    unittest.main()
