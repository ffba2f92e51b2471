"""Error handling for xod language. Only XodExceptions should be encountered during a turn: if another type of error
is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

The taxonomy follows the three stages of a turn:

```
XodException
 +-- LexError                ; malformed source text
 +-- ParseError              ; structural/grammar violations
 |    +-- UnexpectedToken
 |    +-- UnterminatedBlock
 |    +-- AmbiguousExpression
 +-- EvalError               ; runtime failures
      +-- DivisionByZero, NegativeResult, Overflow, UndefinedVariable, UnknownFunction, ArityMismatch,
          TypeMismatch, EmptyList, DomainError, NotFound, IndexOutOfRange
```
"""

import sys

from termcolor import colored


class XodException(Exception):
    """Templates an error/warning message so that it can be used to throw a xod error/warning. msg is a format string
    whose fields are filled with snippets, and start/end is the span of the offending source in the current line.
    """

    def __init__(self, msg, snippets=None, start=0, end=-1, diagnosis=True, internal=False):
        if snippets is None:
            snippets = ()
        if not isinstance(snippets, (tuple, list)):
            snippets = (snippets,)

        super().__init__(msg.format(*snippets))

        self.msg = msg.format(*(colored(str(snippet), attrs=["bold"]) for snippet in snippets))
        self.snippets = tuple(snippets)
        self.start = start
        self.end = end if end != -1 else start + 1  # needed for error display

        self.diagnosis = diagnosis
        self.internal = internal


class LexError(XodException):
    """Raised by the lexer on text that cannot be tokenized."""


class ParseError(XodException):
    """Raised by the parser when the token sequence does not match the grammar."""


class UnexpectedToken(ParseError):

    def __init__(self, expected, found, start=0, end=-1, msg="expected {}, found '{}'"):
        super().__init__(msg, (expected, found), start, end)
        self.expected = expected
        self.found = found


class UnterminatedBlock(ParseError):

    def __init__(self, opening, start=0, end=-1):
        super().__init__("unexpected end of input, '{}' was never closed", opening, start, end)
        self.opening = opening


class AmbiguousExpression(ParseError):

    def __init__(self, first, second, start=0, end=-1):
        msg = "ambiguous expression: '{}' and '{}' at the same level, group one of them with parentheses"
        super().__init__(msg, (first, second), start, end)
        self.operators = (first, second)


class EvalError(XodException):
    """Raised by the evaluator. Effects of statements completed before the error are kept."""


class DivisionByZero(EvalError):
    pass


class NegativeResult(EvalError):
    pass


class Overflow(EvalError):
    pass


class UndefinedVariable(EvalError):

    def __init__(self, name, start=0, end=-1):
        super().__init__("'{}' is not defined", name, start, end)
        self.name = name


class UnknownFunction(EvalError):

    def __init__(self, name, start=0, end=-1):
        super().__init__("'{}' is not a builtin function", name, start, end)
        self.name = name


class ArityMismatch(EvalError):

    def __init__(self, name, expected, found, start=0, end=-1):
        super().__init__("'{}' takes {} argument(s), got {}", (name, expected, found), start, end)
        self.name = name


class TypeMismatch(EvalError):
    pass


class EmptyList(EvalError):
    pass


class DomainError(EvalError):
    pass


class NotFound(EvalError):
    pass


class IndexOutOfRange(EvalError):
    pass


class ErrorHandler:
    """Context manager that will suppress Python errors raised during a turn and report them as xod errors."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.location = (None, None, None)  # (path, line, line_num) of the turn being run

    def register_line(self, path, line, line_num):
        """Registers line as the origin of the current turn. Should be called prior to Session execute/run."""
        self.location = (path, line, line_num)

    def remove_line(self):
        """Forgets the current turn. Should be called after a successful Session execute/run."""
        self.location = (None, None, None)

    @staticmethod
    def diagnose(error, line, warning=False):
        """Returns line with the offending part of error highlighted and underlined."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        # logical lines can span several physical ones, only show the one holding the error
        line_start = line.rfind("\n", 0, error.start) + 1
        line_end = line.find("\n", error.start)
        line = line[line_start:line_end if line_end != -1 else len(line)]

        start = min(error.start - line_start, len(line))
        end = max(min(error.end - line_start, len(line)), start + 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _header(self, error):
        path, line, line_num = self.location
        if path is None:
            return ""

        col = min(error.start, len(line or "")) + 1
        return colored(f"{path}:{line_num}:{col}: ", attrs=["bold"])

    def render(self, error, warning=False):
        """Returns the full message for error: location, label, message and, if possible, a diagnosis."""
        __, line, __ = self.location

        label = "warning: " if warning else "error: "
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        error_msg = self._header(error)
        if error.internal:
            error_msg += colored("[internal] ", color, attrs=["bold"])
        error_msg += colored(label, color, attrs=["bold"]) + error.msg

        if not error.internal and line and error.diagnosis:
            error_msg += "\n" + ErrorHandler.diagnose(error, line, warning)

        return error_msg

    def warning(self, *args, **kwargs):
        """Renders a runtime warning message based on args (same signature as XodException)."""
        return self.render(XodException(*args, **kwargs), warning=True)

    def throw(self, error):
        """Prints error, then exits if this handler is fatal."""
        print(self.render(error))

        if self.fatal:
            sys.exit(1)
        self.remove_line()  # if error occurred, reset location (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(XodException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(XodException("expression nested too deeply", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, XodException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(XodException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
