"""Session control for xod language. Ties the lexer, parser and evaluator together to run the xod interpreter, either
in command-line mode (one turn per submitted line) or file interpretation mode.
"""

import logging

from xod.lang.environment import Environment
from xod.lang.error import XodException
from xod.lang.evaluator import Evaluator
from xod.lang.numerical import WIDTH
from xod.lang.parser import CLOSING, parse


logger = logging.getLogger(__name__)


class Session:
    """Governs a xod session. The session owns the only Environment and is the only thing that mutates its bindings
    across turns.
    """
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = "#"

    def __init__(self, error_handler, path=SH_FILE, width=WIDTH, cmd_line=True):
        self.error_handler = error_handler

        self.path = path          # used for error messages
        self.width = width        # bit width of every integer in this session
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.environment = Environment()
        self.to_exec = []  # list of (line, line num, statements) to run, file mode only

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            exprs = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, exprs)
            except OSError:
                raise XodException("'{}' could not be opened", path, diagnosis=False)

            for expr in exprs:
                self.add(*expr[:2])

        elif not cmd_line:
            raise XodException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Preprocesses a line from a file or command-line. In command-line mode, exprs can be ignored (used to keep
        track of a file's logical lines), but add_to_prev will indicate whether a line continuation is necessary.
        Returns updated value of line and add_to_prev.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.rstrip()
        if exprs is not None:
            if line and not line.isspace() and not add_to_prev:
                exprs.append((line, line_num))
            elif add_to_prev:
                prev, prev_num = exprs.pop()
                line = prev + "\n" + line
                exprs.append((line, prev_num))

        unclosed = sum(line.count(opening) - line.count(closing) for opening, closing in CLOSING.items())
        return line, unclosed > 0

    def evaluator(self, output):
        """Returns an Evaluator bound to this session's environment, reporting warnings into output."""

        def warn(*args):
            output.append(self.error_handler.warning(*args))

        return Evaluator(self.environment, output, self.width, warn)

    def execute(self, line, output=None):
        """Runs one turn: lexes and parses all of line, then evaluates it. Returns the list of output lines, which is
        output if given. Raises a XodException on failure; statements completed before the failure keep their effects
        and their lines stay in output.
        """
        if output is None:
            output = []
        statements = parse(line)  # nothing runs unless the whole line is valid

        self.evaluator(output).execute(statements)

        logger.debug("ran %d statement(s), %d line(s) of output", len(statements), len(output))
        return output

    def evaluate_line(self, line, line_num=None):
        """Runs line and returns its formatted output. On failure, the formatted error message follows whatever was
        output before it: errors never end the session.
        """
        self.error_handler.register_line(self.path, line, line_num if line_num is not None else 1)

        output = []
        try:
            self.execute(line, output)
        except XodException as error:
            return "\n".join(output + [self.error_handler.render(error)])
        except RecursionError:
            error = XodException("expression nested too deeply", diagnosis=False)
            return "\n".join(output + [self.error_handler.render(error)])

        self.error_handler.remove_line()
        return "\n".join(output)

    def add(self, line, line_num):
        """Parses line and queues it to be run. Parsing is done eagerly so grammar errors surface before any line of
        the file runs.
        """
        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised
        self.to_exec.append((line, line_num, parse(line)))
        self.error_handler.remove_line()  # error was not raised

    def run(self):
        """Runs this session's queued statements in order, printing their output. Will raise any errors that are
        encountered.
        """
        while self.to_exec:
            line, line_num, statements = self.to_exec.pop(0)
            self.error_handler.register_line(self.path, line, line_num)

            output = []
            try:
                self.evaluator(output).execute(statements)
            finally:
                for result in output:
                    print(result)

            self.error_handler.remove_line()
