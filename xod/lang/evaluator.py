"""Tree-walking evaluator for xod language. Evaluation reads and writes only the Environment it is given; display lines
go to the output list, which acts as a side channel (formatting builtins like hex() write to it directly).
"""

from xod.lang.ast import (Assignment, BinaryOp, Block, Call, CONTROL, For, Identifier, If, Index, IntegerLiteral,
                          ListLiteral, UnaryOp, While)
from xod.lang.error import ArityMismatch, DomainError, EmptyList, IndexOutOfRange, NotFound, UnknownFunction
from xod.lang.numerical import (FORMATS, WIDTH, binary, check_width, complement, expect_int, expect_list,
                                format_value, ilog, is_list)


class Evaluator:
    """Evaluates AST nodes against environment. width is the bit width of every integer, and warn, if given, is called
    with (msg, snippets, start, end) for suspicious but legal operations.
    """
    BUILTINS = {
        "hex": 1,
        "bin": 1,
        "oct": 1,
        "dec": 1,
        "bool": 1,
        "log": 2,
        "range": 2,
        "append": 2,
        "prepend": 2,
        "front": 1,
        "back": 1,
        "index": 2,
    }
    RANGE_LIMIT = 1 << 20  # longest list range() builds outside a for header

    def __init__(self, environment, output=None, width=WIDTH, warn=None):
        self.environment = environment
        self.output = output if output is not None else []
        self.width = width
        self.warn = warn

    def emit(self, line):
        self.output.append(line)

    def execute(self, statements):
        """Runs statements in order and returns the output list."""
        for statement in statements:
            self.run(statement)
        return self.output

    def run(self, statement):
        """Runs a single statement. An expression statement displays its value in decimal, unless it is a call to a
        formatting builtin, which has already displayed it.
        """
        value = self.evaluate(statement)
        if value is not None and Evaluator.displays(statement):
            self.emit(format_value(value))

    @staticmethod
    def displays(statement):
        """Whether or not statement's value is displayed when run."""
        if isinstance(statement, (Assignment, Block) + CONTROL):
            return False
        return not (isinstance(statement, Call) and statement.name in FORMATS)

    def evaluate(self, node):
        """Returns the value of node, or None for statements without one (blocks, if, while and for)."""
        if isinstance(node, IntegerLiteral):
            return check_width(node.value, self.width, str(node), node.pos, node.end)

        elif isinstance(node, ListLiteral):
            return tuple(self.evaluate(item) for item in node.items)

        elif isinstance(node, Identifier):
            return self.environment.lookup(node.name, node.pos, node.end)

        elif isinstance(node, UnaryOp):
            operand = expect_int(self.evaluate(node.operand), f"'{node.op}'", node.pos, node.end)
            return complement(operand, self.width)

        elif isinstance(node, BinaryOp):
            return self._binary(node)

        elif isinstance(node, Index):
            return self._index(node)

        elif isinstance(node, Call):
            return self._call(node)

        elif isinstance(node, Assignment):
            value = self.evaluate(node.value)
            self.environment.bind(node.name, value)
            return value

        elif isinstance(node, Block):
            for statement in node.statements:
                self.run(statement)

        elif isinstance(node, If):
            if self._condition(node):
                self.evaluate(node.body)

        elif isinstance(node, While):
            while self._condition(node):
                self.evaluate(node.body)

        elif isinstance(node, For):
            for value in self._iterate(node):
                self.environment.bind(node.name, value)
                self.evaluate(node.body)

        else:
            raise TypeError(f"cannot evaluate {type(node).__name__}")

    def _condition(self, node):
        return expect_int(self.evaluate(node.condition), "condition", node.condition.pos, node.condition.end) != 0

    def _iterate(self, node):
        """Returns the values a for loop walks through. range() calls are iterated lazily."""
        iterable = node.iterable
        if isinstance(iterable, Call) and iterable.name == "range":
            return range(*self._range_bounds(iterable))

        return expect_list(self.evaluate(iterable), "for", iterable.pos, iterable.end)

    def _binary(self, node):
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        if node.op in ("==", "!=") and (is_list(left) or is_list(right)):
            return int((left == right) == (node.op == "=="))

        what = f"'{node.op}'"
        left = expect_int(left, what, node.left.pos, node.left.end)
        right = expect_int(right, what, node.right.pos, node.right.end)

        if node.op == "<<" and right >= self.width and self.warn:
            self.warn("shifting by '{}' clears all {} bits", (right, self.width), node.pos, node.end)

        return binary(node.op, left, right, self.width, node.pos, node.end)

    def _index(self, node):
        target = expect_list(self.evaluate(node.target), "indexing", node.target.pos, node.target.end)
        index = expect_int(self.evaluate(node.index), "index", node.index.pos, node.index.end)

        if index >= len(target):
            msg = "index '{}' is out of range for a list of length {}"
            raise IndexOutOfRange(msg, (index, len(target)), node.index.pos, node.index.end)
        return target[index]

    def _call(self, node):
        if node.name not in Evaluator.BUILTINS:
            raise UnknownFunction(node.name, node.pos, node.pos + len(node.name))

        arity = Evaluator.BUILTINS[node.name]
        if len(node.args) != arity:
            raise ArityMismatch(node.name, arity, len(node.args), node.pos, node.end)

        if node.name == "range":
            start, end = self._range_bounds(node)
            if end - start > Evaluator.RANGE_LIMIT:
                msg = "range of {} items is too long to build, the limit is {} (use it in a for loop instead)"
                raise DomainError(msg, (end - start, Evaluator.RANGE_LIMIT), node.pos, node.end)
            return tuple(range(start, end))

        args = [self.evaluate(arg) for arg in node.args]

        if node.name in FORMATS:
            self.emit(format_value(args[0], node.name))
            return args[0]

        return getattr(self, f"_builtin_{node.name}")(node, *args)

    def _range_bounds(self, node):
        if len(node.args) != 2:
            raise ArityMismatch(node.name, 2, len(node.args), node.pos, node.end)

        start_node, end_node = node.args
        start = expect_int(self.evaluate(start_node), "range", start_node.pos, start_node.end)
        end = expect_int(self.evaluate(end_node), "range", end_node.pos, end_node.end)

        if start > end:
            raise DomainError("range start '{}' is greater than its end '{}'", (start, end), node.pos, node.end)
        return start, end

    def _builtin_bool(self, node, value):
        return int(expect_int(value, "bool", node.pos, node.end) != 0)

    def _builtin_log(self, node, base, value):
        base = expect_int(base, "log", node.args[0].pos, node.args[0].end)
        value = expect_int(value, "log", node.args[1].pos, node.args[1].end)
        return ilog(base, value, node.pos, node.end)

    def _builtin_append(self, node, lst, value):
        return expect_list(lst, "append", node.args[0].pos, node.args[0].end) + (value,)

    def _builtin_prepend(self, node, lst, value):
        return (value,) + expect_list(lst, "prepend", node.args[0].pos, node.args[0].end)

    def _builtin_front(self, node, lst):
        lst = expect_list(lst, "front", node.args[0].pos, node.args[0].end)
        if not lst:
            raise EmptyList("front of an empty list", start=node.pos, end=node.end)
        return lst[0]

    def _builtin_back(self, node, lst):
        lst = expect_list(lst, "back", node.args[0].pos, node.args[0].end)
        if not lst:
            raise EmptyList("back of an empty list", start=node.pos, end=node.end)
        return lst[-1]

    def _builtin_index(self, node, lst, value):
        lst = expect_list(lst, "index", node.args[0].pos, node.args[0].end)
        try:
            return lst.index(value)
        except ValueError:
            raise NotFound("'{}' is not in '{}'", (format_value(value), format_value(lst)), node.pos, node.end) from None
