"""Abstract syntax tree for xod language. Nodes are immutable and own their children (always tuples), so the tree is
acyclic by construction. Every node keeps pos and stop, the offsets of its first token and just past its last one,
which are used for error messages but are not part of node equality.

str(node) renders canonical source, which parses back to an equal node.
"""

from dataclasses import dataclass, field


BASE_PREFIXES = {2: "0b", 8: "0o", 10: "", 16: "0x"}


@dataclass(frozen=True)
class Node:
    """Superclass of all xod AST nodes."""

    @property
    def end(self):
        """Offset just past this node's source. Nodes built outside the parser have no stop, so it is approximated
        from the canonical rendering.
        """
        if self.stop is not None:
            return self.stop
        return self.pos + len(str(self))

    def display(self, indents=0):
        """Recursively displays this tree in a readable format, one node per line."""
        children = [child for child in self.children() if isinstance(child, Node)]
        result = f"{'    ' * indents}{type(self).__name__}('{self}'"
        if children:
            result += ", nodes=["
            for child in children:
                result += "\n" + child.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def children(self):
        return ()


@dataclass(frozen=True)
class IntegerLiteral(Node):
    value: int
    base: int = 10
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def __str__(self):
        return BASE_PREFIXES[self.base] + format(self.value, {2: "b", 8: "o", 10: "d", 16: "x"}[self.base])


@dataclass(frozen=True)
class ListLiteral(Node):
    items: tuple = ()
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.items

    def __str__(self):
        return "[" + ", ".join(str(item) for item in self.items) + "]"


@dataclass(frozen=True)
class Identifier(Node):
    name: str
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Node
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return (self.operand,)

    def __str__(self):
        if isinstance(self.operand, BinaryOp):
            return f"{self.op}({self.operand})"
        return f"{self.op}{self.operand}"


@dataclass(frozen=True)
class BinaryOp(Node):
    """Only ever built by the parser after checking that the grouping is explicit."""
    op: str
    left: Node
    right: Node
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.left, self.right

    def __str__(self):
        left = f"({self.left})" if isinstance(self.left, BinaryOp) else str(self.left)
        right = f"({self.right})" if isinstance(self.right, BinaryOp) else str(self.right)
        return f"{left} {self.op} {right}"


@dataclass(frozen=True)
class Index(Node):
    target: Node
    index: Node
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.target, self.index

    def __str__(self):
        target = f"({self.target})" if isinstance(self.target, (BinaryOp, UnaryOp)) else str(self.target)
        return f"{target}[{self.index}]"


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: tuple = ()
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.args

    def __str__(self):
        return f"{self.name}(" + ", ".join(str(arg) for arg in self.args) + ")"


@dataclass(frozen=True)
class Assignment(Node):
    name: str
    value: Node
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return (self.value,)

    def __str__(self):
        return f"{self.name} = {self.value}"


@dataclass(frozen=True)
class Block(Node):
    statements: tuple = ()
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.statements

    def __str__(self):
        if not self.statements:
            return "{ }"
        return "{ " + "; ".join(str(stmt) for stmt in self.statements) + " }"


@dataclass(frozen=True)
class If(Node):
    condition: Node
    body: Block
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.condition, self.body

    def __str__(self):
        return f"if({self.condition}) {self.body}"


@dataclass(frozen=True)
class While(Node):
    condition: Node
    body: Block
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.condition, self.body

    def __str__(self):
        return f"while({self.condition}) {self.body}"


@dataclass(frozen=True)
class For(Node):
    name: str
    iterable: Node
    body: Block
    pos: int = field(default=0, compare=False)
    stop: int = field(default=None, compare=False)

    def children(self):
        return self.iterable, self.body

    def __str__(self):
        return f"for({self.name} in {self.iterable}) {self.body}"


CONTROL = (If, While, For)
