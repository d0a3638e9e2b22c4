"""Formula tokenizer, parser and evaluator.

Grammar::

    expr   := term (('+' | '-') term)*
    term   := factor (('*' | '/') factor)*
    factor := '-' factor | NUMBER | REF | FN '(' expr (',' expr)* ')' | '(' expr ')'

References look like ``a1``, ``$a1``, ``a$1`` or ``$a$1``; a ``$`` marks the
following coordinate as absolute, so it is not shifted when a formula is
copied to another cell.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Callable, Union

from ..cells import N_COLS, N_ROWS, make_cell_id
from ..errors import AppError, BAD_REF, SYNTAX

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<num>\d+(?:\.\d*)?|\.\d+)"
    r"|(?P<ref>(?P<col_abs>\$)?(?P<col>[a-zA-Z])(?P<row_abs>\$)?(?P<row>\d+))(?![\w$])"
    r"|(?P<fn>[a-zA-Z_]\w*)"
    r"|(?P<op>[-+*/(),])"
    r")"
)

FUNCTIONS: dict[str, Callable[..., float]] = {
    "max": lambda *args: max(args),
    "min": lambda *args: min(args),
}


@dataclass(frozen=True)
class Token:
    kind: str  # "num", "ref", "fn", "op"
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class Num:
    value: float


@dataclass(frozen=True)
class Ref:
    col: int
    row: int
    col_abs: bool = False
    row_abs: bool = False

    @property
    def cell_id(self) -> str:
        return make_cell_id(self.col, self.row)


@dataclass(frozen=True)
class Neg:
    operand: "Node"


@dataclass(frozen=True)
class BinOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    fn: str
    args: tuple["Node", ...]


Node = Union[Num, Ref, Neg, BinOp, Call]


def tokenize(formula: str) -> list[Token]:
    """Split formula into tokens, raising a SYNTAX AppError on junk."""
    tokens = []
    pos = 0
    text = formula.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match or match.end() == pos:
            raise AppError(SYNTAX, f'unexpected character "{text[pos:].strip()[:1]}" in "{formula}"')
        kind = match.lastgroup
        start = match.start(kind)
        tokens.append(Token(kind, match.group(kind), start, match.end(kind)))
        pos = match.end()
    return tokens


def _ref_from_text(text: str) -> Ref:
    match = _TOKEN_RE.match(text)
    col = ord(match.group("col").lower()) - ord("a")
    row = int(match.group("row")) - 1
    if not (0 <= col < N_COLS and 0 <= row < N_ROWS):
        raise AppError(SYNTAX, f'reference "{text}" is outside the spreadsheet')
    return Ref(col, row, bool(match.group("col_abs")), bool(match.group("row_abs")))


class _Parser:
    def __init__(self, formula: str):
        self.formula = formula
        self.tokens = tokenize(formula)
        self.index = 0

    def error(self, message: str) -> AppError:
        return AppError(SYNTAX, f'{message} in formula "{self.formula}"')

    def peek(self):
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def take(self) -> Token:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end")
        self.index += 1
        return token

    def expect(self, text: str):
        token = self.take()
        if token.text != text:
            raise self.error(f'expected "{text}" but got "{token.text}"')

    def parse(self) -> Node:
        if not self.tokens:
            raise self.error("empty formula")
        node = self.expr()
        token = self.peek()
        if token is not None:
            raise self.error(f'unexpected "{token.text}"')
        return node

    def expr(self) -> Node:
        node = self.term()
        while self.peek() is not None and self.peek().text in ("+", "-"):
            op = self.take().text
            node = BinOp(op, node, self.term())
        return node

    def term(self) -> Node:
        node = self.factor()
        while self.peek() is not None and self.peek().text in ("*", "/"):
            op = self.take().text
            node = BinOp(op, node, self.factor())
        return node

    def factor(self) -> Node:
        token = self.take()
        if token.text == "-":
            return Neg(self.factor())
        if token.kind == "num":
            return Num(float(token.text))
        if token.kind == "ref":
            return _ref_from_text(token.text)
        if token.kind == "fn":
            name = token.text.lower()
            if name not in FUNCTIONS:
                raise self.error(f'unknown function "{token.text}"')
            self.expect("(")
            args = [self.expr()]
            while self.peek() is not None and self.peek().text == ",":
                self.take()
                args.append(self.expr())
            self.expect(")")
            return Call(name, tuple(args))
        if token.text == "(":
            node = self.expr()
            self.expect(")")
            return node
        raise self.error(f'unexpected "{token.text}"')


def parse(formula: str) -> Node:
    """Parse formula into an AST."""
    return _Parser(formula).parse()


def references(node: Node) -> set[str]:
    """Return the cell ids a formula AST reads from."""
    if isinstance(node, Ref):
        return {node.cell_id}
    if isinstance(node, Neg):
        return references(node.operand)
    if isinstance(node, BinOp):
        return references(node.left) | references(node.right)
    if isinstance(node, Call):
        refs = set()
        for arg in node.args:
            refs |= references(arg)
        return refs
    return set()


def _divide(a: float, b: float) -> float:
    if b == 0:
        return math.copysign(math.inf, a) if a else math.nan
    return a / b


_OPS: dict[str, Callable[[float, float], float]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _divide,
}


def evaluate(node: Node, lookup: Callable[[str], float]) -> float:
    """Evaluate an AST; lookup returns the current value of a cell id."""
    if isinstance(node, Num):
        return node.value
    if isinstance(node, Ref):
        return lookup(node.cell_id)
    if isinstance(node, Neg):
        return -evaluate(node.operand, lookup)
    if isinstance(node, BinOp):
        return _OPS[node.op](evaluate(node.left, lookup), evaluate(node.right, lookup))
    return FUNCTIONS[node.fn](*(evaluate(arg, lookup) for arg in node.args))


def shift_references(formula: str, col_offset: int, row_offset: int) -> str:
    """Return formula with its relative references moved by the given offsets.

    Text between references is kept as written.
    """
    parts = []
    last = 0
    for token in tokenize(formula):
        if token.kind != "ref":
            continue
        ref = _ref_from_text(token.text)
        col = ref.col if ref.col_abs else ref.col + col_offset
        row = ref.row if ref.row_abs else ref.row + row_offset
        if not (0 <= col < N_COLS and 0 <= row < N_ROWS):
            raise AppError(BAD_REF, f'copying "{formula}" moves reference "{token.text}" off the spreadsheet')
        text = (
            ("$" if ref.col_abs else "")
            + chr(ord("a") + col)
            + ("$" if ref.row_abs else "")
            + str(row + 1)
        )
        parts.append(formula[last:token.start])
        parts.append(text)
        last = token.end
    parts.append(formula[last:])
    return "".join(parts)
