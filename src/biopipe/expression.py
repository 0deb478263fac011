"""Boolean expressions over record fields.

Expressions reference fields as ``:NAME`` and are restricted to literals,
arithmetic, comparisons and boolean logic::

    :SEQ_LEN > 30 and :SEQ_NAME != "test1"

The text is parsed once with ``ast`` and every node is checked against a
whitelist; evaluation walks the tree, so no Python code is ever executed.
"""

from __future__ import annotations

import ast
import operator
import re
from typing import Any, Callable, Dict, Mapping

from .errors import OptionError, RecordError
from .options import to_number

# Quoted literals are matched first so a colon inside a string is kept.
FIELD = re.compile(r"""('(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*")|(?<![\w.]):([A-Za-z_]\w*)""")
PREFIX = "__field_"

_BINARY: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY: Dict[type, Callable[[Any], Any]] = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

_COMPARE: Dict[type, Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}


def _field_name(match: re.Match) -> str:
    if match.group(1) is not None:
        return match.group(1)
    return PREFIX + match.group(2)


class _Missing(Exception):
    """A referenced field is absent from the record."""


class Expression:
    """A compiled field expression."""

    def __init__(self, text: Any):
        self.text = str(text)
        source = FIELD.sub(_field_name, self.text)
        try:
            self.tree = ast.parse(source.strip(), mode="eval")
        except SyntaxError as e:
            raise OptionError(f"Bad expression: {self.text}: {e.msg}") from e
        self._check(self.tree.body)

    def _check(self, node: ast.AST) -> None:
        if isinstance(node, ast.Constant):
            if not isinstance(node.value, (str, int, float, bool, type(None))):
                raise OptionError(f"Bad literal in expression: {self.text}")
        elif isinstance(node, ast.Name):
            if not node.id.startswith(PREFIX):
                raise OptionError(
                    f"Unknown name {node.id!r} in expression: {self.text} "
                    "(reference fields as :NAME)"
                )
        elif isinstance(node, ast.BoolOp):
            for value in node.values:
                self._check(value)
        elif isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY:
            self._check(node.operand)
        elif isinstance(node, ast.BinOp) and type(node.op) in _BINARY:
            self._check(node.left)
            self._check(node.right)
        elif isinstance(node, ast.Compare) and all(type(op) in _COMPARE for op in node.ops):
            self._check(node.left)
            for comparator in node.comparators:
                self._check(comparator)
        else:
            raise OptionError(
                f"Unsupported construct {type(node).__name__} in expression: {self.text}"
            )

    @property
    def fields(self) -> list:
        return [
            node.id[len(PREFIX):]
            for node in ast.walk(self.tree)
            if isinstance(node, ast.Name)
        ]

    def __call__(self, record: Mapping[str, Any]) -> bool:
        """Evaluate against ``record``; absent fields make it False."""
        try:
            return bool(self._eval(self.tree.body, record))
        except _Missing:
            return False
        except (TypeError, ZeroDivisionError) as e:
            raise RecordError(f"Cannot evaluate {self.text!r} on {record!r}: {e}") from e

    def _eval(self, node: ast.AST, record: Mapping[str, Any]) -> Any:
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, ast.Name):
            key = node.id[len(PREFIX):]
            if record.get(key) is None:
                raise _Missing(key)
            value = record[key]
            # Numeric looking text compares as a number
            return to_number(value) if isinstance(value, str) else value
        if isinstance(node, ast.BoolOp):
            if isinstance(node.op, ast.And):
                result: Any = True
                for value in node.values:
                    result = self._eval(value, record)
                    if not result:
                        return result
                return result
            result = False
            for value in node.values:
                result = self._eval(value, record)
                if result:
                    return result
            return result
        if isinstance(node, ast.UnaryOp):
            return _UNARY[type(node.op)](self._eval(node.operand, record))
        if isinstance(node, ast.BinOp):
            return _BINARY[type(node.op)](
                self._eval(node.left, record), self._eval(node.right, record)
            )
        if isinstance(node, ast.Compare):
            left = self._eval(node.left, record)
            for op, comparator in zip(node.ops, node.comparators):
                right = self._eval(comparator, record)
                if not _COMPARE[type(op)](left, right):
                    return False
                left = right
            return True
        raise OptionError(f"Unsupported construct {type(node).__name__}")

    def __repr__(self) -> str:
        return f"Expression({self.text!r})"


__all__ = ["Expression"]
