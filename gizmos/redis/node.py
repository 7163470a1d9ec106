"""RESP node types, their wire serialization and a parser for requests."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

SEP = "\r\n"

Scalar = Union[bool, float, int, str, None]

_SCALAR_KINDS = (bool, float, int, str, type(None))


class NodeType(enum.Enum):
    """The three shapes a node can take."""

    PLAIN = 0
    VARIANT = 1
    AGGREGATE = 2


class NodeError(Exception):
    """Raised when a node is used in a way its type does not allow."""


class RedisNode(ABC):
    """Base of every node; knows its type and how to serialize itself."""

    type: NodeType

    @abstractmethod
    def serialize(self) -> str:
        """Return the RESP encoding of this node."""


class PlainNode(RedisNode):
    """A simple string (``+``) or an error (``-``)."""

    type = NodeType.PLAIN

    def __init__(self, message: str, ok: bool = True) -> None:
        self.message = message
        self.ok = ok

    def serialize(self) -> str:
        return ("+" if self.ok else "-") + self.message + SEP

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlainNode):
            return NotImplemented
        return self.message == other.message and self.ok == other.ok

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PlainNode({self.message!r}, ok={self.ok})"


def _kind(value: Scalar) -> type:
    kind = type(value)
    if kind not in _SCALAR_KINDS:
        raise TypeError(f"unsupported node value: {value!r}")
    return kind


class VariantNode(RedisNode):
    """A scalar value: boolean, float, integer, string or null."""

    type = NodeType.VARIANT

    def __init__(self, value: Scalar) -> None:
        _kind(value)
        self._value = value

    @property
    def value(self) -> Scalar:
        return self._value

    @value.setter
    def value(self, new: Scalar) -> None:
        if _kind(new) is not _kind(self._value):
            raise NodeError("Setting a different value type.")
        self._value = new

    def text(self) -> str:
        """Return the value as plain text."""
        value = self._value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            return f"{value:.6f}"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            return value
        return "nil"

    def serialize(self) -> str:
        value = self._value
        if isinstance(value, (bool, float)):
            return "+" + self.text() + SEP
        if isinstance(value, int):
            return ":" + str(value) + SEP
        if isinstance(value, str):
            return f"${len(value)}{SEP}{value}{SEP}"
        return "$-1" + SEP

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VariantNode):
            return NotImplemented
        return type(self._value) is type(other._value) and self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"VariantNode({self._value!r})"


class AggregateNode(RedisNode):
    """An array of nodes."""

    type = NodeType.AGGREGATE

    def __init__(self, values: Optional[Iterable[RedisNode]] = None) -> None:
        self._values: deque[RedisNode] = deque(values or ())

    def push_back(self, node: RedisNode) -> None:
        self._values.append(node)

    def push_front(self, node: RedisNode) -> None:
        self._values.appendleft(node)

    def pop_back(self) -> RedisNode:
        return self._values.pop()

    def pop_front(self) -> RedisNode:
        return self._values.popleft()

    def front(self) -> RedisNode:
        return self._values[0]

    def back(self) -> RedisNode:
        return self._values[-1]

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> RedisNode:
        size = len(self._values)
        position = index if index >= 0 else size + index
        if not 0 <= position < size:
            raise NodeError("Index out of bounds")
        return self._values[position]

    def __iter__(self) -> Iterator[RedisNode]:
        return iter(self._values)

    def strings(self) -> list[str]:
        """Return the text of every element; nested arrays are not allowed."""
        result = []
        for node in self._values:
            if isinstance(node, PlainNode):
                result.append(node.message)
            elif isinstance(node, VariantNode):
                result.append(node.text())
            else:
                raise NodeError("Node cannot contain aggregate nodes inside")
        return result

    def serialize(self) -> str:
        return f"*{len(self._values)}{SEP}" + "".join(v.serialize() for v in self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AggregateNode):
            return NotImplemented
        return list(self._values) == list(other._values)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AggregateNode({list(self._values)!r})"


@dataclass
class _Frame:
    kind: str
    remaining: int
    node: RedisNode


def _parse_count(text: str) -> int:
    count = int(text)
    if count < 0:
        raise ValueError(text)
    return count


def _frame_for(token: str) -> _Frame:
    if not token:
        raise ValueError("empty token")
    lead = token[0]
    if lead in "$*":
        if len(token) < 2:
            raise ValueError(token)
        if token[1] == "-":
            return _Frame(lead, 0, VariantNode(None))
        length = _parse_count(token[1:])
        node: RedisNode = VariantNode("") if lead == "$" else AggregateNode()
        return _Frame(lead, length, node)
    if lead in "+-":
        return _Frame(lead, 0, PlainNode(token[1:], ok=lead == "+"))
    return _Frame(":", 0, VariantNode(int(token[1:])))


def deserialize(data: str) -> RedisNode:
    """Parse one RESP value; malformed or incomplete input yields an error node."""
    error = PlainNode("Invalid input", ok=False)
    stack: list[_Frame] = []
    pos = 0
    size = len(data)

    while pos < size:
        top = stack[-1] if stack else None
        if top is None or top.kind != "$":
            end = data.find(SEP, pos)
            if end == -1:
                return error
            try:
                frame = _frame_for(data[pos:end])
            except ValueError:
                return error
            pos = end + 2
            stack.append(frame)
            # An empty bulk string still carries its terminating separator.
            if (
                frame.kind == "$"
                and frame.remaining == 0
                and frame.node == VariantNode("")
                and data.startswith(SEP, pos)
            ):
                pos += 2
        else:
            take = min(top.remaining, size - pos)
            bulk = top.node
            assert isinstance(bulk, VariantNode)
            bulk.value = bulk.value + data[pos:pos + take]  # type: ignore[operator]
            top.remaining -= take
            pos += take
            if top.remaining:
                return error
            pos += 2

        while stack and stack[-1].remaining == 0:
            done = stack.pop()
            if not stack:
                return done.node
            parent = stack[-1]
            if not isinstance(parent.node, AggregateNode):
                return error
            parent.node.push_back(done.node)
            parent.remaining -= 1

    return error