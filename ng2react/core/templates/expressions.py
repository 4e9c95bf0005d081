"""Binding expression parsing.

Template expressions are passed through to the output as source text, so
they are not parsed into full syntax trees. What matters is where the
expression text begins and ends, the pipe chain applied to it, and the
literal fragments around ``{{ }}`` interpolations.

Spans are character offsets into ``ASTWithSource.source``.
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from ..errors import NotSupportedError

_PIPE_NAME_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


class ExpressionError(ValueError):
    """Malformed binding expression. ``offset`` is relative to the source."""

    def __init__(self, message: str, offset: int = 0):
        super().__init__(message)
        self.offset = offset


@dataclass
class Span:
    start: int
    end: int


@dataclass
class PlainExpression:
    """Any expression without a pipe."""

    span: Span


@dataclass
class BindingPipe:
    name: str
    exp: "ExpressionNode"
    args: List[str]
    span: Span


@dataclass
class Interpolation:
    strings: List[str]
    expressions: List["ExpressionNode"]
    span: Span


ExpressionNode = Union[PlainExpression, BindingPipe]


@dataclass
class ASTWithSource:
    ast: Union[PlainExpression, BindingPipe, Interpolation]
    source: str
    location: str = ""

    def text(self, span: Span) -> str:
        return self.source[span.start:span.end]


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


@dataclass
class _Scan:
    """Top-level separator positions found by one pass over an expression."""

    pipes: List[int] = field(default_factory=list)
    nested_pipe: int = -1


def _scan(text: str, start: int, end: int) -> _Scan:
    """Find top-level ``|`` operators, tracking strings and brackets."""
    result = _Scan()
    stack: List[str] = []
    quote = ""
    j = start
    while j < end:
        ch = text[j]
        if quote:
            if ch == "\\":
                j += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack[-1] != ch:
                raise ExpressionError(f"Unexpected token '{ch}'", j)
            stack.pop()
        elif ch == "|":
            if j + 1 < end and text[j + 1] == "|":
                j += 2
                continue
            if j > start and text[j - 1] == "|":
                j += 1
                continue
            if stack:
                if result.nested_pipe < 0:
                    result.nested_pipe = j
            else:
                result.pipes.append(j)
        j += 1
    if quote:
        raise ExpressionError("Unterminated quote", end)
    if stack:
        raise ExpressionError(f"Missing expected {stack[-1]}", end)
    return result


def split_top_level(text: str, separators: str, start: int = 0, end: int = -1) -> List[Tuple[int, int]]:
    """Split ``text[start:end]`` at top-level separator characters.

    A ``:`` that closes a ternary ``?`` is not a separator. Returns the
    (start, end) offsets of every part.
    """
    if end < 0:
        end = len(text)
    parts: List[Tuple[int, int]] = []
    depth = 0
    ternary = 0
    quote = ""
    part_start = start
    j = start
    while j < end:
        ch = text[j]
        if quote:
            if ch == "\\":
                j += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif depth == 0 and ch == "?":
            nxt = text[j + 1] if j + 1 < end else ""
            if nxt in (".", "?"):
                j += 2
                continue
            ternary += 1
        elif depth == 0 and ch == ":" and ternary:
            ternary -= 1
        elif depth == 0 and ch in separators:
            parts.append((part_start, j))
            part_start = j + 1
        j += 1
    parts.append((part_start, end))
    return parts


def _trim(text: str, start: int, end: int) -> Span:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return Span(start, end)


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------


def _parse_pipes(text: str, start: int, end: int) -> ExpressionNode:
    scan = _scan(text, start, end)
    if scan.nested_pipe >= 0:
        raise NotSupportedError(
            f"Pipes nested inside brackets are not supported: '{text[start:end].strip()}'"
        )
    bounds = [start] + [p + 1 for p in scan.pipes]
    stops = scan.pipes + [end]

    span = _trim(text, bounds[0], stops[0])
    if span.start == span.end:
        raise ExpressionError("Blank expression", start)
    node: ExpressionNode = PlainExpression(span)

    for seg_start, seg_end in zip(bounds[1:], stops[1:]):
        parts = split_top_level(text, ":", seg_start, seg_end)
        name_span = _trim(text, *parts[0])
        name = text[name_span.start:name_span.end]
        if not _PIPE_NAME_RE.match(name):
            raise ExpressionError(f"Invalid pipe name '{name}'", seg_start)
        args = []
        for arg_start, arg_end in parts[1:]:
            arg_span = _trim(text, arg_start, arg_end)
            args.append(text[arg_span.start:arg_span.end])
        node = BindingPipe(name, node, args, _trim(text, start, seg_end))
    return node


def parse_binding(source: str, location: str = "") -> ASTWithSource:
    """Parse a property binding or structural directive expression."""
    return ASTWithSource(_parse_pipes(source, 0, len(source)), source, location)


def parse_action(source: str, location: str = "") -> ASTWithSource:
    """Event handlers are statements; pipes are not allowed in them."""
    scan = _scan(source, 0, len(source))
    if scan.pipes or scan.nested_pipe >= 0:
        raise ExpressionError("Cannot have a pipe in an action expression", 0)
    return ASTWithSource(PlainExpression(_trim(source, 0, len(source))), source, location)


def _find_interpolation_end(text: str, start: int) -> int:
    quote = ""
    j = start
    while j < len(text):
        ch = text[j]
        if quote:
            if ch == "\\":
                j += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in ("'", '"', "`"):
            quote = ch
        elif text.startswith("}}", j):
            return j
        j += 1
    return -1


def has_interpolation(text: str) -> bool:
    start = text.find("{{")
    return start != -1 and _find_interpolation_end(text, start + 2) != -1


def parse_interpolation(source: str, location: str = "") -> ASTWithSource:
    """Split ``a{{x}}b{{y | p}}c`` into literal strings and expressions."""
    strings: List[str] = []
    expressions: List[ExpressionNode] = []
    literal_start = 0
    j = 0
    while True:
        open_at = source.find("{{", j)
        if open_at == -1:
            break
        close_at = _find_interpolation_end(source, open_at + 2)
        if close_at == -1:
            break
        strings.append(source[literal_start:open_at])
        inner = _trim(source, open_at + 2, close_at)
        if inner.start == inner.end:
            raise ExpressionError(
                "Blank expressions are not allowed in interpolated strings", open_at
            )
        expressions.append(_parse_pipes(source, open_at + 2, close_at))
        literal_start = close_at + 2
        j = literal_start
    strings.append(source[literal_start:])
    return ASTWithSource(Interpolation(strings, expressions, Span(0, len(source))), source, location)
