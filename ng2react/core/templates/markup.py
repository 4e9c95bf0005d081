"""Markup tree builder.

Turns the lexer's token stream into a tree of elements, text and ICU
expansions, applying the HTML rules that matter for templates: void
elements, implicitly closed elements and foreign (SVG) namespaces.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from ..constants import CLOSED_BY_CHILDREN, CLOSED_BY_PARENT, FOREIGN_NAMESPACES, VOID_ELEMENTS
from .lexer import EndTag, ExpansionToken, LexAttribute, StartTag, TextToken, tokenize

logger = logging.getLogger(__name__)


@dataclass
class MarkupText:
    value: str
    start: int
    end: int


@dataclass
class MarkupExpansion:
    source: str
    start: int
    end: int


@dataclass
class MarkupElement:
    """An element. ``name`` carries the ``:ns:`` prefix for foreign elements."""

    name: str
    attributes: List[LexAttribute]
    start: int
    start_tag_end: int
    children: List["MarkupNode"] = field(default_factory=list)
    namespace: Optional[str] = None
    self_closing: bool = False
    end_span: Optional[Tuple[int, int]] = None  # None when closed implicitly

    @property
    def local_name(self) -> str:
        if self.namespace:
            return self.name[len(self.namespace) + 2:]
        return self.name


MarkupNode = Union[MarkupElement, MarkupText, MarkupExpansion]


@dataclass
class MarkupTree:
    roots: List[MarkupNode]
    errors: List[Tuple[str, int]]


def _can_self_close(name: str, namespace: Optional[str]) -> bool:
    lower = name.lower()
    return (
        lower in VOID_ELEMENTS
        or namespace is not None
        or "-" in name
        or lower.startswith("ng-")
    )


class _TreeBuilder:
    def __init__(self, tokens: List[object], errors: List[Tuple[str, int]]):
        self.tokens = tokens
        self.errors = errors
        self.roots: List[MarkupNode] = []
        self.stack: List[MarkupElement] = []

    def build(self) -> MarkupTree:
        for token in self.tokens:
            if isinstance(token, StartTag):
                self._start_tag(token)
            elif isinstance(token, EndTag):
                self._end_tag(token)
            elif isinstance(token, TextToken):
                self._add_child(MarkupText(token.value, token.start, token.end))
            elif isinstance(token, ExpansionToken):
                self._add_child(MarkupExpansion(token.source, token.start, token.end))
        # whatever is still open is closed implicitly at end of input
        self.stack = []
        return MarkupTree(self.roots, self.errors)

    def _add_child(self, node: MarkupNode) -> None:
        if self.stack:
            self.stack[-1].children.append(node)
        else:
            self.roots.append(node)

    def _start_tag(self, token: StartTag) -> None:
        lower = token.name.lower()
        while self.stack:
            closers = CLOSED_BY_CHILDREN.get(self.stack[-1].local_name.lower())
            if closers is None or lower not in closers:
                break
            self.stack.pop()

        parent_ns = self.stack[-1].namespace if self.stack else None
        prefix = lower.split(":", 1)[0] if ":" in lower else lower
        namespace = parent_ns or FOREIGN_NAMESPACES.get(prefix)
        name = f":{namespace}:{token.name}" if namespace else token.name

        if token.self_closing and not _can_self_close(token.name, namespace):
            self.errors.append((
                f'Only void, custom and foreign elements can be self closed "{token.name}"',
                token.start,
            ))

        element = MarkupElement(
            name=name,
            attributes=token.attributes,
            start=token.start,
            start_tag_end=token.end,
            namespace=namespace,
            self_closing=token.self_closing,
        )
        self._add_child(element)
        if token.self_closing:
            element.end_span = (token.start, token.end)
        elif lower not in VOID_ELEMENTS:
            self.stack.append(element)

    def _end_tag(self, token: EndTag) -> None:
        lower = token.name.lower()
        if lower in VOID_ELEMENTS:
            self.errors.append((f'Void elements do not have end tags "{token.name}"', token.start))
            return

        for index in range(len(self.stack) - 1, -1, -1):
            element = self.stack[index]
            if element.local_name.lower() == lower:
                element.end_span = (token.start, token.end)
                del self.stack[index:]
                return
            if element.local_name.lower() not in CLOSED_BY_PARENT:
                break

        self.errors.append((
            f'Unexpected closing tag "{token.name}". It may happen when the tag has '
            f'already been closed by another tag.',
            token.start,
        ))


def parse_markup(text: str) -> MarkupTree:
    """Parse template markup. Never raises; problems are in ``errors``."""
    lexed = tokenize(text)
    return _TreeBuilder(lexed.tokens, list(lexed.errors)).build()
