"""TypeScript parsing using tree-sitter.

Wraps the tree-sitter TypeScript grammar and provides the small set of
syntax predicates the component transformation needs: decorators,
modifiers, accessors, ``this.x`` member access and assignments.

The plain TypeScript grammar is used (not TSX) so that ``<T>expr`` type
assertions in component files parse as ``type_assertion`` nodes.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import tree_sitter
import tree_sitter_typescript

from ..constants import COMPONENT_DECORATOR

logger = logging.getLogger(__name__)

_TS_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_typescript())

CLASS_NODE_TYPES = ("class_declaration", "abstract_class_declaration", "class")


@dataclass
class SourceFile:
    """A parsed TypeScript file. Offsets everywhere are byte offsets."""

    file_name: str
    source: bytes
    tree: tree_sitter.Tree

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node


def parse_typescript(source_text: str, file_name: str = "") -> SourceFile:
    """Parse TypeScript source into a SourceFile.

    Syntax errors are reported as a warning; tree-sitter still produces a
    tree and untouched regions are passed through verbatim.
    """
    source_bytes = source_text.encode("utf-8")
    parser = tree_sitter.Parser(_TS_LANGUAGE)
    tree = parser.parse(source_bytes)
    if tree.root_node.has_error:
        logger.warning(f"Tree-sitter reported parse errors in {file_name or '<source>'}")
    return SourceFile(file_name=file_name, source=source_bytes, tree=tree)


@dataclass
class ComponentDeclaration:
    """A class carrying the ``@Component`` decorator."""

    node: tree_sitter.Node  # outermost node replaced by the rewriter
    class_node: tree_sitter.Node
    name: Optional[str]
    decorator: tree_sitter.Node  # the call_expression
    argument: Optional[tree_sitter.Node]  # first decorator argument
    modifiers: List[str]  # ["export"], ["export", "default"] or []


class SourceTreeHelper:
    """Source text access for nodes of one SourceFile."""

    def __init__(self, source_file: SourceFile):
        self.source_file = source_file
        self.source = source_file.source

    def get_source(self, node: tree_sitter.Node) -> str:
        return self.text_between(node.start_byte, node.end_byte)

    def text_between(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Decorators and modifiers
# ---------------------------------------------------------------------------


def decorators_of(node: tree_sitter.Node) -> List[tree_sitter.Node]:
    return [c for c in node.children if c.type == "decorator"]


def get_decorator(
    decorators: List[tree_sitter.Node], name: str, source: bytes
) -> Optional[tree_sitter.Node]:
    """Return the call expression of ``@name(...)`` among ``decorators``."""
    for decorator in decorators:
        for expr in decorator.named_children:
            if expr.type != "call_expression":
                continue
            fn = expr.child_by_field_name("function")
            if fn is not None and fn.type == "identifier" and _text(fn, source) == name:
                return expr
    return None


def has_decorator(decorators: List[tree_sitter.Node], name: str, source: bytes) -> bool:
    return get_decorator(decorators, name, source) is not None


def first_argument(call: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return None
    named = [c for c in args.named_children if c.type != "comment"]
    return named[0] if named else None


def has_token(node: tree_sitter.Node, token: str) -> bool:
    """True if ``node`` has a direct anonymous child ``token`` (e.g. readonly)."""
    return any(not c.is_named and c.type == token for c in node.children)


def is_readonly(node: tree_sitter.Node) -> bool:
    return has_token(node, "readonly")


def accessor_kind(node: tree_sitter.Node) -> Optional[str]:
    """Return "get" or "set" for accessor method definitions."""
    if node.type != "method_definition":
        return None
    name = node.child_by_field_name("name")
    for child in node.children:
        if name is not None and child.start_byte >= name.start_byte:
            break
        if not child.is_named and child.type in ("get", "set"):
            return child.type
    return None


def member_name(node: tree_sitter.Node, source: bytes) -> str:
    name = node.child_by_field_name("name")
    return _text(name, source) if name is not None else ""


def type_annotation_text(node: Optional[tree_sitter.Node], source: bytes) -> Optional[str]:
    """Text of the type inside a ``type_annotation`` (without the colon)."""
    if node is None:
        return None
    named = [c for c in node.named_children if c.type != "comment"]
    if not named:
        return None
    return source[named[0].start_byte:node.end_byte].decode("utf-8", errors="replace").strip()


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def find_component(node: tree_sitter.Node, source: bytes) -> Optional[ComponentDeclaration]:
    """Return the component declaration if ``node`` is a ``@Component`` class.

    Decorators written before ``export`` belong to the export statement in
    the tree-sitter grammar, so both shapes are recognized.
    """
    outer = node
    modifiers: List[str] = []
    decorators: List[tree_sitter.Node] = []
    if node.type == "export_statement":
        cls = node.child_by_field_name("declaration")
        if cls is None:
            cls = node.child_by_field_name("value")
        if cls is None or cls.type not in CLASS_NODE_TYPES:
            return None
        decorators.extend(decorators_of(node))
        modifiers = [c.type for c in node.children if c.type in ("export", "default")]
    elif node.type in CLASS_NODE_TYPES:
        if node.parent is not None and node.parent.type == "export_statement":
            return None
        cls = node
    else:
        return None

    decorators.extend(decorators_of(cls))
    call = get_decorator(decorators, COMPONENT_DECORATOR, source)
    if call is None:
        return None
    name_node = cls.child_by_field_name("name")
    return ComponentDeclaration(
        node=outer,
        class_node=cls,
        name=_text(name_node, source) if name_node is not None else None,
        decorator=call,
        argument=first_argument(call),
        modifiers=modifiers,
    )


# ---------------------------------------------------------------------------
# Statements and expressions
# ---------------------------------------------------------------------------


def statements(block: Optional[tree_sitter.Node]) -> List[tree_sitter.Node]:
    if block is None:
        return []
    return [c for c in block.named_children if c.type != "comment"]


def has_non_empty_body(block: Optional[tree_sitter.Node]) -> bool:
    return len(statements(block)) > 0


def is_assignment(node: tree_sitter.Node) -> bool:
    return node.type == "assignment_expression"


def is_this_member(node: Optional[tree_sitter.Node]) -> bool:
    if node is None or node.type != "member_expression":
        return False
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    return obj is not None and obj.type == "this" and prop is not None


def return_expression(stmt: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    if stmt.type != "return_statement":
        return None
    named = [c for c in stmt.named_children if c.type != "comment"]
    return named[0] if named else None


def _text(node: tree_sitter.Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
