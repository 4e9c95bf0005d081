"""Member classifier.

Partitions the members of a component class into props, state and
constants, and locates the constructor and lifecycle hooks. Each member
is classified once, in declaration order:

* ``@Input()`` field or ``@Input()`` accessor -> props
* ``@Output()`` field                        -> props, typed ``(x: T) => void``
* ``readonly`` field                         -> constants
* ``get`` accessor                           -> constants
* any other field                            -> state

An accessor pair counts as an input when either half carries ``@Input()``;
the pair becomes one prop, typed from the setter parameter.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

import tree_sitter

from ..ast_parser.typescript_parser import (
    accessor_kind,
    decorators_of,
    has_decorator,
    is_readonly,
    member_name,
    return_expression,
    statements,
    type_annotation_text,
)
from ..constants import DESTROY_HOOK, INIT_HOOK, INPUT_DECORATOR, OUTPUT_DECORATOR
from .models import ComponentMembers, MemberDeclaration

logger = logging.getLogger(__name__)


@dataclass
class ClassMember:
    """A class body member with every decorator that applies to it."""

    node: tree_sitter.Node
    decorators: List[tree_sitter.Node] = field(default_factory=list)

    @property
    def start_byte(self) -> int:
        return self.decorators[0].start_byte if self.decorators else self.node.start_byte


def class_members(class_body: tree_sitter.Node) -> List[ClassMember]:
    """Members of a class body in declaration order.

    Method decorators are siblings of the method in the class body, field
    decorators are children of the field; both end up on the ClassMember.
    """
    members: List[ClassMember] = []
    pending: List[tree_sitter.Node] = []
    for child in class_body.children:
        if child.type == "decorator":
            pending.append(child)
            continue
        if not child.is_named or child.type == "comment":
            continue
        members.append(ClassMember(node=child, decorators=pending + decorators_of(child)))
        pending = []
    return members


def scan_component_members(class_node: tree_sitter.Node, source: bytes) -> ComponentMembers:
    """Classify the members of a component class."""
    props: List[MemberDeclaration] = []
    state: List[MemberDeclaration] = []
    constants: List[MemberDeclaration] = []
    other_names: List[str] = []

    body = class_node.child_by_field_name("body")
    members = class_members(body) if body is not None else []
    input_accessors = _input_accessor_names(members, source)
    setter_names = {
        member_name(m.node, source)
        for m in members
        if m.node.type == "method_definition" and accessor_kind(m.node) == "set"
    }

    for member in members:
        node = member.node
        name = member_name(node, source)
        is_input = has_decorator(member.decorators, INPUT_DECORATOR, source)

        if node.type == "public_field_definition":
            initializer = node.child_by_field_name("value")
            declared = type_annotation_text(node.child_by_field_name("type"), source)
            type_str = declared or infer_type(initializer, source)

            if is_input:
                props.append(MemberDeclaration(name, type_str, node, initializer))
            elif has_decorator(member.decorators, OUTPUT_DECORATOR, source):
                props.append(MemberDeclaration(name, _output_type(initializer, source), node))
            elif is_readonly(node):
                constants.append(MemberDeclaration(name, type_str, node, initializer))
            else:
                state.append(MemberDeclaration(name, type_str, node, initializer))

        elif node.type == "method_definition":
            kind = accessor_kind(node)
            if kind == "set" and name in input_accessors:
                props.append(MemberDeclaration(name, _setter_type(node, source), node))
            elif kind == "get" and name in input_accessors:
                if name not in setter_names:
                    declared = type_annotation_text(node.child_by_field_name("return_type"), source)
                    props.append(MemberDeclaration(name, declared or "any", node))
            elif kind == "get":
                constants.append(_getter_declaration(name, node, source))
            else:
                other_names.append(name)

    ctor = _method_named(members, "constructor", source)
    ng_on_init = _method_named(members, INIT_HOOK, source)
    ng_on_destroy = _method_named(members, DESTROY_HOOK, source)
    return ComponentMembers(
        props,
        state,
        constants,
        ctor,
        ng_on_init,
        ng_on_destroy,
        other_names=other_names,
        input_accessors=input_accessors,
    )


def _input_accessor_names(members: List[ClassMember], source: bytes) -> Set[str]:
    """Names of get/set accessors where either half of the pair is an ``@Input()``."""
    names = set()
    for member in members:
        node = member.node
        if node.type != "method_definition" or accessor_kind(node) is None:
            continue
        if has_decorator(member.decorators, INPUT_DECORATOR, source):
            names.add(member_name(node, source))
    return names


def _method_named(members: List[ClassMember], name: str, source: bytes) -> Optional[tree_sitter.Node]:
    for member in members:
        node = member.node
        if node.type == "method_definition" and accessor_kind(node) is None:
            if member_name(node, source) == name:
                return node
    return None


def _output_type(initializer: Optional[tree_sitter.Node], source: bytes) -> str:
    """``new EventEmitter<T>()`` -> ``(x: T) => void``; otherwise ``unknown``."""
    if initializer is None or initializer.type != "new_expression":
        return "unknown"
    type_args = initializer.child_by_field_name("type_arguments")
    if type_args is None:
        type_args = next((c for c in initializer.children if c.type == "type_arguments"), None)
    if type_args is None:
        return "unknown"
    args = [c for c in type_args.named_children if c.type != "comment"]
    if not args:
        return "unknown"
    return f"(x: {_text(args[0], source)}) => void"


def _setter_type(node: tree_sitter.Node, source: bytes) -> str:
    params = node.child_by_field_name("parameters")
    if params is None:
        return "any"
    for param in params.named_children:
        if param.type in ("required_parameter", "optional_parameter"):
            return type_annotation_text(param.child_by_field_name("type"), source) or "any"
    return "any"


def _getter_declaration(name: str, node: tree_sitter.Node, source: bytes) -> MemberDeclaration:
    body = node.child_by_field_name("body")
    stmts = statements(body)
    expr = return_expression(stmts[0]) if len(stmts) == 1 else None
    declared = type_annotation_text(node.child_by_field_name("return_type"), source)
    type_str = declared or (infer_type(expr, source) if expr is not None else "any")
    return MemberDeclaration(
        name,
        type_str,
        node,
        initializer=expr,
        getter_inline="expression" if expr is not None else "closure",
    )


def infer_type(node: Optional[tree_sitter.Node], source: bytes) -> str:
    """Syntactic type inference from an initializer expression."""
    if node is None:
        return "any"
    kind = node.type
    if kind == "number":
        return "number"
    if kind in ("string", "template_string"):
        return "string"
    if kind in ("true", "false"):
        return "boolean"
    if kind == "null":
        return "null"
    if kind == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        return infer_type(inner[0], source) if inner else "any"
    if kind == "unary_expression":
        operator = node.child_by_field_name("operator")
        op = _text(operator, source) if operator is not None else ""
        if op == "!":
            return "boolean"
        if op in ("-", "+"):
            return "number"
        return "any"
    if kind == "array":
        element_types = {infer_type(c, source) for c in node.named_children if c.type != "comment"}
        if len(element_types) == 1:
            (element_type,) = element_types
            return f"{element_type}[]"
        return "any[]"
    if kind == "new_expression":
        ctor = node.child_by_field_name("constructor")
        if ctor is None:
            return "any"
        type_args = node.child_by_field_name("type_arguments")
        suffix = _text(type_args, source) if type_args is not None else ""
        return _text(ctor, source) + suffix
    if kind in ("as_expression", "satisfies_expression"):
        named = [c for c in node.named_children if c.type != "comment"]
        return _text(named[-1], source) if len(named) > 1 else "any"
    return "any"


def _text(node: tree_sitter.Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
