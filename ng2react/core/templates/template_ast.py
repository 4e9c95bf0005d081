"""Bound template AST.

The binder turns the markup tree into template nodes: attribute names are
classified into property/class/style/attribute bindings, events, two-way
bindings, references and variables; ``*directive`` microsyntax wraps the
element in a ``Template``; text containing ``{{ }}`` becomes ``BoundText``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from ..text import capitalize
from .expressions import (
    ASTWithSource,
    ExpressionError,
    has_interpolation,
    parse_action,
    parse_binding,
    parse_interpolation,
    split_top_level,
)
from .markup import MarkupElement, MarkupExpansion, MarkupText, parse_markup

logger = logging.getLogger(__name__)

# Binding categories, in the order of the Angular compiler's BindingType.
PROPERTY = "property"
ATTRIBUTE = "attribute"
CLASS = "class"
STYLE = "style"
ANIMATION = "animation"

_LET_RE = re.compile(r"^let\s+([\w$]+)\s*(?:=\s*([\w$]+))?\s*(.*)$", re.DOTALL)
_KEY_RE = re.compile(r"^([\w$.-]+)\s*:?\s*(.*)$", re.DOTALL)
_KEY_AS_RE = re.compile(r"^([\w$]+)\s+as\s+([\w$]+)$")
_AS_ALIAS_RE = re.compile(r"\s+as\s+([\w$]+)\s*$")


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass
class TextAttribute:
    name: str
    value: str


@dataclass
class BoundAttribute:
    name: str
    type: str  # PROPERTY, ATTRIBUTE, CLASS, STYLE or ANIMATION
    value: ASTWithSource
    unit: Optional[str] = None


@dataclass
class BoundEvent:
    name: str
    handler: ASTWithSource


@dataclass
class Variable:
    name: str
    value: str  # "$implicit" unless bound to a named context value


@dataclass
class Reference:
    name: str
    value: str


@dataclass
class Text:
    value: str
    start: int


@dataclass
class BoundText:
    value: ASTWithSource
    start: int


@dataclass
class Icu:
    source: str
    start: int
    column: int


@dataclass
class Content:
    selector: str
    start: int
    column: int


@dataclass
class Element:
    name: str
    attributes: List[TextAttribute]
    inputs: List[BoundAttribute]
    outputs: List[BoundEvent]
    children: List["TemplateNode"]
    references: List[Reference]
    start: int
    column: int
    end_span: Optional[Tuple[int, int]] = None
    self_closing: bool = False


@dataclass
class Template:
    """A template container: ``<ng-template>`` or an element with ``*dir``."""

    tag_name: str
    attributes: List[TextAttribute]
    inputs: List[BoundAttribute]
    outputs: List[BoundEvent]
    template_attrs: List[Union[BoundAttribute, TextAttribute]]
    children: List["TemplateNode"]
    variables: List[Variable]
    references: List[Reference]
    start: int
    column: int


TemplateNode = Union[Element, Template, Text, BoundText, Icu, Content]


@dataclass
class ParsedTemplate:
    nodes: List[TemplateNode]
    errors: List[Tuple[str, int]] = field(default_factory=list)


def is_ng_template(tag_name: str) -> bool:
    return _local(tag_name) == "ng-template"


def is_ng_container(tag_name: str) -> bool:
    return _local(tag_name) == "ng-container"


def is_ng_content(tag_name: str) -> bool:
    return _local(tag_name) == "ng-content"


def _local(name: str) -> str:
    if name.startswith(":"):
        return name.split(":", 2)[2]
    return name


# ---------------------------------------------------------------------------
# Binder
# ---------------------------------------------------------------------------


@dataclass
class _BoundAttrs:
    attributes: List[TextAttribute] = field(default_factory=list)
    inputs: List[BoundAttribute] = field(default_factory=list)
    outputs: List[BoundEvent] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    template_attrs: List[Union[BoundAttribute, TextAttribute]] = field(default_factory=list)
    template_variables: List[Variable] = field(default_factory=list)
    has_template: bool = False


class TemplateBinder:
    """Converts a markup tree into bound template nodes."""

    def __init__(self, text: str, location: str = ""):
        self.text = text
        self.location = location
        self.errors: List[Tuple[str, int]] = []

    def column(self, offset: int) -> int:
        return offset - (self.text.rfind("\n", 0, offset) + 1)

    def bind(self, nodes) -> List[TemplateNode]:
        result: List[TemplateNode] = []
        for node in nodes:
            bound = self._bind_node(node)
            if bound is not None:
                result.append(bound)
        return result

    def _bind_node(self, node) -> Optional[TemplateNode]:
        if isinstance(node, MarkupText):
            return self._bind_text(node)
        if isinstance(node, MarkupExpansion):
            return Icu(node.source, node.start, self.column(node.start))
        return self._bind_element(node)

    def _bind_text(self, node: MarkupText) -> TemplateNode:
        if has_interpolation(node.value):
            try:
                return BoundText(parse_interpolation(node.value, self.location), node.start)
            except ExpressionError as e:
                self.errors.append((str(e), node.start + e.offset))
        return Text(node.value, node.start)

    def _bind_element(self, node: MarkupElement) -> TemplateNode:
        attrs = self._bind_attributes(node)
        children = self.bind(node.children)
        column = self.column(node.start)

        if is_ng_content(node.name):
            selector = next((a.value for a in attrs.attributes if a.name == "select"), "*")
            parsed: TemplateNode = Content(selector, node.start, column)
        elif is_ng_template(node.name):
            parsed = Template(
                tag_name=node.name,
                attributes=attrs.attributes,
                inputs=attrs.inputs,
                outputs=attrs.outputs,
                template_attrs=[],
                children=children,
                variables=attrs.variables,
                references=attrs.references,
                start=node.start,
                column=column,
            )
        else:
            if attrs.variables:
                self.errors.append((
                    '"let-" is only supported on ng-template elements.', node.start
                ))
            parsed = Element(
                name=node.name,
                attributes=attrs.attributes,
                inputs=attrs.inputs,
                outputs=attrs.outputs,
                children=children,
                references=attrs.references,
                start=node.start,
                column=column,
                end_span=node.end_span,
                self_closing=node.self_closing,
            )

        if attrs.has_template:
            parsed = Template(
                tag_name=node.name,
                attributes=[],
                inputs=[],
                outputs=[],
                template_attrs=attrs.template_attrs,
                children=[parsed],
                variables=attrs.template_variables,
                references=[],
                start=node.start,
                column=column,
            )
        return parsed

    def _bind_attributes(self, node: MarkupElement) -> _BoundAttrs:
        bound = _BoundAttrs()
        for attr in node.attributes:
            name = attr.name
            try:
                if name.startswith("*"):
                    if bound.has_template:
                        self.errors.append((
                            "Can't have multiple template bindings on one element. "
                            "Use only one attribute prefixed by *",
                            attr.start,
                        ))
                        continue
                    bound.has_template = True
                    self._bind_microsyntax(name[1:], attr.value, bound)
                elif name.startswith("[(") and name.endswith(")]"):
                    self._bind_two_way(name[2:-2], attr.value, bound)
                elif name.startswith("bindon-"):
                    self._bind_two_way(name[len("bindon-"):], attr.value, bound)
                elif name.startswith("[") and name.endswith("]"):
                    bound.inputs.append(self._bound_property(name[1:-1], attr.value))
                elif name.startswith("bind-"):
                    bound.inputs.append(self._bound_property(name[len("bind-"):], attr.value))
                elif name.startswith("(") and name.endswith(")"):
                    bound.outputs.append(BoundEvent(name[1:-1], parse_action(attr.value, self.location)))
                elif name.startswith("on-"):
                    bound.outputs.append(BoundEvent(name[len("on-"):], parse_action(attr.value, self.location)))
                elif name.startswith("#"):
                    bound.references.append(Reference(name[1:], attr.value))
                elif name.startswith("ref-"):
                    bound.references.append(Reference(name[len("ref-"):], attr.value))
                elif name.startswith("let-"):
                    bound.variables.append(Variable(name[len("let-"):], attr.value or "$implicit"))
                elif name.startswith("@"):
                    bound.inputs.append(self._bound_property(name, attr.value))
                elif name == "i18n" or name.startswith("i18n-"):
                    continue
                elif has_interpolation(attr.value):
                    bound.inputs.append(BoundAttribute(
                        name, PROPERTY, parse_interpolation(attr.value, self.location)
                    ))
                else:
                    bound.attributes.append(TextAttribute(name, attr.value))
            except ExpressionError as e:
                offset = attr.value_start + e.offset if attr.value_start >= 0 else attr.start
                self.errors.append((f"{e} in [{attr.value}]", offset))
        return bound

    def _bound_property(self, name: str, value: str) -> BoundAttribute:
        if name.startswith("@") or name.startswith("animate."):
            return BoundAttribute(name, ANIMATION, parse_binding(value or "undefined", self.location))
        ast = parse_binding(value, self.location)
        if name.startswith("attr."):
            return BoundAttribute(name[len("attr."):], ATTRIBUTE, ast)
        if name.startswith("class."):
            return BoundAttribute(name[len("class."):], CLASS, ast)
        if name.startswith("style."):
            parts = name[len("style."):].split(".", 1)
            unit = parts[1] if len(parts) > 1 else None
            return BoundAttribute(parts[0], STYLE, ast, unit)
        return BoundAttribute(name, PROPERTY, ast)

    def _bind_two_way(self, name: str, value: str, bound: _BoundAttrs) -> None:
        bound.inputs.append(BoundAttribute(name, PROPERTY, parse_binding(value, self.location)))
        handler = f"{value.strip()}=$event"
        bound.outputs.append(BoundEvent(f"{name}Change", parse_action(handler, self.location)))

    # ── Microsyntax ───────────────────────────────────────────────

    def _bind_microsyntax(self, directive: str, value: str, bound: _BoundAttrs) -> None:
        """``*ngFor="let item of items; index as i"`` and friends.

        The first expression without a key binds the directive itself;
        later keys are prefixed with the directive name (``of`` ->
        ``ngForOf``).
        """
        primary_bound = False
        segments = split_top_level(value, ";,")
        for index, (seg_start, seg_end) in enumerate(segments):
            segment = value[seg_start:seg_end].strip()
            if not segment:
                continue

            let_match = _LET_RE.match(segment)
            if let_match:
                bound.template_variables.append(
                    Variable(let_match.group(1), let_match.group(2) or "$implicit")
                )
                segment = let_match.group(3).strip()
                if not segment:
                    continue
            elif index == 0:
                self._bind_template_expression(directive, segment, bound)
                primary_bound = True
                continue

            key_as = _KEY_AS_RE.match(segment)
            if key_as:
                bound.template_variables.append(
                    Variable(key_as.group(2), key_as.group(1))
                )
                continue

            key_match = _KEY_RE.match(segment)
            if key_match is None:
                raise ExpressionError(f"Unexpected token in '{segment}'", seg_start)
            key = directive + capitalize(key_match.group(1))
            expression = key_match.group(2).strip()
            if expression:
                self._bind_template_expression(key, expression, bound)
            else:
                bound.template_attrs.append(TextAttribute(key, ""))

        if not primary_bound:
            bound.template_attrs.insert(0, TextAttribute(directive, ""))

    def _bind_template_expression(self, key: str, expression: str, bound: _BoundAttrs) -> None:
        alias = _AS_ALIAS_RE.search(expression)
        if alias:
            bound.template_variables.append(Variable(alias.group(1), key))
            expression = expression[:alias.start()]
        bound.template_attrs.append(
            BoundAttribute(key, PROPERTY, parse_binding(expression.strip(), self.location))
        )


def parse_template_nodes(text: str, location: str = "") -> ParsedTemplate:
    """Parse markup and bind it. Diagnostics are returned, never raised."""
    tree = parse_markup(text)
    binder = TemplateBinder(text, location)
    nodes = binder.bind(tree.roots)
    errors = sorted(tree.errors + binder.errors, key=lambda e: e[1])
    return ParsedTemplate(nodes, errors)
