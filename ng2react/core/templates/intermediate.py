"""Intermediate template nodes.

A small closed set of nodes abstracted from the bound template AST. The
parser builds them; the generator visits them to produce TSX.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

_WHITESPACE_RE = re.compile(r"^\s*$")


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass
class TemplateExpression:
    source: str


@dataclass
class PipeExpression:
    name: str
    inner: "TemplateExpr"
    args: List[str] = field(default_factory=list)


TemplateExpr = Union[TemplateExpression, PipeExpression]


# ---------------------------------------------------------------------------
# Attribute values
# ---------------------------------------------------------------------------


@dataclass
class StringValue:
    expression: str


@dataclass
class ExpressionValue:
    expression: TemplateExpr


@dataclass
class EventValue:
    expression: str


@dataclass
class InterpolationValue:
    strings: List[str]
    expressions: List[TemplateExpr]


AttributeValue = Union[StringValue, ExpressionValue, EventValue, InterpolationValue]


@dataclass
class Attribute:
    name: str
    value: AttributeValue


@dataclass
class ConditionalClass:
    class_name: str
    condition: TemplateExpr


@dataclass
class StyleBinding:
    property: str
    expression: TemplateExpr
    unit: Optional[str] = None


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class IntermediateVisitor:
    def visit_element(self, node: "ElementIntermediate"):
        raise NotImplementedError

    def visit_conditional(self, node: "Conditional"):
        raise NotImplementedError

    def visit_for_of(self, node: "ForOf"):
        raise NotImplementedError

    def visit_switch(self, node: "Switch"):
        raise NotImplementedError

    def visit_switch_case(self, node: "SwitchCase"):
        raise NotImplementedError

    def visit_switch_default(self, node: "SwitchDefault"):
        raise NotImplementedError

    def visit_text(self, node: "TextIntermediate"):
        raise NotImplementedError

    def visit_text_with_interpolation(self, node: "TextWithInterpolations"):
        raise NotImplementedError

    def visit_container(self, node: "ContainerIntermediate"):
        raise NotImplementedError


@dataclass
class ElementIntermediate:
    children: List["IntermediateNode"]
    tag_name: str
    self_close: bool = False
    is_component: bool = False
    style_bindings: List[StyleBinding] = field(default_factory=list)
    conditional_classes: List[ConditionalClass] = field(default_factory=list)
    attributes: List[Attribute] = field(default_factory=list)
    class_name: str = ""
    style: str = ""

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_element(self)


@dataclass
class Conditional:
    children: List["IntermediateNode"]
    condition: TemplateExpr
    indent: int = 0

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_conditional(self)


@dataclass
class ForOf:
    children: List["IntermediateNode"]
    iterable: TemplateExpr
    var_name: str
    indent: int = 0

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_for_of(self)


@dataclass
class Switch:
    children: List["IntermediateNode"]
    expression: TemplateExpr
    indent: int = 0

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_switch(self)


@dataclass
class SwitchCase:
    children: List["IntermediateNode"]
    condition: TemplateExpr
    indent: int = 0

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_switch_case(self)


@dataclass
class SwitchDefault:
    children: List["IntermediateNode"]
    indent: int = 0

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_switch_default(self)


@dataclass
class TextIntermediate:
    text: str
    children: List["IntermediateNode"] = field(default_factory=list)

    @property
    def is_whitespace(self) -> bool:
        return _WHITESPACE_RE.match(self.text) is not None

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_text(self)


@dataclass
class TextWithInterpolations:
    strings: List[str]
    expressions: List[TemplateExpr]
    children: List["IntermediateNode"] = field(default_factory=list)

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_text_with_interpolation(self)


@dataclass
class ContainerIntermediate:
    children: List["IntermediateNode"]

    def visit(self, visitor: IntermediateVisitor):
        return visitor.visit_container(self)


IntermediateNode = Union[
    ElementIntermediate,
    Conditional,
    ForOf,
    Switch,
    SwitchCase,
    SwitchDefault,
    TextIntermediate,
    TextWithInterpolations,
    ContainerIntermediate,
]
