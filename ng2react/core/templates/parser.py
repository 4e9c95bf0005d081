"""Template compiler, parser stage.

Builds the intermediate node tree from the bound template AST:
structural directives become Conditional/ForOf/Switch nodes, bindings
become attributes, and tags matching a known selector are rewritten to
the component's exported name.
"""

import logging
from typing import List, Optional

from ..components.models import ComponentInfo
from ..constants import VOID_ELEMENTS
from ..errors import BindingTypeError, NotSupportedError, ParseError, TemplateDiagnostic
from ..text import offset_to_line_col
from .expressions import ASTWithSource, BindingPipe, ExpressionNode, Interpolation
from .generator import generate_code
from .intermediate import (
    Attribute,
    ConditionalClass,
    Conditional,
    ContainerIntermediate,
    ElementIntermediate,
    EventValue,
    ExpressionValue,
    ForOf,
    IntermediateNode,
    InterpolationValue,
    PipeExpression,
    StringValue,
    StyleBinding,
    Switch,
    SwitchCase,
    SwitchDefault,
    TemplateExpr,
    TemplateExpression,
    TextIntermediate,
    TextWithInterpolations,
)
from .template_ast import (
    ANIMATION,
    ATTRIBUTE,
    CLASS,
    PROPERTY,
    STYLE,
    BoundAttribute,
    BoundText,
    Content,
    Element,
    Icu,
    Template,
    Text,
    TemplateNode,
    is_ng_container,
    is_ng_template,
    parse_template_nodes,
)

logger = logging.getLogger(__name__)

# Bound inputs consumed by the parser itself.
_EXCLUDED_ATTRIBUTES = ("ngSwitch",)


def transform_template_to_tsx(template: str, template_url: str, component_info: ComponentInfo) -> str:
    """Compile template markup into TSX text."""
    intermediate = parse_template(template, template_url, component_info)
    return generate_code(intermediate, component_info)


def parse_template(template: str, template_url: str, component_info: ComponentInfo) -> ContainerIntermediate:
    """Parse template markup into the intermediate tree.

    Raises:
        ParseError: With every markup diagnostic, after logging each.
        NotSupportedError: For constructs that have no translation.
        BindingTypeError: For animation bindings.
    """
    parsed = parse_template_nodes(template, template_url)
    if parsed.errors:
        diagnostics = []
        for message, offset in parsed.errors:
            line, column = offset_to_line_col(template, offset)
            diagnostic = TemplateDiagnostic(message, line, column, template_url)
            logger.error(str(diagnostic))
            diagnostics.append(diagnostic)
        raise ParseError(diagnostics, template_url)

    visitor = TemplateVisitor(component_info, template)
    return visitor.visit_top_level(parsed.nodes)


class TemplateVisitor:
    def __init__(self, component_info: ComponentInfo, template: str = ""):
        self.component_info = component_info
        self.template = template

    @property
    def file_info(self):
        return self.component_info.file_info

    def visit_top_level(self, nodes: List[TemplateNode]) -> ContainerIntermediate:
        return ContainerIntermediate(self.visit_nodes(nodes))

    def visit_nodes(self, nodes: List[TemplateNode]) -> List[IntermediateNode]:
        return [self.visit(node) for node in nodes]

    def visit(self, node: TemplateNode) -> IntermediateNode:
        if isinstance(node, Element):
            return self.visit_element(node)
        if isinstance(node, Template):
            return self.visit_template(node)
        if isinstance(node, BoundText):
            return self.visit_bound_text(node)
        if isinstance(node, Text):
            return TextIntermediate(node.value)
        if isinstance(node, Content):
            raise NotSupportedError(
                f"Content projection (<ng-content select=\"{node.selector}\">) is not supported"
                f"{self._where(node.start)}"
            )
        if isinstance(node, Icu):
            raise NotSupportedError(f"ICU expressions are not supported{self._where(node.start)}")
        raise NotSupportedError(f"Unknown template node {type(node).__name__}")

    def _where(self, offset: int) -> str:
        if not self.template:
            return ""
        line, column = offset_to_line_col(self.template, offset)
        return f" (line {line + 1}, column {column + 1})"

    # ── Elements ──────────────────────────────────────────────────

    def visit_element(self, element: Element) -> IntermediateNode:
        tag_name = element.name
        if tag_name.startswith(":svg:"):
            tag_name = tag_name[len(":svg:"):]
        if tag_name.startswith("svg:"):
            tag_name = tag_name[len("svg:"):]

        if element.references:
            names = ", ".join("#" + r.name for r in element.references)
            raise NotSupportedError(
                f"Element references ({names}) are not supported{self._where(element.start)}"
            )

        if is_ng_container(tag_name):
            return ContainerIntermediate(self.visit_element_children(element))

        is_component = False
        component = self.file_info.project_info.matches_component_selector(tag_name)
        if component is not None:
            is_component = True
            tag_name = component.name
            self.file_info.add_component(component)

        style_bindings: List[StyleBinding] = []
        conditional_classes: List[ConditionalClass] = []
        attributes: List[Attribute] = []

        for bound in element.inputs:
            if bound.type == CLASS:
                conditional_classes.append(ConditionalClass(bound.name, self.parse_expression(bound.value)))
            elif bound.type == STYLE:
                style_bindings.append(StyleBinding(bound.name, self.parse_expression(bound.value), bound.unit))
            elif bound.type == PROPERTY:
                if bound.name in _EXCLUDED_ATTRIBUTES:
                    continue
                attributes.append(Attribute(bound.name, self._binding_value(bound)))
            elif bound.type == ATTRIBUTE:
                attributes.append(Attribute(bound.name, self._binding_value(bound)))
            elif bound.type == ANIMATION:
                raise BindingTypeError(f"Animation binding '{bound.name}' is not supported")
            else:
                raise BindingTypeError(f"BindingType: {bound.type}")

        for output in element.outputs:
            handler = output.handler.source.strip()
            attributes.append(Attribute(output.name, EventValue(handler)))

        style = ""
        class_name = ""
        for attr in element.attributes:
            if attr.name == "class":
                class_name = attr.value
            elif attr.name == "style":
                style = attr.value
            else:
                attributes.append(Attribute(attr.name, StringValue(attr.value)))

        is_closed = element.end_span is not None
        is_self_closed = is_closed and element.self_closing
        should_self_close = not is_closed and tag_name in VOID_ELEMENTS
        self_close = is_component or is_self_closed or should_self_close

        children = self.visit_element_children(element)
        if is_component and any(not _is_whitespace(c) for c in children):
            logger.warning(f"Content of <{element.name}> is dropped; {tag_name} is rendered self-closed")

        return ElementIntermediate(
            children=children,
            tag_name=tag_name,
            self_close=self_close,
            is_component=is_component,
            style_bindings=style_bindings,
            conditional_classes=conditional_classes,
            attributes=attributes,
            class_name=class_name,
            style=style,
        )

    def _binding_value(self, bound: BoundAttribute):
        if isinstance(bound.value.ast, Interpolation):
            interpolation = bound.value.ast
            expressions = [self.parse_expression1(bound.value.source, e) for e in interpolation.expressions]
            return InterpolationValue(list(interpolation.strings), expressions)
        return ExpressionValue(self.parse_expression(bound.value))

    def visit_element_children(self, element: Element) -> List[IntermediateNode]:
        switch_attribute = next((i for i in element.inputs if i.name == "ngSwitch"), None)
        if switch_attribute is None:
            return self.visit_nodes(element.children)

        expression = self.parse_expression(switch_attribute.value)
        children = self.visit_nodes(element.children)
        for node in children:
            if not (isinstance(node, (SwitchCase, SwitchDefault)) or _is_whitespace(node)):
                raise NotSupportedError(
                    "Invalid child element of [ngSwitch]. Must be a SwitchCase or SwitchDefault."
                    f"{self._where(element.start)}"
                )
        return [Switch(children, expression, element.column)]

    # ── Templates ─────────────────────────────────────────────────

    def visit_template(self, template: Template) -> IntermediateNode:
        """A template is ``<ng-template>`` or an element with ``*directive``.

        An explicit ng-template carries its directive as a bound input; an
        inline template carries it as a template attribute.
        """
        if is_ng_template(template.tag_name):
            bound_attrs = list(template.inputs)
        else:
            bound_attrs = [t for t in template.template_attrs if isinstance(t, BoundAttribute)]

        markers = list(template.template_attrs)
        if is_ng_template(template.tag_name):
            # <ng-template ngSwitchDefault> carries the marker as a plain attribute
            markers += template.attributes
        if any(t.name == "ngSwitchDefault" for t in markers):
            return SwitchDefault(self.visit_nodes(template.children), template.column)

        if not template.template_attrs and not template.inputs:
            if template.variables:
                raise NotSupportedError(
                    f"Template variables (let-) are not supported{self._where(template.start)}"
                )
            if is_ng_template(template.tag_name):
                # not rendered without a directive
                return TextIntermediate("")
            return ContainerIntermediate(self.visit_nodes(template.children))

        if not bound_attrs:
            return ContainerIntermediate(self.visit_nodes(template.children))

        bound = bound_attrs[0]
        value = self.parse_expression(bound.value)
        if bound.name == "ngIf":
            self._reject_variables(template, "*ngIf")
            for extra in bound_attrs[1:]:
                logger.warning(
                    f"Ignoring '{extra.name}' on ngIf: else/then branches are not supported"
                )
            return Conditional(self.visit_nodes(template.children), value, template.column)
        if bound.name == "ngSwitchCase":
            self._reject_variables(template, "*ngSwitchCase")
            return SwitchCase(self.visit_nodes(template.children), value, template.column)
        if bound.name == "ngForOf":
            variables = template.variables
            if len(variables) != 1 or variables[0].value != "$implicit":
                raise NotSupportedError(
                    "ngFor supports exactly one loop variable (no 'let i = index' or 'as' aliases)"
                    f"{self._where(template.start)}"
                )
            return ForOf(self.visit_nodes(template.children), value, variables[0].name, template.column)

        raise NotSupportedError(
            f"Structural directive '{bound.name}' is not supported{self._where(template.start)}"
        )

    def _reject_variables(self, template: Template, directive: str) -> None:
        if template.variables:
            names = ", ".join(v.name for v in template.variables)
            raise NotSupportedError(
                f"Template variables ({names}) on {directive} are not supported"
                f"{self._where(template.start)}"
            )

    # ── Text and expressions ──────────────────────────────────────

    def visit_bound_text(self, text: BoundText) -> IntermediateNode:
        interpolation = text.value.ast
        expressions = [self.parse_expression1(text.value.source, e) for e in interpolation.expressions]
        return TextWithInterpolations(list(interpolation.strings), expressions)

    def parse_expression(self, source: ASTWithSource) -> TemplateExpr:
        return self.parse_expression1(source.source, source.ast)

    def parse_expression1(self, source: str, expr: ExpressionNode) -> TemplateExpr:
        if isinstance(expr, BindingPipe):
            inner = self.parse_expression1(source, expr.exp)
            return PipeExpression(expr.name, inner, list(expr.args))
        return TemplateExpression(source[expr.span.start:expr.span.end])


def _is_whitespace(node: Optional[IntermediateNode]) -> bool:
    return isinstance(node, TextIntermediate) and node.is_whitespace
