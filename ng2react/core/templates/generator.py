"""Template compiler, generator stage.

Visits the intermediate tree and writes TSX markup. Structural nodes
become embedded expressions (``&&``, ``.map``, a self-invoking
``switch``); attribute names are translated to their DOM spelling.
"""

import logging
import re
from typing import List

from ..components.models import ComponentInfo
from ..constants import ATTRIBUTE_DOM_ALIASES, CASE_MAP, EVENT_NAME_MAP, NON_STRING_ATTRIBUTES
from ..text import TextBuffer, kebab_to_camel_case
from .intermediate import (
    Attribute,
    AttributeValue,
    ConditionalClass,
    Conditional,
    ContainerIntermediate,
    ElementIntermediate,
    EventValue,
    ExpressionValue,
    ForOf,
    IntermediateNode,
    IntermediateVisitor,
    InterpolationValue,
    PipeExpression,
    StringValue,
    StyleBinding,
    Switch,
    SwitchCase,
    SwitchDefault,
    TemplateExpr,
    TextIntermediate,
    TextWithInterpolations,
)

logger = logging.getLogger(__name__)

_EVENT_REF_RE = re.compile(r"\$event\b")
_CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_CSS_KEBAB_RE = re.compile(r"-(\w)")


def generate_code(intermediate: ContainerIntermediate, component_info: ComponentInfo) -> str:
    """Generate TSX from the intermediate tree."""
    buffer = TextBuffer()
    generator = TsxGenerator(buffer, component_info)
    intermediate.visit(generator)
    return buffer.text


def non_whitespace_nodes(nodes: List[IntermediateNode]) -> List[IntermediateNode]:
    return [n for n in nodes if not (isinstance(n, TextIntermediate) and n.is_whitespace)]


def html_attribute_name_to_dom_name(name: str) -> str:
    if name.startswith("data-") or name.startswith("aria-"):
        # supported by React as written
        return name
    dom_name = kebab_to_camel_case(name)
    dom_name = ATTRIBUTE_DOM_ALIASES.get(dom_name, dom_name)
    return CASE_MAP.get(dom_name.lower(), dom_name)


def css_to_js_case(name: str) -> str:
    return _CSS_KEBAB_RE.sub(lambda m: m.group(1).upper(), name)


def parse_style_attribute(css: str) -> List[tuple]:
    """``"font-weight: bold; top: 0"`` -> [("font-weight", "'bold'"), ...]."""
    declarations = []
    for declaration in _CSS_COMMENT_RE.sub(" ", css).split(";"):
        declaration = declaration.strip()
        if not declaration:
            continue
        name, _, value = declaration.partition(":")
        declarations.append((name.strip(), f"'{value.strip()}'"))
    return declarations


class TsxGenerator(IntermediateVisitor):
    def __init__(self, buffer: TextBuffer, component_info: ComponentInfo):
        self.t = buffer
        self.component_info = component_info

    def add(self, text: str) -> None:
        self.t.emit(text)

    # ── Elements and attributes ───────────────────────────────────

    def visit_element(self, element: ElementIntermediate):
        self.add("<")
        self.add(element.tag_name)
        for attr in element.attributes:
            self.generate_attribute(attr)
        self.render_class_name(element.class_name, element.conditional_classes)
        self.render_style_attribute(element.style, element.style_bindings)

        if element.self_close:
            self.add(" /")
        self.add(">")
        if not element.self_close:
            self.visit_children(element)
            self.add(f"</{element.tag_name}>")

    def generate_attribute(self, attr: Attribute) -> None:
        self.add(" ")
        if isinstance(attr.value, EventValue):
            self.add(self.generate_event_attribute(attr))
            return

        property_name = html_attribute_name_to_dom_name(attr.name)
        kind, value = self.generate_attribute_value(property_name, attr.value)
        if property_name.lower() == "innerhtml":
            self.add(f"dangerouslySetInnerHTML={{{{__html: {value} }}}}")
        elif kind == "string":
            self.add(f"{property_name}={value}")
        else:
            self.add(f"{property_name}={{{value}}}")

    def generate_attribute_value(self, property_name: str, value: AttributeValue) -> tuple:
        """Return ("string" | "expression", source)."""
        if isinstance(value, StringValue):
            if property_name in NON_STRING_ATTRIBUTES:
                return "expression", value.expression
            escaped = value.expression.replace("'", "&apos;")
            return "string", f"'{escaped}'"
        if isinstance(value, ExpressionValue):
            return "expression", self.generate_template_expression(value.expression)
        if isinstance(value, InterpolationValue):
            parts = []
            for literal, expr in zip(value.strings, value.expressions):
                parts.append(literal)
                parts.append("${" + self.generate_template_expression(expr) + "}")
            parts.append(value.strings[-1])
            return "expression", "`" + "".join(parts) + "`"
        raise TypeError(f"Unexpected attribute value {value!r}")

    def generate_event_attribute(self, output: Attribute) -> str:
        event_name = EVENT_NAME_MAP.get(output.name, output.name)
        handler = output.value.expression
        if _EVENT_REF_RE.search(handler):
            return f"{event_name}={{($event)=>{handler}}}"
        return f"{event_name}={{()=>{handler}}}"

    def render_class_name(self, class_name: str, conditional_classes: List[ConditionalClass]) -> None:
        if conditional_classes:
            # inside a JS string literal, not a JSX attribute string
            literal = class_name.replace("\\", "\\\\").replace("'", "\\'")
            expression = f"'{literal}'"
            for conditional in conditional_classes:
                condition = self.generate_template_expression(conditional.condition)
                expression += f" + ({condition} ? ' {conditional.class_name}' : '')"
            self.add(f" className={{{expression}}}")
        elif class_name != "":
            escaped = class_name.replace("'", "&apos;")
            self.add(f" className='{escaped}'")

    def render_style_attribute(self, style: str, style_bindings: List[StyleBinding]) -> None:
        declarations = parse_style_attribute(style)
        for binding in style_bindings:
            value = self.generate_template_expression(binding.expression)
            if binding.unit and binding.unit != "px":
                value = f"`${{{value}}}{binding.unit}`"
            declarations.append((binding.property, value))
        if not declarations:
            return
        syntax = ", ".join(f"{css_to_js_case(name)}: {value}" for name, value in declarations)
        self.add(f" style={{{{{syntax}}}}}")

    # ── Expressions ───────────────────────────────────────────────

    def transform_pipe_expression(self, pipe: PipeExpression, inner_source: str) -> str:
        policy = self.component_info.file_info.project_info.policy
        handler = policy.pipe_handler(pipe.name)
        if handler is None:
            logger.warning(f"No configuration for pipe '{pipe.name}'. Using default transformation.")
            handler = policy.default_pipe_handler
        if handler.imports:
            self.component_info.file_info.add_imports(handler.imports)
        transform = handler.transform or policy.default_pipe_handler.transform
        return transform(inner_source, pipe.name)

    def generate_template_expression(self, expr: TemplateExpr) -> str:
        """Resolve pipes and return the expression source."""
        if isinstance(expr, PipeExpression):
            inner_source = self.generate_template_expression(expr.inner)
            return self.transform_pipe_expression(expr, inner_source)
        return expr.source

    # ── Structural nodes ──────────────────────────────────────────

    def is_rooted_element(self, nodes: List[IntermediateNode]) -> bool:
        """True if the nodes are a single element or container."""
        elements = non_whitespace_nodes(nodes)
        if len(elements) != 1:
            return False
        return isinstance(elements[0], (ElementIntermediate, ContainerIntermediate))

    def visit_conditional(self, conditional: Conditional):
        expr = self.generate_template_expression(conditional.condition)
        self.t.emit(f"{{ {expr} && (")
        self.t.emit_indented_line(conditional.indent + 4, "")
        self.safe_visit_children(conditional)
        self.t.emit(")} ")

    def visit_for_of(self, for_of: ForOf):
        expr = self.generate_template_expression(for_of.iterable)
        self.t.emit(f"{{({expr}).map({for_of.var_name} => (")
        self.t.emit_indented_line(for_of.indent + 4, "")
        self.safe_visit_children(for_of)
        self.t.emit("))} ")

    def visit_switch(self, switch: Switch):
        # Only expressions can be embedded in TSX, so the switch statement
        # is wrapped in a self-invoking function.
        expr = self.generate_template_expression(switch.expression)
        self.t.emit(f"{{(()=>{{ switch ({expr}) {{")
        self.visit_children(switch)
        self.t.emit_indented_line(switch.indent, "}})()} ")

    def visit_switch_case(self, switch_case: SwitchCase):
        expr = self.generate_template_expression(switch_case.condition)
        self.t.emit(f"case {expr}: return (")
        self.t.emit_indented_line(switch_case.indent + 4, "")
        self.safe_visit_children(switch_case)
        self.t.emit("); ")

    def visit_switch_default(self, switch_default: SwitchDefault):
        self.t.emit("default: return (")
        self.t.emit_indented_line(switch_default.indent + 4, "")
        self.safe_visit_children(switch_default)
        self.t.emit("); ")

    # ── Text and containers ───────────────────────────────────────

    def visit_text(self, node: TextIntermediate):
        self.t.emit(node.text)

    def visit_text_with_interpolation(self, node: TextWithInterpolations):
        for literal, expr in zip(node.strings, node.expressions):
            self.t.emit(literal)
            self.t.emit(f"{{{self.generate_template_expression(expr)}}}")
        self.t.emit(node.strings[-1])

    def safe_visit_children(self, node) -> None:
        """Visit children, wrapped in <></> unless they have a single root."""
        rooted = self.is_rooted_element(node.children)
        if not rooted:
            self.t.emit("<>")
        self.visit_children(node)
        if not rooted:
            self.t.emit("</>")

    def visit_children(self, node) -> None:
        for child in node.children:
            child.visit(self)

    def visit_container(self, node: ContainerIntermediate):
        self.safe_visit_children(node)
