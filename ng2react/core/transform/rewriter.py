"""Source rewriter.

Rewrites a TypeScript file containing ``@Component`` classes into a TSX
file of React function components. Everything outside the component
classes is passed through byte-for-byte, except framework imports, which
are dropped.

Inside a component the class members are re-emitted in declaration order:

* ``this.x = v`` for a state member   -> ``setState({...state, x: v})``
* any other ``this.x``                -> ``x``
* ``<T>expr``                         -> ``((expr) as T)`` (TSX cannot parse ``<T>``)
"""

import logging
import os
from dataclasses import dataclass
from typing import List

import tree_sitter

from ..ast_parser import ComponentDeclaration, SourceFile, SourceTreeHelper, find_component, parse_typescript
from ..ast_parser.static import string_value
from ..ast_parser.typescript_parser import (
    accessor_kind,
    has_non_empty_body,
    has_token,
    is_assignment,
    is_this_member,
    member_name,
    type_annotation_text,
)
from ..components.members import ClassMember, class_members, scan_component_members
from ..components.models import ComponentInfo, ComponentMembers, FileInfo, MemberDeclaration, ProjectInfo
from ..components.scanner import resolve_metadata
from ..constants import INIT_HOOK, SOURCE_FRAMEWORK_MODULES
from ..errors import ConfigurationError, NotSupportedError
from ..templates import transform_template_to_tsx
from ..text import TextBuffer
from .imports import add_imports

logger = logging.getLogger(__name__)

# Props and state are written inline below this length, one per line above.
_SINGLE_LINE_LIMIT = 20


def transform_component_file(source_text: str, file_name: str, project_info: ProjectInfo) -> str:
    """Transform one TypeScript file into TSX text.

    A file without components is returned unchanged.
    """
    source_file = parse_typescript(source_text, file_name)
    transformer = FileTransformer(source_file, project_info)
    transformer.transform()
    if not transformer.components:
        return source_text
    add_imports(transformer.file_info, transformer.out)
    return transformer.out.text


@dataclass
class _BodyContext:
    """Rewrite context for one component."""

    members: ComponentMembers
    in_state_initializer: bool = False

    def initializer(self) -> "_BodyContext":
        return _BodyContext(self.members, True)


class FileTransformer(SourceTreeHelper):
    def __init__(self, source_file: SourceFile, project_info: ProjectInfo):
        super().__init__(source_file)
        self.project_info = project_info
        self.file_info = FileInfo(source_file.file_name, project_info)
        self.out = TextBuffer()
        self.components: List[str] = []
        self._cursor = 0

    # ── Top level ─────────────────────────────────────────────────

    def transform(self) -> None:
        self._transform_node(self.source_file.root)
        self._flush_to(len(self.source))

    def _flush_to(self, offset: int) -> None:
        if offset > self._cursor:
            self.out.emit(self.text_between(self._cursor, offset))
            self._cursor = offset

    def _transform_node(self, node: tree_sitter.Node) -> None:
        """Transform a node which is not inside a component."""
        comp = find_component(node, self.source)
        if comp is not None:
            self._flush_to(node.start_byte)
            self.transform_component_class(comp)
            self._cursor = node.end_byte
            return

        if node.type == "import_statement" and self._is_framework_import(node):
            self._flush_to(node.start_byte)
            self._cursor = node.end_byte
            if self.source[self._cursor:self._cursor + 1] == b"\n":
                self._cursor += 1
            return

        for child in node.children:
            self._transform_node(child)

    def _is_framework_import(self, node: tree_sitter.Node) -> bool:
        module = node.child_by_field_name("source")
        if module is None or module.type != "string":
            return False
        return string_value(module, self.source).startswith(SOURCE_FRAMEWORK_MODULES)

    # ── Component ─────────────────────────────────────────────────

    def transform_component_class(self, comp: ComponentDeclaration) -> None:
        """Replace a ``@Component`` class with a React function component."""
        metadata = resolve_metadata(comp, self.source, self.file_info.file_name)
        for style_url in metadata.style_urls:
            self.file_info.add_css_file(style_url)

        members = scan_component_members(comp.class_node, self.source)
        component_info = ComponentInfo(self.file_info, metadata, members)
        ctx = _BodyContext(members)
        function_name = comp.name or "Component"
        self.components.append(function_name)
        logger.debug(f"Transforming component {function_name} in {self.file_info.file_name}")

        props_param = self.generate_props_parameter(members.props, ctx)
        modifiers = " ".join(comp.modifiers)
        prefix = f"{modifiers} " if modifiers else ""

        self.out.emit_line()
        self.out.emit_line(f"{prefix}function {function_name}({props_param}) {{")
        self.out.emit_line()

        if members.ctor is not None:
            for param in _parameters(members.ctor):
                self.transform_constructor_injection(param)

        if members.state:
            self.generate_state_initializer(members, ctx)
        elif members.ctor is not None and has_non_empty_body(members.ctor.child_by_field_name("body")):
            logger.warning(
                f"{function_name}: constructor body dropped, the component has no state to initialize"
            )

        body = comp.class_node.child_by_field_name("body")
        for member in class_members(body) if body is not None else []:
            self.transform_component_member(member, ctx)

        self.out.emit_line()
        tsx = self.get_template_as_tsx(component_info)
        self.out.emit_line(f"\treturn ({tsx});")
        self.out.emit_line("}")
        self.out.emit_line()

    def get_template_as_tsx(self, component_info: ComponentInfo) -> str:
        metadata = component_info.metadata
        if metadata.template_url:
            directory = os.path.dirname(self.file_info.file_name)
            path = os.path.join(directory, metadata.template_url)
            try:
                text = self.project_info.template_loader(path)
            except OSError as e:
                raise ConfigurationError(f"Cannot read template {path}: {e}") from e
            return transform_template_to_tsx(text, path, component_info)
        if metadata.template:
            return transform_template_to_tsx(metadata.template, self.file_info.file_name, component_info)
        return ""

    def generate_props_parameter(self, props: List[MemberDeclaration], ctx: _BodyContext) -> str:
        """Props become a destructured parameter, initializers become defaults.

        ``Foo({ bar = 17, baz }: { bar?: number; baz: string })``
        """
        if not props:
            return ""
        fields = []
        types = []
        for prop in props:
            if prop.initializer is not None:
                fields.append(f"{prop.name} = {self.rewrite(prop.initializer, ctx)}")
                types.append(f"{prop.name}?: {prop.type}")
            else:
                fields.append(prop.name)
                types.append(f"{prop.name}: {prop.type}")
        fields_code = multiline_if_long(fields, ",", "\n\t\t")
        types_code = multiline_if_long(types, ";", "\n\t\t")
        return f"{{{fields_code}}}: {{{types_code}}}"

    def generate_state_initializer(self, members: ComponentMembers, ctx: _BodyContext) -> None:
        self.out.emit_line(
            f"\tconst [{members.state_name}, {members.set_state_name}] = React.useState(()=>{{"
        )
        declarations = []
        for member in members.state:
            if member.initializer is not None:
                init = self.rewrite(member.initializer, ctx)
            else:
                init = f"undefined as {member.type}"
            declarations.append(f"{member.name}: {init}")
        code = multiline_if_long(declarations, ",", "\n\t\t\t")
        self.out.emit_line(f"\t\tconst initialState = {{{code}}};")

        init_ctx = ctx.initializer()
        if members.ctor is not None:
            body = members.ctor.child_by_field_name("body")
            if has_non_empty_body(body):
                self.out.emit_line("\t\t/* inlined constructor body */\n\t")
                self.out.emit(self.rewrite(body, init_ctx))

        if members.ng_on_init is not None:
            body = members.ng_on_init.child_by_field_name("body")
            if has_non_empty_body(body):
                self.out.emit_line("\t\t/* inlined ngOnInit */\n\t")
                self.out.emit(self.rewrite(body, init_ctx))

        self.out.emit_line("\t\treturn initialState;")
        self.out.emit_line("\t});")
        self.out.emit_line()

        # local consts: readable from the template, not assignable
        names = ", ".join(members.state_names)
        self.out.emit_line(f"\tconst {{ {names} }} = {members.state_name};")

    def transform_constructor_injection(self, param: tree_sitter.Node) -> None:
        """Injected services become hooks, ``React.useContext`` by default."""
        pattern = param.child_by_field_name("pattern")
        name = self.get_source(pattern) if pattern is not None else ""
        type_name = type_annotation_text(param.child_by_field_name("type"), self.source)
        if not type_name:
            raise ConfigurationError(
                f"Constructor parameter '{name}' in {self.file_info.file_name} has no type annotation"
            )
        policy = self.project_info.policy
        handler = policy.injection_handler(type_name)
        if handler is None:
            logger.warning(f"No configuration for injection type '{type_name}'. Using React.useContext.")
            handler = policy.default_injection_handler
        code = handler.transform(name, type_name, param)
        if handler.imports:
            self.file_info.add_imports(handler.imports)
        self.out.emit_line("\t")
        self.out.emit(code)

    # ── Members ───────────────────────────────────────────────────

    def transform_component_member(self, member: ClassMember, ctx: _BodyContext) -> None:
        node = member.node
        members = ctx.members

        if node.type == "public_field_definition":
            if members.is_prop(node) or members.is_state(node):
                return
            # readonly field
            name = node.child_by_field_name("name")
            self.out.emit(self._member_trivia(member))
            self.out.emit("const ")
            self.out.emit(self._rewrite_children_from(node, name.start_byte, ctx))
            self.out.emit(";")
            return

        if node.type != "method_definition":
            raise NotSupportedError(
                f"Member not supported: {node.type} '{self.get_source(node)[:40]}'"
            )

        name = member_name(node, self.source)
        kind = accessor_kind(node)
        if kind == "get" and name in members.input_accessors:
            # the prop itself replaces the getter of an input pair
            return
        if kind == "get":
            self._transform_getter(member, name, ctx)
        elif kind == "set":
            self._transform_setter(member, name, ctx)
        elif name == "constructor":
            return
        elif name == INIT_HOOK and members.state:
            # inlined in the state initializer
            return
        else:
            if name == INIT_HOOK:
                logger.warning(f"{INIT_HOOK} kept as a plain function; the component has no state")
            self._transform_method(member, name, ctx)

    def _transform_method(self, member: ClassMember, name: str, ctx: _BodyContext) -> None:
        node = member.node
        name_node = node.child_by_field_name("name")
        keyword = "async function" if has_token(node, "async") else "function"
        if has_token(node, "*"):
            keyword += "*"
        self.out.emit(self._member_trivia(member))
        self.out.emit(f"{keyword} {name}")
        self.out.emit(self._rewrite_children_from(node, name_node.end_byte, ctx))

    def _transform_getter(self, member: ClassMember, name: str, ctx: _BodyContext) -> None:
        node = member.node
        declaration = ctx.members.constant_for(node)
        self.out.emit(self._member_trivia(member))
        self.out.emit(f"const {name}")
        if declaration is not None and declaration.getter_inline == "expression":
            self.out.emit(" = ")
            self.out.emit(self.rewrite(declaration.initializer, ctx))
            self.out.emit(";")
            return
        body = node.child_by_field_name("body")
        self.out.emit(" /* getter transformed to immediately invoked function */")
        self.out.emit(" = (() => ")
        self.out.emit(self.rewrite(body, ctx))
        self.out.emit(")();")

    def _transform_setter(self, member: ClassMember, name: str, ctx: _BodyContext) -> None:
        node = member.node
        body = node.child_by_field_name("body")
        if name in ctx.members.input_accessors:
            # input values arrive as props, so the setter body runs inline
            self.out.emit_line(f"\t/* inlined setter for {name} */ ")
            self.out.emit(self.rewrite(body, ctx))
            self.out.emit_line("\t/* inlined setter end */")
            return
        name_node = node.child_by_field_name("name")
        self.out.emit(self._member_trivia(member))
        self.out.emit(f"function set_{name}")
        self.out.emit(self._rewrite_children_from(node, name_node.end_byte, ctx))

    def _member_trivia(self, member: ClassMember) -> str:
        """Whitespace and comments before a member (and its decorators)."""
        start = member.start_byte
        prev = member.decorators[0].prev_sibling if member.decorators else member.node.prev_sibling
        while prev is not None and prev.type == "comment":
            prev = prev.prev_sibling
        trivia = self.text_between(prev.end_byte, start) if prev is not None else ""
        if "\n" not in trivia:
            # every member starts on its own line
            trivia = "\n\t" + trivia.lstrip(" \t")
        return trivia

    # ── Expressions and statements ────────────────────────────────

    def rewrite(self, node: tree_sitter.Node, ctx: _BodyContext) -> str:
        """Rewritten source text of ``node`` (without leading trivia)."""
        members = ctx.members

        if is_assignment(node):
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            if is_this_member(left) and right is not None:
                name = self.get_source(left.child_by_field_name("property"))
                if name in members.state_names:
                    operator_gap = self.text_between(left.end_byte, right.start_byte)
                    value = self.rewrite(right, ctx)
                    if ctx.in_state_initializer:
                        # setState is not available yet
                        return f"initialState.{name}{operator_gap}{value}"
                    after_eq = operator_gap.split("=", 1)[1]
                    return (
                        f"{members.set_state_name}({{...{members.state_name}, "
                        f"{name}:{after_eq}{value}}})"
                    )

        if is_this_member(node):
            name = self.get_source(node.child_by_field_name("property"))
            if ctx.in_state_initializer and name in members.state_names:
                return f"initialState.{name}"
            return name

        if node.type == "type_assertion":
            named = [c for c in node.named_children if c.type != "comment"]
            if len(named) == 2 and named[0].type == "type_arguments":
                type_args = [c for c in named[0].named_children if c.type != "comment"]
                type_text = self.get_source(type_args[0]) if type_args else "unknown"
                return f"(({self.rewrite(named[1], ctx)}) as {type_text})"

        if node.child_count == 0:
            return self.get_source(node)
        return self._rewrite_children_from(node, node.start_byte, ctx)

    def _rewrite_children_from(self, node: tree_sitter.Node, start: int, ctx: _BodyContext) -> str:
        """Rewrite ``node`` from byte ``start`` to its end, child by child."""
        parts = []
        pos = start
        for child in node.children:
            if child.start_byte < start:
                continue
            parts.append(self.text_between(pos, child.start_byte))
            parts.append(self.rewrite(child, ctx))
            pos = child.end_byte
        parts.append(self.text_between(pos, node.end_byte))
        return "".join(parts)


def _parameters(method: tree_sitter.Node) -> List[tree_sitter.Node]:
    params = method.child_by_field_name("parameters")
    if params is None:
        return []
    return [p for p in params.named_children if p.type in ("required_parameter", "optional_parameter")]


def multiline_if_long(items: List[str], sep: str, ln: str) -> str:
    """Join items inline when short, otherwise one item per line."""
    single_line = (sep + " ").join(items)
    if len(single_line) < _SINGLE_LINE_LIMIT:
        return " " + single_line + " "
    return ln + (sep + ln).join(items) + ln
