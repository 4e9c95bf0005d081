"""Component data models.

Pure data containers shared by the scanner, the member classifier, the
template compiler and the source rewriter. No parsing logic lives here.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, TYPE_CHECKING

import tree_sitter

if TYPE_CHECKING:
    from ..policy import PolicyRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentRecord:
    """A component found by the project scan. Identity is the selector."""

    selector: str  # "app-hero-list"
    name: str  # exported class name, "HeroListComponent"
    file: str  # origin file path


@dataclass
class Import:
    """Names to import from a module path relative to the project src root."""

    names: List[str]
    file: str


@dataclass
class ComponentMetadata:
    """Statically evaluated ``@Component({...})`` argument."""

    selector: Optional[str] = None
    template: Optional[str] = None
    template_url: Optional[str] = None
    style_urls: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_static(cls, value: Any) -> "ComponentMetadata":
        if not isinstance(value, dict):
            return cls()
        return cls(
            selector=_as_str(value.get("selector")),
            template=_as_str(value.get("template")),
            template_url=_as_str(value.get("templateUrl")),
            style_urls=_as_str_list(value.get("styleUrls")),
            styles=_as_str_list(value.get("styles")),
            raw=value,
        )


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


def read_template_file(path: str) -> str:
    """Default template source provider: read a UTF-8 file from disk."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


class ProjectInfo:
    """Read-only project context: selector registry, policy, template source."""

    def __init__(
        self,
        src_root: str = "",
        component_map: Optional[Dict[str, ComponentRecord]] = None,
        policy: Optional["PolicyRegistry"] = None,
        template_loader: Optional[Callable[[str], str]] = None,
    ):
        if policy is None:
            from ..policy import load_policy
            policy = load_policy()
        self.src_root = src_root
        self.component_map: Dict[str, ComponentRecord] = dict(component_map or {})
        self.policy = policy
        self.template_loader = template_loader or read_template_file

    def matches_component_selector(self, tag_name: str) -> Optional[ComponentRecord]:
        """Look a tag up in the registry. Only tag-name selectors are supported."""
        return self.component_map.get(tag_name)


class FileInfo:
    """Per-file accumulator of everything the import resolver needs."""

    def __init__(self, file_name: str, project_info: ProjectInfo):
        self.file_name = file_name
        self.project_info = project_info
        self.components_referenced: Dict[str, ComponentRecord] = {}
        # dicts used as ordered sets
        self.css_files_referenced: Dict[str, None] = {}
        self.additional_imports: Dict[str, Dict[str, None]] = {}

    def add_component(self, component: ComponentRecord) -> None:
        self.components_referenced[component.name] = component

    def add_css_file(self, path: str) -> None:
        self.css_files_referenced[path] = None

    def add_import(self, imp: Import) -> None:
        names = self.additional_imports.setdefault(imp.file, {})
        for name in imp.names:
            names[name] = None

    def add_imports(self, imports: List[Import]) -> None:
        for imp in imports:
            self.add_import(imp)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.file_name)


@dataclass
class MemberDeclaration:
    """One classified class member."""

    name: str
    type: str
    node: tree_sitter.Node
    initializer: Optional[tree_sitter.Node] = None
    getter_inline: Optional[str] = None  # "expression" | "closure" for getters


class ComponentMembers:
    """The Component Member Model: props, state and constants of one class.

    The generated state value/updater names are ``state``/``setState``
    prefixed with ``$`` until they collide with no member name.
    """

    def __init__(
        self,
        props: List[MemberDeclaration],
        state: List[MemberDeclaration],
        constants: List[MemberDeclaration],
        ctor: Optional[tree_sitter.Node] = None,
        ng_on_init: Optional[tree_sitter.Node] = None,
        ng_on_destroy: Optional[tree_sitter.Node] = None,
        other_names: Optional[List[str]] = None,
        input_accessors: Optional[Set[str]] = None,
    ):
        self.props = props
        self.state = state
        self.constants = constants
        self.ctor = ctor
        self.ng_on_init = ng_on_init
        self.ng_on_destroy = ng_on_destroy
        # get/set pairs that form one input prop
        self.input_accessors = set(input_accessors or ())
        self.prop_names = [p.name for p in props]
        self.state_names = [s.name for s in state]
        self.names = self.prop_names + self.state_names + [c.name for c in constants]
        taken = set(self.names) | set(other_names or [])
        self.state_name = _safe_name("state", taken)
        self.set_state_name = _safe_name("setState", taken)

    def is_prop(self, node: tree_sitter.Node) -> bool:
        return any(_same_node(p.node, node) for p in self.props)

    def is_state(self, node: tree_sitter.Node) -> bool:
        return any(_same_node(s.node, node) for s in self.state)

    def constant_for(self, node: tree_sitter.Node) -> Optional[MemberDeclaration]:
        return next((c for c in self.constants if _same_node(c.node, node)), None)


def _safe_name(name: str, taken) -> str:
    while name in taken:
        name = "$" + name
    return name


def _same_node(a: tree_sitter.Node, b: tree_sitter.Node) -> bool:
    return (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


@dataclass
class ComponentInfo:
    """Everything known about the component being transformed."""

    file_info: FileInfo
    metadata: ComponentMetadata
    members: Optional[ComponentMembers] = None
