"""Pipe and injection policy registry.

Pipes and constructor injections have no generic translation, so each
one is looked up here by name. Handlers come from ``defaults.yaml``, an
optional user policy file merged over it, or Python callables registered
directly.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Any, Callable, Dict, List, Optional

import yaml

from ..components.models import Import
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

PipeTransform = Callable[[str, str], str]
InjectionTransform = Callable[..., str]


def default_pipe_transform(inner: str, name: str) -> str:
    return f"{name}({inner})"


def default_injection_transform(name: str, type_name: str, node=None) -> str:
    return f"const {name} = React.useContext({type_name});"


@dataclass
class PipeHandler:
    """``transform(inner, name)``; None falls back to the default call form."""

    transform: Optional[PipeTransform] = None
    imports: List[Import] = field(default_factory=list)


@dataclass
class InjectionHandler:
    """``transform(name, type_name, node)`` returns one statement."""

    transform: InjectionTransform = default_injection_transform
    imports: List[Import] = field(default_factory=list)


class PolicyRegistry:
    """Name-keyed pipe and injection handlers."""

    def __init__(self):
        self._pipes: Dict[str, PipeHandler] = {}
        self._injections: Dict[str, InjectionHandler] = {}
        self.default_pipe_handler = PipeHandler(default_pipe_transform)
        self.default_injection_handler = InjectionHandler(default_injection_transform)

    def register_pipe(self, name: str, handler: PipeHandler) -> None:
        self._pipes[name] = handler
        logger.debug(f"Registered pipe handler: {name}")

    def register_injection(self, type_name: str, handler: InjectionHandler) -> None:
        self._injections[type_name] = handler
        logger.debug(f"Registered injection handler: {type_name}")

    def pipe_handler(self, name: str) -> Optional[PipeHandler]:
        return self._pipes.get(name)

    def injection_handler(self, type_name: str) -> Optional[InjectionHandler]:
        return self._injections.get(type_name)

    @property
    def pipe_names(self) -> List[str]:
        return list(self._pipes)

    @property
    def injection_names(self) -> List[str]:
        return list(self._injections)

    def update(self, data: Dict[str, Any], source: str = "<policy>") -> None:
        """Merge a parsed policy document into the registry.

        Args:
            data: Mapping with optional ``pipes`` and ``injections`` sections.
            source: Where the data came from, for error messages.
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"{source}: policy must be a mapping")
        for name, entry in _section(data, "pipes", source).items():
            self.register_pipe(str(name), _pipe_handler_from_entry(entry, f"{source}: pipes.{name}"))
        for type_name, entry in _section(data, "injections", source).items():
            self.register_injection(
                str(type_name),
                _injection_handler_from_entry(entry, f"{source}: injections.{type_name}"),
            )


# ---------------------------------------------------------------------------
# YAML entries
# ---------------------------------------------------------------------------


def _section(data: Dict[str, Any], key: str, source: str) -> Dict[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"{source}: '{key}' must be a mapping")
    return section


def _imports_from_entry(entry: Dict[str, Any], where: str) -> List[Import]:
    imports = []
    for item in entry.get("imports") or []:
        if not isinstance(item, dict) or "file" not in item:
            raise ConfigurationError(f"{where}: each import needs 'names' and 'file'")
        names = item.get("names") or []
        if isinstance(names, str):
            names = [names]
        imports.append(Import(names=[str(n) for n in names], file=str(item["file"])))
    return imports


def _template(entry: Dict[str, Any], where: str) -> Optional[Template]:
    text = entry.get("template")
    if text is None:
        return None
    if not isinstance(text, str):
        raise ConfigurationError(f"{where}: 'template' must be a string")
    return Template(text)


def _pipe_handler_from_entry(entry: Any, where: str) -> PipeHandler:
    entry = entry or {}
    if not isinstance(entry, dict):
        raise ConfigurationError(f"{where}: expected a mapping")
    template = _template(entry, where)
    if template is None:
        return PipeHandler(None, _imports_from_entry(entry, where))

    def transform(inner: str, name: str) -> str:
        return template.safe_substitute(inner=inner, name=name)

    return PipeHandler(transform, _imports_from_entry(entry, where))


def _injection_handler_from_entry(entry: Any, where: str) -> InjectionHandler:
    entry = entry or {}
    if not isinstance(entry, dict):
        raise ConfigurationError(f"{where}: expected a mapping")
    template = _template(entry, where)
    if template is None:
        return InjectionHandler(default_injection_transform, _imports_from_entry(entry, where))

    def transform(name: str, type_name: str, node=None) -> str:
        return template.safe_substitute(name=name, type=type_name)

    return InjectionHandler(transform, _imports_from_entry(entry, where))


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read policy file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed policy file {path}: {e}") from e


def load_policy(path: Optional[str] = None) -> PolicyRegistry:
    """Build a registry from the built-in defaults and an optional user file.

    Entries in the user file replace built-in entries of the same name.
    """
    registry = PolicyRegistry()
    registry.update(_load_yaml(DEFAULTS_PATH), str(DEFAULTS_PATH.name))
    if path:
        registry.update(_load_yaml(Path(path)), str(path))
        logger.info(f"Loaded policy overrides from {path}")
    return registry
