"""Component scanning: the first pass over every source file.

Finds classes decorated with ``@Component`` and records their selector,
class name and origin file for the project-wide selector registry.
"""

import logging
from typing import List

import tree_sitter

from ..ast_parser import ComponentDeclaration, SourceFile, find_component, parse_static
from ..errors import ConfigurationError
from .models import ComponentMetadata, ComponentRecord

logger = logging.getLogger(__name__)


def resolve_metadata(component: ComponentDeclaration, source: bytes, file_name: str = "") -> ComponentMetadata:
    """Evaluate the decorator argument of a component class.

    Raises:
        ConfigurationError: If the decorator has no object argument or no
            string selector.
    """
    name = component.name or "<anonymous>"
    if component.argument is None or component.argument.type != "object":
        raise ConfigurationError(
            f"@Component on {name} in {file_name or '<source>'} has no object literal argument"
        )
    metadata = ComponentMetadata.from_static(parse_static(component.argument, source))
    if not metadata.selector:
        raise ConfigurationError(
            f"@Component on {name} in {file_name or '<source>'} has no resolvable selector"
        )
    return metadata


def iter_components(source_file: SourceFile) -> List[ComponentDeclaration]:
    """All component classes of a file, in source order."""
    found: List[ComponentDeclaration] = []

    def scan(node: tree_sitter.Node) -> None:
        comp = find_component(node, source_file.source)
        if comp is not None:
            found.append(comp)
            return
        for child in node.children:
            scan(child)

    scan(source_file.root)
    return found


def find_components(source_file: SourceFile) -> List[ComponentRecord]:
    """Scan a source file for components.

    Returns:
        One ComponentRecord per ``@Component`` class.
    """
    records: List[ComponentRecord] = []
    for comp in iter_components(source_file):
        metadata = resolve_metadata(comp, source_file.source, source_file.file_name)
        if not comp.name:
            raise ConfigurationError(
                f"Component '{metadata.selector}' in {source_file.file_name} has no class name"
            )
        records.append(ComponentRecord(metadata.selector, comp.name, source_file.file_name))
        logger.debug(f"Found component {comp.name} <{metadata.selector}> in {source_file.file_name}")
    return records
