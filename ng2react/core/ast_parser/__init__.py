"""ng2react TypeScript syntax layer: tree-sitter based parsing.

Public API:
    parse_typescript(source, file_name) → SourceFile
    find_component(node, source) → ComponentDeclaration | None
    parse_static(node, source) → dict | list | str | None
"""

from .static import parse_static, string_value
from .typescript_parser import (
    ComponentDeclaration,
    SourceFile,
    SourceTreeHelper,
    find_component,
    parse_typescript,
)

__all__ = [
    "ComponentDeclaration",
    "SourceFile",
    "SourceTreeHelper",
    "find_component",
    "parse_static",
    "parse_typescript",
    "string_value",
]
