"""Component discovery and member classification."""

from .members import class_members, infer_type, scan_component_members
from .models import (
    ComponentInfo,
    ComponentMembers,
    ComponentMetadata,
    ComponentRecord,
    FileInfo,
    Import,
    MemberDeclaration,
    ProjectInfo,
)
from .scanner import find_components, iter_components, resolve_metadata

__all__ = [
    "ComponentInfo",
    "ComponentMembers",
    "ComponentMetadata",
    "ComponentRecord",
    "FileInfo",
    "Import",
    "MemberDeclaration",
    "ProjectInfo",
    "class_members",
    "find_components",
    "infer_type",
    "iter_components",
    "resolve_metadata",
    "scan_component_members",
]
