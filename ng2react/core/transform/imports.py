"""Import resolver.

Once a file has been transformed, everything it needs is known: React,
the components referenced from its templates, its style files and the
modules required by pipe and injection handlers.
"""

import logging
import os
from typing import Dict, List

from ..components.models import FileInfo
from ..text import TextBuffer

logger = logging.getLogger(__name__)


def to_unix_path(path: str) -> str:
    return path.replace("\\", "/")


def to_import_path(path: str) -> str:
    """``../shared/pipes.ts`` -> ``../shared/pipes``; ``pipes.ts`` -> ``./pipes``."""
    stem, _ = os.path.splitext(path)
    stem = to_unix_path(stem)
    if not stem.startswith("."):
        stem = "./" + stem
    return stem


def relative_path(from_dir: str, target: str) -> str:
    return os.path.relpath(target, from_dir or ".")


def import_lines(file_info: FileInfo) -> List[str]:
    """The import statements of a transformed file, in output order."""
    lines = ["import React from 'react';"]
    directory = file_info.directory

    by_file: Dict[str, List[str]] = {}
    for component in file_info.components_referenced.values():
        if component.file == file_info.file_name:
            continue
        names = by_file.setdefault(component.file, [])
        if component.name not in names:
            names.append(component.name)
    for origin, names in by_file.items():
        rel = relative_path(directory, origin)
        lines.append(f"import {{{', '.join(names)}}} from '{to_import_path(rel)}';")

    # style urls are already relative to the component
    for style_url in file_info.css_files_referenced:
        lines.append(f"import '{style_url}';")

    # additional imports are relative to the project src root
    src_root = file_info.project_info.src_root
    for module, names in file_info.additional_imports.items():
        rel = relative_path(directory, os.path.join(src_root, module))
        lines.append(f"import {{{', '.join(names)}}} from '{to_import_path(rel)}';")
    return lines


def add_imports(file_info: FileInfo, out: TextBuffer) -> None:
    """Prepend the import statements of ``file_info`` to ``out``."""
    lines = import_lines(file_info)
    logger.debug(f"Adding {len(lines)} imports to {file_info.file_name}")
    out.prepend("".join(line + "\n" for line in lines))
