"""Component file transformation: source rewriter and import resolver.

Public API:
    transform_component_file(source_text, file_name, project_info) → str
"""

from .imports import add_imports, import_lines
from .rewriter import FileTransformer, multiline_if_long, transform_component_file

__all__ = [
    "FileTransformer",
    "add_imports",
    "import_lines",
    "multiline_if_long",
    "transform_component_file",
]
