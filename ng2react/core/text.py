"""Output buffer and casing helpers used by the code generators."""

from typing import List


class TextBuffer:
    """Append-only text accumulator with line and indentation helpers."""

    def __init__(self):
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def emit(self, text: str) -> None:
        self._parts.append(text)

    def prepend(self, text: str) -> None:
        self._parts.insert(0, text)

    def emit_line(self, text: str = "") -> None:
        """Start a new line, then write ``text``."""
        self._parts.append("\n")
        self._parts.append(text)

    def emit_indented(self, indent: int, text: str) -> None:
        self._parts.append(" " * indent + text)

    def emit_indented_line(self, indent: int, text: str) -> None:
        self._parts.append("\n")
        self.emit_indented(indent, text)


def capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def kebab_to_camel_case(name: str) -> str:
    parts = name.split("-")
    return parts[0] + "".join(capitalize(part) for part in parts[1:])


def offset_to_line_col(text: str, offset: int) -> tuple:
    """Return the 0-based (line, column) of ``offset`` in ``text``."""
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start
