"""Exception taxonomy for the component transformation engine.

Every error aborts the transformation of the current file. The project
migrator catches ``Ng2ReactError`` per file and records it; nothing is
retried.
"""

from dataclasses import dataclass
from typing import List, Optional


class Ng2ReactError(Exception):
    """Base exception for all ng2react errors."""

    code: str = "NG2REACT-UNKNOWN"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigurationError(Ng2ReactError):
    """Missing or malformed declarative metadata or configuration."""

    code = "NG2REACT-CONFIG"


class NotSupportedError(Ng2ReactError):
    """A construct the engine deliberately does not translate."""

    code = "NG2REACT-UNSUPPORTED"


class BindingTypeError(Ng2ReactError):
    """A template binding of an unrecognized category."""

    code = "NG2REACT-BINDING"


@dataclass
class TemplateDiagnostic:
    """A single markup problem found while parsing a template."""

    message: str
    line: int  # 0-based, like the source spans
    column: int
    file_path: str = ""

    def __str__(self) -> str:
        location = f"{self.file_path}@" if self.file_path else ""
        return f"{self.message} ({location}{self.line}:{self.column})"


class ParseError(Ng2ReactError):
    """Template markup failed to parse. Carries every diagnostic found."""

    code = "NG2REACT-PARSE"

    def __init__(self, errors: List[TemplateDiagnostic], file_path: str = ""):
        self.errors = list(errors)
        summary = "; ".join(str(e) for e in self.errors) or "unknown error"
        where = f" in {file_path}" if file_path else ""
        super().__init__(f"Template parse errors{where}: {summary}")
