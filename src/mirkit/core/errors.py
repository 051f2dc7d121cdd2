"""
Error types for MIR document loading, configuration, and icon providers.

Authoring problems inside a document are reported as diagnostics or
validation issues, never raised. These exceptions cover the boundaries:
input that cannot be read as a document at all, bad configuration, and
icon providers that fail to load.
"""

from dataclasses import dataclass
from typing import Optional


class MirError(Exception):
    """Base exception for all mirkit errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class DocumentError(MirError):
    """
    Raised when input cannot be interpreted as a MIR document.

    Examples:
    - JSON that fails to parse
    - Top-level value that is not an object
    - File that cannot be read

    An object without a usable ui.root is not an error; it loads as the
    default document.
    """

    pass


class ConfigError(MirError):
    """
    Raised when mirkit configuration is invalid.

    Examples:
    - Malformed TOML
    - Unknown dependency strategy or render mode
    """

    pass


class IconProviderError(MirError):
    """
    Raised when an icon provider cannot be made ready.

    Examples:
    - Provider id was never registered
    - Provider loader raised
    """

    pass


class ExportError(MirError):
    """
    Raised when a generated bundle cannot be written.

    Examples:
    - Output path exists and is a file
    - Bundle file path escapes the output directory
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of an error.

    Attributes:
        source: File or other origin of the input
        path: Document path (e.g. 'ui.root.children[0]')
        node_id: Node id when the error concerns a single node
    """

    source: str | None = None
    path: str | None = None
    node_id: str | None = None

    def format(self) -> str:
        parts = []
        if self.source:
            parts.append(self.source)
        if self.path:
            parts.append(f"at {self.path}")
        if self.node_id:
            parts.append(f"(node {self.node_id})")
        return " ".join(parts)

