"""
Adapter protocol.

An adapter maps a canonical node to the element that renders it in one
target (a React component name or HTML tag) plus the imports that element
needs. Returning None means "not mine": resolution moves on to the next
adapter.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from mirkit.specs.canonical import CanonicalNode
from mirkit.specs.diagnostics import Diagnostic


class ImportKind(str, Enum):
    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"


class ImportSpec(BaseModel):
    """
    A single import a resolved element needs.

    Example:
        ImportSpec(kind=ImportKind.NAMED, source="antd", imported="Button")
        ImportSpec(kind=ImportKind.NAMESPACE, source="@radix-ui/react-label", local="Label")
    """

    model_config = ConfigDict(frozen=True)

    kind: ImportKind
    source: str = Field(description="Module specifier")
    imported: str | None = Field(default=None, description="Exported name (named imports)")
    local: str | None = Field(default=None, description="Local binding name")

    @property
    def local_name(self) -> str:
        return self.local or self.imported or ""

    @property
    def dedupe_key(self) -> tuple[str, str, str, str]:
        return (self.kind.value, self.source, self.imported or "", self.local or "")


class AdapterResolution(BaseModel):
    """Element chosen for a node, with its imports and any diagnostics."""

    model_config = ConfigDict(frozen=True)

    element: str = Field(description="Component name or HTML tag")
    imports: list[ImportSpec] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    omit_props: tuple[str, ...] = Field(
        default=(), description="Props the element consumes and must not receive"
    )
    adapter_id: str | None = Field(default=None, description="Adapter that produced it")
    fallback: bool = Field(default=False, description="True for the generic passthrough element")


@runtime_checkable
class TargetAdapter(Protocol):
    """Anything with an id and a resolve_node method is an adapter."""

    id: str

    def resolve_node(self, node: CanonicalNode) -> AdapterResolution | None: ...


# HTML elements that never have children
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


def is_html_tag(node_type: str) -> bool:
    return bool(node_type) and node_type[0].islower() and node_type.replace("-", "").isalnum()
