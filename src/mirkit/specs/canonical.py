"""
Canonical IR types.

The canonical IR is the single normalized form consumed by both the live
renderer and the code generator: every node has a non-empty id and type,
a document path, and events in a uniform shape.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mirkit.specs.diagnostics import Diagnostic
from mirkit.specs.document import (
    DocumentMetadata,
    LogicDefinition,
    NodeDataScope,
    NodeListRender,
)


class CanonicalEvent(BaseModel):
    """
    Normalized event binding.

    Example:
        CanonicalEvent(trigger="click", action="navigate", params={"to": "/home"})
    """

    model_config = ConfigDict(frozen=True)

    trigger: str = Field(description="DOM-style trigger name (e.g. 'click')")
    action: str | None = Field(default=None, description="Action name")
    params: dict[str, Any] = Field(default_factory=dict, description="Action params")


class CanonicalNode(BaseModel):
    """A normalized component node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Node id (fallback derived from path when missing)")
    type: str = Field(description="Component type tag")
    path: str = Field(description="Document path, e.g. 'ui.root.children[0]'")
    text: Any = Field(default=None, description="Literal text or a value reference")
    style: dict[str, Any] = Field(default_factory=dict)
    props: dict[str, Any] = Field(default_factory=dict)
    events: dict[str, CanonicalEvent] = Field(default_factory=dict)
    data: NodeDataScope | None = Field(default=None)
    list_: NodeListRender | None = Field(default=None, alias="list")
    children: list["CanonicalNode"] = Field(default_factory=list)

    def walk(self) -> "list[CanonicalNode]":
        nodes = [self]
        for child in self.children:
            nodes.extend(child.walk())
        return nodes


CanonicalNode.model_rebuild()


class CanonicalIRDocument(BaseModel):
    """
    Canonical form of a whole document.

    `nodes` indexes every node by id (first occurrence wins) and is
    excluded from serialization.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    metadata: DocumentMetadata | None = None
    logic: LogicDefinition | None = None
    animation: Any = None
    root: CanonicalNode
    nodes: dict[str, CanonicalNode] = Field(default_factory=dict, exclude=True)

    def get_node(self, node_id: str) -> CanonicalNode | None:
        return self.nodes.get(node_id)


class CanonicalBuildResult(BaseModel):
    """Output of normalization: the canonical document and its diagnostics."""

    model_config = ConfigDict(frozen=True)

    document: CanonicalIRDocument
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def canonical_root(self) -> CanonicalNode:
        return self.document.root
