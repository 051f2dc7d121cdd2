"""
Node capabilities.

Capabilities describe behaviour shared by several component types. The
only one so far is `link`: nodes that navigate on their own, whose
default navigation is suppressed while they are being selected in an
editor.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from mirkit.specs.canonical import CanonicalNode

TriggerConflictPolicy = Literal["none", "warn"]


@dataclass(frozen=True)
class LinkCapability:
    destination_prop: str
    target_prop: str | None = "target"
    rel_prop: str | None = "rel"
    title_prop: str | None = "title"
    on_click_with_destination: TriggerConflictPolicy = "warn"


@dataclass(frozen=True)
class NodeCapability:
    key: str
    match: Callable[[CanonicalNode], bool]
    link: LinkCapability | None = None


ROUTER_LINK_TYPES = frozenset({"MdrLink", "MdrButtonLink", "MdrIconLink"})

_capabilities: list[NodeCapability] = [
    NodeCapability(
        key="mdr-router-link",
        match=lambda node: node.type in ROUTER_LINK_TYPES,
        link=LinkCapability(destination_prop="to"),
    ),
    NodeCapability(
        key="native-anchor",
        match=lambda node: node.type == "a",
        link=LinkCapability(destination_prop="href"),
    ),
]


def register_node_capability(capability: NodeCapability) -> None:
    """Add a capability, replacing any existing one with the same key."""
    for i, existing in enumerate(_capabilities):
        if existing.key == capability.key:
            _capabilities[i] = capability
            return
    _capabilities.append(capability)


def resolve_node_capabilities(node: CanonicalNode | None) -> list[NodeCapability]:
    if node is None:
        return []
    return [capability for capability in _capabilities if capability.match(node)]


def resolve_link_capability(node: CanonicalNode | None) -> LinkCapability | None:
    for capability in resolve_node_capabilities(node):
        if capability.link is not None:
            return capability.link
    return None
