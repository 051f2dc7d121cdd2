"""
Live rendering runtime.
"""

from mirkit.runtime.capabilities import (
    LinkCapability,
    NodeCapability,
    register_node_capability,
    resolve_link_capability,
)
from mirkit.runtime.renderer import (
    ActionContext,
    DispatchResult,
    LiveRenderer,
    RenderMode,
    RenderResult,
    render_document,
)
from mirkit.runtime.view import FRAGMENT, ViewElement

__all__ = [
    "LiveRenderer",
    "RenderMode",
    "RenderResult",
    "DispatchResult",
    "ActionContext",
    "render_document",
    "ViewElement",
    "FRAGMENT",
    "LinkCapability",
    "NodeCapability",
    "register_node_capability",
    "resolve_link_capability",
]
