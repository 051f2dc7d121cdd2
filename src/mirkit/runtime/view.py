"""
Live view tree.

The live renderer produces ViewElement trees: the target element for
each node with fully resolved props, style and text. Hosts turn them
into real UI; tests and the CLI inspect or serialize them.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from mirkit.specs.canonical import CanonicalEvent

FRAGMENT = "Fragment"


@dataclass
class ViewElement:
    """
    One rendered element.

    `node_id` is None for synthetic elements (list item fragments, route
    empty text). `events` holds the node's declared events; they are
    dispatched through the renderer rather than bound per element.
    """

    element: str
    node_id: str | None = None
    node_type: str | None = None
    key: Any = None
    props: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)
    text: Any = None
    events: dict[str, CanonicalEvent] = field(default_factory=dict)
    children: "list[ViewElement]" = field(default_factory=list)

    def iter(self) -> "Iterator[ViewElement]":
        yield self
        for child in self.children:
            yield from child.iter()

    def find(self, node_id: str) -> "ViewElement | None":
        for element in self.iter():
            if element.node_id == node_id:
                return element
        return None

    def find_all(self, node_id: str) -> "list[ViewElement]":
        return [element for element in self.iter() if element.node_id == node_id]

    def text_content(self) -> str:
        parts = [] if self.text is None else [str(self.text)]
        parts.extend(child.text_content() for child in self.children)
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"element": self.element}
        if self.node_id is not None:
            data["nodeId"] = self.node_id
        if self.key is not None:
            data["key"] = self.key
        if self.props:
            data["props"] = {k: v for k, v in self.props.items() if not callable(v)}
        if self.style:
            data["style"] = self.style
        if self.text is not None:
            data["text"] = self.text
        if self.events:
            data["events"] = {
                key: event.model_dump(exclude_none=True) for key, event in self.events.items()
            }
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data
