"""
Canonical IR builder.

Normalizes a MIR document into the canonical IR shared by the live
renderer and the code generator. Problems in the authoring input are
reported as diagnostics; normalization itself never fails.
"""

import copy
import logging
import re
from collections.abc import Mapping
from typing import Any

from mirkit.core.documents import normalize_mir_document, upgrade_document
from mirkit.specs.canonical import (
    CanonicalBuildResult,
    CanonicalEvent,
    CanonicalIRDocument,
    CanonicalNode,
)
from mirkit.specs.diagnostics import DiagnosticBag, DiagnosticSource
from mirkit.specs.document import ComponentNode, MIRDocument

logger = logging.getLogger(__name__)

ROOT_PATH = "ui.root"
DEFAULT_NODE_TYPE = "div"

MISSING_ID = "CANONICAL_NODE_MISSING_ID"
MISSING_TYPE = "CANONICAL_NODE_MISSING_TYPE"
DUPLICATE_ID = "CANONICAL_NODE_DUPLICATE_ID"
INVALID_EVENT = "CANONICAL_EVENT_INVALID"
INVALID_FIELD = "CANONICAL_NODE_FIELD_INVALID"
INVALID_DOCUMENT_FIELD = "CANONICAL_DOCUMENT_FIELD_INVALID"


def fallback_node_id(path: str) -> str:
    """Derive a stable id from a document path: 'ui.root.children[0]' -> 'ui_root_children_0_'."""
    return re.sub(r"[^a-zA-Z0-9_]", "_", path)


def normalize_event(key: str, raw: Any) -> CanonicalEvent | None:
    """
    Normalize one event entry, or return None if its shape is invalid.

    A valid entry is a mapping whose optional `trigger` and `action` are
    strings and whose optional `params` is a mapping. The trigger defaults
    to the event key.
    """
    if not isinstance(raw, Mapping):
        return None
    trigger = raw.get("trigger")
    if trigger is None:
        trigger = key
    action = raw.get("action")
    params = raw.get("params")
    if not isinstance(trigger, str) or not trigger.strip():
        return None
    if action is not None and not isinstance(action, str):
        return None
    if params is not None and not isinstance(params, Mapping):
        return None
    return CanonicalEvent(
        trigger=trigger.strip(),
        action=action or None,
        params=copy.deepcopy(dict(params or {})),
    )


class CanonicalIRBuilder:
    """Builds one canonical document, collecting diagnostics along the way."""

    def __init__(self) -> None:
        self.diagnostics = DiagnosticBag()

    def build(self, document: MIRDocument) -> CanonicalIRDocument:
        for segments, _ in document.malformed_fields():
            path = ".".join(segments)
            self.diagnostics.emit(
                INVALID_DOCUMENT_FIELD,
                f"Document field '{path}' has an invalid shape and was ignored.",
                source=DiagnosticSource.CANONICAL_IR,
                path=path,
            )
        root = self._build_node(document.ui.root, ROOT_PATH)
        return CanonicalIRDocument(
            version=document.version,
            metadata=document.metadata,
            logic=document.logic,
            animation=copy.deepcopy(document.animation),
            root=root,
            nodes=self._index(root),
        )

    def _index(self, root: CanonicalNode) -> dict[str, CanonicalNode]:
        nodes: dict[str, CanonicalNode] = {}
        for node in root.walk():
            if node.id in nodes:
                self.diagnostics.emit(
                    DUPLICATE_ID,
                    f"Duplicate node id '{node.id}'; lookups resolve to the first occurrence.",
                    source=DiagnosticSource.CANONICAL_IR,
                    path=node.path,
                )
                continue
            nodes[node.id] = node
        return nodes

    def _build_node(self, node: ComponentNode, path: str) -> CanonicalNode:
        node_id = node.id.strip()
        if not node_id:
            node_id = fallback_node_id(path)
            self.diagnostics.emit(
                MISSING_ID,
                "Node is missing an id; a fallback id was generated.",
                source=DiagnosticSource.CANONICAL_IR,
                path=path,
                suggestion="Assign a stable id to this node.",
            )
        node_type = node.type.strip()
        if not node_type:
            node_type = DEFAULT_NODE_TYPE
            self.diagnostics.emit(
                MISSING_TYPE,
                f"Node is missing a type; defaulted to '{DEFAULT_NODE_TYPE}'.",
                source=DiagnosticSource.CANONICAL_IR,
                path=path,
                suggestion="Set a component type for this node.",
            )
        for field_name in node.invalid_fields:
            self.diagnostics.emit(
                INVALID_FIELD,
                f"Node field '{field_name}' has an invalid shape and was ignored.",
                source=DiagnosticSource.CANONICAL_IR,
                path=f"{path}.{field_name}",
            )

        events: dict[str, CanonicalEvent] = {}
        for key, raw in node.events.items():
            event = normalize_event(key, raw)
            if event is None:
                self.diagnostics.emit(
                    INVALID_EVENT,
                    f"Event '{key}' does not have the shape {{trigger, action?, params?}}; dropped.",
                    source=DiagnosticSource.CANONICAL_IR,
                    path=f"{path}.events.{key}",
                )
                continue
            events[key] = event

        children = [
            self._build_node(child, f"{path}.children[{i}]")
            for i, child in enumerate(node.children)
        ]
        return CanonicalNode(
            id=node_id,
            type=node_type,
            path=path,
            text=copy.deepcopy(node.text),
            style=copy.deepcopy(node.style),
            props=copy.deepcopy(node.props),
            events=events,
            data=node.data.model_copy(deep=True) if node.data else None,
            list=node.list_.model_copy(deep=True) if node.list_ else None,
            children=children,
        )


def build_canonical_ir(document: MIRDocument) -> CanonicalBuildResult:
    builder = CanonicalIRBuilder()
    canonical = builder.build(document)
    logger.debug(
        "Built canonical IR: %d nodes, %d diagnostics",
        len(canonical.nodes),
        len(builder.diagnostics),
    )
    return CanonicalBuildResult(document=canonical, diagnostics=builder.diagnostics.to_list())


def normalize(document: MIRDocument | Mapping[str, Any]) -> CanonicalBuildResult:
    """
    Normalize a document (model or raw mapping) into canonical IR.

    Example:
        result = normalize({"version": "1.2", "ui": {"root": {"type": "MdrDiv"}}})
        result.canonical_root.id   # "ui_root"
        result.diagnostics[0].code # "CANONICAL_NODE_MISSING_ID"
    """
    return build_canonical_ir(upgrade_document(normalize_mir_document(document)))
