"""
Document loading and normalization.

Turns arbitrary JSON-like input into a MIRDocument at the latest schema
version. Input without a usable ui.root degrades to the default document;
workspace snapshots are unwrapped to their canonical page.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mirkit.core.errors import DocumentError, ErrorContext
from mirkit.specs.document import LATEST_MIR_VERSION, MIRDocument

logger = logging.getLogger(__name__)

WORKSPACE_PAGE_TYPE = "mir-page"


def create_default_document() -> MIRDocument:
    return MIRDocument.model_validate(
        {
            "version": LATEST_MIR_VERSION,
            "ui": {"root": {"id": "root", "type": "container"}},
        }
    )


def has_ui_root(source: Any) -> bool:
    if not isinstance(source, Mapping):
        return False
    ui = source.get("ui")
    return isinstance(ui, Mapping) and isinstance(ui.get("root"), Mapping)


def normalize_mir_document(source: Any) -> MIRDocument:
    """Parse a document, falling back to the default when ui.root is unusable."""
    if isinstance(source, MIRDocument):
        return source
    if not has_ui_root(source):
        logger.debug("Input has no ui.root mapping; using default document")
        return create_default_document()
    return MIRDocument.model_validate(source)


# =============================================================================
# Schema Upgrade
# =============================================================================


def _version_tuple(version: str) -> tuple[int, ...]:
    parts = []
    for part in version.strip().split("."):
        if not part.isdigit():
            return ()
        parts.append(int(part))
    return tuple(parts)


def _upgrade_events(events: dict[str, Any]) -> dict[str, Any] | None:
    """Rewrite legacy `{target: ...}` bindings; None when nothing changed."""
    changed = False
    upgraded: dict[str, Any] = {}
    for key, event in events.items():
        if isinstance(event, Mapping) and "target" in event and "action" not in event:
            event = {k: v for k, v in event.items() if k != "target"} | {
                "action": event["target"]
            }
            changed = True
        upgraded[key] = event
    return upgraded if changed else None


def upgrade_document(document: MIRDocument) -> MIRDocument:
    """
    Upgrade a document to LATEST_MIR_VERSION.

    Documents older than 1.2 (or with unparseable versions) have legacy
    event bindings `{target: ...}` rewritten to `{action: ...}`. The input
    document is left untouched.
    """
    version = _version_tuple(document.version)
    if version and version >= _version_tuple(LATEST_MIR_VERSION):
        return document
    upgraded = document.model_copy(deep=True)
    for node in upgraded.ui.root.walk():
        events = _upgrade_events(node.events)
        if events is not None:
            node.events = events
    upgraded.version = LATEST_MIR_VERSION
    logger.debug("Upgraded document from version %s to %s", document.version, LATEST_MIR_VERSION)
    return upgraded


# =============================================================================
# Workspace Snapshots
# =============================================================================


def resolve_canonical_workspace_document_id(documents: list[Mapping[str, Any]]) -> str | None:
    """Pick the root page, else the first page, else the first document."""
    if not documents:
        return None
    for document in documents:
        path = str(document.get("path") or "").strip()
        if document.get("type") == WORKSPACE_PAGE_TYPE and path in ("", "/"):
            if document.get("id"):
                return document["id"]
    for document in documents:
        if document.get("type") == WORKSPACE_PAGE_TYPE and document.get("id"):
            return document["id"]
    return documents[0].get("id")


def resolve_mir_document(source: Any) -> MIRDocument:
    """Accept a MIR document or a workspace snapshot and return an upgraded document."""
    if has_ui_root(source) or isinstance(source, MIRDocument):
        return upgrade_document(normalize_mir_document(source))
    if isinstance(source, Mapping) and isinstance(source.get("documents"), list):
        documents = [d for d in source["documents"] if isinstance(d, Mapping)]
        active_id = resolve_canonical_workspace_document_id(documents)
        for document in documents:
            if active_id is not None and document.get("id") == active_id:
                logger.debug("Resolved workspace document %s", active_id)
                return upgrade_document(normalize_mir_document(document.get("content")))
    return upgrade_document(normalize_mir_document(source))


def load_document(path: Path) -> MIRDocument:
    """
    Load a document or workspace snapshot from a JSON file.

    Raises:
        DocumentError: If the file cannot be read or is not JSON
    """
    try:
        source = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise DocumentError(f"Cannot read document: {e}", ErrorContext(source=str(path))) from e
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON: {e}", ErrorContext(source=str(path))) from e
    if not isinstance(source, Mapping):
        raise DocumentError("Document must be a JSON object", ErrorContext(source=str(path)))
    return resolve_mir_document(source)
