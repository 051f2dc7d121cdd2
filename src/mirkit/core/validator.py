"""
MIR document validator.

Authoring-time checks layered on top of canonicalization. The validator
reports contract violations that rendering tolerates (blank ids, bad
scope or list declarations, dangling empty-node references) as issues
addressed by JSON-pointer style paths such as `/ui/root/children/0/data/pick`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mirkit.core.canonical_ir import normalize
from mirkit.core.documents import has_ui_root, normalize_mir_document, upgrade_document
from mirkit.core.scope import is_scope_source
from mirkit.specs.diagnostics import Diagnostic, DiagnosticSeverity
from mirkit.specs.document import ComponentNode, MIRDocument
from mirkit.specs.refs import reference_tags_in

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$-]*$")

DOCUMENT_ROOT_MISSING = "MIR_DOCUMENT_ROOT_MISSING"
NODE_ID_REQUIRED = "MIR_NODE_ID_REQUIRED"
NODE_TYPE_REQUIRED = "MIR_NODE_TYPE_REQUIRED"
NODE_ID_DUPLICATE = "MIR_NODE_ID_DUPLICATE"
NODE_FIELD_INVALID = "MIR_NODE_FIELD_INVALID"
DOCUMENT_FIELD_INVALID = "MIR_DOCUMENT_FIELD_INVALID"
DATA_PICK_INVALID = "MIR_DATA_PICK_INVALID"
DATA_SOURCE_INVALID = "MIR_DATA_SOURCE_INVALID"
DATA_EXTEND_INVALID = "MIR_DATA_EXTEND_INVALID"
LIST_SOURCE_INVALID = "MIR_LIST_SOURCE_INVALID"
LIST_ALIAS_INVALID = "MIR_LIST_ALIAS_INVALID"
LIST_KEYBY_INVALID = "MIR_LIST_KEYBY_INVALID"
LIST_ARRAY_FIELD_INVALID = "MIR_LIST_ARRAY_FIELD_INVALID"
LIST_EMPTY_NODE_NOT_FOUND = "MIR_LIST_EMPTY_NODE_NOT_FOUND"
VALUE_REF_AMBIGUOUS = "MIR_VALUE_REF_AMBIGUOUS"


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    path: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR


@dataclass
class ValidationResult:
    """Result of MIR document validation."""

    document: MIRDocument
    issues: list[ValidationIssue] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add_issue(self, code: str, message: str, path: str) -> None:
        self.issues.append(ValidationIssue(code=code, message=message, path=path))

    @property
    def has_error(self) -> bool:
        """True iff any issue was reported."""
        return bool(self.issues)

    def by_code(self, code: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.code == code]

    def __repr__(self) -> str:
        return f"ValidationResult(issues={len(self.issues)}, diagnostics={len(self.diagnostics)})"


def _check_ambiguous_refs(value: Any, path: str, result: ValidationResult) -> None:
    """Report mappings that carry more than one reference tag, recursively."""
    if isinstance(value, Mapping):
        tags = reference_tags_in(value)
        if len(tags) > 1:
            result.add_issue(
                VALUE_REF_AMBIGUOUS,
                f"Value carries several reference tags ({', '.join(tags)}) and is treated as a literal.",
                path,
            )
        for key, entry in value.items():
            _check_ambiguous_refs(entry, f"{path}/{key}", result)
    elif isinstance(value, list | tuple):
        for i, entry in enumerate(value):
            _check_ambiguous_refs(entry, f"{path}/{i}", result)


def validate_mir_document(raw: Any) -> ValidationResult:
    """
    Validate a MIR document.

    Checks:
        - Node ids and types are non-blank, ids are unique
        - Node fields have the expected shape
        - metadata and logic fields have the expected shape
        - data.pick/source/extend and list.source/itemAs/indexAs/keyBy/arrayField
        - list.emptyNodeId names an existing node
        - No value carries more than one reference tag

    Args:
        raw: MIR document (model or raw mapping)

    Returns:
        ValidationResult with the upgraded document, issues, and the
        canonicalization diagnostics.
    """
    document = upgrade_document(normalize_mir_document(raw))
    result = ValidationResult(document=document, diagnostics=normalize(document).diagnostics)

    if not isinstance(raw, MIRDocument) and not has_ui_root(raw):
        result.add_issue(DOCUMENT_ROOT_MISSING, "Document has no ui.root object.", "/ui/root")
        return result

    for segments, _ in document.malformed_fields():
        pointer = "/" + "/".join(segments)
        result.add_issue(
            DOCUMENT_FIELD_INVALID, f"Document field '{pointer}' has an invalid shape.", pointer
        )

    all_ids = {node.id for node in document.ui.root.walk() if node.id.strip()}
    seen_ids: set[str] = set()

    def check_node(node: ComponentNode, path: str) -> None:
        node_id = node.id.strip()
        if not node_id:
            result.add_issue(NODE_ID_REQUIRED, "Node id must be a non-empty string.", f"{path}/id")
        elif node_id in seen_ids:
            result.add_issue(NODE_ID_DUPLICATE, f"Node id '{node_id}' is used more than once.", f"{path}/id")
        else:
            seen_ids.add(node_id)
        if not node.type.strip():
            result.add_issue(NODE_TYPE_REQUIRED, "Node type must be a non-empty string.", f"{path}/type")
        for field_name in node.invalid_fields:
            result.add_issue(
                NODE_FIELD_INVALID, f"Node field '{field_name}' has an invalid shape.", f"{path}/{field_name}"
            )

        if node.data is not None:
            check_data(node, f"{path}/data")
        if node.list_ is not None:
            check_list(node, f"{path}/list")

        _check_ambiguous_refs(node.text, f"{path}/text", result)
        _check_ambiguous_refs(node.props, f"{path}/props", result)
        _check_ambiguous_refs(node.style, f"{path}/style", result)
        _check_ambiguous_refs(node.events, f"{path}/events", result)

        for i, child in enumerate(node.children):
            check_node(child, f"{path}/children/{i}")

    def check_data(node: ComponentNode, path: str) -> None:
        data = node.data
        if data.pick is not None and not (isinstance(data.pick, str) and data.pick.strip()):
            result.add_issue(DATA_PICK_INVALID, "data.pick must be a non-empty string.", f"{path}/pick")
        if data.source is not None and not is_scope_source(data.source):
            result.add_issue(
                DATA_SOURCE_INVALID,
                "data.source must be a single-key value reference other than $index.",
                f"{path}/source",
            )
        if data.extend is not None and not isinstance(data.extend, Mapping):
            result.add_issue(DATA_EXTEND_INVALID, "data.extend must be an object.", f"{path}/extend")
        for key in ("source", "value", "mock", "extend"):
            _check_ambiguous_refs(getattr(data, key), f"{path}/{key}", result)

    def check_list(node: ComponentNode, path: str) -> None:
        config = node.list_
        if config.source is not None and not is_scope_source(config.source):
            result.add_issue(
                LIST_SOURCE_INVALID,
                "list.source must be a single-key value reference other than $index.",
                f"{path}/source",
            )
        for key, alias in (("itemAs", config.item_as), ("indexAs", config.index_as)):
            if alias is not None and not (isinstance(alias, str) and IDENTIFIER_PATTERN.match(alias)):
                result.add_issue(LIST_ALIAS_INVALID, f"list.{key} must be a valid identifier.", f"{path}/{key}")
        if config.key_by is not None and not isinstance(config.key_by, str):
            result.add_issue(LIST_KEYBY_INVALID, "list.keyBy must be a string.", f"{path}/keyBy")
        if config.array_field is not None and not isinstance(config.array_field, str):
            result.add_issue(
                LIST_ARRAY_FIELD_INVALID, "list.arrayField must be a string.", f"{path}/arrayField"
            )
        empty_id = config.empty_node_id
        if empty_id and (not isinstance(empty_id, str) or empty_id not in all_ids):
            result.add_issue(
                LIST_EMPTY_NODE_NOT_FOUND,
                f"list.emptyNodeId '{empty_id}' does not match any node.",
                f"{path}/emptyNodeId",
            )

    check_node(document.ui.root, "/ui/root")
    logger.debug("Validated document: %d issues", len(result.issues))
    return result
