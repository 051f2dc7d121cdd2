"""
Core document processing: canonicalization, reference resolution,
data scopes and lists, route matching, validation.
"""

from mirkit.core.canonical_ir import build_canonical_ir, normalize
from mirkit.core.documents import (
    create_default_document,
    load_document,
    normalize_mir_document,
    resolve_mir_document,
    upgrade_document,
)
from mirkit.core.errors import (
    ConfigError,
    DocumentError,
    ExportError,
    IconProviderError,
    MirError,
)
from mirkit.core.resolver import ValueRefContext, read_value_by_path, resolve_deep, resolve_one
from mirkit.core.routing import match_route_manifest, select_route_child
from mirkit.core.scope import plan_list, resolve_data_scope
from mirkit.core.validator import ValidationIssue, ValidationResult, validate_mir_document

__all__ = [
    "normalize",
    "build_canonical_ir",
    "create_default_document",
    "load_document",
    "normalize_mir_document",
    "resolve_mir_document",
    "upgrade_document",
    "MirError",
    "DocumentError",
    "ConfigError",
    "ExportError",
    "IconProviderError",
    "ValueRefContext",
    "read_value_by_path",
    "resolve_one",
    "resolve_deep",
    "match_route_manifest",
    "select_route_child",
    "resolve_data_scope",
    "plan_list",
    "ValidationIssue",
    "ValidationResult",
    "validate_mir_document",
]
