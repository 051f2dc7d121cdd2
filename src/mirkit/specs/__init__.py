"""
MIR type definitions.

This module exports the document, reference, canonical IR, diagnostic,
route and bundle types.
"""

from mirkit.specs.bundle import BundleType, ExportBundle, ExportFile
from mirkit.specs.canonical import (
    CanonicalBuildResult,
    CanonicalEvent,
    CanonicalIRDocument,
    CanonicalNode,
)
from mirkit.specs.diagnostics import (
    Diagnostic,
    DiagnosticBag,
    DiagnosticSeverity,
    DiagnosticSource,
)
from mirkit.specs.document import (
    LATEST_MIR_VERSION,
    ComponentNode,
    DocumentMetadata,
    LogicDefinition,
    MIRDocument,
    NodeDataScope,
    NodeListRender,
    PropDefinition,
    StateDefinition,
    UIDefinition,
)
from mirkit.specs.refs import (
    DataRef,
    IndexRef,
    ItemRef,
    ParamRef,
    StateRef,
    ValueRef,
    is_value_ref,
    parse_value_ref,
)
from mirkit.specs.routes import ROOT_ROUTE_ID, RouteManifest, RouteNode

__all__ = [
    # Document
    "LATEST_MIR_VERSION",
    "MIRDocument",
    "UIDefinition",
    "ComponentNode",
    "NodeDataScope",
    "NodeListRender",
    "LogicDefinition",
    "PropDefinition",
    "StateDefinition",
    "DocumentMetadata",
    # References
    "ValueRef",
    "ParamRef",
    "StateRef",
    "DataRef",
    "ItemRef",
    "IndexRef",
    "parse_value_ref",
    "is_value_ref",
    # Canonical IR
    "CanonicalEvent",
    "CanonicalNode",
    "CanonicalIRDocument",
    "CanonicalBuildResult",
    # Diagnostics
    "Diagnostic",
    "DiagnosticBag",
    "DiagnosticSeverity",
    "DiagnosticSource",
    # Routes
    "ROOT_ROUTE_ID",
    "RouteNode",
    "RouteManifest",
    # Bundles
    "BundleType",
    "ExportFile",
    "ExportBundle",
]
