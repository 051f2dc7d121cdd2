"""
mirkit - MIR document toolkit.

Normalizes MIR UI documents into a canonical IR, resolves value
references against params, state, data scopes and list items, matches
route manifests, renders documents into a live view tree and compiles
them into React source bundles.

Usage:
    from mirkit import normalize, render_document, export_document

    result = normalize(raw_document)
    view = render_document(raw_document, params={"title": "Hello"})
    bundle = export_document(raw_document)
"""

__version__ = "0.4.0"

from mirkit.codegen.export import export_document, write_bundle
from mirkit.core.canonical_ir import normalize
from mirkit.core.validator import validate_mir_document
from mirkit.runtime.renderer import LiveRenderer, render_document

__all__ = [
    "__version__",
    "normalize",
    "validate_mir_document",
    "render_document",
    "LiveRenderer",
    "export_document",
    "write_bundle",
]
