"""
Export bundle assembly.

Turns a MIR document into an ExportBundle: either a full Vite project
or a single-component bundle, and writes bundles to disk.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

from mirkit.codegen.react_compiler import CompileOptions, CompiledComponent, ReactComponentCompiler
from mirkit.codegen.scaffold import ViteProjectGenerator
from mirkit.core.canonical_ir import normalize
from mirkit.core.errors import ErrorContext, ExportError
from mirkit.runtime.logging import log_with_context
from mirkit.specs.bundle import BundleType, ExportBundle, ExportFile
from mirkit.specs.document import MIRDocument

logger = logging.getLogger(__name__)

LANGUAGES = {
    ".tsx": "typescript",
    ".ts": "typescript",
    ".json": "json",
    ".css": "css",
    ".html": "html",
}


def language_for(path: str) -> str:
    return LANGUAGES.get(PurePosixPath(path).suffix, "text")


def compile_document(
    document: MIRDocument | Mapping[str, Any], options: CompileOptions | None = None
) -> CompiledComponent:
    """
    Canonicalize and compile a document into one React component.

    Canonicalization diagnostics come first in the result's diagnostics.
    """
    result = normalize(document)
    compiler = ReactComponentCompiler(result.document, options, diagnostics=result.diagnostics)
    return compiler.compile()


def export_document(
    document: MIRDocument | Mapping[str, Any],
    bundle_type: BundleType = BundleType.PROJECT,
    options: CompileOptions | None = None,
) -> ExportBundle:
    """
    Compile a document into an export bundle.

    Args:
        document: MIR document (model or raw mapping)
        bundle_type: project for a runnable Vite app, component/nodegraph
            for the bare component module plus its stylesheets
        options: Compiler options (component name, registry, dependency strategy)

    Returns:
        ExportBundle with files in a stable order
    """
    bundle_type = BundleType(bundle_type)
    compiled = compile_document(document, options)

    if bundle_type == BundleType.PROJECT:
        files = ViteProjectGenerator(compiled).generate_files()
        entry = "src/App.tsx"
    else:
        entry = f"{compiled.component_name}.tsx"
        files = {entry: compiled.code}
        for css in compiled.mounted_css_files:
            files[css.path] = css.content

    log_with_context(
        logger,
        logging.INFO,
        "Exported bundle",
        bundle_type=bundle_type.value,
        component=compiled.component_name,
        files=len(files),
    )
    return ExportBundle(
        type=bundle_type,
        entry_file_path=entry,
        files=[
            ExportFile(path=path, content=content, language=language_for(path))
            for path, content in files.items()
        ],
        diagnostics=compiled.diagnostics,
    )


def write_bundle(bundle: ExportBundle, output_dir: str | Path) -> list[Path]:
    """
    Write a bundle's files under a directory.

    Args:
        bundle: Bundle to write
        output_dir: Output directory (created if missing)

    Returns:
        List of created file paths

    Raises:
        ExportError: If a file path would land outside output_dir
    """
    output_dir = Path(output_dir)
    root = output_dir.resolve()
    targets: list[tuple[Path, ExportFile]] = []
    for file in bundle.files:
        target = (root / file.path).resolve()
        if not target.is_relative_to(root):
            raise ExportError(
                f"Bundle file escapes the output directory: {file.path}",
                ErrorContext(source="export", path=file.path),
            )
        targets.append((target, file))

    created_files: list[Path] = []
    for target, file in targets:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(file.content)
        created_files.append(target)
    logger.debug("Wrote %d files to %s", len(created_files), output_dir)
    return created_files
