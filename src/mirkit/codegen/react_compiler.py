"""
React component compiler.

Compiles canonical IR into the source text of a single React function
component (TSX). Value references become accessor expressions over
component props, useState hooks, data scope expressions and list
iteration variables; built-in actions are inlined as event handlers.
"""

from __future__ import annotations

import html
import json
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mirkit.adapters.base import VOID_ELEMENTS, AdapterResolution, ImportKind, ImportSpec
from mirkit.adapters.packages import (
    DEFAULT_ESM_SH_BASE_URL,
    DependencyStrategy,
    PackageResolution,
    resolve_package_import,
)
from mirkit.adapters.registry import ComponentRegistry
from mirkit.core.actions import (
    CUSTOM_ACTION_EVENT,
    EXECUTE_GRAPH_ACTION,
    EXECUTE_GRAPH_EVENT,
    NAVIGATE_ACTION,
    get_navigate_link_kind,
    parse_navigation_state,
    resolve_navigate_target,
    to_react_event_name,
)
from mirkit.core.resolver import contains_ref, parse_path
from mirkit.runtime.renderer import INCREMENT_ACTION, MOUNTED_CSS_PROP, pick_increment_target
from mirkit.specs.canonical import CanonicalEvent, CanonicalIRDocument, CanonicalNode
from mirkit.specs.diagnostics import (
    Diagnostic,
    DiagnosticBag,
    DiagnosticSeverity,
    DiagnosticSource,
)
from mirkit.specs.document import NodeDataScope, NodeListRender
from mirkit.specs.refs import DataRef, IndexRef, ItemRef, ParamRef, StateRef, parse_value_ref

logger = logging.getLogger(__name__)

DEFAULT_COMPONENT_NAME = "MdrComponent"
UNDEFINED = "undefined"
INDENT = "  "

UNDECLARED_PARAM = "CODEGEN_UNDECLARED_PARAM"
UNDECLARED_STATE = "CODEGEN_UNDECLARED_STATE"
REF_OUT_OF_SCOPE = "CODEGEN_REFERENCE_OUT_OF_SCOPE"
VALUE_NOT_SERIALIZABLE = "CODEGEN_VALUE_NOT_SERIALIZABLE"
INVALID_PROP_NAME = "CODEGEN_INVALID_PROP_NAME"
VOID_CHILDREN_DROPPED = "CODEGEN_VOID_CHILDREN_DROPPED"
NAVIGATE_TARGET_INVALID = "CODEGEN_NAVIGATE_TARGET_INVALID"
MOUNTED_CSS_INVALID = "CODEGEN_MOUNTED_CSS_INVALID"

_PROP_NAME_PATTERN = re.compile(r"^[A-Za-z_$][\w$:.-]*$")
_JS_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*$")
_UNSAFE_JSX_TEXT = re.compile(r"[{}<>&\n\r]")

AS_ARRAY_HELPER = "const asArray = (value: unknown): any[] => (Array.isArray(value) ? value : []);"

PRIMITIVE_TS_TYPES = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "any": "any",
    "unknown": "unknown",
    "array": "any[]",
    "object": "Record<string, any>",
}


# =============================================================================
# Identifiers and Literals
# =============================================================================


def to_identifier(value: str) -> str:
    """
    Turn an arbitrary string into a JS identifier.

    Example:
        to_identifier("user-name")  # "user_name"
        to_identifier("1st")        # "_1st"
    """
    normalized = re.sub(r"[^a-zA-Z0-9_$]", "_", value)
    return normalized if re.match(r"^[a-zA-Z_$]", normalized) else f"_{normalized}"


def setter_name(identifier: str) -> str:
    return f"set{identifier[:1].upper()}{identifier[1:]}"


def is_function_type(type_name: str) -> bool:
    return "=>" in type_name or "function" in type_name.lower()


def to_ts_type(type_name: str) -> str:
    if is_function_type(type_name):
        return type_name if "=>" in type_name else "(...args: any[]) => void"
    if type_name.lower() in PRIMITIVE_TS_TYPES:
        return PRIMITIVE_TS_TYPES[type_name.lower()]
    if type_name.endswith("[]") or "<" in type_name or "|" in type_name:
        return type_name
    return "any"


def json_literal(value: Any) -> str | None:
    """JSON text for a JSON-safe value, else None."""
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError):
        return None


def accessor(base: str, tokens: list[str | int]) -> str:
    """Optional-chaining access: accessor("user", ["tags", 0]) -> 'user?.tags?.[0]'."""
    expression = base
    for token in tokens:
        if isinstance(token, int):
            expression += f"?.[{token}]"
        elif _JS_IDENTIFIER_PATTERN.match(token):
            expression += f"?.{token}"
        else:
            expression += f"?.[{json.dumps(token)}]"
    return expression


def needs_parens(expression: str) -> bool:
    return not (_JS_IDENTIFIER_PATTERN.match(expression) or expression.startswith("("))


def referenced_params(value: Any) -> set[str]:
    """Top-level param names referenced anywhere inside `value`."""
    ref = parse_value_ref(value)
    if isinstance(ref, ParamRef):
        tokens = parse_path(ref.path)
        return {tokens[0]} if tokens and isinstance(tokens[0], str) else set()
    names: set[str] = set()
    if isinstance(value, Mapping):
        for entry in value.values():
            names |= referenced_params(entry)
    elif isinstance(value, list | tuple):
        for entry in value:
            names |= referenced_params(entry)
    return names


# =============================================================================
# Options and Results
# =============================================================================


@dataclass
class CompileOptions:
    component_name: str | None = None
    registry: ComponentRegistry | None = None
    dependency_strategy: DependencyStrategy = DependencyStrategy.WORKSPACE
    esm_sh_base_url: str = DEFAULT_ESM_SH_BASE_URL
    package_versions: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MountedCssFile:
    path: str
    content: str


@dataclass
class CompiledComponent:
    component_name: str
    code: str
    canonical: CanonicalIRDocument
    diagnostics: list[Diagnostic] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)
    mounted_css_files: list[MountedCssFile] = field(default_factory=list)


@dataclass(frozen=True)
class _Scope:
    """Expressions visible while compiling one node."""

    data: str = UNDEFINED
    item: str | None = None
    index: str | None = None
    aliases: tuple[tuple[str, str], ...] = ()
    depth: int = 0

    def alias(self, name: str) -> str | None:
        for alias, expression in self.aliases:
            if alias == name:
                return expression
        return None


# =============================================================================
# Compiler
# =============================================================================


class ReactComponentCompiler:
    """
    Compiles one canonical document into a React component.

    Example:
        compiled = ReactComponentCompiler(canonical, CompileOptions(component_name="Card")).compile()
        print(compiled.code)
    """

    def __init__(
        self,
        canonical: CanonicalIRDocument,
        options: CompileOptions | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ):
        self.canonical = canonical
        self.options = options or CompileOptions()
        self.registry = self.options.registry or ComponentRegistry.default()
        self.bag = DiagnosticBag(diagnostics or [])

        logic = canonical.logic
        self.props_def = dict(logic.props) if logic else {}
        self.state_def = dict(logic.state) if logic else {}
        self.param_names = {name: to_identifier(name) for name in self.props_def}
        self.state_names = {name: to_identifier(name) for name in self.state_def}
        self.function_props = {
            name for name, definition in self.props_def.items() if is_function_type(definition.type)
        }
        self.undeclared_params: dict[str, str] = {}
        self._reserved = self._component_identifiers()

        self._imports: list[ImportSpec] = []
        self._mounted_css: list[MountedCssFile] = []
        self._uses_as_array = False

    def _component_identifiers(self) -> set[str]:
        """Identifiers bound in the component body: props, state and state setters."""
        reserved = set(self.param_names.values())
        for identifier in self.state_names.values():
            reserved.update((identifier, setter_name(identifier)))
        for node in self.canonical.root.walk():
            sources = [node.text, node.style, node.props]
            sources.extend(event.params for event in node.events.values())
            if node.data is not None:
                sources.append(node.data.model_dump())
            if node.list_ is not None:
                sources.append(node.list_.source)
            for value in sources:
                reserved.update(to_identifier(name) for name in referenced_params(value))
        return reserved

    def _loop_identifier(self, base: str) -> str:
        if base not in self._reserved:
            return base
        n = 1
        while f"{base}{n}" in self._reserved:
            n += 1
        return f"{base}{n}"

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def _warn(self, code: str, message: str, path: str | None, info: bool = False) -> None:
        self.bag.emit(
            code,
            message,
            source=DiagnosticSource.CODEGEN,
            severity=DiagnosticSeverity.INFO if info else DiagnosticSeverity.WARNING,
            path=path,
        )

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def ref_expression(self, value: Any, scope: _Scope, path: str) -> str | None:
        """Accessor expression for a reference, or None if `value` is a literal."""
        ref = parse_value_ref(value)
        if ref is None:
            return None
        if isinstance(ref, IndexRef):
            if scope.index is None:
                self._warn(REF_OUT_OF_SCOPE, "$index used outside a list.", path)
                return UNDEFINED
            return scope.index

        tokens = parse_path(ref.path)
        if isinstance(ref, ParamRef):
            if not tokens or isinstance(tokens[0], int):
                return UNDEFINED
            name = str(tokens[0])
            if name not in self.param_names:
                if name not in self.undeclared_params:
                    self.undeclared_params[name] = to_identifier(name)
                    self._warn(
                        UNDECLARED_PARAM,
                        f"Param '{name}' is referenced but not declared; declared as an optional any prop.",
                        path,
                        info=True,
                    )
                return accessor(self.undeclared_params[name], tokens[1:])
            return accessor(self.param_names[name], tokens[1:])
        if isinstance(ref, StateRef):
            if not tokens or isinstance(tokens[0], int) or str(tokens[0]) not in self.state_names:
                self._warn(UNDECLARED_STATE, f"State '{ref.path}' is not declared.", path)
                return UNDEFINED
            return accessor(self.state_names[str(tokens[0])], tokens[1:])
        if isinstance(ref, ItemRef):
            if scope.item is None:
                self._warn(REF_OUT_OF_SCOPE, "$item used outside a list.", path)
                return UNDEFINED
            return accessor(scope.item, tokens)
        if isinstance(ref, DataRef):
            if tokens and isinstance(tokens[0], str):
                alias = scope.alias(tokens[0])
                if alias is not None:
                    return accessor(alias, tokens[1:])
            if scope.data == UNDEFINED:
                return UNDEFINED
            base = f"({scope.data})" if needs_parens(scope.data) else scope.data
            return accessor(base, tokens) if tokens else scope.data
        return UNDEFINED

    def value_expression(self, value: Any, scope: _Scope, path: str) -> str | None:
        """JS expression for a literal-or-reference value; None if not serializable."""
        ref = self.ref_expression(value, scope, path)
        if ref is not None:
            return ref
        if not contains_ref(value):
            literal = json_literal(value)
            if literal is None:
                self._warn(VALUE_NOT_SERIALIZABLE, "Value is not JSON-serializable; omitted.", path)
            return literal
        if isinstance(value, Mapping):
            entries = []
            for key, entry in value.items():
                expression = self.value_expression(entry, scope, f"{path}.{key}")
                if expression is not None:
                    entries.append(f"{json.dumps(str(key))}: {expression}")
            return "{ " + ", ".join(entries) + " }" if entries else "{}"
        if isinstance(value, list | tuple):
            items = []
            for i, entry in enumerate(value):
                expression = self.value_expression(entry, scope, f"{path}[{i}]")
                items.append(UNDEFINED if expression is None else expression)
            return "[" + ", ".join(items) + "]"
        return None

    def data_scope_expression(
        self, data: NodeDataScope | None, scope: _Scope, path: str
    ) -> str:
        if data is None:
            return scope.data
        source = None
        ref = parse_value_ref(data.source)
        if ref is not None and not isinstance(ref, IndexRef):
            source = self.ref_expression(data.source, scope, f"{path}.data.source")

        design_value = data.value if data.value is not None else data.mock
        design = None
        if design_value is not None:
            design = self.value_expression(design_value, scope, f"{path}.data.value")

        if source and design:
            expression = f"({source} ?? {design})"
        elif source:
            expression = source
        elif design:
            expression = design
        elif ref is not None:
            expression = UNDEFINED
        else:
            expression = scope.data

        if isinstance(data.extend, Mapping) and data.extend:
            entries = []
            for key, entry in data.extend.items():
                value = self.value_expression(entry, scope, f"{path}.data.extend.{key}")
                if value is not None:
                    entries.append(f"{json.dumps(str(key))}: {value}")
            expression = f"{{ ...({expression} ?? {{}}), {', '.join(entries)} }}"

        if isinstance(data.pick, str) and data.pick.strip():
            base = f"({expression})" if needs_parens(expression) else expression
            expression = accessor(base, parse_path(data.pick.strip()))
        return expression

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _navigate_statements(self, params: dict[str, Any], scope: _Scope, path: str) -> list[str]:
        target = resolve_navigate_target(params.get("target")).effective_target
        replace = bool(params.get("replace"))
        state_literal = json_literal(parse_navigation_state(params.get("state"))) or "null"
        to_value = params.get("to")

        def external(to: str) -> str:
            if target == "_blank":
                return f"window.open({to}, '_blank', 'noopener,noreferrer');"
            if replace:
                return f"window.location.replace({to});"
            return f"window.location.assign({to});"

        history_method = "replaceState" if replace else "pushState"

        def internal(to: str) -> str:
            return (
                f"window.history.{history_method}({state_literal}, '', {to}); "
                "window.dispatchEvent(new PopStateEvent('popstate'));"
            )

        if isinstance(to_value, str):
            to = to_value.strip()
            kind = get_navigate_link_kind(to)
            if kind is None:
                self._warn(
                    NAVIGATE_TARGET_INVALID,
                    f"Navigate target '{to}' is neither an https:// URL nor an absolute path.",
                    path,
                    info=True,
                )
                return []
            literal = json.dumps(to)
            return [external(literal) if kind == "external" else internal(literal)]

        expression = self.value_expression(to_value, scope, f"{path}.params.to")
        if expression is None or expression == UNDEFINED:
            return []
        # Handlers sharing a trigger are concatenated; `to` must stay block-scoped.
        return [
            f"{{ const to = String({expression} ?? '').trim(); "
            f"if (to.startsWith('https://')) {{ {external('to')} }} "
            f"else if (to.startsWith('/')) {{ {internal('to')} }} }}"
        ]

    def _broadcast_statement(self, event_name: str, detail: str) -> str:
        return f"window.dispatchEvent(new CustomEvent('{event_name}', {{ detail: {detail} }}));"

    def event_statements(
        self, node: CanonicalNode, event_key: str, event: CanonicalEvent, scope: _Scope
    ) -> list[str]:
        action = event.action
        if not action:
            return []
        path = f"{node.path}.events.{event_key}"
        if action in self.function_props:
            return [f"{self.param_names[action]}?.(event);"]
        if action == NAVIGATE_ACTION:
            return self._navigate_statements(dict(event.params), scope, path)
        params = self.value_expression(dict(event.params), scope, f"{path}.params") or "{}"
        if action == EXECUTE_GRAPH_ACTION:
            return [self._broadcast_statement(EXECUTE_GRAPH_EVENT, params)]
        if action == INCREMENT_ACTION:
            initial = {name: definition.initial for name, definition in self.state_def.items()}
            key = pick_increment_target(initial)
            if key is not None:
                return [f"{setter_name(self.state_names[key])}((value) => value + 1);"]
        detail = (
            f"{{ action: {json.dumps(action)}, nodeId: {json.dumps(node.id)}, params: {params} }}"
        )
        return [self._broadcast_statement(CUSTOM_ACTION_EVENT, detail)]

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def _resolve(self, node: CanonicalNode) -> AdapterResolution:
        resolution = self.registry.resolve(node)
        self._imports.extend(resolution.imports)
        for diagnostic in resolution.diagnostics:
            self.bag.add(diagnostic)
        return resolution

    def _collect_mounted_css(self, node: CanonicalNode, value: Any) -> None:
        if not isinstance(value, list):
            self._warn(MOUNTED_CSS_INVALID, "mountedCss must be a list.", f"{node.path}.props.mountedCss")
            return
        for i, entry in enumerate(value):
            path = entry.get("path") if isinstance(entry, Mapping) else None
            content = entry.get("content") if isinstance(entry, Mapping) else None
            relative = path.strip().lstrip("/") if isinstance(path, str) else ""
            while relative.startswith("./"):
                relative = relative[2:]
            if not relative or ".." in relative.split("/") or not isinstance(content, str):
                self._warn(
                    MOUNTED_CSS_INVALID,
                    "Mounted CSS entry needs a relative path and string content.",
                    f"{node.path}.props.mountedCss[{i}]",
                )
                continue
            if all(existing.path != relative for existing in self._mounted_css):
                self._mounted_css.append(MountedCssFile(path=relative, content=content))

    def _attributes(
        self, node: CanonicalNode, resolution: AdapterResolution, scope: _Scope
    ) -> list[str]:
        attributes: list[str] = []
        if node.style:
            style = self.value_expression(node.style, scope, f"{node.path}.style")
            if style is not None:
                attributes.append(f"style={{{style}}}")

        for key, value in node.props.items():
            if key in resolution.omit_props:
                continue
            if key == MOUNTED_CSS_PROP:
                self._collect_mounted_css(node, value)
                continue
            if not _PROP_NAME_PATTERN.match(key):
                self._warn(INVALID_PROP_NAME, f"Prop '{key}' is not a valid JSX attribute name.", f"{node.path}.props")
                continue
            if isinstance(value, str) and not re.search(r'["\\\n\r]', value):
                attributes.append(f'{key}="{value}"')
                continue
            expression = self.value_expression(value, scope, f"{node.path}.props.{key}")
            if expression is not None:
                attributes.append(f"{key}={{{expression}}}")

        handlers: dict[str, list[str]] = {}
        for event_key, event in node.events.items():
            statements = self.event_statements(node, event_key, event, scope)
            if statements:
                handlers.setdefault(to_react_event_name(event.trigger), []).extend(statements)
        for event_name, statements in handlers.items():
            body = " ".join(statements)
            attributes.append(f"{event_name}={{(event) => {{ {body} }}}}")
        return attributes

    def _text(self, node: CanonicalNode, scope: _Scope) -> str | None:
        text = node.text
        if text is None:
            return None
        expression = self.ref_expression(text, scope, f"{node.path}.text")
        if expression is not None:
            return f"{{{expression}}}"
        if isinstance(text, str):
            decoded = html.unescape(text)
            if not decoded:
                return None
            if _UNSAFE_JSX_TEXT.search(decoded) or decoded != decoded.strip():
                return f"{{{json.dumps(decoded, ensure_ascii=False)}}}"
            return decoded
        if isinstance(text, int | float) and not isinstance(text, bool) and math.isfinite(text):
            return f"{{{json.dumps(text)}}}"
        self._warn(VALUE_NOT_SERIALIZABLE, "Text must be a string, number or reference.", f"{node.path}.text")
        return None

    def compile_node(self, node: CanonicalNode, scope: _Scope, indent: str) -> str:
        node_scope = _Scope(
            data=self.data_scope_expression(node.data, scope, node.path),
            item=scope.item,
            index=scope.index,
            aliases=scope.aliases,
            depth=scope.depth,
        )
        resolution = self._resolve(node)
        tag = resolution.element
        attributes = self._attributes(node, resolution, node_scope)
        opening = f"{tag}{' ' + ' '.join(attributes) if attributes else ''}"

        if tag.lower() in VOID_ELEMENTS:
            if node.children or node.text is not None:
                self._warn(VOID_CHILDREN_DROPPED, f"<{tag}> cannot have children; they were dropped.", node.path)
            return f"{indent}<{opening} />"

        lines: list[str] = []
        text = self._text(node, node_scope)
        if text is not None:
            lines.append(f"{indent}{INDENT}{text}")
        if node.list_ is not None:
            lines.extend(self._compile_list(node, node.list_, node_scope, indent + INDENT))
        else:
            lines.extend(
                self.compile_node(child, node_scope, indent + INDENT) for child in node.children
            )
        if not lines:
            return f"{indent}<{opening} />"
        return "\n".join([f"{indent}<{opening}>", *lines, f"{indent}</{tag}>"])

    def _compile_list(
        self, node: CanonicalNode, config: NodeListRender, scope: _Scope, indent: str
    ) -> list[str]:
        self._uses_as_array = True
        ref = parse_value_ref(config.source)
        if ref is not None and not isinstance(ref, IndexRef):
            source = self.ref_expression(config.source, scope, f"{node.path}.list.source") or UNDEFINED
        elif isinstance(config.array_field, str) and config.array_field.strip():
            base = f"({scope.data})" if needs_parens(scope.data) else scope.data
            source = accessor(base, parse_path(config.array_field.strip()))
        else:
            source = scope.data

        suffix = str(scope.depth) if scope.depth else ""
        item_as = config.item_as if isinstance(config.item_as, str) and config.item_as.strip() else None
        index_as = config.index_as if isinstance(config.index_as, str) and config.index_as.strip() else None
        item_var = self._loop_identifier(to_identifier(item_as) if item_as else f"item{suffix}")
        index_var = self._loop_identifier(to_identifier(index_as) if index_as else f"index{suffix}")

        aliases = dict(scope.aliases)
        if item_as:
            aliases[item_as] = item_var
        if index_as:
            aliases[index_as] = index_var
        item_scope = _Scope(
            data=scope.data,
            item=item_var,
            index=index_var,
            aliases=tuple(aliases.items()),
            depth=scope.depth + 1,
        )

        key = index_var
        if isinstance(config.key_by, str) and config.key_by.strip():
            key = f"{accessor(item_var, parse_path(config.key_by.strip()))} ?? {index_var}"

        empty_id = config.empty_node_id if isinstance(config.empty_node_id, str) else None
        empty_node = self.canonical.get_node(empty_id) if empty_id else None
        template = [child for child in node.children if child.id != empty_id]

        inner = indent + INDENT * 2
        body = [self.compile_node(child, item_scope, inner + INDENT) for child in template]
        map_call = f"asArray({source}).map(({item_var}, {index_var}) => ("
        if empty_node is None:
            mapped = [f"{indent}{{{map_call}"]
        else:
            mapped = [
                f"{indent}{{asArray({source}).length === 0 ? (",
                self.compile_node(empty_node, scope, indent + INDENT),
                f"{indent}) : {map_call}",
            ]
        mapped.append(f"{inner}<React.Fragment key={{{key}}}>")
        mapped.extend(body)
        mapped.append(f"{inner}</React.Fragment>")
        mapped.append(f"{indent}))}}")
        return mapped

    # -------------------------------------------------------------------------
    # Module
    # -------------------------------------------------------------------------

    def component_name(self) -> str:
        if self.options.component_name:
            return to_identifier(self.options.component_name)
        metadata = self.canonical.metadata
        if metadata is not None and metadata.name:
            name = re.sub(r"\s+", "", metadata.name)
            if name:
                return to_identifier(name)
        return DEFAULT_COMPONENT_NAME

    def _resolved_imports(self) -> list[tuple[ImportSpec, PackageResolution]]:
        seen: set[tuple[str, str, str, str]] = set()
        resolved = []
        for spec in self._imports:
            if spec.dedupe_key in seen:
                continue
            seen.add(spec.dedupe_key)
            resolution = resolve_package_import(
                spec.source,
                strategy=self.options.dependency_strategy,
                esm_sh_base_url=self.options.esm_sh_base_url,
                package_versions=self.options.package_versions,
            )
            resolved.append((spec, resolution))
        return resolved

    @staticmethod
    def render_imports(resolved: list[tuple[ImportSpec, PackageResolution]]) -> list[str]:
        """Import statements; named imports from one module are merged into a single statement."""
        lines: list[str] = []
        named: dict[str, list[str]] = {}
        order: list[tuple[str, str]] = []
        for spec, resolution in resolved:
            source = resolution.import_source
            if spec.kind == ImportKind.NAMED:
                binding = spec.imported or spec.local_name
                if spec.local and spec.imported and spec.local != spec.imported:
                    binding = f"{spec.imported} as {spec.local}"
                if source not in named:
                    named[source] = []
                    order.append(("named", source))
                if binding not in named[source]:
                    named[source].append(binding)
            elif spec.kind == ImportKind.NAMESPACE:
                order.append((f"import * as {spec.local_name} from '{source}';", source))
            else:
                order.append((f"import {spec.local_name} from '{source}';", source))
        for statement, source in order:
            if statement == "named":
                lines.append(f"import {{ {', '.join(named[source])} }} from '{source}';")
            else:
                lines.append(statement)
        return lines

    def compile(self) -> CompiledComponent:
        name = self.component_name()
        root_jsx = self.compile_node(self.canonical.root, _Scope(), INDENT * 2)

        resolved = self._resolved_imports()
        react_import = (
            "import React, { useState } from 'react';"
            if self.state_def
            else "import React from 'react';"
        )
        import_lines = [react_import, *self.render_imports(resolved)]
        import_lines.extend(f"import './{css.path}';" for css in self._mounted_css)

        interface_name = f"{name}Props"
        fields: list[str] = []
        params: list[str] = []
        for prop_name, definition in self.props_def.items():
            identifier = self.param_names[prop_name]
            fields.append(f"{INDENT}{identifier}?: {to_ts_type(definition.type)};")
            default = json_literal(definition.default) if definition.has_default else None
            params.append(f"{identifier} = {default}" if default is not None else identifier)
        for identifier in self.undeclared_params.values():
            fields.append(f"{INDENT}{identifier}?: any;")
            params.append(identifier)

        sections = ["\n".join(import_lines)]
        if fields:
            sections.append("\n".join([f"interface {interface_name} {{", *fields, "}"]))
        if self._uses_as_array:
            sections.append(AS_ARRAY_HELPER)

        signature = (
            f"export default function {name}({{ {', '.join(params)} }}: {interface_name}) {{"
            if fields
            else f"export default function {name}() {{"
        )
        body = [signature]
        for state_name, definition in self.state_def.items():
            identifier = self.state_names[state_name]
            initial = json_literal(definition.initial) or "null"
            body.append(f"{INDENT}const [{identifier}, {setter_name(identifier)}] = useState({initial});")
        body.extend([f"{INDENT}return (", root_jsx, f"{INDENT});", "}"])
        sections.append("\n".join(body))

        dependencies: dict[str, str] = {}
        for _, resolution in resolved:
            if resolution.declare_dependency and resolution.package_name:
                dependencies[resolution.package_name] = resolution.package_version or "latest"

        logger.debug("Compiled %s: %d imports, %d diagnostics", name, len(resolved), len(self.bag))
        return CompiledComponent(
            component_name=name,
            code="\n\n".join(sections) + "\n",
            canonical=self.canonical,
            diagnostics=self.bag.to_list(),
            dependencies=dependencies,
            mounted_css_files=list(self._mounted_css),
        )
