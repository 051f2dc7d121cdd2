"""
Data scope and list resolution.

A node's data scope is derived from the inherited scope and the node's
`data` declaration; a list node expands into one entry per item of its
source array, each with its own child resolution context.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mirkit.core.resolver import (
    DEFAULT_MAX_DEPTH,
    ValueRefContext,
    read_value_by_path,
    resolve_deep,
    resolve_one,
)
from mirkit.specs.document import NodeDataScope, NodeListRender
from mirkit.specs.refs import IndexRef, parse_value_ref

logger = logging.getLogger(__name__)


def is_scope_source(value: Any) -> bool:
    ref = parse_value_ref(value)
    return ref is not None and not isinstance(ref, IndexRef)


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


# =============================================================================
# Data Scope
# =============================================================================


def resolve_data_scope(
    data: NodeDataScope | None,
    context: ValueRefContext,
    *,
    preview: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """
    Compute a node's data scope from the inherited scope in `context.data`.

    - `source` selects a live value by reference.
    - Without a live value, `value` supplies a design-time literal scope and
      `mock` is used instead when rendering a preview (or when no `value`
      is declared). A node that declares none of these inherits the scope.
    - `extend` is shallow-merged over the scope, overriding its keys.
    - `pick` narrows the result by path.
    """
    inherited = context.data
    if data is None:
        return inherited

    scope: Any = None
    has_source = is_scope_source(data.source)
    if has_source:
        scope = resolve_one(data.source, context)

    if scope is None:
        if preview and data.mock is not None:
            design = data.mock
        elif data.value is not None:
            design = data.value
        else:
            design = data.mock
        if design is not None:
            scope = resolve_deep(design, context, max_depth)
        elif not has_source:
            scope = inherited

    if isinstance(data.extend, Mapping):
        base = dict(scope) if isinstance(scope, Mapping) else {}
        base.update(resolve_deep(dict(data.extend), context, max_depth))
        scope = base

    pick = _non_empty_str(data.pick)
    if pick:
        scope = read_value_by_path(scope, pick)
    return scope


# =============================================================================
# Lists
# =============================================================================


@dataclass
class ListEntry:
    key: Any
    item: Any
    index: int
    context: ValueRefContext


@dataclass
class ListRenderPlan:
    """
    Expansion of a list node.

    When `is_empty`, only the node named by `empty_node_id` (if any) is
    rendered; otherwise the template renders once per entry.
    """

    entries: list[ListEntry] = field(default_factory=list)
    empty_node_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.entries


def resolve_list_source(
    list_config: NodeListRender, scope: Any, context: ValueRefContext
) -> Any:
    """Source priority: explicit reference, then arrayField in the scope, then the scope itself."""
    if is_scope_source(list_config.source):
        return resolve_one(list_config.source, context.with_data(scope))
    array_field = _non_empty_str(list_config.array_field)
    if array_field:
        return read_value_by_path(scope, array_field)
    return scope


def plan_list(
    list_config: NodeListRender, scope: Any, context: ValueRefContext
) -> ListRenderPlan:
    """
    Expand a list declaration into entries.

    Non-array sources yield an empty plan. Keys come from `keyBy` when it
    resolves to a value, else the item index.
    """
    source = resolve_list_source(list_config, scope, context)
    empty_node_id = _non_empty_str(list_config.empty_node_id)
    if not isinstance(source, list | tuple):
        if source is not None:
            logger.debug("List source is not an array (%s); rendering as empty", type(source).__name__)
        return ListRenderPlan(empty_node_id=empty_node_id)

    key_by = _non_empty_str(list_config.key_by)
    item_as = _non_empty_str(list_config.item_as)
    index_as = _non_empty_str(list_config.index_as)
    item_context = context.with_data(scope)
    entries = []
    for index, item in enumerate(source):
        key = read_value_by_path(item, key_by) if key_by else None
        entries.append(
            ListEntry(
                key=index if key is None else key,
                item=item,
                index=index,
                context=item_context.with_item(item, index, item_as, index_as),
            )
        )
    return ListRenderPlan(entries=entries, empty_node_id=empty_node_id)
