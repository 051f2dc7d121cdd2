"""
Value reference resolution.

Resolves $param/$state/$data/$item/$index references against a
resolution context. Missing paths resolve to None rather than raising.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from mirkit.specs.refs import (
    DataRef,
    IndexRef,
    ItemRef,
    ParamRef,
    StateRef,
    ValueRef,
    parse_value_ref,
)

DEFAULT_MAX_DEPTH = 12

PATH_SEGMENT_PATTERN = re.compile(r"[^.\[\]]+|\[(\d+)\]")


# =============================================================================
# Paths
# =============================================================================


def parse_path(path: str) -> list[str | int]:
    """
    Split a dot/bracket path into tokens.

    Example:
        parse_path("users[0].name")  # ["users", 0, "name"]
    """
    tokens: list[str | int] = []
    for match in PATH_SEGMENT_PATTERN.finditer(path):
        if match.group(1) is not None:
            tokens.append(int(match.group(1)))
        else:
            tokens.append(match.group(0))
    return tokens


def _step(cursor: Any, token: str | int) -> Any:
    if isinstance(cursor, list | tuple):
        if isinstance(token, int):
            index = token
        elif token.isdigit():
            index = int(token)
        else:
            return None
        return cursor[index] if 0 <= index < len(cursor) else None
    if isinstance(cursor, Mapping):
        return cursor.get(str(token))
    return None


def read_value_by_path(source: Any, path: str | None) -> Any:
    """
    Read a value by path. An empty path returns the source itself.

    Array cursors accept only integer tokens; mapping cursors look tokens
    up as keys; any other cursor ends resolution with None.
    """
    if not path:
        return source
    cursor = source
    for token in parse_path(path):
        if cursor is None:
            return None
        cursor = _step(cursor, token)
    return cursor


# =============================================================================
# Resolution Context
# =============================================================================


@dataclass(frozen=True)
class ValueRefContext:
    """
    Everything a reference can resolve against.

    `data` is the current data scope; `item`/`index` are set inside list
    iteration.
    """

    params: Mapping[str, Any] = field(default_factory=dict)
    state: Mapping[str, Any] = field(default_factory=dict)
    data: Any = None
    item: Any = None
    index: int | None = None

    def with_data(self, data: Any) -> "ValueRefContext":
        return replace(self, data=data)

    def with_item(
        self,
        item: Any,
        index: int,
        item_as: str | None = None,
        index_as: str | None = None,
    ) -> "ValueRefContext":
        """Child context for one list item, exposing aliases in the data scope."""
        data = self.data
        aliases: dict[str, Any] = {}
        if item_as:
            aliases[item_as] = item
        if index_as:
            aliases[index_as] = index
        if aliases:
            base = dict(data) if isinstance(data, Mapping) else {}
            data = {**base, **aliases}
        return replace(self, data=data, item=item, index=index)


# =============================================================================
# Resolution
# =============================================================================


def resolve_ref(ref: ValueRef, context: ValueRefContext) -> Any:
    if isinstance(ref, ParamRef):
        return read_value_by_path(context.params, ref.path)
    if isinstance(ref, StateRef):
        return read_value_by_path(context.state, ref.path)
    if isinstance(ref, DataRef):
        return read_value_by_path(context.data, ref.path)
    if isinstance(ref, ItemRef):
        return read_value_by_path(context.item, ref.path)
    if isinstance(ref, IndexRef):
        return context.index
    return None


def resolve_one(value: Any, context: ValueRefContext) -> Any:
    """Resolve a single value: references are looked up, literals pass through."""
    ref = parse_value_ref(value)
    if ref is None:
        return value
    return resolve_ref(ref, context)


def resolve_deep(
    value: Any,
    context: ValueRefContext,
    max_depth: int = DEFAULT_MAX_DEPTH,
    _depth: int = 0,
) -> Any:
    """
    Resolve references recursively through lists and non-reference mappings.

    Values nested deeper than `max_depth` are returned unresolved.
    """
    if _depth > max_depth:
        return value
    resolved = resolve_one(value, context)
    if isinstance(resolved, list | tuple):
        return [resolve_deep(entry, context, max_depth, _depth + 1) for entry in resolved]
    if isinstance(resolved, Mapping) and parse_value_ref(resolved) is None:
        return {
            key: resolve_deep(entry, context, max_depth, _depth + 1)
            for key, entry in resolved.items()
        }
    return resolved


def contains_ref(value: Any, max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> bool:
    """True if a reference appears anywhere within the value."""
    if _depth > max_depth:
        return False
    if parse_value_ref(value) is not None:
        return True
    if isinstance(value, list | tuple):
        return any(contains_ref(entry, max_depth, _depth + 1) for entry in value)
    if isinstance(value, Mapping):
        return any(contains_ref(entry, max_depth, _depth + 1) for entry in value.values())
    return False
