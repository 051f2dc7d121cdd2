"""
Route matching.

Two matchers share the same ranking (literal > dynamic > wildcard):

- `match_route_manifest` walks a route manifest top-down, consuming path
  segments and backtracking to the next-ranked sibling when a branch
  fails deeper down.
- `select_route_child` picks one child of an in-document route node by
  scoring each child's route path against the current path, and reports
  the unmatched remainder that nested route nodes inherit.
"""

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from mirkit.specs.routes import ROOT_ROUTE_ID, RouteManifest, RouteNode

logger = logging.getLogger(__name__)

WILDCARD = "*"

# Scoring weights for in-document route paths
EXACT_SCORE = 10_000
STATIC_SCORE = 220
PARAM_SCORE = 120
CONSUMED_SCORE = 10
WILDCARD_PENALTY = -120
RELATIVE_START_SCORE = 30


# =============================================================================
# Paths
# =============================================================================


def normalize_path(value: str | None) -> str:
    """
    Normalize a location path.

    Example:
        normalize_path(" users//42/?tab=1#x ")  # "/users/42"
    """
    trimmed = (value or "").strip()
    if not trimmed:
        return "/"
    without_query = trimmed.split("#", 1)[0].split("?", 1)[0]
    ensured = without_query if without_query.startswith("/") else f"/{without_query}"
    while "//" in ensured:
        ensured = ensured.replace("//", "/")
    if len(ensured) > 1 and ensured.endswith("/"):
        ensured = ensured[:-1]
    return ensured


def split_path(value: str | None) -> list[str]:
    normalized = normalize_path(value)
    if normalized == "/":
        return []
    return [segment for segment in normalized.split("/") if segment]


def join_path(segments: Sequence[str]) -> str:
    return "/" + "/".join(segments) if segments else "/"


def normalize_route_path(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        return "/"
    return trimmed if trimmed.startswith("/") else f"/{trimmed}"


def _is_param(part: str) -> bool:
    return part.startswith(":") and len(part) > 1


def _part_rank(part: str) -> int:
    if part == WILDCARD:
        return 2
    if _is_param(part):
        return 1
    return 0


# =============================================================================
# Manifest Matching
# =============================================================================


@dataclass
class RouteMatch:
    """
    Result of matching a path against a route manifest.

    `chain` holds the matched route nodes from the root down; `remainder`
    is the unconsumed part of the path (empty for a full match).
    """

    chain: list[RouteNode]
    params: dict[str, str] = field(default_factory=dict)
    matched_segments: list[str] = field(default_factory=list)
    remainder: list[str] = field(default_factory=list)

    @property
    def route(self) -> RouteNode:
        return self.chain[-1]

    @property
    def matched_path(self) -> str:
        return join_path(self.matched_segments)

    @property
    def remainder_path(self) -> str:
        return join_path(self.remainder)

    @property
    def page_doc_id(self) -> str | None:
        for node in reversed(self.chain):
            if node.page_doc_id:
                return node.page_doc_id
        return None

    @property
    def layouts(self) -> list[tuple[str, str | None]]:
        """(layout document id, outlet node id) pairs, outermost first."""
        return [(n.layout_doc_id, n.outlet_node_id) for n in self.chain if n.layout_doc_id]


def _segment_parts(node: RouteNode) -> list[str]:
    segment = (node.segment or "").strip()
    return [part for part in segment.split("/") if part]


def _sibling_rank(node: RouteNode) -> tuple[int, tuple[int, ...]]:
    if node.index:
        return (0, ())
    parts = _segment_parts(node)
    if not parts:
        # Pathless layout routes consume nothing and are tried last
        return (2, ())
    return (1, tuple(_part_rank(part) for part in parts))


def rank_siblings(children: Sequence[RouteNode]) -> list[RouteNode]:
    """Order siblings for matching: literal before dynamic before wildcard, stable otherwise."""
    return sorted(children, key=_sibling_rank)


def _consume(
    parts: list[str], segments: list[str], params: dict[str, str]
) -> tuple[int, bool] | None:
    """Match segment parts at the head of `segments`; returns (consumed, wildcard)."""
    consumed = 0
    for part in parts:
        if part == WILDCARD:
            params[WILDCARD] = "/".join(segments[consumed:])
            return len(segments), True
        if consumed >= len(segments):
            return None
        current = segments[consumed]
        if _is_param(part):
            params[part[1:]] = current
        elif part != current:
            return None
        consumed += 1
    return consumed, False


def _match_node(
    node: RouteNode,
    segments: list[str],
    params: dict[str, str],
    allow_partial: bool,
) -> tuple[list[RouteNode], int, dict[str, str]] | None:
    """Try to match one node; returns (chain, consumed, params) or None."""
    if node.index:
        if segments:
            return None
        return [node], 0, params

    local = dict(params)
    consumed_result = _consume(_segment_parts(node), segments, local)
    if consumed_result is None:
        return None
    consumed, wildcard = consumed_result
    remaining = segments[consumed:]

    if wildcard or not node.children:
        if remaining and not allow_partial:
            return None
        return [node], consumed, local

    descendant = _match_children(node.children, remaining, local, allow_partial)
    if descendant is not None:
        chain, sub_consumed, sub_params = descendant
        return [node, *chain], consumed + sub_consumed, sub_params
    if not remaining or allow_partial:
        return [node], consumed, local
    return None


def _match_children(
    children: Sequence[RouteNode],
    segments: list[str],
    params: dict[str, str],
    allow_partial: bool,
) -> tuple[list[RouteNode], int, dict[str, str]] | None:
    partial: tuple[list[RouteNode], int, dict[str, str]] | None = None
    for child in rank_siblings(children):
        result = _match_node(child, segments, params, allow_partial=False)
        if result is not None:
            return result
        if allow_partial and partial is None:
            candidate = _match_node(child, segments, params, allow_partial=True)
            if candidate is not None and candidate[1] > 0:
                partial = candidate
    return partial


def match_route_manifest(
    manifest: RouteManifest | RouteNode,
    path: str,
    *,
    allow_partial: bool = False,
) -> RouteMatch | None:
    """
    Match a path against a route manifest.

    Siblings are tried in rank order and a failed branch backtracks to the
    next candidate. Index routes match only an empty remaining path. With
    `allow_partial`, the longest successful prefix match is returned along
    with the unmatched remainder.

    Example:
        match = match_route_manifest(manifest, "/users/42")
        match.params   # {"id": "42"}
        match.route.id # "user-detail"
    """
    root = manifest.root if isinstance(manifest, RouteManifest) else manifest
    segments = split_path(path)
    result = _match_children(root.children, segments, {}, allow_partial)
    if result is None:
        if segments and not allow_partial:
            logger.debug("No route matched %s", path)
            return None
        return RouteMatch(chain=[root], remainder=segments)
    chain, consumed, params = result
    return RouteMatch(
        chain=[root, *chain],
        params=params,
        matched_segments=segments[:consumed],
        remainder=segments[consumed:],
    )


# =============================================================================
# Manifest Helpers
# =============================================================================


@dataclass(frozen=True)
class RouteItem:
    id: str
    path: str
    depth: int
    label: str


def _route_node_path(parent_path: str, node: RouteNode) -> str:
    if node.index:
        return parent_path or "/"
    segment = (node.segment or "").strip()
    if not segment:
        return parent_path or "/"
    if segment.startswith("/"):
        return normalize_route_path(segment)
    if parent_path in ("", "/"):
        return normalize_route_path(segment)
    return f"{parent_path}/{segment}"


def flatten_route_items(node: RouteNode, parent_path: str = "", depth: int = 0) -> list[RouteItem]:
    """List every non-root route with its full path, depth and display label."""
    current = _route_node_path(parent_path, node)
    items: list[RouteItem] = []
    if node.id != ROOT_ROUTE_ID:
        segment = (node.segment or "").strip()
        label = "(index)" if node.index else segment or current
        items.append(RouteItem(id=node.id, path=current, depth=depth, label=label))
    for child in node.children:
        items.extend(flatten_route_items(child, current, depth + 1))
    return items


def iter_route_nodes(node: RouteNode) -> Iterator[RouteNode]:
    yield node
    for child in node.children:
        yield from iter_route_nodes(child)


def find_route_node(node: RouteNode, node_id: str) -> RouteNode | None:
    for candidate in iter_route_nodes(node):
        if candidate.id == node_id:
            return candidate
    return None


def collect_route_document_refs(node: RouteNode) -> set[str]:
    refs: set[str] = set()
    for candidate in iter_route_nodes(node):
        if candidate.layout_doc_id:
            refs.add(candidate.layout_doc_id)
        if candidate.page_doc_id:
            refs.add(candidate.page_doc_id)
    return refs


# =============================================================================
# In-Document Route Selection
# =============================================================================


@dataclass(frozen=True)
class RoutePathMatch:
    score: float
    consumed_until: int
    matched_path: str


def _relative_segments(value: str) -> list[str]:
    segments: list[str] = []
    for segment in (part.strip() for part in value.split("/")):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return segments


def _try_match_from(
    route_segments: list[str], current: list[str], start: int
) -> tuple[bool, bool, int, int, int] | None:
    route_index = 0
    current_index = start
    static_count = 0
    param_count = 0
    wildcard = False
    while route_index < len(route_segments):
        part = route_segments[route_index]
        if part == WILDCARD:
            wildcard = True
            current_index = len(current)
            break
        if current_index >= len(current):
            return None
        if _is_param(part):
            param_count += 1
        elif part != current[current_index]:
            return None
        else:
            static_count += 1
        route_index += 1
        current_index += 1
    exact = current_index == len(current)
    return exact, wildcard, static_count, param_count, current_index


def match_route_path(route_path: str, current_path: str) -> RoutePathMatch | None:
    """
    Score a route path against the current path.

    Absolute paths match from the start; relative paths may match starting
    at any segment, with later starts scoring higher.
    """
    trimmed = route_path.strip()
    if not trimmed:
        return None
    current = split_path(current_path)
    absolute = trimmed.startswith("/")
    route_segments = split_path(trimmed) if absolute else _relative_segments(trimmed)
    if not route_segments and not absolute:
        return None
    starts = [0] if absolute else range(len(current) + 1)

    best: RoutePathMatch | None = None
    for start in starts:
        matched = _try_match_from(route_segments, current, start)
        if matched is None:
            continue
        exact, wildcard, static_count, param_count, current_index = matched
        score = (
            (EXACT_SCORE if exact else 0)
            + static_count * STATIC_SCORE
            + param_count * PARAM_SCORE
            + (current_index - start) * CONSUMED_SCORE
            + (WILDCARD_PENALTY if wildcard else 0)
            + (0 if absolute else start * RELATIVE_START_SCORE)
        )
        if best is None or score > best.score:
            best = RoutePathMatch(
                score=score,
                consumed_until=current_index,
                matched_path=join_path(current[:current_index]),
            )
    return best


@dataclass(frozen=True)
class RouteCandidate:
    """Route-relevant props of one child of a route node."""

    path: str | None = None
    index: bool = False
    fallback: bool = False


@dataclass(frozen=True)
class RouteSelection:
    """Selected child position and the path its nested routes inherit."""

    position: int | None
    remainder: str = "/"
    matched_path: str = "/"
    kind: str = "none"


def select_route_child(candidates: Sequence[RouteCandidate], current_path: str) -> RouteSelection:
    """
    Select which child of a route node renders for `current_path`.

    Path children compete by score; an index child is chosen only when the
    current path is empty; a fallback child is used when nothing else
    matches.
    """
    current = split_path(current_path)
    best_position: int | None = None
    best: RoutePathMatch | None = None
    best_score = -math.inf
    for position, candidate in enumerate(candidates):
        if candidate.fallback or candidate.index or not candidate.path:
            continue
        matched = match_route_path(candidate.path, current_path)
        if matched is not None and matched.score > best_score:
            best_position, best, best_score = position, matched, matched.score
    if best is not None and best_position is not None:
        return RouteSelection(
            position=best_position,
            remainder=join_path(current[best.consumed_until :]),
            matched_path=best.matched_path,
            kind="path",
        )
    if not current:
        for position, candidate in enumerate(candidates):
            if candidate.index and not candidate.fallback:
                return RouteSelection(position=position, kind="index")
    for position, candidate in enumerate(candidates):
        if candidate.fallback:
            return RouteSelection(position=position, remainder=join_path(current), kind="fallback")
    return RouteSelection(position=None, remainder=join_path(current))
