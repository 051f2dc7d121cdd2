"""
Live renderer.

Renders canonical IR into a ViewElement tree with every reference
resolved, and dispatches user events back through a single delegated
entry point. Any state change marks the renderer dirty and notifies
subscribers; the next `render()` is always a complete re-resolution.
"""

import html
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mirkit.adapters.base import VOID_ELEMENTS
from mirkit.adapters.icons import IconProviderState, IconProviderStatus, pending_icon_provider
from mirkit.adapters.registry import ComponentRegistry
from mirkit.core.actions import (
    ActionEffect,
    execute_built_in_action,
    is_built_in_action,
    to_react_event_name,
)
from mirkit.core.canonical_ir import normalize
from mirkit.core.resolver import DEFAULT_MAX_DEPTH, ValueRefContext, resolve_deep, resolve_one
from mirkit.core.routing import RouteCandidate, select_route_child
from mirkit.core.scope import plan_list, resolve_data_scope
from mirkit.runtime.capabilities import resolve_link_capability
from mirkit.runtime.view import FRAGMENT, ViewElement
from mirkit.specs.canonical import CanonicalEvent, CanonicalIRDocument, CanonicalNode
from mirkit.specs.diagnostics import Diagnostic
from mirkit.specs.document import MIRDocument

logger = logging.getLogger(__name__)

ROUTE_NODE_TYPE = "MdrRoute"
ROUTE_PATH_PROP = "data-route-path"
ROUTE_INDEX_PROP = "data-route-index"
ROUTE_FALLBACK_PROP = "data-route-fallback"
MOUNTED_CSS_PROP = "mountedCss"
INCREMENT_ACTION = "increment"


class RenderMode(str, Enum):
    STRICT = "strict"
    TOLERANT = "tolerant"


# =============================================================================
# Results
# =============================================================================


@dataclass
class ActionContext:
    """Passed to custom and overridden built-in action handlers."""

    action: str
    node_id: str
    trigger: str
    event_key: str
    params: dict[str, Any]
    payload: Any
    state: dict[str, Any]
    doc_params: Mapping[str, Any]
    set_state: Callable[[Mapping[str, Any]], None]


ActionHandler = Callable[[ActionContext], None]


@dataclass
class RenderResult:
    tree: ViewElement
    diagnostics: list[Diagnostic] = field(default_factory=list)
    pending_icon_providers: list[str] = field(default_factory=list)
    mounted_css: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class DispatchResult:
    """What a dispatched event did."""

    target_id: str | None = None
    selected_id: str | None = None
    selection_changed: bool = False
    handled_by: str | None = None
    actions: list[str] = field(default_factory=list)
    effects: list[ActionEffect] = field(default_factory=list)
    prevent_default: bool = False
    state_changed: bool = False

    @property
    def fired(self) -> bool:
        return bool(self.actions)


@dataclass(frozen=True)
class _Frame:
    values: ValueRefContext
    route_path: str | None = None


def pick_increment_target(state: Mapping[str, Any]) -> str | None:
    """State key `increment` bumps: `count` when numeric, else the first numeric key."""
    def numeric(value: Any) -> bool:
        return isinstance(value, int | float) and not isinstance(value, bool)

    if numeric(state.get("count")):
        return "count"
    for key, value in state.items():
        if numeric(value):
            return key
    return None


def _matches_trigger(event: CanonicalEvent, trigger: str) -> bool:
    return to_react_event_name(event.trigger) == to_react_event_name(trigger)


# =============================================================================
# Renderer
# =============================================================================


class LiveRenderer:
    """
    Renders one document and owns its state.

    Example:
        renderer = LiveRenderer(doc, params={"title": "Hi"}, actions={"save": save})
        result = renderer.render()
        renderer.click("save-button")
        result = renderer.render()
    """

    def __init__(
        self,
        document: MIRDocument | CanonicalIRDocument | Mapping[str, Any],
        *,
        params: Mapping[str, Any] | None = None,
        registry: ComponentRegistry | None = None,
        actions: Mapping[str, ActionHandler] | None = None,
        built_in_actions: Mapping[str, ActionHandler] | None = None,
        render_mode: RenderMode = RenderMode.TOLERANT,
        allow_external_props: bool = True,
        require_selection_before_events: bool = False,
        selectable: bool = False,
        preview: bool = False,
        current_path: str = "/",
        outlets: Mapping[str, ViewElement | Sequence[ViewElement]] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        on_select: Callable[[str], None] | None = None,
        on_effect: Callable[[ActionEffect], None] | None = None,
    ):
        if isinstance(document, CanonicalIRDocument):
            self.document = document
            self._build_diagnostics: list[Diagnostic] = []
        else:
            build = normalize(document)
            self.document = build.document
            self._build_diagnostics = list(build.diagnostics)

        self.registry = registry or ComponentRegistry.default()
        self.actions = dict(actions or {})
        self.built_in_actions = dict(built_in_actions or {})
        self.render_mode = RenderMode(render_mode)
        self.require_selection_before_events = require_selection_before_events
        self.selectable = selectable or on_select is not None
        self.preview = preview
        self.current_path = current_path
        self.outlets = dict(outlets or {})
        self.max_depth = max_depth
        self.on_select = on_select
        self.on_effect = on_effect

        self.params = self._initial_params(params if allow_external_props else None)
        self.state = self._initial_state()
        self.selected_id: str | None = None
        self.dirty = True

        self._listeners: list[Callable[[], None]] = []
        self._diagnostics: dict[tuple[str, str | None], Diagnostic] = {}
        self._pending: list[str] = []
        self._mounted_css: list[dict[str, Any]] = []
        self._last: RenderResult | None = None
        self._parents: dict[int, ViewElement] = {}
        self._unsubscribe_icons: Callable[[], None] | None = None
        icon_registry = self.registry.icon_registry
        if icon_registry is not None:
            self._unsubscribe_icons = icon_registry.subscribe(self._on_icon_state)

    def _initial_params(self, overrides: Mapping[str, Any] | None) -> dict[str, Any]:
        params: dict[str, Any] = {}
        logic = self.document.logic
        if logic is not None:
            for name, definition in logic.props.items():
                if definition.has_default:
                    params[name] = definition.default
        params.update(overrides or {})
        return params

    def _initial_state(self) -> dict[str, Any]:
        logic = self.document.logic
        if logic is None:
            return {}
        return {name: definition.initial for name, definition in logic.state.items()}

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call `listener` whenever a re-render is needed; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def invalidate(self) -> None:
        self.dirty = True
        for listener in list(self._listeners):
            listener()

    def _on_icon_state(self, state: IconProviderState) -> None:
        if state.status in (IconProviderStatus.READY, IconProviderStatus.ERROR):
            logger.debug("Icon provider %s is %s; re-rendering", state.id, state.status.value)
            self.invalidate()

    def close(self) -> None:
        if self._unsubscribe_icons is not None:
            self._unsubscribe_icons()
            self._unsubscribe_icons = None
        self._listeners.clear()

    def set_state(self, updates: Mapping[str, Any]) -> None:
        changed = {k: v for k, v in updates.items() if self.state.get(k, object()) != v}
        if not changed:
            return
        self.state = {**self.state, **changed}
        self.invalidate()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> RenderResult:
        self._diagnostics = {(d.code, d.path): d for d in self._build_diagnostics}
        self._pending = []
        self._mounted_css = []
        frame = _Frame(values=ValueRefContext(params=self.params, state=self.state))
        tree = self._render_node(self.document.root, frame)

        self._parents = {}
        for element in tree.iter():
            for child in element.children:
                self._parents[id(child)] = element

        self._last = RenderResult(
            tree=tree,
            diagnostics=list(self._diagnostics.values()),
            pending_icon_providers=self._pending,
            mounted_css=self._mounted_css,
        )
        self.dirty = False
        return self._last

    def _collect(self, diagnostics: Sequence[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self._diagnostics.setdefault((diagnostic.code, diagnostic.path), diagnostic)

    def _render_node(self, node: CanonicalNode, frame: _Frame) -> ViewElement:
        scope = resolve_data_scope(node.data, frame.values, preview=self.preview, max_depth=self.max_depth)
        values = frame.values.with_data(scope)
        frame = _Frame(values=values, route_path=frame.route_path)

        resolution = self.registry.resolve(node)
        self._collect(resolution.diagnostics)
        icon_registry = self.registry.icon_registry
        if icon_registry is not None:
            pending = pending_icon_provider(node, icon_registry)
            if pending and pending not in self._pending:
                self._pending.append(pending)

        props: dict[str, Any] = {}
        for key, value in node.props.items():
            if key in resolution.omit_props:
                continue
            if key == MOUNTED_CSS_PROP:
                entries = resolve_deep(value, values, self.max_depth)
                if isinstance(entries, list):
                    self._mounted_css.extend(e for e in entries if isinstance(e, Mapping))
                continue
            props[key] = resolve_deep(value, values, self.max_depth)
        style = resolve_deep(node.style, values, self.max_depth)

        if self.render_mode == RenderMode.STRICT and resolution.fallback:
            props["data-mir-missing"] = "true"
            props["data-mir-type"] = node.type
        if self.selectable:
            props["data-mir-id"] = node.id
            if self.selected_id == node.id:
                props["data-mir-selected"] = "true"

        events = {
            key: event.model_copy(
                update={"params": resolve_deep(event.params, values, self.max_depth)}
            )
            for key, event in node.events.items()
        }

        element = ViewElement(
            element=resolution.element,
            node_id=node.id,
            node_type=node.type,
            props=props,
            style=style,
            events=events,
        )
        if resolution.element.lower() in VOID_ELEMENTS:
            return element

        text = resolve_one(node.text, values)
        element.text = html.unescape(text) if isinstance(text, str) else text

        if node.id in self.outlets:
            mounted = self.outlets[node.id]
            element.children = [mounted] if isinstance(mounted, ViewElement) else list(mounted)
        elif node.type == ROUTE_NODE_TYPE:
            element.children = self._render_route(node, frame)
        elif node.list_ is not None:
            element.children = self._render_list(node, scope, frame)
        else:
            element.children = [self._render_node(child, frame) for child in node.children]
        return element

    def _render_list(self, node: CanonicalNode, scope: Any, frame: _Frame) -> list[ViewElement]:
        plan = plan_list(node.list_, scope, frame.values)
        if plan.is_empty:
            if plan.empty_node_id is None:
                return []
            empty_node = self.document.get_node(plan.empty_node_id)
            if empty_node is None:
                logger.debug("List %s names missing empty node %s", node.id, plan.empty_node_id)
                return []
            return [self._render_node(empty_node, frame)]

        template = [child for child in node.children if child.id != plan.empty_node_id]
        return [
            ViewElement(
                element=FRAGMENT,
                key=entry.key,
                children=[
                    self._render_node(child, _Frame(entry.context, frame.route_path))
                    for child in template
                ],
            )
            for entry in plan.entries
        ]

    def _render_route(self, node: CanonicalNode, frame: _Frame) -> list[ViewElement]:
        explicit = resolve_one(node.props.get("currentPath"), frame.values)
        if isinstance(explicit, str) and explicit.strip():
            current_path = explicit
        elif frame.route_path is not None:
            current_path = frame.route_path
        else:
            current_path = self.current_path

        candidates = []
        for child in node.children:
            path = resolve_one(child.props.get(ROUTE_PATH_PROP), frame.values)
            candidates.append(
                RouteCandidate(
                    path=path if isinstance(path, str) else None,
                    index=child.props.get(ROUTE_INDEX_PROP) is True,
                    fallback=child.props.get(ROUTE_FALLBACK_PROP) is True,
                )
            )
        selection = select_route_child(candidates, current_path)
        if selection.position is None:
            empty_text = resolve_one(node.props.get("emptyText"), frame.values)
            if not empty_text:
                return []
            return [ViewElement(element="div", props={"className": "MdrRouteEmpty"}, text=empty_text)]

        child = node.children[selection.position]
        return [self._render_node(child, _Frame(frame.values, selection.remainder))]

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _target_element(self, target: str | ViewElement) -> ViewElement | None:
        if isinstance(target, ViewElement):
            return target
        last = self.render() if self._last is None or self.dirty else self._last
        return last.tree.find(target)

    def _ancestry(self, element: ViewElement) -> list[ViewElement]:
        chain = [element]
        while id(chain[-1]) in self._parents:
            chain.append(self._parents[id(chain[-1])])
        return chain

    def click(self, target: str | ViewElement, payload: Any = None) -> DispatchResult:
        return self.dispatch("click", target, payload)

    def dispatch(self, trigger: str, target: str | ViewElement, payload: Any = None) -> DispatchResult:
        """
        Dispatch an event at a rendered element.

        Walks up from the target to the nearest node declaring a matching
        trigger and fires its events. Clicks also select the target node;
        with `require_selection_before_events`, a click on an unselected
        node only selects it.
        """
        result = DispatchResult()
        element = self._target_element(target)
        if element is None:
            logger.debug("Dispatch target %s is not rendered", target)
            return result
        chain = [e for e in self._ancestry(element) if e.node_id is not None]
        if not chain:
            return result
        result.target_id = chain[0].node_id

        is_click = to_react_event_name(trigger) == "onClick"
        if is_click:
            target_id = chain[0].node_id
            was_selected = self.selected_id == target_id
            if self.selectable:
                node = self.document.get_node(target_id)
                result.prevent_default = resolve_link_capability(node) is not None
            if not was_selected:
                self.selected_id = target_id
                result.selection_changed = True
                if self.on_select is not None:
                    self.on_select(target_id)
                if self.selectable:
                    self.invalidate()
            result.selected_id = self.selected_id
            if self.require_selection_before_events and not was_selected:
                return result

        state_before = self.state
        for candidate in chain:
            matching = [
                (key, event)
                for key, event in candidate.events.items()
                if _matches_trigger(event, trigger)
            ]
            if not matching:
                continue
            result.handled_by = candidate.node_id
            for key, event in matching:
                if event.action:
                    self._run_action(event, key, candidate.node_id, trigger, payload, result)
            break
        result.state_changed = self.state is not state_before
        return result

    def _run_action(
        self,
        event: CanonicalEvent,
        event_key: str,
        node_id: str,
        trigger: str,
        payload: Any,
        result: DispatchResult,
    ) -> None:
        action = event.action or ""
        result.actions.append(action)
        context = ActionContext(
            action=action,
            node_id=node_id,
            trigger=trigger,
            event_key=event_key,
            params=dict(event.params),
            payload=payload,
            state=dict(self.state),
            doc_params=self.params,
            set_state=self.set_state,
        )

        override = self.built_in_actions.get(action)
        if override is not None:
            override(context)
            return
        if is_built_in_action(action):
            effect = execute_built_in_action(action, event.params, node_id=node_id, trigger=trigger)
            if effect is not None:
                result.effects.append(effect)
                if self.on_effect is not None:
                    self.on_effect(effect)
            return

        handler = self.actions.get(action)
        if handler is not None:
            handler(context)
            return
        param_action = self.params.get(action)
        if callable(param_action):
            param_action(payload)
            return
        if action == INCREMENT_ACTION:
            key = pick_increment_target(self.state)
            if key is not None:
                self.set_state({key: self.state[key] + 1})
            return
        logger.debug("No handler for action %s on %s", action, node_id)


def render_document(
    document: MIRDocument | CanonicalIRDocument | Mapping[str, Any], **options: Any
) -> RenderResult:
    """Render a document once with the given LiveRenderer options."""
    renderer = LiveRenderer(document, **options)
    try:
        return renderer.render()
    finally:
        renderer.close()
