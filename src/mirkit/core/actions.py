"""
Built-in actions.

`navigate` and `executeGraph` are understood by both consumers of the
canonical IR: the live renderer turns them into ActionEffect records for
the host to apply, and the code generator inlines equivalent handlers.
"""

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

NAVIGATE_ACTION = "navigate"
EXECUTE_GRAPH_ACTION = "executeGraph"
BUILT_IN_ACTIONS: tuple[str, ...] = (NAVIGATE_ACTION, EXECUTE_GRAPH_ACTION)

EXECUTE_GRAPH_EVENT = "mdr:execute-graph"
CUSTOM_ACTION_EVENT = "mdr:action"

# React handler prop names for the DOM triggers an event can bind to
DOM_EVENT_TRIGGERS: tuple[str, ...] = (
    "onClick",
    "onDoubleClick",
    "onMouseEnter",
    "onMouseLeave",
    "onFocus",
    "onBlur",
    "onChange",
    "onInput",
    "onSubmit",
    "onKeyDown",
    "onKeyUp",
)

NavigateTarget = Literal["_self", "_blank"]


def is_built_in_action(action: str | None) -> bool:
    return action in BUILT_IN_ACTIONS


def create_default_action_params(action: str) -> dict[str, Any]:
    if action == EXECUTE_GRAPH_ACTION:
        return {"graphMode": "new", "graphName": "", "graphId": ""}
    return {"to": "", "target": "_blank", "replace": False, "state": ""}


def to_react_event_name(trigger: str) -> str:
    """
    Map a trigger to its React handler prop name.

    Example:
        to_react_event_name("click")        # "onClick"
        to_react_event_name("double-click") # "onDoubleClick"
        to_react_event_name("onChange")     # "onChange"
    """
    if trigger.startswith("on") and len(trigger) > 2 and trigger[2].isupper():
        return trigger
    parts = [part for part in trigger.replace("_", "-").split("-") if part]
    if parts == ["dblclick"]:
        parts = ["double", "click"]
    name = "on" + "".join(part[:1].upper() + part[1:] for part in parts)
    for candidate in DOM_EVENT_TRIGGERS:
        if candidate.lower() == name.lower():
            return candidate
    return name


def get_navigate_link_kind(to: str) -> Literal["external", "internal"] | None:
    if to.startswith("https://"):
        return "external"
    if to.startswith("/"):
        return "internal"
    return None


class NavigateTargetResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    configured_target: NavigateTarget
    effective_target: NavigateTarget
    opened_as_blank_for_safety: bool = False


def resolve_navigate_target(
    raw_target: Any, force_blank_for_external_safety: bool = False
) -> NavigateTargetResolution:
    configured: NavigateTarget = "_self" if raw_target == "_self" else "_blank"
    if force_blank_for_external_safety:
        return NavigateTargetResolution(
            configured_target=configured,
            effective_target="_blank",
            opened_as_blank_for_safety=configured == "_self",
        )
    return NavigateTargetResolution(configured_target=configured, effective_target=configured)


def parse_navigation_state(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


# =============================================================================
# Effects
# =============================================================================


class ActionEffectKind(str, Enum):
    OPEN_WINDOW = "open-window"
    LOCATION_ASSIGN = "location-assign"
    LOCATION_REPLACE = "location-replace"
    HISTORY_PUSH = "history-push"
    HISTORY_REPLACE = "history-replace"
    BROADCAST = "broadcast"


class ActionEffect(BaseModel):
    """
    Side effect requested by a built-in action, applied by the host.

    Example:
        ActionEffect(kind=ActionEffectKind.HISTORY_PUSH, url="/users", node_id="link")
    """

    model_config = ConfigDict(frozen=True)

    kind: ActionEffectKind
    node_id: str
    trigger: str
    url: str | None = None
    state: Any = None
    event_name: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)
    requires_confirmation: bool = Field(
        default=False, description="External links must be confirmed by the user first"
    )


def execute_built_in_action(
    action: str,
    params: Mapping[str, Any] | None,
    *,
    node_id: str,
    trigger: str,
) -> ActionEffect | None:
    """Translate a built-in action into the effect it requests, or None for a no-op."""
    params = dict(params or {})
    if action == EXECUTE_GRAPH_ACTION:
        return ActionEffect(
            kind=ActionEffectKind.BROADCAST,
            node_id=node_id,
            trigger=trigger,
            event_name=EXECUTE_GRAPH_EVENT,
            detail=params,
        )
    if action != NAVIGATE_ACTION:
        return None

    to = params.get("to").strip() if isinstance(params.get("to"), str) else ""
    if not to:
        return None
    target = resolve_navigate_target(params.get("target")).effective_target
    replace = bool(params.get("replace"))
    state = parse_navigation_state(params.get("state"))
    link_kind = get_navigate_link_kind(to)

    if link_kind == "external":
        if target == "_blank":
            kind = ActionEffectKind.OPEN_WINDOW
        elif replace:
            kind = ActionEffectKind.LOCATION_REPLACE
        else:
            kind = ActionEffectKind.LOCATION_ASSIGN
        return ActionEffect(
            kind=kind, node_id=node_id, trigger=trigger, url=to, requires_confirmation=True
        )
    if link_kind == "internal":
        kind = ActionEffectKind.HISTORY_REPLACE if replace else ActionEffectKind.HISTORY_PUSH
        return ActionEffect(kind=kind, node_id=node_id, trigger=trigger, url=to, state=state)
    return None
