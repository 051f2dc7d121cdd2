"""Tests for the live renderer."""

from typing import Any

import pytest

from mirkit.adapters.icons import IconProvider, IconProviderRegistry
from mirkit.adapters.registry import ComponentRegistry
from mirkit.core.actions import ActionEffectKind
from mirkit.runtime import FRAGMENT, ActionContext, LiveRenderer, RenderMode, ViewElement, render_document


def _doc(*children: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {
        "version": "1.2",
        "ui": {"root": {"id": "root", "type": "container", "children": list(children)}},
        **extra,
    }


def _button(action: str, params: dict[str, Any] | None = None, node_id: str = "btn") -> dict[str, Any]:
    event: dict[str, Any] = {"trigger": "click", "action": action}
    if params is not None:
        event["params"] = params
    return {"id": node_id, "type": "MdrButton", "text": "Go", "events": {"click": event}}


class TestRendering:
    """Tests for tree construction and reference resolution."""

    def test_counter_initial_render(self, counter_document: dict) -> None:
        """Params take their defaults and state its initial values."""
        tree = LiveRenderer(counter_document).render().tree
        assert tree.element == "div"
        assert tree.find("title").text == "Hello"
        assert tree.find("count").text == 0
        assert tree.find("inc").element == "MdrButton"

    def test_external_params_override_defaults(self, counter_document: dict) -> None:
        """Supplied params win over declared defaults."""
        tree = LiveRenderer(counter_document, params={"title": "Hi"}).render().tree
        assert tree.find("title").text == "Hi"

    def test_external_params_can_be_disabled(self, counter_document: dict) -> None:
        """With external props disabled only declared defaults apply."""
        renderer = LiveRenderer(counter_document, params={"title": "Hi"}, allow_external_props=False)
        assert renderer.render().tree.find("title").text == "Hello"

    def test_props_and_style_resolved(self) -> None:
        """References inside props and style resolve against the context."""
        doc = _doc(
            {
                "id": "box",
                "type": "div",
                "props": {"title": {"$param": "label"}, "data": {"n": [{"$state": "n"}]}},
                "style": {"color": {"$param": "color"}},
            },
            logic={"state": {"n": {"initial": 3}}},
        )
        box = LiveRenderer(doc, params={"label": "L", "color": "red"}).render().tree.find("box")
        assert box.props == {"title": "L", "data": {"n": [3]}}
        assert box.style == {"color": "red"}

    def test_html_entities_decoded(self) -> None:
        """Literal text has HTML entities decoded."""
        tree = LiveRenderer(_doc({"id": "t", "type": "p", "text": "Tom &amp; Jerry"})).render().tree
        assert tree.find("t").text == "Tom & Jerry"

    def test_void_elements_have_no_children(self) -> None:
        """Void elements drop text and children."""
        doc = _doc({"id": "in", "type": "input", "text": "x", "children": [{"id": "c", "type": "span"}]})
        element = LiveRenderer(doc).render().tree.find("in")
        assert element.text is None
        assert element.children == []

    def test_data_scope(self) -> None:
        """Nodes read $data from their resolved scope."""
        doc = _doc(
            {
                "id": "card",
                "type": "section",
                "data": {"source": {"$param": "user"}, "extend": {"role": "admin"}},
                "children": [
                    {"id": "name", "type": "span", "text": {"$data": "name"}},
                    {"id": "role", "type": "span", "text": {"$data": "role"}},
                ],
            }
        )
        tree = LiveRenderer(doc, params={"user": {"name": "Ada"}}).render().tree
        assert tree.find("name").text == "Ada"
        assert tree.find("role").text == "admin"

    def test_preview_prefers_mock(self) -> None:
        """Preview rendering uses mock data over the design-time value."""
        doc = _doc(
            {
                "id": "card",
                "type": "section",
                "data": {"value": {"name": "Value"}, "mock": {"name": "Mock"}},
                "children": [{"id": "name", "type": "span", "text": {"$data": "name"}}],
            }
        )
        assert LiveRenderer(doc).render().tree.find("name").text == "Value"
        assert LiveRenderer(doc, preview=True).render().tree.find("name").text == "Mock"

    def test_outlets(self) -> None:
        """Outlet nodes render the mounted content instead of their children."""
        doc = _doc({"id": "main", "type": "main", "children": [{"id": "placeholder", "type": "p"}]})
        page = ViewElement(element="p", text="page")
        tree = LiveRenderer(doc, outlets={"main": page}).render().tree
        assert tree.find("main").children == [page]
        assert tree.find("placeholder") is None

    def test_render_document_helper(self, counter_document: dict) -> None:
        """render_document renders once with the given options."""
        result = render_document(counter_document, params={"title": "Once"})
        assert result.tree.find("title").text == "Once"

    def test_to_dict(self, counter_document: dict) -> None:
        """Serialized trees omit empty fields and callables."""
        data = LiveRenderer(counter_document, params={"onSave": lambda p: None}).render().tree.to_dict()
        assert data["nodeId"] == "root"
        assert data["children"][0] == {"element": "MdrText", "nodeId": "title", "text": "Hello"}
        assert data["children"][2]["events"]["click"]["action"] == "increment"


class TestLists:
    """Tests for list expansion."""

    def test_keyed_fragments(self, list_document: dict) -> None:
        """Each item renders in a fragment keyed by keyBy."""
        users = LiveRenderer(list_document).render().tree.find("users")
        assert [child.element for child in users.children] == [FRAGMENT, FRAGMENT]
        assert [child.key for child in users.children] == ["u1", "u2"]
        rows = [fragment.children[0] for fragment in users.children]
        assert [row.text for row in rows] == ["Alpha", "Beta"]
        assert all(len(fragment.children) == 1 for fragment in users.children)

    def test_item_alias(self) -> None:
        """itemAs exposes the item under its alias in the data scope."""
        doc = _doc(
            {
                "id": "list",
                "type": "ul",
                "list": {"source": {"$param": "xs"}, "itemAs": "row", "indexAs": "i"},
                "children": [
                    {"id": "a", "type": "li", "text": {"$data": "row.label"}},
                    {"id": "b", "type": "li", "text": {"$index": True}},
                ],
            }
        )
        tree = LiveRenderer(doc, params={"xs": [{"label": "one"}, {"label": "two"}]}).render().tree
        assert [e.text for e in tree.find_all("a")] == ["one", "two"]
        assert [e.text for e in tree.find_all("b")] == [0, 1]
        assert [f.key for f in tree.find("list").children] == [0, 1]

    @pytest.mark.parametrize("users", [[], "not-a-list", None])
    def test_empty_node(self, list_document: dict, users: Any) -> None:
        """Empty or non-array sources render only the empty node."""
        users_el = LiveRenderer(list_document, params={"users": users}).render().tree.find("users")
        assert [child.node_id for child in users_el.children] == ["empty"]
        assert users_el.children[0].text == "No users"

    def test_click_inside_list_item(self, list_document: dict) -> None:
        """Events dispatched at a list item resolve to that node."""
        renderer = LiveRenderer(list_document)
        row = renderer.render().tree.find_all("user-row")[1]
        result = renderer.click(row)
        assert result.target_id == "user-row"
        assert result.selected_id == "user-row"


class TestRoutes:
    """Tests for MdrRoute child selection."""

    @staticmethod
    def _route_doc() -> dict[str, Any]:
        return _doc(
            {
                "id": "route",
                "type": "MdrRoute",
                "props": {"emptyText": "Nothing here"},
                "children": [
                    {"id": "home", "type": "p", "text": "Home", "props": {"data-route-index": True}},
                    {"id": "users", "type": "p", "text": "Users", "props": {"data-route-path": "/users"}},
                    {"id": "lost", "type": "p", "text": "Lost", "props": {"data-route-fallback": True}},
                ],
            }
        )

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("/", "home"), ("/users", "users"), ("/nowhere", "lost")],
    )
    def test_selection(self, path: str, expected: str) -> None:
        """Path matches win, the index renders at the root, the fallback otherwise."""
        route = LiveRenderer(self._route_doc(), current_path=path).render().tree.find("route")
        assert [child.node_id for child in route.children] == [expected]

    @pytest.mark.parametrize(("path", "expected"), [("/users/42", "detail"), ("/users", "idx")])
    def test_nested_route_receives_remainder(self, path: str, expected: str) -> None:
        """A nested MdrRoute matches against what its ancestor route left unconsumed."""
        doc = _doc(
            {
                "id": "outer",
                "type": "MdrRoute",
                "children": [
                    {
                        "id": "users",
                        "type": "section",
                        "props": {"data-route-path": "/users"},
                        "children": [
                            {
                                "id": "inner",
                                "type": "MdrRoute",
                                "children": [
                                    {"id": "idx", "type": "p", "text": "All", "props": {"data-route-index": True}},
                                    {"id": "detail", "type": "p", "text": "One", "props": {"data-route-path": "/:id"}},
                                ],
                            }
                        ],
                    }
                ],
            }
        )
        tree = LiveRenderer(doc, current_path=path).render().tree
        assert [child.node_id for child in tree.find("inner").children] == [expected]

    def test_empty_text(self) -> None:
        """Without a match or fallback the empty text renders."""
        doc = self._route_doc()
        doc["ui"]["root"]["children"][0]["children"].pop()
        route = LiveRenderer(doc, current_path="/nowhere").render().tree.find("route")
        assert route.children[0].text == "Nothing here"
        assert route.children[0].node_id is None


class TestEvents:
    """Tests for event dispatch and actions."""

    def test_increment(self, counter_document: dict) -> None:
        """increment bumps the count state and marks the renderer dirty."""
        renderer = LiveRenderer(counter_document)
        renderer.render()
        notified: list[bool] = []
        renderer.subscribe(lambda: notified.append(True))

        result = renderer.click("inc")

        assert result.actions == ["increment"]
        assert result.state_changed
        assert renderer.state == {"count": 1}
        assert renderer.dirty
        assert notified
        assert renderer.render().tree.find("count").text == 1

    def test_events_bubble_to_ancestor(self) -> None:
        """A click on an element without handlers reaches the nearest handling ancestor."""
        calls: list[ActionContext] = []
        doc = _doc(
            {
                "id": "card",
                "type": "div",
                "events": {"open": {"trigger": "click", "action": "open"}},
                "children": [{"id": "label", "type": "span", "text": "x"}],
            }
        )
        renderer = LiveRenderer(doc, actions={"open": calls.append})
        result = renderer.click("label")
        assert result.target_id == "label"
        assert result.handled_by == "card"
        assert calls[0].node_id == "card"
        assert calls[0].event_key == "open"

    def test_require_selection_before_events(self) -> None:
        """The first click selects; only a click on the selected node fires."""
        calls: list[str] = []
        renderer = LiveRenderer(
            _doc(_button("save")),
            actions={"save": lambda ctx: calls.append(ctx.action)},
            require_selection_before_events=True,
        )
        first = renderer.click("btn")
        assert first.selection_changed
        assert not first.fired
        assert calls == []

        second = renderer.click("btn")
        assert not second.selection_changed
        assert calls == ["save"]

    def test_selectable_marks_selection(self) -> None:
        """Selectable renders tag nodes and mark the selected one."""
        selected: list[str] = []
        renderer = LiveRenderer(_doc(_button("noop")), on_select=selected.append)
        renderer.click("btn")
        btn = renderer.render().tree.find("btn")
        assert btn.props["data-mir-id"] == "btn"
        assert btn.props["data-mir-selected"] == "true"
        assert selected == ["btn"]

    def test_link_click_prevents_default_when_selectable(self) -> None:
        """Clicking a link-capable node in a selectable renderer suppresses navigation."""
        doc = _doc({"id": "link", "type": "MdrLink", "props": {"to": "/x"}})
        assert LiveRenderer(doc, selectable=True).click("link").prevent_default
        assert not LiveRenderer(doc).click("link").prevent_default

    def test_navigate_effect(self) -> None:
        """navigate produces an effect for the host."""
        effects = []
        renderer = LiveRenderer(
            _doc(_button("navigate", {"to": {"$param": "target"}})),
            params={"target": "/users"},
            on_effect=effects.append,
        )
        result = renderer.click("btn")
        assert [e.kind for e in result.effects] == [ActionEffectKind.HISTORY_PUSH]
        assert result.effects[0].url == "/users"
        assert effects == result.effects

    def test_execute_graph_effect(self) -> None:
        """executeGraph broadcasts its params."""
        result = LiveRenderer(_doc(_button("executeGraph", {"graphId": "g"}))).click("btn")
        assert result.effects[0].kind == ActionEffectKind.BROADCAST
        assert result.effects[0].detail == {"graphId": "g"}

    def test_built_in_override(self) -> None:
        """Overrides replace built-in behaviour."""
        calls: list[dict] = []
        renderer = LiveRenderer(
            _doc(_button("navigate", {"to": "/a"})),
            built_in_actions={"navigate": lambda ctx: calls.append(ctx.params)},
        )
        result = renderer.click("btn")
        assert calls == [{"to": "/a"}]
        assert result.effects == []

    def test_custom_action_before_param_callable(self) -> None:
        """Registered actions win over callables passed as params."""
        order: list[str] = []
        renderer = LiveRenderer(
            _doc(_button("save")),
            actions={"save": lambda ctx: order.append("action")},
            params={"save": lambda payload: order.append("param")},
        )
        renderer.click("btn")
        assert order == ["action"]

    def test_param_callable_receives_payload(self) -> None:
        """Without a registered action, a callable param receives the payload."""
        received: list[Any] = []
        renderer = LiveRenderer(_doc(_button("save")), params={"save": received.append})
        renderer.click("btn", payload={"x": 1})
        assert received == [{"x": 1}]

    def test_handler_set_state(self) -> None:
        """Handlers update state through the context."""
        doc = _doc(_button("reset"), logic={"state": {"count": {"initial": 4}}})
        renderer = LiveRenderer(doc, actions={"reset": lambda ctx: ctx.set_state({"count": 0})})
        result = renderer.click("btn")
        assert result.state_changed
        assert renderer.state == {"count": 0}

    def test_unknown_action_is_noop(self) -> None:
        """Actions with no handler are recorded but change nothing."""
        result = LiveRenderer(_doc(_button("mystery"))).click("btn")
        assert result.actions == ["mystery"]
        assert not result.state_changed

    def test_trigger_matching(self) -> None:
        """Only events whose trigger matches fire."""
        doc = _doc(
            {
                "id": "field",
                "type": "input",
                "events": {"changed": {"trigger": "change", "action": "track"}},
            }
        )
        calls: list[str] = []
        renderer = LiveRenderer(doc, actions={"track": lambda ctx: calls.append(ctx.trigger)})
        assert not renderer.click("field").fired
        assert renderer.dispatch("onChange", "field").fired
        assert calls == ["onChange"]

    def test_missing_target(self, counter_document: dict) -> None:
        """Dispatching at an unknown id does nothing."""
        result = LiveRenderer(counter_document).click("nope")
        assert result.target_id is None


class TestModesAndAssets:
    """Tests for render modes, mounted CSS and deferred icons."""

    def test_strict_mode_marks_fallbacks(self) -> None:
        """Strict mode marks unresolved components; tolerant mode does not."""
        doc = _doc({"id": "w", "type": "FancyWidget"})
        strict = LiveRenderer(doc, render_mode=RenderMode.STRICT).render()
        element = strict.tree.find("w")
        assert element.element == "div"
        assert element.props["data-mir-missing"] == "true"
        assert element.props["data-mir-type"] == "FancyWidget"
        assert "REACT_ADAPTER_UNKNOWN_COMPONENT" in [d.code for d in strict.diagnostics]

        tolerant = LiveRenderer(doc).render().tree.find("w")
        assert "data-mir-missing" not in tolerant.props

    def test_build_diagnostics_reported(self) -> None:
        """Normalization diagnostics appear in every render result."""
        renderer = LiveRenderer(_doc({"type": "span"}))
        codes = [d.code for d in renderer.render().diagnostics]
        assert "CANONICAL_NODE_MISSING_ID" in codes
        assert [d.code for d in renderer.render().diagnostics] == codes

    def test_mounted_css_collected(self) -> None:
        """mountedCss entries are collected, not passed as props."""
        css = [{"path": "styles/card.css", "content": ".card { color: red; }"}]
        doc = _doc({"id": "card", "type": "div", "props": {"mountedCss": css, "id": "c"}})
        result = LiveRenderer(doc).render()
        assert result.mounted_css == css
        assert result.tree.find("card").props == {"id": "c"}

    @pytest.mark.asyncio
    async def test_icon_provider_ready_invalidates(self) -> None:
        """A deferred icon renders as a placeholder until its provider loads."""
        icons = IconProviderRegistry()

        async def load() -> IconProvider:
            return IconProvider(resolve=lambda name, variant: "PhHouse", import_source="@phosphor-icons/react")

        icons.register_loader("phosphor", load)
        doc = _doc(
            {"id": "icon", "type": "MdrIcon", "props": {"iconRef": {"provider": "phosphor", "name": "house"}}}
        )
        renderer = LiveRenderer(doc, registry=ComponentRegistry.default(icons=icons))
        first = renderer.render()
        assert first.pending_icon_providers == ["phosphor"]
        assert first.tree.find("icon").element == "span"
        assert not renderer.dirty

        await icons.ensure_ready("phosphor")

        assert renderer.dirty
        second = renderer.render()
        assert second.pending_icon_providers == []
        icon = second.tree.find("icon")
        assert icon.element == "PhHouse"
        assert "iconRef" not in icon.props
        renderer.close()


class TestMalformedLogic:
    """Tests for rendering documents with wrong-typed logic declarations."""

    def test_state_without_string_type_renders(self) -> None:
        """A state entry whose type is not a string still seeds its initial value."""
        doc = _doc(
            {"id": "count", "type": "span", "text": {"$state": "count"}},
            logic={"state": {"count": {"type": None, "initial": 0}}, "props": {"title": {"type": 3}}},
            metadata={"name": 5},
        )
        result = LiveRenderer(doc).render()
        assert result.tree.find("count").text == 0
        invalid = [d.path for d in result.diagnostics if d.code == "CANONICAL_DOCUMENT_FIELD_INVALID"]
        assert invalid == ["metadata.name", "logic.props.title.type"]
