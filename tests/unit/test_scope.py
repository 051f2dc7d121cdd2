"""Tests for data scopes and list planning."""

from mirkit.core.resolver import ValueRefContext
from mirkit.core.scope import plan_list, resolve_data_scope, resolve_list_source
from mirkit.specs.document import NodeDataScope, NodeListRender


class TestResolveDataScope:
    """Tests for resolve_data_scope."""

    def test_no_declaration_inherits(self) -> None:
        """Nodes without a data declaration see the inherited scope."""
        context = ValueRefContext(data={"a": 1})
        assert resolve_data_scope(None, context) == {"a": 1}

    def test_source_reference(self) -> None:
        """A source reference selects the live scope."""
        context = ValueRefContext(params={"user": {"name": "Ada"}})
        data = NodeDataScope(source={"$param": "user"})
        assert resolve_data_scope(data, context) == {"name": "Ada"}

    def test_value_used_when_source_missing(self) -> None:
        """A design-time value stands in when the source resolves to nothing."""
        data = NodeDataScope(source={"$param": "user"}, value={"name": "Draft"})
        assert resolve_data_scope(data, ValueRefContext()) == {"name": "Draft"}

    def test_mock_preferred_in_preview(self) -> None:
        """Preview rendering prefers mock over value."""
        data = NodeDataScope(value={"name": "Value"}, mock={"name": "Mock"})
        assert resolve_data_scope(data, ValueRefContext(), preview=True) == {"name": "Mock"}
        assert resolve_data_scope(data, ValueRefContext()) == {"name": "Value"}

    def test_declared_source_does_not_inherit(self) -> None:
        """An unresolved source without literals yields None, not the parent scope."""
        data = NodeDataScope(source={"$param": "missing"})
        assert resolve_data_scope(data, ValueRefContext(data={"a": 1})) is None

    def test_extend_overrides_keys(self) -> None:
        """extend is shallow-merged over the scope and may use references."""
        context = ValueRefContext(data={"a": 1, "b": 2}, state={"count": 9})
        data = NodeDataScope(extend={"b": 3, "count": {"$state": "count"}})
        assert resolve_data_scope(data, context) == {"a": 1, "b": 3, "count": 9}

    def test_extend_over_non_mapping_scope(self) -> None:
        """extend over a non-mapping scope starts from an empty mapping."""
        data = NodeDataScope(extend={"b": 3})
        assert resolve_data_scope(data, ValueRefContext(data=[1, 2])) == {"b": 3}

    def test_pick_narrows(self) -> None:
        """pick selects a path within the scope."""
        context = ValueRefContext(params={"page": {"user": {"profile": {"age": 30}}}})
        data = NodeDataScope(source={"$param": "page"}, pick="user.profile")
        assert resolve_data_scope(data, context) == {"age": 30}

    def test_index_is_not_a_source(self) -> None:
        """$index cannot name a scope source; the scope is inherited."""
        data = NodeDataScope(source={"$index": True})
        assert resolve_data_scope(data, ValueRefContext(data="parent", index=3)) == "parent"


class TestPlanList:
    """Tests for plan_list."""

    def test_keyed_entries(self) -> None:
        """Two items keyed by id produce two entries with those keys."""
        config = NodeListRender(source={"$param": "users"}, key_by="id")
        context = ValueRefContext(params={"users": [{"id": "a"}, {"id": "b"}]})
        plan = plan_list(config, None, context)
        assert [entry.key for entry in plan.entries] == ["a", "b"]
        assert [entry.index for entry in plan.entries] == [0, 1]
        assert not plan.is_empty

    def test_index_keys_without_key_by(self) -> None:
        """Un-keyed items use their index, which follows position not identity."""
        config = NodeListRender(source={"$param": "items"})
        plan = plan_list(config, None, ValueRefContext(params={"items": ["x", "y"]}))
        assert [entry.key for entry in plan.entries] == [0, 1]
        reordered = plan_list(config, None, ValueRefContext(params={"items": ["y", "x"]}))
        assert [entry.key for entry in reordered.entries] == [0, 1]

    def test_missing_key_falls_back_to_index(self) -> None:
        """Items without the keyBy field use their index."""
        config = NodeListRender(source={"$param": "items"}, key_by="id")
        plan = plan_list(config, None, ValueRefContext(params={"items": [{"id": "a"}, {}]}))
        assert [entry.key for entry in plan.entries] == ["a", 1]

    def test_non_array_source_is_empty(self) -> None:
        """A non-array source yields an empty plan carrying the empty node id."""
        config = NodeListRender(source={"$param": "users"}, empty_node_id="empty")
        plan = plan_list(config, None, ValueRefContext(params={"users": {"not": "a list"}}))
        assert plan.is_empty
        assert plan.empty_node_id == "empty"

    def test_entry_contexts_carry_item_and_aliases(self) -> None:
        """Each entry context exposes $item, $index and the aliases."""
        config = NodeListRender(source={"$param": "users"}, item_as="user", index_as="i")
        plan = plan_list(config, {"title": "T"}, ValueRefContext(params={"users": ["Ada"]}))
        context = plan.entries[0].context
        assert context.item == "Ada"
        assert context.index == 0
        assert context.data == {"title": "T", "user": "Ada", "i": 0}

    def test_array_field_source(self) -> None:
        """arrayField reads the array from the scope."""
        config = NodeListRender(array_field="rows")
        assert resolve_list_source(config, {"rows": [1, 2]}, ValueRefContext()) == [1, 2]

    def test_scope_itself_as_source(self) -> None:
        """Without source or arrayField, the scope itself is iterated."""
        plan = plan_list(NodeListRender(), [1, 2, 3], ValueRefContext())
        assert len(plan.entries) == 3
