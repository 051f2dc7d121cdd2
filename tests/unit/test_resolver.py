"""Tests for value references and reference resolution."""

from mirkit.core.resolver import (
    ValueRefContext,
    contains_ref,
    parse_path,
    read_value_by_path,
    resolve_deep,
    resolve_one,
)
from mirkit.specs.refs import (
    DataRef,
    IndexRef,
    ItemRef,
    ParamRef,
    StateRef,
    is_value_ref,
    parse_value_ref,
    reference_tags_in,
    to_raw_ref,
)


class TestParseValueRef:
    """Tests for parse_value_ref."""

    def test_each_tag(self) -> None:
        """Each single-key tag parses to its reference type."""
        assert parse_value_ref({"$param": "user.name"}) == ParamRef(path="user.name")
        assert parse_value_ref({"$state": "count"}) == StateRef(path="count")
        assert parse_value_ref({"$data": ""}) == DataRef(path="")
        assert parse_value_ref({"$item": "name"}) == ItemRef(path="name")
        assert parse_value_ref({"$index": True}) == IndexRef()

    def test_index_accepts_string_payload(self) -> None:
        """$index with a string payload is still an index reference."""
        assert parse_value_ref({"$index": "ignored"}) == IndexRef()
        assert parse_value_ref({"$index": 1}) is None

    def test_multiple_tags_are_literal(self) -> None:
        """Objects carrying two tags are not references."""
        value = {"$param": "a", "$state": "b"}
        assert parse_value_ref(value) is None
        assert reference_tags_in(value) == ["$param", "$state"]

    def test_extra_keys_are_literal(self) -> None:
        """A tag plus another key is a literal."""
        assert parse_value_ref({"$param": "a", "label": "x"}) is None

    def test_non_string_payload_is_literal(self) -> None:
        """A tag with a non-string path is a literal."""
        assert parse_value_ref({"$param": 3}) is None
        assert not is_value_ref({"$item": None})

    def test_non_mapping_is_literal(self) -> None:
        """Strings, lists and numbers are never references."""
        assert parse_value_ref("$param") is None
        assert parse_value_ref([{"$param": "a"}]) is None
        assert parse_value_ref(None) is None

    def test_to_raw_ref(self) -> None:
        """References serialize back to their document form."""
        assert to_raw_ref(ParamRef(path="title")) == {"$param": "title"}
        assert to_raw_ref(IndexRef()) == {"$index": True}


class TestPaths:
    """Tests for path parsing and reading."""

    def test_parse_path(self) -> None:
        """Dots and brackets split into string and integer tokens."""
        assert parse_path("users[0].name") == ["users", 0, "name"]
        assert parse_path("a.b.c") == ["a", "b", "c"]
        assert parse_path("") == []

    def test_read_nested(self) -> None:
        """Nested mappings and arrays are walked."""
        source = {"users": [{"name": "Alpha"}, {"name": "Beta"}]}
        assert read_value_by_path(source, "users[1].name") == "Beta"
        assert read_value_by_path(source, "users.0.name") == "Alpha"

    def test_empty_path_returns_source(self) -> None:
        """An empty path selects the source itself."""
        source = {"a": 1}
        assert read_value_by_path(source, "") is source
        assert read_value_by_path(source, None) is source

    def test_missing_segments_return_none(self) -> None:
        """Missing keys, out-of-range indexes and scalar cursors yield None."""
        source = {"users": [{"name": "Alpha"}], "count": 3}
        assert read_value_by_path(source, "missing.deeper") is None
        assert read_value_by_path(source, "users[5].name") is None
        assert read_value_by_path(source, "count.value") is None

    def test_array_rejects_named_tokens(self) -> None:
        """Array cursors only accept numeric tokens."""
        assert read_value_by_path({"users": [1, 2]}, "users.length") is None


class TestResolveOne:
    """Tests for resolve_one."""

    def test_item_reference(self) -> None:
        """$item reads from the current item."""
        context = ValueRefContext(item={"name": "Alpha"})
        assert resolve_one({"$item": "name"}, context) == "Alpha"

    def test_index_reference(self) -> None:
        """$index yields the current index."""
        assert resolve_one({"$index": True}, ValueRefContext(index=2)) == 2

    def test_param_and_state(self) -> None:
        """$param and $state read from their own sources."""
        context = ValueRefContext(params={"user": {"name": "Ada"}}, state={"count": 4})
        assert resolve_one({"$param": "user.name"}, context) == "Ada"
        assert resolve_one({"$state": "count"}, context) == 4

    def test_data_reference(self) -> None:
        """$data reads from the scope; an empty path selects the whole scope."""
        context = ValueRefContext(data={"title": "Draft"})
        assert resolve_one({"$data": "title"}, context) == "Draft"
        assert resolve_one({"$data": ""}, context) == {"title": "Draft"}

    def test_missing_path_is_none(self) -> None:
        """Unresolvable references yield None instead of raising."""
        assert resolve_one({"$param": "nope.deeper"}, ValueRefContext()) is None
        assert resolve_one({"$item": "name"}, ValueRefContext()) is None

    def test_literals_pass_through(self) -> None:
        """Literals are returned unchanged."""
        literal = {"$param": "a", "$state": "b"}
        assert resolve_one(literal, ValueRefContext()) is literal
        assert resolve_one("text", ValueRefContext()) == "text"


class TestResolveDeep:
    """Tests for resolve_deep."""

    def test_nested_structures(self) -> None:
        """References inside mappings and lists are resolved."""
        context = ValueRefContext(params={"color": "red"}, state={"open": True})
        value = {"style": {"color": {"$param": "color"}}, "flags": [{"$state": "open"}, 1]}
        assert resolve_deep(value, context) == {"style": {"color": "red"}, "flags": [True, 1]}

    def test_depth_cap_leaves_values_unresolved(self) -> None:
        """Values deeper than max_depth are returned as written."""
        context = ValueRefContext(params={"a": 1})
        value = {"level1": {"level2": {"$param": "a"}}}
        assert resolve_deep(value, context, max_depth=1) == {"level1": {"level2": {"$param": "a"}}}
        assert resolve_deep(value, context, max_depth=2) == {"level1": {"level2": 1}}

    def test_contains_ref(self) -> None:
        """contains_ref finds references at any depth."""
        assert contains_ref({"a": [{"b": {"$param": "x"}}]})
        assert not contains_ref({"a": [1, "two", {"$param": "x", "$state": "y"}]})


class TestValueRefContext:
    """Tests for ValueRefContext."""

    def test_with_item_exposes_aliases(self) -> None:
        """itemAs/indexAs aliases are layered onto the data scope."""
        context = ValueRefContext(data={"title": "Users"})
        child = context.with_item({"name": "Alpha"}, 1, item_as="user", index_as="i")
        assert child.item == {"name": "Alpha"}
        assert child.index == 1
        assert resolve_one({"$data": "user.name"}, child) == "Alpha"
        assert resolve_one({"$data": "i"}, child) == 1
        assert resolve_one({"$data": "title"}, child) == "Users"
        assert context.data == {"title": "Users"}

    def test_with_item_without_aliases_keeps_scope(self) -> None:
        """Without aliases the data scope is shared unchanged."""
        scope = ["not", "a", "mapping"]
        child = ValueRefContext(data=scope).with_item("x", 0)
        assert child.data is scope
