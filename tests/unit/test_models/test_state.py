"""Tests for declarative inventory state models."""

import pytest
from pydantic import ValidationError

from invsync.models.state import GroupState, HostState, InventoryState


class TestEntityState:
    """Test group and host state normalization."""

    def test_children_deduplicated_and_sorted(self) -> None:
        group = GroupState(name="all", children=["web", "db", "web"])
        assert group.children == ["db", "web"]

    def test_bare_string_children_rejected(self) -> None:
        """A single name must still be written as a list."""
        with pytest.raises(ValidationError, match="list of group names"):
            GroupState(name="web", children="db")

    def test_bare_string_host_groups_rejected(self) -> None:
        with pytest.raises(ValidationError, match="list of group names"):
            HostState(name="h", groups="web")

    def test_empty_children_are_absent(self) -> None:
        assert GroupState(name="g", children=[]).children is None
        assert GroupState(name="g").children is None

    def test_host_groups_normalized(self) -> None:
        assert HostState(name="h", groups=("b", "a")).groups == ["a", "b"]
        assert HostState(name="h", groups=[]).groups is None

    def test_blank_fields_are_absent(self) -> None:
        host = HostState(name="h", description="", variables={})
        assert host.description is None
        assert host.variables is None

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            GroupState(name="")

    def test_variables_must_be_strings(self) -> None:
        with pytest.raises(ValidationError):
            HostState(name="h", variables={"port": [22]})

    def test_equal_after_normalization(self) -> None:
        """A snapshot and its declaration compare equal once normalized."""
        declared = GroupState(name="g", children=["b", "a"], description="")
        read_back = GroupState(name="g", children=["a", "b"])
        assert declared == read_back


class TestInventoryState:
    """Test InventoryState validation and lookup."""

    def test_defaults(self) -> None:
        state = InventoryState(name="Inv")
        assert state.id is None
        assert state.organization is None
        assert state.groups == []
        assert state.hosts == []

    def test_null_lists_are_empty(self) -> None:
        state = InventoryState.model_validate({"name": "Inv", "groups": None, "hosts": None})
        assert state.groups == []
        assert state.hosts == []

    def test_duplicate_group_names_rejected(self) -> None:
        with pytest.raises(ValidationError, match="duplicate group names: web"):
            InventoryState(
                name="Inv", groups=[GroupState(name="web"), GroupState(name="web")]
            )

    def test_duplicate_host_names_rejected(self) -> None:
        with pytest.raises(ValidationError, match="duplicate host names: h1"):
            InventoryState(name="Inv", hosts=[HostState(name="h1"), HostState(name="h1")])

    def test_duplicate_group_ids_rejected(self) -> None:
        """Two entries with one id would both be written to the same remote group."""
        with pytest.raises(ValidationError, match=r"duplicate group ids: \[1\]"):
            InventoryState(
                name="Inv", groups=[GroupState(id=1, name="A"), GroupState(id=1, name="B")]
            )

    def test_duplicate_host_ids_rejected(self) -> None:
        with pytest.raises(ValidationError, match=r"duplicate host ids: \[7\]"):
            InventoryState(
                name="Inv", hosts=[HostState(id=7, name="h1"), HostState(id=7, name="h2")]
            )

    def test_unset_ids_may_repeat(self) -> None:
        state = InventoryState(name="Inv", groups=[GroupState(name="A"), GroupState(name="B")])
        assert [g.id for g in state.groups] == [None, None]

    def test_group_and_host_may_share_an_id(self) -> None:
        state = InventoryState(
            name="Inv", groups=[GroupState(id=3, name="g")], hosts=[HostState(id=3, name="h")]
        )
        assert state.groups[0].id == state.hosts[0].id

    def test_group_and_host_may_share_a_name(self) -> None:
        state = InventoryState(
            name="Inv", groups=[GroupState(name="edge")], hosts=[HostState(name="edge")]
        )
        assert state.group("edge") is not None
        assert state.host("edge") is not None

    def test_lookup_by_name(self) -> None:
        state = InventoryState(
            name="Inv",
            groups=[GroupState(name="web", children=["db"]), GroupState(name="db")],
        )
        web = state.group("web")
        assert web is not None
        assert web.children == ["db"]
        assert state.group("cache") is None
        assert state.host("web") is None

    def test_from_nested_mapping(self) -> None:
        state = InventoryState.model_validate(
            {
                "name": "Inv",
                "variables": {"env": "lab"},
                "groups": [{"name": "web"}],
                "hosts": [{"name": "h1", "groups": ["web"]}],
            }
        )
        assert state.variables == {"env": "lab"}
        assert state.hosts[0].groups == ["web"]
