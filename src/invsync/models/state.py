"""Declarative inventory state.

The shape a caller declares as desired state and the shape the
reconciler hands back as a snapshot for persistence. Empty values
collapse to None so a freshly read snapshot compares equal to the
declaration it came from.
"""

from collections import Counter
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


def _name_set(value: Iterable[str] | None) -> list[str] | None:
    # A bare string is iterable too; it would split into characters
    if isinstance(value, str):
        raise ValueError(f"expected a list of group names, got the string {value!r}")
    if not value:
        return None
    return sorted(set(value))


def _duplicates(values: Iterable[Any]) -> list[Any]:
    return sorted(value for value, count in Counter(values).items() if count > 1)


def _duplicate_ids(entities: Iterable["_EntityState"]) -> list[int]:
    return _duplicates(e.id for e in entities if e.id is not None)


class _EntityState(BaseModel):
    id: int | None = None
    inventory: int | None = None
    name: str = Field(min_length=1)
    description: str | None = None
    variables: dict[str, str] | None = None

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_is_absent(cls, v: Any) -> Any:
        return v or None

    @field_validator("variables", mode="before")
    @classmethod
    def empty_variables_are_absent(cls, v: Any) -> Any:
        return v or None


class GroupState(_EntityState):
    """A group and the names of its child groups."""

    children: list[str] | None = None

    @field_validator("children", mode="before")
    @classmethod
    def normalize_children(cls, v: Any) -> list[str] | None:
        return _name_set(v)


class HostState(_EntityState):
    """A host and the names of the groups it belongs to."""

    groups: list[str] | None = None

    @field_validator("groups", mode="before")
    @classmethod
    def normalize_groups(cls, v: Any) -> list[str] | None:
        return _name_set(v)


class InventoryState(BaseModel):
    """
    An inventory with its groups and hosts.

    Group and host names must be unique within the inventory, since
    associations are declared by name. Two entries may not carry the
    same remote id either: both would be written to one remote entity.
    """

    id: int | None = None
    organization: int | None = None
    name: str = Field(min_length=1)
    description: str | None = None
    variables: dict[str, str] | None = None
    groups: list[GroupState] = Field(default_factory=list)
    hosts: list[HostState] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_is_absent(cls, v: Any) -> Any:
        return v or None

    @field_validator("variables", mode="before")
    @classmethod
    def empty_variables_are_absent(cls, v: Any) -> Any:
        return v or None

    @field_validator("groups", "hosts", mode="before")
    @classmethod
    def null_list_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def validate_unique_identities(self) -> "InventoryState":
        """Reject duplicate group or host names, and ids shared by two entries."""
        duplicate_groups = _duplicates(g.name for g in self.groups)
        if duplicate_groups:
            raise ValueError(f"duplicate group names: {', '.join(duplicate_groups)}")
        duplicate_hosts = _duplicates(h.name for h in self.hosts)
        if duplicate_hosts:
            raise ValueError(f"duplicate host names: {', '.join(duplicate_hosts)}")
        duplicate_group_ids = _duplicate_ids(self.groups)
        if duplicate_group_ids:
            raise ValueError(f"duplicate group ids: {duplicate_group_ids}")
        duplicate_host_ids = _duplicate_ids(self.hosts)
        if duplicate_host_ids:
            raise ValueError(f"duplicate host ids: {duplicate_host_ids}")
        return self

    def group(self, name: str) -> GroupState | None:
        """Return the group with the given name, if declared."""
        return next((g for g in self.groups if g.name == name), None)

    def host(self, name: str) -> HostState | None:
        """Return the host with the given name, if declared."""
        return next((h for h in self.hosts if h.name == name), None)
