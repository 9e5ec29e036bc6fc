"""Group name resolution.

Associations are declared by group name but the controller wants
group ids. Names are resolved against an in-memory working set of
groups that already carry their remote ids.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import Protocol

from invsync.errors import AmbiguousGroupNameError, GroupNotFoundError


class GroupLike(Protocol):
    """Protocol for group-like objects."""

    id: int | None
    name: str


class GroupResolver:
    """
    Resolves group names to remote ids within a working set.

    The working set is indexed once; build a new resolver whenever the
    set changes.
    """

    def __init__(self, groups: Iterable[GroupLike]) -> None:
        self._ids: dict[str, list[int | None]] = defaultdict(list)
        for group in groups:
            self._ids[group.name].append(group.id)

    def resolve(self, name: str) -> int:
        """
        Return the id of the group named ``name``.

        Raises:
            GroupNotFoundError: No group has that name, or it has no id yet.
            AmbiguousGroupNameError: More than one group has that name.
        """
        ids = self._ids.get(name)
        if not ids:
            raise GroupNotFoundError(name)
        if len(ids) > 1:
            raise AmbiguousGroupNameError(name, ids)
        group_id = ids[0]
        if group_id is None:
            # Declared but not yet materialized
            raise GroupNotFoundError(name)
        return group_id


def resolve_group_id(name: str, groups: Iterable[GroupLike]) -> int:
    """Resolve a single group name against ``groups``."""
    return GroupResolver(groups).resolve(name)
