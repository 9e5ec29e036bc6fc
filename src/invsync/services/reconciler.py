"""Inventory reconciler.

Converges the controller's flat inventory state towards a declared
InventoryState. Groups and hosts are materialized first (so every name
has an id), then associations are wired by diffing declared member
names against what the controller reports.

Every remote call runs in sequence and the first failure aborts the
pass. Nothing is rolled back: re-running update() converges whatever
was left over, because entities are matched by id and associations
are recomputed from scratch on every pass.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from loguru import logger
from pydantic import ValidationError

from invsync.config.models import ReconcileConfig
from invsync.errors import ReconciliationError
from invsync.models.entities import ControllerModel, Group, Host, Inventory
from invsync.models.state import GroupState, HostState, InventoryState
from invsync.services.resolver import GroupResolver
from invsync.services.snapshot import SnapshotBuilder
from invsync.services.steps import step
from invsync.utils.logging import reconciliation_context
from invsync.utils.variables import encode_variables

if TYPE_CHECKING:
    from invsync.ports import ControllerGatewayPort


@dataclass
class ChangeSet:
    """Remote mutations issued during one reconciliation pass."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    associated: list[str] = field(default_factory=list)
    disassociated: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True when anything beyond update-by-id happened."""
        return bool(self.created or self.deleted or self.associated or self.disassociated)


@dataclass
class ReconciliationResult:
    """Snapshot to persist, plus what it took to get there."""

    state: InventoryState
    changes: ChangeSet


@dataclass
class _Member:
    """A materialized group or host and the group names it must relate to."""

    entity: ControllerModel
    declared: list[str]

    @property
    def id(self) -> int:
        if self.entity.id is None:
            raise ReconciliationError(
                f"Controller returned {self.entity.name!r} without an id",
                action="materialize",
                kind=type(self.entity).__name__.lower(),
                identifier=self.entity.name,
            )
        return self.entity.id


def carry_identities(desired: InventoryState, prior: InventoryState) -> InventoryState:
    """
    Fill missing ids in ``desired`` from a previously persisted snapshot.

    Groups and hosts are matched by name. Ids already present in
    ``desired`` win. The result is validated again, so a carried id that
    collides with a declared one raises pydantic.ValidationError.
    """
    group_ids = {g.name: g.id for g in prior.groups}
    host_ids = {h.name: h.id for h in prior.hosts}
    carried = desired.model_copy(
        update={
            "id": desired.id if desired.id is not None else prior.id,
            "organization": (
                desired.organization if desired.organization is not None else prior.organization
            ),
            "groups": [
                g if g.id is not None else g.model_copy(update={"id": group_ids.get(g.name)})
                for g in desired.groups
            ],
            "hosts": [
                h if h.id is not None else h.model_copy(update={"id": host_ids.get(h.name)})
                for h in desired.hosts
            ],
        }
    )
    return InventoryState.model_validate(carried.model_dump())


class InventoryReconciler:
    """
    Creates, reads, updates and deletes a whole inventory tree.

    Works against any ControllerGatewayPort; holds no state between
    calls, so one instance may serve several inventories in turn.
    """

    def __init__(
        self,
        gateway: "ControllerGatewayPort",
        config: ReconcileConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.config = config or ReconcileConfig()
        self.snapshots = SnapshotBuilder(gateway)

    def create(self, desired: InventoryState) -> ReconciliationResult:
        """
        Create the inventory, its groups and hosts, then wire associations.

        All groups are created before any child or host association is
        attempted, so every declared name can be resolved to an id.
        """
        with reconciliation_context("create", desired.name):
            return self._create_tree(desired)

    def _create_tree(self, desired: InventoryState) -> ReconciliationResult:
        changes = ChangeSet()

        with step("create", "inventory", desired.name):
            inventory = self.gateway.create_inventory(self._inventory_entity(desired))
        inventory_id = self._inventory_id(inventory)
        changes.created.append(f"inventory {inventory.name}")
        logger.info("Created inventory {} (id={})", inventory.name, inventory_id)

        groups: list[_Member] = []
        for group_state in desired.groups:
            group = self._group_entity(group_state, inventory_id)
            member = self._create("group", group_state, group, self.gateway.create_group, changes)
            groups.append(member)
        resolver = GroupResolver(m.entity for m in groups)
        for member in groups:
            self._sync_children(member, [], resolver, changes)

        hosts: list[_Member] = []
        for host_state in desired.hosts:
            host = self._host_entity(host_state, inventory_id)
            member = self._create("host", host_state, host, self.gateway.create_host, changes)
            hosts.append(member)
        for member in hosts:
            self._sync_host_groups(member, [], resolver, changes)

        return ReconciliationResult(self._snapshot(inventory, groups, hosts), changes)

    def read(self, inventory_id: int) -> InventoryState:
        """Project the controller's current inventory into declarative state."""
        with reconciliation_context("read", inventory_id):
            with step("read", "inventory", inventory_id):
                inventory = self.gateway.get_inventory(inventory_id)
            with step("list groups of", "inventory", inventory_id):
                groups = self.snapshots.groups(self.gateway.list_inventory_groups(inventory_id))
            with step("list hosts of", "inventory", inventory_id):
                hosts = self.snapshots.hosts(self.gateway.list_inventory_hosts(inventory_id))
            return self.snapshots.inventory(inventory, groups, hosts)

    def update(
        self,
        desired: InventoryState,
        prior: InventoryState | None = None,
    ) -> ReconciliationResult:
        """
        Converge an existing inventory towards ``desired``.

        Groups and hosts carrying an id the controller still knows are
        updated in place; the rest are created. Remote groups and hosts
        not reconciled are deleted. Associations are then diffed by name
        against the controller's current memberships.

        Args:
            desired: Declared state; group/host ids come from the last snapshot.
            prior: Last persisted snapshot, used to fill ids missing from desired.
        """
        with reconciliation_context("update", desired.name):
            return self._update_tree(desired, prior)

    def _update_tree(
        self,
        desired: InventoryState,
        prior: InventoryState | None,
    ) -> ReconciliationResult:
        if prior is not None:
            try:
                desired = carry_identities(desired, prior)
            except ValidationError as e:
                raise ReconciliationError(
                    f"Ids carried over for inventory {desired.name!r} conflict: {e}",
                    action="update",
                    kind="inventory",
                    identifier=desired.name,
                ) from e
        if desired.id is None:
            raise ReconciliationError(
                f"Inventory {desired.name!r} has no id to update",
                action="update",
                kind="inventory",
                identifier=desired.name,
            )

        changes = ChangeSet()
        inventory_id = desired.id

        with step("update", "inventory", inventory_id):
            inventory = self.gateway.update_inventory(
                inventory_id, self._inventory_entity(desired)
            )
        changes.updated.append(f"inventory {inventory.name}")
        logger.info("Updated inventory {} (id={})", inventory.name, inventory_id)

        with step("list groups of", "inventory", inventory_id):
            current_groups = self.gateway.list_inventory_groups(inventory_id)
        groups = self._reconcile_entities(
            "group",
            current_groups,
            desired.groups,
            lambda s: self._group_entity(s, inventory_id),
            self.gateway.create_group,
            self.gateway.update_group,
            self.gateway.delete_group,
            changes,
        )

        # Resolve against the reconciled set so recreated groups map to fresh ids
        resolver = GroupResolver(m.entity for m in groups)
        for member in groups:
            with step("list children of", "group", member.entity.name):
                current_children = self.gateway.list_group_children(member.id)
            self._sync_children(member, current_children, resolver, changes)

        with step("list hosts of", "inventory", inventory_id):
            current_hosts = self.gateway.list_inventory_hosts(inventory_id)
        hosts = self._reconcile_entities(
            "host",
            current_hosts,
            desired.hosts,
            lambda s: self._host_entity(s, inventory_id),
            self.gateway.create_host,
            self.gateway.update_host,
            self.gateway.delete_host,
            changes,
        )

        for member in hosts:
            with step("list groups of", "host", member.entity.name):
                current_memberships = self.gateway.list_host_groups(member.id)
            self._sync_host_groups(member, current_memberships, resolver, changes)

        if changes.changed:
            logger.info(
                "Inventory {} reconciled: created={} deleted={} associated={} disassociated={}",
                inventory.name,
                len(changes.created),
                len(changes.deleted),
                len(changes.associated),
                len(changes.disassociated),
            )
        else:
            logger.info("Inventory {} already converged", inventory.name)

        return ReconciliationResult(self._snapshot(inventory, groups, hosts), changes)

    def delete(self, inventory_id: int | None) -> None:
        """Delete the inventory; the controller removes its groups and hosts."""
        if inventory_id is None:
            raise ReconciliationError(
                "Inventory has no id to delete",
                action="delete",
                kind="inventory",
                identifier=None,
            )
        with reconciliation_context("delete", inventory_id):
            with step("delete", "inventory", inventory_id):
                self.gateway.delete_inventory(inventory_id)
            logger.info("Deleted inventory id={}", inventory_id)

    # Entity passes

    def _create(
        self,
        kind: str,
        state: GroupState | HostState,
        entity: ControllerModel,
        create: Callable[[Any], Any],
        changes: ChangeSet,
    ) -> _Member:
        with step("create", kind, state.name):
            created = create(entity)
        member = _Member(created, _declared_names(state))
        changes.created.append(f"{kind} {created.name}")
        logger.info("Created {} {} (id={})", kind, created.name, member.id)
        return member

    def _reconcile_entities(
        self,
        kind: str,
        current: Sequence[ControllerModel],
        desired: Sequence[GroupState] | Sequence[HostState],
        build: Callable[[Any], Any],
        create: Callable[[Any], Any],
        update: Callable[[int, Any], Any],
        delete: Callable[[int], None],
        changes: ChangeSet,
    ) -> list[_Member]:
        """Create-or-update each declared entity by id, then delete leftovers."""
        current_ids = {entity.id for entity in current}
        reconciled: list[_Member] = []

        for state in desired:
            entity = build(state)
            if state.id is None or state.id not in current_ids:
                if state.id is not None:
                    logger.warning(
                        "{} {} (id={}) no longer exists remotely, recreating",
                        kind.capitalize(),
                        state.name,
                        state.id,
                    )
                reconciled.append(self._create(kind, state, entity, create, changes))
                continue

            with step("update", kind, state.name):
                result = update(state.id, entity)
            changes.updated.append(f"{kind} {result.name}")
            logger.debug("Updated {} {} (id={})", kind, result.name, state.id)
            reconciled.append(_Member(result, _declared_names(state)))

        kept = {member.id for member in reconciled}
        for entity in current:
            if entity.id is None or entity.id in kept:
                continue
            with step("delete", kind, entity.name):
                delete(entity.id)
            changes.deleted.append(f"{kind} {entity.name}")
            logger.info("Deleted {} {} (id={})", kind, entity.name, entity.id)

        return reconciled

    # Association passes

    def _sync_children(
        self,
        member: _Member,
        current: Iterable[Group],
        resolver: GroupResolver,
        changes: ChangeSet,
    ) -> None:
        self._sync_memberships(
            "group",
            "child",
            member,
            current,
            resolver,
            self.gateway.add_child_to_group,
            self.gateway.remove_child_from_group,
            changes,
        )

    def _sync_host_groups(
        self,
        member: _Member,
        current: Iterable[Group],
        resolver: GroupResolver,
        changes: ChangeSet,
    ) -> None:
        self._sync_memberships(
            "host",
            "group",
            member,
            current,
            resolver,
            self.gateway.add_group_to_host,
            self.gateway.remove_group_from_host,
            changes,
        )

    def _sync_memberships(
        self,
        kind: str,
        relation: str,
        member: _Member,
        current: Iterable[Group],
        resolver: GroupResolver,
        associate: Callable[[int, int], None],
        disassociate: Callable[[int, int], None],
        changes: ChangeSet,
    ) -> None:
        """Associate declared-but-missing names, disassociate present-but-undeclared ones."""
        current = list(current)
        current_names = {group.name for group in current}
        declared = set(member.declared)
        name = member.entity.name

        for target in sorted(declared - current_names):
            with step(f"add {relation} {target!r} to", kind, name):
                associate(member.id, resolver.resolve(target))
            changes.associated.append(f"{kind} {name} -> {target}")
            logger.info("Associated {} {} with {} {}", kind, name, relation, target)

        for group in current:
            if group.name in declared or group.id is None:
                continue
            with step(f"remove {relation} {group.name!r} from", kind, name):
                disassociate(member.id, group.id)
            changes.disassociated.append(f"{kind} {name} -> {group.name}")
            logger.info("Disassociated {} {} from {} {}", kind, name, relation, group.name)

    # Builders

    def _inventory_entity(self, state: InventoryState) -> Inventory:
        with step("encode variables of", "inventory", state.name):
            variables = encode_variables(state.variables)
        return Inventory(
            organization=state.organization or self.config.default_organization,
            name=state.name,
            description=state.description,
            variables=variables,
        )

    def _group_entity(self, state: GroupState, inventory_id: int) -> Group:
        with step("encode variables of", "group", state.name):
            variables = encode_variables(state.variables)
        return Group(
            inventory=inventory_id,
            name=state.name,
            description=state.description,
            variables=variables,
        )

    def _host_entity(self, state: HostState, inventory_id: int) -> Host:
        with step("encode variables of", "host", state.name):
            variables = encode_variables(state.variables)
        return Host(
            inventory=inventory_id,
            name=state.name,
            description=state.description,
            variables=variables,
        )

    def _inventory_id(self, inventory: Inventory) -> int:
        if inventory.id is None:
            raise ReconciliationError(
                f"Controller returned inventory {inventory.name!r} without an id",
                action="create",
                kind="inventory",
                identifier=inventory.name,
            )
        return inventory.id

    def _snapshot(
        self,
        inventory: Inventory,
        groups: list[_Member],
        hosts: list[_Member],
    ) -> InventoryState:
        return self.snapshots.inventory(
            inventory,
            self.snapshots.groups(m.entity for m in groups),  # type: ignore[misc]
            self.snapshots.hosts(m.entity for m in hosts),  # type: ignore[misc]
        )


def _declared_names(state: GroupState | HostState) -> list[str]:
    if isinstance(state, GroupState):
        return list(state.children or [])
    return list(state.groups or [])
