"""Tenant hierarchy arena.

Tenants are held in a map keyed by id with the parent stored as an optional
id reference. Every traversal is the same bounded upward walk along parent
links, so corrupted data (a self-loop, a cycle written outside this
service, or an absurdly deep chain) can never hang a request.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from access.domain.aggregates.tenant import Tenant
from access.domain.exceptions import CycleError
from access.domain.value_objects import TenantId

DEFAULT_MAX_DEPTH = 100


@dataclass
class TenantNode:
    """A tenant with its children, used to render the hierarchy as a tree."""

    tenant: Tenant
    children: list[TenantNode] = field(default_factory=list)


@dataclass(frozen=True)
class _Walk:
    """Result of walking up from a tenant.

    ``chain`` holds the ids visited, starting tenant first. ``reached_root``
    is False when the walk stopped on a self-loop, a revisited id, or the
    depth bound.
    """

    chain: tuple[str, ...]
    reached_root: bool


class TenantHierarchy:
    """In-memory view of the whole tenant forest."""

    def __init__(
        self,
        tenants: Iterable[Tenant],
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._tenants: dict[str, Tenant] = {t.id.value: t for t in tenants}
        self._max_depth = max_depth

    def __contains__(self, tenant_id: TenantId) -> bool:
        return tenant_id.value in self._tenants

    def get(self, tenant_id: TenantId) -> Tenant | None:
        return self._tenants.get(tenant_id.value)

    @property
    def tenants(self) -> list[Tenant]:
        return list(self._tenants.values())

    def _walk_up(self, start: str) -> _Walk:
        chain: list[str] = []
        seen: set[str] = set()
        current: str | None = start
        while current is not None:
            if current in seen or len(chain) > self._max_depth:
                return _Walk(chain=tuple(chain), reached_root=False)
            chain.append(current)
            seen.add(current)
            tenant = self._tenants.get(current)
            current = tenant.parent_id.value if tenant and tenant.parent_id else None
        return _Walk(chain=tuple(chain), reached_root=True)

    def would_create_cycle(
        self,
        tenant_id: TenantId,
        candidate_parent_id: TenantId,
    ) -> bool:
        """Check whether making ``candidate_parent_id`` the parent closes a loop.

        Walks upward from the candidate. The assignment is a cycle if the walk
        meets ``tenant_id`` (the candidate is the tenant or one of its
        descendants), or if it never reaches a root because of a self-loop,
        an existing loop or the depth bound.
        """
        walk = self._walk_up(candidate_parent_id.value)
        return tenant_id.value in walk.chain or not walk.reached_root

    def check_parent(
        self,
        tenant_id: TenantId,
        candidate_parent_id: TenantId | None,
    ) -> None:
        """Raise ``CycleError`` if the assignment would create a cycle."""
        if candidate_parent_id is None:
            return
        if self.would_create_cycle(tenant_id, candidate_parent_id):
            raise CycleError(tenant_id.value, candidate_parent_id.value)

    def set_parent(
        self,
        tenant_id: TenantId,
        candidate_parent_id: TenantId | None,
    ) -> list[Tenant]:
        """Reparent a tenant and recompute levels below it.

        Nothing is changed when the assignment is rejected.

        Returns:
            Every tenant whose parent or level changed, the reparented tenant
            first

        Raises:
            KeyError: If either tenant is not part of the hierarchy
            CycleError: If the candidate is the tenant or one of its descendants
        """
        tenant = self._tenants[tenant_id.value]
        parent = None
        if candidate_parent_id is not None:
            parent = self._tenants[candidate_parent_id.value]
        self.check_parent(tenant_id, candidate_parent_id)

        changed = [tenant] if tenant.assign_parent(parent) else []
        for descendant in self._descendants_top_down(tenant):
            owner = self._tenants[descendant.parent_id.value]  # type: ignore[union-attr]
            if descendant.assign_parent(owner):
                changed.append(descendant)
        return changed

    def ancestors(self, tenant_id: TenantId) -> list[Tenant]:
        """Return the ancestors of a tenant, root first."""
        walk = self._walk_up(tenant_id.value)
        return [
            self._tenants[i]
            for i in reversed(walk.chain[1:])
            if i in self._tenants
        ]

    def parent(self, tenant_id: TenantId) -> Tenant | None:
        tenant = self.get(tenant_id)
        if tenant is None or tenant.parent_id is None:
            return None
        return self.get(tenant.parent_id)

    def children(self, tenant_id: TenantId) -> list[Tenant]:
        """Return the direct children of a tenant, sorted by name."""
        return sorted(
            (
                t
                for t in self._tenants.values()
                if t.parent_id == tenant_id and t.id != tenant_id
            ),
            key=lambda t: t.name,
        )

    def descendants(self, tenant_id: TenantId) -> list[Tenant]:
        """Return every tenant whose ancestor chain passes through ``tenant_id``."""
        return sorted(
            (
                t
                for t in self._tenants.values()
                if t.id != tenant_id
                and tenant_id.value in self._walk_up(t.id.value).chain[1:]
            ),
            key=lambda t: (t.hierarchy_level, t.name),
        )

    def eligible_parents(self, tenant_id: TenantId | None) -> list[Tenant]:
        """Return the tenants that may become the parent of ``tenant_id``.

        Excludes the tenant itself, its descendants, and any tenant whose
        chain never reaches a root, so a caller offering only these choices
        can never create a cycle. Pass ``None`` for a tenant that does not
        exist yet.
        """
        candidates = sorted(self._tenants.values(), key=lambda t: t.name)
        if tenant_id is None:
            return [t for t in candidates if self._walk_up(t.id.value).reached_root]
        return [t for t in candidates if not self.would_create_cycle(tenant_id, t.id)]

    def roots(self) -> list[Tenant]:
        """Return the tenants without a parent, sorted by name."""
        return sorted(
            (t for t in self._tenants.values() if t.parent_id is None),
            key=lambda t: t.name,
        )

    def build_tree(self) -> list[TenantNode]:
        """Build the forest of tenant nodes starting from the roots.

        Tenants caught in a corrupt loop have no root and are left out.
        """

        def build(tenant: Tenant, depth: int) -> TenantNode:
            node = TenantNode(tenant=tenant)
            if depth < self._max_depth:
                node.children = [
                    build(child, depth + 1) for child in self.children(tenant.id)
                ]
            return node

        return [build(root, 0) for root in self.roots()]

    def _descendants_top_down(self, tenant: Tenant) -> list[Tenant]:
        ordered: list[Tenant] = []
        frontier = [tenant]
        visited = {tenant.id.value}
        while frontier:
            next_frontier: list[Tenant] = []
            for node in frontier:
                for child in self.children(node.id):
                    if child.id.value in visited:
                        continue
                    visited.add(child.id.value)
                    ordered.append(child)
                    next_frontier.append(child)
            frontier = next_frontier
        return ordered


def set_parent(
    tenant_id: TenantId,
    candidate_parent_id: TenantId | None,
    all_tenants: Iterable[Tenant],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Tenant]:
    """Reparent ``tenant_id`` within ``all_tenants``.

    See ``TenantHierarchy.set_parent``.
    """
    return TenantHierarchy(all_tenants, max_depth=max_depth).set_parent(
        tenant_id, candidate_parent_id
    )


def list_eligible_parents(
    tenant_id: TenantId | None,
    all_tenants: Iterable[Tenant],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Tenant]:
    """Return the tenants ``tenant_id`` may be attached under."""
    return TenantHierarchy(all_tenants, max_depth=max_depth).eligible_parents(
        tenant_id
    )
