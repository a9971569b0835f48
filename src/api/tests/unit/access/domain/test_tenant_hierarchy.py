"""Unit tests for the tenant hierarchy: cycle prevention and relevelling."""

import random

import pytest

from access.domain.aggregates import Tenant
from access.domain.exceptions import CycleError
from access.domain.hierarchy import (
    TenantHierarchy,
    list_eligible_parents,
    set_parent,
)
from access.domain.value_objects import TenantId


def _tenant(name: str, parent: Tenant | None = None) -> Tenant:
    return Tenant.create(name=name, slug=name.lower(), parent=parent)


@pytest.fixture
def chain():
    """A -> B -> C -> D, plus an unrelated root E."""
    a = _tenant("A")
    b = _tenant("B", a)
    c = _tenant("C", b)
    d = _tenant("D", c)
    e = _tenant("E")
    return a, b, c, d, e


class TestCyclePrevention:
    """A tenant can never become its own ancestor."""

    def test_self_parent_is_rejected(self, chain):
        a, *_ = chain
        hierarchy = TenantHierarchy(chain)

        with pytest.raises(CycleError):
            hierarchy.set_parent(a.id, a.id)

    def test_descendant_parent_is_rejected(self, chain):
        a, b, c, d, e = chain
        hierarchy = TenantHierarchy(chain)

        with pytest.raises(CycleError):
            hierarchy.set_parent(b.id, d.id)

    def test_rejected_assignment_changes_nothing(self, chain):
        a, b, c, d, e = chain
        hierarchy = TenantHierarchy(chain)

        with pytest.raises(CycleError):
            hierarchy.set_parent(a.id, c.id)

        assert a.parent_id is None
        assert a.hierarchy_level == 0
        assert [t.hierarchy_level for t in (b, c, d)] == [1, 2, 3]

    def test_corrupt_self_loop_is_treated_as_a_cycle(self):
        looped = _tenant("Loop")
        looped.parent_id = looped.id
        other = _tenant("Other")
        hierarchy = TenantHierarchy([looped, other])

        assert hierarchy.would_create_cycle(other.id, looped.id) is True

    def test_depth_bound_stops_the_walk(self):
        tenants = [_tenant("T0")]
        for i in range(1, 10):
            tenants.append(_tenant(f"T{i}", tenants[-1]))
        newcomer = _tenant("New")
        hierarchy = TenantHierarchy([*tenants, newcomer], max_depth=5)

        assert hierarchy.would_create_cycle(newcomer.id, tenants[-1].id) is True


class TestRelevelling:
    """Moving a tenant recomputes levels for its whole subtree."""

    def test_moving_subtree_under_another_root(self, chain):
        a, b, c, d, e = chain

        changed = set_parent(b.id, e.id, chain)

        assert b.parent_id == e.id
        assert [t.hierarchy_level for t in (b, c, d)] == [1, 2, 3]
        assert changed == [b]

    def test_detaching_to_root_relevels_descendants(self, chain):
        a, b, c, d, e = chain

        changed = set_parent(c.id, None, chain)

        assert c.parent_id is None
        assert c.hierarchy_level == 0
        assert d.hierarchy_level == 1
        assert changed == [c, d]

    def test_moving_deeper_relevels_descendants(self, chain):
        a, b, c, d, e = chain
        f = _tenant("F", e)

        changed = set_parent(b.id, f.id, [*chain, f])

        assert [t.hierarchy_level for t in (b, c, d)] == [2, 3, 4]
        assert changed == [b, c, d]


class TestQueries:
    """Read-side traversals."""

    def test_ancestors_are_root_first(self, chain):
        a, b, c, d, e = chain

        assert TenantHierarchy(chain).ancestors(d.id) == [a, b, c]

    def test_children_and_descendants(self, chain):
        a, b, c, d, e = chain
        hierarchy = TenantHierarchy(chain)

        assert hierarchy.children(a.id) == [b]
        assert hierarchy.descendants(a.id) == [b, c, d]
        assert hierarchy.descendants(e.id) == []

    def test_eligible_parents_exclude_self_and_descendants(self, chain):
        a, b, c, d, e = chain

        eligible = list_eligible_parents(b.id, chain)

        assert eligible == [a, e]

    def test_eligible_parents_for_new_tenant_include_everyone(self, chain):
        assert len(list_eligible_parents(None, chain)) == len(chain)

    def test_build_tree_nests_children_sorted_by_name(self):
        root = _tenant("Root")
        zed = _tenant("Zed", root)
        alpha = _tenant("Alpha", root)

        forest = TenantHierarchy([root, zed, alpha]).build_tree()

        assert len(forest) == 1
        assert [node.tenant for node in forest[0].children] == [alpha, zed]


def _is_acyclic(tenants: list[Tenant]) -> bool:
    by_id = {t.id: t for t in tenants}
    for tenant in tenants:
        seen: set[TenantId] = set()
        current = tenant
        while current.parent_id is not None:
            if current.id in seen:
                return False
            seen.add(current.id)
            current = by_id[current.parent_id]
    return True


def _levels_consistent(tenants: list[Tenant]) -> bool:
    by_id = {t.id: t for t in tenants}
    for tenant in tenants:
        expected = (
            by_id[tenant.parent_id].hierarchy_level + 1 if tenant.parent_id else 0
        )
        if tenant.hierarchy_level != expected:
            return False
    return True


@pytest.mark.parametrize("seed", range(20))
def test_random_reparenting_keeps_forest_acyclic(seed):
    """Any sequence of accepted or rejected moves leaves a valid forest."""
    rng = random.Random(seed)
    tenants = [_tenant(f"N{i}") for i in range(12)]
    hierarchy = TenantHierarchy(tenants)

    for _ in range(60):
        tenant = rng.choice(tenants)
        parent = rng.choice([None, *tenants])
        try:
            hierarchy.set_parent(tenant.id, parent.id if parent else None)
        except CycleError:
            pass

        assert _is_acyclic(tenants)
        assert _levels_consistent(tenants)
