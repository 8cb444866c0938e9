"""Tests for buildplan.planning.plan (end-to-end planning on in-memory snapshots)."""

from buildplan.planning.plan import plan_rebuild

from conftest import make_snapshot


def test_nothing_to_rebuild():
    old = make_snapshot(("a", "1", 1))
    plan = plan_rebuild(old, make_snapshot(("a", "1", 1)))
    assert not plan.has_work
    assert plan.changes == []
    assert plan.lifted is None and plan.order is None
    assert plan.packages_in_order() == []
    assert plan.ranks() == []


def test_plan_orders_rebuild_set_only():
    """E depends on F, both bumped; unchanged lib sits between others and is not ordered."""
    old = make_snapshot(("pkgE", "1", 1), ("pkgF", "1", 1), ("lib", "1", 1), ("tool", "1", 1))
    new = make_snapshot(
        ("pkgE", "1", 2, ["pkgF", "lib"]),
        ("pkgF", "1", 2),
        ("lib", "1", 1, ["tool"]),
        ("tool", "2", 2),
    )

    plan = plan_rebuild(old, new)

    assert plan.candidates == [0, 1, 3]
    assert plan.lifted.nodes == (0, 1, 3)
    assert list(plan.lifted.edges()) == [(0, 1)]
    assert plan.names(plan.order) == ["pkgF", "pkgE", "tool"]
    assert [p.name for p in plan.packages_in_order()] == ["pkgF", "pkgE", "tool"]
    assert plan.ranks() == [[1, 3], [0]]
    assert plan.unresolved == []


def test_plan_records_cycles_instead_of_raising():
    old = make_snapshot(("pkgG", "1", 1), ("pkgH", "1", 1))
    new = make_snapshot(("pkgG", "1", 2, ["pkgH"]), ("pkgH", "1", 2, ["pkgG"]))

    plan = plan_rebuild(old, new)

    assert plan.has_work and not plan.ordered
    assert [plan.names(c) for c in plan.cycles] == [["pkgG", "pkgH"]]
    assert plan.packages_in_order() == []


def test_cycle_through_unchanged_package_is_not_a_cycle():
    old = make_snapshot(("a", "1", 1), ("b", "1", 1))
    new = make_snapshot(("a", "1", 2, ["b"]), ("b", "1", 1, ["a"]))
    plan = plan_rebuild(old, new)
    assert plan.order == [0]
    assert plan.cycles == []


def test_plan_collects_anomalies_downgrades_and_unresolved():
    old = make_snapshot(("anom", "1", 3), ("down", "1", 5), ("up", "1", 1))
    new = make_snapshot(
        ("anom", "2", 3),
        ("down", "1", 4),
        ("up", "1", 2, ["pkgD"]),
        ("fresh", "0.1", 1),
    )

    plan = plan_rebuild(old, new)

    assert [d.idx for d in plan.anomalies] == [0]
    assert [d.idx for d in plan.downgrades] == [1]
    assert plan.candidates == [2, 3]
    assert [(u.name, u.missing) for u in plan.unresolved] == [("up", ("pkgD",))]
    assert plan.order == [2, 3]
