"""Planning layer: one call from two snapshots to an ordered rebuild plan."""

from .plan import RebuildPlan, plan_rebuild

__all__ = ["RebuildPlan", "plan_rebuild"]
