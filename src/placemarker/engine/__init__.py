"""Reconciliation engine exports."""

from .merge import HomelandPlan, MergedSelection, merge, plan_homeland
from .progress import LoggingReconcileProgress, NullReconcileProgress, ReconcilePhase, ReconcileProgress
from .reconciler import EngineState, ReconciliationEngine

__all__ = [
    "EngineState",
    "HomelandPlan",
    "LoggingReconcileProgress",
    "MergedSelection",
    "NullReconcileProgress",
    "ReconcilePhase",
    "ReconcileProgress",
    "ReconciliationEngine",
    "merge",
    "plan_homeland",
]
