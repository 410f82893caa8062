"""Room membership management."""

from roomfolks.rooms.reconciler import ReconcileResult, RoomReconciler, plan_membership

__all__ = ["ReconcileResult", "RoomReconciler", "plan_membership"]
