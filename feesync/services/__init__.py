"""Services package - orchestration around the fee decision table."""

from feesync.services.reconcile_runner import ReconcileOutcome, ReconcileRunner
from feesync.services.removal_confirmation import RemovalConfirmation
from feesync.services.trigger_scheduler import TriggerScheduler
from feesync.services.ui_sync import RefreshResult, UISyncLayer

__all__ = [
    "ReconcileOutcome",
    "ReconcileRunner",
    "RefreshResult",
    "RemovalConfirmation",
    "TriggerScheduler",
    "UISyncLayer",
]
