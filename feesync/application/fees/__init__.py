"""Fee use cases: read a cart snapshot, apply a reconciliation action."""

from feesync.application.fees.apply_action import apply_fee_action, remove_fee
from feesync.application.fees.read_snapshot import read_snapshot

__all__ = ["apply_fee_action", "read_snapshot", "remove_fee"]
