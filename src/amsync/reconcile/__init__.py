"""
Reconciliation of the Alertmanager config against credential secrets.
"""

from amsync.reconcile.engine import Reconciler
from amsync.reconcile.merge import remove_channel, upsert_channel
from amsync.reconcile.presence import Presence, resolve_presence
from amsync.reconcile.results import (
    ChannelAction,
    ChannelChange,
    Outcome,
    ReconcileResult,
    ReconcileState,
)

__all__ = [
    "Reconciler",
    "upsert_channel",
    "remove_channel",
    "Presence",
    "resolve_presence",
    "ChannelAction",
    "ChannelChange",
    "Outcome",
    "ReconcileResult",
    "ReconcileState",
]
