"""Result types for reconciliation passes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ReconcileState(str, Enum):
    """Stages a reconciliation pass moves through."""

    FILTERING = "filtering"
    LOADING = "loading"
    RESOLVING = "resolving"
    MERGING = "merging"
    PERSISTING = "persisting"
    DONE = "done"


class Outcome(str, Enum):
    """How a reconciliation pass ended."""

    IGNORED = "ignored"  # trigger named an unmonitored secret
    DEFERRED = "deferred"  # base config secret does not exist yet
    UNCHANGED = "unchanged"  # document already converged, nothing written
    UPDATED = "updated"  # document rewritten


class ChannelAction(str, Enum):
    UPSERT = "upsert"
    REMOVE = "remove"


@dataclass
class ChannelChange:
    """What the merge engine did for one integration."""

    integration: str
    action: ChannelAction
    changed: bool


@dataclass
class ReconcileResult:
    """Result of a single reconciliation pass."""

    namespace: str
    name: str
    outcome: Outcome = Outcome.UNCHANGED
    channels: List[ChannelChange] = field(default_factory=list)
    states: List[ReconcileState] = field(default_factory=list)

    @property
    def written(self) -> bool:
        """Whether the configuration secret was rewritten."""
        return self.outcome is Outcome.UPDATED

    @property
    def changed_channels(self) -> List[str]:
        return [c.integration for c in self.channels if c.changed]

    def enter(self, state: ReconcileState) -> None:
        self.states.append(state)

    def finish(self, outcome: Outcome) -> "ReconcileResult":
        self.outcome = outcome
        self.enter(ReconcileState.DONE)
        return self
