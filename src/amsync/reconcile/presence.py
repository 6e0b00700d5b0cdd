"""Resolve which monitored secrets exist from a namespace listing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from amsync.alertmanager.integrations import MONITORED_INTEGRATIONS, Integration


@dataclass(frozen=True)
class Presence:
    """Snapshot of monitored secret presence in one namespace."""

    config_present: bool
    present_secrets: frozenset[str] = frozenset()

    def is_present(self, integration: Integration) -> bool:
        return integration.secret_name in self.present_secrets


def resolve_presence(
    secret_names: Iterable[str],
    config_secret_name: str,
    integrations: Iterable[Integration] = MONITORED_INTEGRATIONS,
) -> Presence:
    """
    Determine presence of the base config secret and each integration secret.

    Args:
        secret_names: Names returned by listing the namespace
        config_secret_name: Name of the secret holding alertmanager.yaml
        integrations: Integrations whose credential secrets are checked

    Returns:
        Presence with only monitored names recorded
    """
    names = set(secret_names)
    monitored = {integration.secret_name for integration in integrations}
    return Presence(
        config_present=config_secret_name in names,
        present_secrets=frozenset(names & monitored),
    )
