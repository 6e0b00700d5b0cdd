"""Secret store adapters."""

from amsync.store.base import SecretStore, parse_label_selector
from amsync.store.kubernetes import KubernetesSecretStore
from amsync.store.memory import InMemorySecretStore

__all__ = [
    "SecretStore",
    "parse_label_selector",
    "KubernetesSecretStore",
    "InMemorySecretStore",
]
