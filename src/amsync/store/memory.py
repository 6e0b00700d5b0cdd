from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from amsync.core.errors import SecretNotFoundError, StoreUnavailableError
from amsync.store.base import parse_label_selector


@dataclass
class _StoredSecret:
    data: dict[str, bytes]
    labels: dict[str, str] = field(default_factory=dict)


def _to_bytes(value: bytes | str) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


class InMemorySecretStore:
    """Dictionary-backed secret store for local development and tests."""

    def __init__(self) -> None:
        self._secrets: dict[tuple[str, str], _StoredSecret] = {}
        self.writes: list[tuple[str, str, dict[str, bytes]]] = []
        self.unavailable = False

    def add_secret(
        self,
        namespace: str,
        name: str,
        data: Mapping[str, bytes | str] | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        self._secrets[(namespace, name)] = _StoredSecret(
            data={k: _to_bytes(v) for k, v in (data or {}).items()},
            labels=dict(labels or {}),
        )

    def delete_secret(self, namespace: str, name: str) -> None:
        self._secrets.pop((namespace, name), None)

    def _check_available(self) -> None:
        if self.unavailable:
            raise StoreUnavailableError("In-memory store marked unavailable")

    def get(self, namespace: str, name: str) -> dict[str, bytes]:
        self._check_available()
        secret = self._secrets.get((namespace, name))
        if secret is None:
            raise SecretNotFoundError(namespace, name)
        return dict(secret.data)

    def list(self, namespace: str, label_selector: str = "") -> list[str]:
        self._check_available()
        wanted = parse_label_selector(label_selector)
        return [
            name
            for (ns, name), secret in self._secrets.items()
            if ns == namespace and all(secret.labels.get(k) == v for k, v in wanted.items())
        ]

    def put(self, namespace: str, name: str, fields: Mapping[str, bytes]) -> None:
        self._check_available()
        secret = self._secrets.get((namespace, name))
        if secret is None:
            raise SecretNotFoundError(namespace, name)
        secret.data.update(fields)
        self.writes.append((namespace, name, dict(fields)))
