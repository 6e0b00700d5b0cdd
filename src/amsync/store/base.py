"""Secret store interface consumed by the reconciler."""

from __future__ import annotations

from typing import Mapping, Protocol


class SecretStore(Protocol):
    """
    Key/value secret objects addressed by namespace and name.

    Implementations raise ``SecretNotFoundError`` when a secret does not
    exist and ``StoreUnavailableError`` for transient failures.
    """

    def get(self, namespace: str, name: str) -> dict[str, bytes]:
        """Return the decoded data fields of a secret."""
        ...

    def list(self, namespace: str, label_selector: str = "") -> list[str]:
        """Return names of secrets matching an equality label selector."""
        ...

    def put(self, namespace: str, name: str, fields: Mapping[str, bytes]) -> None:
        """Write data fields into an existing secret."""
        ...


def parse_label_selector(selector: str) -> dict[str, str]:
    """Parse an equality label selector string (``k=v,k2=v2``) into a dict."""
    result: dict[str, str] = {}
    for part in selector.split(","):
        part = part.strip()
        if "=" in part:
            key, value = part.split("=", 1)
            result[key.strip()] = value.strip()
    return result
