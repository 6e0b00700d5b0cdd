"""
YAML codec for the Alertmanager configuration document.

``decode`` fails loudly: a document that cannot be parsed or does not fit the
expected shape raises ``MalformedConfigError`` and the pass stops. ``encode``
wraps serializer failures in ``EncodeError`` so callers never write a partial
document.
"""

from __future__ import annotations

import yaml

from amsync.alertmanager.config import AlertmanagerConfig
from amsync.core.errors import EncodeError, MalformedConfigError


def decode(raw: bytes | str) -> AlertmanagerConfig:
    """Parse persisted YAML into an ``AlertmanagerConfig``."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedConfigError("Alertmanager config is not valid UTF-8") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise MalformedConfigError(
            "Alertmanager config is not valid YAML", {"error": str(e)}
        ) from e

    if not isinstance(data, dict):
        raise MalformedConfigError(
            "Alertmanager config must be a mapping",
            {"found": type(data).__name__},
        )

    return AlertmanagerConfig.from_dict(data)


def encode(config: AlertmanagerConfig) -> bytes:
    """Serialize an ``AlertmanagerConfig`` to UTF-8 YAML bytes."""
    try:
        text = yaml.safe_dump(
            config.to_dict(),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        raise EncodeError("Failed to serialize Alertmanager config", {"error": str(e)}) from e
    return text.encode("utf-8")
