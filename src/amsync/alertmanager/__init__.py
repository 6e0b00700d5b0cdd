"""
Alertmanager configuration handling.

Models the parts of an Alertmanager configuration that amsync manages,
the YAML codec, and the monitored PagerDuty and watchdog integrations.
"""

from amsync.alertmanager.codec import decode, encode
from amsync.alertmanager.config import (
    AlertmanagerConfig,
    PagerDutyConfig,
    Receiver,
    Route,
    WebhookConfig,
)
from amsync.alertmanager.integrations import (
    MONITORED_INTEGRATIONS,
    PAGERDUTY,
    WATCHDOG,
    Integration,
)

__all__ = [
    "AlertmanagerConfig",
    "PagerDutyConfig",
    "Receiver",
    "Route",
    "WebhookConfig",
    "decode",
    "encode",
    "Integration",
    "MONITORED_INTEGRATIONS",
    "PAGERDUTY",
    "WATCHDOG",
]
