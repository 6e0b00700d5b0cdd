"""
Monitored integrations and their canonical Alertmanager payloads.

Each integration is driven by one credential secret. When the secret is
present the integration owns exactly one receiver and one child route, both
named after the integration; the payloads below are built purely from the
secret value so repeated passes produce identical documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from amsync.alertmanager.config import PagerDutyConfig, Route, WebhookConfig

# Namespaces whose alerts page the on-call engineer
PAGERDUTY_NAMESPACE_REGEX = "^openshift$|openshift-.*|default$|kube$|kube-.*|logging$"

PAGERDUTY_DESCRIPTION = (
    "{{ .CommonLabels.alertname }} {{ .CommonLabels.severity | toUpper }} ({{ len .Alerts }})"
)

PAGERDUTY_DETAILS = {
    "link": "{{ .CommonAnnotations.link }}?",
    "group": "{{ .CommonLabels.alertname }}",
    "component": "{{ .CommonLabels.alertname }}",
    "num_firing": "{{ .Alerts.Firing | len }}",
    "num_resolved": "{{ .Alerts.Resolved | len }}",
    "resolved": "{{ template pagerduty.default.instances .Alerts.Resolved }}",
}

WATCHDOG_ALERT_NAME = "Watchdog"
WATCHDOG_REPEAT_INTERVAL = "5m"


def pagerduty_channel(routing_key: str) -> PagerDutyConfig:
    return PagerDutyConfig(
        routing_key=routing_key,
        send_resolved=True,
        description=PAGERDUTY_DESCRIPTION,
        details=dict(PAGERDUTY_DETAILS),
    )


def pagerduty_route() -> Route:
    return Route(
        receiver=PAGERDUTY.name,
        continue_=True,
        group_by=["alertname", "severity"],
        match_re={"namespace": PAGERDUTY_NAMESPACE_REGEX},
    )


def watchdog_channel(url: str) -> WebhookConfig:
    return WebhookConfig(url=url, send_resolved=False)


def watchdog_route() -> Route:
    return Route(
        receiver=WATCHDOG.name,
        repeat_interval=WATCHDOG_REPEAT_INTERVAL,
        match={"alertname": WATCHDOG_ALERT_NAME},
    )


@dataclass(frozen=True)
class Integration:
    """
    A notification channel whose presence follows a credential secret.

    Attributes:
        name: Receiver name, also the ``receiver`` of its route
        secret_name: Secret holding the credential
        secret_key: Field inside the secret holding the credential
        channel_field: Receiver attribute the channel config is stored under
        build_channel: Builds the channel config from the credential value
        build_route: Builds the canonical child route
    """

    name: str
    secret_name: str
    secret_key: str
    channel_field: str
    build_channel: Callable[[str], Any]
    build_route: Callable[[], Route]

    def __str__(self) -> str:
        return self.name


PAGERDUTY = Integration(
    name="pagerduty",
    secret_name="pd-secret",
    secret_key="PAGERDUTY_KEY",
    channel_field="pagerduty_configs",
    build_channel=pagerduty_channel,
    build_route=pagerduty_route,
)

WATCHDOG = Integration(
    name="watchdog",
    secret_name="dms-secret",
    secret_key="SNITCH_URL",
    channel_field="webhook_configs",
    build_channel=watchdog_channel,
    build_route=watchdog_route,
)

MONITORED_INTEGRATIONS: tuple[Integration, ...] = (PAGERDUTY, WATCHDOG)
