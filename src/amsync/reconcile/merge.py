"""
Channel merge engine.

``upsert_channel`` and ``remove_channel`` edit an ``AlertmanagerConfig`` in
place so that a monitored integration ends up with exactly one receiver and
one child route (upsert) or none at all (remove). Receivers and routes that
belong to anything else keep their content and relative order.

Both operations are idempotent and return whether the document changed.
"""

from __future__ import annotations

from amsync.alertmanager.config import AlertmanagerConfig, Receiver, Route
from amsync.alertmanager.integrations import Integration


def upsert_channel(config: AlertmanagerConfig, integration: Integration, secret_value: str) -> bool:
    """
    Insert or overwrite the receiver and route for an integration.

    The first receiver carrying the integration name keeps its position and
    has its channel list replaced; other notifier kinds on it are left alone.
    The first matching child route is replaced by the canonical route. Later
    duplicates of either are dropped, and missing ones are appended.
    """
    before = config.to_dict()

    channel = integration.build_channel(secret_value)
    config.receivers = _upsert_receiver(config.receivers, integration, channel)

    if config.route is None:
        config.route = Route()
    config.route.routes = _upsert_route(config.route.routes, integration)

    return config.to_dict() != before


def remove_channel(config: AlertmanagerConfig, integration: Integration) -> bool:
    """Remove every receiver and child route owned by an integration."""
    receivers = [r for r in config.receivers if r.name != integration.name]
    routes = [r for r in config.child_routes() if r.receiver != integration.name]

    changed = len(receivers) != len(config.receivers) or len(routes) != len(
        config.child_routes()
    )
    if not changed:
        return False

    config.receivers = receivers
    if config.route is not None:
        config.route.routes = routes
    return True


def _upsert_receiver(
    receivers: list[Receiver], integration: Integration, channel: object
) -> list[Receiver]:
    result: list[Receiver] = []
    found = False
    for receiver in receivers:
        if receiver.name != integration.name:
            result.append(receiver)
            continue
        if found:
            continue
        setattr(receiver, integration.channel_field, [channel])
        result.append(receiver)
        found = True

    if not found:
        receiver = Receiver(name=integration.name)
        setattr(receiver, integration.channel_field, [channel])
        result.append(receiver)
    return result


def _upsert_route(routes: list[Route], integration: Integration) -> list[Route]:
    result: list[Route] = []
    found = False
    for route in routes:
        if route.receiver != integration.name:
            result.append(route)
            continue
        if found:
            continue
        result.append(integration.build_route())
        found = True

    if not found:
        result.append(integration.build_route())
    return result
