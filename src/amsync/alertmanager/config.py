"""
Alertmanager configuration document model.

Only the fields the channel merge engine touches are modelled. Everything
else (``global``, ``inhibit_rules``, other notifier kinds, route timing
knobs, ...) is kept verbatim in ``extra`` so a decode/encode cycle never
drops data owned by someone else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from amsync.core.errors import MalformedConfigError


def _require_mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedConfigError(
            f"Expected a mapping for {where}",
            {"where": where, "found": type(value).__name__},
        )
    return value


def _require_list(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedConfigError(
            f"Expected a list for {where}",
            {"where": where, "found": type(value).__name__},
        )
    return value


def _require_str_mapping(value: Any, where: str) -> dict[str, str]:
    data = _require_mapping(value, where)
    return {str(k): v for k, v in data.items()}


def _remaining(data: dict[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


@dataclass
class PagerDutyConfig:
    """A ``pagerduty_configs`` entry."""

    routing_key: str | None = None
    send_resolved: bool | None = None
    description: str | None = None
    details: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("send_resolved", "routing_key", "description", "details")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.send_resolved is not None:
            result["send_resolved"] = self.send_resolved
        if self.routing_key is not None:
            result["routing_key"] = self.routing_key
        if self.description is not None:
            result["description"] = self.description
        if self.details:
            result["details"] = dict(self.details)
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Any, where: str = "pagerduty_configs") -> PagerDutyConfig:
        data = _require_mapping(data, where)
        return cls(
            routing_key=data.get("routing_key"),
            send_resolved=data.get("send_resolved"),
            description=data.get("description"),
            details=_require_str_mapping(data.get("details"), f"{where}.details"),
            extra=_remaining(data, cls._KEYS),
        )


@dataclass
class WebhookConfig:
    """A ``webhook_configs`` entry."""

    url: str | None = None
    send_resolved: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("send_resolved", "url")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.send_resolved is not None:
            result["send_resolved"] = self.send_resolved
        if self.url is not None:
            result["url"] = self.url
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Any, where: str = "webhook_configs") -> WebhookConfig:
        data = _require_mapping(data, where)
        return cls(
            url=data.get("url"),
            send_resolved=data.get("send_resolved"),
            extra=_remaining(data, cls._KEYS),
        )


@dataclass
class Receiver:
    """Named notification channel configuration."""

    name: str
    pagerduty_configs: list[PagerDutyConfig] = field(default_factory=list)
    webhook_configs: list[WebhookConfig] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("name", "pagerduty_configs", "webhook_configs")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.pagerduty_configs:
            result["pagerduty_configs"] = [c.to_dict() for c in self.pagerduty_configs]
        if self.webhook_configs:
            result["webhook_configs"] = [c.to_dict() for c in self.webhook_configs]
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Any, where: str = "receivers") -> Receiver:
        data = _require_mapping(data, where)
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedConfigError("Receiver without a name", {"where": where})
        where = f"{where}[{name}]"
        return cls(
            name=name,
            pagerduty_configs=[
                PagerDutyConfig.from_dict(item, f"{where}.pagerduty_configs")
                for item in _require_list(data.get("pagerduty_configs"), f"{where}.pagerduty_configs")
            ],
            webhook_configs=[
                WebhookConfig.from_dict(item, f"{where}.webhook_configs")
                for item in _require_list(data.get("webhook_configs"), f"{where}.webhook_configs")
            ],
            extra=_remaining(data, cls._KEYS),
        )


@dataclass
class Route:
    """Routing rule; child routes are evaluated in document order."""

    receiver: str | None = None
    group_by: list[str] = field(default_factory=list)
    continue_: bool = False
    match: dict[str, str] = field(default_factory=dict)
    match_re: dict[str, str] = field(default_factory=dict)
    repeat_interval: str | None = None
    routes: list[Route] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = (
        "receiver",
        "group_by",
        "continue",
        "match",
        "match_re",
        "repeat_interval",
        "routes",
    )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.receiver is not None:
            result["receiver"] = self.receiver
        if self.group_by:
            result["group_by"] = list(self.group_by)
        if self.continue_:
            result["continue"] = True
        if self.match:
            result["match"] = dict(self.match)
        if self.match_re:
            result["match_re"] = dict(self.match_re)
        if self.repeat_interval is not None:
            result["repeat_interval"] = self.repeat_interval
        result.update(self.extra)
        if self.routes:
            result["routes"] = [r.to_dict() for r in self.routes]
        return result

    @classmethod
    def from_dict(cls, data: Any, where: str = "route") -> Route:
        data = _require_mapping(data, where)
        receiver = data.get("receiver")
        if receiver is not None and not isinstance(receiver, str):
            raise MalformedConfigError("Route receiver must be a string", {"where": where})
        continue_ = data.get("continue")
        if continue_ is None:
            continue_ = False
        if not isinstance(continue_, bool):
            raise MalformedConfigError("Route continue must be a boolean", {"where": where})
        return cls(
            receiver=receiver,
            group_by=list(_require_list(data.get("group_by"), f"{where}.group_by")),
            continue_=continue_,
            match=_require_str_mapping(data.get("match"), f"{where}.match"),
            match_re=_require_str_mapping(data.get("match_re"), f"{where}.match_re"),
            repeat_interval=data.get("repeat_interval"),
            routes=[
                cls.from_dict(item, f"{where}.routes[{i}]")
                for i, item in enumerate(_require_list(data.get("routes"), f"{where}.routes"))
            ],
            extra=_remaining(data, cls._KEYS),
        )


@dataclass
class AlertmanagerConfig:
    """Complete Alertmanager configuration document."""

    route: Route | None = None
    receivers: list[Receiver] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("route", "receivers")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        # global conventionally leads the document
        if "global" in self.extra:
            result["global"] = self.extra["global"]
        if self.route is not None:
            result["route"] = self.route.to_dict()
        if self.receivers:
            result["receivers"] = [r.to_dict() for r in self.receivers]
        for key, value in self.extra.items():
            if key != "global":
                result[key] = value
        return result

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: Any) -> AlertmanagerConfig:
        data = _require_mapping(data, "document")
        route = data.get("route")
        return cls(
            route=Route.from_dict(route) if route is not None else None,
            receivers=[
                Receiver.from_dict(item, f"receivers[{i}]")
                for i, item in enumerate(_require_list(data.get("receivers"), "receivers"))
            ],
            extra=_remaining(data, cls._KEYS),
        )

    def receiver_names(self) -> list[str]:
        return [r.name for r in self.receivers]

    def child_routes(self) -> list[Route]:
        """Top-level child routes, or an empty list when there is no route."""
        return self.route.routes if self.route is not None else []
