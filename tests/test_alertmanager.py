"""Tests for the Alertmanager configuration model."""

import pytest

from amsync.alertmanager import (
    AlertmanagerConfig,
    PagerDutyConfig,
    Receiver,
    Route,
    WebhookConfig,
)
from amsync.alertmanager.integrations import (
    PAGERDUTY,
    PAGERDUTY_DETAILS,
    PAGERDUTY_NAMESPACE_REGEX,
    WATCHDOG,
)
from amsync.core.errors import MalformedConfigError


class TestPagerDutyConfig:
    """Tests for PagerDutyConfig."""

    def test_to_dict_minimal(self):
        """Unset fields are omitted."""
        result = PagerDutyConfig(routing_key="abc123").to_dict()

        assert result == {"routing_key": "abc123"}

    def test_unknown_keys_survive(self):
        """Keys the model does not know pass through."""
        config = PagerDutyConfig.from_dict(
            {"routing_key": "abc", "severity": "critical", "url": "https://events.pagerduty.com"}
        )

        assert config.extra == {"severity": "critical", "url": "https://events.pagerduty.com"}
        assert config.to_dict()["severity"] == "critical"

    def test_details_must_be_mapping(self):
        with pytest.raises(MalformedConfigError):
            PagerDutyConfig.from_dict({"routing_key": "abc", "details": ["nope"]})


class TestReceiver:
    """Tests for Receiver."""

    def test_to_dict(self):
        receiver = Receiver(
            name="platform-pagerduty",
            pagerduty_configs=[PagerDutyConfig(routing_key="abc123")],
        )
        result = receiver.to_dict()

        assert result["name"] == "platform-pagerduty"
        assert len(result["pagerduty_configs"]) == 1
        assert result["pagerduty_configs"][0]["routing_key"] == "abc123"
        assert "webhook_configs" not in result

    def test_other_notifiers_pass_through(self):
        """Slack/email configs are kept in extra and written back."""
        data = {
            "name": "team",
            "slack_configs": [{"channel": "#alerts"}],
            "webhook_configs": [{"url": "https://hook"}],
        }
        receiver = Receiver.from_dict(data)

        assert receiver.webhook_configs == [WebhookConfig(url="https://hook")]
        assert receiver.extra == {"slack_configs": [{"channel": "#alerts"}]}
        assert receiver.to_dict() == data

    def test_receiver_requires_name(self):
        with pytest.raises(MalformedConfigError):
            Receiver.from_dict({"webhook_configs": []})


class TestRoute:
    """Tests for Route."""

    def test_to_dict_minimal(self):
        assert Route(receiver="default").to_dict() == {"receiver": "default"}

    def test_continue_only_written_when_true(self):
        assert "continue" not in Route(receiver="a").to_dict()
        assert Route(receiver="a", continue_=True).to_dict()["continue"] is True

    def test_from_dict_nested(self):
        route = Route.from_dict(
            {
                "receiver": "parent",
                "group_wait": "30s",
                "routes": [{"receiver": "child", "match_re": {"service": "^api-.*"}}],
            }
        )

        assert route.receiver == "parent"
        assert route.extra == {"group_wait": "30s"}
        assert route.routes[0].receiver == "child"
        assert route.routes[0].match_re == {"service": "^api-.*"}

    def test_routes_must_be_list(self):
        with pytest.raises(MalformedConfigError):
            Route.from_dict({"receiver": "x", "routes": {"receiver": "y"}})

    def test_continue_must_be_boolean(self):
        with pytest.raises(MalformedConfigError):
            Route.from_dict({"receiver": "x", "continue": "false"})

    def test_null_continue_means_false(self):
        assert Route.from_dict({"receiver": "x", "continue": None}).continue_ is False


class TestAlertmanagerConfig:
    """Tests for AlertmanagerConfig."""

    def test_global_leads_document(self):
        config = AlertmanagerConfig.from_dict(
            {
                "receivers": [{"name": "default"}],
                "route": {"receiver": "default"},
                "global": {"resolve_timeout": "5m"},
                "templates": ["/etc/alertmanager/*.tmpl"],
            }
        )

        assert list(config.to_dict()) == ["global", "route", "receivers", "templates"]

    def test_to_yaml(self):
        config = AlertmanagerConfig(
            route=Route(receiver="default"),
            receivers=[Receiver(name="default")],
        )
        yaml_output = config.to_yaml()

        assert "route:" in yaml_output
        assert "receivers:" in yaml_output

    def test_child_routes_without_route(self):
        assert AlertmanagerConfig().child_routes() == []


class TestCanonicalPayloads:
    """Tests for the integration payload builders."""

    def test_pagerduty_channel(self):
        channel = PAGERDUTY.build_channel("ABC123")

        assert channel.routing_key == "ABC123"
        assert channel.send_resolved is True
        assert channel.details == PAGERDUTY_DETAILS
        assert "toUpper" in channel.description

    def test_pagerduty_route(self):
        route = PAGERDUTY.build_route()

        assert route.receiver == "pagerduty"
        assert route.continue_ is True
        assert route.group_by == ["alertname", "severity"]
        assert route.match_re == {"namespace": PAGERDUTY_NAMESPACE_REGEX}

    def test_watchdog_payloads(self):
        channel = WATCHDOG.build_channel("https://nosnch.in/abc")
        route = WATCHDOG.build_route()

        assert channel.url == "https://nosnch.in/abc"
        assert route.to_dict() == {
            "receiver": "watchdog",
            "match": {"alertname": "Watchdog"},
            "repeat_interval": "5m",
        }

    def test_payloads_are_fresh_objects(self):
        """Builders never share mutable state between calls."""
        first = PAGERDUTY.build_channel("a")
        first.details["link"] = "changed"

        assert PAGERDUTY.build_channel("a").details == PAGERDUTY_DETAILS
