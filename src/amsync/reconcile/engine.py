"""
Reconciliation orchestrator.

A pass is triggered by a ``(namespace, name)`` pair and runs synchronously:

    filtering -> loading -> resolving -> merging -> persisting -> done

Credential presence is always re-resolved from a label-filtered namespace
listing, so the secret named by the trigger only decides whether a pass runs
at all. The config secret is fetched by name and does not need the label.
Every failure propagates to the caller, which is expected to redeliver the
trigger later.
"""

from __future__ import annotations

from typing import Iterable

from amsync.alertmanager import codec
from amsync.alertmanager.config import AlertmanagerConfig
from amsync.alertmanager.integrations import MONITORED_INTEGRATIONS, Integration
from amsync.config.settings import Settings
from amsync.core.errors import MalformedConfigError, SecretNotFoundError
from amsync.logging import bind_context
from amsync.reconcile.merge import remove_channel, upsert_channel
from amsync.reconcile.presence import Presence, resolve_presence
from amsync.reconcile.results import (
    ChannelAction,
    ChannelChange,
    Outcome,
    ReconcileResult,
    ReconcileState,
)
from amsync.store.base import SecretStore


class Reconciler:
    """Keeps the Alertmanager config secret in step with credential secrets."""

    def __init__(
        self,
        store: SecretStore,
        *,
        config_secret_name: str = "alertmanager-main",
        config_secret_key: str = "alertmanager.yaml",
        label_selector: str = "k8s-app=alertmanager-config-operator",
        integrations: Iterable[Integration] = MONITORED_INTEGRATIONS,
    ) -> None:
        self._store = store
        self.config_secret_name = config_secret_name
        self.config_secret_key = config_secret_key
        self.label_selector = label_selector
        self.integrations = tuple(integrations)

    @classmethod
    def from_settings(cls, store: SecretStore, settings: Settings) -> Reconciler:
        return cls(
            store,
            config_secret_name=settings.config_secret_name,
            config_secret_key=settings.config_secret_key,
            label_selector=settings.label_selector,
        )

    @property
    def monitored_names(self) -> frozenset[str]:
        names = {i.secret_name for i in self.integrations}
        names.add(self.config_secret_name)
        return frozenset(names)

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Run one reconciliation pass for a trigger naming ``namespace/name``."""
        log = bind_context(namespace=namespace, name=name)
        result = ReconcileResult(namespace=namespace, name=name)

        result.enter(ReconcileState.FILTERING)
        if name not in self.monitored_names:
            log.debug("reconcile_skipped_unmonitored")
            return result.finish(Outcome.IGNORED)

        log.info("reconcile_started")

        result.enter(ReconcileState.LOADING)
        try:
            self._store.get(namespace, name)
        except SecretNotFoundError:
            log.info("trigger_secret_absent")

        result.enter(ReconcileState.RESOLVING)
        config_fields = self._fetch_config_secret(namespace)
        # the config secret is owned elsewhere and may lack the selector label
        listed = [
            n for n in self._store.list(namespace, self.label_selector)
            if n != self.config_secret_name
        ]
        if config_fields is not None:
            listed.append(self.config_secret_name)
        presence = resolve_presence(listed, self.config_secret_name, self.integrations)
        if not presence.config_present:
            log.info("reconcile_deferred", reason="config_secret_absent")
            return result.finish(Outcome.DEFERRED)

        result.enter(ReconcileState.MERGING)
        config = self._decode_config(namespace, config_fields)

        for integration in self.integrations:
            result.channels.append(self._merge(namespace, integration, presence, config))

        if not result.changed_channels:
            log.info("reconcile_finished", outcome=Outcome.UNCHANGED.value)
            return result.finish(Outcome.UNCHANGED)

        result.enter(ReconcileState.PERSISTING)
        payload = codec.encode(config)
        self._store.put(namespace, self.config_secret_name, {self.config_secret_key: payload})
        log.info(
            "alertmanager_config_updated",
            secret=self.config_secret_name,
            channels=result.changed_channels,
        )
        return result.finish(Outcome.UPDATED)

    def _fetch_config_secret(self, namespace: str) -> dict[str, bytes] | None:
        try:
            return self._store.get(namespace, self.config_secret_name)
        except SecretNotFoundError:
            return None

    def _decode_config(self, namespace: str, fields: dict[str, bytes]) -> AlertmanagerConfig:
        raw = fields.get(self.config_secret_key)
        if raw is None:
            raise MalformedConfigError(
                f"Secret {self.config_secret_name} has no {self.config_secret_key} key",
                {"namespace": namespace, "secret": self.config_secret_name},
            )
        return codec.decode(raw)

    def _merge(
        self,
        namespace: str,
        integration: Integration,
        presence: Presence,
        config: AlertmanagerConfig,
    ) -> ChannelChange:
        value = self._credential(namespace, integration) if presence.is_present(integration) else None

        if value is None:
            changed = remove_channel(config, integration)
            action = ChannelAction.REMOVE
        else:
            changed = upsert_channel(config, integration, value)
            action = ChannelAction.UPSERT

        bind_context(namespace=namespace, integration=integration.name).debug(
            "channel_merged", action=action.value, changed=changed
        )
        return ChannelChange(integration=integration.name, action=action, changed=changed)

    def _credential(self, namespace: str, integration: Integration) -> str | None:
        """Return the credential for an integration, or None when it cannot be used."""
        log = bind_context(namespace=namespace, secret=integration.secret_name)
        try:
            fields = self._store.get(namespace, integration.secret_name)
        except SecretNotFoundError:
            log.info("credential_secret_vanished")
            return None

        raw = fields.get(integration.secret_key)
        if raw is None:
            log.warning("credential_field_missing", field=integration.secret_key)
            return None

        try:
            value = raw.decode("utf-8").strip()
        except UnicodeDecodeError:
            log.warning("credential_not_utf8", field=integration.secret_key)
            return None

        if not value:
            log.warning("credential_field_empty", field=integration.secret_key)
            return None
        return value
