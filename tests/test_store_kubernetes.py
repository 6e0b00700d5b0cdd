"""Tests for the Kubernetes secret store."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from amsync.core.errors import ConfigurationError, SecretNotFoundError, StoreUnavailableError
from amsync.store.kubernetes import KubernetesSecretStore


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


@pytest.fixture
def core_api():
    return MagicMock()


@pytest.fixture
def k8s_store(core_api):
    store = KubernetesSecretStore(timeout=5)
    with patch.object(store, "_get_core_api", return_value=core_api):
        yield store


class TestKubernetesSecretStoreInit:
    """Tests for client initialization."""

    def test_default_config(self):
        store = KubernetesSecretStore()

        assert store.kubeconfig is None
        assert store.context is None
        assert store.timeout == 30.0

    def test_falls_back_to_kubeconfig(self):
        from kubernetes import config

        store = KubernetesSecretStore(kubeconfig="/tmp/kubeconfig", context="dev")
        with patch("amsync.store.kubernetes.config.load_incluster_config",
                   side_effect=config.ConfigException("not in cluster")):
            with patch("amsync.store.kubernetes.config.load_kube_config") as load_kube:
                with patch("amsync.store.kubernetes.client.ApiClient"):
                    store._ensure_initialized()

        load_kube.assert_called_once_with(config_file="/tmp/kubeconfig", context="dev")
        assert store._initialized is True

    def test_no_config_available(self):
        from kubernetes import config

        store = KubernetesSecretStore()
        with patch("amsync.store.kubernetes.config.load_incluster_config",
                   side_effect=config.ConfigException("not in cluster")):
            with patch("amsync.store.kubernetes.config.load_kube_config",
                       side_effect=config.ConfigException("no kubeconfig")):
                with pytest.raises(ConfigurationError):
                    store._ensure_initialized()


class TestGet:
    def test_decodes_data(self, k8s_store, core_api):
        secret = MagicMock()
        secret.data = {"PAGERDUTY_KEY": _b64("ABC123")}
        core_api.read_namespaced_secret.return_value = secret

        assert k8s_store.get("ns", "pd-secret") == {"PAGERDUTY_KEY": b"ABC123"}
        core_api.read_namespaced_secret.assert_called_once_with("pd-secret", "ns", _request_timeout=5)

    def test_empty_data(self, k8s_store, core_api):
        core_api.read_namespaced_secret.return_value = MagicMock(data=None)

        assert k8s_store.get("ns", "empty") == {}

    def test_not_found(self, k8s_store, core_api):
        core_api.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(SecretNotFoundError):
            k8s_store.get("ns", "pd-secret")

    def test_server_error(self, k8s_store, core_api):
        core_api.read_namespaced_secret.side_effect = ApiException(status=500, reason="boom")

        with pytest.raises(StoreUnavailableError) as exc_info:
            k8s_store.get("ns", "pd-secret")
        assert exc_info.value.details["status"] == 500

    def test_connection_error(self, k8s_store, core_api):
        core_api.read_namespaced_secret.side_effect = MaxRetryError(None, "/api", "refused")

        with pytest.raises(StoreUnavailableError):
            k8s_store.get("ns", "pd-secret")


class TestList:
    def test_names_with_selector(self, k8s_store, core_api):
        items = []
        for name in ("alertmanager-main", "pd-secret"):
            item = MagicMock()
            item.metadata.name = name
            items.append(item)
        core_api.list_namespaced_secret.return_value = MagicMock(items=items)

        names = k8s_store.list("ns", "k8s-app=alertmanager-config-operator")

        assert names == ["alertmanager-main", "pd-secret"]
        core_api.list_namespaced_secret.assert_called_once_with(
            "ns", _request_timeout=5, label_selector="k8s-app=alertmanager-config-operator"
        )

    def test_no_selector(self, k8s_store, core_api):
        core_api.list_namespaced_secret.return_value = MagicMock(items=[])

        assert k8s_store.list("ns") == []
        core_api.list_namespaced_secret.assert_called_once_with("ns", _request_timeout=5)

    def test_failure(self, k8s_store, core_api):
        core_api.list_namespaced_secret.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(StoreUnavailableError):
            k8s_store.list("ns")


class TestPut:
    def test_patches_base64_data(self, k8s_store, core_api):
        k8s_store.put("ns", "alertmanager-main", {"alertmanager.yaml": b"route: {}\n"})

        core_api.patch_namespaced_secret.assert_called_once_with(
            "alertmanager-main",
            "ns",
            {"data": {"alertmanager.yaml": _b64("route: {}\n")}},
            _request_timeout=5,
        )

    def test_conflict_is_unavailable(self, k8s_store, core_api):
        core_api.patch_namespaced_secret.side_effect = ApiException(status=409, reason="Conflict")

        with pytest.raises(StoreUnavailableError):
            k8s_store.put("ns", "alertmanager-main", {"alertmanager.yaml": b""})

    def test_missing_secret(self, k8s_store, core_api):
        core_api.patch_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(SecretNotFoundError):
            k8s_store.put("ns", "alertmanager-main", {"alertmanager.yaml": b""})


class TestWatchEvents:
    def _event(self, event_type, name):
        obj = MagicMock()
        obj.metadata.name = name
        return {"type": event_type, "object": obj}

    def test_yields_type_and_name(self, k8s_store, core_api):
        watcher = MagicMock()
        watcher.stream.return_value = iter(
            [self._event("ADDED", "pd-secret"), self._event("DELETED", "dms-secret")]
        )
        with patch("amsync.store.kubernetes.watch.Watch", return_value=watcher):
            events = list(k8s_store.watch_events("ns", timeout_seconds=10))

        assert events == [("ADDED", "pd-secret"), ("DELETED", "dms-secret")]
        watcher.stream.assert_called_once_with(
            core_api.list_namespaced_secret, "ns", timeout_seconds=10
        )
        watcher.stop.assert_called_once()

    def test_error_event(self, k8s_store):
        watcher = MagicMock()
        watcher.stream.return_value = iter(
            [{"type": "ERROR", "object": {"code": 410}, "raw_object": {"code": 410}}]
        )
        with patch("amsync.store.kubernetes.watch.Watch", return_value=watcher):
            with pytest.raises(StoreUnavailableError):
                list(k8s_store.watch_events("ns"))
