"""
Kubernetes secret store.

Reads and writes ``v1/Secret`` objects through the official ``kubernetes``
client. Secret data is base64-decoded on read and encoded on write; callers
only ever see raw bytes.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

import structlog
from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from amsync.core.errors import ConfigurationError, SecretNotFoundError, StoreUnavailableError

logger = structlog.get_logger()


@dataclass
class KubernetesSecretStore:
    """
    Secret store backed by the Kubernetes API.

    Configuration:
        kubeconfig: Path to kubeconfig file (optional)
        context: Kubeconfig context to use (optional)
        timeout: API request timeout in seconds

    In-cluster service account credentials are tried first, then kubeconfig.
    """

    kubeconfig: str | None = None
    context: str | None = None
    timeout: float = 30.0

    _api_client: Any = field(default=None, repr=False, compare=False)
    _initialized: bool = field(default=False, repr=False, compare=False)

    def _ensure_initialized(self) -> None:
        """Initialize Kubernetes client if not already done."""
        if self._initialized:
            return

        try:
            config.load_incluster_config()
        except config.ConfigException:
            try:
                config.load_kube_config(
                    config_file=self.kubeconfig,
                    context=self.context,
                )
            except config.ConfigException as e:
                raise ConfigurationError(f"Failed to load Kubernetes config: {e}") from e

        self._api_client = client.ApiClient()
        self._initialized = True

    def _get_core_api(self) -> Any:
        """Get CoreV1Api client."""
        self._ensure_initialized()
        return client.CoreV1Api(self._api_client)

    def get(self, namespace: str, name: str) -> dict[str, bytes]:
        try:
            secret = self._get_core_api().read_namespaced_secret(
                name, namespace, _request_timeout=self.timeout
            )
        except ApiException as e:
            if e.status == 404:
                raise SecretNotFoundError(namespace, name) from e
            raise StoreUnavailableError(
                f"Failed to read secret {namespace}/{name}",
                {"status": e.status, "reason": e.reason},
            ) from e
        except HTTPError as e:
            raise StoreUnavailableError(
                f"Failed to read secret {namespace}/{name}", {"error": str(e)}
            ) from e

        return {key: base64.b64decode(value) for key, value in (secret.data or {}).items()}

    def list(self, namespace: str, label_selector: str = "") -> list[str]:
        kwargs: dict[str, Any] = {"_request_timeout": self.timeout}
        if label_selector:
            kwargs["label_selector"] = label_selector
        try:
            secrets = self._get_core_api().list_namespaced_secret(namespace, **kwargs)
        except (ApiException, HTTPError) as e:
            raise StoreUnavailableError(
                f"Failed to list secrets in {namespace}",
                {"label_selector": label_selector, "error": str(e)},
            ) from e

        return [item.metadata.name for item in secrets.items]

    def put(self, namespace: str, name: str, fields: Mapping[str, bytes]) -> None:
        body = {
            "data": {key: base64.b64encode(value).decode("ascii") for key, value in fields.items()}
        }
        try:
            self._get_core_api().patch_namespaced_secret(
                name, namespace, body, _request_timeout=self.timeout
            )
        except ApiException as e:
            if e.status == 404:
                raise SecretNotFoundError(namespace, name) from e
            raise StoreUnavailableError(
                f"Failed to update secret {namespace}/{name}",
                {"status": e.status, "reason": e.reason},
            ) from e
        except HTTPError as e:
            raise StoreUnavailableError(
                f"Failed to update secret {namespace}/{name}", {"error": str(e)}
            ) from e

        logger.debug("secret_patched", namespace=namespace, name=name, keys=sorted(fields))

    def watch_events(self, namespace: str, timeout_seconds: int = 300) -> Iterator[tuple[str, str]]:
        """
        Stream ``(event_type, secret_name)`` pairs for every secret in a namespace.

        The stream ends when the server-side timeout expires; callers restart it.
        """
        watcher = watch.Watch()
        try:
            for event in watcher.stream(
                self._get_core_api().list_namespaced_secret,
                namespace,
                timeout_seconds=timeout_seconds,
            ):
                if event["type"] == "ERROR":
                    raise StoreUnavailableError(
                        f"Secret watch returned an error in {namespace}",
                        {"error": str(event.get("raw_object") or event["object"])},
                    )
                yield event["type"], event["object"].metadata.name
        except (ApiException, HTTPError) as e:
            raise StoreUnavailableError(
                f"Secret watch failed in {namespace}", {"error": str(e)}
            ) from e
        finally:
            watcher.stop()
