"""
One-shot reconcile command.
"""

from __future__ import annotations

import json

from amsync.cli.ux import console, info, print_table, success, warning
from amsync.config.settings import Settings
from amsync.core.errors import ExitCode, main_with_error_handling
from amsync.reconcile.engine import Reconciler
from amsync.reconcile.results import Outcome, ReconcileResult
from amsync.store.base import SecretStore
from amsync.store.kubernetes import KubernetesSecretStore


def default_store(settings: Settings) -> SecretStore:
    return KubernetesSecretStore(
        kubeconfig=settings.kubeconfig,
        context=settings.context,
        timeout=settings.request_timeout,
    )


def result_to_dict(result: ReconcileResult) -> dict:
    return {
        "namespace": result.namespace,
        "name": result.name,
        "outcome": result.outcome.value,
        "channels": [
            {"integration": c.integration, "action": c.action.value, "changed": c.changed}
            for c in result.channels
        ],
        "states": [s.value for s in result.states],
    }


def print_result(result: ReconcileResult) -> None:
    target = f"{result.namespace}/{result.name}"
    if result.outcome is Outcome.IGNORED:
        info(f"{target} is not a monitored secret, nothing to do")
        return
    if result.outcome is Outcome.DEFERRED:
        warning(f"{target}: Alertmanager config secret not present yet, deferred")
        return

    print_table(
        "Channels",
        ["Integration", "Action", "Changed"],
        [[c.integration, c.action.value, "yes" if c.changed else "no"] for c in result.channels],
    )
    if result.written:
        success("Alertmanager config updated")
    else:
        success("Alertmanager config already up to date")


@main_with_error_handling()
def reconcile_command(
    name: str,
    settings: Settings,
    namespace: str | None = None,
    output_format: str = "text",
    store: SecretStore | None = None,
) -> int:
    """
    Run a single reconciliation pass as if ``name`` had changed.

    Args:
        name: Secret name to treat as the trigger
        settings: Loaded settings
        namespace: Namespace override (defaults to settings.namespace)
        output_format: "text" or "json"
        store: Secret store override, Kubernetes by default

    Returns:
        Exit code
    """
    store = store or default_store(settings)
    reconciler = Reconciler.from_settings(store, settings)
    result = reconciler.reconcile(namespace or settings.namespace, name)

    if output_format == "json":
        console.print_json(json.dumps(result_to_dict(result)))
    else:
        print_result(result)
    return ExitCode.SUCCESS
