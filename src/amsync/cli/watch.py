"""
Controller loop command.
"""

from __future__ import annotations

import signal

from amsync.cli.reconcile import default_store
from amsync.config.settings import Settings
from amsync.core.errors import ExitCode, main_with_error_handling
from amsync.reconcile.engine import Reconciler
from amsync.watch import SecretWatcher, kubernetes_event_source


@main_with_error_handling()
def watch_command(settings: Settings, namespace: str | None = None) -> int:
    """Watch secrets and keep the Alertmanager config in sync until interrupted."""
    namespace = namespace or settings.namespace
    store = default_store(settings)

    watcher = SecretWatcher(
        Reconciler.from_settings(store, settings),
        kubernetes_event_source(store, namespace, settings.watch_timeout),
        retry_base_delay=settings.retry_base_delay,
        retry_max_delay=settings.retry_max_delay,
    )
    signal.signal(signal.SIGTERM, lambda *_: watcher.stop())
    try:
        watcher.run()
    except KeyboardInterrupt:
        watcher.stop()
    return ExitCode.SUCCESS
