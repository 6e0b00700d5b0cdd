"""
Watch-driven trigger source.

Secret events from the cluster are turned into reconcile requests on a
de-duplicating work queue. A request whose pass fails is scheduled again with
exponential backoff; a fresh event for the same secret supersedes the pending
retry. Passes run one at a time on the calling thread while a daemon thread
keeps the watch stream open, reconnecting with the same backoff.
"""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_when_event_set,
    wait_exponential,
)

from amsync.reconcile.engine import Reconciler
from amsync.reconcile.results import ReconcileResult

logger = structlog.get_logger()


@dataclass(frozen=True)
class SecretEvent:
    """A change notification for one secret."""

    namespace: str
    name: str
    type: str = "MODIFIED"

    @property
    def key(self) -> tuple[str, str]:
        return (self.namespace, self.name)


EventSource = Callable[[], Iterable[SecretEvent]]


class SecretWatcher:
    """Feeds secret events into a Reconciler and requeues failed passes."""

    def __init__(
        self,
        reconciler: Reconciler,
        source: EventSource,
        *,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 300.0,
        poll_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.reconciler = reconciler
        self.source = source
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.poll_interval = poll_interval
        self.clock = clock

        self._events: queue.Queue[SecretEvent] = queue.Queue()
        # keys currently sitting in _events
        self._queued: set[tuple[str, str]] = set()
        self._queued_lock = threading.Lock()
        # key -> (due_at, attempts)
        self._retries: dict[tuple[str, str], tuple[float, int]] = {}
        self._stop = threading.Event()

        self._wait = wait_exponential(multiplier=retry_base_delay, max=retry_max_delay)
        self._stream_retrying = Retrying(
            retry=retry_if_exception_type(Exception),
            wait=self._wait,
            stop=stop_when_event_set(self._stop),
            sleep=self._stop.wait,
            before_sleep=self._log_stream_failure,
            reraise=True,
        )

    @property
    def pending_retries(self) -> dict[tuple[str, str], tuple[float, int]]:
        return dict(self._retries)

    def retry_delay(self, attempts: int) -> float:
        """Backoff for the given attempt number (1-based)."""
        state = RetryCallState(retry_object=self._stream_retrying, fn=None, args=(), kwargs={})
        state.attempt_number = attempts
        return self._wait(state)

    def enqueue(self, event: SecretEvent) -> bool:
        """Queue an event unless one for the same secret is already waiting."""
        with self._queued_lock:
            if event.key in self._queued:
                return False
            self._queued.add(event.key)
        self._events.put(event)
        return True

    def consume(self, events: Iterable[SecretEvent]) -> int:
        """Enqueue events for monitored secrets; returns how many were queued."""
        monitored = self.reconciler.monitored_names
        count = 0
        for event in events:
            if self._stop.is_set():
                break
            if event.name not in monitored:
                continue
            logger.debug("secret_event", namespace=event.namespace, name=event.name, type=event.type)
            if self.enqueue(event):
                count += 1
        return count

    def handle(self, event: SecretEvent, attempts: int = 0) -> ReconcileResult | None:
        """Run one pass; on failure schedule a retry and return None."""
        self._retries.pop(event.key, None)
        try:
            return self.reconciler.reconcile(event.namespace, event.name)
        except Exception as exc:
            attempts += 1
            delay = self.retry_delay(attempts)
            self._retries[event.key] = (self.clock() + delay, attempts)
            logger.error(
                "reconcile_failed",
                namespace=event.namespace,
                name=event.name,
                error_type=type(exc).__name__,
                error=str(exc),
                attempts=attempts,
                retry_in=delay,
            )
            return None

    def process_due_retries(self) -> int:
        """Rerun passes whose backoff has elapsed; returns how many ran."""
        now = self.clock()
        due = [(key, attempts) for key, (due_at, attempts) in self._retries.items() if due_at <= now]
        for (namespace, name), attempts in due:
            logger.info("reconcile_retry", namespace=namespace, name=name, attempts=attempts)
            self.handle(SecretEvent(namespace, name, "RETRY"), attempts=attempts)
        return len(due)

    def step(self, timeout: float | None = None) -> None:
        """Handle at most one queued event, then any due retries."""
        try:
            event = self._events.get(timeout=self.poll_interval if timeout is None else timeout)
        except queue.Empty:
            pass
        else:
            # a change arriving during the pass queues another one
            with self._queued_lock:
                self._queued.discard(event.key)
            self.handle(event)
        self.process_due_retries()

    def _consume_stream(self) -> None:
        self.consume(self.source())

    def _log_stream_failure(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.error(
            "watch_stream_failed",
            error=str(exc),
            attempts=retry_state.attempt_number,
            retry_in=retry_state.next_action.sleep if retry_state.next_action else None,
        )

    def _watch_forever(self) -> None:
        while not self._stop.is_set():
            try:
                self._stream_retrying(self._consume_stream)
            except Exception as exc:
                # only reached once stop() interrupts a failing stream
                logger.info("watch_stream_closed", error=str(exc))

    def run(self) -> None:
        """Watch and reconcile until ``stop`` is called."""
        logger.info("watcher_started", monitored=sorted(self.reconciler.monitored_names))
        thread = threading.Thread(target=self._watch_forever, name="amsync-watch", daemon=True)
        thread.start()
        while not self._stop.is_set():
            self.step()
        logger.info("watcher_stopped")

    def stop(self) -> None:
        self._stop.set()


def kubernetes_event_source(store, namespace: str, timeout_seconds: int) -> EventSource:
    """Adapt ``KubernetesSecretStore.watch_events`` to an EventSource."""

    def source() -> Iterable[SecretEvent]:
        for event_type, name in store.watch_events(namespace, timeout_seconds=timeout_seconds):
            yield SecretEvent(namespace=namespace, name=name, type=event_type)

    return source
