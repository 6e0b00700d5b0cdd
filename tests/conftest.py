"""Root test configuration."""

import logging

import pytest
import structlog

from amsync.store.memory import InMemorySecretStore

NAMESPACE = "openshift-monitoring"
LABELS = {"k8s-app": "alertmanager-config-operator"}

BASE_CONFIG = """\
global:
  resolve_timeout: 5m
route:
  receiver: default
  group_by:
  - job
  group_wait: 30s
  routes:
  - receiver: foo
    match:
      team: foo
receivers:
- name: default
- name: foo
  email_configs:
  - to: foo@example.com
inhibit_rules:
- source_match:
    severity: critical
  target_match:
    severity: warning
  equal:
  - alertname
"""


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def base_config_yaml():
    return BASE_CONFIG


@pytest.fixture
def store():
    """In-memory store holding only the labelled base config secret."""
    store = InMemorySecretStore()
    store.add_secret(
        NAMESPACE,
        "alertmanager-main",
        {"alertmanager.yaml": BASE_CONFIG},
        labels=LABELS,
    )
    return store
