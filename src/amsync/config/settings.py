"""
Controller settings using Pydantic.

Provides environment-based configuration loading with AMSYNC_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Controller settings."""

    # Where the Alertmanager secrets live
    namespace: str = "openshift-monitoring"
    label_selector: str = "k8s-app=alertmanager-config-operator"

    # Base configuration secret
    config_secret_name: str = "alertmanager-main"
    config_secret_key: str = "alertmanager.yaml"

    # Kubernetes client
    kubeconfig: str | None = None
    context: str | None = None
    request_timeout: int = 30
    watch_timeout: int = 300

    # Requeue backoff for failed passes (seconds)
    retry_base_delay: float = 1.0
    retry_max_delay: float = 300.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json, console

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "AMSYNC_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
