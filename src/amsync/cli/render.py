"""
Offline render command.

Applies the channel merge engine to a local alertmanager.yaml, which is
handy for previewing what the controller would write.
"""

from __future__ import annotations

from pathlib import Path

from amsync.alertmanager import codec
from amsync.alertmanager.integrations import PAGERDUTY, WATCHDOG
from amsync.cli.ux import console, success
from amsync.core.errors import ConfigurationError, ExitCode, main_with_error_handling
from amsync.reconcile.merge import remove_channel, upsert_channel


@main_with_error_handling()
def render_command(
    config_file: str,
    pagerduty_key: str | None = None,
    snitch_url: str | None = None,
    output: str | None = None,
) -> int:
    """
    Render an Alertmanager config with channels set from the given credentials.

    An omitted credential removes that integration's receiver and route.
    """
    path = Path(config_file)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {config_file}")

    config = codec.decode(path.read_bytes())
    for integration, value in ((PAGERDUTY, pagerduty_key), (WATCHDOG, snitch_url)):
        if value:
            upsert_channel(config, integration, value)
        else:
            remove_channel(config, integration)

    payload = codec.encode(config)
    if output:
        Path(output).write_bytes(payload)
        success(f"Wrote {output}")
    else:
        console.print(payload.decode("utf-8"), markup=False, highlight=False, end="")
    return ExitCode.SUCCESS
