"""UpgradeFlow command line interface.

The CLI is split into command modules; each registers its commands on
the `main` group.
"""

from __future__ import annotations

from typing import Any, Dict, NoReturn

import click

from upgradeflow import __version__
from upgradeflow.core.errors import engine_configuration_error
from upgradeflow.core.exceptions import UpgradeFlowError


EXIT_CONFIGURATION_ERROR = 2


def _fail_configuration(exc: UpgradeFlowError) -> NoReturn:
    """Report a fatal configuration error once and exit with code 2."""
    payload = engine_configuration_error(exc)
    click.secho(f"error: {payload.message}", fg="red", err=True)
    if payload.hint:
        click.echo(f"hint: {payload.hint}", err=True)
    raise SystemExit(EXIT_CONFIGURATION_ERROR)


def _format_event(event: Dict[str, Any]) -> str:
    return f"[{event.get('level', 'info')}] {event.get('step_id')}: {event.get('message')}"


@click.group()
@click.version_option(version=__version__, prog_name="upgradeflow")
def main() -> None:
    """upgradeflow - dependency-ordered migration step runner"""


# register command modules
from upgradeflow.cli.cmd_plan import register as _reg_plan  # noqa: E402
from upgradeflow.cli.cmd_run import register as _reg_run  # noqa: E402

_reg_plan(main)
_reg_run(main)
