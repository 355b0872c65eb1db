"""CLI - plan command"""

from __future__ import annotations

import click

from upgradeflow.cli import _fail_configuration
from upgradeflow.cli.console import render_plan
from upgradeflow.cli.workflow import load_workflow
from upgradeflow.core.engine.planner import plan_execution
from upgradeflow.core.exceptions import ConfigurationError


def register(group: click.Group) -> None:
    group.add_command(plan)


@click.command()
@click.argument("workflow_file", type=click.Path(dir_okay=False))
def plan(workflow_file: str) -> None:
    """Show the resolved step order without running any step."""
    try:
        execution_plan = plan_execution(load_workflow(workflow_file))
    except ConfigurationError as e:
        _fail_configuration(e)
    click.echo(render_plan(execution_plan))
