"""CLI - run command"""

from __future__ import annotations

import signal
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click

from upgradeflow import __version__
from upgradeflow.cli import _fail_configuration, _format_event
from upgradeflow.cli.console import ConsoleDecisions, render_run_summary
from upgradeflow.cli.workflow import load_workflow
from upgradeflow.core.config import compute_config_hash, load_config
from upgradeflow.core.engine import AutoApproveDecisions, Engine
from upgradeflow.core.exceptions import ConfigurationError
from upgradeflow.core.pipeline.context import CancellationToken, UpgradeContext
from upgradeflow.core.traceability import create_manifest, save_manifest


def register(group: click.Group) -> None:
    group.add_command(run)


@contextmanager
def cancel_on_sigint(token: CancellationToken) -> Iterator[None]:
    """Turn Ctrl+C into a cooperative cancellation while the block runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):  # noqa: ARG001
        token.cancel()
        click.echo("\nCancellation requested; stopping before the next step.", err=True)

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@click.command()
@click.argument("workflow_file", type=click.Path(dir_okay=False))
@click.option("--config", "-c", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Defaults config file (YAML or JSON)")
@click.option("--local-config", default=None, type=click.Path(dir_okay=False),
              help="Local overrides, applied over the defaults when the file exists")
@click.option("--project", "-p", default=".", type=click.Path(file_okay=False),
              help="Project directory handed to the steps")
@click.option("--non-interactive", is_flag=True, help="Apply incomplete steps without asking")
@click.option("--manifest", "manifest_path", default=None, type=click.Path(dir_okay=False),
              help="Write the run manifest (JSON) to this path")
@click.option("--verbose", "-v", is_flag=True, help="Print the run event log")
def run(
    workflow_file: str, config_path: Optional[str], local_config: Optional[str], project: str,
    non_interactive: bool, manifest_path: Optional[str], verbose: bool,
) -> None:
    """Run the migration steps declared in WORKFLOW_FILE."""
    try:
        config = load_config(defaults_path=config_path, local_path=local_config)
        steps = load_workflow(workflow_file)

        ctx = UpgradeContext(
            run_id=uuid.uuid4().hex,
            project=Path(project).resolve(),
            config=config,
        )
        manifest = None
        if manifest_path:
            manifest = create_manifest(
                run_id=ctx.run_id,
                started_at=ctx.created_at,
                upgradeflow_version=__version__,
                config_hash=compute_config_hash(config),
                project=str(ctx.project),
            )

        engine_cfg = config.get("engine", {}) or {}
        if non_interactive or not engine_cfg.get("interactive", True):
            decisions = AutoApproveDecisions(max_apply_attempts=int(engine_cfg.get("max_apply_attempts", 3)))
        else:
            decisions = ConsoleDecisions()

        engine = Engine(steps=steps, ctx=ctx, decisions=decisions, manifest=manifest)
    except ConfigurationError as e:
        _fail_configuration(e)

    with cancel_on_sigint(ctx.cancellation):
        result = engine.run()

    if verbose:
        for event in ctx.events:
            click.echo(_format_event(event), err=True)

    click.echo(render_run_summary(result))

    if manifest is not None:
        save_manifest(manifest, Path(manifest_path))

    raise SystemExit(result.exit_code)
