# src/upgradeflow/cli/console.py
"""
Console adapter do UpgradeFlow.

Objetivo:
- Renderizar StepReports, planos e o resumo final como texto de terminal.
- Implementar `DecisionProvider` com um menu numerado (operador humano).
- NÃO altera reports nem estado do engine.
- NÃO decide política: apenas traduz a escolha do operador.

As funções `render_*` são puras (retornam `str`); apenas
`ConsoleDecisions` faz I/O, via click.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import click

from upgradeflow.core.engine.decisions import OperatorDecision
from upgradeflow.core.engine.engine import RunResult
from upgradeflow.core.engine.planner import ExecutionPlan
from upgradeflow.core.pipeline.types import BuildBreakRisk, StepReport, StepStatus


COMMAND_TEXT: Dict[OperatorDecision, str] = {
    OperatorDecision.APPLY: "Apply next step",
    OperatorDecision.DETAILS: "See more step details",
    OperatorDecision.REINITIALIZE: "Re-run initialization",
    OperatorDecision.SKIP: "Skip next step",
    OperatorDecision.ABORT: "Exit",
}

_STATUS_COLOR = {
    StepStatus.COMPLETE: "green",
    StepStatus.SKIPPED: "cyan",
    StepStatus.INCOMPLETE: "yellow",
    StepStatus.FAILED: "red",
    StepStatus.UNINITIALIZED: None,
}


def _risk_suffix(risk: BuildBreakRisk) -> str:
    return "" if risk is BuildBreakRisk.NONE else f" [risk: {risk.value}]"


def render_step_line(report: StepReport, *, indent: int = 0) -> str:
    pad = "  " * indent
    line = f"{pad}{report.status.value:<13} {report.title}{_risk_suffix(report.risk)}"
    if report.message:
        line += f": {report.message}"
    return line


def render_step_details(report: StepReport) -> str:
    """Título, descrição, status, risco, mensagem e sub-steps pendentes."""
    lines = [
        f"{report.title} ({report.step_id})",
    ]
    if report.description:
        lines.append(f"  {report.description}")
    lines.append(f"  status:  {report.status.value}")
    lines.append(f"  risk:    {report.risk.value}")
    if report.message:
        lines.append(f"  message: {report.message}")

    outstanding = report.outstanding_sub_steps
    if outstanding:
        lines.append("  outstanding sub-steps:")
        for sub in outstanding:
            lines.append(render_step_line(sub, indent=2))

    if report.error:
        lines.append(f"  error:   {report.error.get('type')}: {report.error.get('message')}")
        hint = report.error.get("hint")
        if hint:
            lines.append(f"  hint:    {hint}")
    return "\n".join(lines)


def render_plan(plan: ExecutionPlan) -> str:
    lines: List[str] = []
    for pos, step in enumerate(plan, start=1):
        preds = plan.predecessors.get(step.id, ())
        after = f" (after {', '.join(preds)})" if preds else ""
        lines.append(f"{pos}. {step.id}{after}")
        for sub in getattr(step, "sub_steps", None) or []:
            lines.append(f"     - {sub.id}")
    for sid, refs in plan.ignored_references.items():
        lines.append(f"note: {sid} references unknown step(s) {', '.join(refs)}; ignored")
    return "\n".join(lines)


def render_run_summary(result: RunResult) -> str:
    lines = [f"Run {result.outcome.value}" + (f" at {result.halted_at}" if result.halted_at else "")]
    for report in result.steps.values():
        lines.append("  " + render_step_line(report))
    lines.append(f"Worst outstanding risk: {result.worst_risk.value}")
    return "\n".join(lines)


def render_menu(choices: Sequence[OperatorDecision]) -> str:
    return "\n".join(f"  {i}. {COMMAND_TEXT[c]}" for i, c in enumerate(choices, start=1))


class ConsoleDecisions:
    """Menu interativo: uma escolha numerada por ponto de decisão."""

    def __init__(self, *, prompt: str = "Choose a command", err: bool = False):
        self.prompt = prompt
        self.err = err

    def _echo(self, text: str, *, color: Optional[str] = None) -> None:
        click.secho(text, fg=color, err=self.err)

    def decide(self, report: StepReport, choices: Sequence[OperatorDecision]) -> OperatorDecision:
        self._echo("")
        self._echo(render_step_line(report), color=_STATUS_COLOR.get(report.status))
        self._echo(render_menu(choices))
        index = click.prompt(self.prompt, type=click.IntRange(1, len(choices)), err=self.err)
        return choices[index - 1]

    def show_details(self, report: StepReport) -> None:
        self._echo(render_step_details(report))
