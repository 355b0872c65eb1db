# src/upgradeflow/core/engine/engine.py
"""
Orquestrador de runs do UpgradeFlow.

O Engine possui a sequência resolvida pelo planner, percorre-a Step a
Step, delega o ciclo de vida ao `StepRunner` e expõe a cada ponto de
decisão um `StepReport` ao `DecisionProvider` (operador, automação ou
roteiro de teste).

Fluxo por Step (na ordem do plano):
    1. cancelamento? → desfecho CANCELLED (restantes ficam uninitialized)
    2. predecessor não resolvido? → desfecho BLOCKED
    3. `steps.<id>.enabled: false` → SKIPPED ("skipped by config")
    4. aplicabilidade falsa → SKIPPED ("Not applicable")
    5. Initialize
    6. enquanto INCOMPLETE ou FAILED: pergunta ao operador
        - apply        → Apply e reavalia
        - details      → `show_details` e pergunta de novo
        - reinitialize → Initialize de novo (correção fora de banda)
        - skip         → SKIPPED ("skipped by operator") e segue
        - abort        → desfecho ABORTED (o Step mantém seu status)

Decisões arquiteturais:
    - O planejamento acontece no construtor: erros de configuração
      (ids duplicados, ciclos, sub-steps compartilhados) são levantados
      antes de qualquer Step executar
    - O Engine nunca aplica sem um ponto de decisão explícito
    - Nós de Steps já complete/skipped não são reprocessados se `run()`
      for chamado de novo no mesmo Engine; nós failed/incomplete são
      reinicializados
    - O Manifest é opcional e recebe apenas chamadas explícitas

Invariantes:
    - Nenhum Step inicia antes de todos os predecessores estarem
      complete ou skipped
    - Apply nunca é invocado em Step complete ou skipped
    - O resultado lista todos os Steps, na ordem resolvida
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from upgradeflow.core.exceptions import InvalidStepTransitionError
from upgradeflow.core.pipeline.context import UpgradeContext
from upgradeflow.core.pipeline.step import Step
from upgradeflow.core.pipeline.types import BuildBreakRisk, StepReport, StepStatus
from upgradeflow.core.traceability.manifest import (
    RunManifest,
    add_event,
    record_run_result,
    step_applied,
    step_initialized,
    step_skipped,
)

from .decisions import (
    AutoApproveDecisions,
    DecisionProvider,
    OperatorDecision,
    choices_for,
    coerce_decision,
)
from .planner import ExecutionPlan, plan_execution
from .runner import NOT_APPLICABLE, StepNode, StepRunner, build_node


SKIPPED_BY_CONFIG = "skipped by config"
SKIPPED_BY_OPERATOR = "skipped by operator"

ENGINE_STEP_ID = "engine"


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class RunResult:
    """
    Resumo final de uma run.

    `steps` preserva a ordem resolvida; Steps nunca alcançados aparecem
    como `uninitialized`. `exit_code` é 0 somente quando a run terminou
    (COMPLETED) e todos os Steps estão complete ou skipped.
    """

    outcome: RunOutcome
    steps: Dict[str, StepReport] = field(default_factory=dict)
    halted_at: Optional[str] = None

    @property
    def order(self) -> List[str]:
        return list(self.steps)

    @property
    def success(self) -> bool:
        return self.outcome is RunOutcome.COMPLETED and all(r.status.is_done for r in self.steps.values())

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def worst_risk(self) -> BuildBreakRisk:
        return BuildBreakRisk.worst(r.risk for r in self.steps.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "halted_at": self.halted_at,
            "exit_code": self.exit_code,
            "worst_risk": self.worst_risk.value,
            "steps": [r.to_dict() for r in self.steps.values()],
        }


class Engine:
    """Engine canônico do UpgradeFlow (planner + runner + decisões)."""

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        ctx: UpgradeContext,
        decisions: Optional[DecisionProvider] = None,
        manifest: Optional[RunManifest] = None,
    ):
        self.ctx = ctx
        self.plan: ExecutionPlan = plan_execution(steps)
        self.decisions: DecisionProvider = (
            decisions if decisions is not None
            else AutoApproveDecisions(max_apply_attempts=self._max_apply_attempts())
        )
        self.manifest = manifest
        self.runner = StepRunner(ctx)
        self.nodes: Dict[str, StepNode] = {s.id: build_node(s) for s in self.plan}

        for sid, refs in self.plan.ignored_references.items():
            self.ctx.log(
                step_id=sid,
                level="debug",
                message=f"ignoring unknown step reference(s): {', '.join(refs)}",
                event="dependency_ignored",
                references=list(refs),
            )

    # ------------------------------------------------------------------
    # Configuração
    # ------------------------------------------------------------------
    def _engine_cfg(self) -> Dict[str, Any]:
        return (self.ctx.config or {}).get("engine", {}) or {}

    def _max_apply_attempts(self) -> int:
        return int(self._engine_cfg().get("max_apply_attempts", 3))

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    # ------------------------------------------------------------------
    # Rastreabilidade
    # ------------------------------------------------------------------
    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _record(self, kind: str, node: StepNode) -> None:
        if self.manifest is None:
            return
        snapshot = node.report().to_dict()
        snapshot.pop("step_id", None)
        if kind == "initialized":
            step_initialized(self.manifest, step_id=node.id, ts=self._now(), result=snapshot)
        elif kind == "applied":
            step_applied(self.manifest, step_id=node.id, ts=self._now(), result=snapshot)
        else:
            step_skipped(self.manifest, step_id=node.id, ts=self._now(), reason=node.message)

    def _event(self, event_type: str, *, step_id: Optional[str] = None, **payload: Any) -> None:
        self.ctx.log(
            step_id=step_id or ENGINE_STEP_ID,
            level="info",
            message=event_type,
            event=event_type,
            **payload,
        )
        if self.manifest is not None:
            add_event(self.manifest, event_type=event_type, ts=self._now(), step_id=step_id, payload=payload or None)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------
    def _skip(self, node: StepNode, reason: str) -> None:
        self.runner.skip(node, reason)
        self._record("skipped", node)

    def _ask(self, node: StepNode) -> OperatorDecision:
        report = node.report()
        choices = choices_for(node.status)
        raw = self.decisions.decide(report, choices)
        decision = coerce_decision(raw)
        if decision is None or decision not in choices:
            raise InvalidStepTransitionError(
                f"Decision {raw!r} is not allowed for step '{node.id}' in status '{node.status.value}'",
                details={
                    "step_id": node.id,
                    "status": node.status.value,
                    "decision": str(raw),
                    "choices": [c.value for c in choices],
                },
            )
        self._event("operator_decision", step_id=node.id, decision=decision.value)
        return decision

    def _resolve(self, node: StepNode) -> RunOutcome:
        """Conduz um Step inicializado até complete/skipped ou até uma parada."""
        while not node.status.is_done:
            if self.ctx.cancellation.cancelled:
                return RunOutcome.CANCELLED

            decision = self._ask(node)

            if decision is OperatorDecision.DETAILS:
                self.decisions.show_details(node.report())
            elif decision is OperatorDecision.APPLY:
                self.runner.apply(node)
                self._record("applied", node)
            elif decision is OperatorDecision.REINITIALIZE:
                self.runner.initialize(node)
                self._record("initialized", node)
            elif decision is OperatorDecision.SKIP:
                self._skip(node, SKIPPED_BY_OPERATOR)
            else:
                return RunOutcome.ABORTED

        return RunOutcome.COMPLETED

    def _blocking_predecessors(self, step_id: str) -> List[str]:
        return [p for p in self.plan.predecessors.get(step_id, ()) if not self.nodes[p].status.is_done]

    def run(self) -> RunResult:
        self._event("run_started", order=self.plan.order)

        outcome = RunOutcome.COMPLETED
        halted_at: Optional[str] = None

        for step in self.plan:
            node = self.nodes[step.id]
            if node.status.is_done:
                continue

            if self.ctx.cancellation.cancelled:
                outcome, halted_at = RunOutcome.CANCELLED, node.id
                break

            blocking = self._blocking_predecessors(node.id)
            if blocking:
                self._event("step_blocked", step_id=node.id, predecessors=blocking)
                outcome, halted_at = RunOutcome.BLOCKED, node.id
                break

            if not self._is_enabled(node.id):
                self._skip(node, SKIPPED_BY_CONFIG)
                continue

            node.reset()
            applicable = self.runner.check_applicability(node)
            if node.status is not StepStatus.FAILED:
                if not applicable:
                    self._skip(node, NOT_APPLICABLE)
                    continue
                self.runner.initialize(node)
                self._record("initialized", node)

            outcome = self._resolve(node)
            if outcome is not RunOutcome.COMPLETED:
                halted_at = node.id
                break

        result = RunResult(
            outcome=outcome,
            steps={sid: self.nodes[sid].report() for sid in self.plan.order},
            halted_at=halted_at,
        )
        self.ctx.log(
            step_id=ENGINE_STEP_ID,
            level="info" if result.success else "warning",
            message=f"run_finished: {outcome.value}",
            event="run_finished",
            outcome=outcome.value,
            halted_at=halted_at,
            exit_code=result.exit_code,
        )
        # record_run_result appends the run_finished event to the manifest
        if self.manifest is not None:
            snapshots = {sid: r.to_dict() for sid, r in result.steps.items()}
            record_run_result(
                self.manifest,
                ts=self._now(),
                outcome=outcome.value,
                exit_code=result.exit_code,
                halted_at=halted_at,
                steps=snapshots,
            )
        return result
