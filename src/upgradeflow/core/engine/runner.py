# src/upgradeflow/core/engine/runner.py
"""
Step Runner - ciclo de vida de um Step (e de seus sub-steps).

Este módulo conduz um único Step pela máquina de estados:

    uninitialized ─┬─ applicability=false ──────────────→ skipped
                   └─ initialize → complete | incomplete | failed
                                      incomplete ─ apply → complete | incomplete | failed

O estado mutável de uma run NÃO vive no objeto Step (que é apenas o
contrato do autor): ele vive em `StepNode`, uma árvore exclusiva de nós
construída uma vez por Engine a partir dos Steps e de seus sub-steps.

Decisões arquiteturais:
    - Toda exceção levantada por código de Step é capturada aqui e
      convertida em FAILED com `ErrorPayload` (nunca sobe ao orquestrador)
    - Retorno de tipo inválido também vira FAILED (ENGINE_INVALID_RESULT)
    - `OperationCancelledError` levantada por um Step não é falha: o nó
      fica INCOMPLETE e o orquestrador observa o cancelamento em seguida
    - Steps compostos nunca têm `initialize`/`apply` próprios invocados;
      o runner percorre os filhos na ordem declarada e agrega
    - Apply só é permitido a partir de INCOMPLETE; qualquer outro estado
      levanta `InvalidStepTransitionError` sem tocar no Step

Invariantes:
    - O status de um nó composto é sempre o agregado dos filhos
    - Toda transição é registrada no log de eventos do contexto
    - Initialize reinicia o nó (e filhos) antes de reclassificar

Limites explícitos:
    - Não escolhe a ordem dos Steps de topo (planner)
    - Não decide quando aplicar (orquestrador + decisões do operador)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, Union

from upgradeflow.core.errors import ErrorPayload, invalid_step_result, step_exception
from upgradeflow.core.exceptions import InvalidStepTransitionError, OperationCancelledError
from upgradeflow.core.pipeline.context import UpgradeContext
from upgradeflow.core.pipeline.step import Step
from upgradeflow.core.pipeline.types import (
    BuildBreakRisk,
    StepApplyResult,
    StepInitializeResult,
    StepPhase,
    StepReport,
    StepStatus,
)

from .aggregator import aggregate


NOT_APPLICABLE = "Not applicable"

Result = Union[StepInitializeResult, StepApplyResult]


@dataclass(eq=False)
class StepNode:
    """Estado de runtime de um Step dentro de uma run."""

    step: Step
    children: List["StepNode"] = field(default_factory=list)
    status: StepStatus = StepStatus.UNINITIALIZED
    phase: StepPhase = StepPhase.UNINITIALIZED
    risk: BuildBreakRisk = BuildBreakRisk.NONE
    message: str = ""
    error: Optional[Dict[str, Any]] = None
    initialize_count: int = 0
    apply_count: int = 0

    @property
    def id(self) -> str:
        return self.step.id

    @property
    def is_composite(self) -> bool:
        return bool(self.children)

    def reset(self) -> None:
        self.status = StepStatus.UNINITIALIZED
        self.phase = StepPhase.UNINITIALIZED
        self.risk = BuildBreakRisk.NONE
        self.message = ""
        self.error = None
        for child in self.children:
            child.reset()

    def report(self) -> StepReport:
        return StepReport(
            step_id=self.id,
            title=str(getattr(self.step, "title", "") or self.id),
            description=str(getattr(self.step, "description", "") or ""),
            status=self.status,
            phase=self.phase,
            risk=self.risk,
            message=self.message,
            sub_steps=tuple(c.report() for c in self.children),
            error=dict(self.error) if self.error is not None else None,
        )


def build_node(step: Step) -> StepNode:
    """Constrói a árvore de nós de um Step (recursivo sobre `sub_steps`)."""
    return StepNode(
        step=step,
        children=[build_node(s) for s in (getattr(step, "sub_steps", None) or [])],
    )


class StepRunner:
    """Executa Applicability/Initialize/Apply sobre `StepNode`s."""

    def __init__(self, ctx: UpgradeContext):
        self.ctx = ctx

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------
    def _set(
        self,
        node: StepNode,
        *,
        status: StepStatus,
        phase: StepPhase,
        message: str,
        risk: BuildBreakRisk = BuildBreakRisk.NONE,
        error: Optional[ErrorPayload] = None,
    ) -> None:
        node.status = status
        node.phase = phase
        node.message = message
        node.risk = risk if status is StepStatus.INCOMPLETE else BuildBreakRisk.NONE
        node.error = error.to_dict() if error is not None else None

        level = "error" if status is StepStatus.FAILED else "info"
        self.ctx.log(
            step_id=node.id,
            level=level,
            message=f"{phase.value}: {status.value}" + (f" ({message})" if message else ""),
            event=f"step_{phase.value}",
            status=status.value,
            risk=node.risk.value,
        )

    def _fold(self, node: StepNode, phase: StepPhase) -> None:
        agg = aggregate(node.children)
        self._set(node, status=agg.status, phase=phase, message=agg.message, risk=agg.risk)

    def _invoke(self, node: StepNode, phase: StepPhase, method: str, expected: Type[Result]) -> Optional[Result]:
        """Chama o Step na fronteira de erro: exceções e tipos inválidos viram FAILED."""
        try:
            result = getattr(node.step, method)(self.ctx)
        except OperationCancelledError as e:
            self._set(node, status=StepStatus.INCOMPLETE, phase=phase, message=str(e), risk=node.risk)
            return None
        except Exception as e:
            payload = step_exception(step_id=node.id, phase=method, exc=e)
            self._set(node, status=StepStatus.FAILED, phase=phase, message=payload.message, error=payload)
            return None

        if not isinstance(result, expected):
            payload = invalid_step_result(
                step_id=node.id,
                phase=method,
                expected=expected.__name__,
                received=type(result).__name__,
            )
            self._set(node, status=StepStatus.FAILED, phase=phase, message=payload.message, error=payload)
            return None
        return result

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------
    def check_applicability(self, node: StepNode) -> bool:
        """
        Avalia o predicado de aplicabilidade.

        Um predicado que levanta exceção marca o nó como FAILED e retorna
        False; o chamador distingue os casos pelo status do nó.
        """
        try:
            return bool(node.step.is_applicable(self.ctx))
        except Exception as e:
            payload = step_exception(step_id=node.id, phase="is_applicable", exc=e)
            self._set(
                node,
                status=StepStatus.FAILED,
                phase=StepPhase.UNINITIALIZED,
                message=payload.message,
                error=payload,
            )
            return False

    def skip(self, node: StepNode, reason: str) -> None:
        self._set(node, status=StepStatus.SKIPPED, phase=StepPhase.SKIPPED, message=reason)

    def initialize(self, node: StepNode) -> None:
        node.reset()
        node.initialize_count += 1

        if not node.is_composite:
            result = self._invoke(node, StepPhase.INITIALIZED, "initialize", StepInitializeResult)
            if result is not None:
                self._set(
                    node,
                    status=result.status,
                    phase=StepPhase.INITIALIZED,
                    message=result.message,
                    risk=result.risk,
                )
            return

        for child in node.children:
            if self.ctx.cancellation.cancelled:
                break
            applicable = self.check_applicability(child)
            if child.status is StepStatus.FAILED:
                continue
            if not applicable:
                self.skip(child, NOT_APPLICABLE)
                continue
            self.initialize(child)

        self._fold(node, StepPhase.INITIALIZED)

    def apply(self, node: StepNode) -> None:
        if node.status is not StepStatus.INCOMPLETE:
            raise InvalidStepTransitionError(
                f"Cannot apply step '{node.id}' in status '{node.status.value}'",
                details={"step_id": node.id, "status": node.status.value},
                hint="Apply is only allowed for steps left incomplete by initialize or a previous apply.",
            )
        node.apply_count += 1

        if not node.is_composite:
            result = self._invoke(node, StepPhase.APPLIED, "apply", StepApplyResult)
            if result is not None:
                self._set(
                    node,
                    status=result.status,
                    phase=StepPhase.APPLIED,
                    message=result.message,
                    risk=node.risk,
                )
            return

        for child in node.children:
            if child.status is not StepStatus.INCOMPLETE:
                continue
            if self.ctx.cancellation.cancelled:
                break
            self.apply(child)
            if child.status is StepStatus.FAILED:
                break

        self._fold(node, StepPhase.APPLIED)
