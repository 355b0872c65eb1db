# src/upgradeflow/core/engine/decisions.py
"""
Decisões do operador.

O orquestrador nunca aplica um Step sem um ponto de decisão observável
externamente: a cada Step INCOMPLETE (ou FAILED) ele entrega um
`StepReport` e o conjunto de escolhas permitidas a um
`DecisionProvider`, e age conforme a resposta.

Provedores incluídos:
    - AutoApproveDecisions: driver de automação (aplica até um limite de
      tentativas por Step; aborta em FAILED)
    - ScriptedDecisions: reproduz uma sequência fixa de decisões

A camada interativa (menu no terminal) vive na CLI e implementa o mesmo
protocolo.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from upgradeflow.core.pipeline.types import StepPhase, StepReport, StepStatus


class OperatorDecision(str, Enum):
    APPLY = "apply"
    DETAILS = "details"
    REINITIALIZE = "reinitialize"
    SKIP = "skip"
    ABORT = "abort"


INCOMPLETE_CHOICES: Tuple[OperatorDecision, ...] = (
    OperatorDecision.APPLY,
    OperatorDecision.DETAILS,
    OperatorDecision.REINITIALIZE,
    OperatorDecision.SKIP,
    OperatorDecision.ABORT,
)

FAILED_CHOICES: Tuple[OperatorDecision, ...] = (
    OperatorDecision.DETAILS,
    OperatorDecision.REINITIALIZE,
    OperatorDecision.SKIP,
    OperatorDecision.ABORT,
)


def choices_for(status: StepStatus) -> Tuple[OperatorDecision, ...]:
    if status is StepStatus.INCOMPLETE:
        return INCOMPLETE_CHOICES
    return FAILED_CHOICES


@runtime_checkable
class DecisionProvider(Protocol):
    """
    Contrato da camada de interação com o operador.

    `decide` deve devolver um dos valores de `choices`; `show_details`
    é chamado quando a decisão foi DETAILS, e a pergunta é refeita em
    seguida.
    """

    def decide(self, report: StepReport, choices: Sequence[OperatorDecision]) -> OperatorDecision:
        ...

    def show_details(self, report: StepReport) -> None:
        ...


class AutoApproveDecisions:
    """
    Aplica automaticamente Steps incompletos.

    Aborta quando um Step está FAILED ou quando já foi aplicado
    `max_apply_attempts` vezes sem chegar a complete. O contador de um
    Step recomeça a cada nova classificação (Initialize), inclusive em
    uma nova chamada de `Engine.run()`.
    """

    def __init__(self, *, max_apply_attempts: int = 3):
        if isinstance(max_apply_attempts, bool) or not isinstance(max_apply_attempts, int) or max_apply_attempts < 1:
            raise ValueError("max_apply_attempts must be a positive integer")
        self.max_apply_attempts = max_apply_attempts
        self._attempts: Dict[str, int] = {}

    @property
    def attempts(self) -> Dict[str, int]:
        return dict(self._attempts)

    def decide(self, report: StepReport, choices: Sequence[OperatorDecision]) -> OperatorDecision:
        if report.status is StepStatus.FAILED or OperatorDecision.APPLY not in choices:
            return OperatorDecision.ABORT

        if report.phase is StepPhase.INITIALIZED:
            self._attempts.pop(report.step_id, None)

        done = self._attempts.get(report.step_id, 0)
        if done >= self.max_apply_attempts:
            return OperatorDecision.ABORT

        self._attempts[report.step_id] = done + 1
        return OperatorDecision.APPLY

    def show_details(self, report: StepReport) -> None:
        return None


class ScriptedDecisions:
    """Reproduz decisões pré-definidas, na ordem; esgotado o roteiro, usa `default`."""

    def __init__(
        self,
        decisions: Iterable[OperatorDecision],
        *,
        default: OperatorDecision = OperatorDecision.ABORT,
    ):
        self._pending: List[OperatorDecision] = [OperatorDecision(d) for d in decisions]
        self.default = OperatorDecision(default)
        self.asked: List[Tuple[str, StepStatus, Tuple[OperatorDecision, ...]]] = []
        self.details_shown: List[str] = []

    @property
    def remaining(self) -> int:
        return len(self._pending)

    def decide(self, report: StepReport, choices: Sequence[OperatorDecision]) -> OperatorDecision:
        self.asked.append((report.step_id, report.status, tuple(choices)))
        if self._pending:
            return self._pending.pop(0)
        return self.default

    def show_details(self, report: StepReport) -> None:
        self.details_shown.append(report.step_id)


def coerce_decision(value: object) -> Optional[OperatorDecision]:
    try:
        return OperatorDecision(value)
    except ValueError:
        return None
