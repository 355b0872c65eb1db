# src/upgradeflow/core/engine/aggregator.py
"""
Agregador de resultados de sub-steps.

Dobra uma coleção ordenada de sub-resultados (qualquer objeto com
`status` e, opcionalmente, `risk`) em um único resultado do Step pai.

Redução de status:
    - nenhum sub-resultado pendente          → COMPLETE
    - algum pendente, nenhum FAILED          → INCOMPLETE
    - algum FAILED                           → FAILED (domina INCOMPLETE)

"Pendente" significa status fora de {complete, skipped}. Um sub-step
ainda UNINITIALIZED (ex.: cancelamento no meio do Initialize do pai)
é pendente e conta como incompleto.

Redução de risco:
    - maior risco entre os sub-resultados INCOMPLETE
    - FAILED, COMPLETE e SKIPPED contribuem NONE

A redução não depende da ordem dos itens (apenas contagens e máximo),
o que mantém o relatório reprodutível.

Mensagens individuais dos sub-steps NÃO são concatenadas: continuam
acessíveis nos próprios sub-steps para exibição detalhada.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from upgradeflow.core.pipeline.types import BuildBreakRisk, StepStatus


NOTHING_OUTSTANDING = "No sub-steps need applied"


@dataclass(frozen=True)
class AggregateResult:
    status: StepStatus
    message: str
    risk: BuildBreakRisk
    outstanding: int = 0
    incomplete: int = 0
    failed: int = 0


def _message(outstanding: int, incomplete: int, failed: int) -> str:
    if outstanding == 0:
        return NOTHING_OUTSTANDING
    if failed:
        return f"{outstanding} sub-steps outstanding ({incomplete} incomplete, {failed} failed)"
    return f"{outstanding} sub-steps need applied"


def aggregate(items: Iterable[Any]) -> AggregateResult:
    """Reduz sub-resultados a (status, mensagem, risco) do pai."""
    incomplete = 0
    failed = 0
    risks = []

    for item in items:
        status = StepStatus(getattr(item, "status"))
        if status.is_done:
            continue
        if status is StepStatus.FAILED:
            failed += 1
            continue
        incomplete += 1
        if status is StepStatus.INCOMPLETE:
            risks.append(getattr(item, "risk", None) or BuildBreakRisk.NONE)

    outstanding = incomplete + failed
    if outstanding == 0:
        status = StepStatus.COMPLETE
    elif failed:
        status = StepStatus.FAILED
    else:
        status = StepStatus.INCOMPLETE

    return AggregateResult(
        status=status,
        message=_message(outstanding, incomplete, failed),
        risk=BuildBreakRisk.worst(risks),
        outstanding=outstanding,
        incomplete=incomplete,
        failed=failed,
    )
