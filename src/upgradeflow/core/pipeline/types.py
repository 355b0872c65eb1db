# src/upgradeflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do UpgradeFlow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Steps, runner, orquestrador e camadas de apresentação.

Os tipos aqui definidos representam:
    - estados do ciclo de vida de um Step
    - classificação ordenada de risco de quebra de build
    - resultados imutáveis de Initialize e Apply
    - o retrato (report) de um Step exposto ao operador

Componentes principais:
    - StepStatus          → uninitialized, complete, incomplete, failed, skipped
    - StepPhase           → em que fase do ciclo de vida o Step se encontra
    - BuildBreakRisk      → none < low < medium < high
    - StepInitializeResult → (status, message, risk)
    - StepApplyResult     → (status, message)
    - StepReport          → snapshot imutável do estado de um Step

Invariantes:
    - Enums possuem valores textuais canônicos
    - Resultados nunca carregam o status `uninitialized`
    - Resultados `complete`/`skipped` sempre reduzem o risco a `none`

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução

Este módulo existe para garantir consistência,
interoperabilidade e clareza semântica no pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class StepStatus(str, Enum):
    """
    Estados de um Step durante uma run.

    Estados definidos:
        - UNINITIALIZED: ainda não alcançado nesta run (estado inicial)
        - COMPLETE: nada resta a fazer
        - INCOMPLETE: resta trabalho; Apply pode ser (re)invocado
        - FAILED: a análise ou a mutação falhou
        - SKIPPED: não aplicável, desabilitado ou pulado pelo operador

    `complete` e `skipped` são os únicos estados que satisfazem dependentes.
    """
    UNINITIALIZED = "uninitialized"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_done(self) -> bool:
        """True para estados terminais de sucesso (complete ou skipped)."""
        return self in (StepStatus.COMPLETE, StepStatus.SKIPPED)


class StepPhase(str, Enum):
    """Fase do ciclo de vida: onde o Step está, independente do status."""
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    APPLIED = "applied"
    SKIPPED = "skipped"


class BuildBreakRisk(str, Enum):
    """
    Classificação ordenada do risco de um Apply quebrar o build.

    A ordem segue a declaração dos membros (none < low < medium < high) e
    não a ordem lexicográfica dos valores textuais.
    """
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, BuildBreakRisk):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, BuildBreakRisk):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, BuildBreakRisk):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, BuildBreakRisk):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def worst(cls, risks: Iterable["BuildBreakRisk"]) -> "BuildBreakRisk":
        """Maior risco do iterável; NONE quando vazio."""
        return max((cls(r) for r in risks), default=cls.NONE)


def _coerce_result_status(status: Any) -> StepStatus:
    value = StepStatus(status)
    if value is StepStatus.UNINITIALIZED:
        raise ValueError("A step result cannot carry status 'uninitialized'")
    return value


@dataclass(frozen=True)
class StepInitializeResult:
    """
    Resultado imutável de Initialize: classificação do trabalho restante.

    Campos:
        - status: complete | incomplete | failed | skipped
        - message: diagnóstico livre (vazio permitido)
        - risk: risco de quebra de build do Apply pendente

    Para `complete` e `skipped` o risco é sempre normalizado para NONE.
    """
    status: StepStatus
    message: str = ""
    risk: BuildBreakRisk = BuildBreakRisk.NONE

    def __post_init__(self) -> None:
        status = _coerce_result_status(self.status)
        risk = BuildBreakRisk(self.risk or BuildBreakRisk.NONE)
        if status.is_done:
            risk = BuildBreakRisk.NONE
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "risk", risk)
        object.__setattr__(self, "message", "" if self.message is None else str(self.message))

    @classmethod
    def complete(cls, message: str = "") -> "StepInitializeResult":
        return cls(StepStatus.COMPLETE, message)

    @classmethod
    def incomplete(cls, message: str, risk: BuildBreakRisk = BuildBreakRisk.NONE) -> "StepInitializeResult":
        return cls(StepStatus.INCOMPLETE, message, risk)

    @classmethod
    def failed(cls, message: str) -> "StepInitializeResult":
        return cls(StepStatus.FAILED, message)


@dataclass(frozen=True)
class StepApplyResult:
    """Resultado imutável de Apply: complete, incomplete (progresso parcial) ou failed."""
    status: StepStatus
    message: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", _coerce_result_status(self.status))
        object.__setattr__(self, "message", "" if self.message is None else str(self.message))

    @classmethod
    def complete(cls, message: str = "") -> "StepApplyResult":
        return cls(StepStatus.COMPLETE, message)

    @classmethod
    def incomplete(cls, message: str) -> "StepApplyResult":
        return cls(StepStatus.INCOMPLETE, message)

    @classmethod
    def failed(cls, message: str) -> "StepApplyResult":
        return cls(StepStatus.FAILED, message)


@dataclass(frozen=True)
class StepReport:
    """
    Snapshot imutável do estado de um Step, exposto para fora do engine.

    É o que a camada de apresentação recebe para renderizar escolhas ao
    operador e o que compõe o resumo final da run. Para Steps compostos,
    `sub_steps` contém os reports dos sub-steps na ordem declarada.
    """
    step_id: str
    title: str
    description: str
    status: StepStatus
    phase: StepPhase
    risk: BuildBreakRisk
    message: str
    sub_steps: Tuple["StepReport", ...] = ()
    error: Optional[Dict[str, Any]] = None

    @property
    def outstanding_sub_steps(self) -> Tuple["StepReport", ...]:
        return tuple(s for s in self.sub_steps if not s.status.is_done)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "step_id": self.step_id,
            "title": self.title,
            "status": self.status.value,
            "phase": self.phase.value,
            "risk": self.risk.value,
            "message": self.message,
        }
        if self.sub_steps:
            data["sub_steps"] = [s.to_dict() for s in self.sub_steps]
        if self.error is not None:
            data["error"] = dict(self.error)
        return data
