# src/upgradeflow/core/pipeline/registry.py
"""
Registro estrutural de Steps do pipeline.

Este módulo define o `StepRegistry`, responsável por coletar os Steps de
uma migração na ordem em que são declarados e por rejeitar, já no
registro, identificadores vazios ou duplicados.

A ordem de registro importa: é a ordem de desempate usada pelo planner
entre Steps sem predecessores pendentes.

Invariantes:
    - Cada Step registrado possui um `id` único e não vazio
    - `list()` reflete exatamente a ordem de registro

Limites explícitos:
    - Não resolve dependências (responsabilidade do planner)
    - Não executa Steps
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from upgradeflow.core.exceptions import DuplicateStepIdError

from .step import Step


@dataclass
class StepRegistry:
    """
    Registro canônico de Steps para validação estrutural pré-execução.

    Decisões arquiteturais:
        - A validação ocorre antes do planner e do engine
        - A ordem de inserção é preservada separadamente
        - Ids duplicados são erro fatal de configuração
    """

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def of(cls, steps: Iterable[Step]) -> "StepRegistry":
        registry = cls()
        for step in steps:
            registry.add(step)
        return registry

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise DuplicateStepIdError(
                "step.id must be a non-empty string",
                details={"step": repr(step)},
            )

        if step_id in self._steps:
            raise DuplicateStepIdError(
                f"Duplicate step id: {step_id}",
                details={"step_ids": [step_id]},
                hint="Step ids must be unique across the whole migration.",
            )

        self._steps[step_id] = step
        self._order.append(step_id)

    def get(self, step_id: str) -> Step:
        return self._steps[step_id]

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def __len__(self) -> int:
        return len(self._order)
