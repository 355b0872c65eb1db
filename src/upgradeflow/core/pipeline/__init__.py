# src/upgradeflow/core/pipeline/__init__.py
"""
# Pipeline Core - UpgradeFlow

Este pacote define os **contratos canônicos** e as **estruturas
fundamentais** que compõem uma migração no UpgradeFlow.

Uma migração é modelada como um **DAG de Steps** identificados por
strings estáveis, onde cada Step pode possuir uma sequência ordenada de
sub-steps.

## Componentes

- **types**: `StepStatus`, `StepPhase`, `BuildBreakRisk`,
  `StepInitializeResult`, `StepApplyResult`, `StepReport`
- **step**: `Step` (Protocol), `BaseStep`, `CompositeStep`
- **context**: `UpgradeContext`, `CancellationToken`
- **registry**: `StepRegistry`

## Limites Explícitos

- Não planeja execução (não é DAG planner)
- Não executa pipeline
- Não contém lógica de migração concreta
"""

from .context import CancellationToken, UpgradeContext
from .registry import StepRegistry
from .step import BaseStep, CompositeStep, Step
from .types import (
    BuildBreakRisk,
    StepApplyResult,
    StepInitializeResult,
    StepPhase,
    StepReport,
    StepStatus,
)

__all__ = [
    "BaseStep",
    "BuildBreakRisk",
    "CancellationToken",
    "CompositeStep",
    "Step",
    "StepApplyResult",
    "StepInitializeResult",
    "StepPhase",
    "StepRegistry",
    "StepReport",
    "StepStatus",
    "UpgradeContext",
]
