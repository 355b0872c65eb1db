"""
UpgradeFlow - Canonical Exceptions (v1)

Este módulo define a hierarquia de exceções tipadas do UpgradeFlow.

Taxonomia:
- ConfigurationError: falhas estruturais detectadas antes de qualquer Step
  executar (ids duplicados, ciclos, sub-steps compartilhados, config inválida).
  São fatais e abortam o pipeline inteiro.
- InvalidStepTransitionError: uso incorreto da máquina de estados por quem
  chama o engine (ex.: pedir Apply de um Step já Complete).
- OperationCancelledError: sinal cooperativo de cancelamento observado por
  um Step. Não é erro de execução.

Falhas de classificação de Steps (Initialize/Apply retornando FAILED) e
exceções inesperadas levantadas por Steps NÃO pertencem a esta hierarquia:
elas são convertidas em resultados FAILED na fronteira do runner.

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Mensagem curta e humana; `hint` aponta onde corrigir.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(eq=False)
class UpgradeFlowError(Exception):
    """Base class para exceções internas do UpgradeFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuração (fatal, antes da execução)
# ---------------------------------------------------------------------------

class ConfigurationError(UpgradeFlowError):
    """Configuração inválida do pipeline; nenhum Step é executado."""


class DuplicateStepIdError(ConfigurationError, ValueError):
    """Dois ou mais Steps declaram o mesmo identificador."""


@dataclass(eq=False)
class CycleDetectedError(ConfigurationError, ValueError):
    """O grafo de dependências contém ao menos um ciclo.

    `step_ids` lista os Steps que participam de ciclos, na ordem de entrada.
    """

    step_ids: Tuple[str, ...] = ()


class StepOwnershipError(ConfigurationError, ValueError):
    """Um sub-step aparece mais de uma vez na árvore de Steps."""


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class InvalidStepTransitionError(UpgradeFlowError, RuntimeError):
    """Transição não permitida pela máquina de estados do Step."""


class OperationCancelledError(UpgradeFlowError):
    """Cancelamento cooperativo observado durante Initialize/Apply."""
