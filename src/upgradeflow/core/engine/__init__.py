# src/upgradeflow/core/engine/__init__.py
"""
Engine do UpgradeFlow.

Este pacote contém a implementação responsável por **planejar** e
**conduzir** uma migração: ordenar os Steps, levá-los pelo ciclo de
vida e expor cada ponto de decisão ao operador.

Componentes principais:
    - planner    → ordenação topológica determinística e validações estruturais
    - runner     → máquina de estados de um Step (e de seus sub-steps)
    - aggregator → dobra de sub-resultados em um resultado do pai
    - decisions  → protocolo de decisão do operador e drivers de automação
    - engine     → orquestração da run e resumo final

Princípios fundamentais:
    - Planejamento e execução são responsabilidades separadas
    - A ordem de execução é determinística para o mesmo grafo
    - Nenhum Apply acontece sem decisão explícita
    - A execução é estritamente sequencial

Limites explícitos:
    - Não define Steps de domínio
    - Não persiste estado entre processos
    - Não depende da CLI
"""

from .aggregator import AggregateResult, aggregate
from .decisions import (
    AutoApproveDecisions,
    DecisionProvider,
    OperatorDecision,
    ScriptedDecisions,
)
from .engine import Engine, RunOutcome, RunResult
from .planner import ExecutionPlan, plan_execution
from .runner import StepNode, StepRunner, build_node

__all__ = [
    "AggregateResult",
    "AutoApproveDecisions",
    "DecisionProvider",
    "Engine",
    "ExecutionPlan",
    "OperatorDecision",
    "RunOutcome",
    "RunResult",
    "ScriptedDecisions",
    "StepNode",
    "StepRunner",
    "aggregate",
    "build_node",
    "plan_execution",
]
