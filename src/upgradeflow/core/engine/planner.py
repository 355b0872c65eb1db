# src/upgradeflow/core/engine/planner.py
"""
Planejador de execução da migração (DAG).

Este módulo valida a estrutura do conjunto de Steps e produz uma ordem
de execução total e determinística, consistente com as restrições
declaradas por cada Step.

Arestas do grafo:
    - D → S para cada D em `S.depends_on`
    - S → X para cada X em `S.dependency_of` (declaração reversa: "devo
      rodar antes de X" sem que X precise saber disso)

Decisões arquiteturais:
    - Ids são resolvidos uma única vez para índices de posição de entrada
      e o grafo é mantido como adjacência por índice
    - Ordenação topológica de Kahn; empates são resolvidos pela posição
      original de entrada (estável), e não por ordem lexicográfica
    - Ids desconhecidos em dependências são ignorados (dependência
      ausente ou inaplicável nesta run), mas ficam registrados no plano
    - Ciclos, ids duplicados e sub-steps compartilhados são falhas fatais

Invariantes:
    - Nenhum Step aparece antes de seus predecessores
    - Todos os Steps aparecem exatamente uma vez
    - A mesma entrada sempre produz a mesma ordem

Limites explícitos:
    - Não executa Steps
    - Não reordena sub-steps (apenas Steps de topo são planejados)
    - Não interage com UpgradeContext
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Set, Tuple

from upgradeflow.core.exceptions import (
    CycleDetectedError,
    DuplicateStepIdError,
    StepOwnershipError,
)
from upgradeflow.core.pipeline.step import Step


@dataclass(frozen=True)
class ExecutionPlan:
    """
    Resultado imutável do planejamento.

    Campos:
        - steps: Steps de topo na ordem de execução
        - predecessors: id → ids que devem terminar antes (ambas as arestas)
        - ignored_references: id → ids referenciados mas inexistentes
    """
    steps: Tuple[Step, ...]
    predecessors: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    ignored_references: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def order(self) -> List[str]:
        return [s.id for s in self.steps]

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)


def _ids(step: Any, attr: str) -> List[str]:
    return [str(x) for x in (getattr(step, attr, None) or [])]


def _require_id(step: Any) -> str:
    sid = getattr(step, "id", None)
    if not isinstance(sid, str) or not sid.strip():
        raise DuplicateStepIdError(
            "step.id must be a non-empty string",
            details={"step": repr(step)},
        )
    return sid


def _validate_ownership(steps: List[Any]) -> None:
    """Garante que cada sub-step pertence a exatamente um pai."""
    owners: Dict[int, str] = {}

    def visit(parent: Any, path: str) -> None:
        seen_ids: Set[str] = set()
        for child in getattr(parent, "sub_steps", None) or []:
            child_id = _require_id(child)
            child_path = f"{path}/{child_id}"
            if id(child) in owners:
                raise StepOwnershipError(
                    f"Sub-step '{child_id}' is owned by both '{owners[id(child)]}' and '{path}'",
                    details={"sub_step": child_id, "owners": [owners[id(child)], path]},
                    hint="Create a separate sub-step instance for each parent.",
                )
            if child_id in seen_ids:
                raise StepOwnershipError(
                    f"Duplicate sub-step id '{child_id}' under '{path}'",
                    details={"sub_step": child_id, "parent": path},
                )
            seen_ids.add(child_id)
            owners[id(child)] = path
            visit(child, child_path)

    for step in steps:
        if id(step) in owners:
            raise StepOwnershipError(
                f"Step '{step.id}' is used both as a top-level step and as a sub-step of '{owners[id(step)]}'",
                details={"step_id": step.id},
            )
        owners[id(step)] = step.id

    for step in steps:
        visit(step, step.id)


def _nodes_on_cycles(stuck: Set[int], outgoing: List[Set[int]]) -> Set[int]:
    """Remove, dos nós travados, os que apenas descendem de um ciclo."""
    remaining = set(stuck)
    changed = True
    while changed:
        changed = False
        for node in list(remaining):
            if not (outgoing[node] & remaining):
                remaining.discard(node)
                changed = True
    return remaining or set(stuck)


def plan_execution(steps: Iterable[Step]) -> ExecutionPlan:
    """
    Valida e produz a ordem de execução determinística dos Steps de topo.

    Args:
        steps (Iterable[Step]): Steps de topo, na ordem de declaração.

    Returns:
        ExecutionPlan: ordem resolvida, predecessores e referências ignoradas.

    Raises:
        DuplicateStepIdError: id vazio ou repetido.
        StepOwnershipError: sub-step compartilhado ou id repetido sob um mesmo pai.
        CycleDetectedError: ciclo no grafo de dependências (nomeia os Steps).
    """
    step_list = list(steps)
    index: Dict[str, int] = {}
    duplicates: List[str] = []
    for pos, s in enumerate(step_list):
        sid = _require_id(s)
        if sid in index:
            duplicates.append(sid)
        else:
            index[sid] = pos

    if duplicates:
        dupes = sorted(set(duplicates))
        raise DuplicateStepIdError(
            f"Duplicate step id(s): {', '.join(dupes)}",
            details={"step_ids": dupes},
            hint="Step ids must be unique across the whole migration.",
        )

    _validate_ownership(step_list)

    n = len(step_list)
    outgoing: List[Set[int]] = [set() for _ in range(n)]
    incoming: List[Set[int]] = [set() for _ in range(n)]
    ignored: Dict[str, List[str]] = {}

    def add_edge(src: int, dst: int) -> None:
        outgoing[src].add(dst)
        incoming[dst].add(src)

    for pos, s in enumerate(step_list):
        sid = s.id
        for dep in _ids(s, "depends_on"):
            if dep not in index:
                ignored.setdefault(sid, []).append(dep)
                continue
            add_edge(index[dep], pos)
        for succ in _ids(s, "dependency_of"):
            if succ not in index:
                ignored.setdefault(sid, []).append(succ)
                continue
            add_edge(pos, index[succ])

    # Kahn's algorithm; the heap holds input positions so ties keep input order
    incoming_count = [len(incoming[i]) for i in range(n)]
    ready = [i for i in range(n) if incoming_count[i] == 0]
    heapq.heapify(ready)
    order: List[int] = []

    while ready:
        i = heapq.heappop(ready)
        order.append(i)
        for child in outgoing[i]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                heapq.heappush(ready, child)

    if len(order) != n:
        stuck = {i for i in range(n) if incoming_count[i] > 0}
        on_cycle = sorted(_nodes_on_cycles(stuck, outgoing))
        cycle_ids = tuple(step_list[i].id for i in on_cycle)
        raise CycleDetectedError(
            f"Cycle detected in step dependency graph: {', '.join(cycle_ids)}",
            details={"step_ids": list(cycle_ids)},
            hint="Remove one of the depends_on/dependency_of declarations between these steps.",
            step_ids=cycle_ids,
        )

    predecessors = {
        step_list[i].id: tuple(step_list[p].id for p in sorted(incoming[i]))
        for i in range(n)
    }
    return ExecutionPlan(
        steps=tuple(step_list[i] for i in order),
        predecessors=predecessors,
        ignored_references={k: tuple(v) for k, v in ignored.items()},
    )
