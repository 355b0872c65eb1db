# src/upgradeflow/core/pipeline/context.py
"""
Contexto de execução compartilhado de uma run do UpgradeFlow.

Este módulo define o `UpgradeContext`, a estrutura passada a toda chamada
de aplicabilidade, Initialize e Apply, e o `CancellationToken`, o sinal
cooperativo de cancelamento que atravessa essas chamadas.

O UpgradeContext carrega:
    - identidade da execução (run_id, created_at)
    - o handle do projeto/workspace (opaco para o engine)
    - a configuração resolvida
    - o token de cancelamento
    - metadados livres somente-leitura
    - o log estruturado de eventos e os warnings por Step

Decisões arquiteturais:
    - O engine nunca altera `project`, `config` ou `meta`
    - O log de eventos é o único ponto de escrita do engine no contexto
    - Cancelamento é explícito (token), não interrupção implícita de thread

Invariantes:
    - Cada run possui um UpgradeContext próprio
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
    - Não impõe locking sobre o projeto (execução é sequencial)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from upgradeflow.core.exceptions import OperationCancelledError


class CancellationToken:
    """
    Sinal cooperativo de cancelamento.

    Baseado em `threading.Event`, pode ser acionado por um handler de
    sinal (SIGINT) ou outra thread enquanto o loop do engine roda. Steps
    devem consultá-lo em pontos longos e retornar FAILED/INCOMPLETE
    prontamente; o engine o consulta entre Steps e entre sub-steps.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @classmethod
    def cancelled_token(cls) -> "CancellationToken":
        token = cls()
        token.cancel()
        return token

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelledError("Operation was cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


@dataclass
class UpgradeContext:
    """
    Contexto ambiente de uma run de migração.

    `project` é o handle do projeto/workspace (tipicamente um `Path`);
    o engine o trata como opaco e apenas o repassa aos Steps.
    """
    run_id: str
    project: Any
    config: Dict[str, Any] = field(default_factory=dict)
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        self.warnings.setdefault(step_id, []).append(message)
