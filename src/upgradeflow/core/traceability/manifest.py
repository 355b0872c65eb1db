# src/upgradeflow/core/traceability/manifest.py
"""
Run Manifest - registro de auditoria de uma run de migração.

Este módulo define a estrutura e as operações canônicas do Manifest,
o artefato que consolida, de forma determinística e auditável:
    - metadados da run (run_id, projeto, versão, início/fim, desfecho)
    - hash semântico da configuração resolvida
    - estado incremental de cada Step (status, risco, mensagem, erro)
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico (`sort_keys`)
    - A API aceita o Manifest como objeto ou como dict serializado
    - O Manifest não conhece engine, runner ou Steps concretos

Limites explícitos:
    - É um registro de auditoria: nunca é relido para retomar uma run
      (o "já feito" é rederivado inspecionando o projeto)
    - Não decide políticas de execução
    - Não valida semântica de domínio
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class RunManifest:
    """
    Manifest v1 de uma run do UpgradeFlow.

    Campos principais:
        - run: metadados (run_id, project, started_at, upgradeflow_version,
          e, ao final, finished_at/outcome/exit_code/halted_at)
        - inputs: hashes semânticos das entradas (config_hash)
        - steps: estado incremental por step_id
        - events: Event Log ordenado

    Invariantes:
        - `steps` é sempre um dicionário indexado por step_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunManifest":
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


ManifestLike = Union[RunManifest, Dict[str, Any]]


def _get_manifest(manifest: ManifestLike) -> Tuple[RunManifest, bool]:
    if isinstance(manifest, RunManifest):
        return manifest, False
    return RunManifest.from_dict(manifest), True


def _sync_back(original: ManifestLike, m: RunManifest, is_dict: bool) -> None:
    if is_dict:
        original.clear()  # type: ignore[union-attr]
        original.update(m.to_dict())  # type: ignore[union-attr]


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    upgradeflow_version: str,
    config_hash: str,
    project: Optional[str] = None,
) -> RunManifest:
    """
    Cria o Manifest inicial de uma run.

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O Event Log inicia vazio e só é preenchido por chamadas explícitas.

    Args:
        run_id (str): Identificador único da run.
        started_at (datetime): Timestamp de início.
        upgradeflow_version (str): Versão do UpgradeFlow em uso.
        config_hash (str): Hash semântico da configuração resolvida.
        project (Optional[str]): Representação textual do projeto alvo.

    Returns:
        RunManifest: Manifest v1 inicializado, sem Steps nem eventos.
    """
    return RunManifest(
        run={
            "run_id": run_id,
            "project": project,
            "started_at": _iso(started_at),
            "upgradeflow_version": upgradeflow_version,
        },
        inputs={"config_hash": config_hash},
        steps={},
        events=[],
    )


def add_event(
    manifest: ManifestLike,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log.

    A ordem de chamada é a ordem canônica; eventos nunca são
    reordenados nem deduplicados.
    """
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload

    m.events.append(ev)
    _sync_back(manifest, m, is_dict)


def _update_step(
    manifest: ManifestLike,
    *,
    step_id: str,
    ts: datetime,
    event_type: str,
    fields: Mapping[str, Any],
) -> None:
    m, is_dict = _get_manifest(manifest)
    record = m.steps.setdefault(step_id, {"step_id": step_id})
    record.update(fields)
    record["updated_at"] = _iso(ts)

    payload = {k: fields[k] for k in ("status", "risk") if k in fields}
    add_event(m, event_type=event_type, ts=ts, step_id=step_id, payload=payload)
    _sync_back(manifest, m, is_dict)


def step_initialized(
    manifest: ManifestLike,
    *,
    step_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a classificação produzida por Initialize.

    `result` segue a forma de `StepReport.to_dict()`: status, risk,
    message e, quando presentes, sub_steps e error.
    """
    m, is_dict = _get_manifest(manifest)
    previous = int(m.steps.get(step_id, {}).get("initialize_count", 0))
    fields = dict(result)
    fields["initialize_count"] = previous + 1
    _update_step(m, step_id=step_id, ts=ts, event_type="step_initialized", fields=fields)
    _sync_back(manifest, m, is_dict)


def step_applied(
    manifest: ManifestLike,
    *,
    step_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """Registra o resultado de um Apply (incrementa `apply_count`)."""
    m, is_dict = _get_manifest(manifest)
    previous = int(m.steps.get(step_id, {}).get("apply_count", 0))
    fields = dict(result)
    fields["apply_count"] = previous + 1
    _update_step(m, step_id=step_id, ts=ts, event_type="step_applied", fields=fields)
    _sync_back(manifest, m, is_dict)


def step_skipped(
    manifest: ManifestLike,
    *,
    step_id: str,
    ts: datetime,
    reason: str,
) -> None:
    _update_step(
        manifest,
        step_id=step_id,
        ts=ts,
        event_type="step_skipped",
        fields={"status": "skipped", "risk": "none", "message": reason},
    )


def record_run_result(
    manifest: ManifestLike,
    *,
    ts: datetime,
    outcome: str,
    exit_code: int,
    halted_at: Optional[str],
    steps: Mapping[str, Dict[str, Any]],
) -> None:
    """
    Fecha a run: grava o desfecho em `run` e o retrato final de cada Step.

    Steps nunca alcançados (ex.: após abort ou cancelamento) aparecem
    com status `uninitialized`.
    """
    m, is_dict = _get_manifest(manifest)
    m.run.update(
        {
            "finished_at": _iso(ts),
            "outcome": outcome,
            "exit_code": int(exit_code),
            "halted_at": halted_at,
        }
    )
    for step_id, snapshot in steps.items():
        record = m.steps.setdefault(step_id, {"step_id": step_id})
        record.update({k: v for k, v in snapshot.items() if k != "step_id"})

    add_event(
        m,
        event_type="run_finished",
        ts=ts,
        payload={"outcome": outcome, "exit_code": int(exit_code), "halted_at": halted_at},
    )
    _sync_back(manifest, m, is_dict)


def save_manifest(manifest: ManifestLike, path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico.

    Diretórios intermediários são criados automaticamente.

    Raises:
        OSError: falha ao criar diretórios ou escrever o arquivo.
        TypeError: conteúdo não serializável em JSON.
    """
    data = manifest.to_dict() if isinstance(manifest, RunManifest) else manifest
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> RunManifest:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return RunManifest.from_dict(data)
