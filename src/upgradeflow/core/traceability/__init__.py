# src/upgradeflow/core/traceability/__init__.py
"""
Pacote de rastreabilidade do UpgradeFlow - Run Manifest v1.

Responsabilidades principais:
    - Criar e manter o Manifest de uma run
    - Registrar eventos explícitos em um Event Log ordenado
    - Atualizar incrementalmente o estado de Steps
    - Persistir e restaurar o Manifest de forma determinística

API pública exposta:
    - RunManifest       → estrutura canônica do Manifest
    - create_manifest   → criação explícita do Manifest
    - add_event         → registro explícito de eventos no Event Log
    - step_initialized  → classificação produzida por Initialize
    - step_applied      → resultado de um Apply
    - step_skipped      → Step pulado (inaplicável, config ou operador)
    - record_run_result → desfecho da run e retrato final dos Steps
    - save_manifest     → persistência em JSON
    - load_manifest     → restauração do JSON

Limites explícitos:
    - Não executa pipeline
    - Não serve para retomar runs (é apenas auditoria)
"""

from .manifest import (
    RunManifest,
    add_event,
    create_manifest,
    load_manifest,
    record_run_result,
    save_manifest,
    step_applied,
    step_initialized,
    step_skipped,
)

__all__ = [
    "RunManifest",
    "create_manifest",
    "add_event",
    "step_initialized",
    "step_applied",
    "step_skipped",
    "record_run_result",
    "save_manifest",
    "load_manifest",
]
