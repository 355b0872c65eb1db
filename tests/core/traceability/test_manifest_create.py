# tests/core/traceability/test_manifest_create.py
"""
Testes de criação do Manifest v1.

Invariantes:
    - O Manifest nasce sem Steps e sem eventos (nada é implícito)
    - Timestamps são normalizados para UTC em ISO-8601
    - `inputs.config_hash` é gravado como recebido
"""
import pytest
from datetime import datetime, timedelta, timezone

try:
    from upgradeflow.core.traceability.manifest import RunManifest, create_manifest
except Exception as e:
    create_manifest = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que a API de criação do Manifest esteja disponível para os
    testes, falhando imediatamente com o módulo esperado caso contrário.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing Manifest. Implement:
- src/upgradeflow/core/traceability/manifest.py (create_manifest)
Import error: {_IMPORT_ERR}
""")


def test_create_manifest_minimal_fields():
    _require_imports()
    started = datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc)
    m = create_manifest(
        run_id="run-001",
        started_at=started,
        upgradeflow_version="0.1.0",
        config_hash="abc123",
        project="/work/legacy-app",
    )

    assert isinstance(m, RunManifest)
    assert m.run == {
        "run_id": "run-001",
        "project": "/work/legacy-app",
        "started_at": "2026-01-16T12:00:00+00:00",
        "upgradeflow_version": "0.1.0",
    }
    assert m.inputs == {"config_hash": "abc123"}
    assert m.steps == {}
    assert m.events == []


def test_naive_and_offset_timestamps_become_utc():
    _require_imports()
    naive = create_manifest(
        run_id="r", started_at=datetime(2026, 1, 16, 8, 30), upgradeflow_version="0.1.0", config_hash="h"
    )
    offset = create_manifest(
        run_id="r",
        started_at=datetime(2026, 1, 16, 8, 30, tzinfo=timezone(timedelta(hours=-3))),
        upgradeflow_version="0.1.0",
        config_hash="h",
    )

    assert naive.run["started_at"] == "2026-01-16T08:30:00+00:00"
    assert offset.run["started_at"] == "2026-01-16T11:30:00+00:00"
    assert naive.run["project"] is None
