# tests/e2e/test_upgrade_smoke_e2e.py
"""
Teste E2E (smoke) do UpgradeFlow.

Executa o workflow de exemplo sobre um projeto temporário, usando apenas
APIs públicas (load_workflow, load_config, Engine, Manifest), e verifica:
- a ordem resolvida e o estado final de cada Step
- os efeitos no filesystem do projeto
- a idempotência: uma segunda run encontra tudo complete e não aplica nada
- o Manifest persistido

Limites explícitos:
    - Não valida o menu interativo (tests/cli)
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

try:
    from upgradeflow import __version__
    from upgradeflow.cli.workflow import load_workflow
    from upgradeflow.core.config import compute_config_hash, load_config
    from upgradeflow.core.engine import Engine, RunOutcome
    from upgradeflow.core.pipeline.context import UpgradeContext
    from upgradeflow.core.pipeline.types import BuildBreakRisk, StepStatus
    from upgradeflow.core.traceability import create_manifest, load_manifest, save_manifest
except Exception as e:
    Engine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


SAMPLE = Path(__file__).resolve().parents[1] / "fixtures" / "workflows" / "sample_workflow.py"


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing UpgradeFlow public API. Import error: {_IMPORT_ERR}")


def _ctx(project: Path, config):
    return UpgradeContext(
        run_id="run-e2e",
        project=project,
        config=config,
        created_at=datetime(2026, 1, 16, tzinfo=timezone.utc),
    )


def test_upgrade_smoke_e2e(tmp_path):
    _require_imports()
    project = tmp_path / "legacy-app"
    project.mkdir()
    (project / "app.cfg").write_text("feature_x = on\n", encoding="utf-8")

    config = load_config()
    config["engine"]["interactive"] = False
    ctx = _ctx(project, config)
    manifest = create_manifest(
        run_id=ctx.run_id,
        started_at=ctx.created_at,
        upgradeflow_version=__version__,
        config_hash=compute_config_hash(config),
        project=str(project),
    )

    engine = Engine(steps=load_workflow(SAMPLE), ctx=ctx, manifest=manifest)
    assert engine.plan.order == ["backup", "config", "done"]

    result = engine.run()

    assert result.outcome is RunOutcome.COMPLETED
    assert result.exit_code == 0
    assert result.worst_risk is BuildBreakRisk.NONE
    assert {sid: r.status for sid, r in result.steps.items()} == {
        "backup": StepStatus.COMPLETE,
        "config": StepStatus.COMPLETE,
        "done": StepStatus.COMPLETE,
    }
    subs = result.steps["config"].sub_steps
    assert [s.status for s in subs] == [StepStatus.COMPLETE, StepStatus.COMPLETE, StepStatus.SKIPPED]
    assert subs[2].message == "Not applicable"

    assert (project / "app.cfg").read_text(encoding="utf-8") == "feature_x = on\ntimeout = 30\n"
    assert (project / ".upgrade-backup").exists()
    assert (project / ".upgrade-done").exists()

    out = tmp_path / "manifest.json"
    save_manifest(manifest, out)
    loaded = load_manifest(out)
    assert loaded.run["outcome"] == "completed"
    assert loaded.steps["config"]["apply_count"] == 1
    assert loaded.steps["done"]["apply_count"] == 1


def test_second_run_finds_nothing_to_apply(tmp_path):
    """
    O "já feito" é rederivado do projeto: após uma run completa, uma nova
    run classifica todos os Steps como complete sem nenhum Apply.
    """
    _require_imports()
    project = tmp_path / "legacy-app"
    project.mkdir()
    (project / "app.cfg").write_text("feature_x = on\n", encoding="utf-8")

    Engine(steps=load_workflow(SAMPLE), ctx=_ctx(project, load_config())).run()
    before = (project / "app.cfg").read_text(encoding="utf-8")

    ctx = _ctx(project, load_config())
    result = Engine(steps=load_workflow(SAMPLE), ctx=ctx).run()

    assert result.exit_code == 0
    assert all(r.status is StepStatus.COMPLETE for r in result.steps.values())
    assert not any(e.get("event") == "step_applied" for e in ctx.events)
    assert (project / "app.cfg").read_text(encoding="utf-8") == before
