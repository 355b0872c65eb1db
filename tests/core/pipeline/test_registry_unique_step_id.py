# tests/core/pipeline/test_registry_unique_step_id.py
"""
Testes de unicidade de `step_id` no StepRegistry.

O registry é a primeira linha de validação estrutural: ids duplicados
ou vazios são erros de configuração, detectados antes de qualquer
planejamento ou execução.

Invariantes:
    - Ids duplicados levantam DuplicateStepIdError (um ConfigurationError)
    - `list()` preserva a ordem de registro
"""

import pytest

try:
    from upgradeflow.core.exceptions import ConfigurationError, DuplicateStepIdError
    from upgradeflow.core.pipeline.registry import StepRegistry
except Exception as e:  # noqa: BLE001
    StepRegistry = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing StepRegistry. Implement:\n"
            "- src/upgradeflow/core/pipeline/registry.py (StepRegistry)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_registry_rejects_duplicate_step_id(StubStep):
    """
    Verifica que o registry rejeita Steps com o mesmo id.

    A exceção é também um ValueError (compatível com chamadores que
    tratam erros de valor genéricos).
    """
    _require_imports()
    reg = StepRegistry()
    reg.add(StubStep("backup"))

    with pytest.raises(DuplicateStepIdError) as exc_info:
        reg.add(StubStep("backup"))

    assert isinstance(exc_info.value, ConfigurationError)
    assert isinstance(exc_info.value, ValueError)
    assert exc_info.value.details["step_ids"] == ["backup"]


def test_registry_rejects_empty_step_id(StubStep):
    _require_imports()
    with pytest.raises(DuplicateStepIdError):
        StepRegistry().add(StubStep("  "))


def test_registry_accepts_unique_ids(StubStep):
    """Verifica registro, lookup e preservação da ordem de inserção."""
    _require_imports()
    reg = StepRegistry.of([StubStep("templates"), StubStep("backup")])

    assert len(reg) == 2
    assert "backup" in reg
    assert "config" not in reg
    assert reg.get("backup").id == "backup"
    assert [s.id for s in reg.list()] == ["templates", "backup"]
