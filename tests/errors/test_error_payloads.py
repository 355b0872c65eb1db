# tests/errors/test_error_payloads.py
"""
Testes do payload canônico de erro.

Valida o contrato mínimo (type, message, details, hint) dos helpers de
fábrica usados na fronteira do runner e na validação de configuração.
O conteúdo é comparado como subconjunto: campos extras são permitidos.
"""

import json

import pytest

try:
    from upgradeflow.core.errors import (
        CONFIG_INVALID_VALUE,
        ENGINE_CONFIGURATION_ERROR,
        ENGINE_INVALID_RESULT,
        ENGINE_STEP_EXCEPTION,
        config_invalid_value,
        engine_configuration_error,
        invalid_step_result,
        step_exception,
    )
    from upgradeflow.core.exceptions import CycleDetectedError, InvalidStepTransitionError
except Exception as e:
    step_exception = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing error payloads. Import error: {_IMPORT_ERR}")


def _assert_minimum(payload, expected):
    data = payload.to_dict()
    assert set(data) == {"type", "message", "details", "hint"}
    json.dumps(data)
    for key, value in expected.items():
        if key == "details":
            assert value.items() <= data["details"].items()
        else:
            assert data[key] == value


def test_step_exception_payload():
    _require_imports()
    payload = step_exception(step_id="config", phase="apply", exc=PermissionError("app.cfg is read-only"))

    _assert_minimum(payload, {
        "type": ENGINE_STEP_EXCEPTION,
        "message": "app.cfg is read-only",
        "details": {"step_id": "config", "phase": "apply", "exception_class": "PermissionError"},
    })
    assert payload.hint


def test_step_exception_without_message_uses_class_name():
    _require_imports()
    payload = step_exception(step_id="config", phase="initialize", exc=KeyError())
    assert payload.message == "KeyError"


def test_internal_exception_keeps_its_details_and_hint():
    _require_imports()
    exc = InvalidStepTransitionError("nope", details={"status": "complete"}, hint="reinitialize first")
    payload = step_exception(step_id="backup", phase="apply", exc=exc)

    _assert_minimum(payload, {
        "type": "InvalidStepTransitionError",
        "hint": "reinitialize first",
        "details": {"step_id": "backup", "status": "complete"},
    })


def test_invalid_step_result_payload():
    _require_imports()
    payload = invalid_step_result(step_id="backup", phase="initialize", expected="StepInitializeResult", received="NoneType")

    _assert_minimum(payload, {
        "type": ENGINE_INVALID_RESULT,
        "message": "Step 'backup' returned NoneType from initialize; expected StepInitializeResult",
    })


def test_engine_configuration_error_payload():
    _require_imports()
    exc = CycleDetectedError("Cycle detected", details={"step_ids": ["a", "b"]}, step_ids=("a", "b"))
    payload = engine_configuration_error(exc)

    _assert_minimum(payload, {
        "type": ENGINE_CONFIGURATION_ERROR,
        "message": "Cycle detected",
        "details": {"exception_class": "CycleDetectedError", "step_ids": ["a", "b"]},
    })
    assert payload.hint


def test_config_invalid_value_payload():
    _require_imports()
    payload = config_invalid_value(key="engine.interactive", expected="boolean", received="yes")

    _assert_minimum(payload, {
        "type": CONFIG_INVALID_VALUE,
        "message": "Invalid config value for 'engine.interactive': expected boolean",
        "details": {"key": "engine.interactive", "received": "'yes'"},
    })
