# tests/core/pipeline/test_run_context_logging.py
"""
Testes do log estruturado, dos warnings e do token de cancelamento
do UpgradeContext.

Invariantes:
    - Eventos sempre incluem run_id, step_id, level, message e timestamp
    - Campos extras são preservados no evento
    - Warnings são agrupados por step_id
    - O token de cancelamento é cooperativo e explícito
"""

import threading

import pytest

try:
    from upgradeflow.core.exceptions import OperationCancelledError
    from upgradeflow.core.pipeline.context import CancellationToken
except Exception as e:  # noqa: BLE001
    CancellationToken = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing UpgradeContext. Implement:\n"
            "- src/upgradeflow/core/pipeline/context.py (UpgradeContext, CancellationToken)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_structured_log_event(dummy_ctx):
    """
    Verifica que `ctx.log` produz um evento estruturado completo.
    """
    _require_imports()
    dummy_ctx.log(step_id="backup", level="INFO", message="hello", foo=1)

    assert len(dummy_ctx.events) == 1
    ev = dummy_ctx.events[0]
    assert ev["run_id"] == dummy_ctx.run_id
    assert ev["step_id"] == "backup"
    assert ev["level"] == "INFO"
    assert ev["message"] == "hello"
    assert ev["foo"] == 1
    assert "timestamp" in ev


def test_warning_collection(dummy_ctx):
    _require_imports()
    dummy_ctx.add_warning(step_id="config", message="app.cfg has CRLF line endings")
    dummy_ctx.add_warning(step_id="config", message="timeout already overridden")

    assert dummy_ctx.warnings["config"] == [
        "app.cfg has CRLF line endings",
        "timeout already overridden",
    ]


def test_context_starts_not_cancelled(dummy_ctx):
    _require_imports()
    assert dummy_ctx.cancellation.cancelled is False
    dummy_ctx.cancellation.raise_if_cancelled()


def test_cancellation_token_is_cooperative():
    """
    Verifica o ciclo do token: cancelado por outra thread, observado
    pelo chamador via `cancelled` e `raise_if_cancelled`.
    """
    _require_imports()
    token = CancellationToken()

    worker = threading.Thread(target=token.cancel)
    worker.start()
    worker.join()

    assert token.cancelled is True
    with pytest.raises(OperationCancelledError):
        token.raise_if_cancelled()


def test_pre_cancelled_token():
    _require_imports()
    assert CancellationToken.cancelled_token().cancelled is True
