# tests/core/engine/test_aggregator.py
"""
Testes do agregador de sub-resultados.

Os testes asseguram que:
- status: nada pendente → complete; pendente → incomplete; failed domina
- risco: maior risco entre os INCOMPLETE; demais contribuem NONE
- mensagem: contagem de pendentes (e de falhas, quando houver)
- a redução não depende da ordem dos itens
"""

import itertools
from types import SimpleNamespace

import pytest

try:
    from upgradeflow.core.engine.aggregator import aggregate
    from upgradeflow.core.pipeline.types import BuildBreakRisk, StepStatus
except Exception as e:
    aggregate = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing aggregator. Implement:
- src/upgradeflow/core/engine/aggregator.py (aggregate)
Import error: {_IMPORT_ERR}
""")


def item(status, risk=None):
    return SimpleNamespace(status=status, risk=risk or BuildBreakRisk.NONE)


def test_all_complete_is_complete_with_no_risk():
    _require_imports()
    agg = aggregate([item(StepStatus.COMPLETE), item(StepStatus.COMPLETE)])

    assert agg.status is StepStatus.COMPLETE
    assert agg.risk is BuildBreakRisk.NONE
    assert agg.message == "No sub-steps need applied"
    assert agg.outstanding == 0


def test_incomplete_carries_its_risk():
    _require_imports()
    agg = aggregate([item(StepStatus.COMPLETE), item(StepStatus.INCOMPLETE, BuildBreakRisk.MEDIUM)])

    assert agg.status is StepStatus.INCOMPLETE
    assert agg.risk is BuildBreakRisk.MEDIUM
    assert agg.message == "1 sub-steps need applied"


def test_failed_dominates_incomplete():
    """
    {Incomplete(Low), Failed} agrega para Failed; a mensagem reflete um
    pendente incompleto e um com falha.
    """
    _require_imports()
    agg = aggregate([item(StepStatus.INCOMPLETE, BuildBreakRisk.LOW), item(StepStatus.FAILED)])

    assert agg.status is StepStatus.FAILED
    assert (agg.outstanding, agg.incomplete, agg.failed) == (2, 1, 1)
    assert agg.message == "2 sub-steps outstanding (1 incomplete, 1 failed)"
    assert agg.risk is BuildBreakRisk.LOW


def test_skipped_and_complete_contribute_no_risk():
    _require_imports()
    agg = aggregate([
        item(StepStatus.SKIPPED, BuildBreakRisk.HIGH),
        item(StepStatus.COMPLETE, BuildBreakRisk.HIGH),
        item(StepStatus.INCOMPLETE, BuildBreakRisk.LOW),
    ])
    assert agg.risk is BuildBreakRisk.LOW


def test_failed_contributes_no_risk():
    _require_imports()
    agg = aggregate([item(StepStatus.FAILED, BuildBreakRisk.HIGH)])
    assert agg.status is StepStatus.FAILED
    assert agg.risk is BuildBreakRisk.NONE


def test_all_skipped_is_complete():
    _require_imports()
    agg = aggregate([item(StepStatus.SKIPPED), item(StepStatus.SKIPPED)])
    assert agg.status is StepStatus.COMPLETE
    assert agg.risk is BuildBreakRisk.NONE


def test_zero_items_is_complete():
    _require_imports()
    agg = aggregate([])
    assert agg.status is StepStatus.COMPLETE
    assert agg.risk is BuildBreakRisk.NONE
    assert agg.message == "No sub-steps need applied"


def test_uninitialized_sub_step_counts_as_incomplete():
    """Um sub-step não alcançado (ex.: cancelamento) continua pendente."""
    _require_imports()
    agg = aggregate([item(StepStatus.COMPLETE), item(StepStatus.UNINITIALIZED)])

    assert agg.status is StepStatus.INCOMPLETE
    assert agg.incomplete == 1
    assert agg.risk is BuildBreakRisk.NONE


def test_result_does_not_depend_on_order():
    _require_imports()
    items = [
        item(StepStatus.INCOMPLETE, BuildBreakRisk.LOW),
        item(StepStatus.INCOMPLETE, BuildBreakRisk.HIGH),
        item(StepStatus.COMPLETE),
        item(StepStatus.SKIPPED),
        item(StepStatus.INCOMPLETE, BuildBreakRisk.MEDIUM),
    ]
    results = {aggregate(list(p)) for p in itertools.permutations(items)}

    assert len(results) == 1
    only = results.pop()
    assert only.status is StepStatus.INCOMPLETE
    assert only.risk is BuildBreakRisk.HIGH
    assert only.message == "3 sub-steps need applied"
