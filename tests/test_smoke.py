# tests/test_smoke.py
"""
Teste de sanidade estrutural (smoke test) do UpgradeFlow.

Garante apenas que o pacote é importável e que o pytest descobre e
executa testes. Não valida comportamento de domínio.
"""


def test_smoke():
    import upgradeflow

    assert isinstance(upgradeflow.__version__, str)
