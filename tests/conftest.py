# tests/conftest.py
"""
Fixtures compartilhados para testes do UpgradeFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (UpgradeContext)
- um Step stub totalmente roteirizável para testes do engine

O objetivo destas fixtures é permitir testes do core
(config, pipeline, engine e traceability) sem depender de:
- Steps concretos de domínio
- interação com operador humano
- variáveis de ambiente

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - O Step stub usa duck typing em vez de herança
    - Resultados do stub são roteirizados (um valor fixo ou uma sequência)
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de domínio
"""

from datetime import datetime, timezone

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Representa o conteúdo típico de um `upgradeflow.defaults.yaml`,
    base sobre a qual overrides locais são aplicados via deep-merge.

    Returns:
        str: Conteúdo YAML de defaults.
    """
    return """\
engine:
  max_apply_attempts: 2
  interactive: true
steps:
  backup:
    enabled: true
  templates:
    enabled: true
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de configuração local (override) semelhante ao uso real.

    Contém apenas overrides: desliga o menu interativo e desabilita
    um Step.

    Returns:
        str: Conteúdo YAML de overrides locais.
    """
    return """\
engine:
  interactive: false
steps:
  templates:
    enabled: false
"""


# =====================================================
# Pipeline fixtures (Step + UpgradeContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima, já resolvida, para exercitar o engine.

    Returns:
        dict: Configuração válida (equivalente aos defaults embutidos).
    """
    return {
        "engine": {"max_apply_attempts": 3, "interactive": False},
        "steps": {},
    }


@pytest.fixture
def dummy_ctx(dummy_config, tmp_path):
    """
    UpgradeContext determinístico para testes.

    `run_id` e `created_at` são fixos; o projeto é um diretório
    temporário isolado por teste.

    Returns:
        UpgradeContext: Contexto isolado e previsível.
    """
    from upgradeflow.core.pipeline.context import UpgradeContext

    return UpgradeContext(
        run_id="run-test-001",
        project=tmp_path,
        config=dummy_config,
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        meta={"source": "pytest"},
    )


@pytest.fixture
def StubStep():
    """
    Fixture factory que fornece um Step duck-typed e roteirizável.

    A classe retornada:
    - expõe os atributos do protocolo de Step
    - registra em `calls` cada chamada do ciclo de vida
    - devolve resultados roteirizados em `initialize`/`apply`

    Roteiro de resultados (`initialize=` / `apply=`):
        - um único valor → devolvido em todas as chamadas
        - uma lista → consumida em ordem; o último valor se repete
        - uma instância de exceção → levantada
        - um callable → chamado com `ctx`

    Returns:
        type: Classe `_StubStep` para instanciação pelos testes.
    """
    from upgradeflow.core.pipeline.types import StepApplyResult, StepInitializeResult

    class _StubStep:
        def __init__(
            self,
            step_id: str,
            *,
            depends_on=None,
            dependency_of=None,
            sub_steps=None,
            applicable=True,
            initialize=None,
            apply=None,
            title=None,
            description="",
        ):
            self.id = step_id
            self.title = title or step_id
            self.description = description
            self.depends_on = list(depends_on or [])
            self.dependency_of = list(dependency_of or [])
            self.sub_steps = list(sub_steps or [])
            self.applicable = applicable
            self._initialize = self._script(initialize, StepInitializeResult.complete())
            self._apply = self._script(apply, StepApplyResult.complete())
            self.calls = []

        @staticmethod
        def _script(value, default):
            if value is None:
                return [default]
            if isinstance(value, list):
                return list(value)
            return [value]

        @staticmethod
        def _next(script, ctx):
            value = script.pop(0) if len(script) > 1 else script[0]
            if isinstance(value, BaseException):
                raise value
            if callable(value):
                return value(ctx)
            return value

        def count(self, name: str) -> int:
            return self.calls.count(name)

        def is_applicable(self, ctx):
            self.calls.append("is_applicable")
            if isinstance(self.applicable, BaseException):
                raise self.applicable
            return self.applicable

        def initialize(self, ctx):
            self.calls.append("initialize")
            return self._next(self._initialize, ctx)

        def apply(self, ctx):
            self.calls.append("apply")
            return self._next(self._apply, ctx)

        def __repr__(self):
            return f"_StubStep({self.id!r})"

    return _StubStep
