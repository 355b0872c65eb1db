# src/upgradeflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do UpgradeFlow.

As exceções aqui definidas representam **violações estruturais
explícitas** da configuração, e não erros de execução de Steps.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - `ConfigError` é um `ConfigurationError`: fatal, antes de qualquer Step

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de Engine ou CLI
"""

from upgradeflow.core.exceptions import ConfigurationError


class ConfigError(ConfigurationError):
    """
    Exceção base para erros de configuração do UpgradeFlow.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais e falhas de execução.
    """


class DefaultsNotFoundError(ConfigError):
    """
    O arquivo de configuração base (defaults) não foi encontrado.

    Quando um arquivo de defaults é informado, ele é obrigatório; o
    loader não tenta inferir ou criar defaults a partir do nada.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um mapa (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    A mesma chave possui tipos incompatíveis entre defaults e override
    (ex.: dict vs escalar). A mensagem nomeia o caminho pontilhado da
    chave (`engine.max_apply_attempts`).
    """


class InvalidConfigValueError(ConfigError):
    """Uma chave conhecida da configuração possui valor inválido."""


class InvalidConfigFileError(ConfigError):
    """O arquivo de configuração não pôde ser interpretado (YAML/JSON malformado)."""
