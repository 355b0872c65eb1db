# src/upgradeflow/core/config/__init__.py

"""
Camada de configuração do UpgradeFlow.

A configuração no UpgradeFlow é:
    - declarativa (YAML ou JSON)
    - determinística (deep-merge sem heurísticas)
    - rastreável (hash canônico gravado no Manifest)

Responsabilidades do pacote:
    - Carregamento de arquivos (defaults + overrides locais)
    - Resolução da configuração final via deep-merge
    - Validação das chaves conhecidas pelo engine
    - Geração de hash canônico para rastreabilidade

Limites explícitos:
    - Não valida semântica de Steps concretos
    - Não executa pipeline
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigFileError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import DEFAULT_CONFIG, load_config, validate_config
from .merge import deep_merge

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigFileError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "load_config",
    "validate_config",
]
