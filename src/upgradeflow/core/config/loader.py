# src/upgradeflow/core/config/loader.py
"""
Loader canônico de configuração do UpgradeFlow.

A configuração efetiva de uma run é resolvida em camadas, da menor para
a maior precedência:
    1. `DEFAULT_CONFIG` embutido
    2. arquivo de defaults (opcional na CLI; obrigatório se informado)
    3. arquivo local de overrides (opcional; ignorado se não existir)

Cada camada é aplicada via `deep_merge` e o resultado é validado por
`validate_config` antes de chegar ao Engine.

Chaves conhecidas (v1):
    engine:
      max_apply_attempts: int >= 1   # limite do driver automático por Step
      interactive: bool              # menu do operador na CLI
    steps:
      <step_id>:
        enabled: bool                # false → skipped by config

Chaves desconhecidas são preservadas (Steps podem ler sua própria
configuração a partir de `ctx.config`).

Limites explícitos:
    - Não valida semântica de domínio de Steps concretos
    - Não persiste configuração ou hash
    - Não interage com Engine ou Steps
"""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from upgradeflow.core.errors import config_invalid_value

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigFileError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "max_apply_attempts": 3,
        "interactive": True,
    },
    "steps": {},
}

PathLike = Union[str, Path]


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo YAML/JSON e valida que a raiz é um dicionário.

    Arquivos vazios são interpretados como `{}`.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigFileError: Se o conteúdo não for YAML/JSON válido.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(
            f"Config file not found: {path}",
            details={"path": str(path)},
        )

    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise UnsupportedConfigFormatError(
            f"Unsupported config format: {path.suffix or '<none>'}",
            details={"path": str(path)},
            hint="Use a .yaml, .yml or .json file.",
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise InvalidConfigFileError(
            f"Config file is not valid {'JSON' if suffix == '.json' else 'YAML'}: {path}",
            details={"path": str(path), "error": str(e)},
            hint="Fix the syntax error reported in details.error and run again.",
        ) from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root must be a mapping, got: {type(data).__name__}",
            details={"path": str(path)},
        )

    return data


def _invalid(key: str, expected: str, received: Any) -> InvalidConfigValueError:
    payload = config_invalid_value(key=key, expected=expected, received=received)
    return InvalidConfigValueError(payload.message, details=payload.details, hint=payload.hint)


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Valida as chaves conhecidas pelo engine.

    Returns:
        Dict[str, Any]: a própria configuração (para encadeamento).

    Raises:
        InvalidConfigRootTypeError: raiz não é dict.
        InvalidConfigValueError: valor inválido em `engine.*` ou `steps.*`.
    """
    if not isinstance(config, dict):
        raise InvalidConfigRootTypeError(f"Config root must be a mapping, got: {type(config).__name__}")

    engine = config.get("engine", {})
    if engine is None:
        engine = {}
    if not isinstance(engine, dict):
        raise _invalid("engine", "mapping", engine)

    if "max_apply_attempts" in engine:
        value = engine["max_apply_attempts"]
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise _invalid("engine.max_apply_attempts", "positive integer", value)

    if "interactive" in engine and not isinstance(engine["interactive"], bool):
        raise _invalid("engine.interactive", "boolean", engine["interactive"])

    steps = config.get("steps", {})
    if steps is None:
        steps = {}
    if not isinstance(steps, dict):
        raise _invalid("steps", "mapping of step id to settings", steps)

    for step_id, settings in steps.items():
        if settings is None:
            continue
        if not isinstance(settings, dict):
            raise _invalid(f"steps.{step_id}", "mapping", settings)
        if "enabled" in settings and not isinstance(settings["enabled"], bool):
            raise _invalid(f"steps.{step_id}.enabled", "boolean", settings["enabled"])

    return config


def load_config(
    *,
    defaults_path: Optional[PathLike] = None,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva de uma run.

    Política de resolução:
        - parte sempre de uma cópia de `DEFAULT_CONFIG`
        - `defaults_path`, quando informado, deve existir
        - `local_path`, quando informado e existente, tem prioridade
        - o resultado é validado por `validate_config`

    Args:
        defaults_path (Optional[str | Path]): Arquivo de configuração base.
        local_path (Optional[str | Path]): Overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: `defaults_path` informado e inexistente.
        UnsupportedConfigFormatError: extensão não suportada.
        InvalidConfigRootTypeError: raiz não é dict.
        ConfigTypeConflictError: conflito estrutural no merge.
        InvalidConfigValueError: valor inválido em chave conhecida.
    """
    effective = deepcopy(DEFAULT_CONFIG)

    if defaults_path is not None:
        effective = deep_merge(effective, _load_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return validate_config(effective)
