# src/upgradeflow/core/config/merge.py
"""
Utilitário canônico de deep-merge de configuração.

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (sem merge elemento a elemento)
    - escalar → sobrescrita direta
    - conflito de tipos → erro estrutural explícito, nomeando a chave

Princípios fundamentais:
    - O merge é determinístico e puramente funcional
    - Nenhum input é mutado durante o processo
    - Não existem heurísticas implícitas
"""

from copy import deepcopy
from typing import Any, Dict, Optional

from .errors import ConfigTypeConflictError


def _type_name(value: Any) -> str:
    return type(value).__name__


def deep_merge(base: Dict[str, Any], override: Dict[str, Any], *, _path: Optional[str] = None) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários.

    Args:
        base (Dict[str, Any]): Configuração base (ex.: defaults).
        override (Dict[str, Any]): Overrides explícitos.

    Returns:
        Dict[str, Any]: Nova configuração resultante.

    Raises:
        ConfigTypeConflictError: Conflito de tipo entre base e override
            (a mensagem inclui o caminho pontilhado da chave).
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requires dicts at the root, got: {_type_name(base)} vs {_type_name(override)}",
            details={"path": _path or "<root>"},
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        path = f"{_path}.{key}" if _path else str(key)

        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        # dict -> merge recursivo
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value, _path=path)
            continue

        # list -> sobrescrita total
        if isinstance(base_value, list) and isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # None nos defaults significa "sem valor"; qualquer override é aceito
        if base_value is not None and type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Type conflict at '{path}': {_type_name(base_value)} vs {_type_name(override_value)}",
                details={
                    "path": path,
                    "base_type": _type_name(base_value),
                    "override_type": _type_name(override_value),
                },
                hint="Use the same value type as the defaults file for this key.",
            )

        # escalar -> sobrescrita
        result[key] = deepcopy(override_value)

    return result
