# src/upgradeflow/core/config/hashing.py
"""
Hashing canônico de configuração do UpgradeFlow.

O hash representa a **identidade estrutural** da configuração efetiva
de uma run e é gravado no Manifest (`inputs.config_hash`).

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256, hexadecimal de 64 caracteres

Invariantes:
    - Configurações estruturalmente equivalentes produzem o mesmo hash
    - A ordem original das chaves não influencia o resultado
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    if not isinstance(config, dict):
        raise TypeError(f"Config to hash must be a dict, got: {type(config).__name__}")

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
