"""
UpgradeFlow - Canonical Error Structures (v1)

Este módulo define o payload canônico de erro do UpgradeFlow.

Quando um Step falha por exceção (ou devolve um tipo inválido), o runner
não deixa a exceção escapar para o loop do orquestrador: ela é convertida
em um resultado FAILED e o payload abaixo é anexado ao estado do Step,
ficando disponível para exibição de detalhes e para o Manifest.

Erros devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .exceptions import UpgradeFlowError


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do UpgradeFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Engine / Execução de Steps
ENGINE_STEP_EXCEPTION = "ENGINE_STEP_EXCEPTION"
ENGINE_INVALID_RESULT = "ENGINE_INVALID_RESULT"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"

# Configuração
CONFIG_INVALID_VALUE = "CONFIG_INVALID_VALUE"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def step_exception(
    *,
    step_id: str,
    phase: str,
    exc: BaseException,
    hint: str = "Verifique o log de eventos da run. O Step pode ser reinicializado após a correção.",
) -> ErrorPayload:
    """Encapsula uma exceção levantada por código de Step.

    Exceções do próprio UpgradeFlow mantêm o nome da classe como código
    estável e preservam `details`/`hint`.
    """
    if isinstance(exc, UpgradeFlowError):
        return ErrorPayload(
            type=exc.__class__.__name__,
            message=str(exc) or "Erro de execução",
            details={"step_id": step_id, "phase": phase, **dict(exc.details or {})},
            hint=exc.hint or hint,
        )

    return ErrorPayload(
        type=ENGINE_STEP_EXCEPTION,
        message=str(exc) or exc.__class__.__name__,
        details={
            "step_id": step_id,
            "phase": phase,
            "exception_class": exc.__class__.__name__,
        },
        hint=hint,
    )


def invalid_step_result(
    *,
    step_id: str,
    phase: str,
    expected: str,
    received: str,
    hint: str = "Ajuste o Step para retornar o tipo de resultado esperado.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_INVALID_RESULT,
        message=f"Step '{step_id}' returned {received} from {phase}; expected {expected}",
        details={
            "step_id": step_id,
            "phase": phase,
            "expected": expected,
            "received": received,
        },
        hint=hint,
    )


def engine_configuration_error(
    exc: UpgradeFlowError,
    *,
    hint: str = "Revise a definição dos Steps (ids e dependências) antes de reexecutar.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=str(exc),
        details={"exception_class": exc.__class__.__name__, **dict(exc.details or {})},
        hint=exc.hint or hint,
    )


def config_invalid_value(
    *,
    key: str,
    expected: str,
    received: Any,
    hint: str = "Corrija o valor no arquivo de configuração (defaults ou local).",
) -> ErrorPayload:
    return ErrorPayload(
        type=CONFIG_INVALID_VALUE,
        message=f"Invalid config value for '{key}': expected {expected}",
        details={
            "key": key,
            "expected": expected,
            "received": repr(received),
        },
        hint=hint,
    )
