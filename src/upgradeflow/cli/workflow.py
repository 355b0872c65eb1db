# src/upgradeflow/cli/workflow.py
"""
Carregamento de workflows (arquivos Python que declaram Steps).

Um workflow é um arquivo `.py` que define:
    - `workflow()` retornando uma lista de Steps, ou
    - `STEPS = [...]`

O arquivo é executado com `runpy.run_path`, com o diretório do workflow
no início de `sys.path` (módulos vizinhos são importáveis); os Steps são validados
estruturalmente contra o protocolo `Step` (duck typing) e registrados
em um `StepRegistry`, que rejeita ids vazios ou duplicados.
"""

from __future__ import annotations

import runpy
import sys
from pathlib import Path
from typing import List, Union

from upgradeflow.core.exceptions import ConfigurationError
from upgradeflow.core.pipeline.registry import StepRegistry
from upgradeflow.core.pipeline.step import Step


class WorkflowLoadError(ConfigurationError):
    """O arquivo de workflow não existe ou não declara uma lista de Steps."""


def _broken_workflow(wf_path: Path, exc: Exception) -> WorkflowLoadError:
    """Erro do próprio código do workflow (import, sintaxe ou `workflow()`)."""
    return WorkflowLoadError(
        f"Workflow {wf_path.name} failed to load: {type(exc).__name__}: {exc}",
        details={"path": str(wf_path), "error": repr(exc)},
        hint="Fix the error raised by the workflow file; run it with `python` to see the full traceback.",
    )


def load_workflow(path: Union[str, Path]) -> List[Step]:
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise WorkflowLoadError(f"Workflow file not found: {wf_path}", details={"path": str(wf_path)})
    if wf_path.suffix != ".py":
        raise WorkflowLoadError(
            f"Workflow must be a .py file, got: {wf_path.name}",
            details={"path": str(wf_path)},
        )

    module_name = f"upgradeflow_workflow_{wf_path.stem}"
    # like `python workflow.py`: modules beside the workflow are importable
    sys.path.insert(0, str(wf_path.parent))
    try:
        globals_dict = runpy.run_path(str(wf_path), run_name=module_name)
    except Exception as e:
        raise _broken_workflow(wf_path, e) from e
    finally:
        sys.path.remove(str(wf_path.parent))

    steps = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        try:
            steps = globals_dict["workflow"]()
        except Exception as e:
            raise _broken_workflow(wf_path, e) from e
    elif "STEPS" in globals_dict:
        steps = globals_dict["STEPS"]

    if not isinstance(steps, (list, tuple)):
        raise WorkflowLoadError(
            "Workflow must define workflow() -> List[Step] or STEPS = [Step, ...]",
            details={"path": str(wf_path)},
        )

    invalid = [repr(s) for s in steps if not isinstance(s, Step)]
    if invalid:
        raise WorkflowLoadError(
            f"Workflow declares objects that are not steps: {', '.join(invalid)}",
            details={"path": str(wf_path), "invalid": invalid},
            hint="Each step needs id, title, description, depends_on, dependency_of, sub_steps, "
                 "is_applicable, initialize and apply.",
        )
    return StepRegistry.of(steps).list()
