"""
Marker File Step - fixture de teste

Garante que um arquivo marcador exista na raiz do projeto
(`ctx.project`). Serve como Step folha simples e idempotente: Initialize
apenas inspeciona o filesystem e Apply cria o arquivo.
"""

from __future__ import annotations

from pathlib import Path

from upgradeflow.core.pipeline.step import BaseStep
from upgradeflow.core.pipeline.types import BuildBreakRisk, StepApplyResult, StepInitializeResult


class EnsureMarkerFileStep(BaseStep):
    description = "Creates a marker file at the project root"

    def __init__(self, step_id: str, filename: str, *, content: str = "", **kwargs):
        super().__init__(step_id=step_id, **kwargs)
        self.filename = filename
        self.content = content

    def _target(self, ctx) -> Path:
        return Path(ctx.project) / self.filename

    def is_applicable(self, ctx) -> bool:
        return Path(ctx.project).is_dir()

    def initialize(self, ctx) -> StepInitializeResult:
        if self._target(ctx).exists():
            return StepInitializeResult.complete(f"{self.filename} already present")
        return StepInitializeResult.incomplete(f"{self.filename} is missing", BuildBreakRisk.LOW)

    def apply(self, ctx) -> StepApplyResult:
        self._target(ctx).write_text(self.content, encoding="utf-8")
        ctx.log(step_id=self.id, level="info", message="marker written", path=self.filename)
        return StepApplyResult.complete(f"wrote {self.filename}")
