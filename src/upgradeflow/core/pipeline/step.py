# src/upgradeflow/core/pipeline/step.py
"""
Contrato canônico de Step do UpgradeFlow.

Este módulo define o protocolo formal que qualquer Step de migração deve
satisfazer para ser sequenciado, inicializado, aplicado e reportado pelo
engine, além de duas bases de conveniência para autores de Steps.

Um Step é uma unidade nomeada de trabalho com ciclo de vida próprio:
    1. `is_applicable(ctx)` - predicado puro, sem efeitos colaterais
    2. `initialize(ctx)`    - análise somente-leitura e idempotente
    3. `apply(ctx)`         - mutação efetiva do projeto

Um Step pode possuir `sub_steps`: uma sequência ordenada de Steps da qual
ele é dono exclusivo. Um Step composto não realiza trabalho próprio; o
runner inicializa e aplica os sub-steps na ordem declarada e agrega os
resultados.

Princípios fundamentais:
    - Steps não conhecem o engine nem o planner
    - Steps não controlam ordem de execução
    - Dependências são declaradas por identificadores textuais estáveis
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - `id` é único no conjunto de Steps resolvido
    - A ordem de `sub_steps` é fixada na construção e nunca reordenada
    - Um sub-step pertence a exatamente um pai

Limites explícitos:
    - Não contém lógica de planejamento
    - Não decide quando Apply é invocado (o engine decide)
    - Não registra eventos no Manifest diretamente
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence, runtime_checkable

from .context import UpgradeContext
from .types import StepApplyResult, StepInitializeResult


@runtime_checkable
class Step(Protocol):
    """
    Contrato canônico de um Step do UpgradeFlow.

    Atributos obrigatórios:
        - id: identificador global, único e estável entre runs
        - title / description: textos humanos (não usados para identidade)
        - depends_on: ids de Steps que devem terminar antes deste
        - dependency_of: ids de Steps que devem tratar este como predecessor
        - sub_steps: Steps possuídos, em ordem significativa

    Decisões arquiteturais:
        - O protocolo não impõe herança, apenas conformidade estrutural
        - Ids desconhecidos em dependências são ignorados pelo planner
        - O engine nunca chama `apply` de um Step complete ou skipped
    """
    id: str
    title: str
    description: str
    depends_on: Sequence[str]
    dependency_of: Sequence[str]
    sub_steps: Sequence["Step"]

    def is_applicable(self, ctx: UpgradeContext) -> bool:
        """Indica se o Step é relevante para o projeto atual."""
        ...

    def initialize(self, ctx: UpgradeContext) -> StepInitializeResult:
        """Classifica o trabalho restante sem alterar o projeto."""
        ...

    def apply(self, ctx: UpgradeContext) -> StepApplyResult:
        """Executa a mutação e reclassifica o Step."""
        ...


class BaseStep:
    """
    Base de conveniência para autores de Steps.

    Atributos podem ser declarados no nível da classe (como nos Steps de
    teste) ou passados ao construtor. Defaults:
        - title igual ao id quando ausente
        - sem dependências e sem sub-steps
        - sempre aplicável
        - `initialize` e `apply` devolvem FAILED até serem sobrescritos
    """
    id: str = ""
    title: str = ""
    description: str = ""
    depends_on: Sequence[str] = ()
    dependency_of: Sequence[str] = ()
    sub_steps: Sequence[Step] = ()

    def __init__(
        self,
        *,
        step_id: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        depends_on: Optional[Iterable[str]] = None,
        dependency_of: Optional[Iterable[str]] = None,
        sub_steps: Optional[Iterable[Step]] = None,
    ) -> None:
        if step_id is not None:
            self.id = step_id
        if title is not None:
            self.title = title
        if description is not None:
            self.description = description
        self.depends_on = tuple(self.depends_on if depends_on is None else depends_on)
        self.dependency_of = tuple(self.dependency_of if dependency_of is None else dependency_of)
        self.sub_steps = tuple(self.sub_steps if sub_steps is None else sub_steps)
        if not self.title:
            self.title = self.id

    def is_applicable(self, ctx: UpgradeContext) -> bool:
        return True

    def initialize(self, ctx: UpgradeContext) -> StepInitializeResult:
        return StepInitializeResult.failed(f"{type(self).__name__}.initialize is not implemented")

    def apply(self, ctx: UpgradeContext) -> StepApplyResult:
        return StepApplyResult.failed(f"{type(self).__name__}.apply is not implemented")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


class CompositeStep(BaseStep):
    """
    Step cujo trabalho é inteiramente delegado aos seus sub-steps.

    O runner nunca invoca `initialize`/`apply` deste objeto: ele percorre
    `sub_steps` na ordem declarada e agrega os resultados. Um composto sem
    sub-steps não é aplicável.
    """

    def is_applicable(self, ctx: UpgradeContext) -> bool:
        return len(self.sub_steps) > 0
