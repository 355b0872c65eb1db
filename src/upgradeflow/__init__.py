# src/upgradeflow/__init__.py
"""
UpgradeFlow - engine de execução ordenada de Steps de migração/upgrade.

Este pacote raiz define o namespace público do UpgradeFlow, um engine
projetado para conduzir processos de migração em múltiplas fases como um
grafo dirigido de unidades de trabalho discretas (Steps).

Princípios centrais:
    - A ordem de execução é derivada de dependências declarativas (DAG)
    - A execução é estritamente sequencial, determinística e auditável
    - Cada Step percorre um ciclo de vida explícito
      (aplicabilidade → initialize → apply)
    - Reexecutar após falha parcial nunca refaz trabalho concluído

Arquitetura em alto nível:
    - core.pipeline     → contrato de Step, tipos de resultado, contexto e registro
    - core.engine       → planner (DAG), runner, agregador e orquestrador
    - core.config       → carregamento, merge, validação e hashing de configuração
    - core.traceability → Manifest da run para auditoria
    - cli               → interface de linha de comando (operador e automação)

Limites explícitos:
    - Não define Steps concretos de domínio (são plugins externos)
    - Não persiste estado entre processos
    - Não executa Steps em paralelo
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
