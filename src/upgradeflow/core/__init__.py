# src/upgradeflow/core/__init__.py
"""
Core do UpgradeFlow.

Este pacote contém a implementação canônica e independente de adapters
do UpgradeFlow, reunindo as responsabilidades essenciais para
planejamento, execução e rastreabilidade de migrações.

Camadas:
    - pipeline     → contratos de Step, tipos, contexto e registro
    - engine       → planejamento (DAG), ciclo de vida e orquestração
    - config       → resolução determinística de configuração
    - traceability → Manifest e Event Log para auditoria

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - O engine depende apenas do contrato de Step, nunca de Steps concretos
    - Estado de execução vive apenas em memória, durante uma run

Limites explícitos:
    - Não contém lógica de migração específica
    - Não depende de CLI, UI ou serviços externos

Este pacote existe como a fonte de verdade operacional do UpgradeFlow.
"""
