"""App — execução das interações.

Subpastas:
- bootstrap/: composition root (logging, settings, wiring)
- commands/: registry de comandos e router de custom id
- coordinators/: dispatcher, contexto do handler, follow-ups
- use_cases/: fluxo completo de uma entrega
- domain/: variantes de interação, definições de comando, respostas
- infra/: cliente HTTP com retry
- protocols/: contratos entre camadas
- observability/: correlation id
- constants/: constantes do protocolo

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
