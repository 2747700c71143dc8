"""Validators por canal — validação de payloads para APIs externas.

Estrutura:
- discord/: respostas de interação (limites e compatibilidade)
"""

__all__: list[str] = []
