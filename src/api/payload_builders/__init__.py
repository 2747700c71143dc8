"""Payload builders por canal — construção de payloads para APIs externas.

Estrutura:
- discord/: callbacks de interação e mensagens de webhook
"""

__all__: list[str] = []
