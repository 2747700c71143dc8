"""Connectors por canal — adapters de borda para APIs externas.

Estrutura:
- discord/: assinatura Ed25519, recepção do webhook e cliente REST

Cada canal tem seu próprio connector, garantindo SRP e isolamento de falhas.
"""

__all__: list[str] = []
