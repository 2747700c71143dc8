"""Normalizers por canal — conversão de payloads externos para modelos internos.

Estrutura:
- discord/: decoder de interações (payload bruto → variantes de domínio)
"""

from .discord import decode_interaction, decode_interaction_payload

__all__ = [
    "decode_interaction",
    "decode_interaction_payload",
]
