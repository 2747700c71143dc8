"""Normalizer Discord — decodificação de interações recebidas por webhook."""

from .decoder import decode_interaction, decode_interaction_payload

__all__ = ["decode_interaction", "decode_interaction_payload"]
