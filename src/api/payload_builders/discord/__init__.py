"""Payload builders Discord — corpos de callback e de mensagens de webhook."""

from .callback import InteractionResponseBuilder, build_callback_payload, build_message_payload
from .multipart import encode_multipart, multipart_data, multipart_files

__all__ = [
    "InteractionResponseBuilder",
    "build_callback_payload",
    "build_message_payload",
    "encode_multipart",
    "multipart_data",
    "multipart_files",
]
