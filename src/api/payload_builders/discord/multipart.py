"""Corpo multipart/form-data para mensagens com arquivos.

Formato aceito pela plataforma: uma parte `payload_json` com o corpo JSON
e uma parte `files[n]` por arquivo, na mesma ordem das entradas de
`attachments`.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import httpx

from app.domain.responses import MessageFile

PAYLOAD_JSON_FIELD = "payload_json"

MultipartFiles = list[tuple[str, tuple[str, bytes, str]]]


def multipart_files(files: Sequence[MessageFile]) -> MultipartFiles:
    """Partes de arquivo no formato `files=` do httpx."""
    return [
        (f"files[{index}]", (file.filename, file.data, file.content_type))
        for index, file in enumerate(files)
    ]


def multipart_data(payload: Any) -> dict[str, str]:
    return {PAYLOAD_JSON_FIELD: json.dumps(payload, separators=(",", ":"))}


def encode_multipart(payload: Any, files: Sequence[MessageFile]) -> tuple[bytes, str]:
    """Codifica o corpo completo (usado na resposta HTTP do webhook).

    Returns:
        (corpo, Content-Type com boundary)
    """
    request = httpx.Request(
        "POST",
        "https://discord.invalid/interactions",
        data=multipart_data(payload),
        files=multipart_files(files),
    )
    return request.read(), request.headers["Content-Type"]
