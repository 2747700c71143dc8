"""Cliente HTTP base com retry e backoff exponencial."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from utils.errors import InfrastructureError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429})


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    timeout_seconds: float = 10.0
    max_retries: int = 3
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 10.0
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True


class HttpError(InfrastructureError):
    """Erro de requisição HTTP sem dados sensíveis.

    Attributes:
        status_code: Status HTTP (None para falhas de conexão)
        is_retryable: Se a falha é transitória
        payload: Corpo JSON de erro retornado pela API, quando houver
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable
        self.payload = payload


class HttpClient:
    """Cliente HTTP simples para chamadas externas.

    Um `httpx.AsyncClient` pode ser injetado (ex: `httpx.MockTransport`
    em testes); caso contrário um cliente efêmero é aberto por requisição.
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._client = client

    async def request(
        self,
        method: str,
        url: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
        *,
        data: dict[str, str] | None = None,
        files: Any = None,
    ) -> httpx.Response:
        """Envia com retry em 429, 5xx e falhas de conexão.

        `data` + `files` produzem um corpo multipart no lugar de `json`.
        """
        merged_headers = {**self._config.default_headers, **(headers or {})}
        for attempt in range(self._config.max_retries + 1):
            try:
                response = await self._send(
                    method, url, merged_headers, json=json, data=data, files=files
                )
                if response.status_code in RETRYABLE_STATUS or response.status_code >= 500:
                    raise HttpError(
                        "http_retryable_status",
                        status_code=response.status_code,
                        is_retryable=True,
                    )
                return response
            except HttpError as exc:
                if not exc.is_retryable or attempt >= self._config.max_retries:
                    raise
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                if attempt >= self._config.max_retries:
                    raise HttpError("http_connection_error", is_retryable=True) from exc
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
        raise HttpError("http_retry_exhausted", is_retryable=True)

    async def post(
        self,
        url: str,
        json: Any,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("POST", url, json=json, headers=headers)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        **body: Any,
    ) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(
                method,
                url,
                headers=headers,
                timeout=self._config.timeout_seconds,
                **body,
            )
        async with httpx.AsyncClient(verify=self._config.verify_ssl) as client:
            return await client.request(
                method,
                url,
                headers=headers,
                timeout=self._config.timeout_seconds,
                **body,
            )


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("http_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
