"""HTTP client for the text-completion collaborator used by match enhancement."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from .errors import EnhancementUnavailable

if TYPE_CHECKING:
    from types import TracebackType


class HTTPTextCompletionClient:
    """Async client for an OpenAI-compatible chat completion endpoint.

    Holds one ``httpx.AsyncClient`` for connection reuse. Transport failures,
    non-2xx responses and unexpected bodies raise ``EnhancementUnavailable``.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        *,
        model: str = "gpt-3.5-turbo",
        timeout: float = 10.0,
        temperature: float = 0.2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._temperature = temperature
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._logger = structlog.get_logger(__name__)

    async def connect(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HTTPTextCompletionClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def complete(self, prompt: str) -> str:
        client = await self.connect()

        body = {
            "model": self._model,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            response = await client.post(self._endpoint, json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            self._logger.warning(
                "llm.request_failed",
                status_code=exc.response.status_code,
            )
            raise EnhancementUnavailable(
                f"Completion endpoint returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            self._logger.warning("llm.request_failed", error=str(exc))
            raise EnhancementUnavailable(f"Completion request failed: {exc}") from exc
        except ValueError as exc:
            raise EnhancementUnavailable("Completion endpoint returned non-JSON body") from exc

        return _extract_content(data)


def _extract_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise EnhancementUnavailable("Unexpected completion response shape") from exc
    if not isinstance(content, str):
        raise EnhancementUnavailable("Completion content must be a string")
    return content


__all__ = ["HTTPTextCompletionClient"]
