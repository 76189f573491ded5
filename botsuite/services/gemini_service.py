"""
botsuite/services/gemini_service.py

Purpose: Generative language API integration

- Sends generateContent requests with the bot's model and key
- Relays non-success responses as UpstreamError
- Normalizes candidate parts into text plus an optional image data URL
"""

import httpx
from typing import Any, Dict, Optional, Tuple

from botsuite.core.config import settings, BotConfig
from botsuite.core.exceptions import UpstreamError
from botsuite.core.logging import get_logger

logger = get_logger(__name__)


def _error_body(response: httpx.Response) -> Any:
    """JSON error body, or the raw text when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


class GeminiClient:
    """
    Thin async client for the generateContent endpoint.
    One httpx.AsyncClient is shared across requests.
    """

    def __init__(
        self,
        api_base: str = "https://generativelanguage.googleapis.com",
        api_version: str = "v1beta",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.api_version = api_version.strip("/") or "v1beta"
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    def endpoint(self, model: str) -> str:
        return f"{self.api_base}/{self.api_version}/models/{model}:generateContent"

    async def generate(self, bot: BotConfig, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Calls generateContent.

        Returns:
            Parsed JSON response

        Raises:
            UpstreamError: Non-2xx status (status and error body relayed)
            httpx.HTTPError / ValueError: Network or JSON parse failure
        """
        response = await self._get_client().post(
            self.endpoint(bot.model),
            json=body,
            headers={"x-goog-api-key": bot.api_key},
        )

        if not response.is_success:
            logger.warning(
                f"Generative API returned {response.status_code} for model {bot.model}",
                extra={"status_code": response.status_code}
            )
            raise UpstreamError(status_code=response.status_code, details=_error_body(response))

        return response.json()

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def normalize_response(data: Dict[str, Any]) -> Tuple[str, Optional[str]]:
    """
    Flattens the first candidate into (text, image).

    Text parts are joined with a blank line and trimmed. Only the first
    inline image part is kept, returned as a data URL.
    """
    candidates = data.get("candidates") or [{}]
    content = (candidates[0] or {}).get("content") or {}
    parts = content.get("parts") or []

    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    text = "\n\n".join(texts).strip()

    image = None
    for part in parts:
        if not isinstance(part, dict):
            continue
        inline = part.get("inlineData") or part.get("inline_data")
        if inline:
            if inline.get("data"):
                mime_type = inline.get("mimeType") or inline.get("mime_type")
                image = f"data:{mime_type};base64,{inline['data']}"
            break

    return text, image


# Global client instance
_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """Get or create the global generative API client."""
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient(
            api_base=settings.GEMINI_API_BASE,
            api_version=settings.GEMINI_API_VERSION,
            timeout=settings.BOT_REQUEST_TIMEOUT,
        )
    return _gemini_client


async def close_gemini_client():
    """Close the shared HTTP client."""
    global _gemini_client
    if _gemini_client:
        await _gemini_client.close()
        _gemini_client = None
