"""
llm/client.py — The ONLY file that talks to the Gemini API.

Plain REST over httpx against generativelanguage.googleapis.com/v1beta.
Two calls, both stateless request/response pairs:

  list_models_async(api_key)
    GET  /models?key=...
    → names of models whose supportedGenerationMethods has "generateContent",
      in the order Gemini lists them

  generate_async(prompt, model=..., api_key=...)
    POST /{model}:generateContent?key=...
    body {"contents": [{"parts": [{"text": prompt}]}]}
    → candidates[0].content.parts[0].text, verbatim

FAILURES (agent/errors.py):
  TransportError      — couldn't reach Gemini (DNS, TLS, refused, timeout)
  ProviderError       — non-2xx; carries status + Gemini's error.message
  ResponseShapeError  — 2xx but the JSON isn't shaped as above

No retries, no shared session, no cache. A 429 is surfaced to the
caller as a ProviderError the same as any other status.

USAGE:
  from llm.client import GeminiClient
  client = GeminiClient()

  models = await client.list_models_async(api_key)
  text = await client.generate_async("Summarize: ...", model=models[0], api_key=api_key)

  # From sync code (Streamlit):
  models = client.list_models(api_key)
"""

import asyncio
import logging
from typing import Any

import httpx

from agent.errors import ProviderError, ResponseShapeError, TransportError
from config import settings

logger = logging.getLogger(__name__)

GENERATE_METHOD = "generateContent"
UNKNOWN_ERROR_MESSAGE = "Unknown Gemini API error"
MODELS_SHAPE_MESSAGE = "Unexpected response from models endpoint"


class GeminiClient:
    """
    Thin async wrapper around two Gemini REST endpoints.

    api_key set here is the default; every call can pass its own.
    Each call opens and closes its own httpx.AsyncClient, so one
    GeminiClient can serve concurrent calls without shared state.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_base: str | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self._api_base = (api_base or settings.gemini_api_base).rstrip("/")

    # ── Model directory ────────────────────────────────────────────────────────

    async def list_models_async(self, api_key: str | None = None) -> list[str]:
        """
        Return model names that support generateContent, in provider order.

        Models with a missing or malformed capability list are treated as
        unsupported and skipped — not an error.

        Raises:
            TransportError:     network failure or timeout (10s)
            ResponseShapeError: body isn't JSON, or "models" isn't a list
        """
        response = await self._request(
            "GET",
            f"{self._api_base}/models",
            api_key=api_key,
            timeout=settings.title_timeout_seconds,
        )

        payload = _json_or_none(response)
        models = payload.get("models") if isinstance(payload, dict) else None
        if not isinstance(models, list):
            raise ResponseShapeError(MODELS_SHAPE_MESSAGE, response.text)

        names = [
            m["name"]
            for m in models
            if isinstance(m, dict)
            and isinstance(m.get("name"), str)
            and _supports_generation(m)
        ]
        logger.debug("models endpoint: %d listed, %d usable", len(models), len(names))
        return names

    def list_models(self, api_key: str | None = None) -> list[str]:
        """Sync version of list_models_async(). Don't call from a running loop."""
        return asyncio.run(self.list_models_async(api_key))

    # ── Content generation ─────────────────────────────────────────────────────

    async def generate_async(
        self,
        prompt: str,
        *,
        model: str,
        api_key: str | None = None,
    ) -> str:
        """
        Send one prompt to model and return the first candidate's text.

        Args:
            prompt:  Full prompt text.
            model:   Model name as listed, e.g. "models/gemini-2.5-flash-lite".
            api_key: Overrides the client's default key.

        Raises:
            TransportError:     network failure or timeout (15s)
            ProviderError:      non-2xx status
            ResponseShapeError: 2xx without candidates[0].content.parts[0].text
        """
        response = await self._request(
            "POST",
            f"{self._api_base}/{model}:{GENERATE_METHOD}",
            api_key=api_key,
            timeout=settings.summary_timeout_seconds,
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )

        status = response.status_code
        payload = _json_or_none(response)

        if not 200 <= status < 300:
            raise ProviderError(
                status,
                _error_message(payload),
                reason=httpx.codes.get_reason_phrase(status),
            )

        text = _first_candidate_text(payload)
        if text is None:
            raise ResponseShapeError(
                f"Unexpected Gemini response: {response.text}",
                response.text,
            )
        return text

    # ── Private ───────────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        url: str,
        *,
        api_key: str | None,
        timeout: float,
        json: dict | None = None,
    ) -> httpx.Response:
        """One request, one client. Maps every transport failure to TransportError."""
        key = api_key if api_key is not None else self._api_key
        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                headers={"User-Agent": settings.user_agent},
            ) as client:
                return await client.request(method, url, params={"key": key}, json=json)
        except httpx.TimeoutException:
            raise TransportError(f"Gemini API timeout after {timeout}s") from None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Gemini API unreachable: {type(e).__name__}: {e}") from e


# ── Response parsing helpers ───────────────────────────────────────────────────

def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _supports_generation(model: dict) -> bool:
    methods = model.get("supportedGenerationMethods")
    return isinstance(methods, list) and GENERATE_METHOD in methods


def _error_message(payload: Any) -> str:
    """error.message from a Gemini error body, or a generic message."""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return UNKNOWN_ERROR_MESSAGE


def _first_candidate_text(payload: Any) -> str | None:
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None
