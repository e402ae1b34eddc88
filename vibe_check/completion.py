"""Perplexity chat-completion client used by every analysis stage."""

from __future__ import annotations

import logging

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from .config import Settings
from .errors import TransportError, UpstreamError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a research assistant that only responds with valid JSON. "
    "Never include markdown code fences, explanations, or any text outside the JSON object. "
    "Always return a complete, parseable JSON object."
)
TEMPERATURE = 0.2


class CompletionClient:
    """Issue a single prompted request and return the raw reply text.

    The Perplexity API speaks the OpenAI chat-completions protocol, so the
    official SDK is pointed at it through ``base_url``. Retries are disabled:
    any failure propagates to the caller immediately.
    """

    def __init__(self, settings: Settings, *, http_client: httpx.Client | None = None) -> None:
        self._model = settings.perplexity_model
        self._client = OpenAI(
            api_key=settings.perplexity_api_key,
            base_url=settings.perplexity_base_url,
            timeout=settings.upstream_timeout,
            max_retries=0,
            http_client=http_client,
        )

    def complete(self, instruction: str) -> str:
        """Send *instruction* as the user turn and return the model's text."""

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": instruction.strip()},
                ],
                temperature=TEMPERATURE,
            )
        # APITimeoutError subclasses APIConnectionError, so it must be caught first.
        except APITimeoutError as exc:
            logger.warning("Perplexity request timed out")
            raise UpstreamError(504, "Upstream request timed out") from exc
        except APIStatusError as exc:
            logger.warning("Perplexity returned status %s", exc.status_code)
            raise UpstreamError(exc.status_code, exc.response.text) from exc
        except APIConnectionError as exc:
            logger.warning("Could not reach Perplexity: %s", exc)
            raise TransportError(f"Could not reach Perplexity: {exc}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
