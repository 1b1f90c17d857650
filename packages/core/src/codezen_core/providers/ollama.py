from __future__ import annotations

import logging

import requests

from codezen_core.providers.base import BaseGateway, GatewayErrorKind, GatewayFailure

logger = logging.getLogger(__name__)


class OllamaGateway(BaseGateway):
    """Calls a local Ollama server's /api/generate endpoint, non-streaming."""

    ENDPOINT = "http://localhost:11434/api/generate"
    MODEL = "codellama:7b"
    TIMEOUT = 120.0

    def __init__(self, endpoint: str | None = None, model: str | None = None, timeout: float | None = None):
        self.endpoint = (endpoint or self.ENDPOINT).rstrip("/")
        self.model = model or self.MODEL
        self.timeout = timeout or self.TIMEOUT

    def _call_api(self, prompt: str) -> str:
        payload = {"model": self.model, "prompt": prompt, "stream": False}
        logger.info("Sending %d-char prompt to %s (model %s)", len(prompt), self.endpoint, self.model)

        try:
            response = requests.post(self.endpoint, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise GatewayFailure(
                GatewayErrorKind.TIMEOUT,
                f"Ollama request timed out after {self.timeout:g}s",
            )
        except requests.exceptions.RequestException as e:
            raise GatewayFailure(
                GatewayErrorKind.TRANSPORT,
                f"Cannot reach Ollama at {self.endpoint}: {e}",
            )

        if not response.ok:
            raise GatewayFailure(
                GatewayErrorKind.BAD_STATUS,
                f"Ollama HTTP error: {response.status_code} - {response.text[:200]}",
            )

        try:
            body = response.json()
        except ValueError:
            raise GatewayFailure(GatewayErrorKind.MALFORMED_RESPONSE, "Ollama response body is not JSON")

        text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise GatewayFailure(GatewayErrorKind.MALFORMED_RESPONSE, "Ollama response has no 'response' text field")
        return text
