from __future__ import annotations

from codezen_core.providers.base import BaseGateway


def get_gateway(config: dict) -> BaseGateway:
    provider = config.get("provider", "ollama")
    if provider == "ollama":
        from codezen_core.providers.ollama import OllamaGateway

        return OllamaGateway(
            endpoint=config.get("endpoint"),
            model=config.get("model"),
            timeout=config.get("timeout"),
        )
    raise ValueError(f"Unknown inference provider: {provider!r}. Choose 'ollama'.")
