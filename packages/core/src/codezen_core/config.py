import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "provider": "ollama",
    "endpoint": "http://localhost:11434/api/generate",
    "model": "codellama:7b",
    "timeout": 120,  # seconds; bounds every inference call so no review stays pending
    "store_path": ".codezen.db",
}

# Environment variables that override file settings (but not CLI overrides).
_ENV_OVERRIDES = {
    "OLLAMA_URL": "endpoint",
    "OLLAMA_MODEL": "model",
    "CODEZEN_TIMEOUT": "timeout",
}


def load_config(config_path: str = ".codezen.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .codezen.yml in the current directory
      3. Environment variables (OLLAMA_URL, OLLAMA_MODEL, CODEZEN_TIMEOUT)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    try:
        config["timeout"] = float(config["timeout"])
    except (TypeError, ValueError):
        raise ValueError(f"Invalid timeout: {config['timeout']!r}. Expected a number of seconds.")
    if config["timeout"] <= 0:
        raise ValueError(f"Invalid timeout: {config['timeout']!r}. Must be positive.")

    return config
