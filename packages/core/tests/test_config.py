"""Tests for configuration loading."""

import pytest

from codezen_core.config import load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("OLLAMA_URL", "OLLAMA_MODEL", "CODEZEN_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["provider"] == "ollama"
    assert config["endpoint"] == "http://localhost:11434/api/generate"
    assert config["model"] == "codellama:7b"
    assert config["timeout"] == 120.0
    assert config["store_path"] == ".codezen.db"


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".codezen.yml"
    cfg.write_text("model: llama3:8b\ntimeout: 30\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "llama3:8b"
    assert config["timeout"] == 30.0


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".codezen.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "codellama:7b"


def test_env_vars_override_config_file(tmp_path, monkeypatch):
    cfg = tmp_path / ".codezen.yml"
    cfg.write_text("model: from-file\n")
    monkeypatch.setenv("OLLAMA_URL", "http://gpu-box:11434/api/generate")
    monkeypatch.setenv("OLLAMA_MODEL", "from-env")
    monkeypatch.setenv("CODEZEN_TIMEOUT", "45")
    config = load_config(config_path=str(cfg))
    assert config["endpoint"] == "http://gpu-box:11434/api/generate"
    assert config["model"] == "from-env"
    assert config["timeout"] == 45.0


def test_cli_overrides_env_and_file(tmp_path, monkeypatch):
    monkeypatch.setenv("OLLAMA_MODEL", "from-env")
    config = load_config(config_path=str(tmp_path / "none.yml"), cli_overrides={"model": "from-cli"})
    assert config["model"] == "from-cli"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".codezen.yml"
    cfg.write_text("model: llama3\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "llama3"


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_invalid_timeout_raises(tmp_path, value):
    cfg = tmp_path / ".codezen.yml"
    cfg.write_text(f"timeout: '{value}'\n")
    with pytest.raises(ValueError, match="Invalid timeout"):
        load_config(config_path=str(cfg))


def test_defaults_not_mutated(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["model"] = "changed"
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config_b["model"] == "codellama:7b"
