"""Tests for configuration loading."""

from codelens_core.config import load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "gemini"
    assert config["store"] == "sqlite"
    assert config["store_path"] == ".codelens.db"
    assert config["unlock_amount"] == 9900
    assert config["currency"] == "INR"


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".codelens.yml"
    cfg.write_text("model: openai\nunlock_amount: 19900\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "openai"
    assert config["unlock_amount"] == 19900


def test_empty_config_file_keeps_defaults(tmp_path):
    cfg = tmp_path / ".codelens.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "gemini"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".codelens.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".codelens.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "openai"


def test_env_vars_loaded(monkeypatch, tmp_path):
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
    monkeypatch.setenv("OPENAI_API_KEY", "oai-key")
    monkeypatch.setenv("RAZORPAY_KEY_ID", "rzp-id")
    monkeypatch.setenv("RAZORPAY_KEY_SECRET", "rzp-secret")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["gemini_api_key"] == "gem-key"
    assert config["anthropic_api_key"] == "ant-key"
    assert config["openai_api_key"] == "oai-key"
    assert config["razorpay_key_id"] == "rzp-id"
    assert config["razorpay_key_secret"] == "rzp-secret"


def test_secrets_in_config_file_are_ignored(monkeypatch, tmp_path):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    cfg = tmp_path / ".codelens.yml"
    cfg.write_text("gemini_api_key: from-file\n")
    config = load_config(config_path=str(cfg))
    assert config["gemini_api_key"] is None
