"""Tests for the configuration loader."""

from pathlib import Path

from sparkskool.config import (
    clear_config_cache,
    get_data_dir,
    get_provider_config,
    load_app_config,
)

CONFIG_YAML = """
llm:
  default_provider: lmstudio
  providers:
    lmstudio:
      base_url: http://localhost:1234/v1
      default_model: qwen2.5-7b-instruct
cache:
  slides_ttl: 600
grading:
  pass_threshold: 70
  max_workers: 2
paths:
  data_dir: /srv/sparkskool
"""


class TestDefaults:
    def test_missing_file_uses_defaults(self):
        config = load_app_config()

        assert config.default_provider == "groq"
        assert config.providers["groq"].api_key_env == "GROQ_API_KEY"
        assert config.grading.pass_threshold == 80
        assert config.cache.slides_ttl == 3600

    def test_config_is_cached(self):
        assert load_app_config() is load_app_config()

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        assert get_provider_config("groq").get_api_key() == "gsk-test"
        assert get_provider_config("missing") is None


class TestYamlFile:
    def test_values_from_file(self, tmp_path, monkeypatch):
        path = tmp_path / "sparkskool.yaml"
        path.write_text(CONFIG_YAML, encoding="utf-8")
        monkeypatch.setenv("SPARKSKOOL_CONFIG", str(path))
        clear_config_cache()

        config = load_app_config()

        assert config.default_provider == "lmstudio"
        assert config.providers["lmstudio"].default_model == "qwen2.5-7b-instruct"
        assert config.cache.slides_ttl == 600
        assert config.cache.image_ttl == 86400
        assert config.grading.pass_threshold == 70
        assert config.grading.max_workers == 2

    def test_data_dir_env_wins(self, tmp_path, monkeypatch):
        path = tmp_path / "sparkskool.yaml"
        path.write_text(CONFIG_YAML, encoding="utf-8")
        monkeypatch.setenv("SPARKSKOOL_CONFIG", str(path))
        clear_config_cache()

        assert get_data_dir() == tmp_path / "data"

        monkeypatch.delenv("SPARKSKOOL_DATA_DIR")
        assert get_data_dir() == Path("/srv/sparkskool")
