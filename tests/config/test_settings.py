"""Tests for Settings loading and merge order."""

from pathlib import Path

import pytest

from loopbench.config import load_settings


def _write_yaml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_defaults_without_yaml(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        settings = load_settings(tmp_path / "missing.yaml")

        assert settings.loop.max_iterations == 3
        assert settings.loop.generation_temperature == 0.7
        assert settings.loop.fix_temperature == 0.3
        assert settings.loop.iteration_delay_ms == 500
        assert settings.retry.max_retries == 3
        assert settings.retry.base_delay_ms == 1000
        assert settings.benchmark.pair_delay_ms == 1000
        assert settings.benchmark.probe.user_prompt == "Say hello in one word."
        assert settings.benchmark.probe.timeout_ms == 60000
        assert settings.provider.api_key is None


class TestMergeOrder:
    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "loop:\n  max_iterations: 5\nretry:\n  base_delay_ms: 10\n")

        settings = load_settings(path)

        assert settings.loop.max_iterations == 5
        assert settings.loop.max_tokens == 2000
        assert settings.retry.base_delay_ms == 10

    def test_keyword_overrides_beat_yaml(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "loop:\n  max_iterations: 5\n  max_tokens: 1000\n")

        settings = load_settings(path, loop={"max_iterations": 7})

        assert settings.loop.max_iterations == 7
        assert settings.loop.max_tokens == 1000

    def test_api_key_comes_from_environment(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        path = _write_yaml(tmp_path, "provider:\n  base_url: http://localhost:8080/v1\n")

        settings = load_settings(path)

        assert settings.provider.api_key == "sk-from-env"
        assert settings.provider.base_url == "http://localhost:8080/v1"

    def test_invalid_value_is_rejected(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "loop:\n  max_iterations: 0\n")

        with pytest.raises(ValueError):
            load_settings(path)


class TestHelpers:
    def test_missing_api_key_fails_validation(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        settings = load_settings(tmp_path / "missing.yaml")

        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            settings.validate_api_key()

    def test_paths(self, tmp_path: Path) -> None:
        settings = load_settings(
            tmp_path / "missing.yaml",
            paths={"configs_dir": "cfg", "logs_dir": "var/log"},
        )

        assert settings.paths.get_models_path() == Path("cfg") / "models.yaml"
        assert settings.paths.get_suites_path() == Path("cfg") / "test_suites.yaml"
        assert settings.get_log_file_path() == Path("var/log") / "benchmark.log"
