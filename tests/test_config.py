from __future__ import annotations

import pytest

from aimy_client.common.config import load_config
from aimy_client.common.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for var in ("AIMY_CONFIG", "AIMY_HOST", "AIMY_PATH", "AIMY_MODEL", "AIMY_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_file() -> None:
    cfg = load_config()
    assert cfg.host == "127.0.0.1:6666"
    assert cfg.path == "/api/generate"
    assert cfg.model == "AIMY3"
    assert cfg.max_buffer_size == 65535
    assert cfg.timeout is None
    assert cfg.fail_fast is True


def test_yaml_file_and_env_and_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    path = tmp_path / "c.yaml"
    path.write_text("host: 'srv:1'\nmodel: 'a'\noptions:\n  temperature: 0.5\n", encoding="utf-8")
    monkeypatch.setenv("AIMY_MODEL", "b")
    cfg = load_config(path, log_level="DEBUG", model=None)
    assert cfg.host == "srv:1"
    assert cfg.model == "b"
    assert cfg.log_level == "DEBUG"
    assert cfg.build_options().temperature == 0.5


def test_default_path_is_picked_up(tmp_path) -> None:
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "client.yaml").write_text("model: 'local'\n", encoding="utf-8")
    assert load_config().model == "local"


def test_config_env_var(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    path = tmp_path / "other.yaml"
    path.write_text("path: '/v2/generate'\n", encoding="utf-8")
    monkeypatch.setenv("AIMY_CONFIG", str(path))
    assert load_config().path == "/v2/generate"


def test_empty_file_means_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path).model == "AIMY3"


@pytest.mark.parametrize(
    "content",
    ["- a\n- b\n", "host: [unclosed\n", "max_buffer_size: 0\n", "model: ''\n"],
)
def test_invalid_config(tmp_path, content: str) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


def test_bad_option_override(tmp_path) -> None:
    path = tmp_path / "c.yaml"
    path.write_text("options:\n  top_k: 'many'\n", encoding="utf-8")
    cfg = load_config(path)
    with pytest.raises(ConfigError):
        cfg.build_options()


def test_system_prompt_from_file(tmp_path) -> None:
    prompt = tmp_path / "system.txt"
    prompt.write_text("You are AIMY.", encoding="utf-8")
    path = tmp_path / "c.yaml"
    path.write_text(f"system: 'inline'\nsystem_path: '{prompt}'\n", encoding="utf-8")
    assert load_config(path).system_prompt() == "You are AIMY."


def test_missing_system_file(tmp_path) -> None:
    path = tmp_path / "c.yaml"
    path.write_text(f"system_path: '{tmp_path / 'gone.txt'}'\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path).system_prompt()
