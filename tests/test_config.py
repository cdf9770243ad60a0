from __future__ import annotations

import pytest
import yaml

from shellexa.config import Config, ConfigError, ConfigStore


def test_save_then_load_round_trips(tmp_path) -> None:
    store = ConfigStore(tmp_path / "nested" / "config.yaml")
    config = Config(api_url="http://localhost:8080", model="test-model")

    store.save(config)
    loaded = store.load()

    assert loaded == config
    assert loaded.provider == "http"
    assert loaded.api_key is None


def test_saved_file_is_plain_yaml(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    ConfigStore(path).save(
        Config(api_url="http://localhost:11434", model="llama3", provider="chat", api_key="k")
    )

    data = yaml.safe_load(path.read_text(encoding="utf-8"))

    assert data == {
        "api_url": "http://localhost:11434",
        "model": "llama3",
        "provider": "chat",
        "api_key": "k",
    }


def test_missing_file_raises_config_error(tmp_path) -> None:
    with pytest.raises(ConfigError, match="No configuration found"):
        ConfigStore(tmp_path / "absent.yaml").load()


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "api_url: http://localhost\n",
        "model: llama3\napi_url: '   '\n",
        "api_url: http://localhost\nmodel: llama3\nprovider: carrier-pigeon\n",
        "api_url: [unclosed\n",
    ],
)
def test_invalid_content_raises_config_error(tmp_path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        ConfigStore(path).load()


def test_values_are_trimmed_and_provider_normalized(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "api_url: ' http://localhost:11434 '\nmodel: llama3\nprovider: CHAT\napi_key: ''\n",
        encoding="utf-8",
    )

    config = ConfigStore(path).load()

    assert config.api_url == "http://localhost:11434"
    assert config.provider == "chat"
    assert config.api_key is None


def test_env_var_overrides_default_path(tmp_path, monkeypatch) -> None:
    path = tmp_path / "from-env.yaml"
    monkeypatch.setenv("SHELLEXA_CONFIG", str(path))

    assert ConfigStore().path == path


def test_default_path_is_under_home(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("SHELLEXA_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))

    assert ConfigStore().path == tmp_path / ".shellexa" / "config.yaml"


def test_chat_provider_may_omit_api_url(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("provider: chat\nmodel: llama3\n", encoding="utf-8")

    config = ConfigStore(path).load()

    assert config.provider == "chat"
    assert config.api_url is None


def test_http_provider_requires_api_url(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("provider: http\nmodel: llama3\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="requires 'api_url'"):
        ConfigStore(path).load()
