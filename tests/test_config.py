import pytest
import yaml

from cloudwright.config.credentials import (
    TOOLSETS,
    get_config_path,
    load_config_file,
    parse_toolsets,
    resolve_platform_config,
)
from cloudwright.config.settings import PLATFORM_ENDPOINTS, Settings
from cloudwright.errors import ConfigurationError


def _write_config(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))
    return path


def test_settings_from_env(platform_env):
    platform_env.setenv("CLOUDWRIGHT_WORKSPACE", "acme")
    platform_env.setenv("CLOUDWRIGHT_POLL_TIMEOUT", "30")
    platform_env.setenv("CLOUDWRIGHT_READ_ONLY", "true")

    settings = Settings(_env_file=None)

    assert settings.workspace == "acme"
    assert settings.read_only is True
    policy = settings.poll_policy()
    assert policy.max_attempts == 60
    assert policy.interval == 2.0
    assert policy.timeout == 30.0


def test_endpoint_selection(platform_env):
    settings = Settings(_env_file=None)
    assert settings.endpoint() == PLATFORM_ENDPOINTS["prod"]
    assert settings.endpoint("dev") == PLATFORM_ENDPOINTS["dev"]

    override = Settings(_env_file=None, api_url="http://localhost:8080")
    assert override.endpoint("dev") == "http://localhost:8080"


def test_resolve_from_config_file(tmp_path, platform_env):
    path = _write_config(
        tmp_path / "config.yaml",
        {
            "context": {"workspace": "acme"},
            "workspaces": [
                {"name": "other", "credentials": {"apiKey": "wrong"}},
                {"name": "acme", "env": "dev", "credentials": {"apiKey": "file-key"}},
            ],
        },
    )

    config = resolve_platform_config(Settings(_env_file=None), path)

    assert config.workspace == "acme"
    assert config.api_key == "file-key"
    assert config.env == "dev"
    assert config.api_url == PLATFORM_ENDPOINTS["dev"]


def test_env_workspace_and_key_without_file(tmp_path, platform_env):
    settings = Settings(_env_file=None, workspace="acme", api_key="env-key")

    config = resolve_platform_config(settings, tmp_path / "missing.yaml")

    assert config.workspace == "acme"
    assert config.api_key == "env-key"
    assert config.env == "prod"


def test_missing_workspace(tmp_path, platform_env):
    with pytest.raises(ConfigurationError, match="no workspace found"):
        resolve_platform_config(Settings(_env_file=None), tmp_path / "missing.yaml")


def test_missing_credentials(tmp_path, platform_env):
    path = _write_config(tmp_path / "config.yaml", {"context": {"workspace": "acme"}})

    with pytest.raises(ConfigurationError, match="no valid credentials found"):
        resolve_platform_config(Settings(_env_file=None), path)


def test_config_path_search(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert get_config_path() is None

    local = _write_config(tmp_path / ".cloudwright" / "config.yaml", {})
    assert get_config_path() == local
    assert get_config_path(tmp_path / "nope.yaml") is None


def test_invalid_yaml_is_ignored(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("workspaces: [unclosed")

    assert load_config_file(path) == {}


def test_parse_toolsets():
    assert parse_toolsets(None) == set(TOOLSETS)
    assert parse_toolsets("all") == set(TOOLSETS)
    assert parse_toolsets("agents, sandboxes") == {"agents", "sandboxes"}
    with pytest.raises(ConfigurationError, match="unknown toolsets: bogus"):
        parse_toolsets("agents,bogus")


def test_invalid_poll_settings_are_configuration_errors(platform_env):
    with pytest.raises(ConfigurationError, match="max_attempts must be at least 1"):
        Settings(_env_file=None, poll_max_attempts=0).poll_policy()
    with pytest.raises(ConfigurationError, match="interval must not be negative"):
        Settings(_env_file=None, poll_interval=-1).poll_policy()
