from __future__ import annotations

from pathlib import Path

import pytest

from user_management.config import Settings, load_settings, resolve_config_path


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.yaml", environ={})

    assert settings == Settings()
    assert settings.log_level == "INFO"


def test_yaml_file_is_loaded(tmp_path: Path) -> None:
    config = _write(
        tmp_path / "settings.yaml",
        """
authentication:
  token: primary
  tokens:
    - secondary
    - tertiary
logging:
  level: debug
""",
    )

    settings = load_settings(config, environ={})

    assert settings.token == "primary"
    assert settings.tokens == ("secondary", "tertiary")
    assert settings.log_level == "DEBUG"


def test_environment_overrides_file(tmp_path: Path) -> None:
    config = _write(tmp_path / "settings.yaml", "authentication:\n  token: from-file\n  tokens: [a]\n")

    settings = load_settings(
        config,
        environ={
            "USER_MANAGEMENT_API_TOKEN": "from-env",
            "USER_MANAGEMENT_API_TOKENS": " x, ,y ",
            "USER_MANAGEMENT_LOG_LEVEL": "warning",
        },
    )

    assert settings.token == "from-env"
    assert settings.tokens == ("x", "y")
    assert settings.log_level == "WARNING"


def test_config_path_comes_from_environment(tmp_path: Path) -> None:
    config = _write(tmp_path / "custom.yaml", "authentication:\n  token: custom\n")

    settings = load_settings(environ={"USER_MANAGEMENT_CONFIG": str(config)})

    assert settings.token == "custom"
    assert resolve_config_path(str(config)) == config.resolve()


def test_default_config_path_is_inside_project() -> None:
    path = resolve_config_path(None)

    assert path.name == "settings.yaml"
    assert path.parent.name == "config"


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "authentication: nope\n",
        "authentication:\n  tokens: single-string\n",
    ],
)
def test_malformed_configuration_is_rejected(tmp_path: Path, content: str) -> None:
    config = _write(tmp_path / "settings.yaml", content)

    with pytest.raises(ValueError):
        load_settings(config, environ={})
