import tomllib
from pathlib import Path

import pytest

from nexus import __version__
from nexus.config import NexusConfig, NexusConfigError, dumps_toml, load_config, save_config


def test_config_roundtrip(tmp_path: Path) -> None:
    config_path = tmp_path / "nexus.toml"
    config = NexusConfig.default()
    config.project.name = "nexus-test"
    config.project.default_task = 'Add a "remember me" checkbox'
    config.backend.api_key_env = "GOOGLE_API_KEY"
    config.backend.timeout_seconds = 12.5
    config.agents.coder_model = "gemini-2.5-flash"
    config.agents.thinking_budget = 1024

    save_config(config_path, config)
    loaded = load_config(config_path)

    assert loaded.project.name == "nexus-test"
    assert loaded.project.default_task == 'Add a "remember me" checkbox'
    assert loaded.backend.api_key_env == "GOOGLE_API_KEY"
    assert loaded.backend.timeout_seconds == 12.5
    assert loaded.agents.coder_model == "gemini-2.5-flash"
    assert loaded.agents.planner_model == "gemini-2.5-pro"
    assert loaded.agents.thinking_budget == 1024


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    loaded = load_config(tmp_path / "absent.toml")

    assert loaded == NexusConfig.default()


def test_toml_dump_keeps_float_timeout() -> None:
    rendered = dumps_toml(NexusConfig.default())
    data = tomllib.loads(rendered)

    assert "timeout_seconds = 90.0" in rendered
    assert isinstance(data["backend"]["timeout_seconds"], float)
    assert list(data) == ["project", "backend", "agents"]


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "nexus.toml"
    config_path.write_text('[backend]\nretries = 3\n', encoding="utf-8")

    with pytest.raises(NexusConfigError, match="Invalid configuration"):
        load_config(config_path)


def test_invalid_toml_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "nexus.toml"
    config_path.write_text("[backend\n", encoding="utf-8")

    with pytest.raises(NexusConfigError, match="Could not parse"):
        load_config(config_path)


def test_package_version_constant_matches_pyproject() -> None:
    project_root = Path(__file__).resolve().parents[1]
    pyproject = tomllib.loads((project_root / "pyproject.toml").read_text(encoding="utf-8"))

    assert __version__ == pyproject["project"]["version"]


@pytest.mark.parametrize(
    "document",
    [
        '[backend]\ntimeout_seconds = "fast"\n',
        "[backend]\ntimeout_seconds = 1.5\n",
        '[backend]\nprovider = "openai"\n',
        '[agents]\nthinking_budget = "lots"\n',
        "[agents]\nthinking_budget = -1\n",
        "[agents]\ncoder_model = 3\n",
    ],
)
def test_ill_typed_values_are_rejected(tmp_path: Path, document: str) -> None:
    config_path = tmp_path / "nexus.toml"
    config_path.write_text(document, encoding="utf-8")

    with pytest.raises(NexusConfigError, match="Invalid configuration"):
        load_config(config_path)


def test_integer_timeout_is_read_as_float(tmp_path: Path) -> None:
    config_path = tmp_path / "nexus.toml"
    config_path.write_text("[backend]\ntimeout_seconds = 30\n", encoding="utf-8")

    timeout = load_config(config_path).backend.timeout_seconds

    assert timeout == 30.0
    assert isinstance(timeout, float)
