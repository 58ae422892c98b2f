from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from nexus.state.session import DEFAULT_TASK

ProviderName = Literal["gemini"]

MIN_TIMEOUT_SECONDS = 5.0


class NexusConfigError(RuntimeError):
    """Raised when the configuration file cannot be read or holds bad values."""


def _require_str(section: object, *names: str) -> None:
    for name in names:
        value = getattr(section, name)
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string, got {value!r}")


@dataclass(slots=True)
class ProjectConfig:
    name: str = "Nexus UI Authentication"
    repo_url: str = "github.com/project-nexus/nexus-ui"
    default_task: str = DEFAULT_TASK

    def __post_init__(self) -> None:
        _require_str(self, "name", "repo_url", "default_task")


@dataclass(slots=True)
class BackendConfig:
    provider: ProviderName = "gemini"
    api_key_env: str = "API_KEY"
    timeout_seconds: float = 90.0

    def __post_init__(self) -> None:
        if self.provider != "gemini":
            raise ValueError(f"unsupported provider {self.provider!r}")
        _require_str(self, "api_key_env")
        timeout = self.timeout_seconds
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ValueError(f"timeout_seconds must be a number, got {timeout!r}")
        if timeout < MIN_TIMEOUT_SECONDS:
            raise ValueError(f"timeout_seconds must be at least {MIN_TIMEOUT_SECONDS:g}")
        self.timeout_seconds = float(timeout)


@dataclass(slots=True)
class AgentsConfig:
    planner_model: str = "gemini-2.5-pro"
    coder_model: str = "gemini-2.5-pro"
    tester_model: str = "gemini-2.5-flash"
    documenter_model: str = "gemini-2.5-flash"
    chat_model: str = "gemini-2.5-flash"
    thinking_budget: int = 32768

    def __post_init__(self) -> None:
        _require_str(self, "planner_model", "coder_model", "tester_model")
        _require_str(self, "documenter_model", "chat_model")
        budget = self.thinking_budget
        if isinstance(budget, bool) or not isinstance(budget, int) or budget < 0:
            raise ValueError(f"thinking_budget must be a non-negative integer, got {budget!r}")


@dataclass(slots=True)
class NexusConfig:
    project: ProjectConfig = field(default_factory=ProjectConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    agents: AgentsConfig = field(default_factory=AgentsConfig)

    @classmethod
    def default(cls) -> NexusConfig:
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> NexusConfig:
        try:
            return cls(
                project=ProjectConfig(**data.get("project", {})),
                backend=BackendConfig(**data.get("backend", {})),
                agents=AgentsConfig(**data.get("agents", {})),
            )
        except (TypeError, ValueError) as exc:
            raise NexusConfigError(f"Invalid configuration: {exc}") from exc

    def to_dict(self) -> dict:
        return {
            "project": {
                "name": self.project.name,
                "repo_url": self.project.repo_url,
                "default_task": self.project.default_task,
            },
            "backend": {
                "provider": self.backend.provider,
                "api_key_env": self.backend.api_key_env,
                "timeout_seconds": self.backend.timeout_seconds,
            },
            "agents": {
                "planner_model": self.agents.planner_model,
                "coder_model": self.agents.coder_model,
                "tester_model": self.agents.tester_model,
                "documenter_model": self.agents.documenter_model,
                "chat_model": self.agents.chat_model,
                "thinking_budget": self.agents.thinking_budget,
            },
        }


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        rendered = f"{value:.3f}".rstrip("0")
        return rendered + "0" if rendered.endswith(".") else rendered
    return json.dumps(str(value), ensure_ascii=False)


def dumps_toml(config: NexusConfig) -> str:
    data = config.to_dict()
    lines: list[str] = []
    for section in ("project", "backend", "agents"):
        lines.append(f"[{section}]")
        for key, value in data[section].items():
            lines.append(f"{key} = {_toml_value(value)}")
        lines.append("")
    return "\n".join(lines).strip() + "\n"


def load_config(path: Path) -> NexusConfig:
    if not path.exists():
        return NexusConfig.default()
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise NexusConfigError(f"Could not parse {path}: {exc}") from exc
    return NexusConfig.from_dict(data)


def save_config(path: Path, config: NexusConfig) -> None:
    path.write_text(dumps_toml(config), encoding="utf-8")
