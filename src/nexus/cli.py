from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path

import click

from nexus.backends import AgentBackend, GeminiBackend
from nexus.config import NexusConfig, NexusConfigError, load_config, save_config
from nexus.log import configure_logging
from nexus.runner import TaskRunner
from nexus.specialists import ChatAgent, CoderAgent, DocumenterAgent, PlannerAgent, TesterAgent
from nexus.state.filetree import render, to_records
from nexus.state.session import AppState, LogEntry, Project, Session


def _resolve_config_path(config_value: str) -> Path:
    config_path = Path(config_value)
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_path
    return config_path.resolve()


def _load(config_value: str) -> NexusConfig:
    try:
        return load_config(_resolve_config_path(config_value))
    except NexusConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _build_backend(config: NexusConfig) -> AgentBackend:
    return GeminiBackend(
        api_key_env=config.backend.api_key_env,
        timeout_seconds=config.backend.timeout_seconds,
    )


def _build_runner(config: NexusConfig, session: Session, backend: AgentBackend) -> TaskRunner:
    agents = config.agents
    return TaskRunner(
        session,
        planner=PlannerAgent(
            backend, model=agents.planner_model, thinking_budget=agents.thinking_budget
        ),
        coder=CoderAgent(backend, model=agents.coder_model, thinking_budget=agents.thinking_budget),
        tester=TesterAgent(backend, model=agents.tester_model),
        documenter=DocumenterAgent(backend, model=agents.documenter_model),
    )


def _new_session(config: NexusConfig) -> Session:
    project = Project(name=config.project.name, repo_url=config.project.repo_url)
    return Session(AppState(project=project, task=config.project.default_task))


def _format_log(entry: LogEntry) -> str:
    origin = entry.agent_role.capitalize() if entry.agent_role else entry.type.upper()
    return f"[{entry.timestamp}] {origin}: {entry.message}"


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def cli(log_level: str) -> None:
    """Project Nexus multi-agent assistant."""
    configure_logging(log_level)


@cli.command("init")
@click.option("--config", "config_value", default="nexus.toml", show_default=True)
@click.option("--force", is_flag=True, default=False)
def init_command(config_value: str, force: bool) -> None:
    config_path = _resolve_config_path(config_value)
    if config_path.exists() and not force:
        raise click.ClickException(f"{config_path} already exists (use --force to overwrite).")
    save_config(config_path, NexusConfig.default())
    click.echo(f"Wrote {config_path}")


@cli.command("run")
@click.argument("task", required=False)
@click.option("--config", "config_value", default="nexus.toml", show_default=True)
@click.option("--show-tree/--no-show-tree", default=True, show_default=True)
@click.option("--json", "as_json", is_flag=True, default=False)
@click.option(
    "--edit-from",
    "edit_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Replace the generated code file with the contents of this local file.",
)
@click.option("--commit", "do_commit", is_flag=True, default=False)
def run_command(
    task: str | None,
    config_value: str,
    show_tree: bool,
    as_json: bool,
    edit_path: Path | None,
    do_commit: bool,
) -> None:
    config = _load(config_value)
    session = _new_session(config)
    runner = _build_runner(config, session, _build_backend(config))
    summary = asyncio.run(runner.run(task))
    if summary is None:
        raise click.ClickException("Nothing to run: the task description is empty.")
    if not summary.failed:
        if edit_path is not None:
            edited = session.edit_selected(edit_path.read_text(encoding="utf-8"))
            if edited is None:
                raise click.ClickException("No generated file is selected; nothing to edit.")
        if do_commit:
            session.commit()

    state = session.state
    if as_json:
        payload = {
            "summary": asdict(summary),
            "logs": [asdict(entry) for entry in state.logs],
            "files": to_records(state.files),
        }
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    for entry in state.logs:
        click.echo(_format_log(entry))
    if show_tree:
        click.echo("")
        click.echo(render(state.files))
    if state.selected_file is not None:
        click.echo("")
        click.echo(f"--- {summary.code_path} ---")
        click.echo(state.selected_file.content)
    if summary.failed:
        raise click.ClickException("Workflow failed; see the log above.")


@cli.command("chat")
@click.argument("prompt")
@click.option("--search", "use_search", is_flag=True, default=False)
@click.option("--config", "config_value", default="nexus.toml", show_default=True)
def chat_command(prompt: str, use_search: bool, config_value: str) -> None:
    config = _load(config_value)
    agent = ChatAgent(_build_backend(config), model=config.agents.chat_model)
    response = asyncio.run(agent.reply(prompt, use_search=use_search))
    click.echo(response.payload.text)
    for source in response.payload.sources:
        click.echo(f"- {source.get('title') or source.get('uri')}: {source.get('uri')}")


@cli.command("agents")
def agents_command() -> None:
    for agent in Session().state.agents:
        click.echo(f"{agent.role.capitalize():<11} {agent.status_verb:<8} {agent.description}")


@cli.command("tree")
@click.option("--json", "as_json", is_flag=True, default=False)
def tree_command(as_json: bool) -> None:
    files = Session().state.files
    if as_json:
        click.echo(json.dumps(to_records(files), ensure_ascii=False, indent=2))
        return
    click.echo(render(files))
