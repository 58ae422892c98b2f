import asyncio
import json
import logging

import pytest

from nexus.backends.base import AgentBackend, BackendExecutionError, BackendReply
from nexus.runner import TaskRunner
from nexus.specialists import CoderAgent, DocumenterAgent, PlannerAgent, TesterAgent
from nexus.state.filetree import FileNode, lookup
from nexus.state.session import Session


class FakeBackend(AgentBackend):
    def __init__(self) -> None:
        self.prompts: list[str] = []

    async def generate(
        self,
        *,
        model: str,
        prompt: str,
        system_prompt: str = "",
        json_mode: bool = False,
        use_search: bool = False,
        thinking_budget: int | None = None,
    ) -> BackendReply:
        _ = model, system_prompt, json_mode, use_search, thinking_budget
        self.prompts.append(prompt)
        if "break it down" in prompt:
            return BackendReply(json.dumps({"subtasks": ["Create login form", "Add validation"]}))
        if "Given the sub-task" in prompt:
            return BackendReply(
                json.dumps({"fileName": "src/components/Login.tsx", "code": "// login"})
            )
        if "Generate unit tests" in prompt:
            return BackendReply(
                json.dumps(
                    {"testFileName": "src/components/Login.test.tsx", "testCode": "// tests"}
                )
            )
        if "update the following README.md" in prompt:
            return BackendReply("# Project Nexus UI\n\nAdds a login form.")
        return BackendReply("")


class CoderDownBackend(FakeBackend):
    async def generate(self, **kwargs) -> BackendReply:
        if "Given the sub-task" in kwargs["prompt"]:
            self.prompts.append(kwargs["prompt"])
            raise BackendExecutionError("model overloaded", backend="fake")
        return await super().generate(**kwargs)


class ExplodingCoder(CoderAgent):
    async def write_code(self, subtask: str, existing_files: str):
        raise RuntimeError("unexpected crash")


def _build_runner(session: Session, backend: AgentBackend, coder: CoderAgent | None = None):
    return TaskRunner(
        session,
        planner=PlannerAgent(backend, model="planner-model"),
        coder=coder or CoderAgent(backend, model="coder-model"),
        tester=TesterAgent(backend, model="tester-model"),
        documenter=DocumenterAgent(backend, model="documenter-model"),
    )


def test_run_writes_artifacts_in_order_and_selects_code_file() -> None:
    session = Session()
    backend = FakeBackend()
    runner = _build_runner(session, backend)

    summary = asyncio.run(runner.run("Build a login form"))

    assert summary is not None
    assert summary.failed is False
    assert summary.plan == ["Create login form", "Add validation"]
    assert summary.code_path == "src/components/Login.tsx"
    assert summary.test_path == "src/components/Login.test.tsx"
    assert summary.fallback_stages == []

    files = session.state.files
    assert lookup(files, "src/components/Login.tsx").content == "// login"
    assert lookup(files, "src/components/Login.test.tsx").content == "// tests"
    assert lookup(files, "README.md").content == "# Project Nexus UI\n\nAdds a login form."
    components = lookup(files, "src/components")
    assert [child.name for child in components.children] == ["Login.tsx", "Login.test.tsx"]

    assert session.state.selected_file is lookup(files, "src/components/Login.tsx")
    assert session.state.running is False
    assert all(agent.status == "done" for agent in session.state.agents)

    assert len(backend.prompts) == 4
    assert '"Create login form"' in backend.prompts[1]
    assert '["src", "package.json", "README.md"]' in backend.prompts[1]
    assert "This is the initial README" in backend.prompts[3]
    assert "Created src/components/Login.tsx and src/components/Login.test.tsx." in (
        backend.prompts[3]
    )

    logs = session.state.logs
    assert logs[0].type == "user_action"
    assert logs[0].message == 'Task started: "Build a login form"'
    assert [entry.message for entry in logs if entry.type == "file_change"] == [
        "Generated file: src/components/Login.tsx",
        "Generated test file: src/components/Login.test.tsx",
        "Updated README.md",
    ]
    assert logs[-1].type == "success"


def test_run_clears_previous_logs() -> None:
    session = Session()
    session.add_log("info", "stale")

    asyncio.run(_build_runner(session, FakeBackend()).run("Build a login form"))

    assert all(entry.message != "stale" for entry in session.state.logs)


def test_run_rejects_blank_task_and_overlapping_runs() -> None:
    session = Session()
    backend = FakeBackend()
    runner = _build_runner(session, backend)

    assert asyncio.run(runner.run("   ")) is None

    session.state.running = True
    assert asyncio.run(runner.run("Build a login form")) is None
    assert backend.prompts == []
    assert session.state.logs == []


def test_run_uses_session_task_by_default() -> None:
    session = Session()
    backend = FakeBackend()

    summary = asyncio.run(_build_runner(session, backend).run())

    assert summary is not None
    assert summary.task == session.state.task
    assert session.state.task in backend.prompts[0]


def test_backend_failure_substitutes_fallback_and_run_completes() -> None:
    session = Session()
    runner = _build_runner(session, CoderDownBackend())

    summary = asyncio.run(runner.run("Build a login form"))

    assert summary is not None
    assert summary.failed is False
    assert summary.fallback_stages == ["coder"]
    assert summary.code_path == "src/components/Error.tsx"
    assert summary.test_path == "src/components/Login.test.tsx"
    error = lookup(session.state.files, "src/components/Error.tsx")
    assert isinstance(error, FileNode)
    assert error.content == "// Failed to generate code for: Create login form"

    errors = [entry for entry in session.state.logs if entry.type == "error"]
    assert len(errors) == 1
    assert "model overloaded" in errors[0].message
    assert errors[0].agent_role == "coder"
    assert session.state.logs[-1].type == "success"


def test_empty_plan_codes_from_task() -> None:
    class EmptyPlanBackend(FakeBackend):
        async def generate(self, **kwargs) -> BackendReply:
            if "break it down" in kwargs["prompt"]:
                self.prompts.append(kwargs["prompt"])
                return BackendReply('{"subtasks": []}')
            return await super().generate(**kwargs)

    backend = EmptyPlanBackend()
    summary = asyncio.run(_build_runner(Session(), backend).run("Build a login form"))

    assert summary.plan == []
    assert '"Build a login form"' in backend.prompts[1]


def test_unexpected_error_is_logged_and_releases_running_flag() -> None:
    session = Session()
    backend = FakeBackend()
    runner = _build_runner(session, backend, coder=ExplodingCoder(backend, model="m"))

    summary = asyncio.run(runner.run("Build a login form"))

    assert summary is not None
    assert summary.failed is True
    assert session.state.running is False
    assert session.agent("coder").status == "error"
    assert session.state.logs[-1].type == "error"
    assert session.state.logs[-1].message == "Workflow failed: unexpected crash"
    assert lookup(session.state.files, "src/components/Login.tsx") is None


class FolderNamedCodeBackend(FakeBackend):
    async def generate(self, **kwargs) -> BackendReply:
        if "Given the sub-task" in kwargs["prompt"]:
            return BackendReply(json.dumps({"fileName": "src/components", "code": "// x"}))
        return await super().generate(**kwargs)


def test_code_file_shadowed_by_folder_is_not_selected(caplog: pytest.LogCaptureFixture) -> None:
    session = Session()
    caplog.set_level(logging.WARNING, logger="nexus")

    summary = asyncio.run(_build_runner(session, FolderNamedCodeBackend()).run("Build it"))

    assert summary is not None
    assert summary.failed is False
    assert summary.code_path == "src/components"
    assert session.state.selected_file is None
    assert "shadowed by a folder" in caplog.text
    assert session.state.logs[-1].type == "success"
