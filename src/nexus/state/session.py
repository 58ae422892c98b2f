from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from nexus.state.filetree import (
    FileNode,
    FolderNode,
    Tree,
    find_or_create,
    find_path_of,
    lookup,
    update_content,
)

logger = logging.getLogger(__name__)

AgentRole = Literal["planner", "coder", "tester", "documenter"]
AgentStatus = Literal[
    "idle",
    "thinking",
    "coding",
    "testing",
    "documenting",
    "revising",
    "done",
    "error",
]
LogEntryType = Literal[
    "info",
    "agent_message",
    "user_action",
    "file_change",
    "commit",
    "error",
    "success",
]

AGENT_STATUS_VERBS: dict[str, str] = {
    "idle": "Idle",
    "thinking": "Planning...",
    "coding": "Generating code...",
    "testing": "Writing tests...",
    "documenting": "Updating docs...",
    "revising": "Revising plan...",
    "done": "Completed",
    "error": "Error",
}

# Failures are reported by the component that hit them; the mirror stays below WARNING.
_LOG_LEVELS: dict[str, int] = {
    "error": logging.INFO,
    "success": logging.INFO,
    "commit": logging.INFO,
    "file_change": logging.INFO,
}

DEFAULT_TASK = (
    "Implement a responsive login form with email and password fields, "
    "including basic validation."
)


@dataclass(slots=True)
class Agent:
    id: str
    role: AgentRole
    description: str
    status: AgentStatus = "idle"

    @property
    def status_verb(self) -> str:
        return AGENT_STATUS_VERBS[self.status]


@dataclass(slots=True)
class Project:
    name: str = "Nexus UI Authentication"
    repo_url: str = "github.com/project-nexus/nexus-ui"


@dataclass(slots=True)
class LogEntry:
    id: int
    type: LogEntryType
    message: str
    timestamp: str
    agent_role: AgentRole | None = None


def default_agents() -> list[Agent]:
    return [
        Agent(
            id="agent-1",
            role="planner",
            description=(
                "Decomposes high-level tasks into actionable sub-tasks and orchestrates "
                "the team's workflow."
            ),
        ),
        Agent(
            id="agent-2",
            role="coder",
            description=(
                "Writes clean, efficient, and maintainable code based on specifications "
                "from the Planner."
            ),
        ),
        Agent(
            id="agent-3",
            role="tester",
            description=(
                "Creates and runs unit tests to ensure code quality, correctness, and "
                "adherence to requirements."
            ),
        ),
        Agent(
            id="agent-4",
            role="documenter",
            description=(
                "Generates and updates documentation, including README files and "
                "in-code comments."
            ),
        ),
    ]


def seed_tree() -> Tree:
    return (
        FolderNode(
            name="src",
            children=(
                FolderNode(name="components"),
                FileNode(
                    name="App.tsx",
                    content=(
                        'import React from "react";\n\n'
                        "const App = () => <div>Hello World</div>;\n\n"
                        "export default App;"
                    ),
                ),
                FileNode(
                    name="index.tsx",
                    content=(
                        'import React from "react";\n'
                        'import ReactDOM from "react-dom";\n'
                        'import App from "./App";\n\n'
                        'ReactDOM.render(<App />, document.getElementById("root"));'
                    ),
                ),
            ),
        ),
        FileNode(name="package.json", content='{ "name": "project-nexus-ui", "version": "1.0.0" }'),
        FileNode(
            name="README.md",
            content="# Project Nexus UI\n\nThis is the initial README for the project.",
        ),
    )


@dataclass(slots=True)
class AppState:
    project: Project = field(default_factory=Project)
    agents: list[Agent] = field(default_factory=default_agents)
    task: str = DEFAULT_TASK
    logs: list[LogEntry] = field(default_factory=list)
    files: Tree = field(default_factory=seed_tree)
    selected_file: FileNode | None = None
    running: bool = False


def branch_name_for(task: str) -> str:
    slug = re.sub(r"\s+", "-", task.strip().lower())[:20]
    return f"feature/{slug}"


class Session:
    """Single owner of the application state; every mutation goes through here."""

    def __init__(self, state: AppState | None = None) -> None:
        self.state = state or AppState()
        self._next_log_id = 0

    def add_log(
        self,
        entry_type: LogEntryType,
        message: str,
        role: AgentRole | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            id=self._next_log_id,
            type=entry_type,
            message=message,
            timestamp=datetime.now().strftime("%H:%M:%S"),
            agent_role=role,
        )
        self._next_log_id += 1
        self.state.logs.append(entry)
        logger.log(
            _LOG_LEVELS.get(entry_type, logging.DEBUG),
            "[%s] %s",
            role or entry_type,
            message,
        )
        return entry

    def clear_logs(self) -> None:
        self.state.logs = []

    def agent(self, role: AgentRole) -> Agent | None:
        for agent in self.state.agents:
            if agent.role == role:
                return agent
        return None

    def set_agent_status(self, role: AgentRole, status: AgentStatus) -> None:
        agent = self.agent(role)
        if agent is not None:
            agent.status = status

    def reset_agents(self) -> None:
        for agent in self.state.agents:
            agent.status = "idle"

    def read_file(self, path: str) -> FileNode | None:
        node = lookup(self.state.files, path)
        return node if isinstance(node, FileNode) else None

    def select_file(self, path: str) -> FileNode | None:
        node = self.read_file(path)
        if node is not None:
            self.state.selected_file = node
        return node

    def write_file(self, path: str, content: str) -> Tree:
        self.state.files = find_or_create(self.state.files, path, content)
        return self.state.files

    def edit_selected(self, new_content: str) -> FileNode | None:
        selected = self.state.selected_file
        if selected is None:
            return None
        path = find_path_of(self.state.files, selected)
        if path is None:
            logger.debug("Selected file %s is not part of the current tree.", selected.name)
            return None
        files, updated = update_content(self.state.files, path, new_content)
        if updated is None:
            return None
        self.state.files = files
        self.state.selected_file = updated
        return updated

    def commit(self) -> str:
        branch = branch_name_for(self.state.task)
        self.add_log("commit", f"User approved & committed changes to new branch: {branch}")
        self.add_log("success", "Project successfully committed!")
        self.reset_agents()
        return branch
