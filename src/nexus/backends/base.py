from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class BackendExecutionError(RuntimeError):
    """Raised when a generation request fails."""

    def __init__(
        self,
        message: str,
        *,
        backend: str | None = None,
        retriable: bool = True,
    ) -> None:
        super().__init__(message)
        self.backend = backend
        self.retriable = retriable


class BackendTimeoutError(BackendExecutionError):
    """Raised when a generation request exceeds the configured timeout."""


@dataclass(slots=True)
class BackendReply:
    text: str
    sources: list[dict[str, Any]] = field(default_factory=list)


class AgentBackend(ABC):
    @abstractmethod
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
        """Send one prompt to the model and return its textual reply."""
