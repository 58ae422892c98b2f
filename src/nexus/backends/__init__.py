from nexus.backends.base import (
    AgentBackend,
    BackendExecutionError,
    BackendReply,
    BackendTimeoutError,
)
from nexus.backends.gemini import GeminiBackend

__all__ = [
    "AgentBackend",
    "BackendExecutionError",
    "BackendReply",
    "BackendTimeoutError",
    "GeminiBackend",
]
