from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from nexus.backends.base import (
    AgentBackend,
    BackendExecutionError,
    BackendReply,
    BackendTimeoutError,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class GeminiBackend(AgentBackend):
    """Gemini chat models through langchain-google-genai."""

    def __init__(
        self,
        *,
        api_key_env: str = "API_KEY",
        timeout_seconds: float = 90.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.api_key_env = api_key_env
        self.timeout_seconds = timeout_seconds
        self.client_factory = client_factory or ChatGoogleGenerativeAI

    def _client_kwargs(
        self, model: str, *, json_mode: bool, thinking_budget: int | None
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"model": model}
        api_key = os.environ.get(self.api_key_env, "").strip()
        if api_key:
            kwargs["google_api_key"] = api_key
        if json_mode:
            kwargs["response_mime_type"] = "application/json"
        if thinking_budget is not None:
            kwargs["thinking_budget"] = thinking_budget
        return kwargs

    @staticmethod
    def _build_messages(system_prompt: str, prompt: str) -> list[BaseMessage]:
        messages: list[BaseMessage] = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))
        return messages

    @staticmethod
    def _extract_text(message: Any) -> str:
        content = getattr(message, "content", message)
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict):
                    text = item.get("text")
                    if isinstance(text, str):
                        parts.append(text)
            return "".join(parts)
        return str(content or "")

    @staticmethod
    def _extract_sources(message: Any) -> list[dict[str, Any]]:
        metadata = getattr(message, "response_metadata", None)
        if not isinstance(metadata, dict):
            return []
        grounding = metadata.get("grounding_metadata")
        if not isinstance(grounding, dict):
            return []
        chunks = grounding.get("grounding_chunks")
        if not isinstance(chunks, list):
            return []
        sources: list[dict[str, Any]] = []
        for chunk in chunks:
            if not isinstance(chunk, dict):
                continue
            web = chunk.get("web")
            if isinstance(web, dict) and web.get("uri"):
                sources.append({"uri": str(web["uri"]), "title": str(web.get("title") or "")})
        return sources

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
        try:
            client = self.client_factory(
                **self._client_kwargs(model, json_mode=json_mode, thinking_budget=thinking_budget)
            )
            if use_search:
                client = client.bind_tools([{"google_search": {}}])
        except Exception as exc:
            raise BackendExecutionError(
                f"Gemini client could not be created: {exc}",
                backend="gemini",
                retriable=False,
            ) from exc

        logger.debug("Requesting %s (json_mode=%s, search=%s)", model, json_mode, use_search)
        try:
            message = await asyncio.wait_for(
                client.ainvoke(self._build_messages(system_prompt, prompt)),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise BackendTimeoutError(
                f"Gemini request timed out after {self.timeout_seconds:.1f}s",
                backend="gemini",
            ) from exc
        except Exception as exc:
            raise BackendExecutionError(
                f"Gemini request failed: {exc}",
                backend="gemini",
            ) from exc

        return BackendReply(
            text=self._extract_text(message).strip(),
            sources=self._extract_sources(message),
        )
