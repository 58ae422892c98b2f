from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import JsonOutputParser
from pydantic import BaseModel, ValidationError

from nexus.backends.base import AgentBackend, BackendExecutionError, BackendReply

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@dataclass(slots=True)
class SpecialistResponse:
    role: str
    content: str
    payload: Any = None
    fallback: bool = False
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class SpecialistAgent:
    role: str = "specialist"
    system_prompt: str = "You are a software specialist."
    json_mode: bool = False

    def __init__(
        self,
        backend: AgentBackend,
        *,
        model: str,
        thinking_budget: int | None = None,
    ) -> None:
        self.backend = backend
        self.model = model
        self.thinking_budget = thinking_budget

    async def _request(self, prompt: str, *, use_search: bool = False) -> BackendReply:
        return await self.backend.generate(
            model=self.model,
            prompt=prompt,
            system_prompt=self.system_prompt,
            json_mode=self.json_mode,
            use_search=use_search,
            thinking_budget=self.thinking_budget,
        )

    def _fallback(self, payload: Any, content: str, exc: Exception) -> SpecialistResponse:
        logger.warning("%s request failed, using fallback: %s", self.role, exc)
        return SpecialistResponse(
            role=self.role,
            content=content,
            payload=payload,
            fallback=True,
            error=str(exc),
            metadata={"model": self.model},
        )

    async def _structured(
        self,
        prompt: str,
        schema: type[SchemaT],
        fallback: Callable[[], SchemaT],
    ) -> SpecialistResponse:
        try:
            reply = await self._request(prompt)
            parser = JsonOutputParser(pydantic_object=schema)
            parsed = schema.model_validate(parser.parse(reply.text))
        except (BackendExecutionError, OutputParserException, ValidationError) as exc:
            substitute = fallback()
            return self._fallback(substitute, substitute.model_dump_json(by_alias=True), exc)
        return SpecialistResponse(
            role=self.role,
            content=reply.text,
            payload=parsed,
            metadata={"model": self.model},
        )

    async def _text(self, prompt: str, fallback: Callable[[], str]) -> SpecialistResponse:
        try:
            reply = await self._request(prompt)
        except BackendExecutionError as exc:
            substitute = fallback()
            return self._fallback(substitute, substitute, exc)
        if not reply.text:
            substitute = fallback()
            return self._fallback(
                substitute, substitute, OutputParserException("Empty response from model")
            )
        return SpecialistResponse(
            role=self.role,
            content=reply.text,
            payload=reply.text,
            metadata={"model": self.model, "sources": reply.sources},
        )
