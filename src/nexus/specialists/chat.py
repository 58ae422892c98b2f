from __future__ import annotations

from nexus.backends.base import BackendExecutionError
from nexus.specialists.base import SpecialistAgent, SpecialistResponse
from nexus.specialists.schemas import ChatReply

CHAT_ERROR_TEXT = "Sorry, I encountered an error. Please try again."


class ChatAgent(SpecialistAgent):
    role = "chat"
    system_prompt = "You are a helpful assistant for a software development team."

    async def reply(self, prompt: str, *, use_search: bool = False) -> SpecialistResponse:
        try:
            reply = await self._request(prompt, use_search=use_search)
        except BackendExecutionError as exc:
            return self._fallback(ChatReply(text=CHAT_ERROR_TEXT), CHAT_ERROR_TEXT, exc)
        payload = ChatReply(text=reply.text, sources=list(reply.sources))
        return SpecialistResponse(
            role=self.role,
            content=reply.text,
            payload=payload,
            metadata={"model": self.model, "use_search": use_search},
        )
