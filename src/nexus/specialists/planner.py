from __future__ import annotations

from nexus.specialists.base import SpecialistAgent, SpecialistResponse
from nexus.specialists.schemas import Plan

DEFAULT_PLAN = [
    "Analyze requirements",
    "Implement feature",
    "Write tests",
    "Update documentation",
]


class PlannerAgent(SpecialistAgent):
    role = "planner"
    json_mode = True
    system_prompt = """
You are the Planner/Architect of a software development team.
Break high-level tasks into small, sequential, actionable sub-tasks.
You produce plans, not code.
""".strip()

    @staticmethod
    def build_prompt(task: str) -> str:
        return (
            f'Based on the high-level task "{task}", break it down into a series of smaller, '
            "sequential sub-tasks for a software development team. Respond with a valid JSON "
            'object with a single key "subtasks" which is an array of strings. Example: '
            '{"subtasks": ["Create component file", "Add state logic", "Implement UI rendering"]}'
        )

    async def plan(self, task: str) -> SpecialistResponse:
        """Payload is the list of sub-task strings."""
        response = await self._structured(
            self.build_prompt(task),
            Plan,
            lambda: Plan(subtasks=list(DEFAULT_PLAN)),
        )
        response.payload = list(response.payload.subtasks)
        return response
