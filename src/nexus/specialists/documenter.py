from __future__ import annotations

from nexus.specialists.base import SpecialistAgent, SpecialistResponse


class DocumenterAgent(SpecialistAgent):
    role = "documenter"
    system_prompt = """
You are the Documenter/Technical Writer of a software development team.
Keep README files concise and accurate.
""".strip()

    @staticmethod
    def build_prompt(task: str, readme: str, changes: str) -> str:
        return (
            f'The main task was: "{task}". The following file changes were made: {changes}. '
            "Please update the following README.md to reflect these changes. Keep the existing "
            f"structure and markdown formatting.\n\nExisting README:\n{readme}"
        )

    async def update_readme(self, task: str, readme: str, changes: str) -> SpecialistResponse:
        """Payload is the full replacement README text."""
        return await self._text(
            self.build_prompt(task, readme, changes),
            lambda: (
                f"{readme}\n\n---\n\n## Update Failed\n"
                f"Could not automatically update documentation for task: {task}."
            ),
        )
