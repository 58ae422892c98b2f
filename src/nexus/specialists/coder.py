from __future__ import annotations

from nexus.specialists.base import SpecialistAgent, SpecialistResponse
from nexus.specialists.schemas import GeneratedCode

FALLBACK_CODE_PATH = "src/components/Error.tsx"


class CoderAgent(SpecialistAgent):
    role = "coder"
    json_mode = True
    system_prompt = """
You are the Coder/Engineer of a software development team.
Implement exactly what was planned as complete TypeScript/React files.
Match the conventions of the existing project.
""".strip()

    @staticmethod
    def build_prompt(subtask: str, existing_files: str) -> str:
        return (
            f'Given the sub-task: "{subtask}", and the existing file structure: '
            f"{existing_files}, generate the necessary TypeScript/React code. Respond with a "
            "valid JSON object with \"fileName\" (e.g., 'src/components/Login.tsx') and "
            '"code" properties. The code should be a string containing the full file content.'
        )

    async def write_code(self, subtask: str, existing_files: str) -> SpecialistResponse:
        """Payload is a ``GeneratedCode``; ``existing_files`` is a JSON list of names."""
        return await self._structured(
            self.build_prompt(subtask, existing_files),
            GeneratedCode,
            lambda: GeneratedCode(
                file_name=FALLBACK_CODE_PATH,
                code=f"// Failed to generate code for: {subtask}",
            ),
        )
