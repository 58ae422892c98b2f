from __future__ import annotations

from nexus.specialists.base import SpecialistAgent, SpecialistResponse
from nexus.specialists.schemas import GeneratedTests


def default_test_path(file_name: str) -> str:
    return file_name.replace(".tsx", ".test.tsx", 1)


class TesterAgent(SpecialistAgent):
    role = "tester"
    json_mode = True
    system_prompt = """
You are the Tester/QA specialist of a software development team.
Write unit tests covering the happy path, edge cases, and failures.
""".strip()

    @staticmethod
    def build_prompt(file_name: str, code: str) -> str:
        return (
            "Generate unit tests for the following TypeScript/React component located in "
            f'"{file_name}":\n\n```tsx\n{code}\n```\n\n'
            "Use Jest and React Testing Library. Your response must be a JSON object with "
            f'"testFileName" (e.g. \'{default_test_path(file_name)}\') and "testCode" properties.'
        )

    async def write_tests(self, file_name: str, code: str) -> SpecialistResponse:
        return await self._structured(
            self.build_prompt(file_name, code),
            GeneratedTests,
            lambda: GeneratedTests(
                test_file_name=default_test_path(file_name),
                test_code=f"// Failed to generate tests for: {file_name}",
            ),
        )
