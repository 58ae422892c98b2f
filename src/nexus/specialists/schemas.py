from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Plan(BaseModel):
    subtasks: list[str] = Field(
        description="A list of strings, where each string is a specific sub-task."
    )


class GeneratedCode(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(
        alias="fileName",
        min_length=1,
        description="A suitable file path and name, e.g. 'src/components/Login.tsx'.",
    )
    code: str = Field(description="The complete code for the file.")


class GeneratedTests(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    test_file_name: str = Field(alias="testFileName", min_length=1)
    test_code: str = Field(alias="testCode", description="The complete code for the test file.")


class ChatReply(BaseModel):
    text: str
    sources: list[dict[str, Any]] = Field(default_factory=list)
