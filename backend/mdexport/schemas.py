from __future__ import annotations

from pydantic import BaseModel, Field


class ProcessInputRequest(BaseModel):
    input_paths: list[str] = Field(default_factory=list)


class ProcessedInput(BaseModel):
    markdown_files: list[str]
    image_files: list[str] = Field(default_factory=list)
    root: str


class ConvertResult(BaseModel):
    output_path: str


class HealthResponse(BaseModel):
    ok: bool = True

