"""Pydantic models for the web server API."""

from typing import Any
from pydantic import BaseModel, Field


# API Request Models

class GenerateRequest(BaseModel):
    """Request to expand a template."""
    template: str = Field(..., max_length=20000)
    count: int = Field(1, ge=1, le=1000)
    seed: str | None = Field(None, max_length=200)


class NamedGenerateRequest(BaseModel):
    """Request to expand a named template."""
    count: int = Field(1, ge=1, le=1000)
    seed: str | None = Field(None, max_length=200)


class TemplateRequest(BaseModel):
    """A template to inspect without generating."""
    template: str = Field(..., max_length=20000)


# API Response Models

class GenerateResponse(BaseModel):
    """Generated results, in request order."""
    results: list[str]


class ValidationResponse(BaseModel):
    """Structural problems found in a template."""
    valid: bool
    errors: list[str] = Field(default_factory=list)


class RepetitionRangeModel(BaseModel):
    min: int
    max: int


class TokenModel(BaseModel):
    """A table reference and its span in the template source."""
    path: str
    modifiers: list[str]
    is_optional: bool
    exclusions: list[str]
    repetition: int | RepetitionRangeModel
    raw: str
    start: int
    end: int


class TokensResponse(BaseModel):
    tokens: list[TokenModel]


class TemplateListResponse(BaseModel):
    names: list[str]


class TableResponse(BaseModel):
    """Raw stored value at a table path."""
    path: str
    value: Any


class SampleResponse(BaseModel):
    """One entry picked from a table without evaluation."""
    path: str
    value: str
