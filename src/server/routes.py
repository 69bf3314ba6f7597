"""API routes for the web server."""

import logging
from dataclasses import replace

from fastapi import APIRouter, HTTPException

from .app import get_engine
from .models import (
    GenerateRequest,
    NamedGenerateRequest,
    TemplateRequest,
    GenerateResponse,
    ValidationResponse,
    TokenModel,
    TokensResponse,
    TemplateListResponse,
    TableResponse,
    SampleResponse,
    RepetitionRangeModel,
)

from engine import SigilEngine
from template_parser import RepetitionRange


router = APIRouter()


def engine_for_seed(seed: str | None) -> SigilEngine:
    """The shared engine, or a fresh one over the same data when a seed is given."""
    engine = get_engine()
    if seed is None:
        return engine
    return SigilEngine(engine.lists, templates=engine.templates, config=replace(engine.config, seed=seed))


# ----------------------------------------------------------------------------
# Generation
# ----------------------------------------------------------------------------

@router.post("/api/generate", response_model=GenerateResponse)
async def generate(request: GenerateRequest):
    """Expand a template count times."""
    engine = engine_for_seed(request.seed)
    return GenerateResponse(results=engine.generate_many(request.template, request.count))


@router.get("/api/templates", response_model=TemplateListResponse)
async def list_templates():
    """List the named templates loaded from the data files."""
    return TemplateListResponse(names=get_engine().template_names())


@router.post("/api/templates/{name}/generate", response_model=GenerateResponse)
async def generate_named(name: str, request: NamedGenerateRequest):
    """Expand a named template count times."""
    engine = engine_for_seed(request.seed)
    if name not in engine.templates:
        raise HTTPException(status_code=404, detail=f"Template not found: {name}")
    return GenerateResponse(results=[engine.generate_template(name) for _ in range(request.count)])


# ----------------------------------------------------------------------------
# Inspection
# ----------------------------------------------------------------------------

@router.post("/api/validate", response_model=ValidationResponse)
async def validate(request: TemplateRequest):
    """Report structural problems without generating."""
    result = get_engine().validate_template(request.template)
    return ValidationResponse(valid=result.valid, errors=result.errors)


@router.post("/api/tokens", response_model=TokensResponse)
async def tokens(request: TemplateRequest):
    """List table references with their source spans."""
    found = []
    for token in get_engine().parse_tokens(request.template):
        repetition = token.repetition
        if isinstance(repetition, RepetitionRange):
            repetition = RepetitionRangeModel(min=repetition.min, max=repetition.max)
        found.append(TokenModel(
            path=token.path,
            modifiers=[m.value for m in token.modifiers],
            is_optional=token.is_optional,
            exclusions=list(token.exclusions),
            repetition=repetition,
            raw=token.raw,
            start=token.start,
            end=token.end,
        ))
    return TokensResponse(tokens=found)


@router.get("/api/tables/{path}/sample", response_model=SampleResponse)
async def sample_table(path: str):
    """Pick one entry from a table without evaluating it."""
    value = get_engine().resolve_selected(path)
    if value is None:
        raise HTTPException(status_code=404, detail=f"Table not found or empty: {path}")
    return SampleResponse(path=path, value=value)


@router.get("/api/tables/{path}", response_model=TableResponse)
async def get_table(path: str):
    """Return the raw stored value at a dotted path."""
    value = get_engine().resolve_raw(path)
    if value is None:
        logging.info(f"Table lookup missed: {path}")
        raise HTTPException(status_code=404, detail=f"Table not found: {path}")
    return TableResponse(path=path, value=value)
