"""Authenticated endpoints that assemble the caller's stored context."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ..context import (
    analyze_validation_session,
    generate_blueprint,
    generate_master_prompt,
    get_master_prompt_status,
    load_ranked_ideas,
)
from ..errors import TrueBlazerError
from ..llm import GatewayClient
from ..schemas import (
    AnalyzeValidationRequest,
    BlueprintResponse,
    IdeaLite,
    MasterPromptResponse,
    SortBy,
    ValidationSummaryResponse,
)
from ..store import RowStore


router = APIRouter(prefix="/me", tags=["workspace"])


def get_store(request: Request) -> RowStore:
    return request.app.state.store


def get_gateway(request: Request) -> GatewayClient | None:
    return request.app.state.gateway


def get_current_user(
    authorization: str | None = Header(default=None),
    store: RowStore = Depends(get_store),
) -> str:
    """Resolve the bearer token into a verified user id."""

    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    user_id = store.resolve_user(authorization[7:].strip())
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def _http_error(exc: TrueBlazerError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("/ideas/ranked", response_model=list[IdeaLite])
async def ranked_ideas(
    sort_by: SortBy = SortBy.OPPORTUNITY,
    user_id: str = Depends(get_current_user),
    store: RowStore = Depends(get_store),
) -> list[IdeaLite]:
    """Return the caller's ideas ranked with fit scores from their profile."""

    try:
        return await load_ranked_ideas(store, user_id, sort_by)
    except TrueBlazerError as exc:
        raise _http_error(exc) from exc


@router.get("/master-prompt", response_model=MasterPromptResponse)
async def fetch_master_prompt(
    user_id: str = Depends(get_current_user),
    store: RowStore = Depends(get_store),
) -> MasterPromptResponse:
    """Return the stored master prompt and whether it is stale."""

    try:
        result = await get_master_prompt_status(store, user_id)
    except TrueBlazerError as exc:
        raise _http_error(exc) from exc
    return MasterPromptResponse(**asdict(result))


@router.post("/master-prompt", response_model=MasterPromptResponse)
async def create_master_prompt(
    force: bool = False,
    user_id: str = Depends(get_current_user),
    store: RowStore = Depends(get_store),
    gateway: GatewayClient | None = Depends(get_gateway),
) -> MasterPromptResponse:
    """Generate (or reuse) the master prompt for the caller's chosen idea."""

    try:
        result = await generate_master_prompt(store, gateway, user_id, force=force)
    except TrueBlazerError as exc:
        raise _http_error(exc) from exc
    return MasterPromptResponse(**asdict(result))


@router.post("/blueprint", response_model=BlueprintResponse)
async def create_blueprint(
    force: bool = False,
    user_id: str = Depends(get_current_user),
    store: RowStore = Depends(get_store),
    gateway: GatewayClient | None = Depends(get_gateway),
) -> BlueprintResponse:
    try:
        result = await generate_blueprint(store, gateway, user_id, force=force)
    except TrueBlazerError as exc:
        raise _http_error(exc) from exc
    return BlueprintResponse(**asdict(result))


@router.post("/validation-sessions/{session_id}/analyze", response_model=ValidationSummaryResponse)
async def analyze_session(
    session_id: str,
    payload: AnalyzeValidationRequest,
    user_id: str = Depends(get_current_user),
    store: RowStore = Depends(get_store),
    gateway: GatewayClient | None = Depends(get_gateway),
) -> ValidationSummaryResponse:
    """Summarize a validation session and apply its FVS delta."""

    try:
        summary = await analyze_validation_session(store, gateway, user_id, session_id, payload.venture_id)
    except TrueBlazerError as exc:
        raise _http_error(exc) from exc
    return ValidationSummaryResponse.model_validate(summary)
