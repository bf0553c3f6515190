# composition_service/adapters/inbound/api/v1/endpoints/interval_endpoint.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi_pagination import Page, Params

from composition_service.adapters.inbound.api.deps import (
    get_composition_service,
    get_current_identity,
    get_current_moderator,
    get_interval_service,
    get_optional_identity,
)
from composition_service.application.dtos.interval_dto import (
    AddToCompositionRequest,
    AddToCompositionResponse,
    IntervalCreate,
    IntervalOutput,
    IntervalUpdate,
)
from composition_service.application.use_cases.composition_use_cases import AsyncCompositionService
from composition_service.application.use_cases.interval_use_cases import AsyncIntervalService
from composition_service.domain.models.identity import Identity
from composition_service.shared.utils.error_responses import interval_errors, unauthorized_error
from composition_service.shared.utils.pagination import pagination_params

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/intervals",
    tags=["Intervals"],
    responses={404: {"description": "Not found"}}
)


@router.get(
    "",
    response_model=Page[IntervalOutput],
    summary="List intervals",
    description="Paginated catalog (at most 8 per page), filterable by title and tone range.",
)
async def list_intervals(
        title: Optional[str] = Query(None, max_length=255, description="Case-insensitive substring of the title"),
        tone_min: Optional[float] = Query(None, ge=0),
        tone_max: Optional[float] = Query(None, ge=0),
        params: Params = Depends(pagination_params),
        identity: Optional[Identity] = Depends(get_optional_identity),
        service: AsyncIntervalService = Depends(get_interval_service),
):
    if identity is not None:
        logger.debug(f"Interval listing for user {identity.subject_id}")
    return await service.list_intervals(params, title=title, tone_min=tone_min, tone_max=tone_max)


@router.get(
    "/{interval_id}",
    response_model=IntervalOutput,
    summary="Interval detail",
    responses=interval_errors
)
async def get_interval(
        interval_id: int,
        service: AsyncIntervalService = Depends(get_interval_service),
):
    return await service.get_interval(interval_id)


@router.post(
    "",
    response_model=IntervalOutput,
    status_code=status.HTTP_201_CREATED,
    summary="Create interval (moderator)",
    responses=unauthorized_error
)
async def create_interval(
        interval_input: IntervalCreate,
        _: Identity = Depends(get_current_moderator),
        service: AsyncIntervalService = Depends(get_interval_service),
):
    return await service.create_interval(interval_input)


@router.put(
    "/{interval_id}",
    response_model=IntervalOutput,
    summary="Update interval (moderator)",
    description="Accepts only title, description, tone and photo_url.",
    responses={**unauthorized_error, **interval_errors}
)
async def update_interval(
        interval_id: int,
        interval_update: IntervalUpdate,
        _: Identity = Depends(get_current_moderator),
        service: AsyncIntervalService = Depends(get_interval_service),
):
    return await service.update_interval(interval_id, interval_update)


@router.delete(
    "/{interval_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete interval (moderator)",
    description="Soft delete: the interval disappears from the catalog but stays in existing compositions.",
    responses={**unauthorized_error, **interval_errors}
)
async def delete_interval(
        interval_id: int,
        _: Identity = Depends(get_current_moderator),
        service: AsyncIntervalService = Depends(get_interval_service),
):
    await service.delete_interval(interval_id)
    return {"message": "Interval deleted successfully"}


@router.post(
    "/add-to-composition",
    response_model=AddToCompositionResponse,
    status_code=status.HTTP_200_OK,
    summary="Add interval to draft",
    description="Adds the interval to the caller's draft composition, creating the draft if needed.",
    responses={**unauthorized_error, **interval_errors}
)
async def add_to_composition(
        body: AddToCompositionRequest,
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.add_interval(identity, body.interval_id, body.amount)
