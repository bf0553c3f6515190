# composition_service/adapters/inbound/api/v1/endpoints/composition_endpoint.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from composition_service.adapters.inbound.api.deps import (
    get_calculation_service,
    get_composition_service,
    get_current_identity,
    get_current_moderator,
)
from composition_service.application.dtos.composition_dto import (
    CalculationResultInput,
    CalculationResultOutput,
    CartOutput,
    CompositionDetailOutput,
    CompositionOutput,
    CompositionTitleUpdate,
)
from composition_service.application.use_cases.calculation_use_cases import AsyncCalculationService
from composition_service.application.use_cases.composition_use_cases import AsyncCompositionService
from composition_service.domain.models.composition import CompositionStatus
from composition_service.domain.models.identity import Identity
from composition_service.shared.utils.error_responses import calculation_errors, composition_errors
from composition_service.shared.utils.success_responses import composition_success

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/compositions",
    tags=["Compositions"],
    responses={404: {"description": "Not found"}}
)


# Rotas fixas antes de /{composition_id}

@router.get(
    "/comp-cart",
    response_model=CartOutput,
    summary="Draft cart",
    description="Id of the caller's draft and its number of intervals; zeros when there is no draft.",
    responses=composition_errors
)
async def get_cart(
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.get_cart(identity)


@router.post(
    "/calculation-result",
    response_model=CalculationResultOutput,
    summary="Calculator callback",
    description="Called by the external calculator with the shared API key.",
    responses=calculation_errors
)
async def receive_calculation_result(
        body: CalculationResultInput,
        service: AsyncCalculationService = Depends(get_calculation_service),
):
    return await service.receive_result(body.composition_id, body.result, body.api_key)


@router.get(
    "",
    response_model=List[CompositionOutput],
    summary="List compositions",
    description="Drafts and deleted compositions are never listed. Non-moderators only see their own.",
    responses=composition_errors
)
async def list_compositions(
        status_filter: Optional[CompositionStatus] = Query(None, alias="status"),
        date_from: Optional[datetime] = Query(None, description="Created at or after (ISO 8601)"),
        date_to: Optional[datetime] = Query(None, description="Created at or before (ISO 8601)"),
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.list_compositions(identity, status=status_filter, date_from=date_from, date_to=date_to)


@router.get(
    "/{composition_id}",
    response_model=CompositionDetailOutput,
    summary="Composition detail",
    description="Composition with its intervals, mean tone and affinity score.",
    responses=composition_errors
)
async def get_composition(
        composition_id: int,
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.get_composition(identity, composition_id)


@router.put(
    "/{composition_id}",
    response_model=CompositionOutput,
    summary="Update draft title",
    responses={**composition_success, **composition_errors}
)
async def update_composition(
        composition_id: int,
        body: CompositionTitleUpdate,
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.update_title(identity, composition_id, body.title)


@router.put(
    "/{composition_id}/form",
    response_model=CompositionOutput,
    summary="Form composition",
    description="Draft -> Formed. Creator only; the draft must contain at least one interval.",
    responses={**composition_success, **composition_errors}
)
async def form_composition(
        composition_id: int,
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.form(identity, composition_id)


@router.put(
    "/{composition_id}/complete",
    response_model=CompositionOutput,
    summary="Complete composition (moderator)",
    description="Formed -> Completed. The external calculator is notified in the background.",
    responses={**composition_success, **composition_errors}
)
async def complete_composition(
        composition_id: int,
        moderator: Identity = Depends(get_current_moderator),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.complete(moderator, composition_id)


@router.put(
    "/{composition_id}/reject",
    response_model=CompositionOutput,
    summary="Reject composition (moderator)",
    responses={**composition_success, **composition_errors}
)
async def reject_composition(
        composition_id: int,
        moderator: Identity = Depends(get_current_moderator),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    return await service.reject(moderator, composition_id)


@router.delete(
    "/{composition_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete draft",
    description="Soft delete of a Draft; its intervals are removed.",
    responses=composition_errors
)
async def delete_composition(
        composition_id: int,
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    await service.delete(identity, composition_id)
    return {"message": "Composition deleted successfully"}
