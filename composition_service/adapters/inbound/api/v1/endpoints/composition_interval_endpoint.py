# composition_service/adapters/inbound/api/v1/endpoints/composition_interval_endpoint.py

from fastapi import APIRouter, Depends

from composition_service.adapters.inbound.api.deps import get_composition_service, get_current_identity
from composition_service.application.dtos.composition_dto import ItemAmountUpdate, ItemRemove
from composition_service.application.use_cases.composition_use_cases import AsyncCompositionService
from composition_service.domain.models.identity import Identity
from composition_service.shared.utils.error_responses import composition_errors

router = APIRouter(
    prefix="/composition-intervals",
    tags=["Composition intervals"],
    responses={404: {"description": "Not found"}}
)


@router.put(
    "",
    summary="Change interval amount",
    description="Sets the amount of an interval in a draft owned by the caller.",
    responses=composition_errors
)
async def update_item_amount(
        body: ItemAmountUpdate,
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    await service.update_item_amount(identity, body.composition_id, body.interval_id, body.amount)
    return {"message": "Interval amount updated successfully"}


@router.delete(
    "",
    summary="Remove interval from draft",
    responses=composition_errors
)
async def remove_item(
        body: ItemRemove,
        identity: Identity = Depends(get_current_identity),
        service: AsyncCompositionService = Depends(get_composition_service),
):
    await service.remove_item(identity, body.composition_id, body.interval_id)
    return {"message": "Interval removed from composition"}
