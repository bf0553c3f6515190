# composition_service/application/use_cases/interval_use_cases.py

"""
Service for the interval catalog.
"""

import logging
from typing import Any, Optional

from fastapi_pagination import Params
from fastapi_pagination.ext.sqlalchemy import apaginate
from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.models import Interval
from composition_service.adapters.outbound.persistence.repositories.interval_repository import interval_repository
from composition_service.application.dtos.interval_dto import IntervalCreate, IntervalOutput, IntervalUpdate
from composition_service.domain.exceptions import (
    DatabaseOperationException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class AsyncIntervalService:
    """Service layer for listing and maintaining catalog intervals."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def list_intervals(
            self,
            params: Params,
            title: Optional[str] = None,
            tone_min: Optional[float] = None,
            tone_max: Optional[float] = None,
    ) -> Any:
        """
        Paginated list of non-deleted intervals.

        Raises:
            ValidationException: tone_min greater than tone_max
        """
        if tone_min is not None and tone_max is not None and tone_min > tone_max:
            raise ValidationException(message="tone_min must not be greater than tone_max")

        stmt = interval_repository.list_query(title=title, tone_min=tone_min, tone_max=tone_max)
        try:
            return await apaginate(
                self.db,
                stmt,
                params,
                transformer=lambda items: [IntervalOutput.model_validate(item) for item in items],
            )
        except Exception as e:
            logger.exception(f"Error listing intervals: {str(e)}")
            raise DatabaseOperationException(message="Error listing intervals", original_error=e)

    async def get_interval(self, interval_id: int) -> Interval:
        interval = await interval_repository.get_active(self.db, interval_id)
        if not interval:
            logger.warning(f"Interval not found: {interval_id}")
            raise ResourceNotFoundException(message="Interval not found", resource_id=interval_id)
        return interval

    async def create_interval(self, interval_input: IntervalCreate) -> Interval:
        interval = await interval_repository.create(self.db, obj_in=interval_input)
        logger.info(f"Interval created: {interval.id} ({interval.title})")
        return interval

    async def update_interval(self, interval_id: int, interval_update: IntervalUpdate) -> Interval:
        interval = await self.get_interval(interval_id)
        return await interval_repository.update(self.db, db_obj=interval, obj_in=interval_update)

    async def delete_interval(self, interval_id: int) -> None:
        if not await interval_repository.soft_delete(self.db, interval_id):
            raise ResourceNotFoundException(message="Interval not found", resource_id=interval_id)
