# composition_service/adapters/outbound/persistence/repositories/interval_repository.py

from typing import Optional

from sqlalchemy import Select, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.models import Interval
from composition_service.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from composition_service.application.dtos.interval_dto import IntervalCreate, IntervalUpdate
from composition_service.domain.exceptions import DatabaseOperationException


class AsyncIntervalCRUD(AsyncCRUDBase[Interval, IntervalCreate, IntervalUpdate]):
    """Catalog repository. Deleted intervals are hidden from every read."""

    def list_query(
            self,
            title: Optional[str] = None,
            tone_min: Optional[float] = None,
            tone_max: Optional[float] = None,
    ) -> Select:
        """Filtered SELECT for pagination, ordered by id."""
        query = select(Interval).where(Interval.is_deleted.is_(False))
        if title:
            query = query.where(Interval.title.ilike(f"%{title}%"))
        if tone_min is not None:
            query = query.where(Interval.tone >= tone_min)
        if tone_max is not None:
            query = query.where(Interval.tone <= tone_max)
        return query.order_by(Interval.id)

    async def get_active(self, db: AsyncSession, id: int) -> Optional[Interval]:
        """Non-deleted interval by id; re-reads rows changed by soft_delete."""
        try:
            result = await db.execute(
                select(Interval)
                .where(Interval.id == id, Interval.is_deleted.is_(False))
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching Interval with ID {id}: {e}")
            raise DatabaseOperationException(message="Error fetching Interval", original_error=e)

    async def soft_delete(self, db: AsyncSession, id: int) -> bool:
        """Mark as deleted. Returns False when no active interval has this id."""
        try:
            result = await db.execute(
                update(Interval)
                .where(Interval.id == id, Interval.is_deleted.is_(False))
                .values(is_deleted=True)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            deleted = result.rowcount > 0
            if deleted:
                self.logger.info(f"Interval with ID {id} soft-deleted")
            return deleted
        except SQLAlchemyError as e:
            await db.rollback()
            self.logger.error(f"Error deleting Interval {id}: {e}")
            raise DatabaseOperationException(message="Error deleting Interval", original_error=e)


interval_repository = AsyncIntervalCRUD(Interval)
