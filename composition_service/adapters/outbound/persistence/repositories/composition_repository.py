# composition_service/adapters/outbound/persistence/repositories/composition_repository.py

"""
Async repository for compositions and their items.

Methods here never commit: the composition service owns the transaction
and commits once per workflow operation.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.models import Composition, CompositionInterval
from composition_service.adapters.outbound.persistence.repositories.base_repository import (
    AsyncCRUDBase,
    is_unique_violation,
)
from composition_service.application.dtos.composition_dto import CompositionFieldUpdate
from composition_service.domain.exceptions import (
    DatabaseOperationException,
    InvalidTransitionException,
    ResourceNotFoundException,
)
from composition_service.domain.models.composition import CompositionStatus, HIDDEN_FROM_LISTING
from composition_service.shared.utils.datetime_utils import DateTimeUtil


class AsyncCompositionCRUD(AsyncCRUDBase[Composition, CompositionFieldUpdate, CompositionFieldUpdate]):
    """
    Concrete repository for Composition and CompositionInterval.
    """

    # ────────────────────────────────
    # Reads
    # ────────────────────────────────
    async def get(self, db: AsyncSession, id: int) -> Optional[Composition]:
        """Fetch by id, always reloading state written by bulk UPDATEs."""
        try:
            result = await db.execute(
                select(Composition)
                .where(Composition.id == id)
                .execution_options(populate_existing=True)
            )
            return result.unique().scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching Composition with ID {id}: {e}")
            raise DatabaseOperationException(message="Error fetching Composition", original_error=e)

    async def get_draft(self, db: AsyncSession, creator_id: int) -> Optional[Composition]:
        try:
            result = await db.execute(
                select(Composition)
                .where(
                    Composition.creator_id == creator_id,
                    Composition.status == CompositionStatus.DRAFT.value,
                )
                .execution_options(populate_existing=True)
            )
            return result.unique().scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching draft of creator {creator_id}: {e}")
            raise DatabaseOperationException(message="Error fetching draft", original_error=e)

    async def list_visible(
            self,
            db: AsyncSession,
            *,
            creator_id: Optional[int] = None,
            status: Optional[CompositionStatus] = None,
            date_from: Optional[datetime] = None,
            date_to: Optional[datetime] = None,
    ) -> List[Composition]:
        """
        Compositions shown in listings: never Draft or Deleted.

        Args:
            creator_id: restrict to one creator (None = everyone)
            status: exact status filter
            date_from / date_to: inclusive bounds on date_create
        """
        try:
            query = select(Composition).where(
                Composition.status.notin_([s.value for s in HIDDEN_FROM_LISTING])
            )
            if creator_id is not None:
                query = query.where(Composition.creator_id == creator_id)
            if status is not None:
                query = query.where(Composition.status == CompositionStatus(status).value)
            if date_from is not None:
                query = query.where(Composition.date_create >= DateTimeUtil.to_naive_utc(date_from))
            if date_to is not None:
                query = query.where(Composition.date_create <= DateTimeUtil.to_naive_utc(date_to))

            result = await db.execute(query.order_by(Composition.id))
            return list(result.unique().scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing Compositions: {e}")
            raise DatabaseOperationException(message="Error listing Compositions", original_error=e)

    # ────────────────────────────────
    # Draft creation
    # ────────────────────────────────
    async def get_or_create_draft(self, db: AsyncSession, creator_id: int) -> Composition:
        """
        Return the creator's draft, creating it when absent.

        The insert runs inside a SAVEPOINT; if a concurrent request created
        the draft first, the unique index rejects ours and the winner is read back.
        """
        draft = await self.get_draft(db, creator_id)
        if draft is not None:
            return draft

        now = DateTimeUtil.utcnow_naive()
        try:
            async with db.begin_nested():
                draft = Composition(
                    creator_id=creator_id,
                    status=CompositionStatus.DRAFT.value,
                    date_create=now,
                    date_update=now,
                )
                db.add(draft)
                await db.flush()
            self.logger.info(f"Draft composition {draft.id} created for creator {creator_id}")
            return draft
        except IntegrityError as e:
            if not is_unique_violation(e):
                self.logger.error(f"Integrity error creating draft: {e}")
                raise DatabaseOperationException(message="Error creating draft", original_error=e)
            self.logger.info(f"Concurrent draft creation for creator {creator_id}, reusing existing draft")
            winner = await self.get_draft(db, creator_id)
            if winner is None:
                raise DatabaseOperationException(message="Draft vanished after conflict", original_error=e)
            return winner
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating draft for creator {creator_id}: {e}")
            raise DatabaseOperationException(message="Error creating draft", original_error=e)

    # ────────────────────────────────
    # Field updates
    # ────────────────────────────────
    async def update_fields(
            self,
            db: AsyncSession,
            composition_id: int,
            fields: CompositionFieldUpdate,
            *,
            expected_status: Optional[Iterable[CompositionStatus]] = None,
    ) -> None:
        """
        Single atomic UPDATE of the given fields; `date_update` is always set.

        When `expected_status` is given the row only changes if its status is
        still one of them, so two concurrent transitions cannot both win.

        Raises:
            ResourceNotFoundException: no row with this id
            InvalidTransitionException: row exists but its status moved on
        """
        values = fields.to_values()
        values["date_update"] = DateTimeUtil.utcnow_naive()

        stmt = update(Composition).where(Composition.id == composition_id)
        allowed = None
        if expected_status is not None:
            allowed = [CompositionStatus(s).value for s in expected_status]
            stmt = stmt.where(Composition.status.in_(allowed))

        try:
            result = await db.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating Composition {composition_id}: {e}")
            raise DatabaseOperationException(message="Error updating Composition", original_error=e)

        if result.rowcount == 0:
            if allowed is not None and await self.exists(db, id=composition_id):
                raise InvalidTransitionException(
                    message="Composition status changed concurrently.",
                    operation="update",
                )
            raise ResourceNotFoundException(
                message=f"Composition with ID {composition_id} not found", resource_id=composition_id
            )
        self.logger.info(f"Composition {composition_id} updated: {sorted(values)}")

    # ────────────────────────────────
    # Items
    # ────────────────────────────────
    async def get_item(self, db: AsyncSession, composition_id: int, interval_id: int) -> Optional[CompositionInterval]:
        try:
            return await db.get(CompositionInterval, (composition_id, interval_id), populate_existing=True)
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching item ({composition_id}, {interval_id}): {e}")
            raise DatabaseOperationException(message="Error fetching composition item", original_error=e)

    async def upsert_item(self, db: AsyncSession, composition_id: int, interval_id: int,
                          amount: int) -> CompositionInterval:
        """Insert the item or overwrite its amount."""
        try:
            item = await self.get_item(db, composition_id, interval_id)
            if item is None:
                item = CompositionInterval(
                    composition_id=composition_id, interval_id=interval_id, amount=amount
                )
                db.add(item)
            else:
                item.amount = amount
            await db.flush()
            return item
        except SQLAlchemyError as e:
            self.logger.error(f"Error saving item ({composition_id}, {interval_id}): {e}")
            raise DatabaseOperationException(message="Error saving composition item", original_error=e)

    async def update_item_amount(self, db: AsyncSession, composition_id: int, interval_id: int,
                                 amount: int) -> None:
        try:
            result = await db.execute(
                update(CompositionInterval)
                .where(
                    CompositionInterval.composition_id == composition_id,
                    CompositionInterval.interval_id == interval_id,
                )
                .values(amount=amount)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating item ({composition_id}, {interval_id}): {e}")
            raise DatabaseOperationException(message="Error updating composition item", original_error=e)

        if result.rowcount == 0:
            raise ResourceNotFoundException(
                message=f"Interval {interval_id} is not in composition {composition_id}",
                resource_id=interval_id,
            )

    async def delete_item(self, db: AsyncSession, composition_id: int, interval_id: int) -> None:
        try:
            result = await db.execute(
                delete(CompositionInterval)
                .where(
                    CompositionInterval.composition_id == composition_id,
                    CompositionInterval.interval_id == interval_id,
                )
                .execution_options(synchronize_session="evaluate")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting item ({composition_id}, {interval_id}): {e}")
            raise DatabaseOperationException(message="Error deleting composition item", original_error=e)

        if result.rowcount == 0:
            raise ResourceNotFoundException(
                message=f"Interval {interval_id} is not in composition {composition_id}",
                resource_id=interval_id,
            )

    async def delete_items(self, db: AsyncSession, composition_id: int) -> int:
        try:
            result = await db.execute(
                delete(CompositionInterval)
                .where(CompositionInterval.composition_id == composition_id)
                .execution_options(synchronize_session="evaluate")
            )
            return result.rowcount
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting items of composition {composition_id}: {e}")
            raise DatabaseOperationException(message="Error deleting composition items", original_error=e)

    async def count_items(self, db: AsyncSession, composition_id: int) -> int:
        try:
            result = await db.execute(
                select(func.count())
                .select_from(CompositionInterval)
                .where(CompositionInterval.composition_id == composition_id)
            )
            return result.scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting items of composition {composition_id}: {e}")
            raise DatabaseOperationException(message="Error counting composition items", original_error=e)

    async def list_items(self, db: AsyncSession, composition_id: int) -> List[CompositionInterval]:
        try:
            result = await db.execute(
                select(CompositionInterval)
                .where(CompositionInterval.composition_id == composition_id)
                .order_by(CompositionInterval.interval_id)
                .execution_options(populate_existing=True)
            )
            return list(result.unique().scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing items of composition {composition_id}: {e}")
            raise DatabaseOperationException(message="Error listing composition items", original_error=e)


composition_repository = AsyncCompositionCRUD(Composition)
