# composition_service/application/use_cases/composition_use_cases.py

"""
Service for the composition workflow.

Draft assembly (items), forming, moderation (complete/reject), soft delete,
listing with visibility rules and the affinity score on the detail view.
Each public operation is one transaction: committed on success, rolled
back on any error so a refused operation leaves nothing behind.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.models import Composition
from composition_service.adapters.outbound.persistence.repositories.composition_repository import (
    composition_repository,
)
from composition_service.adapters.outbound.persistence.repositories.interval_repository import interval_repository
from composition_service.application.dtos.composition_dto import (
    CartOutput,
    CompositionDetailOutput,
    CompositionFieldUpdate,
    CompositionItemOutput,
)
from composition_service.application.dtos.interval_dto import AddToCompositionResponse
from composition_service.application.ports.outbound.calculation_port import ICalculationDispatcher
from composition_service.domain.exceptions import ResourceNotFoundException
from composition_service.domain.models.composition import CompositionStatus, ToneSample
from composition_service.domain.models.identity import Identity
from composition_service.domain.services.composition_workflow import (
    DEFAULT_REFERENCE_TONE,
    CompositionWorkflow,
    affinity_score,
)
from composition_service.shared.utils.datetime_utils import DateTimeUtil

logger = logging.getLogger(__name__)


class AsyncCompositionService:
    """Application service for composition workflow operations."""

    def __init__(
            self,
            db_session: AsyncSession,
            dispatcher: Optional[ICalculationDispatcher] = None,
            reference_tone: float = DEFAULT_REFERENCE_TONE,
    ):
        self.db = db_session
        self.dispatcher = dispatcher
        self.reference_tone = reference_tone

    # ────────────────────────────────
    # Helpers
    # ────────────────────────────────
    @asynccontextmanager
    async def _transaction(self):
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def _get_composition(self, composition_id: int) -> Composition:
        """Load a composition; Deleted ones are reported as missing."""
        composition = await composition_repository.get(self.db, composition_id)
        if composition is None or composition.status == CompositionStatus.DELETED.value:
            logger.warning(f"Composition not found: {composition_id}")
            raise ResourceNotFoundException(message="Composition not found", resource_id=composition_id)
        return composition

    async def _touch(self, composition_id: int) -> None:
        await composition_repository.update_fields(self.db, composition_id, CompositionFieldUpdate())

    # ────────────────────────────────
    # Items
    # ────────────────────────────────
    async def add_interval(self, identity: Identity, interval_id: int, amount: int = 1) -> AddToCompositionResponse:
        """
        Put an interval into the caller's draft, creating the draft on demand.
        An interval already in the draft gets its amount overwritten.

        Raises:
            ResourceNotFoundException: interval missing or deleted
        """
        async with self._transaction():
            interval = await interval_repository.get_active(self.db, interval_id)
            if interval is None:
                raise ResourceNotFoundException(message="Interval not found", resource_id=interval_id)

            draft = await composition_repository.get_or_create_draft(self.db, identity.subject_id)
            await composition_repository.upsert_item(self.db, draft.id, interval_id, amount)
            await self._touch(draft.id)
            composition_id = draft.id

        logger.info(f"Interval {interval_id} x{amount} added to composition {composition_id}")
        return AddToCompositionResponse(composition_id=composition_id, interval_id=interval_id, amount=amount)

    async def update_item_amount(self, identity: Identity, composition_id: int, interval_id: int,
                                 amount: int) -> None:
        """
        Raises:
            ResourceNotFoundException: composition or item missing
            PermissionDeniedException: caller is not the creator
            InvalidTransitionException: composition is not a Draft
        """
        async with self._transaction():
            composition = await self._get_composition(composition_id)
            CompositionWorkflow.ensure_creator(composition.creator_id, identity)
            CompositionWorkflow.ensure_editable(composition.status, "change item amount")
            await composition_repository.update_item_amount(self.db, composition_id, interval_id, amount)
            await self._touch(composition_id)

    async def remove_item(self, identity: Identity, composition_id: int, interval_id: int) -> None:
        async with self._transaction():
            composition = await self._get_composition(composition_id)
            CompositionWorkflow.ensure_creator(composition.creator_id, identity)
            CompositionWorkflow.ensure_editable(composition.status, "remove item")
            await composition_repository.delete_item(self.db, composition_id, interval_id)
            await self._touch(composition_id)
        logger.info(f"Interval {interval_id} removed from composition {composition_id}")

    # ────────────────────────────────
    # Reads
    # ────────────────────────────────
    async def get_cart(self, identity: Identity) -> CartOutput:
        draft = await composition_repository.get_draft(self.db, identity.subject_id)
        if draft is None:
            return CartOutput(composition_id=0, item_count=0)
        count = await composition_repository.count_items(self.db, draft.id)
        return CartOutput(composition_id=draft.id, item_count=count)

    async def list_compositions(
            self,
            identity: Identity,
            status: Optional[CompositionStatus] = None,
            date_from: Optional[datetime] = None,
            date_to: Optional[datetime] = None,
    ) -> List[Composition]:
        """Moderators see every creator; everyone else only their own."""
        return await composition_repository.list_visible(
            self.db,
            creator_id=CompositionWorkflow.visible_creator(identity),
            status=status,
            date_from=date_from,
            date_to=date_to,
        )

    async def get_composition(self, identity: Identity, composition_id: int) -> CompositionDetailOutput:
        """
        Detail with items, mean tone and affinity score.

        Raises:
            ResourceNotFoundException: missing or Deleted
            PermissionDeniedException: another creator's composition
        """
        composition = await self._get_composition(composition_id)
        CompositionWorkflow.ensure_can_view(composition.creator_id, identity)

        items = await composition_repository.list_items(self.db, composition_id)
        mean_tone, score = affinity_score(
            (ToneSample(tone=item.interval.tone, amount=item.amount) for item in items),
            self.reference_tone,
        )

        detail = CompositionDetailOutput.model_validate(composition)
        return detail.model_copy(update={
            "intervals": [
                CompositionItemOutput(
                    interval_id=item.interval_id,
                    title=item.interval.title,
                    tone=item.interval.tone,
                    photo_url=item.interval.photo_url,
                    amount=item.amount,
                )
                for item in items
            ],
            "mean_tone": round(mean_tone, 3),
            "affinity_score": round(score, 3),
        })

    # ────────────────────────────────
    # Transitions
    # ────────────────────────────────
    async def update_title(self, identity: Identity, composition_id: int, title: str) -> Composition:
        async with self._transaction():
            composition = await self._get_composition(composition_id)
            CompositionWorkflow.ensure_creator(composition.creator_id, identity)
            CompositionWorkflow.ensure_editable(composition.status, "update")
            await composition_repository.update_fields(
                self.db, composition_id, CompositionFieldUpdate(title=title),
                expected_status=[CompositionStatus.DRAFT],
            )
        return await composition_repository.get(self.db, composition_id)

    async def form(self, identity: Identity, composition_id: int) -> Composition:
        """
        Draft -> Formed. The draft must hold at least one interval.
        """
        async with self._transaction():
            composition = await self._get_composition(composition_id)
            CompositionWorkflow.ensure_creator(composition.creator_id, identity)
            CompositionWorkflow.ensure_transition(composition.status, CompositionStatus.FORMED, "form")
            CompositionWorkflow.ensure_has_items(
                await composition_repository.count_items(self.db, composition_id)
            )
            await composition_repository.update_fields(
                self.db, composition_id,
                CompositionFieldUpdate(status=CompositionStatus.FORMED, date_finish=None),
                expected_status=[CompositionStatus.DRAFT],
            )
        logger.info(f"Composition {composition_id} formed by user {identity.subject_id}")
        return await composition_repository.get(self.db, composition_id)

    async def complete(self, identity: Identity, composition_id: int) -> Composition:
        """
        Formed -> Completed, then ask the calculator for the belonging result.
        """
        CompositionWorkflow.ensure_moderator(identity)
        async with self._transaction():
            composition = await self._get_composition(composition_id)
            CompositionWorkflow.ensure_transition(composition.status, CompositionStatus.COMPLETED, "complete")
            await composition_repository.update_fields(
                self.db, composition_id,
                CompositionFieldUpdate(
                    status=CompositionStatus.COMPLETED,
                    moderator_id=identity.subject_id,
                    date_finish=DateTimeUtil.utcnow_naive(),
                    belonging=None,
                ),
                expected_status=[CompositionStatus.FORMED],
            )
        logger.info(f"Composition {composition_id} completed by moderator {identity.subject_id}")

        if self.dispatcher is not None:
            self.dispatcher.submit(composition_id)
        else:
            logger.warning(f"No calculation dispatcher configured; composition {composition_id} not sent")

        return await composition_repository.get(self.db, composition_id)

    async def reject(self, identity: Identity, composition_id: int) -> Composition:
        """Formed -> Rejected. `belonging` is left as it is."""
        CompositionWorkflow.ensure_moderator(identity)
        async with self._transaction():
            composition = await self._get_composition(composition_id)
            CompositionWorkflow.ensure_transition(composition.status, CompositionStatus.REJECTED, "reject")
            await composition_repository.update_fields(
                self.db, composition_id,
                CompositionFieldUpdate(
                    status=CompositionStatus.REJECTED,
                    moderator_id=identity.subject_id,
                    date_finish=DateTimeUtil.utcnow_naive(),
                ),
                expected_status=[CompositionStatus.FORMED],
            )
        logger.info(f"Composition {composition_id} rejected by moderator {identity.subject_id}")
        return await composition_repository.get(self.db, composition_id)

    async def delete(self, identity: Identity, composition_id: int) -> None:
        """Draft -> Deleted (soft); its items are removed."""
        async with self._transaction():
            composition = await self._get_composition(composition_id)
            CompositionWorkflow.ensure_creator(composition.creator_id, identity)
            CompositionWorkflow.ensure_transition(composition.status, CompositionStatus.DELETED, "delete")
            removed = await composition_repository.delete_items(self.db, composition_id)
            await composition_repository.update_fields(
                self.db, composition_id,
                CompositionFieldUpdate(status=CompositionStatus.DELETED),
                expected_status=[CompositionStatus.DRAFT],
            )
        logger.info(f"Composition {composition_id} deleted ({removed} item(s) removed)")
