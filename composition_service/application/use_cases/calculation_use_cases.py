# composition_service/application/use_cases/calculation_use_cases.py

import hmac
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.repositories.composition_repository import (
    composition_repository,
)
from composition_service.application.dtos.composition_dto import (
    CalculationResultOutput,
    CompositionFieldUpdate,
)
from composition_service.domain.exceptions import UnauthorizedException, ValidationException
from composition_service.domain.models.composition import BelongingResult

logger = logging.getLogger(__name__)

_VALID_RESULTS = {r.value for r in BelongingResult}


class AsyncCalculationService:
    """
    Receives the classification computed by the external calculator.

    Checks, in order: shared secret, composition_id and result values,
    composition existence.
    Writing the same result twice leaves the same state.
    """

    def __init__(self, db_session: AsyncSession, api_key: str):
        self.db = db_session
        self.api_key = api_key

    def _check_api_key(self, api_key: Any) -> None:
        if not self.api_key:
            logger.error("CALCULATOR_API_KEY is empty; rejecting calculation callback")
            raise UnauthorizedException(message="Invalid API key")
        if not isinstance(api_key, str):
            api_key = ""
        if not hmac.compare_digest(api_key.encode("utf-8"), self.api_key.encode("utf-8")):
            logger.warning("Calculation callback with invalid API key")
            raise UnauthorizedException(message="Invalid API key")

    @staticmethod
    def _parse_composition_id(composition_id: Any) -> int:
        """Accept an int or a string of digits; bool is not an id."""
        if isinstance(composition_id, str) and composition_id.strip().isdecimal():
            return int(composition_id)
        if isinstance(composition_id, int) and not isinstance(composition_id, bool):
            return composition_id
        raise ValidationException(
            message="Invalid composition_id: expected an integer",
            details={"composition_id": composition_id},
        )

    async def receive_result(self, composition_id: Any, result: Any, api_key: Any) -> CalculationResultOutput:
        """
        Raises:
            UnauthorizedException: wrong shared secret
            ValidationException: composition_id is not an integer, or result
                is not "belongs" / "does not belong"
            ResourceNotFoundException: unknown composition id
        """
        self._check_api_key(api_key)

        composition_id = self._parse_composition_id(composition_id)
        if not isinstance(result, str) or result not in _VALID_RESULTS:
            raise ValidationException(
                message=f"Invalid result: expected one of {sorted(_VALID_RESULTS)}",
                details={"result": result},
            )

        try:
            await composition_repository.update_fields(
                self.db, composition_id, CompositionFieldUpdate(belonging=result)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Calculation result stored for composition {composition_id}: {result}")
        return CalculationResultOutput(success=True, composition_id=composition_id, result=result)
