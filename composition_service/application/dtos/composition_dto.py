# composition_service/application/dtos/composition_dto.py

"""
Schemas for compositions, their items and the calculator callback.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_serializer, field_validator

from composition_service.application.dtos.base_dto import CustomBaseModel
from composition_service.domain.models.composition import BelongingResult, CompositionStatus
from composition_service.shared.utils.datetime_utils import DateTimeUtil
from composition_service.shared.utils.input_validation import InputValidator


class CompositionFieldUpdate(CustomBaseModel):
    """
    Closed set of mutable composition fields.

    Only the fields explicitly set are written; anything else is rejected.
    `creator_id` and `date_create` are intentionally absent.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    belonging: Optional[BelongingResult] = None
    status: Optional[CompositionStatus] = None
    moderator_id: Optional[int] = None
    date_finish: Optional[datetime] = None

    def to_values(self) -> dict:
        values = {}
        for field in self.model_fields_set:
            value = getattr(self, field)
            if hasattr(value, "value"):
                value = value.value
            if isinstance(value, datetime):
                value = DateTimeUtil.to_naive_utc(value)
            values[field] = value
        return values


class CompositionTitleUpdate(CustomBaseModel):
    """Body of PUT /compositions/{id}."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., description="New title of the draft.")

    @field_validator("title")
    def validate_title(cls, v):
        is_valid, error_msg = InputValidator.validate_title(v)
        if not is_valid:
            raise ValueError(error_msg)
        return v


class CompositionItemOutput(CustomBaseModel):
    interval_id: int
    title: str
    tone: float
    photo_url: Optional[str] = None
    amount: int


class CompositionOutput(CustomBaseModel):
    id: int
    status: CompositionStatus
    title: Optional[str] = None
    creator_id: int
    moderator_id: Optional[int] = None
    belonging: Optional[str] = None
    date_create: datetime
    date_update: datetime
    date_finish: Optional[datetime] = None

    @field_serializer("date_create", "date_update", "date_finish")
    def serialize_dates(self, value: Optional[datetime]) -> Optional[str]:
        return DateTimeUtil.format(value)


class CompositionDetailOutput(CompositionOutput):
    intervals: List[CompositionItemOutput] = Field(default_factory=list)
    mean_tone: float = 0.0
    affinity_score: float = 0.0


class CartOutput(CustomBaseModel):
    composition_id: int = 0
    item_count: int = 0


class ItemAmountUpdate(CustomBaseModel):
    composition_id: int = Field(..., ge=1)
    interval_id: int = Field(..., ge=1)
    amount: int = Field(..., ge=1)


class ItemRemove(CustomBaseModel):
    composition_id: int = Field(..., ge=1)
    interval_id: int = Field(..., ge=1)


class CalculationResultInput(CustomBaseModel):
    """
    Callback body sent by the external calculator.

    Fields are untyped so that the shared api_key is checked first: a wrong
    key is a 401 even when the rest of the body is malformed. The service
    validates composition_id and result afterwards.
    """
    composition_id: Any = Field(None, description="Composition id (integer).")
    result: Any = Field(None, description='"belongs" or "does not belong".')
    api_key: Any = Field(None, description="Shared calculator secret.")


class CalculationResultOutput(CustomBaseModel):
    success: bool = True
    composition_id: int
    result: str
