# composition_service/application/dtos/interval_dto.py

from typing import Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from composition_service.application.dtos.base_dto import CustomBaseModel
from composition_service.shared.utils.input_validation import InputValidator


def _check_title(v: str) -> str:
    is_valid, error_msg = InputValidator.validate_title(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


def _check_text(v: str) -> str:
    is_valid, error_msg = InputValidator.validate_text(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


class IntervalCreate(CustomBaseModel):
    title: str = Field(..., description="Interval name, e.g. 'Perfect fifth'.")
    description: str = Field("", description="Free text description.")
    tone: float = Field(..., ge=0, le=999999999.9, description="Size of the interval in tones.")
    photo_url: Optional[str] = Field(None, max_length=512)

    @field_validator("title")
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator("description")
    def validate_description(cls, v):
        return _check_text(v)


class IntervalUpdate(CustomBaseModel):
    """Partial update; unknown fields are rejected."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    tone: Optional[float] = Field(None, ge=0, le=999999999.9)
    photo_url: Optional[str] = Field(None, max_length=512)

    @field_validator("title")
    def validate_title(cls, v):
        return v if v is None else _check_title(v)

    @field_validator("description")
    def validate_description(cls, v):
        return v if v is None else _check_text(v)

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided.")
        for field in ("title", "description", "tone"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null.")
        return self


class IntervalOutput(CustomBaseModel):
    id: int
    title: str
    description: str
    tone: float
    photo_url: Optional[str] = None


class AddToCompositionRequest(CustomBaseModel):
    interval_id: int = Field(..., ge=1)
    amount: int = Field(1, ge=1, description="How many times the interval appears in the composition.")


class AddToCompositionResponse(CustomBaseModel):
    composition_id: int
    interval_id: int
    amount: int
