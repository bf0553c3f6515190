# composition_service/application/dtos/user_dto.py

"""
Schemas for user data.

DTOs for registration, login, token exchange and profile management.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import ConfigDict, Field, field_serializer, field_validator

from composition_service.application.dtos.base_dto import CustomBaseModel
from composition_service.shared.utils.datetime_utils import DateTimeUtil
from composition_service.shared.utils.input_validation import InputValidator


def _check_login(v: str) -> str:
    is_valid, error_msg = InputValidator.validate_login(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


def _check_password(v: str) -> str:
    is_valid, error_msg = InputValidator.validate_password(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


class UserLogin(CustomBaseModel):
    """
    Schema for user login.
    """
    login: str = Field(..., min_length=1, description="User's login.")
    password: str = Field(..., min_length=1, description="User's password.")


class UserCreate(CustomBaseModel):
    """
    Schema for registering a new user.
    """
    login: str = Field(..., description="Unique login: 3-64 letters, digits, '.', '_' or '-'.")
    password: str = Field(..., description="Password with 6 to 72 characters.")
    is_moderator: bool = Field(False, description="Grants the moderator role.")

    @field_validator("login")
    def validate_login(cls, v):
        return _check_login(v)

    @field_validator("password")
    def validate_password(cls, v):
        return _check_password(v)


class UserUpdate(CustomBaseModel):
    """
    Schema for profile updates. Only the given fields change.
    """
    model_config = ConfigDict(extra="forbid")

    login: Optional[str] = Field(None, description="New login.")
    password: Optional[str] = Field(None, description="New password.")

    @field_validator("login")
    def validate_login(cls, v):
        return v if v is None else _check_login(v)

    @field_validator("password")
    def validate_password(cls, v):
        return v if v is None else _check_password(v)


class UserOutput(CustomBaseModel):
    """
    Schema for returning user data without the password hash.
    """
    id: int = Field(..., description="User's identifier.")
    login: str = Field(..., description="User's login.")
    is_moderator: bool = Field(..., description="Whether the user is a moderator.")
    created_at: datetime = Field(..., description="Creation date and time.")
    updated_at: Optional[datetime] = Field(None, description="Date and time of the last update.")

    @field_serializer("created_at", "updated_at")
    def serialize_dates(self, value: Optional[datetime]) -> Optional[str]:
        return DateTimeUtil.format(value)


class TokenData(CustomBaseModel):
    """
    Tokens returned by login and refresh.
    """
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_at: datetime
    user_id: int
    login: str
    is_moderator: bool


class RefreshTokenRequest(CustomBaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token received at login.")


class LogoutResponse(CustomBaseModel):
    message: str = "Successfully logged out"


class SessionOutput(CustomBaseModel):
    """Session record kept by the session store (empty when it is disabled)."""
    user_id: int
    session: Dict[str, str] = Field(default_factory=dict)
