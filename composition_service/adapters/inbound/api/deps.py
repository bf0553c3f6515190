# composition_service/adapters/inbound/api/deps.py

"""
Dependencies for injection into API endpoints.

Authentication (AuthGate), role checks, database sessions and the
application services built from the components stored on app.state.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.configuration.config import Settings
from composition_service.adapters.outbound.persistence.database import get_db
from composition_service.adapters.outbound.security.token_codec import TokenCodec
from composition_service.application.ports.outbound.calculation_port import ICalculationDispatcher
from composition_service.application.ports.outbound.session_store_port import ISessionStore
from composition_service.application.use_cases.auth_gate import AuthGate
from composition_service.application.use_cases.auth_use_cases import AsyncAuthService
from composition_service.application.use_cases.calculation_use_cases import AsyncCalculationService
from composition_service.application.use_cases.composition_use_cases import AsyncCompositionService
from composition_service.application.use_cases.interval_use_cases import AsyncIntervalService
from composition_service.domain.exceptions import PermissionDeniedException, UnauthorizedException
from composition_service.domain.models.identity import Identity

logger = logging.getLogger(__name__)

# Só para documentar o esquema Bearer no OpenAPI; o header é lido pelo AuthGate
bearer_scheme = HTTPBearer(auto_error=False)

########################################################################
# Database Session Management
########################################################################

get_session = get_db


########################################################################
# Application components (built once in create_app)
########################################################################


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_session_store(request: Request) -> ISessionStore:
    return request.app.state.session_store


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_dispatcher(request: Request) -> ICalculationDispatcher:
    return request.app.state.calculation_dispatcher


########################################################################
# Authentication
########################################################################


async def get_current_identity(
        request: Request,
        _: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
        gate: AuthGate = Depends(get_auth_gate),
) -> Identity:
    """
    Authenticate the request and attach the identity to request.state.

    Raises:
        HTTPException 401: missing, malformed, revoked, expired or invalid token
    """
    try:
        identity, token = await gate.authenticate(request.headers.get("Authorization"))
    except UnauthorizedException as e:
        logger.warning(f"Unauthorized request to {request.url.path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.identity = identity
    request.state.token = token
    return identity


async def get_current_moderator(identity: Identity = Depends(get_current_identity)) -> Identity:
    """
    Raises:
        HTTPException 403: authenticated user is not a moderator
    """
    try:
        return AuthGate.require_moderator(identity)
    except PermissionDeniedException as e:
        logger.warning(f"Non-moderator user {identity.subject_id} tried a moderator action")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


async def get_optional_identity(
        request: Request,
        _: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
        gate: AuthGate = Depends(get_auth_gate),
) -> Optional[Identity]:
    """Identity when a valid token is present, None otherwise. Never fails."""
    identity = await gate.authenticate_optional(request.headers.get("Authorization"))
    request.state.identity = identity
    return identity


########################################################################
# Services
########################################################################


def get_auth_service(
        db: AsyncSession = Depends(get_session),
        token_codec: TokenCodec = Depends(get_token_codec),
        session_store: ISessionStore = Depends(get_session_store),
) -> AsyncAuthService:
    return AsyncAuthService(db, token_codec, session_store)


def get_interval_service(db: AsyncSession = Depends(get_session)) -> AsyncIntervalService:
    return AsyncIntervalService(db)


def get_composition_service(
        db: AsyncSession = Depends(get_session),
        dispatcher: ICalculationDispatcher = Depends(get_dispatcher),
        settings: Settings = Depends(get_settings_dep),
) -> AsyncCompositionService:
    return AsyncCompositionService(db, dispatcher, reference_tone=settings.AFFINITY_REFERENCE_TONE)


def get_calculation_service(
        db: AsyncSession = Depends(get_session),
        settings: Settings = Depends(get_settings_dep),
) -> AsyncCalculationService:
    return AsyncCalculationService(db, settings.CALCULATOR_API_KEY.get_secret_value())
