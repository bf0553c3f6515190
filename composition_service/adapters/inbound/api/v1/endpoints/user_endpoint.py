# composition_service/adapters/inbound/api/v1/endpoints/user_endpoint.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from composition_service.adapters.inbound.api.deps import get_auth_service, get_current_identity
from composition_service.application.dtos.user_dto import (
    LogoutResponse,
    RefreshTokenRequest,
    SessionOutput,
    TokenData,
    UserCreate,
    UserLogin,
    UserOutput,
    UserUpdate,
)
from composition_service.application.use_cases.auth_use_cases import AsyncAuthService
from composition_service.domain.exceptions import (
    InvalidCredentialsException,
    InvalidTokenException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
    SessionStoreUnavailableException,
)
from composition_service.domain.models.identity import Identity
from composition_service.shared.utils.error_responses import auth_errors, unauthorized_error
from composition_service.shared.utils.success_responses import auth_success, login_success

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={404: {"description": "Not found"}}
)


@router.post(
    "/register",
    response_model=UserOutput,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Creates a user account. Login must be unique.",
    responses={**auth_success, **auth_errors}
)
async def register_user(
        user_input: UserCreate,
        service: AsyncAuthService = Depends(get_auth_service),
):
    try:
        return await service.register_user(user_input)
    except ResourceAlreadyExistsException as e:
        logger.warning(f"Duplicate registration attempt: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    "/login",
    response_model=TokenData,
    status_code=status.HTTP_200_OK,
    summary="Login user",
    description="Checks the credentials and returns an access token and a refresh token.",
    responses={**login_success, **auth_errors}
)
async def login_user(
        user_input: UserLogin,
        request: Request,
        service: AsyncAuthService = Depends(get_auth_service),
):
    client_ip = request.client.host if request.client else None
    try:
        return await service.login_user(user_input, ip_address=client_ip)
    except InvalidCredentialsException as e:
        logger.warning(f"Invalid login credentials: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e),
                            headers={"WWW-Authenticate": "Bearer"})


@router.post(
    "/refresh",
    response_model=TokenData,
    status_code=status.HTTP_200_OK,
    summary="Refresh authentication token",
    description="Issues a new token pair from the current refresh token. The old refresh token stops working.",
    responses={**login_success, **auth_errors}
)
async def refresh_token(
        refresh_data: RefreshTokenRequest,
        service: AsyncAuthService = Depends(get_auth_service),
):
    try:
        return await service.refresh_token(refresh_data.refresh_token)
    except (InvalidTokenException, InvalidCredentialsException) as e:
        logger.warning(f"Invalid refresh attempt: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e),
                            headers={"WWW-Authenticate": "Bearer"})


@router.post(
    "/logout",
    response_model=LogoutResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout user",
    description="Revokes the current access token and drops the session and refresh token.",
    responses=auth_errors
)
async def logout_user(
        request: Request,
        identity: Identity = Depends(get_current_identity),
        service: AsyncAuthService = Depends(get_auth_service),
):
    try:
        await service.logout(identity, request.state.token)
    except SessionStoreUnavailableException as e:
        logger.error(f"Logout failed, token not revoked: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to logout")
    return LogoutResponse()


@router.get(
    "/profile",
    response_model=UserOutput,
    summary="Current user profile",
    responses=unauthorized_error
)
async def get_profile(
        identity: Identity = Depends(get_current_identity),
        service: AsyncAuthService = Depends(get_auth_service),
):
    try:
        return await service.get_profile(identity)
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/profile",
    response_model=UserOutput,
    summary="Update profile",
    description="Changes login and/or password of the current user.",
    responses=auth_errors
)
async def update_profile(
        user_update: UserUpdate,
        identity: Identity = Depends(get_current_identity),
        service: AsyncAuthService = Depends(get_auth_service),
):
    try:
        return await service.update_profile(identity, user_update)
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ResourceAlreadyExistsException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "/session",
    response_model=SessionOutput,
    summary="Current session record",
    description="Session metadata stored at login. Empty when the session store is disabled.",
    responses=unauthorized_error
)
async def get_session_info(
        identity: Identity = Depends(get_current_identity),
        service: AsyncAuthService = Depends(get_auth_service),
):
    return SessionOutput(user_id=identity.subject_id, session=await service.get_session(identity))
