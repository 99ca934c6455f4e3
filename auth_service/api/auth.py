"""Auth endpoints (register, login, self, refresh, logout) and the access token dependency."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Cookie, Depends, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth_service.api.cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    clear_auth_cookies,
    set_auth_cookies,
)
from auth_service.api.deps import get_app_settings, get_auth_service, get_token_signer
from auth_service.core.config import Settings
from auth_service.core.errors import NotAuthenticatedError, RequestValidationFailed
from auth_service.core.tokens import TokenError, TokenSigner
from auth_service.schemas.auth import (
    AccessClaims,
    LoginRequest,
    RefreshClaims,
    RegisterRequest,
    SelfResponse,
    UserIdResponse,
)
from auth_service.services.auth import AuthService
from auth_service.validation import validate_body

logger = logging.getLogger(__name__)
router = APIRouter()
bearer = HTTPBearer(auto_error=False)


def get_access_claims(
    signer: Annotated[TokenSigner, Depends(get_token_signer)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
    access_token: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
) -> AccessClaims:
    """Dependency: require a valid access token (Bearer header, else accessToken cookie). 401 otherwise."""
    token = credentials.credentials if credentials is not None else access_token
    if not token:
        raise NotAuthenticatedError()
    try:
        return signer.verify_access(token)
    except TokenError as e:
        logger.info("Access token rejected", extra={"reason": e.reason})
        raise NotAuthenticatedError("Invalid or expired token") from e


def get_refresh_claims(
    signer: Annotated[TokenSigner, Depends(get_token_signer)],
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> RefreshClaims:
    """Dependency: require a validly signed refreshToken cookie. 401 otherwise."""
    if not refresh_token:
        raise NotAuthenticatedError()
    try:
        return signer.verify_refresh(refresh_token)
    except TokenError as e:
        logger.info("Refresh token rejected", extra={"reason": e.reason})
        raise NotAuthenticatedError("Invalid or expired token") from e


def get_optional_refresh_claims(
    signer: Annotated[TokenSigner, Depends(get_token_signer)],
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> RefreshClaims | None:
    """Dependency: the refreshToken cookie's claims, or None when it is missing or invalid."""
    try:
        return get_refresh_claims(signer, refresh_token)
    except NotAuthenticatedError:
        return None


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserIdResponse)
def register(
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    payload: Annotated[Any, Body()] = None,
) -> UserIdResponse:
    """Create a customer account and start a session (sets accessToken and refreshToken cookies)."""
    result = validate_body(RegisterRequest, payload)
    if not result.ok:
        raise RequestValidationFailed(result.errors)

    user, tokens = service.register(result.value)
    set_auth_cookies(response, tokens, settings)
    return UserIdResponse(id=user.id)


@router.post("/login", response_model=UserIdResponse)
def login(
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    payload: Annotated[Any, Body()] = None,
) -> UserIdResponse:
    """Authenticate with email and password and start a session."""
    result = validate_body(LoginRequest, payload)
    if not result.ok:
        raise RequestValidationFailed(result.errors)

    user, tokens = service.login(result.value)
    set_auth_cookies(response, tokens, settings)
    return UserIdResponse(id=user.id)


@router.get("/self", response_model=SelfResponse)
def read_self(
    claims: Annotated[AccessClaims, Depends(get_access_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> SelfResponse:
    """Return the authenticated user (password omitted)."""
    user = service.get_self(claims)
    return SelfResponse.model_validate(user)


@router.post("/refresh", response_model=UserIdResponse)
def refresh(
    response: Response,
    claims: Annotated[RefreshClaims, Depends(get_refresh_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserIdResponse:
    """Rotate the refresh token: the presented one is invalidated and a new pair is set."""
    user, tokens = service.refresh(claims)
    set_auth_cookies(response, tokens, settings)
    return UserIdResponse(id=user.id)


@router.post("/logout")
def logout(
    response: Response,
    claims: Annotated[RefreshClaims | None, Depends(get_optional_refresh_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict[str, Any]:
    """
    Revoke the current refresh token and clear both cookies.

    A missing, expired or forged cookie has nothing to revoke; the cookies are
    still cleared.
    """
    if claims is not None:
        service.logout(claims)
    clear_auth_cookies(response, settings)
    return {}
