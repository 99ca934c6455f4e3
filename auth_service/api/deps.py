"""Request-scoped dependencies resolved from app.state (settings, signer, auth service)."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from auth_service.core.config import Settings
from auth_service.core.database import get_db
from auth_service.core.tokens import TokenSigner
from auth_service.services.auth import AuthService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_signer(request: Request) -> TokenSigner:
    return request.app.state.token_signer


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    signer: Annotated[TokenSigner, Depends(get_token_signer)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthService:
    return AuthService(db, signer, settings)
