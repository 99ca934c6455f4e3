"""
Auth orchestration: register, login, self lookup, refresh rotation, logout.

Each flow runs its steps strictly in order. Token issuance is shared:

    sign access {sub, role} -> persist refresh row -> sign refresh {sub, role, id}

Cookies are written by the route once a flow returns; a flow that raises
leaves the response without cookies.
"""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from auth_service.core.errors import BadCredentialsError, NotAuthenticatedError, NotFoundError
from auth_service.core.security import hash_password, verify_password
from auth_service.core.tokens import TokenSigner
from auth_service.models.user import Role, User
from auth_service.schemas.auth import (
    AccessClaims,
    LoginRequest,
    RefreshClaims,
    RegisterRequest,
    TokenPair,
)
from auth_service.services.refresh_tokens import RefreshTokenStore, is_expired
from auth_service.services.users import UserDirectory

if TYPE_CHECKING:
    from auth_service.core.config import Settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _dummy_password_hash(rounds: int) -> str:
    """A hash at the configured cost to compare against when the email is unknown."""
    return hash_password("not-a-real-password", rounds)


class AuthService:
    """Composes UserDirectory, RefreshTokenStore and TokenSigner for one request's session."""

    def __init__(self, session: Session, signer: TokenSigner, settings: "Settings") -> None:
        self.users = UserDirectory(session, bcrypt_rounds=settings.BCRYPT_ROUNDS)
        self.refresh_tokens = RefreshTokenStore(
            session, ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        )
        self.signer = signer

    def _issue_tokens(self, user: User, replaces_token_id: int | None = None) -> TokenPair:
        claims = AccessClaims(sub=str(user.id), role=Role(user.role))
        access_token = self.signer.sign_access(claims)
        if replaces_token_id is None:
            row = self.refresh_tokens.persist(user)
        else:
            row = self.refresh_tokens.rotate(replaces_token_id, user)
        refresh_token = self.signer.sign_refresh(claims, token_id=row.id)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            refresh_token_id=row.id,
        )

    def register(self, data: RegisterRequest) -> tuple[User, TokenPair]:
        logger.debug(
            "New request to register a user",
            extra={
                "first_name": data.first_name,
                "last_name": data.last_name,
                "email": data.email,
                "password": "******",
            },
        )
        user = self.users.create(data)
        tokens = self._issue_tokens(user)
        logger.info("User registered", extra={"user_id": user.id})
        return user, tokens

    def login(self, data: LoginRequest) -> tuple[User, TokenPair]:
        logger.debug(
            "New request to login a user",
            extra={"email": data.email, "password": "******"},
        )
        user = self.users.find_by_email(data.email)
        # Unknown email and wrong password look the same, in body and in bcrypt time.
        if user is None:
            verify_password(data.password, _dummy_password_hash(self.users.bcrypt_rounds))
            raise BadCredentialsError()
        if not verify_password(data.password, user.password_hash):
            raise BadCredentialsError()
        tokens = self._issue_tokens(user)
        logger.info("User logged in", extra={"user_id": user.id})
        return user, tokens

    def get_self(self, claims: AccessClaims) -> User:
        """Load the user named by an already verified access token."""
        try:
            user_id = int(claims.sub)
        except ValueError:
            raise NotAuthenticatedError("Invalid token payload") from None
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def refresh(self, claims: RefreshClaims) -> tuple[User, TokenPair]:
        """
        Exchange a verified refresh token for a new pair.

        The presented token's row is deleted and replaced, so a refresh token
        works exactly once.
        """
        try:
            token_id = int(claims.id)
            user_id = int(claims.sub)
        except ValueError:
            raise NotAuthenticatedError("Invalid token payload") from None

        try:
            row = self.refresh_tokens.find(token_id)
        except NotFoundError:
            logger.warning(
                "Refresh token rejected: revoked or already used",
                extra={"token_id": token_id, "user_id": user_id},
            )
            raise NotAuthenticatedError("Refresh token is no longer valid") from None
        if row.user_id != user_id or is_expired(row):
            logger.warning(
                "Refresh token rejected: owner mismatch or expired",
                extra={"token_id": token_id, "user_id": user_id},
            )
            raise NotAuthenticatedError("Refresh token is no longer valid")

        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotAuthenticatedError("Refresh token is no longer valid")
        try:
            tokens = self._issue_tokens(user, replaces_token_id=row.id)
        except NotFoundError:
            logger.warning(
                "Refresh token rejected: rotated by a concurrent request",
                extra={"token_id": token_id, "user_id": user_id},
            )
            raise NotAuthenticatedError("Refresh token is no longer valid") from None
        return user, tokens

    def logout(self, claims: RefreshClaims) -> None:
        """Revoke the refresh token's row. Revoking an already removed row is not an error."""
        try:
            token_id = int(claims.id)
        except ValueError:
            raise NotAuthenticatedError("Invalid token payload") from None
        removed = self.refresh_tokens.revoke(token_id)
        logger.info(
            "User logged out",
            extra={"user_id": claims.sub, "token_id": token_id, "revoked": removed},
        )
