"""
JWT signing and verification for access and refresh tokens.

Access tokens are short-lived and signed with an RSA private key, so any
service holding only the public key can verify them. Refresh tokens are
long-lived, signed with a separate shared secret, and carry the id of their
refresh_tokens row ("id" claim) so they can be looked up and revoked.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, TypeVar

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from pydantic import ValidationError

from auth_service.core.config import ConfigurationError
from auth_service.core.errors import InternalError
from auth_service.schemas.auth import AccessClaims, RefreshClaims

if TYPE_CHECKING:
    from auth_service.core.config import Settings

ClaimsT = TypeVar("ClaimsT", bound=AccessClaims)

TokenErrorReason = Literal["expired", "invalid_signature", "malformed", "invalid"]


class TokenError(Exception):
    """
    Token rejected. reason is for logs only; every reason is handled the same way (401).
    """

    def __init__(self, reason: TokenErrorReason, message: str) -> None:
        self.reason = reason
        self.message = message
        super().__init__(message)


def verify_token(
    token: str,
    key: Any,
    algorithms: list[str],
    issuer: str,
) -> dict[str, Any]:
    """
    Decode and validate a JWT (signature, exp, iss). Returns the raw payload.

    Raises TokenError with reason expired, invalid_signature, malformed or invalid.
    """
    try:
        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            issuer=issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenError("expired", "Token has expired") from e
    # InvalidSignatureError is a DecodeError subclass; order matters.
    except jwt.InvalidSignatureError as e:
        raise TokenError("invalid_signature", "Token signature is invalid") from e
    except jwt.DecodeError as e:
        raise TokenError("malformed", "Token is malformed") from e
    except jwt.InvalidTokenError as e:
        raise TokenError("invalid", f"Token is invalid: {e}") from e


def _load_private_key(settings: "Settings") -> RSAPrivateKey:
    if settings.PRIVATE_KEY is not None and settings.PRIVATE_KEY.get_secret_value().strip():
        pem = settings.PRIVATE_KEY.get_secret_value().encode("utf-8")
    elif settings.PRIVATE_KEY_PATH:
        try:
            pem = Path(settings.PRIVATE_KEY_PATH).read_bytes()
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read PRIVATE_KEY_PATH {settings.PRIVATE_KEY_PATH!r}: {e}"
            ) from e
    else:
        raise ConfigurationError("PRIVATE_KEY or PRIVATE_KEY_PATH must be set")
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Private key is not a valid PEM key: {e}") from e
    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError("Private key must be an RSA key")
    return key


def _load_public_key(settings: "Settings", private_key: RSAPrivateKey) -> RSAPublicKey:
    if not settings.PUBLIC_KEY:
        return private_key.public_key()
    try:
        key = serialization.load_pem_public_key(settings.PUBLIC_KEY.encode("utf-8"))
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"PUBLIC_KEY is not a valid PEM key: {e}") from e
    if not isinstance(key, RSAPublicKey):
        raise ConfigurationError("PUBLIC_KEY must be an RSA key")
    return key


class TokenSigner:
    """Signs and verifies access/refresh tokens. Build once per app via from_settings."""

    def __init__(
        self,
        *,
        private_key: RSAPrivateKey,
        public_key: RSAPublicKey,
        refresh_secret: str,
        access_algorithm: str = "RS256",
        refresh_algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=365),
        issuer: str = "auth-service",
    ) -> None:
        self._private_key = private_key
        self.public_key = public_key
        self._refresh_secret = refresh_secret
        self.access_algorithm = access_algorithm
        self.refresh_algorithm = refresh_algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.issuer = issuer

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenSigner":
        """Load keys from settings. Raises ConfigurationError if they are missing or unusable."""
        private_key = _load_private_key(settings)
        return cls(
            private_key=private_key,
            public_key=_load_public_key(settings, private_key),
            refresh_secret=settings.REFRESH_TOKEN_SECRET.get_secret_value(),
            access_algorithm=settings.ACCESS_TOKEN_ALGORITHM,
            refresh_algorithm=settings.REFRESH_TOKEN_ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            issuer=settings.TOKEN_ISSUER,
        )

    def _encode(self, claims: dict[str, Any], key: Any, algorithm: str, ttl: timedelta) -> str:
        now = datetime.now(UTC)
        payload = {**claims, "iat": now, "exp": now + ttl, "iss": self.issuer}
        try:
            return jwt.encode(payload, key, algorithm=algorithm)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise InternalError("Failed to sign token", cause=e) from e

    def sign_access(self, claims: AccessClaims) -> str:
        """Sign an access token {sub, role} with the private key."""
        return self._encode(
            claims.model_dump(mode="json"),
            self._private_key,
            self.access_algorithm,
            self.access_ttl,
        )

    def sign_refresh(self, claims: AccessClaims, token_id: int) -> str:
        """Sign a refresh token {sub, role, id} with the refresh secret."""
        payload = {**claims.model_dump(mode="json"), "id": str(token_id)}
        return self._encode(
            payload,
            self._refresh_secret,
            self.refresh_algorithm,
            self.refresh_ttl,
        )

    def verify_access(self, token: str) -> AccessClaims:
        payload = verify_token(token, self.public_key, [self.access_algorithm], self.issuer)
        return _claims(AccessClaims, payload)

    def verify_refresh(self, token: str) -> RefreshClaims:
        payload = verify_token(token, self._refresh_secret, [self.refresh_algorithm], self.issuer)
        return _claims(RefreshClaims, payload)


def _claims(model: type[ClaimsT], payload: dict[str, Any]) -> ClaimsT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise TokenError("invalid", "Token payload is missing required claims") from e
