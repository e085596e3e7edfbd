"""
Password hashing and auth token helpers.

Passwords are hashed with argon2 through passlib; tokens are HS256 JWTs
signed with the configured secret. A token carries the user id as ``sub``
and the email as ``email``.
"""

from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config import AppConfig, get_config
from ..exceptions import AuthenticationError, ErrorCode, ServiceError
from ..schemas.tenant_schema import AuthUser

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a password against its stored hash; an unusable hash never matches."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def _signing_secret(config: AppConfig) -> str:
    secret = config.get_auth_secret()
    if not secret:
        raise ServiceError(
            "Auth secret is not configured",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="sign_token",
            environment=config.environment,
        )
    return secret


def create_token(
    user_id: str,
    email: str,
    expires_delta: Optional[timedelta] = None,
    config: Optional[AppConfig] = None,
) -> str:
    """
    Sign an auth token for a user.

    Raises:
        ServiceError: If no signing secret is available (production without AUTH_SECRET)
    """
    config = config or get_config()
    expire = datetime.now(UTC) + (expires_delta or timedelta(days=config.security.token_ttl_days))
    claims = {"sub": user_id, "email": email, "exp": expire}
    return jwt.encode(claims, _signing_secret(config), algorithm=config.security.token_algorithm)


def verify_token(token: Optional[str], config: Optional[AppConfig] = None) -> AuthUser:
    """
    Decode and verify an auth token.

    Raises:
        AuthenticationError: If the token is missing, expired, tampered with or incomplete
    """
    if not token:
        raise AuthenticationError()
    config = config or get_config()
    try:
        payload = jwt.decode(
            token, _signing_secret(config), algorithms=[config.security.token_algorithm]
        )
    except JWTError as e:
        raise AuthenticationError(cause=e) from e

    user_id = payload.get("sub")
    email = payload.get("email")
    if not isinstance(user_id, str) or not isinstance(email, str):
        raise AuthenticationError()
    return AuthUser(id=user_id, email=email)
