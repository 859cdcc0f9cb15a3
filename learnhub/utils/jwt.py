from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError
from jose.jwt import encode, decode

from learnhub.config import settings
from learnhub.schemas.auth_schemas import AuthTokenPayload
from learnhub.utils.logger import get_logger

logger = get_logger(__name__)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its bcrypt hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        logger.warning("password check against malformed hash")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def token_expiry(minutes: Optional[int] = None) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_access_token(data: AuthTokenPayload) -> str:
    """Create a signed JWT access token."""
    return encode(data.model_dump(mode="json", exclude_none=True) | _exp_claim(data), settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def _exp_claim(data: AuthTokenPayload) -> dict:
    # jose validates exp as a numeric timestamp.
    return {"exp": int(data.exp.timestamp())} if data.exp else {}


def verify_token(token: Optional[str]) -> AuthTokenPayload:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    try:
        payload = decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return AuthTokenPayload(**payload)
    except JWTError as e:
        logger.info("token rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
