from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from learnhub.config import get_db, settings
from learnhub.models.models import User as DbUser
from learnhub.schemas.auth_schemas import AuthTokenPayload
from learnhub.schemas.user_schemas import User
from learnhub.services.achievement_evaluator import seed_starter_achievements
from learnhub.utils.jwt import create_access_token, get_password_hash, token_expiry, verify_password, verify_token
from learnhub.utils.logger import get_logger

logger = get_logger(__name__)

AUTH_COOKIE = "access_token"


def get_current_user(access_token: Optional[str] = Cookie(None), db: Session = Depends(get_db)) -> User:
    if not access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
        )

    payload = verify_token(access_token)
    user = get_user_by_email(payload.sub, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    return User(id=user.id, email=user.email, username=user.username, preferences=user.preferences)


def get_optional_user(access_token: Optional[str] = Cookie(None), db: Session = Depends(get_db)) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    if not access_token:
        return None
    return get_current_user(access_token, db)


def set_auth_cookie(response: Response, user: DbUser) -> None:
    token = create_access_token(AuthTokenPayload(sub=user.email, exp=token_expiry()))
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=AUTH_COOKIE,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax"
    )


def get_user_by_email(email: str, db: Session) -> DbUser | None:
    return db.query(DbUser).filter(DbUser.email == email.strip().lower()).first()


def get_user_by_username(username: str, db: Session) -> DbUser | None:
    return db.query(DbUser).filter(DbUser.username == username.strip()).first()


def create_user(email: str, password: str, db: Session, username: Optional[str] = None) -> DbUser:
    """Create the account and track its starter achievements in one commit."""
    logger.info("creating user email=%s", email)
    user = DbUser(
        email=email.strip().lower(),
        username=username.strip() if username else None,
        hashed_password=get_password_hash(password),
    )
    try:
        db.add(user)
        db.flush()
        seed_starter_achievements(db, user.id)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("user creation failed email=%s", email)
        raise
    db.refresh(user)
    return user


def authenticate_user(email: str, password: str, db: Session) -> DbUser | None:
    user = get_user_by_email(email, db)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
