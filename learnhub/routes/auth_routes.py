from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from learnhub.config import get_db
from learnhub.schemas.auth_schemas import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from learnhub.schemas.user_schemas import User
from learnhub.utils.auth import (
    authenticate_user,
    clear_auth_cookie,
    create_user,
    get_current_user,
    get_user_by_email,
    get_user_by_username,
    set_auth_cookie,
)
from learnhub.utils.logger import get_logger

logger = get_logger(__name__)

auth_routes = APIRouter()


@auth_routes.post("/login")
async def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate user and set HTTP-only cookie with token."""
    user = authenticate_user(request.email, request.password, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )
    set_auth_cookie(response, user)
    logger.info("login user_id=%s", user.id)
    return LoginResponse(message="Login successful", token_set=True)


@auth_routes.post("/register")
async def register(request: RegisterRequest, response: Response, db: Session = Depends(get_db)) -> RegisterResponse:
    """Register a new user, track the starter achievements and log them in."""
    if request.password != request.confirm_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Passwords do not match"
        )
    if get_user_by_email(request.email, db):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )
    if request.username and get_user_by_username(request.username, db):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already taken"
        )

    user = create_user(request.email, request.password, db, username=request.username)
    set_auth_cookie(response, user)
    return RegisterResponse(message="Registration successful", user_id=user.id)


@auth_routes.post("/logout")
async def logout(response: Response) -> LogoutResponse:
    """Clear the authentication cookie."""
    clear_auth_cookie(response)
    return LogoutResponse(message="Logout successful")


@auth_routes.get("/me")
async def get_current_user_info(current_user: User = Depends(get_current_user)) -> User:
    """Current user's identity; never includes the password hash."""
    return current_user
