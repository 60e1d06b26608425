"""
GridBazaar - Authentication Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from gridbazaar.dependencies import (
    get_user_repository,
    get_current_active_user,
    get_current_profile,
)
from gridbazaar.db.repositories.user import UserRepository
from gridbazaar.db.models.profile import Profile
from gridbazaar.db.models.user import User
from gridbazaar.schemas.user import (
    UserCreate,
    UserLogin,
    User as UserSchema,
    UserWithToken,
    Token,
    RefreshTokenRequest,
    ProfileResponse,
    ProfileUpdate,
)
from gridbazaar.core.security import (
    create_access_token,
    create_refresh_token,
    verify_token,
)
from gridbazaar.utils.exceptions import (
    EmailAlreadyRegisteredError,
    InactiveUserError,
    InvalidCredentialsError,
    UsernameAlreadyTakenError,
)

router = APIRouter()


def _issue_tokens(user: User) -> Token:
    return Token(
        access_token=create_access_token(subject=user.id),
        refresh_token=create_refresh_token(subject=user.id),
    )


async def _login(user_repo: UserRepository, email: str, password: str) -> Token:
    user = await user_repo.authenticate(email=email, password=password)
    if not user:
        raise InvalidCredentialsError()
    if not user.is_active:
        raise InactiveUserError()
    await user_repo.update_last_login(user)
    return _issue_tokens(user)


@router.post(
    "/register",
    response_model=UserWithToken,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a user account with its marketplace profile and return tokens."
)
async def register(
    user_data: UserCreate,
    user_repo: UserRepository = Depends(get_user_repository)
) -> UserWithToken:
    """
    Register a new user.
    
    - **email**: Valid email address (unique, case-insensitive)
    - **username**: Username (3-50 chars, unique)
    - **password**: Password (min 8 chars)
    - **company_name** / **role**: Marketplace profile
    """
    existing_user = await user_repo.get_by_email_or_username(
        email=user_data.email,
        username=user_data.username
    )
    if existing_user:
        if existing_user.email.lower() == user_data.email.lower():
            raise EmailAlreadyRegisteredError()
        raise UsernameAlreadyTakenError()
    
    user = await user_repo.create(user_data)
    tokens = _issue_tokens(user)
    
    return UserWithToken(
        **UserSchema.model_validate(user).model_dump(),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post(
    "/login",
    response_model=Token,
    summary="Login and get access token",
)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_repo: UserRepository = Depends(get_user_repository)
) -> Token:
    """OAuth2 compatible token login; the username field carries the email."""
    return await _login(user_repo, form_data.username, form_data.password)


@router.post("/login/json", response_model=Token, summary="Login with JSON body")
async def login_json(
    credentials: UserLogin,
    user_repo: UserRepository = Depends(get_user_repository)
) -> Token:
    return await _login(user_repo, credentials.email, credentials.password)


@router.post("/refresh", response_model=Token, summary="Refresh access token")
async def refresh_token(
    data: RefreshTokenRequest,
    user_repo: UserRepository = Depends(get_user_repository)
) -> Token:
    """Exchange a refresh token for a new token pair."""
    user_id = verify_token(data.refresh_token, token_type="refresh")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    user = await user_repo.get_by_id(int(user_id))
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _issue_tokens(user)


@router.get("/me", response_model=UserSchema, summary="Get current user")
async def get_me(
    current_user: User = Depends(get_current_active_user)
) -> User:
    return current_user


@router.patch("/me/profile", response_model=ProfileResponse, summary="Update marketplace profile")
async def update_profile(
    data: ProfileUpdate,
    profile: Profile = Depends(get_current_profile),
    user_repo: UserRepository = Depends(get_user_repository),
) -> Profile:
    return await user_repo.update_profile(profile, data)
