"""Authentication router for user registration and login."""

import logging
from fastapi import APIRouter, Depends, status

from src.errors import Conflict
from src.repository import UserRepository, get_user_repository
from src.schemas import UserRegister, UserLogin, UserPublic, AuthData
from src.auth import hash_password, authenticate, create_access_token

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, users: UserRepository = Depends(get_user_repository)):
    """
    Register a new user and return an access token.

    Args:
        user_data: Registration data (full_name, username, email, password, role)
        users: User repository

    Returns:
        dict: Envelope with the new user and a JWT access token

    Raises:
        Conflict: If the username or email is already taken
    """
    logger.info(f"Registration attempt for username: {user_data.username}")

    if users.exists_username(user_data.username):
        logger.warning(f"Registration failed: Username already exists - {user_data.username}")
        raise Conflict("Username already exists")

    if users.exists_email(user_data.email):
        logger.warning(f"Registration failed: Email already exists - {user_data.email}")
        raise Conflict("Email already registered")

    new_user = users.create(
        username=user_data.username,
        full_name=user_data.full_name,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        role=user_data.role,
    )

    access_token = create_access_token(new_user)

    logger.info(f"User registered successfully and logged in: {new_user.username}")
    return {
        "success": True,
        "message": "User registered successfully",
        "data": AuthData(user=UserPublic.model_validate(new_user), token=access_token),
    }


@router.post("/login")
def login(user_data: UserLogin, users: UserRepository = Depends(get_user_repository)):
    """
    Authenticate with a username or email and return a JWT token.

    Raises:
        Unauthorized: If credentials are invalid
    """
    logger.info(f"Login attempt for: {user_data.login}")

    user = authenticate(users, user_data.login, user_data.password)
    access_token = create_access_token(user)

    logger.info(f"User logged in successfully: {user.username}")
    return {
        "success": True,
        "message": "Login successful",
        "data": AuthData(user=UserPublic.model_validate(user), token=access_token),
    }
