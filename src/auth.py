"""Authentication utilities for JWT and password hashing."""

import os
import logging
from typing import Optional
from datetime import datetime, timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from dotenv import load_dotenv

from src.errors import Forbidden, Unauthorized
from src.models import User
from src.policy import can_create
from src.repository import UserRepository, get_user_repository

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

# Password hashing context
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

# JWT configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    raise ValueError("JWT_SECRET_KEY must be set in .env file")

ALGORITHM = "HS256"
TOKEN_EXPIRE_HOURS = int(os.getenv("TOKEN_EXPIRE_HOURS", "24"))

# HTTP Bearer for JWT authentication; missing headers are reported by us as 401
security = HTTPBearer(auto_error=False)


def _truncate_for_bcrypt(password: str) -> str:
    # Bcrypt has a 72-byte limit
    password_bytes = password.encode('utf-8')[:72]
    return password_bytes.decode('utf-8', errors='ignore')


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Bcrypt has a maximum password length of 72 bytes. Passwords longer than
    this are truncated to prevent errors.

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    logger.debug("Hashing password")
    return pwd_context.hash(_truncate_for_bcrypt(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Passwords are truncated to 72 bytes to match the hashing behavior.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to verify against

    Returns:
        bool: True if password matches, False otherwise
    """
    logger.debug("Verifying password")
    if not hashed_password:
        return False
    return pwd_context.verify(_truncate_for_bcrypt(plain_password), hashed_password)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT carrying the user id and role.

    Args:
        user: The user the token is issued to
        expires_delta: Token lifetime, TOKEN_EXPIRE_HOURS when omitted

    Returns:
        str: Encoded JWT token
    """
    issued_at = datetime.utcnow()
    expires_at = issued_at + (expires_delta or timedelta(hours=TOKEN_EXPIRE_HOURS))
    to_encode = {
        "sub": str(user.id),
        "role": user.role.value,
        "iat": issued_at,
        "exp": expires_at,
    }

    logger.info(f"Creating access token for user: {user.id}")
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and verify a JWT token.

    Args:
        token: JWT token string

    Returns:
        Optional[dict]: Decoded token payload or None if invalid or expired
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[ALGORITHM])
        logger.debug("Token decoded successfully")
        return payload
    except JWTError as e:
        logger.warning(f"Token decode error: {e}")
        return None


def authenticate(users: UserRepository, login: str, password: str) -> User:
    """
    Check a username-or-email and password pair.

    Raises:
        Unauthorized: If no user matches or the password is wrong
    """
    user = users.get_by_login(login)
    if user is None:
        logger.warning(f"Login failed: User not found - {login}")
        raise Unauthorized("Invalid credentials")

    if not verify_password(password, user.password_hash):
        logger.warning(f"Login failed: Invalid password - {login}")
        raise Unauthorized("Invalid credentials")

    return user


def verify_token(users: UserRepository, token: str) -> User:
    """
    Resolve a bearer token to the user it was issued to.

    Raises:
        Unauthorized: If the token is malformed, expired, badly signed, or
            its user no longer exists
    """
    payload = decode_token(token)
    if payload is None:
        raise Unauthorized("Invalid or expired token")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        logger.warning("Token missing a valid subject claim")
        raise Unauthorized("Invalid or expired token")

    user = users.get(user_id)
    if user is None:
        logger.warning(f"User not found for token subject: {user_id}")
        raise Unauthorized("Invalid or expired token")

    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users: UserRepository = Depends(get_user_repository)
) -> User:
    """
    Dependency to get the current authenticated user from JWT token.

    Raises:
        Unauthorized: If the header is missing or the token is rejected
    """
    if credentials is None:
        logger.warning("Request without bearer token")
        raise Unauthorized("Access token required")

    user = verify_token(users, credentials.credentials)
    logger.info(f"User authenticated: {user.username}")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users: UserRepository = Depends(get_user_repository)
) -> Optional[User]:
    """Like get_current_user, but anonymous callers resolve to None."""
    if credentials is None:
        return None
    return verify_token(users, credentials.credentials)


def require_doctor(current_user: User = Depends(get_current_user)) -> User:
    """Dependency that only lets doctors through."""
    if not can_create(current_user):
        logger.warning(f"Doctor-only route refused for user: {current_user.username}")
        raise Forbidden("Only doctors can perform this action")
    return current_user
