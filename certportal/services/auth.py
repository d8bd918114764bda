"""Auth service: register identities, authenticate credentials, verify stateless tokens, gate by role."""

import logging

import jwt
import pydantic
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from certportal.core.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    StoreError,
    ValidationError,
)
from certportal.core.security import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from certportal.models.user import User
from certportal.schemas.auth import ROLES, LoginResponse, RegisterResponse, TokenClaims

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


def register(
    db: Session,
    username: str | None,
    password: str | None,
    role: str | None,
) -> RegisterResponse:
    """
    Create an identity with a bcrypt-hashed password.

    Raises ValidationError for missing fields, unknown role, or a password outside 6 chars..72 bytes,
    and ConflictError if the username is taken. A failed call never overwrites.
    """
    if not username or not password or not role:
        raise ValidationError("All fields are required")
    if role not in ROLES:
        raise ValidationError("Invalid role. Must be 'admin' or 'participant'")
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LEN} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    if len(username) > USERNAME_MAX_LEN:
        raise ValidationError("Invalid username length.")

    existing = db.query(User).filter(User.username == username).first()
    if existing is not None:
        raise ConflictError("Username already exists")

    user = User(username=username, password_hash=hash_password(password), role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Concurrent registration of the same username lost the race on the unique index.
        db.rollback()
        raise ConflictError("Username already exists", cause=e) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError("Error during registration", cause=e) from e

    logger.info("User registered", extra={"username": username, "role": role})
    return RegisterResponse(message="Registration successful!", username=username, role=role)


def authenticate(db: Session, username: str | None, password: str | None) -> LoginResponse:
    """
    Check credentials and mint a signed token.

    Unknown username and wrong password raise the same InvalidCredentialsError.
    """
    if not username or not password:
        raise ValidationError("Username and password are required")

    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    token = create_access_token(sub=user.id, username=user.username, role=user.role)
    logger.info("User logged in", extra={"username": user.username, "role": user.role})
    return LoginResponse(
        message="Login successful!",
        token=token,
        role=user.role,
        username=user.username,
    )


def verify(token: str | None) -> TokenClaims:
    """
    Decode a bearer token without touching the database.

    Raises AuthError if no token is given and InvalidTokenError if it is
    malformed, expired, tampered with, or carries unexpected claims.
    """
    if not token:
        raise AuthError("Access denied. No token provided.")
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        raise InvalidTokenError("Invalid token", cause=e) from e
    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            username=payload["username"],
            role=payload["role"],
        )
    except (TypeError, ValueError, pydantic.ValidationError) as e:
        raise InvalidTokenError("Invalid token", cause=e) from e


def require_role(claims: TokenClaims, role: str) -> TokenClaims:
    """Raise ForbiddenError unless the caller holds exactly the given role."""
    if claims.role != role:
        if role == "admin":
            raise ForbiddenError("Access denied. Admin only.")
        raise ForbiddenError(f"Access denied. Role '{role}' required.")
    return claims
