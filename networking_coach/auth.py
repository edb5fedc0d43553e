"""
Authentication utilities for the Networking Coach application.

Provides JWT-based authentication with password hashing. Authenticated
requests get their database session bound to the user so the owner
policies apply.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Optional, Callable, Any

import bcrypt
import jwt
from flask import request, jsonify, g

from .config import config
from .database import get_db_session
from .models import Profile, User
from . import policies

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def create_access_token(user_id: str, email: str) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's database ID
        email: The user's email address

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "exp": now + timedelta(hours=config.JWT_EXPIRATION_HOURS),
        "iat": now,
    }

    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT access token.

    Returns:
        Token payload dict if valid, None if invalid/expired
    """
    try:
        return jwt.decode(
            token,
            config.SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        return None


def get_current_user_from_token(token: str) -> Optional[User]:
    """Get the active user a JWT token belongs to, or None."""
    payload = decode_access_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    db = get_db_session()
    try:
        return db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
    finally:
        db.close()


def _bearer_token() -> Optional[str]:
    auth_header = request.headers.get('Authorization')
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        return None
    return parts[1]


def _bind_request_session(user: User) -> None:
    db = g.get('db')
    if db is not None:
        policies.bind_user(db, user.id)


def require_auth(f: Callable) -> Callable:
    """
    Decorator that requires JWT authentication.

    Sets g.current_user to the authenticated user and binds g.db to them.

    Usage:
        @app.route('/api/messages')
        @require_auth
        def list_messages():
            user = g.current_user
            ...
    """
    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any) -> Any:
        if not request.headers.get('Authorization'):
            return jsonify({"error": "Missing Authorization header"}), 401

        token = _bearer_token()
        if not token:
            return jsonify({"error": "Invalid Authorization header format"}), 401

        user = get_current_user_from_token(token)
        if not user:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user
        _bind_request_session(user)

        return f(*args, **kwargs)

    return decorated_function


def require_auth_optional(f: Callable) -> Callable:
    """
    Decorator that optionally extracts user from JWT if present.

    Does not fail if no token is provided.
    Sets g.current_user to the user or None.
    """
    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any) -> Any:
        g.current_user = None

        token = _bearer_token()
        if token:
            user = get_current_user_from_token(token)
            g.current_user = user
            if user:
                _bind_request_session(user)

        return f(*args, **kwargs)

    return decorated_function


# ========================================
# User Service Functions
# ========================================

def create_user(email: str, password: str, full_name: str) -> tuple[Optional[User], Optional[str]]:
    """
    Create a new user account together with its profile.

    Returns:
        Tuple of (User, None) on success, or (None, error_message) on failure
    """
    db = get_db_session()
    try:
        existing = db.query(User).filter(User.email == email.lower()).first()
        if existing:
            return None, "Email already registered"

        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
        )
        db.add(user)
        db.flush()  # Get user ID

        db.add(Profile(user_id=user.id, full_name=full_name, email=email.lower()))
        db.commit()

        logger.info("Registered user %s", user.id)
        return user, None

    except Exception as e:
        db.rollback()
        logger.error(f"Could not register {email}: {e}")
        return None, "Could not create account"
    finally:
        db.close()


def authenticate_user(email: str, password: str) -> tuple[Optional[User], Optional[str]]:
    """
    Authenticate a user with email and password.

    Returns:
        Tuple of (User, None) on success, or (None, error_message) on failure
    """
    db = get_db_session()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()

        if not user:
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is disabled"

        if not verify_password(password, user.password_hash):
            return None, "Invalid email or password"

        user.last_login_at = datetime.now(timezone.utc)
        db.commit()

        return user, None

    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
