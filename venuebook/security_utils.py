"""
Security utilities
Password hashing, access/widget JWTs, emailed one-off tokens and widget API credentials
"""

import hashlib
import hmac
import json
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bleach

# Token generation and validation
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import (
    ACCESS_TOKEN_EXPIRE_DAYS,
    JWT_ALGORITHM,
    SECRET_KEY,
    WIDGET_TOKEN_EXPIRE_HOURS,
)
from .shared.validators import utcnow

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

EMAIL_VERIFICATION_SALT = "email-verification"
PASSWORD_RESET_SALT = "password-reset"
MIN_PASSWORD_LENGTH = 8


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against bcrypt hash"""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# JWT TOKENS
# ============================================================================


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT token

    Args:
        data: Data to encode in the token
        expires_delta: Token expiration time (default 15 minutes)
    """
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def create_access_token(user_id: int, role: str) -> str:
    return create_jwt_token(
        {"sub": str(user_id), "role": role, "type": "access"},
        timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS),
    )


def create_widget_token(business_id: int, customization: Optional[dict] = None) -> str:
    return create_jwt_token(
        {
            "businessId": business_id,
            "widget": True,
            "customization": customization or {},
        },
        timedelta(hours=WIDGET_TOKEN_EXPIRE_HOURS),
    )


def token_expiry(payload: dict[str, Any]) -> Optional[datetime]:
    exp = payload.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(exp, timezone.utc).replace(tzinfo=None)


# ============================================================================
# EMAILED ONE-OFF TOKENS
# ============================================================================


def generate_timed_token(data: dict[str, Any], salt: str) -> str:
    """
    Generate a time-limited token using itsdangerous
    Used for email verification and password reset links
    """
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    return serializer.dumps(data, salt=salt)


def verify_timed_token(token: str, salt: str, max_age: int = 3600) -> Optional[dict[str, Any]]:
    """
    Verify and decode a timed token

    Returns:
        Decoded data if valid, None if invalid or expired
    """
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    try:
        return serializer.loads(token, salt=salt, max_age=max_age)
    except SignatureExpired:
        logger.warning("Token expired")
        return None
    except BadSignature:
        logger.warning("Invalid token signature")
        return None


# ============================================================================
# WIDGET API CREDENTIALS
# ============================================================================


def generate_api_credentials() -> tuple[str, str]:
    """Random (api_key, api_secret) pair for a widget integration"""
    return secrets.token_hex(16), secrets.token_hex(32)


def sign_widget_payload(secret: str, payload: Any) -> str:
    """HMAC-SHA256 over the canonical JSON form of the payload"""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hmac.new(secret.encode(), canonical.encode(), hashlib.sha256).hexdigest()


def verify_widget_signature(secret: str, payload: Any, signature: str) -> bool:
    if not signature or not isinstance(signature, str):
        return False
    return hmac.compare_digest(sign_widget_payload(secret, payload).encode(), signature.encode())


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def strip_html(text: Optional[str]) -> Optional[str]:
    """Remove all HTML tags from free text (notes, review comments)"""
    if text is None:
        return None
    return bleach.clean(text, tags=[], attributes={}, strip=True).strip()
