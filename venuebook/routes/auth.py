import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user, security
from ..config import EMAIL_VERIFICATION_MAX_AGE, PASSWORD_RESET_MAX_AGE
from ..database import get_db
from ..email_service import notify, send_password_reset_email, send_verification_email
from ..models import ROLE_ADMIN, ROLE_CLIENT, ROLES, User
from ..schemas import user_payload
from ..security_utils import (
    EMAIL_VERIFICATION_SALT,
    MIN_PASSWORD_LENGTH,
    PASSWORD_RESET_SALT,
    create_access_token,
    generate_timed_token,
    hash_password,
    token_expiry,
    verify_jwt_token,
    verify_password,
    verify_timed_token,
)
from ..shared.validators import validate_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    businessName: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenRequest(BaseModel):
    token: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    newPassword: Optional[str] = None


def _normalize_email(email: Optional[str]) -> str:
    try:
        normalized = validate_email(email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not normalized:
        raise HTTPException(status_code=400, detail="Email is required")
    return normalized


def _check_password(password: Optional[str]) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )
    return password


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and send the email verification link"""
    email = _normalize_email(data.email)
    password = _check_password(data.password)
    if not data.name or not data.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")

    role = (data.role or ROLE_CLIENT).strip().lower()
    if role not in ROLES:
        raise HTTPException(status_code=400, detail=f"Invalid role '{role}'")
    if role == ROLE_ADMIN:
        raise HTTPException(status_code=400, detail="Admin accounts cannot be self-registered")

    existing = db.query(User).filter(User.email == email).first()
    if existing and existing.password_hash:
        raise HTTPException(status_code=400, detail="User already exists")

    if existing:
        # Customer record created from a booking page: claim it
        user = existing
        user.role = role
    else:
        user = User(email=email, role=role)
        db.add(user)

    user.password_hash = hash_password(password)
    user.name = data.name.strip()
    if data.phone:
        user.phone = data.phone
    if data.businessName:
        user.business_name = data.businessName
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} with role {user.role}")

    verification_token = generate_timed_token({"user_id": user.id}, EMAIL_VERIFICATION_SALT)
    await notify(send_verification_email, user.email, user.name, verification_token)

    return {
        "message": "User registered successfully. Please verify your email.",
        "user": user_payload(user),
        "token": create_access_token(user.id, user.role),
    }


@router.post("/login")
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    if not data.email or not data.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = db.query(User).filter(User.email == data.email.strip().lower()).first()
    if not user or not verify_password(data.password, user.password_hash):
        logger.warning(f"Failed login attempt for {data.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {"user": user_payload(user), "token": create_access_token(user.id, user.role)}


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    # Access tokens are stateless, the client discards its copy
    logger.info(f"User {current_user.id} logged out")
    return {"message": "Logged out successfully"}


@router.post("/verify-email")
async def verify_email(data: TokenRequest, db: Session = Depends(get_db)):
    payload = verify_timed_token(
        data.token or "", EMAIL_VERIFICATION_SALT, max_age=EMAIL_VERIFICATION_MAX_AGE
    )
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired verification token")

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.is_verified = True
    db.commit()
    return {"message": "Email verified successfully"}


@router.post("/forgot-password")
async def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    email = _normalize_email(data.email)
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    reset_token = generate_timed_token(
        {"user_id": user.id, "email": user.email}, PASSWORD_RESET_SALT
    )
    await notify(send_password_reset_email, user.email, reset_token)
    return {"message": "Password reset email sent"}


@router.post("/reset-password")
async def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    password = _check_password(data.newPassword)
    payload = verify_timed_token(data.token or "", PASSWORD_RESET_SALT, max_age=PASSWORD_RESET_MAX_AGE)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired reset token")

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.password_hash = hash_password(password)
    db.commit()
    logger.info(f"Password updated for user: {user.email}")
    return {"message": "Password reset successful"}


@router.get("/session")
async def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    current_user: User = Depends(get_current_user),
):
    payload = verify_jwt_token(credentials.credentials) or {}
    return {"user": user_payload(current_user), "expires_at": token_expiry(payload)}


@router.get("/user")
async def get_user(current_user: User = Depends(get_current_user)):
    return {"user": user_payload(current_user)}
