from datetime import timedelta, datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session
from app.models.user import User
from app.models.otp import Otp, PasswordReset
from app.schemas.user import ChangePassword, RegisterUser, UpdatePassword, VerifyOtp
from app.core.security import get_password_hash, verify_password
from app.core.exceptions import BadRequestException, NotFoundException, UnauthorizedException
from app.crud.user import ensure_unique_fields, get_user_by_email
from app.helpers import totp
from app.helpers.utils import generate_otp_code, generate_reset_token, is_expired

OTP_EXPIRE_MINUTES = 10
RESET_TOKEN_EXPIRE_MINUTES = 60


def check_both_passwords(password: str, confirm_password: str):
    if password != confirm_password:
        raise BadRequestException("password_mismatch")

# Register new (unverified) user
def register_user(db: Session, payload: RegisterUser) -> User:
    check_both_passwords(payload.password, payload.confirm_password)
    ensure_unique_fields(db, payload.email, payload.username)

    user = User(
        name=payload.name,
        username=payload.username,
        email=payload.email.lower(),
        phone=payload.phone,
        password=get_password_hash(payload.password),
        is_verified=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

# Create or overwrite the OTP for a user
def issue_otp(db: Session, user: User) -> Otp:
    code = generate_otp_code()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=OTP_EXPIRE_MINUTES)

    otp = db.query(Otp).filter(Otp.user_id == user.id).first()
    if otp:
        otp.code = code
        otp.expires_at = expires_at
    else:
        otp = Otp(user_id=user.id, code=code, expires_at=expires_at)
        db.add(otp)

    db.commit()
    db.refresh(otp)
    return otp

def verify_otp(db: Session, payload: VerifyOtp) -> User:
    user = get_user_by_email(db, payload.email)
    if not user:
        raise NotFoundException("user_not_found")

    otp = user.otp
    if not otp:
        raise BadRequestException("no_otp_found")

    if is_expired(otp.expires_at):
        raise BadRequestException("otp_expired")

    if otp.code != payload.code:
        raise BadRequestException("invalid_otp")

    # Mark verified and drop the OTP together
    try:
        user.is_verified = True
        db.delete(otp)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user

def get_user_for_resend(db: Session, email: str) -> User:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundException("user_not_found")
    if user.is_verified:
        raise BadRequestException("already_verified")
    return user

# Check email/password
def authenticate_user(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        raise UnauthorizedException("wrong_credentials")
    return user

def authenticate_two_factor(db: Session, email: str, password: str, code: str) -> User:
    user = authenticate_user(db, email, password)
    if not user.two_factor_secret:
        raise BadRequestException("2fa_not_setup")
    if not totp.verify_code(user.two_factor_secret, code):
        raise BadRequestException("invalid_2fa_code")
    return user

def change_password(db: Session, user: User, payload: ChangePassword) -> User:
    if not verify_password(payload.current_password, user.password):
        raise BadRequestException("incorrect_password")
    if verify_password(payload.password, user.password):
        raise BadRequestException("same_password_error")
    check_both_passwords(payload.password, payload.confirm_password)

    user.password = get_password_hash(payload.password)
    db.commit()
    db.refresh(user)
    return user

# Upsert password reset token; None when the email is unknown
def create_password_reset(db: Session, email: str) -> Optional[PasswordReset]:
    user = get_user_by_email(db, email)
    if not user:
        return None

    token = generate_reset_token()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=RESET_TOKEN_EXPIRE_MINUTES)

    reset = db.query(PasswordReset).filter(PasswordReset.user_id == user.id).first()
    if reset:
        reset.token = token
        reset.expires_at = expires_at
    else:
        reset = PasswordReset(user_id=user.id, token=token, expires_at=expires_at)
        db.add(reset)

    db.commit()
    db.refresh(reset)
    return reset

def get_valid_reset_token(db: Session, token: str) -> PasswordReset:
    reset = db.query(PasswordReset).filter(PasswordReset.token == token).first()
    if not reset:
        raise BadRequestException("invalid_token")
    if is_expired(reset.expires_at):
        raise BadRequestException("expired_token")
    return reset

def update_password(db: Session, payload: UpdatePassword) -> User:
    check_both_passwords(payload.password, payload.confirm_password)
    reset = get_valid_reset_token(db, payload.token)
    user = reset.user

    try:
        user.password = get_password_hash(payload.password)
        db.delete(reset)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return user

# 2FA
def get_2fa_secret(db: Session, user: User) -> str:
    if user.two_factor_secret:
        return user.two_factor_secret

    try:
        secret = totp.generate_self_checked_secret()
    except ValueError:
        raise BadRequestException("failed_2fa_secret_generation")

    user.two_factor_secret = secret
    db.commit()
    db.refresh(user)
    return secret

def activate_2fa(db: Session, user: User, code: str) -> User:
    if not user.two_factor_secret:
        raise BadRequestException("2fa_not_setup")
    if not totp.verify_code(user.two_factor_secret, code):
        raise BadRequestException("invalid_2fa_code")

    user.two_factor_enabled = True
    db.commit()
    db.refresh(user)
    return user

def deactivate_2fa(db: Session, user: User) -> User:
    user.two_factor_enabled = False
    user.two_factor_secret = None
    db.commit()
    db.refresh(user)
    return user
