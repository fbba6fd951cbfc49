from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from app.helpers.utils import get_lang_from_request
from app.schemas.user import (
    Activate2FA, ChangePassword, PasswordResetRequest, RegisterUser, ResendOtp,
    TwoFactorLogin, UpdatePassword, UserLogin, UserOut, VerifyOtp,
)
from app.crud import auth as crud_auth
from app.db.session import get_db
from app.core.dependencies import get_current_user
from app.core.exceptions import UnauthorizedException
from app.core.security import create_access_token, set_auth_cookie, clear_auth_cookie
from app.helpers import totp
from app.services.messaging import resend as mailer
from app.helpers.response import ResponseHandler  # import your custom response handler
from app.helpers.translator import Translator
from app.models.user import User

import logging
import requests
logger = logging.getLogger(__name__)

translator = Translator()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

def send_otp(db: Session, user: User, lang: str) -> bool:
    """Issue a fresh OTP and mail it. A mail provider failure is logged; the code can be re-sent via /auth/resend-otp."""
    otp = crud_auth.issue_otp(db, user)
    logger.info(f"OTP issued for user {user.id}")
    try:
        mailer.send_verification_email(user.name, user.email, otp.code, lang)
    except requests.RequestException as e:
        logger.error(f"Failed to send verification email to user {user.id}: {e}")
        return False
    return True

def login_response(user: User, message: str) -> Response:
    access_token = create_access_token(data={"userId": user.id})
    response = ResponseHandler.success(
        data={"jwt": access_token, "user": UserOut.model_validate(user)},
        message=message,
    )
    set_auth_cookie(response, access_token)
    return response

@router.post("/register")
def register(request: Request, payload: RegisterUser, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    user = crud_auth.register_user(db, payload)
    send_otp(db, user, lang)
    return ResponseHandler.success(message=translator.t("register_success", lang), code=201)

@router.post("/login")
def login(request: Request, payload: UserLogin, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    user = crud_auth.authenticate_user(db, payload.email, payload.password)

    if not user.is_verified:
        send_otp(db, user, lang)
        raise UnauthorizedException("ACCOUNT_NOT_VERIFIED")
    if user.two_factor_enabled:
        raise UnauthorizedException("TWO_FACTOR_AUTHENTICATION_REQUIRED")

    return login_response(user, translator.t("login_success", lang))

@router.post("/verify-2fa")
def verify_two_factor(request: Request, payload: TwoFactorLogin, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    user = crud_auth.authenticate_two_factor(db, payload.email, payload.password, payload.code)
    return login_response(user, translator.t("login_success", lang))

@router.post("/verify-otp")
def verify_otp(request: Request, payload: VerifyOtp, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    crud_auth.verify_otp(db, payload)
    return ResponseHandler.success(message=translator.t("account_verified", lang))

@router.post("/resend-otp")
def resend_otp(request: Request, payload: ResendOtp, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    user = crud_auth.get_user_for_resend(db, payload.email)
    send_otp(db, user, lang)
    return ResponseHandler.success(message=translator.t("otp_sent", lang))

@router.post("/change-password")
def change_password(request: Request, payload: ChangePassword, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    crud_auth.change_password(db, current_user, payload)
    return ResponseHandler.success(message=translator.t("password_change_success", lang))

@router.post("/password-reset")
def password_reset(request: Request, payload: PasswordResetRequest, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    reset = crud_auth.create_password_reset(db, payload.email)
    # Same answer whether or not the account exists
    if reset:
        try:
            mailer.send_password_reset_email(reset.user.name, reset.user.email, reset.token, lang)
        except requests.RequestException as e:
            logger.error(f"Failed to send password reset email to user {reset.user_id}: {e}")
    return ResponseHandler.success(message=translator.t("password_reset_email_sent", lang))

@router.get("/verify-reset-password-token/{token}")
def verify_reset_password_token(token: str, db: Session = Depends(get_db)):
    crud_auth.get_valid_reset_token(db, token)
    return ResponseHandler.success(message="VALID_RESET_TOKEN")

@router.post("/update-password")
def update_password(request: Request, payload: UpdatePassword, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    crud_auth.update_password(db, payload)
    return ResponseHandler.success(message=translator.t("password_update_success", lang))

@router.get("/2fa/secret")
def get_2fa_secret(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    secret = crud_auth.get_2fa_secret(db, current_user)
    uri = totp.provisioning_uri(secret, current_user.email)
    return ResponseHandler.success(data={
        "secret": secret,
        "otpauth_url": uri,
        "qr_code": totp.qr_code_data_url(uri),
    })

@router.post("/2fa/activate")
def activate_2fa(request: Request, payload: Activate2FA, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    crud_auth.activate_2fa(db, current_user, payload.code)
    return ResponseHandler.success(message=translator.t("2fa_activate_success", lang))

@router.post("/2fa/deactivate")
def deactivate_2fa(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    crud_auth.deactivate_2fa(db, current_user)
    return ResponseHandler.success(message=translator.t("2fa_deactivate_success", lang))

@router.get("")
def get_auth(current_user: User = Depends(get_current_user)):
    return ResponseHandler.success(data=UserOut.model_validate(current_user))

@router.post("/logout")
def logout(request: Request, current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    response = ResponseHandler.success(message=translator.t("logout_success", lang))
    clear_auth_cookie(response)
    return response
