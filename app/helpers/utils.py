import secrets
from datetime import datetime, timezone
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.helpers.translator import Translator

translator = Translator()

def get_lang_from_request(request: Request) -> str:
    lang = request.headers.get("x-lang") or request.headers.get("Accept-Language", "en")
    # "ar-IQ,ar;q=0.9" -> "ar"
    lang = lang.split(",")[0].split(";")[0].strip().lower()
    if lang not in translator.supported_langs:
        lang = lang.split("-")[0]
    return translator.resolve_lang(lang)

def generate_otp_code() -> str:
    """Six digit numeric code, never starting with zero."""
    return str(100000 + secrets.randbelow(900000))

def generate_reset_token() -> str:
    return secrets.token_hex(32)

def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def is_expired(expires_at: datetime) -> bool:
    return datetime.now(timezone.utc) > as_utc(expires_at)

def localize(obj, field: str, lang: str):
    """Pick obj.<lang>_<field>, falling back to English."""
    return getattr(obj, f"{lang}_{field}", None) or getattr(obj, f"en_{field}", None)

def validate_form(model, data: dict):
    """Build a pydantic model from multipart form fields, reporting errors like a JSON body would."""
    try:
        return model.model_validate({k: v for k, v in data.items() if v is not None})
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))
