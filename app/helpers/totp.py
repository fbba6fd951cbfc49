import base64
from io import BytesIO
import pyotp
import qrcode

from app.core.config import settings

def generate_secret() -> str:
    return pyotp.random_base32()

def verify_code(secret: str, code: str) -> bool:
    if not secret or not code:
        return False
    # accept the previous/next 30s step to absorb clock drift
    return pyotp.TOTP(secret).verify(code, valid_window=1)

def generate_self_checked_secret() -> str:
    """New secret, verified against a token generated from it before it is handed out."""
    secret = generate_secret()
    token = pyotp.TOTP(secret).now()
    if not verify_code(secret, token):
        raise ValueError("failed_2fa_secret_generation")
    return secret

def provisioning_uri(secret: str, label: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(name=label, issuer_name=settings.APP_NAME)

def qr_code_data_url(data: str) -> str:
    qr = qrcode.QRCode(box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
