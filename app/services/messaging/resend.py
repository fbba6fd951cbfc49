import logging
import requests
from app.core.config import settings
from app.helpers import email_templates

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


def send_email(to: str, subject: str, html: str) -> bool:
    """
    Send an email through the Resend HTTP API.
    Without RESEND_API_KEY the message is only logged (local development).
    """
    if not settings.RESEND_API_KEY:
        logger.info(f"Email would be sent (RESEND_API_KEY not configured) to={to} subject={subject}")
        return False

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
        "accept": "application/json",
    }
    payload = {
        "from": settings.EMAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    response = requests.post(RESEND_API_URL, json=payload, headers=headers, timeout=10)

    response.raise_for_status()

    logger.info(f"Email sent successfully to {to}")
    return True


def send_verification_email(name: str, email: str, code: str, lang: str = "en") -> bool:
    subject, html = email_templates.account_verification(name=name, code=code, lang=lang)
    return send_email(email, subject, html)


def send_password_reset_email(name: str, email: str, token: str, lang: str = "en") -> bool:
    reset_link = f"{settings.APP_URL}/update-password?token={token}"
    subject, html = email_templates.password_reset(name=name, reset_link=reset_link, lang=lang)
    return send_email(email, subject, html)
