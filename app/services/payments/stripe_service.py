# app/services/payments/stripe_service.py
import json
from decimal import Decimal
import stripe
from app.core.config import settings

stripe.api_key = settings.STRIPE_SECRET_KEY

WEBHOOK_TOLERANCE_SECONDS = 300


class WebhookSignatureError(Exception):
    pass


def to_minor_units(amount) -> int:
    """Stripe expects integer cents."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1")))


def create_checkout_session(name: str, amount, image_url: str, metadata: dict):
    return stripe.checkout.Session.create(
        payment_method_types=["card"],
        mode="payment",
        metadata=metadata,
        line_items=[
            {
                "price_data": {
                    "currency": settings.STRIPE_CURRENCY,
                    "product_data": {
                        "name": name,
                        "images": [image_url] if image_url else [],
                    },
                    "unit_amount": to_minor_units(amount),
                },
                "quantity": 1,
            }
        ],
        success_url=f"{settings.FRONT_URL}{settings.SUCCESS_URL}",
        cancel_url=f"{settings.FRONT_URL}{settings.CANCEL_URL}",
    )


def construct_webhook_event(payload: bytes, signature: str) -> dict:
    """
    Verify the Stripe-Signature header over the raw body and return the decoded event.
    Raises WebhookSignatureError when the signature or payload is not valid.
    """
    if not signature or not settings.STRIPE_WEBHOOK_SECRET:
        raise WebhookSignatureError("missing signature or webhook secret")
    try:
        stripe.WebhookSignature.verify_header(
            payload.decode("utf-8"),
            signature,
            settings.STRIPE_WEBHOOK_SECRET,
            WEBHOOK_TOLERANCE_SECONDS,
        )
        return json.loads(payload)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(str(e))
    except (UnicodeDecodeError, ValueError) as e:
        raise WebhookSignatureError(f"invalid payload: {e}")
