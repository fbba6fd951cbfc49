import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import BadRequestException
from app.crud import product as crud_product
from app.crud.user import get_user_by_id
from app.models.order import UserOrder
from app.models.user import User
from app.services.payments import stripe_service

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def absolute_url(path: str) -> str:
    if not path or path.startswith("http"):
        return path
    return f"{settings.API_URL.rstrip('/')}{path}"

def create_checkout_session(db: Session, product_id: int, current_user: User) -> dict:
    product = crud_product.get_product(db, product_id)
    crud_product.ensure_purchasable(product, current_user)

    # Product stays AVAILABLE until the webhook confirms payment
    session = stripe_service.create_checkout_session(
        name=product.en_name,
        amount=product.price,
        image_url=absolute_url(product.image),
        metadata={
            "product_id": str(product.id),
            "owner_id": str(product.user_id),
            "buyer_id": str(current_user.id),
        },
    )
    logger.info(f"Checkout session {session.id} created for product {product.id} by user {current_user.id}")
    return {"id": session.id, "url": session.url}

def handle_webhook_event(db: Session, event: dict) -> Optional[int]:
    """
    Apply a verified Stripe event. Returns the id of the product that was sold, if any.
    Redelivery of an already processed session is a no-op.
    """
    event_type = event.get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info(f"Ignoring Stripe event {event.get('id')} of type {event_type}")
        return None

    session = (event.get("data") or {}).get("object") or {}
    session_id = session.get("id")
    metadata = session.get("metadata") or {}
    try:
        product_id = int(metadata["product_id"])
        buyer_id = int(metadata["buyer_id"])
    except (KeyError, TypeError, ValueError):
        raise BadRequestException("invalid_webhook_metadata", error={"metadata": metadata})

    if session.get("payment_status", "paid") != "paid":
        logger.info(f"Checkout session {session_id} completed without payment, skipping")
        return None

    if session_id and db.query(UserOrder.id).filter(UserOrder.checkout_session_id == session_id).first():
        logger.info(f"Checkout session {session_id} already processed")
        return None

    if not get_user_by_id(db, buyer_id):
        logger.error(f"Checkout session {session_id}: buyer {buyer_id} not found")
        return None

    try:
        recorded = crud_product.record_purchase(db, product_id, buyer_id, checkout_session_id=session_id)
    except IntegrityError:
        # concurrent delivery of the same session won the unique constraint
        logger.info(f"Checkout session {session_id} already processed")
        return None

    if not recorded:
        logger.error(f"Checkout session {session_id} paid for product {product_id} which is not available")
        return None
    return product_id
