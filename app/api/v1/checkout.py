from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
import logging

from app.core.dependencies import get_current_user
from app.core.exceptions import BadRequestException
from app.crud import checkout as crud_checkout
from app.db.session import get_db
from app.helpers.response import ResponseHandler
from app.models.enums import ProductStatus
from app.models.user import User
from app.schemas.checkout import CheckoutSessionCreate, CheckoutSessionOut
from app.services.notifications.product_events import broadcast_product_update
from app.services.payments.stripe_service import WebhookSignatureError, construct_webhook_event

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/checkout",
    tags=["Checkout"],
    dependencies=[Depends(get_current_user)]
)

# Stripe calls this one without a session cookie
webhook_router = APIRouter(
    prefix="/checkout",
    tags=["Webhook"]
)

@router.post("/session")
def create_checkout_session(payload: CheckoutSessionCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = crud_checkout.create_checkout_session(db, payload.product_id, current_user)
    return ResponseHandler.success(data=CheckoutSessionOut(**session))

@webhook_router.post("/webhook")
async def stripe_webhook(request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    try:
        event = construct_webhook_event(payload, signature)
    except WebhookSignatureError as e:
        logger.warning(f"Stripe webhook rejected: {e}")
        raise BadRequestException("invalid_webhook_signature")

    logger.info(f"Stripe webhook received: {event.get('type')} ({event.get('id')})")
    # DB work off the event loop shared with socket.io
    sold_product_id = await run_in_threadpool(crud_checkout.handle_webhook_event, db, event)
    if sold_product_id:
        background_tasks.add_task(broadcast_product_update, {"id": sold_product_id, "status": ProductStatus.SOLD_OUT.value})
    return Response(status_code=status.HTTP_200_OK)
