import logging
from app.core.socket_manager import PRODUCTS_NAMESPACE, sio

logger = logging.getLogger(__name__)

PRODUCT_UPDATE_EVENT = "productUpdate"


async def broadcast_product_update(payload: dict):
    """Push a (partial) product to every client on the products namespace."""
    await sio.emit(PRODUCT_UPDATE_EVENT, payload, namespace=PRODUCTS_NAMESPACE)
    logger.debug(f"Broadcast {PRODUCT_UPDATE_EVENT} for product {payload.get('id')}")
