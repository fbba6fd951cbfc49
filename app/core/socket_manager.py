import logging
import socketio
from jose import JWTError # type: ignore
from socketio.exceptions import ConnectionRefusedError
from app.core.config import settings
from app.core.security import decode_access_token

logger = logging.getLogger(__name__)

PRODUCTS_NAMESPACE = "/products"

sio = socketio.AsyncServer(
    cors_allowed_origins=[settings.FRONT_URL],
    async_mode="asgi",
)

@sio.on("connect", namespace=PRODUCTS_NAMESPACE)
async def connect(sid, environ, auth):
    token = (auth or {}).get("token")
    if not token:
        raise ConnectionRefusedError("unauthorized")

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise ConnectionRefusedError("invalid_token")

    user_id = payload.get("userId")
    if user_id is None:
        raise ConnectionRefusedError("invalid_token_payload")

    await sio.save_session(sid, {"user_id": user_id}, namespace=PRODUCTS_NAMESPACE)
    logger.info(f"Socket {sid} connected to {PRODUCTS_NAMESPACE} as user {user_id}")

@sio.on("disconnect", namespace=PRODUCTS_NAMESPACE)
async def disconnect(sid):
    logger.info(f"Socket {sid} disconnected from {PRODUCTS_NAMESPACE}")
