import logging
import os

import socketio
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import auth, checkout, product, shared, user
from app.core.config import settings
from app.core.exceptions import AppException
from app.core.socket_manager import sio
from app.helpers.response import ResponseHandler
from app.helpers.translator import Translator
from app.helpers.upload import URL_PREFIX
from app.helpers.utils import get_lang_from_request

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

translator = Translator()

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=f"{settings.APP_NAME} API",
        version="1.0",
        description="Marketplace API. Authenticate with the session cookie or a bearer JWT.",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        },
        "CookieAuth": {
            "type": "apiKey",
            "in": "cookie",
            "name": settings.COOKIE_NAME,
        },
    }
    for path in openapi_schema["paths"].values():
        for operation in path.values():
            operation["security"] = [{"BearerAuth": []}, {"CookieAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app = FastAPI(title=f"{settings.APP_NAME} API", version="1.0")

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    lang = get_lang_from_request(request)
    error = {"key": exc.key}
    params = {}
    if exc.error:
        error["details"] = exc.error
        if isinstance(exc.error, dict):
            params = exc.error
    return ResponseHandler.error(
        message=translator.t(exc.key, lang, **params),
        code=exc.status_code,
        error=error,
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    lang = get_lang_from_request(request)
    return ResponseHandler.bad_request(
        message=translator.t("validation_failed", lang),
        error={"details": exc.errors()},
    )

@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    lang = get_lang_from_request(request)
    if exc.status_code == 401:
        return ResponseHandler.unauthorized(message=translator.t("unauthorized", lang))
    if exc.status_code == 404:
        return ResponseHandler.not_found(message=translator.t("route_not_found", lang))
    return ResponseHandler.error(
        message=translator.t("something_went_wrong", lang),
        code=exc.status_code,
        data={"detail": exc.detail},
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    lang = get_lang_from_request(request)
    return ResponseHandler.internal_error(message=translator.t("something_went_wrong", lang))

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.openapi = custom_openapi

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.include_router(auth.router)
app.include_router(user.router)
app.include_router(product.router)
app.include_router(checkout.router)
app.include_router(checkout.webhook_router)
app.include_router(shared.router)

# Entry point for uvicorn: socket.io at /socket.io, everything else to FastAPI
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
