from fastapi.responses import JSONResponse
from typing import Any, List
from sqlalchemy.orm import DeclarativeMeta
from fastapi.encoders import jsonable_encoder
def safe_serialize(obj: Any) -> Any:
    if isinstance(obj.__class__, DeclarativeMeta):  # SQLAlchemy model
        obj = {col.name: getattr(obj, col.name) for col in obj.__table__.columns}
    try:
        return jsonable_encoder(obj)
    except (TypeError, ValueError):
        return str(obj)  # final fallback

def build_pagination(total: int, page: int, limit: int) -> dict:
    safe_page = max(1, int(page or 1))
    safe_limit = max(1, int(limit or 10))
    total_page = -(-total // safe_limit)  # ceil
    return {
        "total": total,
        "total_page": total_page,
        "next": safe_page < total_page,
        "page": safe_page,
        "limit": safe_limit,
    }

class ResponseHandler:
    @staticmethod
    def success(
        data: Any = None,
        message: str = "Success",
        code: int = 200
    ) -> JSONResponse:
        return JSONResponse(
            status_code=code,
            content={
                "status": "success",
                "code": code,
                "message": message,
                "data": safe_serialize(data),
            },
        )

    @staticmethod
    def paginated(
        items: List[Any],
        total: int,
        page: int,
        limit: int,
        code: int = 200,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=code,
            content={
                "status": "success",
                "code": code,
                "data": safe_serialize(items),
                **build_pagination(total, page, limit),
            },
        )

    @staticmethod
    def error(
        message: str,
        code: int,
        error: Any = None,
        data: Any = None,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=code,
            content={
                "status": "error",
                "code": code,
                "message": message,
                "data": safe_serialize(data),
                "error": safe_serialize(error or {}),
            },
        )

    @staticmethod
    def bad_request(message: str = "Bad Request", error: Any = None, data: Any = None) -> JSONResponse:
        return ResponseHandler.error(message, 400, error, data)

    @staticmethod
    def unauthorized(message: str = "Unauthorized", error: Any = None, data: Any = None) -> JSONResponse:
        return ResponseHandler.error(message, 401, error, data)

    @staticmethod
    def not_found(message: str = "Not Found", error: Any = None, data: Any = None) -> JSONResponse:
        return ResponseHandler.error(message, 404, error, data)

    @staticmethod
    def internal_error(message: str = "Internal Server Error", error: Any = None, data: Any = None) -> JSONResponse:
        return ResponseHandler.error(message, 500, error, data)
