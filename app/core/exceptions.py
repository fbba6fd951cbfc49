# app/core/exceptions.py
from typing import Any


class AppException(Exception):
    """Domain error carrying a translation key and the HTTP status it maps to."""

    status_code: int = 400

    def __init__(self, key: str, error: Any = None):
        super().__init__(key)
        self.key = key
        self.error = error


class BadRequestException(AppException):
    status_code = 400


class UnauthorizedException(AppException):
    status_code = 401


class ForbiddenException(AppException):
    status_code = 403


class NotFoundException(AppException):
    status_code = 404
