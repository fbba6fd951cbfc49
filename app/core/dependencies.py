from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from jose import JWTError # type: ignore
from app.db.session import get_db
from app.models import User
from app.core.config import settings
from app.core.exceptions import UnauthorizedException
from app.core.security import decode_access_token, oauth2_scheme


def get_current_user(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    token = request.cookies.get(settings.COOKIE_NAME) or bearer_token
    if not token:
        raise UnauthorizedException("unauthorized")
    try:
        payload = decode_access_token(token)
        user_id = payload.get("userId")
        if user_id is None:
            raise UnauthorizedException("invalid_token_payload")
    except JWTError:
        raise UnauthorizedException("invalid_token")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        raise UnauthorizedException("user_not_found")
    return user
