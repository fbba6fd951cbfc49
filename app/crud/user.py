from typing import Optional
from sqlalchemy.orm import Session, joinedload
from app.models.user import User
from app.schemas.user import UpdateProfile
from app.core.exceptions import BadRequestException


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

# Get User by email
def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).options(joinedload(User.otp)).filter(User.email == email.lower()).first()

def ensure_unique_fields(db: Session, email: str, username: str, exclude_user_id: Optional[int] = None):
    """Raise BadRequest when the email or username belongs to another user."""
    email_query = db.query(User.id).filter(User.email == email.lower())
    username_query = db.query(User.id).filter(User.username == username)
    if exclude_user_id is not None:
        email_query = email_query.filter(User.id != exclude_user_id)
        username_query = username_query.filter(User.id != exclude_user_id)

    if email_query.first():
        raise BadRequestException("email_in_use")
    if username_query.first():
        raise BadRequestException("username_in_use")

# Update profile of the current user
def update_profile(db: Session, user: User, payload: UpdateProfile) -> User:
    ensure_unique_fields(db, payload.email, payload.username, exclude_user_id=user.id)

    user.name = payload.name
    user.username = payload.username
    user.email = payload.email.lower()
    user.phone = payload.phone
    db.commit()
    db.refresh(user)
    return user
