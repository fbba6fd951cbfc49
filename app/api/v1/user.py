from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session
from app.core.dependencies import get_current_user
from app.core.exceptions import ForbiddenException
from app.crud import user as crud_user
from app.db.session import get_db
from app.helpers.response import ResponseHandler
from app.helpers.translator import Translator
from app.helpers.utils import get_lang_from_request
from app.models.user import User
from app.schemas.user import UpdateProfile, UserOut

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)]
)
translator = Translator()

@router.put("/{user_id}")
def update_profile(user_id: int, payload: UpdateProfile, request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    # Only the signed-in user's own profile can be edited
    if user_id != current_user.id:
        raise ForbiddenException("profile_unauthorized")
    user = crud_user.update_profile(db, current_user, payload)
    return ResponseHandler.success(
        message=translator.t("profile_update_success", lang),
        data=jsonable_encoder(UserOut.model_validate(user)),
    )
