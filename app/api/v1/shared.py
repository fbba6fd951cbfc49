from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from app.core.dependencies import get_current_user
from app.core.exceptions import BadRequestException
from app.crud import product as crud_product
from app.db.session import get_db
from app.helpers.response import ResponseHandler
from app.helpers.translator import Translator
from app.helpers.utils import get_lang_from_request
from app.models.user import User

router = APIRouter(
    prefix="/shared",
    tags=["Shared"],
    dependencies=[Depends(get_current_user)]
)
translator = Translator()

# table name -> (bucket, image clearing function)
IMAGE_TABLES = {
    "product": (crud_product.PRODUCT_BUCKET, crud_product.clear_image),
}

@router.delete("/delete_old_image")
def delete_old_image(
    request: Request,
    table: str = Query(...),
    bucket: str = Query(...),
    id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lang = get_lang_from_request(request)
    if table not in IMAGE_TABLES:
        raise BadRequestException("invalid_table")
    expected_bucket, clear_image = IMAGE_TABLES[table]
    if bucket != expected_bucket:
        raise BadRequestException("invalid_bucket")

    clear_image(db, id, current_user)
    return ResponseHandler.success(message=translator.t("image_deleted", lang))
