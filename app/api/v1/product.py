from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session
from app.core.dependencies import get_current_user
from app.helpers.response import ResponseHandler
from app.crud import product as crud_product
from app.db.session import get_db
from app.helpers import upload
from app.helpers.translator import Translator
from app.helpers.utils import get_lang_from_request, validate_form
from app.models.enums import ProductStatus
from app.models.user import User
from app.schemas.product import ProductCreate, ProductFilters, ProductOut, ProductUpdate
from app.services.notifications.product_events import broadcast_product_update


router = APIRouter(
    prefix="/product",
    tags=["Product"],
    dependencies=[Depends(get_current_user)]
)
translator = Translator()

def product_filters(
    page: int = Query(1),
    limit: int = Query(10),
    search: Optional[str] = Query(None),
    status: Optional[ProductStatus] = Query(None),
) -> ProductFilters:
    return ProductFilters(page=page, limit=limit, search=search, status=status)

def product_create_form(
    en_name: str = Form(...),
    ar_name: str = Form(...),
    ckb_name: str = Form(...),
    en_desc: str = Form(...),
    ar_desc: str = Form(...),
    ckb_desc: str = Form(...),
    price: Decimal = Form(...),
) -> ProductCreate:
    return validate_form(ProductCreate, {
        "en_name": en_name, "ar_name": ar_name, "ckb_name": ckb_name,
        "en_desc": en_desc, "ar_desc": ar_desc, "ckb_desc": ckb_desc,
        "price": price,
    })

def product_update_form(
    en_name: Optional[str] = Form(None),
    ar_name: Optional[str] = Form(None),
    ckb_name: Optional[str] = Form(None),
    en_desc: Optional[str] = Form(None),
    ar_desc: Optional[str] = Form(None),
    ckb_desc: Optional[str] = Form(None),
    price: Optional[Decimal] = Form(None),
) -> ProductUpdate:
    return validate_form(ProductUpdate, {
        "en_name": en_name, "ar_name": ar_name, "ckb_name": ckb_name,
        "en_desc": en_desc, "ar_desc": ar_desc, "ckb_desc": ckb_desc,
        "price": price,
    })

def product_list_response(total: int, items, filters: ProductFilters):
    data = [ProductOut.model_validate(item) for item in items]
    return ResponseHandler.paginated(jsonable_encoder(data), total, filters.page, filters.limit)

@router.get("")
def get_product_list(filters: ProductFilters = Depends(product_filters), db: Session = Depends(get_db)):
    total, items = crud_product.get_product_list(db, filters)
    return product_list_response(total, items, filters)

@router.get("/user")
def get_user_product_list(filters: ProductFilters = Depends(product_filters), db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    total, items = crud_product.get_product_list(db, filters, owner=current_user)
    return product_list_response(total, items, filters)

@router.get("/user/{user_id}")
def get_user_product_list_by_id(user_id: int, filters: ProductFilters = Depends(product_filters), db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    # id segment kept for older clients; the listing is always the caller's own
    return get_user_product_list(filters, db, current_user)

@router.get("/{product_id}")
def get_product_details(product_id: int, request: Request, db: Session = Depends(get_db)):
    lang = get_lang_from_request(request)
    product = crud_product.get_product_details(db, product_id, lang)
    return ResponseHandler.success(data=jsonable_encoder(product))

@router.post("")
def create_product(
    request: Request,
    background_tasks: BackgroundTasks,
    product_in: ProductCreate = Depends(product_create_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lang = get_lang_from_request(request)
    image_url = upload.save_upload_file(image, crud_product.PRODUCT_BUCKET, required=True)
    try:
        product = crud_product.create_product(db, product_in, image_url, current_user)
    except Exception:
        upload.delete_file_by_url(image_url)
        raise
    data = jsonable_encoder(ProductOut.model_validate(product))
    background_tasks.add_task(broadcast_product_update, data)
    return ResponseHandler.success(message=translator.t("product_created", lang), data=data, code=201)

@router.put("/{product_id}")
def update_product(
    product_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    product_in: ProductUpdate = Depends(product_update_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lang = get_lang_from_request(request)
    image_url = upload.save_upload_file(image, crud_product.PRODUCT_BUCKET)
    try:
        product = crud_product.update_product(db, product_id, product_in, image_url, current_user)
    except Exception:
        upload.delete_file_by_url(image_url)
        raise
    data = jsonable_encoder(ProductOut.model_validate(product))
    background_tasks.add_task(broadcast_product_update, data)
    return ResponseHandler.success(message=translator.t("product_updated", lang), data=data)

@router.delete("/{product_id}")
def delete_product(product_id: int, request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    crud_product.delete_product(db, product_id, current_user)
    background_tasks.add_task(broadcast_product_update, {"id": product_id, "deleted": True})
    return ResponseHandler.success(message=translator.t("product_deleted", lang), data={"id": product_id})

@router.post("/{product_id}/buy")
def buy_product(product_id: int, request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    product = crud_product.buy_product(db, product_id, current_user)
    data = {"id": product.id, "status": product.status.value}
    background_tasks.add_task(broadcast_product_update, data)
    return ResponseHandler.success(message=translator.t("product_buy_success", lang), data=data)

@router.put("/{product_id}/mark-available")
def mark_available(product_id: int, request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lang = get_lang_from_request(request)
    product = crud_product.mark_available(db, product_id, current_user)
    data = {"id": product.id, "status": product.status.value}
    background_tasks.add_task(broadcast_product_update, data)
    return ResponseHandler.success(message=translator.t("product_mark_available_success", lang), data=data)
