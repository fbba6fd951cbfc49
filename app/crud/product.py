import logging
from typing import Optional, Tuple, List
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload
from app.core.exceptions import BadRequestException, ForbiddenException, NotFoundException
from app.helpers import upload
from app.helpers.utils import localize
from app.models.enums import ProductStatus
from app.models.order import UserOrder
from app.models.product import Product
from app.models.user import User
from app.schemas.product import ProductCreate, ProductDetailOut, ProductFilters, ProductUpdate

logger = logging.getLogger(__name__)

PRODUCT_BUCKET = "products"


def _with_relations(query):
    return query.options(
        joinedload(Product.user),
        selectinload(Product.orders).joinedload(UserOrder.user),
    )

def get_product_list(db: Session, filters: ProductFilters, owner: Optional[User] = None) -> Tuple[int, List[Product]]:
    page = max(1, filters.page)
    limit = max(1, filters.limit)

    query = db.query(Product)

    # Search by name in all three languages; % and _ match literally
    if filters.search:
        query = query.filter(or_(
            Product.en_name.icontains(filters.search, autoescape=True),
            Product.ar_name.icontains(filters.search, autoescape=True),
            Product.ckb_name.icontains(filters.search, autoescape=True),
        ))
    if filters.status:
        query = query.filter(Product.status == filters.status)
    if owner is not None:
        query = query.filter(Product.user_id == owner.id)

    total = query.count()
    items = (
        _with_relations(query)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return total, items

def get_product(db: Session, product_id: int) -> Product:
    product = _with_relations(db.query(Product)).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundException("product_not_found")
    return product

def get_product_details(db: Session, product_id: int, lang: str) -> ProductDetailOut:
    product = get_product(db, product_id)
    return ProductDetailOut.model_validate(product).model_copy(update={
        "name": localize(product, "name", lang),
        "description": localize(product, "desc", lang),
    })

def _get_owned_product(db: Session, product_id: int, current_user: User) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundException("product_not_found")
    if product.user_id != current_user.id:
        raise ForbiddenException("product_unauthorized")
    return product

def create_product(db: Session, product_in: ProductCreate, image_url: str, current_user: User) -> Product:
    product = Product(
        **product_in.model_dump(),
        image=image_url,
        user_id=current_user.id,
        status=ProductStatus.AVAILABLE,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product

def update_product(db: Session, product_id: int, product_in: ProductUpdate, image_url: Optional[str], current_user: User) -> Product:
    product = _get_owned_product(db, product_id, current_user)

    update_data = product_in.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data and not image_url:
        raise BadRequestException("empty_body")

    old_image = product.image
    for field, value in update_data.items():
        setattr(product, field, value)
    if image_url:
        product.image = image_url

    db.commit()
    db.refresh(product)

    # Old file goes only once the new reference is stored
    if image_url:
        upload.replace_file(old_image, image_url)
    return product

def delete_product(db: Session, product_id: int, current_user: User):
    product = _get_owned_product(db, product_id, current_user)
    image = product.image

    db.delete(product)
    db.commit()

    if image:
        upload.delete_file_by_url(image)

def record_purchase(db: Session, product_id: int, buyer_id: int, checkout_session_id: Optional[str] = None) -> bool:
    """
    Flip AVAILABLE -> SOLD_OUT and insert the order in one transaction.
    Returns False when the product was no longer AVAILABLE.
    """
    try:
        updated = (
            db.query(Product)
            .filter(Product.id == product_id, Product.status == ProductStatus.AVAILABLE)
            .update({Product.status: ProductStatus.SOLD_OUT}, synchronize_session=False)
        )
        if updated == 0:
            db.rollback()
            logger.info(f"Product {product_id} is no longer available, purchase by user {buyer_id} skipped")
            return False

        db.add(UserOrder(user_id=buyer_id, product_id=product_id, checkout_session_id=checkout_session_id))
        db.commit()
    except Exception:
        db.rollback()
        raise
    return True

def ensure_purchasable(product: Product, buyer: User):
    if product.status == ProductStatus.SOLD_OUT:
        raise ForbiddenException("product_already_sold")
    if product.user_id == buyer.id:
        raise ForbiddenException("cannot_buy_own")

def buy_product(db: Session, product_id: int, current_user: User) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundException("product_not_found")
    ensure_purchasable(product, current_user)

    if not record_purchase(db, product_id, current_user.id):
        # Someone else bought it between the read and the update
        raise ForbiddenException("product_already_sold")

    db.refresh(product)
    return product

def mark_available(db: Session, product_id: int, current_user: User) -> Product:
    product = _get_owned_product(db, product_id, current_user)
    if product.status != ProductStatus.SOLD_OUT:
        raise ForbiddenException("product_not_sold_yet")

    try:
        product.status = ProductStatus.AVAILABLE
        db.query(UserOrder).filter(UserOrder.product_id == product_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    return product

def clear_image(db: Session, product_id: int, current_user: User) -> Product:
    product = _get_owned_product(db, product_id, current_user)
    if product.image:
        upload.delete_file_by_url(product.image)
    product.image = None
    db.commit()
    db.refresh(product)
    return product
