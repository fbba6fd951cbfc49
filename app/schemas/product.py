from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from app.models.enums import ProductStatus
from app.schemas.user import UserSummary

# ---------- Product Create / Update ----------
class ProductBase(BaseModel):
    en_name: str = Field(..., min_length=1, max_length=100)
    ar_name: str = Field(..., min_length=1, max_length=100)
    ckb_name: str = Field(..., min_length=1, max_length=100)
    en_desc: str = Field(..., min_length=1)
    ar_desc: str = Field(..., min_length=1)
    ckb_desc: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseModel):
    en_name: Optional[str] = Field(None, min_length=1, max_length=100)
    ar_name: Optional[str] = Field(None, min_length=1, max_length=100)
    ckb_name: Optional[str] = Field(None, min_length=1, max_length=100)
    en_desc: Optional[str] = Field(None, min_length=1)
    ar_desc: Optional[str] = Field(None, min_length=1)
    ckb_desc: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)

class ProductFilters(BaseModel):
    page: int = 1
    limit: int = 10
    search: Optional[str] = None
    status: Optional[ProductStatus] = None

# ---------- Output ----------
class OrderOut(BaseModel):
    id: int
    user_id: int
    product_id: int
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    model_config = {
        "from_attributes": True
    }

class ProductOut(ProductBase):
    id: int
    user_id: int
    image: Optional[str] = None
    status: ProductStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    orders: List[OrderOut] = []

    model_config = {
        "from_attributes": True
    }

class ProductDetailOut(ProductOut):
    # Resolved from the en/ar/ckb columns for the caller's language
    name: Optional[str] = None
    description: Optional[str] = None
