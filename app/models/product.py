# models/product.py
from datetime import datetime, timezone
from sqlalchemy import Column, Enum, Integer, String, Text, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.models.enums import ProductStatus

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Localized names / descriptions
    en_name = Column(String(100), nullable=False)
    ar_name = Column(String(100), nullable=False)
    ckb_name = Column(String(100), nullable=False)
    en_desc = Column(Text, nullable=False)
    ar_desc = Column(Text, nullable=False)
    ckb_desc = Column(Text, nullable=False)

    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String, nullable=True)
    status = Column(Enum(ProductStatus), default=ProductStatus.AVAILABLE, nullable=False, index=True)

    # Audit
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="products")
    orders = relationship("UserOrder", back_populates="product", cascade="all, delete-orphan")
