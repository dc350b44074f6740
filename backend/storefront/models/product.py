from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, JSON, String, Text, Index
from sqlalchemy.orm import relationship
from datetime import datetime

from storefront.db.base import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(String, nullable=False, index=True)
    # Canonical "{categorySlug}-{subcategorySlug}" id
    subcategory_id = Column(String, nullable=True, index=True)
    manufacturer = Column(String, nullable=True, index=True)
    images = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    characteristics = relationship(
        "ProductCharacteristic",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductCharacteristic.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_products_created_at_id", "created_at", "id"),
    )


class ProductCharacteristic(Base):
    __tablename__ = "product_characteristics"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    product_id = Column(String, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(255), nullable=False)
    value = Column(Text, nullable=False)

    product = relationship("Product", back_populates="characteristics")

    __table_args__ = (
        Index("ix_product_characteristics_name_value", "name", "value"),
    )
