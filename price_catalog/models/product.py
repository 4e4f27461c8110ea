from sqlalchemy import Column, String, Float, Integer, DateTime, UniqueConstraint
from datetime import datetime
from price_catalog.database.connection import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    item_name = Column(String, nullable=False)
    brand_name = Column(String, nullable=False)

    price = Column(Float, nullable=False)
    # price before the most recent change, drives the up/down indicator
    prev_price = Column(Float, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("item_name", "brand_name", name="uq_products_item_brand"),
    )
