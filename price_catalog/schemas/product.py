from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal

class ProductBase(BaseModel):
    item_name: str
    brand_name: str
    # NaN / Infinity are valid JSON to Starlette but not storable prices
    price: float = Field(allow_inf_nan=False)

class ProductCreate(ProductBase):
    pass

class ProductUpdate(ProductBase):
    pass

class ProductResponse(ProductBase):
    id: int
    prev_price: float
    updated_at: datetime

    class Config:
        from_attributes = True

class BulkUpsertItem(ProductBase):
    pass

class BulkUpsertResponse(BaseModel):
    message: str = "Bulk update successful"
    count: int
    inserted: int
    updated: int

class MessageResponse(BaseModel):
    message: str


# Public viewer feed: rows grouped by item
class GroupedBrand(BaseModel):
    id: int
    brand_name: str
    price: float
    prev_price: float
    trend: Literal["up", "down", "same"]
    updated_at: datetime

class ProductGroup(BaseModel):
    item_name: str
    min_price: float
    brand_count: int
    brands: List[GroupedBrand]

class BulkTextImport(BaseModel):
    # one `item, brand, price` row per line, comma or tab separated
    text: str
