from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.orm import Session

from price_catalog.database.connection import get_db
from price_catalog.dependencies.auth import require_admin
from price_catalog.schemas.product import (
    BulkTextImport,
    BulkUpsertResponse,
    MessageResponse,
    ProductCreate,
    ProductGroup,
    ProductResponse,
    ProductUpdate,
)
from price_catalog.services.product_service import (
    BulkUpsertResult,
    bulk_upsert_products,
    create_product,
    delete_product,
    export_products_csv,
    get_product,
    group_products_by_item,
    import_products_text,
    list_products,
    update_product,
    NOT_FOUND_MESSAGE,
)
from price_catalog.core.errors import NotFoundError


router = APIRouter(prefix="/api/products", tags=["Products"])


def _bulk_response(result: BulkUpsertResult) -> BulkUpsertResponse:
    return BulkUpsertResponse(
        count=result.count,
        inserted=result.inserted,
        updated=result.updated,
    )

# LIST
@router.get("", response_model=list[ProductResponse])
def list_all(
    item: Optional[str] = None,
    brand: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return list_products(db, item=item, brand=brand)

# GROUPED (public viewer)
@router.get("/grouped", response_model=list[ProductGroup])
def grouped(search: Optional[str] = None, db: Session = Depends(get_db)):
    return group_products_by_item(db, search=search)

# CSV EXPORT
@router.get("/export", dependencies=[Depends(require_admin)])
def export_csv(db: Session = Depends(get_db)):
    filename = f"prices_{date.today().isoformat()}.csv"
    return Response(
        content=export_products_csv(db),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

# GET BY ID
@router.get("/{product_id}", response_model=ProductResponse)
def get(product_id: int, db: Session = Depends(get_db)):
    product = get_product(db, product_id)
    if not product:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return product

# CREATE
@router.post("", response_model=ProductResponse, dependencies=[Depends(require_admin)])
def create(data: ProductCreate, db: Session = Depends(get_db)):
    return create_product(db, data)

# UPDATE
@router.put("/{product_id}", response_model=ProductResponse, dependencies=[Depends(require_admin)])
def update(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    return update_product(db, product_id, data)

# DELETE
@router.delete("/{product_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete(product_id: int, db: Session = Depends(get_db)):
    delete_product(db, product_id)
    return {"message": "Deleted successfully"}

# BULK UPSERT
@router.post("/bulk", response_model=BulkUpsertResponse, dependencies=[Depends(require_admin)])
def bulk_upsert(payload: Any = Body(...), db: Session = Depends(get_db)):
    # payload shape is checked by the service so a non-array body is a 400, not a 422
    return _bulk_response(bulk_upsert_products(db, payload))

# PASTED TEXT IMPORT
@router.post("/import", response_model=BulkUpsertResponse, dependencies=[Depends(require_admin)])
def import_text(data: BulkTextImport, db: Session = Depends(get_db)):
    return _bulk_response(import_products_text(db, data.text))
