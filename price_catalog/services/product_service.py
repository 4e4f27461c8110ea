import csv
import io
import math
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import String, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from price_catalog.core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from price_catalog.core.logger import setup_logger
from price_catalog.models.product import Product
from price_catalog.schemas.product import (
    BulkUpsertItem,
    GroupedBrand,
    ProductCreate,
    ProductGroup,
    ProductUpdate,
)

logger = setup_logger("services.products")

CONFLICT_MESSAGE = "Item and Brand combination already exists"
NOT_FOUND_MESSAGE = "Product not found"


@dataclass
class BulkUpsertResult:
    count: int
    inserted: int
    updated: int


def _is_unique_violation(error: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed", postgres: "violates unique constraint"
    return "unique" in str(error.orig).lower()


@contextmanager
def _write(db: Session):
    """
    Commit whatever the block staged, or roll it all back.
    Uniqueness violations surface as ConflictError. Any other integrity
    or engine failure becomes a generic InternalError.
    """
    try:
        yield
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if not _is_unique_violation(e):
            logger.error(f"Integrity check failed: {e.orig}", exc_info=True)
            raise InternalError("Internal server error")
        logger.warning(f"Uniqueness violation: {e.orig}")
        raise ConflictError(CONFLICT_MESSAGE)
    except SQLAlchemyError:
        db.rollback()
        logger.error("Store operation failed, transaction rolled back", exc_info=True)
        raise InternalError("Internal server error")


# --------------------------
# LIST PRODUCTS
# --------------------------
def list_products(
    db: Session,
    item: Optional[str] = None,
    brand: Optional[str] = None,
) -> List[Product]:
    """
    All products ordered by item then brand.
    item / brand are optional case-insensitive substring filters, as in the admin grid.
    """
    query = db.query(Product)
    if item:
        query = query.filter(func.lower(Product.item_name, type_=String).contains(item.lower(), autoescape=True))
    if brand:
        query = query.filter(func.lower(Product.brand_name, type_=String).contains(brand.lower(), autoescape=True))
    return (
        query
        .order_by(Product.item_name.asc(), Product.brand_name.asc())
        .all()
    )

# --------------------------
# GET PRODUCT
# --------------------------
def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()

# --------------------------
# CREATE PRODUCT
# --------------------------
def create_product(db: Session, data: ProductCreate) -> Product:
    product = Product(
        **data.model_dump(),
        prev_price=data.price,
        updated_at=datetime.utcnow(),
    )
    with _write(db):
        db.add(product)
    db.refresh(product)

    logger.info(f"Created product {product.id} ({product.item_name} / {product.brand_name})")
    return product

# --------------------------
# UPDATE PRODUCT
# --------------------------
def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
    product = get_product(db, product_id)
    if not product:
        logger.warning(f"Update failed, product {product_id} not found")
        raise NotFoundError(NOT_FOUND_MESSAGE)

    old_price = product.price
    with _write(db):
        # prev_price only moves when the price actually changes
        if data.price != old_price:
            product.prev_price = old_price
        product.item_name = data.item_name
        product.brand_name = data.brand_name
        product.price = data.price
        product.updated_at = datetime.utcnow()
    db.refresh(product)

    logger.info(f"Updated product {product_id}: price {old_price} -> {product.price}")
    return product

# --------------------------
# DELETE PRODUCT
# --------------------------
def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)
    if not product:
        logger.warning(f"Delete failed, product {product_id} not found")
        raise NotFoundError(NOT_FOUND_MESSAGE)

    with _write(db):
        db.delete(product)

    logger.info(f"Deleted product {product_id}")

# --------------------------
# BULK UPSERT
# --------------------------
def _parse_bulk_payload(payload: Any) -> List[BulkUpsertItem]:
    if not isinstance(payload, list):
        raise ValidationError("Invalid input, expected array")

    items = []
    for index, entry in enumerate(payload):
        try:
            items.append(BulkUpsertItem.model_validate(entry))
        except PydanticValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) or "entry" for err in e.errors()})
            raise ValidationError(f"Invalid entry at index {index}: {', '.join(fields)}")
    return items


def bulk_upsert_products(db: Session, payload: Any) -> BulkUpsertResult:
    """
    Insert-or-update every entry, keyed by (item_name, brand_name), in input order.

    An existing row always gets prev_price = its stored price before the new
    price lands, even when the price is unchanged. This intentionally differs
    from update_product.
    The batch is one transaction: nothing persists unless every entry does.
    """
    items = _parse_bulk_payload(payload)

    inserted = 0
    updated = 0
    now = datetime.utcnow()

    with _write(db):
        for item in items:
            product = (
                db.query(Product)
                .filter(
                    Product.item_name == item.item_name,
                    Product.brand_name == item.brand_name,
                )
                .first()
            )

            if product is None:
                db.add(Product(
                    item_name=item.item_name,
                    brand_name=item.brand_name,
                    price=item.price,
                    prev_price=item.price,
                    updated_at=now,
                ))
                # later entries in the same batch must see this row
                db.flush()
                inserted += 1
                continue

            product.prev_price = product.price
            product.price = item.price
            product.updated_at = now
            updated += 1

    logger.info(f"Bulk upsert applied {len(items)} entries ({inserted} inserted, {updated} updated)")
    return BulkUpsertResult(count=len(items), inserted=inserted, updated=updated)

# --------------------------
# TEXT IMPORT / CSV EXPORT
# --------------------------
def parse_bulk_text(text: str) -> List[Dict[str, Any]]:
    """
    Parse pasted spreadsheet rows: `item, brand, price` per line, comma or tab separated.
    Lines without an item, a brand or a numeric price are skipped, so an
    exported CSV (header included) can be pasted straight back.
    """
    rows = []
    for line in (text or "").splitlines():
        if not line.strip():
            continue

        # spreadsheets paste tab separated, exported CSV quotes names with commas
        delimiter = "\t" if "\t" in line else ","
        parts = [part.strip() for part in next(csv.reader([line], delimiter=delimiter))]
        item_name = parts[0]
        brand_name = parts[1] if len(parts) > 1 else ""
        if not item_name or not brand_name:
            continue

        try:
            price = float(parts[2]) if len(parts) > 2 else None
        except ValueError:
            price = None
        if price is None or not math.isfinite(price):
            continue

        rows.append({"item_name": item_name, "brand_name": brand_name, "price": price})

    if not rows:
        raise ValidationError("Invalid clipboard data")
    return rows


def import_products_text(db: Session, text: str) -> BulkUpsertResult:
    return bulk_upsert_products(db, parse_bulk_text(text))


def _format_price(value: float):
    return int(value) if float(value).is_integer() else value


def export_products_csv(db: Session) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Item", "Brand", "Price"])
    for product in list_products(db):
        writer.writerow([product.item_name, product.brand_name, _format_price(product.price)])
    return buffer.getvalue()

# --------------------------
# PUBLIC VIEWER GROUPING
# --------------------------
def price_trend(product: Product) -> str:
    if product.price > product.prev_price:
        return "up"
    if product.price < product.prev_price:
        return "down"
    return "same"


def group_products_by_item(db: Session, search: Optional[str] = None) -> List[ProductGroup]:
    products = list_products(db)

    if search:
        needle = search.lower()
        products = [
            p for p in products
            if needle in p.item_name.lower() or needle in p.brand_name.lower()
        ]

    groups: Dict[str, List[Product]] = {}
    for product in products:
        groups.setdefault(product.item_name, []).append(product)

    return [
        ProductGroup(
            item_name=item_name,
            min_price=min(b.price for b in brands),
            brand_count=len(brands),
            brands=[
                GroupedBrand(
                    id=b.id,
                    brand_name=b.brand_name,
                    price=b.price,
                    prev_price=b.prev_price,
                    trend=price_trend(b),
                    updated_at=b.updated_at,
                )
                for b in brands
            ],
        )
        for item_name, brands in groups.items()
    ]
