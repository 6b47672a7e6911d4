# bakery_ledger/core.py
import logging
from typing import List

from .database import LedgerDB
from .exceptions import InvalidOperation, NotFound
from .models import (
    MAX_NAME_LENGTH, U32_MAX, Category, Product, ProductPayload, StockPayload
)

# This file contains the ledger operations.  Each one validates its input,
# then does a single read-modify-write against the product store.

logger = logging.getLogger(__name__)


# ---------------------------
# Validation
# ---------------------------
def validate_product_payload(payload: ProductPayload) -> None:
    if not payload.name.strip():
        raise InvalidOperation("Product name cannot be empty.")
    if len(payload.name) > MAX_NAME_LENGTH:
        raise InvalidOperation(f"Product name cannot be longer than {MAX_NAME_LENGTH} characters.")
    try:
        payload.name.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidOperation("Product name must be valid Unicode text.")
    if payload.quantity == 0:
        raise InvalidOperation("Product quantity must be greater than zero.")


def validate_stock_payload(payload: StockPayload) -> None:
    if payload.amount == 0:
        raise InvalidOperation("Stock amount must be greater than zero.")


# ---------------------------
# Helpers
# ---------------------------
def _require(db: LedgerDB, product_id: int, msg: str) -> Product:
    product = db.products.get(product_id)
    if product is None:
        raise _not_found(msg)
    return product


def _touch(db: LedgerDB, product: Product) -> int:
    # updated_at never moves backwards, even if the wall clock does
    floor = product.updated_at if product.updated_at is not None else product.created_at
    return max(db.clock(), floor)


def _not_found(msg: str) -> NotFound:
    logger.warning(msg)
    return NotFound(msg)


def _reject(msg: str) -> InvalidOperation:
    logger.warning(msg)
    return InvalidOperation(msg)


# ---------------------------
# Queries
# ---------------------------
def get_product(db: LedgerDB, product_id: int) -> Product:
    with db.exclusive():
        return _require(db, product_id, f"A product with id={product_id} was not found")


def get_stock(db: LedgerDB, product_id: int) -> int:
    with db.exclusive():
        return _require(db, product_id, f"A product with id={product_id} was not found").quantity


def search_by_category(db: LedgerDB, category: Category) -> List[Product]:
    with db.exclusive():
        return db.products.scan_by_category(category)


def list_all_products(db: LedgerDB) -> List[Product]:
    with db.exclusive():
        return db.products.scan_all()


# ---------------------------
# Mutations
# ---------------------------
def add_product(db: LedgerDB, payload: ProductPayload) -> Product:
    validate_product_payload(payload)

    with db.exclusive():
        product_id = db.ids.next_id()
        product = Product(
            id=product_id,
            name=payload.name,
            category=payload.category,
            quantity=payload.quantity,
            created_at=db.clock(),
            updated_at=None,
        )
        db.products.insert_or_replace(product_id, product)

    logger.info("Added product %s (%s, qty=%s)", product_id, product.category.value, product.quantity)
    return product


def update_product(db: LedgerDB, product_id: int, payload: ProductPayload) -> Product:
    validate_product_payload(payload)

    with db.exclusive():
        product = _require(db, product_id, f"Product with id={product_id} not found")
        updated = product.model_copy(update={
            "name": payload.name,
            "category": payload.category,
            "quantity": payload.quantity,
            "updated_at": _touch(db, product),
        })
        db.products.insert_or_replace(product_id, updated)

    logger.info("Updated product %s", product_id)
    return updated


def add_quantity(db: LedgerDB, product_id: int, payload: StockPayload) -> Product:
    validate_stock_payload(payload)

    with db.exclusive():
        product = _require(
            db, product_id,
            f"Couldn't add quantity to product with id={product_id}. Product not found",
        )
        if product.quantity + payload.amount > U32_MAX:
            raise _reject(
                f"Cannot add {payload.amount} to product with id={product_id}: "
                f"quantity would exceed {U32_MAX}"
            )
        updated = product.model_copy(update={
            "quantity": product.quantity + payload.amount,
            "updated_at": _touch(db, product),
        })
        db.products.insert_or_replace(product_id, updated)

    logger.info("Added %s to product %s, now %s", payload.amount, product_id, updated.quantity)
    return updated


def offload_quantity(db: LedgerDB, product_id: int, payload: StockPayload) -> Product:
    validate_stock_payload(payload)

    with db.exclusive():
        product = _require(
            db, product_id,
            f"Couldn't offload a product with id={product_id}. Product not found",
        )
        if product.quantity == 0:
            raise _reject(
                f"Product with id={product_id} cannot be offloaded because the quantity is 0"
            )
        if payload.amount > product.quantity:
            raise _reject(
                "Cannot offload more than available quantity. "
                f"Available: {product.quantity}, Trying to offload: {payload.amount}"
            )
        updated = product.model_copy(update={
            "quantity": product.quantity - payload.amount,
            "updated_at": _touch(db, product),
        })
        db.products.insert_or_replace(product_id, updated)

    logger.info("Offloaded %s from product %s, now %s", payload.amount, product_id, updated.quantity)
    return updated


def remove_product(db: LedgerDB, product_id: int) -> Product:
    with db.exclusive():
        removed = db.products.remove(product_id)
    if removed is None:
        raise _not_found(f"Couldn't delete a product with id={product_id}. Product not found")
    logger.info("Removed product %s", product_id)
    return removed


def clear_all_products(db: LedgerDB) -> None:
    with db.exclusive():
        count = db.products.clear_all()
    logger.info("Cleared %s products", count)
