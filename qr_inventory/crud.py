"""
CRUD (Create, Read, Update, Delete) operations for the QR Inventory service.

This module contains all database operations for inventory management. Items
are addressed by their QR code. Connectivity failures are raised as
``StoreUnavailableError`` and unique-constraint violations on insert as
``DuplicateCodeError``; other store errors propagate unchanged.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import DuplicateCodeError, StoreUnavailableError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (OperationalError, PoolTimeoutError) as e:
        logger.error(f"Database unavailable during {operation}: {e}")
        raise StoreUnavailableError() from e


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a unique-constraint violation apart from other integrity errors."""
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return "unique" in str(orig).lower()


def get_inventory_items(db: Session) -> List[models.InventoryItem]:
    """
    Retrieve every inventory item.

    Args:
        db: Database session

    Returns:
        List of InventoryItem objects ordered by id
    """
    with _store_errors("list"):
        return db.query(models.InventoryItem).order_by(models.InventoryItem.id).all()


def get_inventory_item_by_code(db: Session, code: str) -> Optional[models.InventoryItem]:
    """
    Retrieve an inventory item by its QR code.

    Args:
        db: Database session
        code: QR code to search for

    Returns:
        InventoryItem object or None if not found
    """
    with _store_errors("get"):
        return db.query(models.InventoryItem).filter(models.InventoryItem.code == code).first()


def code_exists(db: Session, code: str) -> bool:
    """Return True if an item with ``code`` is stored."""
    with _store_errors("code lookup"):
        row = db.query(models.InventoryItem.id).filter(models.InventoryItem.code == code).first()
    return row is not None


def create_inventory_item(db: Session, item: schemas.InventoryItemCreate, code: str) -> models.InventoryItem:
    """
    Create a new inventory item under an already resolved code.

    Args:
        db: Database session
        item: Inventory item data; its own ``code`` field is ignored
        code: Code to store the item under

    Returns:
        Created InventoryItem object, including its generated id

    Raises:
        DuplicateCodeError: if another item already holds ``code``
    """
    db_item = models.InventoryItem(
        name=item.name,
        quantity=item.quantity,
        code=code,
        description=item.description,
        image_reference=item.image_reference,
    )
    with _store_errors("create"):
        db.add(db_item)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if _is_unique_violation(e):
                logger.warning(f"Insert rejected, code '{code}' already exists")
                raise DuplicateCodeError(code) from e
            raise
        db.refresh(db_item)
    logger.info(f"Created item '{db_item.name}' with code '{code}'")
    return db_item


def update_inventory_item(db: Session, code: str, item: schemas.InventoryItemUpdate) -> Optional[models.InventoryItem]:
    """
    Update an existing inventory item.

    Args:
        db: Database session
        code: QR code of the item to update
        item: Updated item data (only provided fields will be updated)

    Returns:
        Updated InventoryItem object or None if not found
    """
    with _store_errors("update"):
        db_item = get_inventory_item_by_code(db, code)
        if db_item is None:
            return None

        update_data = item.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_item, key, value)

        db.commit()
        db.refresh(db_item)
    logger.info(f"Updated item '{code}' fields: {sorted(update_data)}")
    return db_item


def update_inventory_quantity(db: Session, code: str, quantity: int) -> Optional[models.InventoryItem]:
    """
    Set only the quantity of an existing inventory item.

    Returns:
        Updated InventoryItem object or None if not found
    """
    with _store_errors("update quantity"):
        db_item = get_inventory_item_by_code(db, code)
        if db_item is None:
            return None
        db_item.quantity = quantity
        db.commit()
        db.refresh(db_item)
    logger.info(f"Set quantity of item '{code}' to {quantity}")
    return db_item


def delete_inventory_item(db: Session, code: str) -> int:
    """
    Delete an inventory item from the database.

    Deleting a code that does not exist is not an error.

    Args:
        db: Database session
        code: QR code of the item to delete

    Returns:
        Number of rows removed (0 or 1)
    """
    with _store_errors("delete"):
        deleted = (
            db.query(models.InventoryItem)
            .filter(models.InventoryItem.code == code)
            .delete(synchronize_session=False)
        )
        db.commit()
    logger.info(f"Deleted item '{code}' ({deleted} row(s))")
    return deleted
