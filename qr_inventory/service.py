"""
Item creation with guaranteed-unique codes.

The resolver's existence check and the insert are not atomic, so two
concurrent requests can resolve to the same code. The loser's insert fails
with ``DuplicateCodeError``; it then takes a freshly generated code and
retries, up to ``max_insert_attempts`` inserts in total.
"""
import logging

from sqlalchemy.orm import Session

from . import crud, models, schemas
from .codes import CodeResolver, DEFAULT_MAX_ATTEMPTS, generate_code
from .errors import CodeResolutionExhaustedError, DuplicateCodeError

logger = logging.getLogger(__name__)

DEFAULT_INSERT_ATTEMPTS = 3


def make_resolver(db: Session, max_attempts: int = DEFAULT_MAX_ATTEMPTS, generate=generate_code) -> CodeResolver:
    """Build a resolver that checks codes against ``db``."""
    return CodeResolver(
        exists=lambda code: crud.code_exists(db, code),
        generate=generate,
        max_attempts=max_attempts,
    )


def create_item(
    db: Session,
    item: schemas.InventoryItemCreate,
    resolver: CodeResolver,
    max_insert_attempts: int = DEFAULT_INSERT_ATTEMPTS,
) -> models.InventoryItem:
    """
    Persist a new item under a unique code.

    Args:
        db: Database session
        item: Item data, possibly with a requested code
        resolver: Resolver bound to the same store as ``db``
        max_insert_attempts: Inserts to try before giving up

    Returns:
        The stored InventoryItem

    Raises:
        CodeResolutionExhaustedError: if no unique code could be stored
    """
    code = resolver.resolve(item.code)
    for attempt in range(1, max_insert_attempts + 1):
        try:
            return crud.create_inventory_item(db, item, code)
        except DuplicateCodeError:
            logger.warning(f"Code '{code}' was taken concurrently (insert attempt {attempt}/{max_insert_attempts})")
            if attempt == max_insert_attempts:
                break
            code = resolver.generate_unique()
    raise CodeResolutionExhaustedError(max_insert_attempts)
