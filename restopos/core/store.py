"""
Persistent Store: named durable collections keyed by string id.

Every operation is a single-entity read or write. Multi-entity sequences
group their calls inside one `in_transaction()` block and pass the
connection through `using_db`.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from tortoise import models
from tortoise.exceptions import BaseORMException

from restopos.core.exceptions import NotFoundError, PersistenceError
from restopos.models import (
    Category,
    MenuItem,
    Order,
    OrderItem,
    Payment,
    Table,
    User,
)

log = logging.getLogger(__name__)

COLLECTIONS: Dict[str, Type[models.Model]] = {
    "users": User,
    "categories": Category,
    "menuItems": MenuItem,
    "tables": Table,
    "orders": Order,
    "orderItems": OrderItem,
    "payments": Payment,
}


def _on(queryset, using_db):
    return queryset if using_db is None else queryset.using_db(using_db)


def _model_for(collection: str) -> Type[models.Model]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


async def get(collection: str, record_id: str, using_db: Any = None) -> Optional[models.Model]:
    """Returns the record with this id, or None."""
    model = _model_for(collection)
    try:
        return await _on(model.get_or_none(id=record_id), using_db)
    except BaseORMException as e:
        raise PersistenceError(f"Failed to read {collection}/{record_id}: {e}") from e


async def require(collection: str, record_id: str, using_db: Any = None) -> models.Model:
    """Like get(), but a missing record raises NotFoundError."""
    record = await get(collection, record_id, using_db=using_db)
    if record is None:
        raise NotFoundError(f"{collection} record {record_id} not found.")
    return record


async def get_all(collection: str, using_db: Any = None) -> List[models.Model]:
    model = _model_for(collection)
    try:
        return await _on(model.all(), using_db)
    except BaseORMException as e:
        raise PersistenceError(f"Failed to read {collection}: {e}") from e


async def put(record: models.Model, using_db: Any = None) -> models.Model:
    """Inserts a new record or overwrites an existing one (last writer wins)."""
    try:
        await record.save(using_db=using_db)
    except BaseORMException as e:
        raise PersistenceError(f"Failed to write {type(record).__name__} {record.pk}: {e}") from e
    return record


async def delete(collection: str, record_id: str, using_db: Any = None) -> None:
    model = _model_for(collection)
    try:
        await _on(model.filter(id=record_id), using_db).delete()
    except BaseORMException as e:
        raise PersistenceError(f"Failed to delete {collection}/{record_id}: {e}") from e


async def get_order_items(order_id: str, using_db: Any = None) -> List[OrderItem]:
    """Foreign-key lookup without an index: scan orderItems and filter."""
    items = await get_all("orderItems", using_db=using_db)
    return [item for item in items if item.order_id == order_id]


async def get_payment_for_order(order_id: str, using_db: Any = None) -> Optional[Payment]:
    payments = await get_all("payments", using_db=using_db)
    return next((p for p in payments if p.order_id == order_id), None)
