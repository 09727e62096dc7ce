"""
Admin review workflow.

A public submission lands in ``pending_products``. Approval copies it into
``products`` and removes the pending row in the same transaction; rejection
just removes it.
"""

import logging
import math

from sqlalchemy.orm import Session

from database import reading, transaction
from errors import NotFound, ValidationError
from models import PendingProduct, Product

logger = logging.getLogger(__name__)


def _parse_price(raw) -> float:
    if isinstance(raw, bool):
        raise ValidationError("Price must be a number")
    try:
        price = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("Price must be a number")
    if not math.isfinite(price):
        raise ValidationError("Price must be a number")
    if price <= 0:
        raise ValidationError("Price must be greater than zero")
    return price


def submit(db: Session, name, description, price) -> PendingProduct:
    if not name or not description or not price:
        raise ValidationError("Missing required fields")
    pending = PendingProduct(
        name=str(name),
        description=str(description),
        price=_parse_price(price),
    )
    with transaction(db):
        db.add(pending)
    db.refresh(pending)
    logger.info("Product %r submitted for review as #%d", pending.name, pending.id)
    return pending


def list_pending(db: Session):
    with reading(db):
        return db.query(PendingProduct).order_by(PendingProduct.id).all()


def approve(db: Session, pending_id: int) -> int:
    """Publish a pending product and return the new product id."""
    with transaction(db):
        pending = db.query(PendingProduct).filter(PendingProduct.id == pending_id).first()
        if pending is None:
            raise NotFound("Pending product not found")
        product = Product(
            name=pending.name,
            description=pending.description,
            price=pending.price,
        )
        db.add(product)
        db.delete(pending)
        db.flush()
        new_id = product.id
    logger.info("Approved pending #%d as product #%d", pending_id, new_id)
    return new_id


def reject(db: Session, pending_id: int) -> None:
    with transaction(db):
        deleted = (
            db.query(PendingProduct)
            .filter(PendingProduct.id == pending_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            raise NotFound("Pending product not found")
    logger.info("Rejected pending #%d", pending_id)
