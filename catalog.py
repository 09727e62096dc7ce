"""
Published product catalog: listing, search and deletion.
"""

import logging

from sqlalchemy import or_, text
from sqlalchemy.orm import Session

from config import Settings
from database import reading, transaction
from errors import NotFound
from models import Product

logger = logging.getLogger(__name__)


def list_products(db: Session):
    with reading(db):
        return db.query(Product).order_by(Product.id).all()


def search_products(db: Session, term):
    """
    Case-insensitive substring match on name or description.
    An empty term matches nothing (unlike list_products).
    """
    if not term:
        return []
    pattern = f"%{term}%"
    with reading(db):
        return (
            db.query(Product)
            .filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
            .order_by(Product.id)
            .all()
        )


def delete_product(db: Session, settings: Settings, product_id: str) -> None:
    """
    Delete a published product by id.

    With ``unsafe_delete_sql`` on, the id is pasted straight into the SQL
    text, which is the lab's SQL injection exercise.
    """
    if not settings.unsafe_delete_sql:
        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise NotFound("Product not found")

    with transaction(db):
        if settings.unsafe_delete_sql:
            result = db.execute(text(f"DELETE FROM products WHERE id = {product_id}"))
        else:
            result = db.execute(
                text("DELETE FROM products WHERE id = :id"), {"id": product_id}
            )
        if result.rowcount == 0:
            raise NotFound("Product not found")
    logger.info("Deleted product %s (%d row(s))", product_id, result.rowcount)
