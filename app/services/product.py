# app/services/product.py
from typing import List, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import ProductNotFoundError
from app.models.academy import Academy
from app.models.course import Course
from app.models.enums import ProductType
from app.models.tag import Tag

Product = Union[Course, Academy]


def find_product(
    db: Session, product_type: ProductType, product_id: int
) -> Optional[Product]:
    """Resolve a (type, id) reference; deleted academies do not resolve."""
    if ProductType(product_type) == ProductType.ACADEMY:
        return (
            db.query(Academy)
            .filter(Academy.id == product_id, Academy.deleted.is_(False))
            .first()
        )
    return db.query(Course).filter(Course.id == product_id).first()


def get_product(db: Session, product_type: ProductType, product_id: int) -> Product:
    product = find_product(db, product_type, product_id)
    if product is None:
        raise ProductNotFoundError(
            f"{ProductType(product_type).value} with id {product_id} not found"
        )
    return product


def upsert_tags(db: Session, names: List[str]) -> List[Tag]:
    """Fetch tags by case-insensitive name, creating the missing ones in upper case."""
    tags = []
    seen = set()
    for raw in names:
        name = raw.strip().upper()
        if not name or name in seen:
            continue
        seen.add(name)
        tag = db.query(Tag).filter(func.upper(Tag.name) == name).first()
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
            db.flush()
        tags.append(tag)
    return tags
