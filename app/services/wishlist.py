# app/services/wishlist.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.models.enums import ProductType
from app.models.user import User
from app.models.wishlist import Wishlist
from app.schemas.common import ProductRef
from app.services.product import get_product

logger = logging.getLogger(__name__)


class WishlistService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def create_wishlist(self, user: User, product_ref: ProductRef) -> Wishlist:
        product = get_product(self.db, product_ref.product_type, product_ref.product_id)

        query = self.db.query(Wishlist).filter(Wishlist.user_id == user.id)
        if ProductType(product_ref.product_type) == ProductType.ACADEMY:
            query = query.filter(Wishlist.academy_id == product.id)
        else:
            query = query.filter(Wishlist.course_id == product.id)
        if query.first():
            raise ConflictError("Product already in wishlist")

        wishlist = Wishlist(user_id=user.id)
        wishlist.set_product(product)
        self.db.add(wishlist)
        self.db.commit()
        self.db.refresh(wishlist)
        return wishlist

    @db_exception
    def delete_wishlist(self, wishlist_id: int, user: User) -> str:
        wishlist = self.db.query(Wishlist).filter(Wishlist.id == wishlist_id).first()
        if not wishlist:
            raise NotFoundError("Wishlist not found")
        if wishlist.user_id != user.id:
            raise UnauthorizedError("User not permitted to delete this wishlist")

        self.db.delete(wishlist)
        self.db.commit()
        return "Wishlist successfully deleted"

    def fetch_wishlists(
        self, user: User, product_type: Optional[ProductType] = None
    ) -> List[Wishlist]:
        query = (
            self.db.query(Wishlist)
            .options(joinedload(Wishlist.course), joinedload(Wishlist.academy))
            .filter(Wishlist.user_id == user.id)
        )
        if product_type is not None:
            query = query.filter(Wishlist.product_type == ProductType(product_type).value)
        return query.order_by(Wishlist.created_at.desc(), Wishlist.id.desc()).all()
