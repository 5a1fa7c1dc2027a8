# app/models/product.py
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import declared_attr, relationship

from app.models.enums import ProductType


def product_reference_check(table_name: str) -> CheckConstraint:
    """Exactly one product column is set and it matches ``product_type``."""
    return CheckConstraint(
        "(product_type = 'Course' AND course_id IS NOT NULL AND academy_id IS NULL)"
        " OR "
        "(product_type = 'Academy' AND academy_id IS NOT NULL AND course_id IS NULL)",
        name=f"ck_{table_name}_product_reference",
    )


class ProductReferenceMixin:
    """
    Polymorphic reference to a Course or an Academy.

    The pair (product_type, course_id | academy_id) is only ever written through
    ``set_product`` so the discriminator and the foreign key cannot disagree.
    """

    product_type = Column(String(20), nullable=False, index=True)

    @declared_attr
    def course_id(cls):
        return Column(
            Integer,
            ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        )

    @declared_attr
    def academy_id(cls):
        return Column(
            Integer,
            ForeignKey("academies.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        )

    @declared_attr
    def course(cls):
        return relationship("Course")

    @declared_attr
    def academy(cls):
        return relationship("Academy")

    def set_product(self, product) -> None:
        from app.models.academy import Academy

        if isinstance(product, Academy):
            self.product_type = ProductType.ACADEMY.value
            self.academy_id = product.id
            self.course_id = None
        else:
            self.product_type = ProductType.COURSE.value
            self.course_id = product.id
            self.academy_id = None

    @property
    def product(self):
        if self.product_type == ProductType.ACADEMY.value:
            return self.academy
        return self.course

    @property
    def product_id(self) -> int:
        if self.product_type == ProductType.ACADEMY.value:
            return self.academy_id
        return self.course_id
