# app/routers/review.py
from typing import Union

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_instructor, get_current_user
from app.models.enums import ProductType
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.review import ReviewCreate, ReviewListResponse, ReviewResponse
from app.services.review import ReviewService

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=Union[ReviewResponse, MessageResponse], status_code=201)
def create_review(
    review_in: ReviewCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Review a product you are subscribed to. Reviews wait for the
    instructor's approval before they count towards the rating.
    """
    service = ReviewService(db)
    review, created = service.create_review(
        current_user, review_in.product, review_in.star_rating, review_in.comment
    )
    if not created:
        response.status_code = 200
        return {"message": "Already existing"}
    return review


@router.get("/me", response_model=ReviewListResponse)
def list_my_reviews(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = ReviewService(db)
    reviews, pagination = service.fetch_user_reviews(current_user, page=page, size=size)
    return {"reviews": reviews, **pagination}


@router.get("/{product_type}/{product_id}", response_model=ReviewListResponse)
def list_product_reviews(
    product_type: ProductType,
    product_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Approved reviews of a course or academy."""
    service = ReviewService(db)
    reviews, pagination = service.fetch_product_reviews(
        product_type, product_id, page=page, size=size
    )
    return {"reviews": reviews, **pagination}


@router.post("/{review_id}/approve", response_model=MessageResponse)
def approve_review(
    review_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    service = ReviewService(db)
    return {"message": service.approve_review(review_id, current_user)}


@router.delete("/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    service = ReviewService(db)
    return {"message": service.delete_review(review_id, current_user)}
