# app/routers/post.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user, get_optional_user
from app.models.user import User
from app.schemas.common import MessageResponse, SortOrder
from app.schemas.post import PostCreate, PostListResponse, PostResponse, PostUpdate
from app.services.post import PostService

router = APIRouter(
    prefix="/posts",
    tags=["Posts"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=PostResponse, status_code=201)
def create_post(
    post_in: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PostService(db).create_post(post_in, current_user)


@router.get("/", response_model=PostListResponse)
def list_posts(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search title, overview or description"),
    parents_only: bool = Query(False, description="Skip comments"),
    parent_id: Optional[int] = Query(None, description="Comments of this post"),
    deleted: Optional[bool] = Query(None, description="Admin only"),
    sort: SortOrder = Query(SortOrder.NEWEST),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    posts, pagination = PostService(db).fetch_posts(
        current_user,
        page=page,
        size=size,
        search=search,
        parents_only=parents_only,
        parent_id=parent_id,
        deleted=deleted,
        sort=sort,
    )
    return {"posts": posts, **pagination}


@router.get("/me", response_model=PostListResponse)
def list_my_posts(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    posts, pagination = PostService(db).fetch_user_posts(current_user, page=page, size=size)
    return {"posts": posts, **pagination}


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    return PostService(db).fetch_post(post_id, current_user)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    post_in: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Edits by the author unpublish the post until an admin publishes it again."""
    return PostService(db).update_post(post_id, post_in, current_user)


@router.put("/{post_id}/publish", response_model=MessageResponse)
def publish_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return {"message": PostService(db).publish_post(post_id)}


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    with_children: bool = Query(False, description="Delete comments as well"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {
        "message": PostService(db).delete_post(post_id, current_user, with_children=with_children)
    }
