# app/services/post.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import InvalidInputError, NotFoundError, UnauthorizedError
from app.models.post import Post
from app.models.user import User
from app.schemas.common import SortOrder
from app.schemas.post import PostCreate, PostUpdate
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, db: Session):
        self.db = db

    def _get_post(self, post_id: int) -> Post:
        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise NotFoundError("Post not found")
        return post

    def _get_editable_post(self, post_id: int, user: User) -> Post:
        post = self._get_post(post_id)
        if post.deleted:
            raise NotFoundError("Post not found")
        if not user.is_admin and post.user_id != user.id:
            raise UnauthorizedError("Only an admin or the post creator may modify this post")
        return post

    @staticmethod
    def _unpublish(post: Post) -> None:
        if not post.published:
            return
        post.published = False
        if post.parent is not None:
            post.parent.comments_count = max(post.parent.comments_count - 1, 0)

    @db_exception
    def create_post(self, post_in: PostCreate, user: User) -> Post:
        """Create a post, or a comment when ``parent_id`` is given. Posts wait for an admin to publish them."""
        if post_in.parent_id is not None:
            parent = self.db.query(Post).filter(Post.id == post_in.parent_id).first()
            if not parent or parent.deleted:
                raise NotFoundError("Parent Post not found")

        post = Post(user_id=user.id, **post_in.model_dump())
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)

        logger.info(f"Post {post.id} created by user {user.id}")
        return post

    @db_exception
    def update_post(self, post_id: int, post_in: PostUpdate, user: User) -> Post:
        data = post_in.model_dump(exclude_unset=True, exclude_none=True)
        if not data:
            raise InvalidInputError("No data to update")

        post = self._get_editable_post(post_id, user)
        for field, value in data.items():
            setattr(post, field, value)

        # Edits by the author go back through moderation
        if not user.is_admin:
            self._unpublish(post)

        self.db.commit()
        self.db.refresh(post)
        return post

    @db_exception
    def publish_post(self, post_id: int) -> str:
        post = self._get_post(post_id)
        if post.deleted:
            raise NotFoundError("Post not found")
        if post.published:
            return "Post already published"

        post.published = True
        if post.parent is not None:
            post.parent.comments_count = (post.parent.comments_count or 0) + 1

        self.db.commit()
        logger.info(f"Post {post_id} published")
        return "Post has been successfully published"

    def fetch_post(self, post_id: int, current_user: Optional[User] = None) -> Post:
        post = (
            self.db.query(Post)
            .options(joinedload(Post.user))
            .filter(Post.id == post_id)
            .first()
        )
        if not post:
            raise NotFoundError("Post not found")

        is_admin = current_user is not None and current_user.is_admin
        is_owner = current_user is not None and post.user_id == current_user.id
        if not is_admin and (post.deleted or (not post.published and not is_owner)):
            raise NotFoundError("Post not found")
        return post

    def fetch_user_posts(
        self, user: User, page: int = 1, size: int = None
    ) -> Tuple[List[Post], dict]:
        query = (
            self.db.query(Post)
            .filter(Post.user_id == user.id, Post.deleted.is_(False))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return paginate(query, page, size)

    def fetch_posts(
        self,
        current_user: Optional[User],
        page: int = 1,
        size: int = None,
        search: Optional[str] = None,
        parents_only: bool = False,
        parent_id: Optional[int] = None,
        deleted: Optional[bool] = None,
        sort: SortOrder = SortOrder.NEWEST,
    ) -> Tuple[List[Post], dict]:
        """
        Everybody but admins sees published, non-deleted posts only.
        Admins may filter on ``deleted``.
        """
        query = self.db.query(Post).options(joinedload(Post.user))

        if current_user is None or not current_user.is_admin:
            query = query.filter(Post.published.is_(True), Post.deleted.is_(False))
        elif deleted is not None:
            query = query.filter(Post.deleted.is_(deleted))

        if parent_id is not None:
            query = query.filter(Post.parent_id == parent_id)
        elif parents_only:
            query = query.filter(Post.parent_id.is_(None))

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                (Post.title.ilike(search_pattern))
                | (Post.overview.ilike(search_pattern))
                | (Post.description.ilike(search_pattern))
            )

        if SortOrder(sort) == SortOrder.OLDEST:
            query = query.order_by(Post.created_at.asc(), Post.id.asc())
        else:
            query = query.order_by(Post.created_at.desc(), Post.id.desc())

        return paginate(query, page, size)

    @db_exception
    def delete_post(self, post_id: int, user: User, with_children: bool = False) -> str:
        """
        Soft-delete a post. Its comments are deleted with it when
        ``with_children`` is set, otherwise they become top-level posts.
        """
        post = self._get_editable_post(post_id, user)

        for comment in list(post.comments):
            if with_children:
                comment.deleted = True
            else:
                comment.parent = None
        if not with_children:
            post.comments_count = 0

        self._unpublish(post)
        post.deleted = True
        self.db.commit()

        logger.info(
            f"Post {post_id} deleted by user {user.id} "
            f"({'with' if with_children else 'without'} comments)"
        )
        return "Post has been successfully deleted"
