"""
Blog service

Persistence and image lifecycle for blog posts. The API layer only talks to
BlogService; SQLAlchemy and the image store stay behind it.

Create and update are all-or-nothing: a new image is written before the
database transaction and removed again if the transaction fails. A replaced
or deleted blog's old image is only removed after a successful commit.
"""
import logging
from typing import Optional
from fastapi import Depends, UploadFile
from sqlalchemy import or_
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from apps.shared.database import get_db
from apps.shared.pagination import InvalidSortError, Page, PageRequest
from apps.blog import storage
from apps.blog.exceptions import BlogNotFoundError
from apps.blog.models import Blog
from apps.blog.schemas import BlogCreate, BlogUpdate

logger = logging.getLogger(__name__)


def escape_like(value: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so the keyword matches literally."""
    return (
        value.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


class BlogService:
    """
    create_blog and update_blog are awaited from async endpoints: the image is
    written with aiofiles, and the session work runs in the threadpool so the
    event loop never waits on the database.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    async def create_blog(self, blog: BlogCreate, image: Optional[UploadFile] = None) -> Blog:
        image_url = await storage.save_image(image) if storage.has_image(image) else None

        try:
            record = await run_in_threadpool(self._insert, blog, image_url)
        except Exception:
            storage.delete_image(image_url)
            raise

        logger.info(f"Created blog {record.id}")
        return record

    async def update_blog(
        self,
        blog_id: int,
        changes: BlogUpdate,
        image: Optional[UploadFile] = None,
    ) -> Blog:
        record = await run_in_threadpool(self._get_or_raise, blog_id)
        old_image_url = record.image_url
        new_image_url = await storage.save_image(image) if storage.has_image(image) else None

        try:
            await run_in_threadpool(self._apply_changes, record, changes, new_image_url)
        except Exception:
            storage.delete_image(new_image_url)
            raise

        if new_image_url and old_image_url:
            storage.delete_image(old_image_url)

        logger.info(f"Updated blog {blog_id}")
        return record

    def _insert(self, blog: BlogCreate, image_url: Optional[str]) -> Blog:
        record = Blog(**blog.model_dump(), image_url=image_url)
        try:
            self._db.add(record)
            self._db.commit()
        except Exception as e:
            self._db.rollback()
            logger.error(f"Error creating blog: {e}", exc_info=True)
            raise
        self._db.refresh(record)
        return record

    def _apply_changes(self, record: Blog, changes: BlogUpdate, image_url: Optional[str]) -> None:
        blog_id = record.id
        try:
            # Update only provided fields
            for key, value in changes.model_dump(exclude_unset=True).items():
                setattr(record, key, value)
            if image_url:
                record.image_url = image_url
            self._db.commit()
        except Exception as e:
            self._db.rollback()
            logger.error(f"Error updating blog {blog_id}: {e}", exc_info=True)
            raise
        self._db.refresh(record)

    def get_blog_by_id(self, blog_id: int) -> Optional[Blog]:
        return self._db.query(Blog).filter(Blog.id == blog_id).first()

    def get_all_blogs(self, page_request: PageRequest) -> Page[Blog]:
        """
        One page of blogs in the requested order.
        Ties are broken by id so pages don't overlap.
        """
        order_by = []
        for order in page_request.orders:
            if order.property not in Blog.SORTABLE_FIELDS.values():
                raise InvalidSortError(f"Cannot sort by '{order.property}'")
            column = getattr(Blog, order.property)
            order_by.append(column.asc() if order.ascending else column.desc())
        if not any(order.property == "id" for order in page_request.orders):
            order_by.append(Blog.id.asc())

        query = self._db.query(Blog)
        total = query.count()
        items = (
            query.order_by(*order_by)
            .offset(page_request.offset)
            .limit(page_request.size)
            .all()
        )
        return Page(items=items, total=total, request=page_request)

    def delete_blog(self, blog_id: int) -> None:
        record = self._get_or_raise(blog_id)
        image_url = record.image_url

        try:
            self._db.delete(record)
            self._db.commit()
        except Exception as e:
            self._db.rollback()
            logger.error(f"Error deleting blog {blog_id}: {e}", exc_info=True)
            raise

        storage.delete_image(image_url)
        logger.info(f"Deleted blog {blog_id}")

    def search_blogs(self, keyword: str) -> list[Blog]:
        """Case-insensitive substring match on title or content."""
        pattern = f"%{escape_like(keyword)}%"
        return (
            self._db.query(Blog)
            .filter(
                or_(
                    Blog.title.ilike(pattern, escape="\\"),
                    Blog.content.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Blog.id.asc())
            .all()
        )

    def _get_or_raise(self, blog_id: int) -> Blog:
        record = self.get_blog_by_id(blog_id)
        if record is None:
            raise BlogNotFoundError(blog_id)
        return record


def get_blog_service(db: Session = Depends(get_db)) -> BlogService:
    """FastAPI DI factory for BlogService."""
    return BlogService(db)
