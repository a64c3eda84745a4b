"""Blog domain errors."""

from apps.shared.errors import BadRequestError, NotFoundError


class BlogNotFoundError(NotFoundError):
    def __init__(self, blog_id: int):
        super().__init__(f"Blog not found with id {blog_id}")
        self.blog_id = blog_id


class InvalidImageError(BadRequestError):
    """Uploaded image has the wrong type or is too large."""
