"""
Blog database models.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, func

from apps.shared.database import Base


class Blog(Base):
    """
    A blog post.

    image_url is only ever set by the image store, never from client input.
    """
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False, index=True)
    content = Column(Text)
    author = Column(String(100))
    image_url = Column(String(500))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    # Wire names accepted in sort specifiers -> model attribute
    SORTABLE_FIELDS = {
        "id": "id",
        "title": "title",
        "author": "author",
        "createdAt": "created_at",
        "created_at": "created_at",
        "updatedAt": "updated_at",
        "updated_at": "updated_at",
    }

    def __repr__(self) -> str:
        return f"<Blog id={self.id} title={self.title!r}>"
