"""
Pydantic schemas for the Blog API.

Request models for the `blog` form field, the blog record as returned to
clients, and one payload type per endpoint for the envelope's `data`.
"""
from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from apps.shared.envelope import CamelModel
from apps.shared.pagination import Direction, Page


class BlogBase(CamelModel):
    """Base schema with common blog fields."""
    title: str = Field(..., min_length=1, max_length=200)
    content: Optional[str] = None
    author: Optional[str] = Field(None, max_length=100)


class BlogCreate(BlogBase):
    """Schema for creating a new blog. Unknown keys (id, imageUrl, ...) are ignored."""
    pass


class BlogUpdate(CamelModel):
    """Schema for updating a blog. All fields optional."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = None
    author: Optional[str] = Field(None, max_length=100)

    @field_validator("title")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        # Can be left out, but not cleared
        if value is None:
            raise ValueError("must not be null")
        return value


class BlogResponse(BlogBase):
    """Schema for blog responses."""
    id: int
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SortResponse(CamelModel):
    property: str
    direction: Direction


class BlogPage(CamelModel):
    """One page of blogs plus pagination metadata."""
    content: list[BlogResponse]
    number: int
    size: int
    total_elements: int
    total_pages: int
    number_of_elements: int
    first: bool
    last: bool
    empty: bool
    sort: list[SortResponse]

    @classmethod
    def from_page(cls, page: Page) -> "BlogPage":
        return cls(
            content=[BlogResponse.model_validate(blog) for blog in page.items],
            number=page.request.page,
            size=page.request.size,
            total_elements=page.total,
            total_pages=page.total_pages,
            number_of_elements=len(page.items),
            first=page.is_first,
            last=page.is_last,
            empty=not page.items,
            sort=[
                SortResponse(property=order.property, direction=order.direction)
                for order in page.request.orders
            ],
        )


# Envelope payloads

class BlogIdData(CamelModel):
    blog_id: int


class BlogData(CamelModel):
    blog: BlogResponse


class BlogPageData(CamelModel):
    blogs: BlogPage


class BlogListData(CamelModel):
    blogs: list[BlogResponse]


class EmptyData(CamelModel):
    pass
