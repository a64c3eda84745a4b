"""
Blog API

CRUD, paginated listing and keyword search for blog posts with optional
image upload. Every endpoint answers with the standard response envelope;
failures are mapped to status codes by the shared error handlers.
"""
from typing import Optional
from fastapi import FastAPI, APIRouter, Depends, File, Form, Query, UploadFile

from apps.shared.database import Base, engine, check_db_connection
from apps.shared.cors import setup_cors
from apps.shared.envelope import HttpResponse
from apps.shared.errors import setup_error_handlers
from apps.shared.pagination import PageRequest, parse_sort
from apps.blog.exceptions import BlogNotFoundError
from apps.blog.models import Blog
from apps.blog.schemas import (
    BlogCreate,
    BlogUpdate,
    BlogResponse,
    BlogPage,
    BlogIdData,
    BlogData,
    BlogPageData,
    BlogListData,
    EmptyData,
)
from apps.blog.service import BlogService, get_blog_service

# Create tables
Base.metadata.create_all(bind=engine)

# Envelope message per endpoint when it fails
FAILURE_MESSAGES = {
    "create_blog": "Failed to create blog",
    "update_blog": "Failed to update blog",
    "get_blog_by_id": "Failed to retrieve blog",
    "get_all_blogs": "Failed to load blogs",
    "delete_blog": "Failed to delete blog",
    "search_blogs": "Failed to search blogs",
}

app = FastAPI(
    title="Blog Service",
    version="1.0.0",
    description="Blog posts with image uploads, pagination and search",
    docs_url="/api/v1/blogs/docs",
    openapi_url="/api/v1/blogs/openapi.json",
)

# Error handling first so its middleware sits inside CORS
setup_error_handlers(app, FAILURE_MESSAGES)
setup_cors(app)

router = APIRouter(prefix="/api/v1/blogs", tags=["blogs"])


@router.get("/health")
def health():
    """Health check endpoint."""
    db_connected = check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "blog",
        "database": "connected" if db_connected else "disconnected",
    }


@router.post("/create-blog", response_model=HttpResponse[BlogIdData], status_code=201)
async def create_blog(
    blog: str = Form(..., description="Blog as a JSON string"),
    image_file: Optional[UploadFile] = File(None, alias="imageFile"),
    service: BlogService = Depends(get_blog_service),
):
    """Create a blog from the JSON `blog` part and an optional `imageFile`."""
    payload = BlogCreate.model_validate_json(blog)
    saved = await service.create_blog(payload, image_file)
    return HttpResponse[BlogIdData].build(
        201,
        "Blog created successfully",
        "Blog creation processed",
        BlogIdData(blog_id=saved.id),
    ).to_response()


@router.put("/update/{blog_id}", response_model=HttpResponse[BlogIdData])
async def update_blog(
    blog_id: int,
    blog: str = Form(..., description="Changed fields as a JSON string"),
    image_file: Optional[UploadFile] = File(None, alias="imageFile"),
    service: BlogService = Depends(get_blog_service),
):
    """
    Update a blog. Only fields present in the JSON change; a new image
    replaces the old one. Nothing is saved if any part fails.
    """
    changes = BlogUpdate.model_validate_json(blog)
    updated = await service.update_blog(blog_id, changes, image_file)
    return HttpResponse[BlogIdData].build(
        200,
        "Blog updated successfully",
        "Blog update processed",
        BlogIdData(blog_id=updated.id),
    ).to_response()


@router.get("/all-blogs", response_model=HttpResponse[BlogPageData])
def get_all_blogs(
    page: int = Query(0, ge=0, description="Page index (0-based)"),
    size: int = Query(5, ge=1, le=100, description="Blogs per page"),
    sort: list[str] = Query(["id,asc"], description="Repeatable 'property,direction', e.g. createdAt,desc"),
    service: BlogService = Depends(get_blog_service),
):
    """List blogs one page at a time."""
    orders = parse_sort(sort, allowed=Blog.SORTABLE_FIELDS)
    page_request = PageRequest(page=page, size=size, orders=tuple(orders))
    result = service.get_all_blogs(page_request)
    return HttpResponse[BlogPageData].build(
        200,
        "Blogs loaded successfully",
        "Blog retrieval processed",
        BlogPageData(blogs=BlogPage.from_page(result)),
    ).to_response()


@router.get("/search", response_model=HttpResponse[BlogListData])
def search_blogs(
    keyword: str = Query(..., description="Matched against title and content"),
    service: BlogService = Depends(get_blog_service),
):
    """Search blogs by keyword. No match is an empty list, not an error."""
    results = service.search_blogs(keyword)
    return HttpResponse[BlogListData].build(
        200,
        "Blogs found successfully",
        "Blog search processed",
        BlogListData(blogs=[BlogResponse.model_validate(b) for b in results]),
    ).to_response()


@router.get("/{blog_id}", response_model=HttpResponse[BlogData])
def get_blog_by_id(blog_id: int, service: BlogService = Depends(get_blog_service)):
    """Get a single blog by id."""
    blog = service.get_blog_by_id(blog_id)
    if blog is None:
        raise BlogNotFoundError(blog_id)
    return HttpResponse[BlogData].build(
        200,
        "Blog found successfully",
        "Blog retrieval processed",
        BlogData(blog=BlogResponse.model_validate(blog)),
    ).to_response()


@router.delete("/{blog_id}", response_model=HttpResponse[EmptyData])
def delete_blog(blog_id: int, service: BlogService = Depends(get_blog_service)):
    """Delete a blog and its image."""
    service.delete_blog(blog_id)
    return HttpResponse[EmptyData].build(
        200,
        "Blog deleted successfully",
        "Blog deletion processed",
        EmptyData(),
    ).to_response()


app.include_router(router)
