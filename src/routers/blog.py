"""Blog router for categories and blog posts."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, status, UploadFile, File, Form, Path, Query
from pydantic import BaseModel, ValidationError as PydanticValidationError

from src.auth import get_optional_user, require_doctor
from src.errors import NotFound, ValidationError, format_validation_errors
from src.listing import get_post, list_by_category, list_mine, list_published
from src.models import User
from src.policy import ensure_can_delete, ensure_can_edit
from src.repository import (
    CategoryRepository,
    PostRepository,
    get_category_repository,
    get_post_repository,
)
from src.schemas import MAX_ID, BlogPostCreate, BlogPostDetail, BlogPostUpdate, CategoryOut
from src.uploads import discard_image, has_image, save_image

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blog", tags=["Blog"])


def parse_form(schema: type, fields: dict) -> BaseModel:
    """
    Validate submitted form fields against a schema.

    Fields that were not submitted are left out so that required ones are
    reported as missing and optional ones keep their defaults.

    Raises:
        ValidationError: With per-field details if validation fails
    """
    submitted = {name: value for name, value in fields.items() if value is not None}
    try:
        return schema(**submitted)
    except PydanticValidationError as e:
        details = format_validation_errors(e.errors())
        logger.warning(f"Form validation failed: {details}")
        raise ValidationError("Validation failed", errors=details)


def ensure_category_exists(categories: CategoryRepository, category_id: int) -> None:
    if categories.get(category_id) is None:
        logger.warning(f"Category not found: {category_id}")
        raise NotFound("Category not found")


@router.get("/categories")
def list_categories(categories: CategoryRepository = Depends(get_category_repository)):
    """List every blog category."""
    logger.info("Fetching all categories")
    return {
        "success": True,
        "data": [CategoryOut.model_validate(category) for category in categories.list_all()],
    }


@router.post("/posts", status_code=status.HTTP_201_CREATED)
def create_post(
    title: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    is_draft: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_doctor),
    posts: PostRepository = Depends(get_post_repository),
    categories: CategoryRepository = Depends(get_category_repository)
):
    """
    Create a blog post, optionally with an image.

    Args:
        title: Post title, at least 5 characters
        summary: Post summary, at least 10 characters
        content: Post body, at least 50 characters
        category_id: Id of an existing category
        is_draft: "true" to keep the post private to its author
        image: Optional image file
        current_user: Authenticated doctor
        posts: Post repository
        categories: Category repository

    Returns:
        dict: Envelope with the created post

    Raises:
        ValidationError: If fields are missing or too short, or the image is rejected
        NotFound: If the category does not exist
    """
    logger.info(f"Create post request by: {current_user.username}")

    post_data = parse_form(BlogPostCreate, {
        "title": title,
        "summary": summary,
        "content": content,
        "category_id": category_id,
        "is_draft": is_draft,
    })
    ensure_category_exists(categories, post_data.category_id)

    image_url = save_image(image) if has_image(image) else None
    try:
        new_post = posts.create({
            **post_data.model_dump(),
            "author_id": current_user.id,
            "image_url": image_url,
        })
    except Exception:
        discard_image(image_url)
        raise

    logger.info(f"Post created: {new_post.title} (draft: {new_post.is_draft})")
    return {
        "success": True,
        "message": "Blog post created successfully",
        "data": BlogPostDetail.model_validate(new_post),
    }


@router.get("/posts/my-posts")
def my_posts(
    current_user: User = Depends(require_doctor),
    posts: PostRepository = Depends(get_post_repository)
):
    """List the calling doctor's posts, drafts included, with full summaries."""
    logger.info(f"Fetching posts for author: {current_user.username}")
    return {"success": True, "data": list_mine(posts, current_user)}


@router.get("/posts/by-category")
def posts_by_category(
    categories: CategoryRepository = Depends(get_category_repository),
    posts: PostRepository = Depends(get_post_repository)
):
    """List published posts grouped under every category."""
    logger.info("Fetching posts grouped by category")
    return {"success": True, "data": list_by_category(categories, posts)}


@router.get("/posts")
def published_posts(
    category_id: Optional[int] = Query(None, le=MAX_ID),
    posts: PostRepository = Depends(get_post_repository)
):
    """List published posts, newest first, optionally for one category."""
    logger.info(f"Fetching published posts, category: {category_id or 'all'}")
    return {"success": True, "data": list_published(posts, category_id)}


@router.get("/posts/{post_id}")
def read_post(
    post_id: int = Path(le=MAX_ID),
    current_user: Optional[User] = Depends(get_optional_user),
    posts: PostRepository = Depends(get_post_repository)
):
    """
    Get a single post with its full summary.

    Drafts are only returned to their author; everyone else gets 404.
    """
    logger.info(f"Fetching blog post {post_id}")
    return {"success": True, "data": get_post(posts, post_id, current_user)}


@router.put("/posts/{post_id}")
def update_post(
    post_id: int = Path(le=MAX_ID),
    title: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    is_draft: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_doctor),
    posts: PostRepository = Depends(get_post_repository),
    categories: CategoryRepository = Depends(get_category_repository)
):
    """
    Partially update one of the caller's posts.

    Only submitted fields change. A new image replaces the previous reference.

    Raises:
        NotFound: If the post or the new category does not exist
        Forbidden: If the caller is not the author
        ValidationError: If a submitted field is too short or the image is rejected
    """
    logger.info(f"Updating blog post {post_id}")

    post = posts.get(post_id)
    ensure_can_edit(current_user, post)

    update_data = parse_form(BlogPostUpdate, {
        "title": title,
        "summary": summary,
        "content": content,
        "category_id": category_id,
        "is_draft": is_draft,
    })
    changes = update_data.model_dump(exclude_unset=True)
    if "category_id" in changes:
        ensure_category_exists(categories, changes["category_id"])

    image_url = None
    if has_image(image):
        image_url = save_image(image)
        changes["image_url"] = image_url

    try:
        updated_post = posts.update(post_id, changes)
    except Exception:
        discard_image(image_url)
        raise

    return {
        "success": True,
        "message": "Post updated successfully",
        "data": BlogPostDetail.model_validate(updated_post),
    }


@router.delete("/posts/{post_id}")
def delete_post(
    post_id: int = Path(le=MAX_ID),
    current_user: User = Depends(require_doctor),
    posts: PostRepository = Depends(get_post_repository)
):
    """Delete one of the caller's posts."""
    logger.info(f"Deleting blog post {post_id}")

    post = posts.get(post_id)
    ensure_can_delete(current_user, post)
    posts.delete(post_id)

    return {"success": True, "message": "Post deleted successfully"}
