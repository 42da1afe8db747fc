"""Post listing views: visibility filtering, projections and summary truncation."""

import logging
from typing import List, Optional

from src.models import User
from src.policy import ensure_can_create, ensure_can_view
from src.repository import CategoryRepository, PostFilter, PostRepository
from src.schemas import (
    BlogPostDetail,
    BlogPostInCategory,
    BlogPostOwn,
    CategoryWithPosts,
)

# Configure logging
logger = logging.getLogger(__name__)

SUMMARY_WORD_LIMIT = 15
TRUNCATION_SUFFIX = "..."


def truncate_summary(summary: str, word_limit: int = SUMMARY_WORD_LIMIT) -> str:
    """
    Shorten a summary to its first `word_limit` words.

    Words are the pieces of a split on single spaces, so runs of spaces
    produce empty words and are not collapsed. Summaries within the limit
    are returned unchanged; longer ones get "..." appended directly after
    the last kept word.

    Args:
        summary: Free-text summary
        word_limit: Maximum number of words to keep

    Returns:
        str: The summary, truncated if it exceeds the limit
    """
    words = summary.split(" ")
    if len(words) > word_limit:
        return " ".join(words[:word_limit]) + TRUNCATION_SUFFIX
    return summary


def list_published(posts: PostRepository, category_id: Optional[int] = None) -> List[BlogPostDetail]:
    """Published posts, newest first, with truncated summaries."""
    records = posts.list(PostFilter(is_draft=False, category_id=category_id))
    logger.info(f"Found {len(records)} published posts (category: {category_id or 'all'})")
    return [
        BlogPostDetail.model_validate(post).model_copy(
            update={"summary": truncate_summary(post.summary)}
        )
        for post in records
    ]


def list_mine(posts: PostRepository, identity: User) -> List[BlogPostOwn]:
    """Every post written by `identity`, drafts included, with full summaries."""
    ensure_can_create(identity)
    records = posts.list(PostFilter(author_id=identity.id))
    logger.info(f"Found {len(records)} posts for author {identity.id}")
    return [BlogPostOwn.model_validate(post) for post in records]


def list_by_category(categories: CategoryRepository, posts: PostRepository) -> List[CategoryWithPosts]:
    """
    Published posts grouped under every category.

    Categories without published posts are still listed, with an empty
    post list. Within a group posts are newest first.
    """
    all_categories = categories.list_all()
    grouped = {category.id: [] for category in all_categories}
    for post in posts.list(PostFilter(is_draft=False)):
        if post.category_id in grouped:
            grouped[post.category_id].append(
                BlogPostInCategory.model_validate(post).model_copy(
                    update={"summary": truncate_summary(post.summary)}
                )
            )

    return [
        CategoryWithPosts(
            id=category.id,
            name=category.name,
            description=category.description,
            posts=grouped[category.id],
        )
        for category in all_categories
    ]


def get_post(posts: PostRepository, post_id: int, identity: Optional[User] = None) -> BlogPostDetail:
    """A single post with its full summary. Drafts are hidden from non-authors."""
    post = posts.get(post_id)
    ensure_can_view(identity, post)
    return BlogPostDetail.model_validate(post)
