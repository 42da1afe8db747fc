"""Role and ownership rules for blog posts.

Every access decision about posts goes through this module. The ``can_*``
functions are pure; the ``ensure_*`` helpers raise the matching API error.
Hidden drafts are reported as NotFound on every read path so their
existence is not revealed.
"""

import logging
from typing import Optional

from src.errors import Forbidden, NotFound
from src.models import BlogPost, User, UserRole

# Configure logging
logger = logging.getLogger(__name__)


def is_doctor(identity: Optional[User]) -> bool:
    return identity is not None and identity.role == UserRole.DOCTOR


def is_author(identity: Optional[User], post: BlogPost) -> bool:
    return identity is not None and identity.id == post.author_id


def can_create(identity: Optional[User]) -> bool:
    return is_doctor(identity)


def can_view(identity: Optional[User], post: BlogPost) -> bool:
    return not post.is_draft or is_author(identity, post)


def can_edit(identity: Optional[User], post: BlogPost) -> bool:
    return is_doctor(identity) and is_author(identity, post)


def can_delete(identity: Optional[User], post: BlogPost) -> bool:
    return is_doctor(identity) and is_author(identity, post)


def ensure_can_create(identity: Optional[User]) -> None:
    if not can_create(identity):
        raise Forbidden("Only doctors can create posts")


def ensure_can_view(identity: Optional[User], post: BlogPost) -> None:
    if not can_view(identity, post):
        logger.warning(f"Draft post {post.id} hidden from non-author")
        raise NotFound("Post not found")


def ensure_can_edit(identity: Optional[User], post: BlogPost) -> None:
    if not can_edit(identity, post):
        logger.warning(f"Edit of post {post.id} refused for user {getattr(identity, 'id', None)}")
        raise Forbidden("You can only edit your own posts")


def ensure_can_delete(identity: Optional[User], post: BlogPost) -> None:
    if not can_delete(identity, post):
        logger.warning(f"Delete of post {post.id} refused for user {getattr(identity, 'id', None)}")
        raise Forbidden("You can only delete your own posts")
