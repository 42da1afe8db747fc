"""Repositories over the users, categories and blog posts tables."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from fastapi import Depends
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.database import get_db
from src.errors import Conflict, Forbidden, InternalError, NotFound, ValidationError
from src.models import BlogPost, Category, User, UserRole

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Mental Health", "Articles related to mental health and wellness"),
    ("Heart Disease", "Information about cardiovascular health"),
    ("Covid19", "Updates and information about COVID-19"),
    ("Immunization", "Vaccination and immunization guidelines"),
]

REQUIRED_POST_FIELDS = ("title", "summary", "content", "category_id", "author_id")
UPDATABLE_POST_FIELDS = ("title", "summary", "content", "category_id", "is_draft", "image_url")


def _commit(db: Session, action: str):
    """Commit the session, downgrading storage failures to InternalError."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure while trying to {action}: {e}")
        raise InternalError(f"Failed to {action}")


class UserRepository:
    """Identity store backed by the users table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_login(self, login: str) -> Optional[User]:
        """
        Find a user whose username equals `login` or whose email matches it.

        Emails are compared case-insensitively since registration stores
        them with the domain lowercased.
        """
        return self.db.query(User).filter(
            or_(User.username == login, func.lower(User.email) == login.lower())
        ).first()

    def exists_username(self, username: str) -> bool:
        return self.db.query(User.id).filter(User.username == username).first() is not None

    def exists_email(self, email: str) -> bool:
        return self.db.query(User.id).filter(func.lower(User.email) == email.lower()).first() is not None

    def create(self, username: str, full_name: str, email: Optional[str],
               password_hash: str, role: UserRole) -> User:
        user = User(
            username=username,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same username or email
            self.db.rollback()
            logger.warning(f"Registration conflict for username {username}: {e}")
            raise Conflict("Username or email already exists")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage failure while trying to create user: {e}")
            raise InternalError("Failed to create user")
        self.db.refresh(user)
        logger.info(f"User created: {user.username} ({user.role.value})")
        return user


class CategoryRepository:
    """Category catalog backed by the categories table."""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.id).all()

    def get(self, category_id: int) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def seed_defaults(self) -> int:
        """
        Insert any of the default categories that are missing.

        Returns:
            int: Number of categories created
        """
        existing = {name for (name,) in self.db.query(Category.name).all()}
        created = 0
        for name, description in DEFAULT_CATEGORIES:
            if name in existing:
                continue
            self.db.add(Category(name=name, description=description))
            created += 1

        if created:
            _commit(self.db, "seed categories")
        return created


@dataclass
class PostFilter:
    """Composable filter for post listings. None means "any"."""

    is_draft: Optional[bool] = None
    category_id: Optional[int] = None
    author_id: Optional[int] = None


class PostRepository:
    """Blog post storage: create, fetch, filter, partial update, delete."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, fields: dict) -> BlogPost:
        """
        Create a blog post.

        Args:
            fields: title, summary, content, category_id and author_id, plus
                optional is_draft and image_url

        Returns:
            BlogPost: The stored post with id and timestamps assigned

        Raises:
            ValidationError: If a required field is missing
            NotFound: If category_id does not resolve
            Forbidden: If the author is not a doctor
        """
        missing = [name for name in REQUIRED_POST_FIELDS if fields.get(name) in (None, "")]
        if missing:
            raise ValidationError(
                "Title, summary, content, and category are required",
                errors=[{"field": name, "message": "Field required"} for name in missing],
            )

        if CategoryRepository(self.db).get(fields["category_id"]) is None:
            logger.warning(f"Post rejected: unknown category {fields['category_id']}")
            raise NotFound("Category not found")

        author = UserRepository(self.db).get(fields["author_id"])
        if author is None or author.role != UserRole.DOCTOR:
            raise Forbidden("Only doctors can create posts")

        now = datetime.utcnow()
        post = BlogPost(
            title=fields["title"],
            summary=fields["summary"],
            content=fields["content"],
            category_id=fields["category_id"],
            author_id=fields["author_id"],
            is_draft=bool(fields.get("is_draft") or False),
            image_url=fields.get("image_url"),
            created_at=now,
            updated_at=now,
        )
        self.db.add(post)
        _commit(self.db, "create post")
        self.db.refresh(post)

        logger.info(f"Created blog post with ID: {post.id} (draft: {post.is_draft})")
        return post

    def get(self, post_id: int) -> BlogPost:
        post = self.db.query(BlogPost).filter(BlogPost.id == post_id).first()
        if post is None:
            logger.warning(f"Blog post not found: {post_id}")
            raise NotFound("Post not found")
        return post

    def list(self, post_filter: Optional[PostFilter] = None) -> List[BlogPost]:
        """Return posts matching the filter, newest first."""
        post_filter = post_filter or PostFilter()
        query = self.db.query(BlogPost)

        if post_filter.is_draft is not None:
            query = query.filter(BlogPost.is_draft == post_filter.is_draft)
        if post_filter.category_id is not None:
            query = query.filter(BlogPost.category_id == post_filter.category_id)
        if post_filter.author_id is not None:
            query = query.filter(BlogPost.author_id == post_filter.author_id)

        return query.order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).all()

    def update(self, post_id: int, fields: dict) -> BlogPost:
        """
        Apply a partial update. Keys absent from `fields` are left untouched.

        Raises:
            NotFound: If the post or a newly supplied category does not exist
        """
        post = self.get(post_id)

        changes = {name: value for name, value in fields.items() if name in UPDATABLE_POST_FIELDS}
        if "category_id" in changes and CategoryRepository(self.db).get(changes["category_id"]) is None:
            logger.warning(f"Update of post {post_id} rejected: unknown category {changes['category_id']}")
            raise NotFound("Category not found")

        for name, value in changes.items():
            setattr(post, name, value)
            logger.debug(f"Updated {name} for post {post_id}")

        post.updated_at = datetime.utcnow()
        _commit(self.db, "update post")
        self.db.refresh(post)

        logger.info(f"Blog post {post_id} updated successfully")
        return post

    def delete(self, post_id: int) -> None:
        post = self.get(post_id)
        self.db.delete(post)
        _commit(self.db, "delete post")
        logger.info(f"Blog post {post_id} deleted")


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_category_repository(db: Session = Depends(get_db)) -> CategoryRepository:
    return CategoryRepository(db)


def get_post_repository(db: Session = Depends(get_db)) -> PostRepository:
    return PostRepository(db)
