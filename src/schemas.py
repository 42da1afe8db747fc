"""Pydantic schemas for request and response validation."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from src.models import UserRole

# Largest value a SQLite INTEGER column can hold
MAX_ID = 2**63 - 1

BOOLEAN_VALUES = {"true": True, "1": True, "false": False, "0": False}


def _not_blank(value: str, label: str) -> str:
    if not value or not value.strip():
        raise ValueError(f'{label} cannot be empty')
    return value


def _min_length(value: Optional[str], label: str, minimum: int) -> Optional[str]:
    """Trim surrounding whitespace, then enforce a minimum length."""
    if value is None:
        return None
    value = value.strip()
    if len(value) < minimum:
        raise ValueError(f'{label} must be at least {minimum} characters long')
    return value


def _strict_bool(value):
    """Accept real booleans and the form strings true, false, 1 and 0."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in BOOLEAN_VALUES:
        return BOOLEAN_VALUES[value.strip().lower()]
    raise ValueError('is_draft must be boolean')


# Auth Schemas
class UserRegister(BaseModel):
    """Schema for user registration request."""

    full_name: str
    username: str
    email: EmailStr
    password: str
    role: UserRole

    @field_validator('full_name', 'username', 'password')
    @classmethod
    def fields_not_empty(cls, v: str, info) -> str:
        """Validate that required text fields are not blank."""
        return _not_blank(v, info.field_name.replace('_', ' ').capitalize())


class UserLogin(BaseModel):
    """Schema for user login request. `login` is a username or an email."""

    login: str
    password: str

    @field_validator('login', 'password')
    @classmethod
    def fields_not_empty(cls, v: str, info) -> str:
        return _not_blank(v, info.field_name.capitalize())


class UserPublic(BaseModel):
    """User as returned by the auth routes. Never carries the password hash."""

    id: int
    full_name: str
    username: str
    email: Optional[str] = None
    role: UserRole

    class Config:
        from_attributes = True


class AuthData(BaseModel):
    user: UserPublic
    token: str


# Category Schemas
class CategoryOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CategorySummary(BaseModel):
    """Minimal category projection embedded in post listings."""

    id: int
    name: str

    class Config:
        from_attributes = True


class AuthorSummary(BaseModel):
    """Minimal author projection embedded in post listings."""

    id: int
    full_name: str

    class Config:
        from_attributes = True


# Blog Post Schemas
class BlogPostCreate(BaseModel):
    """Schema for blog post creation request."""

    title: str
    summary: str
    content: str
    category_id: int = Field(le=MAX_ID)
    is_draft: bool = False

    @field_validator('is_draft', mode='before')
    @classmethod
    def is_draft_boolean(cls, v):
        return _strict_bool(v)

    @field_validator('title')
    @classmethod
    def title_length(cls, v: str) -> str:
        return _min_length(v, 'Title', 5)

    @field_validator('summary')
    @classmethod
    def summary_length(cls, v: str) -> str:
        return _min_length(v, 'Summary', 10)

    @field_validator('content')
    @classmethod
    def content_length(cls, v: str) -> str:
        return _min_length(v, 'Content', 50)


class BlogPostUpdate(BaseModel):
    """Schema for blog post update request. Omitted fields stay unchanged."""

    title: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    category_id: Optional[int] = Field(None, le=MAX_ID)
    is_draft: Optional[bool] = None

    @field_validator('is_draft', mode='before')
    @classmethod
    def is_draft_boolean(cls, v):
        return _strict_bool(v)

    @field_validator('title')
    @classmethod
    def title_length(cls, v: Optional[str]) -> Optional[str]:
        return _min_length(v, 'Title', 5)

    @field_validator('summary')
    @classmethod
    def summary_length(cls, v: Optional[str]) -> Optional[str]:
        return _min_length(v, 'Summary', 10)

    @field_validator('content')
    @classmethod
    def content_length(cls, v: Optional[str]) -> Optional[str]:
        return _min_length(v, 'Content', 50)


class BlogPostBase(BaseModel):
    id: int
    title: str
    summary: str
    content: str
    image_url: Optional[str] = None
    is_draft: bool
    category_id: int
    author_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BlogPostOwn(BlogPostBase):
    """A post in its author's own listing."""

    category: CategorySummary


class BlogPostInCategory(BlogPostBase):
    """A post nested under its category in the grouped listing."""

    author: AuthorSummary


class BlogPostDetail(BlogPostBase):
    """A post with both category and author projections."""

    category: CategorySummary
    author: AuthorSummary


class CategoryWithPosts(CategoryOut):
    posts: List[BlogPostInCategory] = []
