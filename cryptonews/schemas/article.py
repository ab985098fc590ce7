import re
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import (
    Field, ValidationError, ValidationInfo, ValidatorFunctionWrapHandler,
    field_validator, model_validator,
)

from cryptonews.config import settings
from cryptonews.schemas.common import CamelModel, Pagination

class Category(str, Enum):
    HOME = "Home"
    BUSINESS = "Business"
    EDUCATION = "Education"
    EVENTS = "Events"
    INTERVIEWS = "Interviews"
    MARKET_ANALYSIS = "Market Analysis"
    PRESS_RELEASE = "Press Release"

class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"

class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    POPULAR = "popular"
    LIKED = "liked"

class Timeframe(str, Enum):
    DAY = "1d"
    WEEK = "7d"
    MONTH = "30d"

    @property
    def delta(self) -> timedelta:
        return timedelta(days=int(self.value[:-1]))


def _strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


class ArticleBase(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    subtitle: Optional[str] = Field(None, max_length=300)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    featured_image: str = Field(..., min_length=1)
    category: Category
    tags: List[str] = []
    status: ArticleStatus = ArticleStatus.DRAFT
    publish_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    is_featured: bool = False
    meta_description: Optional[str] = Field(None, max_length=160)
    meta_keywords: List[str] = []

    @field_validator("title", "subtitle", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)

class ArticleCreate(ArticleBase):
    @model_validator(mode="after")
    def check_schedule(self) -> "ArticleCreate":
        if self.status == ArticleStatus.SCHEDULED and self.scheduled_date is None:
            raise ValueError("Scheduled date is required for scheduled articles")
        return self

class ArticleUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    subtitle: Optional[str] = Field(None, max_length=300)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    featured_image: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None
    tags: Optional[List[str]] = None
    status: Optional[ArticleStatus] = None
    publish_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    is_featured: Optional[bool] = None
    meta_description: Optional[str] = Field(None, max_length=160)
    meta_keywords: Optional[List[str]] = None

    @field_validator("title", "subtitle", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)

class AuthorSummary(CamelModel):
    id: UUID
    name: str

class ArticleSummary(CamelModel):
    """List representation; the body is left out."""
    id: UUID
    title: str
    subtitle: Optional[str] = None
    slug: str
    excerpt: str
    featured_image: str
    category: str
    tags: List[str] = []
    author_id: Optional[UUID] = None
    author: Optional[AuthorSummary] = None
    status: str
    publish_date: datetime
    scheduled_date: Optional[datetime] = None
    views: int
    likes: int
    dislikes: int
    read_time: int
    is_featured: bool
    meta_description: Optional[str] = None
    meta_keywords: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ArticleDetail(ArticleSummary):
    content: str

class ArticleResponse(CamelModel):
    success: bool = True
    data: ArticleDetail

class ArticleListResponse(CamelModel):
    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: List[ArticleSummary]

class TrendingResponse(CamelModel):
    success: bool = True
    count: int
    data: List[ArticleSummary]

class ReactionCounts(CamelModel):
    likes: int
    dislikes: int
    user_liked: bool = False
    user_disliked: bool = False

class ReactionResponse(CamelModel):
    success: bool = True
    data: ReactionCounts


_LEADING_INT = re.compile(r"^\s*(\d+)")

def parse_positive_int(value: Any, default: int) -> int:
    """Best-effort integer parsing: leading digits win, anything else is the default."""
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        match = _LEADING_INT.match(str(value)) if value is not None else None
        if not match:
            return default
        number = int(match.group(1))
    return number if number > 0 else default


class ArticleQuery(CamelModel):
    """
    Listing parameters as received from the query string.

    Invalid filter values are dropped rather than rejected, and page/limit fall
    back to their defaults when they cannot be read as positive integers.
    """
    category: Optional[Category] = None
    status: Optional[ArticleStatus] = None
    author: Optional[UUID] = None
    featured: Optional[bool] = None
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    page: int = 1
    limit: int = Field(default_factory=lambda: settings.ARTICLES_PER_PAGE)
    sort: SortOrder = SortOrder.NEWEST

    @field_validator("category", "status", "author", "date_from", "date_to", "sort", mode="wrap")
    @classmethod
    def skip_invalid(cls, v: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        if v is None or v == "":
            return cls.model_fields[info.field_name].default
        try:
            return handler(v)
        except ValidationError:
            return cls.model_fields[info.field_name].default

    @field_validator("featured", mode="before")
    @classmethod
    def parse_featured(cls, v: Any) -> Optional[bool]:
        if v is None or v == "":
            return None
        if isinstance(v, bool):
            return v
        return str(v).lower() == "true"

    @field_validator("search", mode="before")
    @classmethod
    def blank_search(cls, v: Any) -> Any:
        v = _strip(v)
        return v or None

    @field_validator("page", mode="before")
    @classmethod
    def parse_page(cls, v: Any) -> int:
        return parse_positive_int(v, 1)

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, v: Any) -> int:
        return min(parse_positive_int(v, settings.ARTICLES_PER_PAGE), settings.MAX_ARTICLES_PER_PAGE)
