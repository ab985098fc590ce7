import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cryptonews.config import settings
from cryptonews.core import content as derived
from cryptonews.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from cryptonews.models.article import Article, ArticleReaction
from cryptonews.schemas.article import (
    ArticleCreate, ArticleQuery, ArticleStatus, ArticleUpdate, SortOrder, Timeframe,
)
from cryptonews.services.auth import Principal

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    SortOrder.NEWEST: (Article.publish_date.desc(),),
    SortOrder.OLDEST: (Article.publish_date.asc(),),
    SortOrder.POPULAR: (Article.views.desc(), Article.publish_date.desc()),
    SortOrder.LIKED: (Article.likes.desc(), Article.publish_date.desc()),
}


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_article_id(key: str) -> Optional[UUID]:
    try:
        return UUID(str(key))
    except ValueError:
        return None


def can_manage(article: Article, principal: Optional[Principal]) -> bool:
    if principal is None:
        return False
    return principal.is_admin or (principal.id is not None and article.author_id == principal.id)


@dataclass
class ArticlePage:
    items: Sequence[Article]
    total: int
    page: int
    limit: int

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class ArticleService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _select(self):
        return (
            select(Article)
            .options(selectinload(Article.author))
            .execution_options(populate_existing=True)
        )

    async def get_article(self, article_id: UUID) -> Optional[Article]:
        result = await self.db.execute(self._select().where(Article.id == article_id))
        return result.scalar_one_or_none()

    async def get_article_by_slug(self, slug: str) -> Optional[Article]:
        result = await self.db.execute(self._select().where(Article.slug == slug))
        return result.scalar_one_or_none()

    async def find_article(self, key: str) -> Optional[Article]:
        """Look up by primary id when ``key`` is a UUID, otherwise by slug."""
        article_id = parse_article_id(key)
        if article_id is not None:
            article = await self.get_article(article_id)
            if article:
                return article
        return await self.get_article_by_slug(key)

    async def require_article(self, key: str) -> Article:
        article_id = parse_article_id(key)
        article = await self.get_article(article_id) if article_id else None
        if not article:
            raise NotFoundError("Article not found")
        return article

    # Reads

    def _filters(self, query: ArticleQuery, principal: Optional[Principal]) -> List:
        conditions = []
        if principal is not None and principal.is_admin:
            if query.status is not None:
                conditions.append(Article.status == query.status.value)
        else:
            conditions.append(Article.status == ArticleStatus.PUBLISHED.value)

        if query.category is not None:
            conditions.append(Article.category == query.category.value)
        if query.author is not None:
            conditions.append(Article.author_id == query.author)
        if query.featured is not None:
            conditions.append(Article.is_featured == query.featured)
        if query.search:
            # % and _ in the term are literal characters
            conditions.append(Article.search_document.contains(query.search.lower(), autoescape=True))
        if query.date_from is not None:
            conditions.append(Article.publish_date >= as_utc(query.date_from))
        if query.date_to is not None:
            conditions.append(Article.publish_date <= as_utc(query.date_to))
        return conditions

    async def list_articles(
        self, query: ArticleQuery, principal: Optional[Principal] = None
    ) -> ArticlePage:
        conditions = self._filters(query, principal)

        count_query = select(func.count()).select_from(Article).where(and_(True, *conditions))
        total = await self.db.scalar(count_query)

        stmt = (
            self._select()
            .where(and_(True, *conditions))
            .order_by(*SORT_ORDERS[query.sort], Article.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        result = await self.db.execute(stmt)
        return ArticlePage(
            items=result.scalars().all(), total=total or 0, page=query.page, limit=query.limit
        )

    async def get_trending(
        self, limit: Optional[int] = None, timeframe: Timeframe = Timeframe.WEEK
    ) -> Sequence[Article]:
        limit = limit or settings.TRENDING_LIMIT
        since = datetime.now(timezone.utc) - timeframe.delta
        stmt = (
            self._select()
            .where(
                Article.status == ArticleStatus.PUBLISHED.value,
                Article.publish_date >= since,
            )
            .order_by(Article.views.desc(), Article.likes.desc(), Article.publish_date.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def read_article(self, key: str, principal: Optional[Principal] = None, by_slug: bool = False) -> Article:
        """
        Fetch an article for display and count the view.

        Unpublished articles are only visible to their author or an admin.
        The author's own reads are not counted.
        """
        article = await (self.get_article_by_slug(key) if by_slug else self.find_article(key))
        if not article:
            raise NotFoundError("Article not found")
        if article.status != ArticleStatus.PUBLISHED.value and not can_manage(article, principal):
            raise ForbiddenError("Not authorized to view this article")

        is_author = principal is not None and principal.id is not None and principal.id == article.author_id
        if not is_author:
            await self.increment_view_count(article.id)
            article = await self.get_article(article.id)
        return article

    async def increment_view_count(self, article_id: UUID) -> None:
        await self.db.execute(
            update(Article)
            .where(Article.id == article_id)
            .values(views=Article.views + 1)
        )
        await self.db.commit()

    # Writes

    async def _unique_slug(self, title: str, exclude_id: Optional[UUID] = None) -> str:
        base = derived.generate_slug(title)
        stmt = select(Article.slug).where(
            or_(Article.slug == base, Article.slug.like(f"{base}-%"))
        )
        if exclude_id is not None:
            stmt = stmt.where(Article.id != exclude_id)
        taken = (await self.db.execute(stmt)).scalars().all()
        return derived.unique_slug(base, taken)

    async def _commit(self, article: Article) -> Article:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise BadRequestError("Slug already exists")
        return await self.get_article(article.id)

    async def create_article(
        self, article_in: ArticleCreate, principal: Optional[Principal] = None
    ) -> Article:
        tags = derived.clean_tags(article_in.tags)
        data = article_in.model_dump(
            mode="json", exclude={"publish_date", "scheduled_date", "excerpt", "tags", "meta_keywords"}
        )
        db_article = Article(
            **data,
            slug=await self._unique_slug(article_in.title),
            excerpt=article_in.excerpt or derived.build_excerpt(article_in.content),
            read_time=derived.calculate_read_time(article_in.content),
            tags=tags,
            meta_keywords=derived.clean_tags(article_in.meta_keywords),
            search_document=derived.build_search_document(article_in.title, article_in.content, tags),
            publish_date=as_utc(article_in.publish_date) or datetime.now(timezone.utc),
            scheduled_date=as_utc(article_in.scheduled_date),
            author_id=principal.id if principal else None,
        )
        self.db.add(db_article)
        article = await self._commit(db_article)
        logger.info("Article created", extra={"article_id": str(article.id), "slug": article.slug})
        return article

    async def update_article(
        self, key: str, article_in: ArticleUpdate, principal: Optional[Principal] = None
    ) -> Article:
        db_article = await self.require_article(key)
        if not can_manage(db_article, principal):
            raise ForbiddenError("Not authorized to update this article")

        update_data = article_in.model_dump(exclude_unset=True)
        for field in ("tags", "meta_keywords"):
            if update_data.get(field) is not None:
                update_data[field] = derived.clean_tags(update_data[field])
        for field in ("publish_date", "scheduled_date"):
            if field in update_data:
                update_data[field] = as_utc(update_data[field])
        if "status" in update_data and update_data["status"] is not None:
            update_data["status"] = update_data["status"].value
        if "category" in update_data and update_data["category"] is not None:
            update_data["category"] = update_data["category"].value

        # Required columns cannot be cleared
        for field in (
            "title", "content", "featured_image", "category", "status",
            "publish_date", "is_featured", "tags", "meta_keywords",
        ):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        new_title = update_data.get("title")
        if new_title is not None and new_title != db_article.title:
            update_data["slug"] = await self._unique_slug(new_title, exclude_id=db_article.id)

        new_content = update_data.get("content")
        if new_content is not None and new_content != db_article.content:
            update_data["read_time"] = derived.calculate_read_time(new_content)
            excerpt_was_derived = db_article.excerpt == derived.build_excerpt(db_article.content)
            if not update_data.get("excerpt") and excerpt_was_derived:
                update_data["excerpt"] = derived.build_excerpt(new_content)
        if "excerpt" in update_data and not update_data["excerpt"]:
            update_data["excerpt"] = derived.build_excerpt(update_data.get("content") or db_article.content)

        if update_data.keys() & {"title", "content", "tags"}:
            update_data["search_document"] = derived.build_search_document(
                update_data.get("title", db_article.title),
                update_data.get("content", db_article.content),
                update_data.get("tags", db_article.tags or []),
            )

        status = update_data.get("status", db_article.status)
        scheduled = update_data.get("scheduled_date", db_article.scheduled_date)
        if status == ArticleStatus.SCHEDULED.value and scheduled is None:
            raise BadRequestError("Scheduled date is required for scheduled articles")

        for field, value in update_data.items():
            setattr(db_article, field, value)

        self.db.add(db_article)
        article = await self._commit(db_article)
        logger.info("Article updated", extra={"article_id": str(article.id), "fields": sorted(update_data)})
        return article

    async def delete_article(self, key: str, principal: Optional[Principal] = None) -> None:
        article = await self.require_article(key)
        if not can_manage(article, principal):
            raise ForbiddenError("Not authorized to delete this article")

        await self.db.execute(delete(ArticleReaction).where(ArticleReaction.article_id == article.id))
        await self.db.execute(delete(Article).where(Article.id == article.id))
        await self.db.commit()
        logger.info("Article deleted", extra={"article_id": str(article.id)})
