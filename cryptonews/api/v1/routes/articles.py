from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.api.v1 import dependencies
from cryptonews.config import settings
from cryptonews.database import get_db
from cryptonews.schemas.article import (
    ArticleCreate, ArticleListResponse, ArticleQuery, ArticleResponse, ArticleUpdate,
    ReactionResponse, Timeframe, TrendingResponse, parse_positive_int,
)
from cryptonews.schemas.common import MessageResponse
from cryptonews.services.article import ArticleService
from cryptonews.services.auth import Principal
from cryptonews.services.reactions import ReactionLedger

router = APIRouter()

# Public Endpoints

@router.get("", response_model=ArticleListResponse)
async def list_articles(
    category: Optional[str] = None,
    status_: Optional[str] = Query(None, alias="status"),
    author: Optional[str] = None,
    featured: Optional[str] = None,
    search: Optional[str] = None,
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    principal: Optional[Principal] = Depends(dependencies.get_optional_principal),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    List articles. Anyone but an admin only sees published ones.
    """
    query = ArticleQuery(
        category=category,
        status=status_,
        author=author,
        featured=featured,
        search=search,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
        sort=sort,
    )
    result = await ArticleService(db).list_articles(query, principal)

    return {
        "count": result.count,
        "total": result.total,
        "pagination": {
            "current": result.page,
            "pages": result.pages,
            "has_next": result.has_next,
            "has_prev": result.has_prev,
        },
        "data": result.items,
    }

@router.get("/trending", response_model=TrendingResponse)
async def trending_articles(
    limit: Optional[str] = None,
    timeframe: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Most viewed published articles within the last day, week or month.
    """
    try:
        window = Timeframe(timeframe) if timeframe else Timeframe.WEEK
    except ValueError:
        window = Timeframe.WEEK
    items = await ArticleService(db).get_trending(
        limit=min(parse_positive_int(limit, settings.TRENDING_LIMIT), settings.MAX_ARTICLES_PER_PAGE),
        timeframe=window,
    )
    return {"count": len(items), "data": items}

@router.get("/slug/{slug}", response_model=ArticleResponse)
async def get_article_by_slug(
    slug: str,
    principal: Optional[Principal] = Depends(dependencies.get_optional_principal),
    db: AsyncSession = Depends(get_db)
) -> Any:
    article = await ArticleService(db).read_article(slug, principal, by_slug=True)
    return {"data": article}

@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: str,
    principal: Optional[Principal] = Depends(dependencies.get_optional_principal),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Get an article by id (a slug is accepted as well).
    """
    article = await ArticleService(db).read_article(article_id, principal)
    return {"data": article}

@router.post("/{article_id}/like", response_model=ReactionResponse)
async def like_article(
    article_id: str,
    principal: Optional[Principal] = Depends(dependencies.get_optional_principal),
    ledger: ReactionLedger = Depends(dependencies.get_reactions),
) -> Any:
    return {"data": await ledger.like(article_id, principal)}

@router.post("/{article_id}/dislike", response_model=ReactionResponse)
async def dislike_article(
    article_id: str,
    principal: Optional[Principal] = Depends(dependencies.get_optional_principal),
    ledger: ReactionLedger = Depends(dependencies.get_reactions),
) -> Any:
    return {"data": await ledger.dislike(article_id, principal)}

# Author/Admin Endpoints

@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    article_in: ArticleCreate,
    principal: Principal = Depends(dependencies.require_author),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Create new article.
    """
    article = await ArticleService(db).create_article(article_in, principal)
    return {"data": article}

@router.put("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: str,
    article_in: ArticleUpdate,
    principal: Principal = Depends(dependencies.get_current_principal),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Update an article. Only its author or an admin may do so.
    """
    article = await ArticleService(db).update_article(article_id, article_in, principal)
    return {"data": article}

@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: str,
    principal: Principal = Depends(dependencies.get_current_principal),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Delete an article. Only its author or an admin may do so.
    """
    await ArticleService(db).delete_article(article_id, principal)
    return {"message": "Article deleted successfully"}
