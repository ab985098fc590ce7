from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cryptonews.api.v1 import dependencies
from cryptonews.database import get_db
from cryptonews.models.article import Article
from cryptonews.schemas.article import ArticleSummary
from cryptonews.services.newsletter import NewsletterService

router = APIRouter()

@router.get("/stats", dependencies=[Depends(dependencies.require_admin)])
async def get_stats(
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Get dashboard statistics.
    """
    # Articles per status
    status_rows = await db.execute(
        select(Article.status, func.count()).group_by(Article.status)
    )
    by_status = {row[0]: row[1] for row in status_rows.all()}

    # Engagement totals
    totals = (await db.execute(
        select(
            func.coalesce(func.sum(Article.views), 0),
            func.coalesce(func.sum(Article.likes), 0),
            func.coalesce(func.sum(Article.dislikes), 0),
        )
    )).one()

    category_rows = await db.execute(
        select(Article.category, func.count()).group_by(Article.category)
    )

    # Most viewed
    popular_query = (
        select(Article)
        .options(selectinload(Article.author))
        .execution_options(populate_existing=True)
        .order_by(Article.views.desc())
        .limit(5)
    )
    popular_result = await db.execute(popular_query)
    popular_articles = popular_result.scalars().all()

    return {
        "success": True,
        "data": {
            "totalArticles": sum(by_status.values()),
            "publishedArticles": by_status.get("published", 0),
            "draftArticles": by_status.get("draft", 0),
            "scheduledArticles": by_status.get("scheduled", 0),
            "totalViews": totals[0],
            "totalLikes": totals[1],
            "totalDislikes": totals[2],
            "categories": {row[0]: row[1] for row in category_rows.all()},
            "popularArticles": [
                ArticleSummary.model_validate(a).model_dump(mode="json", by_alias=True)
                for a in popular_articles
            ],
            "subscribers": await NewsletterService(db).count_active(),
        },
    }
