"""
Like/dislike bookkeeping for articles.

Two strategies share one interface and a deployment picks one through
``REACTION_MODE``:

- ``counter``: anonymous, every call adds one to the counter.
- ``toggle``: one reaction per user; repeating it undoes it and the opposite
  reaction replaces it.

In both cases ``Article.likes`` / ``Article.dislikes`` hold the current totals.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from cryptonews.core.exceptions import UnauthorizedError
from cryptonews.models.article import Article, ArticleReaction
from cryptonews.schemas.article import ReactionCounts
from cryptonews.services.article import ArticleService
from cryptonews.services.auth import Principal

logger = logging.getLogger(__name__)

LIKE = "like"
DISLIKE = "dislike"

COUNTER_COLUMNS = {LIKE: "likes", DISLIKE: "dislikes"}


class ReactionLedger(ABC):
    def __init__(self, db: AsyncSession):
        self.db = db
        self.articles = ArticleService(db)

    async def like(self, key: str, principal: Optional[Principal] = None) -> ReactionCounts:
        return await self.react(key, LIKE, principal)

    async def dislike(self, key: str, principal: Optional[Principal] = None) -> ReactionCounts:
        return await self.react(key, DISLIKE, principal)

    @abstractmethod
    async def react(self, key: str, kind: str, principal: Optional[Principal]) -> ReactionCounts:
        ...

    async def _apply(self, article_id: UUID, likes: int = 0, dislikes: int = 0) -> None:
        if likes or dislikes:
            await self.db.execute(
                update(Article)
                .where(Article.id == article_id)
                .values(likes=Article.likes + likes, dislikes=Article.dislikes + dislikes)
            )
        await self.db.commit()


class AnonymousCounterLedger(ReactionLedger):
    async def react(self, key: str, kind: str, principal: Optional[Principal] = None) -> ReactionCounts:
        article = await self.articles.require_article(key)
        await self._apply(article.id, **{COUNTER_COLUMNS[kind]: 1})
        article = await self.articles.get_article(article.id)
        return ReactionCounts(likes=article.likes, dislikes=article.dislikes)


class PerUserToggleLedger(ReactionLedger):
    async def react(self, key: str, kind: str, principal: Optional[Principal] = None) -> ReactionCounts:
        if principal is None or principal.id is None:
            raise UnauthorizedError("Please log in to react to articles")

        article_id = (await self.articles.require_article(key)).id
        try:
            current = await self._toggle(article_id, principal.id, kind)
        except (IntegrityError, StaleDataError):
            # A concurrent request changed this user's reaction first; toggle against its result
            await self.db.rollback()
            current = await self._toggle(article_id, principal.id, kind)

        article = await self.articles.get_article(article_id)
        logger.info(
            "Reaction recorded",
            extra={"article_id": str(article_id), "user_id": str(principal.id), "reaction": current},
        )
        return ReactionCounts(
            likes=article.likes,
            dislikes=article.dislikes,
            user_liked=current == LIKE,
            user_disliked=current == DISLIKE,
        )

    async def _toggle(self, article_id: UUID, user_id: UUID, kind: str) -> Optional[str]:
        """Apply one toggle step and commit; returns the user's reaction afterwards."""
        result = await self.db.execute(
            select(ArticleReaction)
            .where(
                ArticleReaction.article_id == article_id,
                ArticleReaction.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        existing = result.scalar_one_or_none()

        deltas = {"likes": 0, "dislikes": 0}
        if existing is None:
            self.db.add(ArticleReaction(article_id=article_id, user_id=user_id, kind=kind))
            deltas[COUNTER_COLUMNS[kind]] += 1
            current = kind
        elif existing.kind == kind:
            await self.db.delete(existing)
            deltas[COUNTER_COLUMNS[kind]] -= 1
            current = None
        else:
            deltas[COUNTER_COLUMNS[existing.kind]] -= 1
            deltas[COUNTER_COLUMNS[kind]] += 1
            existing.kind = kind
            current = kind

        await self._apply(article_id, **deltas)
        return current


LEDGERS = {
    "counter": AnonymousCounterLedger,
    "toggle": PerUserToggleLedger,
}


def get_reaction_ledger(db: AsyncSession, mode: str) -> ReactionLedger:
    return LEDGERS[mode](db)
