from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.models.article import Article
from cryptonews.schemas.article import ArticleQuery, ArticleUpdate, SortOrder, Timeframe
from cryptonews.services.article import ArticleService
from cryptonews.services.auth import Principal

ADMIN = Principal(id=None, email="admin@cryptonews.test", role="admin")


async def set_counters(db_session: AsyncSession, article: Article, **values) -> None:
    await db_session.execute(update(Article).where(Article.id == article.id).values(**values))
    await db_session.commit()


@pytest.mark.asyncio
async def test_non_admin_listing_only_returns_published(db_session: AsyncSession, make_article):
    await make_article(title="Live", tags=["btc"], is_featured=True)
    await make_article(title="Hidden Draft", status="draft", tags=["btc"], is_featured=True)
    await make_article(
        title="Later", status="scheduled",
        scheduled_date=datetime.now(timezone.utc) + timedelta(days=1), tags=["btc"],
    )
    service = ArticleService(db_session)

    queries = [
        ArticleQuery(),
        ArticleQuery(status="draft"),
        ArticleQuery(status="scheduled", featured="true"),
        ArticleQuery(search="btc", category="Market Analysis"),
        ArticleQuery(sort="popular", limit="50"),
    ]
    for query in queries:
        page = await service.list_articles(query, principal=None)
        assert {a.status for a in page.items} <= {"published"}
        assert page.total == page.count

    reader = Principal(id=None, email="reader@cryptonews.test", role="reader")
    page = await service.list_articles(ArticleQuery(status="draft"), principal=reader)
    assert [a.title for a in page.items] == ["Live"]

@pytest.mark.asyncio
async def test_admin_listing_defaults_to_all_statuses(db_session: AsyncSession, make_article):
    await make_article(title="Live")
    await make_article(title="Hidden Draft", status="draft")
    service = ArticleService(db_session)

    page = await service.list_articles(ArticleQuery(), principal=ADMIN)
    assert page.total == 2

    page = await service.list_articles(ArticleQuery(status="draft"), principal=ADMIN)
    assert [a.title for a in page.items] == ["Hidden Draft"]

@pytest.mark.asyncio
async def test_invalid_filters_are_skipped(db_session: AsyncSession, make_article):
    await make_article(title="One")
    await make_article(title="Two", category="Education")
    service = ArticleService(db_session)

    page = await service.list_articles(ArticleQuery(category="Memes", author="nobody"))
    assert page.total == 2

    page = await service.list_articles(ArticleQuery(category="Education"))
    assert [a.title for a in page.items] == ["Two"]

@pytest.mark.asyncio
async def test_filters_by_author_featured_search_and_dates(db_session: AsyncSession, make_article, author_principal):
    now = datetime.now(timezone.utc)
    await make_article(title="Solana Outage Explained", principal=author_principal, publish_date=now - timedelta(days=10))
    await make_article(title="Ethereum Gas Fees", is_featured=True, tags=["DeFi"], publish_date=now - timedelta(days=2))
    await make_article(title="Weekly Wrap", content="Dogecoin and friends", publish_date=now)
    service = ArticleService(db_session)

    page = await service.list_articles(ArticleQuery(author=str(author_principal.id)))
    assert [a.title for a in page.items] == ["Solana Outage Explained"]

    page = await service.list_articles(ArticleQuery(featured="true"))
    assert [a.title for a in page.items] == ["Ethereum Gas Fees"]
    page = await service.list_articles(ArticleQuery(featured="false"))
    assert page.total == 2

    # title, content and tags are all searched, case-insensitively
    for term, expected in (("solana", "Solana Outage Explained"), ("DOGECOIN", "Weekly Wrap"), ("defi", "Ethereum Gas Fees")):
        page = await service.list_articles(ArticleQuery(search=term))
        assert [a.title for a in page.items] == [expected]

    page = await service.list_articles(ArticleQuery(
        date_from=(now - timedelta(days=3)).isoformat(),
        date_to=(now - timedelta(days=1)).isoformat(),
    ))
    assert [a.title for a in page.items] == ["Ethereum Gas Fees"]

@pytest.mark.asyncio
async def test_sort_orders(db_session: AsyncSession, make_article):
    now = datetime.now(timezone.utc)
    old = await make_article(title="Old", publish_date=now - timedelta(days=3))
    mid = await make_article(title="Mid", publish_date=now - timedelta(days=2))
    await make_article(title="New", publish_date=now - timedelta(days=1))
    await set_counters(db_session, mid, views=50, likes=1)
    await set_counters(db_session, old, views=10, likes=9)
    service = ArticleService(db_session)

    async def titles(sort: SortOrder):
        page = await service.list_articles(ArticleQuery(sort=sort))
        return [a.title for a in page.items]

    assert await titles(SortOrder.NEWEST) == ["New", "Mid", "Old"]
    assert await titles(SortOrder.OLDEST) == ["Old", "Mid", "New"]
    assert await titles(SortOrder.POPULAR) == ["Mid", "Old", "New"]
    assert await titles(SortOrder.LIKED) == ["Old", "Mid", "New"]

@pytest.mark.asyncio
async def test_page_beyond_end_is_empty(db_session: AsyncSession, make_article):
    await make_article()
    page = await ArticleService(db_session).list_articles(ArticleQuery(page="3", limit="10"))
    assert page.items == []
    assert page.total == 1
    assert page.has_prev is True
    assert page.has_next is False

def test_limit_is_capped():
    query = ArticleQuery(limit="5000")
    assert query.limit == 100

@pytest.mark.asyncio
async def test_trending_excludes_articles_outside_window(db_session: AsyncSession, make_article):
    now = datetime.now(timezone.utc)
    old = await make_article(title="Old Viral", publish_date=now - timedelta(days=2))
    first = await make_article(title="Hot Today", publish_date=now - timedelta(hours=2))
    second = await make_article(title="Warm Today", publish_date=now - timedelta(hours=5))
    third = await make_article(title="Tied Today", publish_date=now - timedelta(hours=6))
    fourth = await make_article(title="Quiet Today", publish_date=now - timedelta(hours=1))
    await make_article(title="Draft Today", status="draft")
    await set_counters(db_session, old, views=10_000)
    await set_counters(db_session, first, views=30)
    await set_counters(db_session, second, views=20, likes=1)
    await set_counters(db_session, third, views=20, likes=5)
    await set_counters(db_session, fourth, views=1)

    trending = await ArticleService(db_session).get_trending(limit=3, timeframe=Timeframe.DAY)
    assert [a.title for a in trending] == ["Hot Today", "Tied Today", "Warm Today"]

    weekly = await ArticleService(db_session).get_trending(timeframe=Timeframe.WEEK)
    assert weekly[0].title == "Old Viral"
    assert len(weekly) == 5

@pytest.mark.asyncio
async def test_view_increment_is_a_single_update(db_session: AsyncSession, make_article):
    article = await make_article()
    service = ArticleService(db_session)

    await service.increment_view_count(article.id)
    await service.increment_view_count(article.id)

    refreshed = await service.get_article(article.id)
    assert refreshed.views == 2

@pytest.mark.asyncio
async def test_search_matches_tags_not_their_storage_format(db_session: AsyncSession, make_article):
    await make_article(title="Plain")
    await make_article(title="Accented", tags=["Éther", "layer two"])
    await make_article(title="Staking Yields Hit 100% Gains")
    service = ArticleService(db_session)

    async def titles(term: str):
        page = await service.list_articles(ArticleQuery(search=term))
        return sorted(a.title for a in page.items)

    assert await titles("[") == []
    assert await titles('","') == []
    assert await titles("u00c9") == []
    assert await titles("Éther") == ["Accented"]
    assert await titles("éTHER") == ["Accented"]
    assert await titles("layer two") == ["Accented"]

    # Wildcard characters are matched literally
    assert await titles("%") == ["Staking Yields Hit 100% Gains"]
    assert await titles("1_0") == []
    assert await titles("100%") == ["Staking Yields Hit 100% Gains"]

@pytest.mark.asyncio
async def test_search_follows_updates(db_session: AsyncSession, make_article):
    article = await make_article(title="Market Wrap", tags=["bitcoin"])
    service = ArticleService(db_session)

    await service.update_article(str(article.id), ArticleUpdate(tags=["solana"]), ADMIN)

    page = await service.list_articles(ArticleQuery(search="bitcoin"))
    assert page.items == []
    page = await service.list_articles(ArticleQuery(search="solana"))
    assert [a.title for a in page.items] == ["Market Wrap"]
