import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.models.article import Article

@pytest.mark.asyncio
async def test_dashboard_stats(client: AsyncClient, db_session: AsyncSession, make_article, admin_token_headers):
    popular = await make_article(title="Most Read")
    await make_article(title="Education Piece", category="Education")
    await make_article(title="Unfinished", status="draft")
    await db_session.execute(update(Article).where(Article.id == popular.id).values(views=42, likes=3))
    await db_session.commit()
    await client.post("/api/newsletter/subscribe", json={"email": "reader@coinmail.com"})

    response = await client.get("/api/admin/stats", headers=admin_token_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalArticles"] == 3
    assert data["publishedArticles"] == 2
    assert data["draftArticles"] == 1
    assert data["scheduledArticles"] == 0
    assert data["totalViews"] == 42
    assert data["totalLikes"] == 3
    assert data["categories"] == {"Market Analysis": 2, "Education": 1}
    assert data["popularArticles"][0]["title"] == "Most Read"
    assert data["subscribers"] == 1

@pytest.mark.asyncio
async def test_stats_require_admin(client: AsyncClient, author_token_headers):
    assert (await client.get("/api/admin/stats")).status_code == 401
    assert (await client.get("/api/admin/stats", headers=author_token_headers)).status_code == 403

@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}
    assert "x-request-id" in response.headers
