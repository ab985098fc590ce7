import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.services.newsletter import NewsletterService

@pytest.mark.asyncio
async def test_subscribe(client: AsyncClient):
    response = await client.post(
        "/api/newsletter/subscribe",
        json={"email": "Trader@CoinMail.com", "categories": ["Business", "Events"], "frequency": "daily"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Successfully subscribed to newsletter"
    data = body["data"]
    assert data["email"] == "trader@coinmail.com"
    assert data["status"] == "subscribed"
    assert data["categories"] == ["Business", "Events"]
    assert data["frequency"] == "daily"
    assert data["source"] == "website"

@pytest.mark.asyncio
async def test_duplicate_subscription_rejected(client: AsyncClient):
    await client.post("/api/newsletter/subscribe", json={"email": "hodler@coinmail.com"})
    response = await client.post("/api/newsletter/subscribe", json={"email": "HODLER@coinmail.com"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Email already subscribed"}

@pytest.mark.asyncio
async def test_subscribe_validates_input(client: AsyncClient):
    response = await client.post("/api/newsletter/subscribe", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert "email" in response.json()["message"]

    response = await client.post(
        "/api/newsletter/subscribe", json={"email": "a@coinmail.com", "frequency": "hourly"}
    )
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_unsubscribe_and_resubscribe(client: AsyncClient, db_session: AsyncSession):
    await client.post("/api/newsletter/subscribe", json={"email": "whale@coinmail.com"})

    response = await client.post("/api/newsletter/unsubscribe", json={"email": "whale@coinmail.com"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "unsubscribed"
    assert data["unsubscriptionDate"] is not None

    # A second unsubscribe has nothing to act on
    response = await client.post("/api/newsletter/unsubscribe", json={"email": "whale@coinmail.com"})
    assert response.status_code == 404

    response = await client.post(
        "/api/newsletter/subscribe", json={"email": "whale@coinmail.com", "frequency": "monthly"}
    )
    assert response.status_code == 201
    assert response.json()["data"]["status"] == "subscribed"
    assert response.json()["data"]["unsubscriptionDate"] is None
    assert await NewsletterService(db_session).count_active() == 1

@pytest.mark.asyncio
async def test_unsubscribe_unknown_email(client: AsyncClient):
    response = await client.post("/api/newsletter/unsubscribe", json={"email": "nobody@coinmail.com"})
    assert response.status_code == 404
    assert response.json()["message"] == "Subscription not found"

@pytest.mark.asyncio
async def test_admin_lists_subscribers(client: AsyncClient, admin_token_headers):
    for name in ("alice", "bob", "carol"):
        await client.post("/api/newsletter/subscribe", json={"email": f"{name}@coinmail.com"})
    await client.post("/api/newsletter/unsubscribe", json={"email": "bob@coinmail.com"})

    response = await client.get("/api/newsletter", headers=admin_token_headers, params={"limit": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["count"] == 2
    assert body["pagination"] == {"current": 1, "pages": 2, "hasNext": True, "hasPrev": False}

    response = await client.get(
        "/api/newsletter", headers=admin_token_headers, params={"status": "unsubscribed"}
    )
    assert [s["email"] for s in response.json()["data"]] == ["bob@coinmail.com"]

@pytest.mark.asyncio
async def test_subscriber_list_is_admin_only(client: AsyncClient, reader_token_headers):
    assert (await client.get("/api/newsletter")).status_code == 401
    response = await client.get("/api/newsletter", headers=reader_token_headers)
    assert response.status_code == 403
