import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.core.exceptions import BadRequestError, NotFoundError
from cryptonews.models.newsletter import NewsletterSubscriber
from cryptonews.schemas.newsletter import SubscribeRequest

logger = logging.getLogger(__name__)

SUBSCRIBED = "subscribed"
UNSUBSCRIBED = "unsubscribed"


class NewsletterService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_subscriber(self, email: str) -> Optional[NewsletterSubscriber]:
        result = await self.db.execute(
            select(NewsletterSubscriber)
            .where(NewsletterSubscriber.email == email.lower())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def subscribe(
        self,
        subscribe_in: SubscribeRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> NewsletterSubscriber:
        email = subscribe_in.email.lower()
        subscriber = await self.get_subscriber(email)
        if subscriber and subscriber.status == SUBSCRIBED:
            raise BadRequestError("Email already subscribed")

        if subscriber is None:
            subscriber = NewsletterSubscriber(email=email)
            self.db.add(subscriber)

        subscriber.status = SUBSCRIBED
        subscriber.subscription_date = datetime.now(timezone.utc)
        subscriber.unsubscription_date = None
        subscriber.categories = [c.value for c in subscribe_in.categories]
        subscriber.frequency = subscribe_in.frequency.value
        subscriber.source = subscribe_in.source.value
        subscriber.ip_address = ip_address
        subscriber.user_agent = (user_agent or "")[:512] or None

        await self.db.commit()
        logger.info("Newsletter subscription", extra={"email": email})
        return await self.get_subscriber(email)

    async def unsubscribe(self, email: str) -> NewsletterSubscriber:
        subscriber = await self.get_subscriber(email)
        if subscriber is None or subscriber.status == UNSUBSCRIBED:
            raise NotFoundError("Subscription not found")

        subscriber.status = UNSUBSCRIBED
        subscriber.unsubscription_date = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info("Newsletter unsubscription", extra={"email": subscriber.email})
        return await self.get_subscriber(email)

    async def list_subscribers(
        self, skip: int = 0, limit: int = 20, status: Optional[str] = None
    ) -> Tuple[List[NewsletterSubscriber], int]:
        query = select(NewsletterSubscriber)
        if status:
            query = query.where(NewsletterSubscriber.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.db.scalar(count_query)

        query = query.order_by(NewsletterSubscriber.subscription_date.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return result.scalars().all(), total or 0

    async def count_active(self) -> int:
        return await self.db.scalar(
            select(func.count()).select_from(NewsletterSubscriber)
            .where(NewsletterSubscriber.status == SUBSCRIBED)
        ) or 0
