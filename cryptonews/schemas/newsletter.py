from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import EmailStr

from cryptonews.schemas.article import Category
from cryptonews.schemas.common import CamelModel, Pagination

class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

class Source(str, Enum):
    WEBSITE = "website"
    SOCIAL = "social"
    REFERRAL = "referral"
    ORGANIC = "organic"

class SubscribeRequest(CamelModel):
    email: EmailStr
    categories: List[Category] = []
    frequency: Frequency = Frequency.WEEKLY
    source: Source = Source.WEBSITE

class UnsubscribeRequest(CamelModel):
    email: EmailStr

class Subscriber(CamelModel):
    id: UUID
    email: str
    status: str
    subscription_date: datetime
    unsubscription_date: Optional[datetime] = None
    categories: List[str] = []
    frequency: str
    source: str
    is_verified: bool

class SubscriberResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: Subscriber

class SubscriberListResponse(CamelModel):
    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: List[Subscriber]
