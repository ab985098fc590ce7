from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from cryptonews.database import Base

class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    # subscribed | unsubscribed | pending
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    subscription_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    unsubscription_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    categories: Mapped[List[str]] = mapped_column(JSON, default=list)
    frequency: Mapped[str] = mapped_column(String(10), nullable=False, default="weekly")
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="website")
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(String(512))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now())
