from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.api.v1 import dependencies
from cryptonews.database import get_db
from cryptonews.schemas.article import parse_positive_int
from cryptonews.schemas.newsletter import (
    SubscribeRequest, SubscriberListResponse, SubscriberResponse, UnsubscribeRequest,
)
from cryptonews.services.newsletter import NewsletterService

router = APIRouter()

@router.post("/subscribe", response_model=SubscriberResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    subscribe_in: SubscribeRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> Any:
    subscriber = await NewsletterService(db).subscribe(
        subscribe_in,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return {"message": "Successfully subscribed to newsletter", "data": subscriber}

@router.post("/unsubscribe", response_model=SubscriberResponse)
async def unsubscribe(
    unsubscribe_in: UnsubscribeRequest,
    db: AsyncSession = Depends(get_db)
) -> Any:
    subscriber = await NewsletterService(db).unsubscribe(unsubscribe_in.email)
    return {"message": "Successfully unsubscribed from newsletter", "data": subscriber}

@router.get("", response_model=SubscriberListResponse, dependencies=[Depends(dependencies.require_admin)])
async def list_subscribers(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status_: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    List newsletter subscribers (admin only).
    """
    page_no = parse_positive_int(page, 1)
    per_page = parse_positive_int(limit, 20)
    items, total = await NewsletterService(db).list_subscribers(
        skip=(page_no - 1) * per_page, limit=per_page, status=status_
    )
    pages = (total + per_page - 1) // per_page
    return {
        "count": len(items),
        "total": total,
        "pagination": {
            "current": page_no,
            "pages": pages,
            "has_next": page_no < pages,
            "has_prev": page_no > 1,
        },
        "data": items,
    }
