import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.core import security
from cryptonews.core.exceptions import BadRequestError, UnauthorizedError
from cryptonews.models.user import User

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
AUTHOR_ROLE = "author"


@dataclass
class Principal:
    """The authenticated caller of a request."""
    id: Optional[UUID]
    email: str
    role: str
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @property
    def can_author(self) -> bool:
        return self.role in (ADMIN_ROLE, AUTHOR_ROLE)


class AdminCredentialSource(ABC):
    """Where login credentials are checked and token claims resolved."""

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> Optional[Principal]:
        ...

    @abstractmethod
    async def resolve(self, claims: Dict[str, Any]) -> Optional[Principal]:
        ...


class StaticAdminCredentials(AdminCredentialSource):
    """A single fixed admin account; its tokens carry a role and no subject."""

    def __init__(self, email: Optional[str], password_hash: Optional[str]):
        self.email = email
        self.password_hash = password_hash

    def _principal(self) -> Principal:
        return Principal(id=None, email=self.email, role=ADMIN_ROLE, name="Admin")

    async def authenticate(self, email: str, password: str) -> Optional[Principal]:
        if not self.email or not self.password_hash:
            return None
        if email.lower() != self.email.lower():
            return None
        if not security.verify_password(password, self.password_hash):
            return None
        return self._principal()

    async def resolve(self, claims: Dict[str, Any]) -> Optional[Principal]:
        if claims.get("role") != ADMIN_ROLE or claims.get("sub") is not None or not self.email:
            return None
        return self._principal()


class DatabaseCredentials(AdminCredentialSource):
    """Accounts stored in the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate(self, email: str, password: str) -> Optional[Principal]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()

        if not user or not user.is_active:
            return None
        if not security.verify_password(password, user.hashed_password):
            return None

        user.last_login = datetime.now(timezone.utc)
        await self.db.commit()
        return Principal(id=user.id, email=user.email, role=user.role, name=user.name)

    async def resolve(self, claims: Dict[str, Any]) -> Optional[Principal]:
        try:
            user_id = UUID(str(claims.get("sub")))
        except ValueError:
            return None
        user = await self.db.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return Principal(id=user.id, email=user.email, role=user.role, name=user.name)


class AuthService:
    def __init__(self, credentials: AdminCredentialSource):
        self.credentials = credentials

    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[str, Principal]:
        if not email or not password:
            raise BadRequestError("Please provide email and password")

        principal = await self.credentials.authenticate(email.strip(), password)
        if principal is None:
            logger.warning("Rejected login", extra={"email": email})
            raise UnauthorizedError("Invalid credentials")

        subject = str(principal.id) if principal.id is not None else None
        token = security.create_access_token(role=principal.role, subject=subject)
        logger.info("Login succeeded", extra={"email": principal.email, "role": principal.role})
        return token, principal

    async def authenticate_token(self, token: str) -> Principal:
        try:
            claims = security.decode_access_token(token)
        except JWTError:
            raise UnauthorizedError()
        principal = await self.credentials.resolve(claims)
        if principal is None:
            raise UnauthorizedError()
        return principal
