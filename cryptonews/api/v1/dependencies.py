from pathlib import Path
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cryptonews.config import settings
from cryptonews.core.exceptions import ForbiddenError, UnauthorizedError
from cryptonews.database import get_db
from cryptonews.services.auth import (
    AdminCredentialSource, AuthService, DatabaseCredentials, Principal, StaticAdminCredentials,
)
from cryptonews.services.reactions import ReactionLedger, get_reaction_ledger
from cryptonews.services.upload import UploadService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

def get_credential_source(db: AsyncSession = Depends(get_db)) -> AdminCredentialSource:
    if settings.AUTH_BACKEND == "static":
        return StaticAdminCredentials(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD_HASH)
    return DatabaseCredentials(db)

def get_auth_service(
    credentials: AdminCredentialSource = Depends(get_credential_source),
) -> AuthService:
    return AuthService(credentials)

def get_reactions(db: AsyncSession = Depends(get_db)) -> ReactionLedger:
    return get_reaction_ledger(db, settings.REACTION_MODE)

def get_upload_service() -> UploadService:
    return UploadService(Path(settings.UPLOAD_DIR), settings.MAX_UPLOAD_SIZE)

def _read_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    return bearer or request.cookies.get(settings.AUTH_COOKIE_NAME)

async def get_optional_principal(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[Principal]:
    """The caller if a valid token was sent; anonymous otherwise."""
    token = _read_token(request, bearer)
    if not token:
        return None
    try:
        return await auth.authenticate_token(token)
    except UnauthorizedError:
        return None

async def get_current_principal(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Principal:
    token = _read_token(request, bearer)
    if not token:
        raise UnauthorizedError()
    return await auth.authenticate_token(token)

async def require_admin(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
    return principal

async def require_author(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not principal.can_author:
        raise ForbiddenError("Author or admin access required")
    return principal
