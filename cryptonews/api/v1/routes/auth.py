from typing import Any

from fastapi import APIRouter, Depends, Response

from cryptonews.api.v1 import dependencies
from cryptonews.config import settings
from cryptonews.schemas.auth import LoginRequest, LoginResponse, MeResponse
from cryptonews.schemas.common import MessageResponse
from cryptonews.services.auth import AuthService, Principal

router = APIRouter()

@router.post("/login", response_model=LoginResponse)
async def login(
    login_in: LoginRequest,
    response: Response,
    auth: AuthService = Depends(dependencies.get_auth_service),
) -> Any:
    """
    Exchange email and password for a token, also set as an HTTP-only cookie.
    """
    token, principal = await auth.login(login_in.email, login_in.password)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="strict",
    )
    return {"token": token, "data": principal}

@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    principal: Principal = Depends(dependencies.get_current_principal),
) -> Any:
    response.delete_cookie(settings.AUTH_COOKIE_NAME, httponly=True, samesite="strict")
    return {"message": "Logged out successfully"}

@router.get("/me", response_model=MeResponse)
async def me(principal: Principal = Depends(dependencies.get_current_principal)) -> Any:
    return {"data": principal}
