from typing import Optional
from uuid import UUID

from cryptonews.schemas.common import CamelModel

class LoginRequest(CamelModel):
    # Presence is checked by the service so a missing field gets a readable message
    email: Optional[str] = None
    password: Optional[str] = None

class PrincipalOut(CamelModel):
    id: Optional[UUID] = None
    email: str
    role: str
    name: Optional[str] = None

class LoginResponse(CamelModel):
    success: bool = True
    token: str
    message: str = "Login successful"
    data: PrincipalOut

class MeResponse(CamelModel):
    success: bool = True
    data: PrincipalOut
