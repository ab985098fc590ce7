from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class Pagination(CamelModel):
    current: int
    pages: int
    has_next: bool
    has_prev: bool

class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
