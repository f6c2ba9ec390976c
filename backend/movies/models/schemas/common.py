"""
Common Pydantic Schemas
"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for models exchanged with API clients (camelCase on the wire)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BaseResponse(CamelModel):
    """Base response model"""
    status: str = "success"
    message: Optional[str] = None


class ErrorDetail(CamelModel):
    field: str
    message: str


class ErrorResponse(CamelModel):
    """Body returned for every domain failure"""
    status: str = "error"
    message: str
    errors: List[ErrorDetail] = []
