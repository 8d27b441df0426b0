"""Base schemas shared by request/response models."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema; accepts plain dicts and model objects."""
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class IDSchema(BaseSchema):
    id: str


class TimestampSchema(BaseSchema):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

