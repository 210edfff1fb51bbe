# vendoriq/schemas/service_request.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ServiceRequestCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=255)
    description: str = Field(..., min_length=10, max_length=5000)
    industry_id: Optional[int] = Field(None, gt=0)
    category_id: Optional[int] = Field(None, gt=0)
    location: str = Field(..., min_length=2, max_length=255)
    budget: Optional[str] = Field(None, max_length=100)
    deadline: Optional[datetime] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("deadline")
    @classmethod
    def deadline_in_future(cls, value):
        if value is None:
            return value
        if value.tzinfo:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        if value <= datetime.utcnow():
            raise ValueError("deadline must be in the future")
        return value
