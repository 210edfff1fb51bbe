# vendoriq/schemas/taxonomy.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class FormFieldOut(BaseModel):
    id: int
    field_name: str
    field_label: str
    field_type: str
    placeholder: Optional[str] = None
    is_required: bool
    validation_rules: Optional[Dict[str, Any]] = None
    options: Optional[List[Any]] = None
    sort_order: int

    class Config:
        from_attributes = True


class CategoryOut(BaseModel):
    id: int
    industry_id: Optional[int] = None
    name: str
    slug: str
    description: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True


class IndustryOut(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True


class IndustryDetail(IndustryOut):
    categories: List[CategoryOut] = []
