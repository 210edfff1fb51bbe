# vendoriq/models/form_field.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, JSON, ForeignKey, func
from sqlalchemy.orm import relationship

from vendoriq.db.base_class import Base

FIELD_TYPES = ("text", "textarea", "select", "radio", "checkbox", "number", "date", "file")


class FormField(Base):
    __tablename__ = "form_fields"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), index=True)
    field_name = Column(String(255), nullable=False)
    field_label = Column(String(255), nullable=False)
    field_type = Column(Enum(*FIELD_TYPES, name="form_field_type"), nullable=False)
    placeholder = Column(String(255), nullable=True)
    is_required = Column(Boolean, default=False)
    validation_rules = Column(JSON, default=dict)
    options = Column(JSON, nullable=True)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="form_fields")
