# vendoriq/models/service_request.py
import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Enum, JSON, ForeignKey, func
from sqlalchemy.orm import relationship

from vendoriq.db.base_class import Base

REQUEST_STATUSES = ("open", "fulfilled", "closed")


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    industry_id = Column(Integer, ForeignKey("industries.id"), index=True, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), index=True, nullable=True)
    location = Column(String(255), index=True, nullable=False)
    budget = Column(String(255), nullable=True)
    deadline = Column(DateTime, nullable=True)
    status = Column(Enum(*REQUEST_STATUSES, name="service_request_status"), default="open", index=True)
    created_by = Column(String(36), ForeignKey("users.id"), index=True, nullable=True)
    custom_fields = Column(JSON, default=dict)
    attachments = Column(JSON, default=list)
    response_count = Column(Integer, default=0)
    view_count = Column(Integer, default=0)
    is_featured = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    creator = relationship("User", back_populates="service_requests")
    industry = relationship("Industry")
    category = relationship("Category")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "industry_id": self.industry_id,
            "category_id": self.category_id,
            "location": self.location,
            "budget": self.budget,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "status": self.status,
            "created_by": self.created_by,
            "custom_fields": self.custom_fields or {},
            "attachments": self.attachments or [],
            "response_count": self.response_count,
            "view_count": self.view_count,
            "is_featured": self.is_featured,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
