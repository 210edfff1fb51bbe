# vendoriq/models/file.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, BigInteger, Enum, ForeignKey, func
from sqlalchemy.orm import relationship

from vendoriq.db.base_class import Base

FILE_TYPES = ("image", "document", "video", "audio", "other")


class File(Base):
    __tablename__ = "files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    original_name = Column(String(255), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String(255), nullable=False)
    file_type = Column(Enum(*FILE_TYPES, name="file_type"), nullable=False, index=True)
    is_public = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="files")
