# vendoriq/models/__init__.py
from vendoriq.db.base_class import Base

from .user import User
from .industry import Industry, Category
from .form_field import FormField
from .service_request import ServiceRequest
from .subscription import Subscription
from .file import File

__all__ = [
    "Base",
    "User",
    "Industry",
    "Category",
    "FormField",
    "ServiceRequest",
    "Subscription",
    "File",
]
