# vendoriq/db/__init__.py
from vendoriq.db.base_class import Base
from vendoriq.db.session import engine, SessionLocal, get_db

__all__ = ["Base", "engine", "SessionLocal", "get_db"]
