from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.sql import func
import uuid
from app.db.database import Base
from app.core.database_types import UUIDType


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)

    # Credentials
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Status
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<AdminUser(username='{self.username}')>"
