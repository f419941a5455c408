from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric
from sqlalchemy.sql import func

from app.db.database import Base


class PlatformSettings(Base):
    """Single-row table holding the operator-editable platform settings"""
    __tablename__ = "platform_settings"

    id = Column(Integer, primary_key=True, default=1)
    platform_fee = Column(Numeric(10, 4), nullable=False, default=0.1)
    min_trade_amount = Column(Numeric(20, 2), nullable=False, default=100)
    support_email = Column(String(255), nullable=False, default="support@example.com")
    maintenance_mode = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
