from sqlalchemy import Column, String, DateTime, Numeric, Integer, Boolean, Float, JSON
from sqlalchemy.sql import func
from app.db.database import Base


class Trader(Base):
    __tablename__ = "traders"

    # Numeric id assigned from the "traders" counter
    id = Column(Integer, primary_key=True, autoincrement=False)

    # Profile
    name = Column(String(100), nullable=False)
    avatar = Column(String(500), nullable=True)
    country = Column(String(100), nullable=True)
    currency = Column(String(10), nullable=True)
    currency_symbol = Column(String(10), nullable=True)

    # Offer
    price_per_usdt = Column(Numeric(20, 8), nullable=False, default=0)
    network = Column(String(10), nullable=False, default="TRC-20")  # ERC-20, BEP-20, TRC-20
    payment_options = Column(JSON, nullable=True)
    # Structure: [{"name": "UPI", "fields": ["UPI ID", "Full Name"]}, ...]
    limit = Column(String(100), nullable=True)

    # Reputation
    total_trades = Column(Integer, default=0)
    success_rate = Column(Float, default=0)
    response_rate = Column(String(50), nullable=True)
    rating = Column(Float, default=0)
    reviews = Column(Integer, default=0)

    # Status
    online = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Trader(id={self.id}, name='{self.name}', network='{self.network}')>"
