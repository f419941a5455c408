from sqlalchemy import Column, String, DateTime, Integer, Text
from sqlalchemy.sql import func
from app.db.database import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=False)

    # Submitter
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    wallet_address = Column(String(128), nullable=True)

    # Content
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(10), nullable=False, default="open")  # open, closed

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Ticket(id={self.id}, subject='{self.subject}', status='{self.status}')>"
