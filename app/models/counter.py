from sqlalchemy import Column, String, Integer
from app.db.database import Base


class Counter(Base):
    """Per-entity sequence used for the public numeric ids of traders, ads and tickets"""
    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)  # traders, ads, tickets
    seq = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Counter(name='{self.name}', seq={self.seq})>"
