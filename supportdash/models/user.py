from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from supportdash.db.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String, nullable=False)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, index=True)
