from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from supportdash.db.base import Base

class SessionMessage(Base):
    __tablename__ = "session_messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    phone = Column(String, nullable=False)
    message = Column(Text, nullable=False)

    # "user" | "agent"
    role = Column(String, nullable=False)

    # First message of a conversation
    is_message_start = Column(Boolean, default=False)
    sent_at = Column(DateTime, default=datetime.now, index=True)
