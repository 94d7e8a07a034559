from sqlalchemy import Column, Integer, Text, ForeignKey
from supportdash.db.base import Base

class Survey(Base):
    __tablename__ = "survey"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # NULL until the user answers
    survey = Column(Text, nullable=True)
