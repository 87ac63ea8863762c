from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from jeopardy_stats.db import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    # Lower-cased, trimmed text used to spot repeats of the same question
    normalized_text = Column(String, nullable=False, index=True)
    summary = Column(Text, nullable=False, default="")
    tags_json = Column(Text, nullable=False, default="[]")
    created_at_utc = Column(DateTime(timezone=True), server_default=func.now())
    last_used_at_utc = Column(DateTime(timezone=True), nullable=True)
