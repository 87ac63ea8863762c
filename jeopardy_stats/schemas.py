from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class QuestionOut(BaseModel):
    id: int
    text: str
    summary: str
    tags: list[str]
    created_at_utc: Optional[datetime]
    last_used_at_utc: Optional[datetime]

    class Config:
        from_attributes = True


class QueryOut(BaseModel):
    id: str
    name: str
    description: str


class SeasonsResponse(BaseModel):
    success: bool = True
    seasons: list[int]
    min: Optional[int] = None
    max: Optional[int] = None


class QueriesResponse(BaseModel):
    success: bool = True
    queries: list[QueryOut]
