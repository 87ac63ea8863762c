"""Saved free-form questions, most recently used first."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from jeopardy_stats.models import Question
from jeopardy_stats.schemas import QuestionOut

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_question_text(text: str) -> str:
    return text.strip().lower()


def list_questions(db: Session) -> list[Question]:
    return (
        db.query(Question)
        .order_by(desc(func.coalesce(Question.last_used_at_utc, Question.created_at_utc)))
        .all()
    )


def get_question(db: Session, question_id: int) -> Question | None:
    return db.query(Question).filter(Question.id == question_id).one_or_none()


def find_similar_question(db: Session, text: str) -> Question | None:
    return (
        db.query(Question)
        .filter(Question.normalized_text == normalize_question_text(text))
        .first()
    )


def touch_question(db: Session, question: Question) -> Question:
    question.last_used_at_utc = _utcnow()
    db.commit()
    db.refresh(question)
    return question


def save_question(
    db: Session,
    text: str,
    summary: str = "",
    tags: list[str] | None = None,
) -> tuple[Question, bool]:
    """Store a question, or bump the existing one. Returns (question, existed)."""

    existing = find_similar_question(db, text)
    if existing is not None:
        logger.info("Question #%s reused", existing.id)
        return touch_question(db, existing), True

    now = _utcnow()
    question = Question(
        text=text.strip(),
        normalized_text=normalize_question_text(text),
        summary=summary or "",
        tags_json=json.dumps(tags or [], ensure_ascii=False),
        created_at_utc=now,
        last_used_at_utc=now,
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    logger.info("Question #%s saved", question.id)
    return question, False


def delete_question(db: Session, question_id: int) -> bool:
    question = get_question(db, question_id)
    if question is None:
        return False
    db.delete(question)
    db.commit()
    return True


def serialize_question(question: Question) -> QuestionOut:
    try:
        tags = json.loads(question.tags_json or "[]")
    except json.JSONDecodeError:
        logger.warning("Question #%s has unreadable tags_json", question.id)
        tags = []
    return QuestionOut(
        id=question.id,
        text=question.text,
        summary=question.summary or "",
        tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        created_at_utc=question.created_at_utc,
        last_used_at_utc=question.last_used_at_utc,
    )
