"""
Daily question records.

One question per calendar day; the unique index on ``q_date`` decides
duplicates. Public readers never see ``correct_option`` or ``points`` for a
day that has not passed yet.
"""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dailyquiz.core.errors import DuplicateQuestionDate, ValidationFailed
from dailyquiz.models.orm import OPTIONS, Question
from dailyquiz.services.dates import DATE_FORMAT, add_days, parse_day

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("q_date", "question_text", "option_a", "option_b", "option_c", "option_d")
PUBLIC_FIELDS = ("id", "q_date", "question_text", "context_text", "video_url",
                 "option_a", "option_b", "option_c", "option_d")
ADMIN_FIELDS = ("id", "q_date", "question_text", "context_text", "video_url",
                "option_a", "option_b", "option_c", "option_d", "correct_option", "points")


def _serialize(q: Question, fields) -> dict:
    out = {f: getattr(q, f) for f in fields}
    out["q_date"] = q.q_date.strftime(DATE_FORMAT)
    return out


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class QuestionRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, payload: dict) -> dict:
        missing = [f for f in REQUIRED_FIELDS if not _clean(payload.get(f))]
        if missing:
            raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")

        try:
            q_date = parse_day(_clean(payload["q_date"]))
        except ValueError:
            raise ValidationFailed("q_date must be YYYY-MM-DD")

        correct = (_clean(payload.get("correct_option")) or "").upper()
        if correct not in OPTIONS:
            raise ValidationFailed("correct_option must be A/B/C/D")

        points = payload.get("points")
        if points is None:
            points = 1
        if isinstance(points, bool) or not isinstance(points, int) or points < 1:
            raise ValidationFailed("points must be a positive integer")

        question = Question(
            q_date=q_date,
            question_text=_clean(payload["question_text"]),
            context_text=_clean(payload.get("context_text")),
            video_url=_clean(payload.get("video_url")),
            option_a=_clean(payload["option_a"]),
            option_b=_clean(payload["option_b"]),
            option_c=_clean(payload["option_c"]),
            option_d=_clean(payload["option_d"]),
            correct_option=correct,
            points=points,
        )
        self.db.add(question)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateQuestionDate(f"A question already exists for {q_date.strftime(DATE_FORMAT)}")
        logger.info("Question %s created for %s", question.id, question.q_date)
        return _serialize(question, ADMIN_FIELDS)

    def list(self, limit: int = 200) -> List[dict]:
        rows = self.db.scalars(select(Question).order_by(Question.q_date.desc()).limit(limit)).all()
        return [_serialize(q, ADMIN_FIELDS) for q in rows]

    def by_day(self, day: str) -> Optional[Question]:
        return self.db.scalar(select(Question).where(Question.q_date == parse_day(day)))

    def public_today(self, today: str) -> Optional[dict]:
        q = self.by_day(today)
        return _serialize(q, PUBLIC_FIELDS) if q else None

    def yesterday_reveal(self, today: str) -> Optional[dict]:
        q = self.by_day(add_days(today, -1))
        if q is None:
            return None
        return {"correct_option": q.correct_option, "correct_text": q.option_text(q.correct_option)}
