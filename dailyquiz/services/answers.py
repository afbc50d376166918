"""
Answer submission.

The composite primary key on ``answers(user_id, question_id)`` is the only
arbiter of "already answered": the insert is attempted straight away and a
constraint violation is read as a repeat submission. Points are awarded in
the same transaction as the insert, so a retried request can never award
twice.
"""
import enum
import logging
from typing import List, Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dailyquiz.core.errors import NotFound, ValidationFailed
from dailyquiz.models.orm import OPTIONS, Answer, Question
from dailyquiz.services.dates import DATE_FORMAT
from dailyquiz.services.scoring import ScoringLedger
from dailyquiz.services.users import UserDirectory

logger = logging.getLogger(__name__)


class SubmissionOutcome(str, enum.Enum):
    SUBMITTED = "submitted"
    ALREADY_SUBMITTED = "already_submitted"


class AnswerService:
    def __init__(self, db: Session, users: Optional[UserDirectory] = None,
                 ledger: Optional[ScoringLedger] = None):
        self.db = db
        self.users = users or UserDirectory(db)
        self.ledger = ledger or ScoringLedger(db)

    def submit(self, user_id: str, question_id: Optional[str], selected_option: Optional[str],
               email: Optional[str] = None) -> SubmissionOutcome:
        selected = (selected_option or "").strip().upper()
        if not question_id or selected not in OPTIONS:
            raise ValidationFailed("We couldn't process your answer. Please try submitting again.")

        q = self.db.execute(
            select(Question.correct_option, Question.points).where(Question.id == question_id)
        ).first()
        if q is None:
            raise NotFound("Question not found")
        is_correct = selected == (q.correct_option or "").upper()
        points = int(q.points or 0)

        self.users.ensure(user_id, email=email)
        try:
            self.db.execute(insert(Answer).values(
                user_id=user_id, question_id=question_id,
                selected_option=selected, is_correct=is_correct,
            ))
        except IntegrityError:
            self.db.rollback()
            logger.info("User %s already answered question %s", user_id, question_id)
            return SubmissionOutcome.ALREADY_SUBMITTED

        try:
            if is_correct and points > 0:
                self.ledger.award(user_id, points)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("User %s answered question %s", user_id, question_id)
        return SubmissionOutcome.SUBMITTED

    def answered_days(self, user_id: str, lookback: int = 90) -> List[str]:
        """Distinct question days the user answered, most recent answer first."""
        rows = self.db.execute(
            select(Question.q_date)
            .join(Answer, Answer.question_id == Question.id)
            .where(Answer.user_id == user_id)
            .order_by(Answer.answered_at.desc())
            .limit(lookback)
        ).all()
        days, seen = [], set()
        for (q_date,) in rows:
            day = q_date.strftime(DATE_FORMAT)
            if day not in seen:
                seen.add(day)
                days.append(day)
        return days
