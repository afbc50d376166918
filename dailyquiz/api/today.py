from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from dailyquiz.core.auth import Identity, get_optional_identity, get_settings
from dailyquiz.core.config import Settings
from dailyquiz.core.database import get_db
from dailyquiz.services import dates
from dailyquiz.services.answers import AnswerService
from dailyquiz.services.questions import QuestionRepository
from dailyquiz.services.streak import compute_streak, streak_anchor

router = APIRouter()


class PublicQuestion(BaseModel):
    id: str
    q_date: str
    question_text: str
    context_text: Optional[str] = None
    video_url: Optional[str] = None
    option_a: str
    option_b: str
    option_c: str
    option_d: str


class Reveal(BaseModel):
    correct_option: Literal["A", "B", "C", "D"]
    correct_text: str


class TodaySummary(BaseModel):
    today_question: Optional[PublicQuestion] = None
    yesterday_reveal: Optional[Reveal] = None
    streak: int = 0
    today: str


def current_day(settings: Settings = Depends(get_settings)) -> str:
    return dates.today(settings.QUIZ_TIMEZONE)


@router.get("", response_model=TodaySummary)
def today_summary(today: str = Depends(current_day), identity: Optional[Identity] = Depends(get_optional_identity),
                  db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    questions = QuestionRepository(db)
    streak = 0
    if identity:
        days = AnswerService(db).answered_days(identity.user_id, lookback=settings.STREAK_LOOKBACK)
        streak = compute_streak(days, streak_anchor(days, today))
    return TodaySummary(
        today_question=questions.public_today(today),
        yesterday_reveal=questions.yesterday_reveal(today),
        streak=streak,
        today=today,
    )
