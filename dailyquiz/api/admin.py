from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dailyquiz.api.auth import get_messenger
from dailyquiz.core.auth import get_settings, require_roles
from dailyquiz.core.config import Settings
from dailyquiz.core.database import get_db
from dailyquiz.models.orm import Role
from dailyquiz.services.messaging import ChatMessenger
from dailyquiz.services.questions import QuestionRepository

router = APIRouter()

admin_only = require_roles(Role.ADMIN.value)


class QuestionCreate(BaseModel):
    q_date: Optional[str] = None
    question_text: Optional[str] = None
    context_text: Optional[str] = None
    video_url: Optional[str] = Field(default=None, max_length=500)
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    correct_option: Optional[str] = None
    points: Optional[int] = None


class QuestionRow(BaseModel):
    id: str; q_date: str; question_text: str
    context_text: Optional[str] = None; video_url: Optional[str] = None
    option_a: str; option_b: str; option_c: str; option_d: str
    correct_option: str; points: int


class QuestionList(BaseModel):
    questions: List[QuestionRow]


@router.get("/questions", response_model=QuestionList, dependencies=[Depends(admin_only)])
def list_questions(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    return QuestionList(questions=QuestionRepository(db).list(limit=settings.ADMIN_QUESTIONS_LIMIT))


@router.post("/questions", status_code=status.HTTP_201_CREATED, dependencies=[Depends(admin_only)])
def create_question(payload: QuestionCreate, db: Session = Depends(get_db)):
    created = QuestionRepository(db).create(payload.model_dump())
    return {"status": "created", "id": created["id"]}


@router.get("/messaging/status", dependencies=[Depends(admin_only)])
def messaging_status(messenger: ChatMessenger = Depends(get_messenger)):
    return {"ok": True, "status": messenger.ping()}
