from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from dailyquiz.core.auth import Identity, get_identity
from dailyquiz.core.database import get_db
from dailyquiz.services.answers import AnswerService, SubmissionOutcome

router = APIRouter()

ALREADY_SUBMITTED_MESSAGE = "You've already submitted today's answer. Come back tomorrow!"


class AnswerSubmit(BaseModel):
    question_id: Optional[str] = None
    selected_option: Optional[str] = None


class AnswerAccepted(BaseModel):
    status: str


@router.post("", response_model=AnswerAccepted, responses={409: {"description": "Already submitted"}})
def submit_answer(payload: AnswerSubmit, identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    outcome = AnswerService(db).submit(identity.user_id, payload.question_id, payload.selected_option,
                                       email=identity.email)
    if outcome is SubmissionOutcome.ALREADY_SUBMITTED:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT,
                            content={"status": outcome.value, "message": ALREADY_SUBMITTED_MESSAGE})
    # correctness and points stay hidden until the reveal
    return AnswerAccepted(status=outcome.value)
