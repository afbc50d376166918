from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from dailyquiz.core.auth import get_settings, require_roles
from dailyquiz.core.config import Settings
from dailyquiz.core.database import get_db
from dailyquiz.models.orm import Role
from dailyquiz.services.leaderboard import LeaderboardProjector

router = APIRouter()


class LeaderRow(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    total_points: int
    role: str


class Leaderboard(BaseModel):
    leaderboard: List[LeaderRow]


@router.get("", response_model=Leaderboard,
            dependencies=[Depends(require_roles(Role.ADMIN.value, Role.MODERATOR.value))])
def leaderboard(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    return Leaderboard(leaderboard=LeaderboardProjector(db, limit=settings.LEADERBOARD_LIMIT).list())
