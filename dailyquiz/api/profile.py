from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from dailyquiz.core.auth import Identity, get_identity
from dailyquiz.core.database import get_db
from dailyquiz.services.users import UserDirectory

router = APIRouter()


class ProfileOut(BaseModel):
    email: Optional[str] = None
    display_name: str
    role: str


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None


@router.get("", response_model=ProfileOut)
def get_profile(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    return ProfileOut(**UserDirectory(db).profile(identity.user_id, email=identity.email))


@router.post("")
def update_profile(payload: ProfileUpdate, identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    UserDirectory(db).rename(identity.user_id, payload.display_name, email=identity.email)
    return {"status": "updated"}
