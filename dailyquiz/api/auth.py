from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dailyquiz.core.auth import create_token, get_settings
from dailyquiz.core.config import Settings
from dailyquiz.core.database import get_db
from dailyquiz.services.messaging import ChatMessenger
from dailyquiz.services.otp import OneTimeCodes

router = APIRouter()


def get_messenger(request: Request) -> ChatMessenger:
    return request.app.state.messenger


class DevLogin(BaseModel):
    user_id: str
    email: Optional[str] = None


class SendOtp(BaseModel):
    phone: Optional[str] = Field(default=None, max_length=32)


class VerifyOtp(BaseModel):
    phone: Optional[str] = Field(default=None, max_length=32)
    code: Optional[str] = Field(default=None, max_length=16)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str


@router.post("/dev-login", response_model=TokenOut)
def dev_login(payload: DevLogin, settings: Settings = Depends(get_settings)):
    if not settings.DEV_LOGIN_ENABLED:
        raise HTTPException(404, "Not Found")
    token = create_token(settings, payload.user_id, email=payload.email)
    return TokenOut(access_token=token, user_id=payload.user_id)


@router.post("/phone/send-otp")
def send_otp(payload: SendOtp, db: Session = Depends(get_db), settings: Settings = Depends(get_settings),
             messenger: ChatMessenger = Depends(get_messenger)):
    OneTimeCodes(db, ttl_seconds=settings.OTP_TTL_SECONDS).issue(
        payload.phone, messenger, template=settings.OTP_MESSAGE_TEMPLATE)
    return {"success": True}


@router.post("/phone/verify-otp", response_model=TokenOut)
def verify_otp(payload: VerifyOtp, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = OneTimeCodes(db, ttl_seconds=settings.OTP_TTL_SECONDS).verify(payload.phone, payload.code)
    token = create_token(settings, user.id, email=user.email, phone=user.phone)
    return TokenOut(access_token=token, user_id=user.id)
