from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from dailyquiz.core.config import Settings
from dailyquiz.core.database import get_db
from dailyquiz.core.errors import Unauthenticated
from dailyquiz.services.roles import RoleGuard


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None
    phone: Optional[str] = None


# auto_error=False: a missing or non-Bearer header reaches us as None
bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_token(settings: Settings, user_id: str, email: Optional[str] = None,
                 phone: Optional[str] = None, ttl_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = ttl_minutes if ttl_minutes is not None else settings.TOKEN_TTL_MINUTES
    payload = {"sub": user_id, "iat": int(now.timestamp()), "exp": int((now + timedelta(minutes=ttl)).timestamp())}
    if email:
        payload["email"] = email
    if phone:
        payload["phone"] = phone
    return jwt.encode(payload, settings.APP_SECRET.get_secret_value(), algorithm="HS256")


def verify_token(settings: Settings, token: str) -> Identity:
    try:
        payload = jwt.decode(token, settings.APP_SECRET.get_secret_value(), algorithms=["HS256"])
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid session")
    if not payload.get("sub"):
        raise Unauthenticated("Invalid session")
    return Identity(user_id=str(payload["sub"]), email=payload.get("email"), phone=payload.get("phone"))


def get_identity(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                 settings: Settings = Depends(get_settings)) -> Identity:
    if creds is None or not creds.credentials:
        raise Unauthenticated("Missing auth")
    return verify_token(settings, creds.credentials)


def get_optional_identity(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                          settings: Settings = Depends(get_settings)) -> Optional[Identity]:
    if creds is None or not creds.credentials:
        return None
    try:
        return verify_token(settings, creds.credentials)
    except Unauthenticated:
        return None


def require_roles(*allowed: str):
    def checker(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)) -> Identity:
        RoleGuard(db).require(identity.user_id, allowed)
        return identity
    return checker
