"""
Phone login with one-time codes.

A code is six digits, valid for ``OTP_TTL_SECONDS`` and stored per phone; a
new request replaces the previous code. Verification consumes the code.
"""
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from dailyquiz.core.errors import Internal, Unauthenticated, ValidationFailed
from dailyquiz.models.orm import PhoneOtp, User
from dailyquiz.services.messaging import ChatMessenger
from dailyquiz.services.users import UserDirectory

logger = logging.getLogger(__name__)

UPSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def _aware(dt: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class OneTimeCodes:
    def __init__(self, db: Session, ttl_seconds: int = 300):
        self.db = db
        self.ttl = timedelta(seconds=ttl_seconds)

    def issue(self, phone: Optional[str], messenger: ChatMessenger,
              template: str = "Your Daily Quiz code is: {code}") -> None:
        phone = (phone or "").strip()
        if not phone:
            raise ValidationFailed("Phone required")
        code = generate_code()
        expires_at = datetime.now(timezone.utc) + self.ttl
        self._upsert(phone, code, expires_at)
        messenger.send(phone, template.format(code=code))
        logger.info("Login code sent to %s", phone)

    def _upsert(self, phone: str, code: str, expires_at: datetime) -> None:
        """Store the latest code for ``phone`` in one INSERT .. ON CONFLICT statement."""
        dialect = self.db.get_bind().dialect.name
        if dialect not in UPSERTS:
            raise Internal(f"Unsupported database dialect for code storage: {dialect}")
        stmt = UPSERTS[dialect](PhoneOtp).values(phone=phone, code=code, expires_at=expires_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=[PhoneOtp.phone],
            set_={"code": stmt.excluded.code, "expires_at": stmt.excluded.expires_at},
        )
        self.db.execute(stmt)
        self.db.commit()

    def verify(self, phone: Optional[str], code: Optional[str]) -> User:
        phone = (phone or "").strip()
        code = (code or "").strip()
        if not phone or not code:
            raise ValidationFailed("Phone and code required")
        if not (code.isascii() and code.isdigit()):
            raise Unauthenticated("Invalid code")
        row = self.db.get(PhoneOtp, phone)
        if row is None or not secrets.compare_digest(row.code.encode(), code.encode()):
            raise Unauthenticated("Invalid code")
        if _aware(row.expires_at) <= datetime.now(timezone.utc):
            self.db.delete(row)
            self.db.commit()
            raise Unauthenticated("Code expired")
        self.db.delete(row)
        self.db.commit()

        users = UserDirectory(self.db)
        user = users.find_by_phone(phone)
        if user is None:
            user = users.ensure(str(uuid.uuid4()), phone=phone)
        return user
