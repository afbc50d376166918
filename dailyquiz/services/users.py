import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dailyquiz.core.errors import ValidationFailed
from dailyquiz.models.orm import Role, User

logger = logging.getLogger(__name__)

DISPLAY_NAME_MIN = 2
DISPLAY_NAME_MAX = 30


class UserDirectory:
    """Lazily creates user rows on first touch and owns self-service profile edits."""

    def __init__(self, db: Session):
        self.db = db

    def ensure(self, user_id: str, email: Optional[str] = None, phone: Optional[str] = None) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            self.db.add(User(id=user_id, email=email, phone=phone, role=Role.USER.value, total_points=0))
            try:
                self.db.commit()
            except IntegrityError:
                # another request created the row first
                self.db.rollback()
                user = self.db.get(User, user_id)
                if user is None and phone:
                    user = self.find_by_phone(phone)
                return user
            user = self.db.get(User, user_id)
            logger.info("User %s created on first touch", user_id)
        elif email and user.email != email:
            user.email = email
            self.db.commit()
        return user

    def find_by_phone(self, phone: str) -> Optional[User]:
        return self.db.scalar(select(User).where(User.phone == phone))

    def profile(self, user_id: str, email: Optional[str] = None) -> dict:
        user = self.ensure(user_id, email=email)
        return {
            "email": email if email is not None else user.email,
            "display_name": user.display_name or "",
            "role": user.role or Role.USER.value,
        }

    def rename(self, user_id: str, display_name: Optional[str], email: Optional[str] = None) -> None:
        name = (display_name or "").strip()
        if len(name) < DISPLAY_NAME_MIN:
            raise ValidationFailed(f"Name must be at least {DISPLAY_NAME_MIN} characters")
        if len(name) > DISPLAY_NAME_MAX:
            raise ValidationFailed(f"Name must be at most {DISPLAY_NAME_MAX} characters")
        user = self.ensure(user_id, email=email)
        user.display_name = name
        self.db.commit()
