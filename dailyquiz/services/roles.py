from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from dailyquiz.core.errors import Forbidden
from dailyquiz.models.orm import User


class RoleGuard:
    def __init__(self, db: Session):
        self.db = db

    def require(self, user_id: str, allowed: Iterable[str]) -> str:
        """Return the stored role of ``user_id`` or raise ``Forbidden``.

        A user without a stored role is always denied.
        """
        role = self.db.scalar(select(User.role).where(User.id == user_id))
        if not role:
            raise Forbidden("Role not found")
        if role not in set(allowed):
            raise Forbidden("Forbidden")
        return role
