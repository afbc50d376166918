from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from dailyquiz.models.orm import User


class LeaderboardProjector:
    def __init__(self, db: Session, limit: int = 200):
        self.db = db
        self.limit = limit

    def list(self) -> List[dict]:
        rows = self.db.execute(
            select(User.id, User.email, User.display_name, User.total_points, User.role)
            .order_by(User.total_points.desc(), User.id)
            .limit(self.limit)
        ).all()
        return [
            {"id": r[0], "email": r[1], "display_name": r[2], "total_points": r[3], "role": r[4]}
            for r in rows
        ]
