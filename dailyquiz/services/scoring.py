import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from dailyquiz.models.orm import Role, User

logger = logging.getLogger(__name__)


class ScoringLedger:
    """Adds points to a user's running total.

    The increment is one atomic UPDATE and does not commit; callers commit it
    together with the answer that earned the points.
    """

    def __init__(self, db: Session):
        self.db = db

    def award(self, user_id: str, points: int) -> None:
        result = self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(total_points=User.total_points + points)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.add(User(id=user_id, role=Role.USER.value, total_points=points))
            self.db.flush()
        logger.info("Awarded %s points to user %s", points, user_id)
