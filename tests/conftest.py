import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from dailyquiz.api.today import current_day
from dailyquiz.core.auth import create_token
from dailyquiz.core.config import Settings
from dailyquiz.core.errors import MessagingError
from dailyquiz.main import create_app
from dailyquiz.models.orm import Answer, User
from dailyquiz.services.questions import QuestionRepository

TODAY = "2024-03-13"


class FakeMessenger:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, number, message):
        if self.fail:
            raise MessagingError("Failed to send message")
        self.sent.append((number, message))

    def ping(self):
        return 200

    def close(self):
        pass


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", CREATE_TABLES=True, DEV_LOGIN_ENABLED=True,
                    APP_SECRET="test-secret-with-enough-bytes-for-hs256", LOG_LEVEL="WARNING")


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def app(settings, messenger):
    app = create_app(settings, messenger=messenger)
    app.dependency_overrides[current_day] = lambda: TODAY
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client, app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def auth(app, client):
    """Bearer headers for ``user_id``; stores a user row first when ``role`` is given."""
    def _auth(user_id, role=None, email=None, points=0):
        email = email or f"{user_id}@example.com"
        if role is not None:
            with app.state.session_factory() as s:
                s.add(User(id=user_id, email=email, role=role, total_points=points))
                s.commit()
        token = create_token(app.state.settings, user_id, email=email)
        return {"Authorization": f"Bearer {token}"}
    return _auth


@pytest.fixture
def add_question(app, client):
    def _add(q_date=TODAY, correct_option="B", points=5, **extra):
        payload = {
            "q_date": q_date,
            "question_text": f"Question for {q_date}?",
            "option_a": "Alpha", "option_b": "Bravo", "option_c": "Charlie", "option_d": "Delta",
            "correct_option": correct_option,
            "points": points,
        }
        payload.update(extra)
        with app.state.session_factory() as s:
            return QuestionRepository(s).create(payload)
    return _add


@pytest.fixture
def points_of(app):
    def _points(user_id):
        with app.state.session_factory() as s:
            return s.scalar(select(User.total_points).where(User.id == user_id))
    return _points


@pytest.fixture
def answers_of(app):
    def _answers(user_id):
        with app.state.session_factory() as s:
            return s.scalars(select(Answer).where(Answer.user_id == user_id)).all()
    return _answers
