import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine
from sqlmodel.pool import StaticPool

from ieee_quiz.database import get_session, init_db
from ieee_quiz.dependencies import get_clock, get_rng
from ieee_quiz.main import app
from ieee_quiz.questions import get_question_bank


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 10, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def bank():
    return get_question_bank()


@pytest.fixture
def client(engine, clock):
    def session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = session_override
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rng] = lambda: random.Random(7)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Sign up a user through the API; returns (user_id, auth headers)."""
    def _register(name="Ada"):
        response = client.post("/api/auth/signup", json={"name": name, "email": f"{name.lower()}@example.org"})
        assert response.status_code == 200, response.text
        body = response.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['accessToken']}"}
    return _register


@pytest.fixture
def answers_for(bank):
    """Build a submission answering the first `correct` questions right and the rest wrong."""
    def _answers_for(correct=None):
        correct = bank.total if correct is None else correct
        answers = []
        for i, q in enumerate(bank.questions):
            selected = q.correct_option_index if i < correct else (q.correct_option_index + 1) % 4
            answers.append({"questionId": q.id, "selectedOptionIndex": selected})
        return answers
    return _answers_for
