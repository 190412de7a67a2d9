import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_FORMAT"] = "text"
os.environ["DATABASE_CREATE_ALL"] = "false"

import random

import pytest
from fastapi.testclient import TestClient

from nbhwc_api.core.database import SessionLocal, engine
from nbhwc_api.main import app
from nbhwc_api.models.orm import Base, Question, QuestionOption, Topic
from nbhwc_api.services.quiz_generator import get_rng

@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client():
    app.dependency_overrides[get_rng] = lambda: random.Random(1234)
    yield TestClient(app)
    app.dependency_overrides.clear()

def _add_question(db, topic: Topic, text: str, options, correct, explanation="Because.", eli5="Simply put."):
    """Add a question; ``correct`` is an index, or a list of indexes to build malformed rows."""
    correct_set = set(correct) if isinstance(correct, (list, tuple, set)) else {correct}
    q = Question(topic_id=topic.id, question_text=text, difficulty=2, explanation=explanation, eli5_explanation=eli5)
    q.options = [QuestionOption(option_text=o, is_correct=i in correct_set) for i, o in enumerate(options)]
    db.add(q); db.flush()
    return q

def _add_topic(db, name: str) -> Topic:
    t = Topic(name=name)
    db.add(t); db.flush()
    return t

@pytest.fixture
def catalog(db):
    mi = _add_topic(db, "Motivational Interviewing")
    smart = _add_topic(db, "SMART Goals")
    _add_topic(db, "HIPAA Basics")
    _add_question(db, mi, "Which is a core principle of MI?", ["Expressing empathy", "Giving advice"], 0)
    _add_question(db, mi, "What is 'rolling with resistance'?", ["Arguing with the client", "Accepting client's reluctance"], 1)
    _add_question(db, mi, "Change talk is elicited from the...", ["Coach", "Client"], 1)
    _add_question(db, mi, "Which OARS skill reflects back meaning?", ["Open questions", "Affirmations", "Reflections", "Summaries"], 2)
    _add_question(db, mi, "Double-sided reflections address...", ["Ambivalence", "Billing"], 0)
    _add_question(db, smart, "What does 'S' in SMART stand for?", ["Specific", "Simple"], 0)
    db.commit()
    return {"mi": mi.id, "smart": smart.id}

@pytest.fixture
def auth_headers(client):
    r = client.post("/api/auth/register", json={"fullName": "Test Coach", "email": "coach@example.com", "password": "s3cret!"})
    assert r.status_code == 201
    r = client.post("/api/auth/login", json={"email": "coach@example.com", "password": "s3cret!"})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['token']}"}

@pytest.fixture
def make_topic(db):
    return lambda name: _add_topic(db, name)

@pytest.fixture
def make_question(db):
    return lambda *args, **kwargs: _add_question(db, *args, **kwargs)
