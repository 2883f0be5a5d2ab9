import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient
from gradebook.core.config import settings
from gradebook.core.database import Base, get_db
from gradebook.models.exam import Exam  # noqa: F401
from gradebook.models.exam_submission import ExamSubmission  # noqa: F401
from gradebook.models.exam_completion import ExamCompletion  # noqa: F401
from gradebook.services import progress as progress_module
from gradebook.utils import deps as deps_utils
from gradebook.utils.events import event_bus
import main

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    yield engine
    engine.dispose()
    if test_db_url.startswith("sqlite") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    Base.metadata.drop_all(bind=database_engine)
    Base.metadata.create_all(bind=database_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(autouse=True)
def event_handler_sessions(database_engine, monkeypatch):
    # Event handlers open their own sessions; point them at the test database.
    monkeypatch.setattr(progress_module, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=database_engine))

@pytest.fixture(scope="function")
def client(db_session):
    # Re-initialize the app for each test function to ensure a clean state
    from importlib import reload
    reload(main)
    main.app.dependency_overrides[get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client

@pytest.fixture
def captured_events():
    """Collects every exam_submitted payload published during a test."""
    from gradebook.utils.events import EXAM_SUBMITTED
    received = []

    async def _handler(data):
        received.append(data)

    event_bus.subscribe(EXAM_SUBMITTED, _handler)
    yield received
    event_bus.unsubscribe(EXAM_SUBMITTED, _handler)

@pytest.fixture
def sample_questions():
    return [
        {
            "id": "q1",
            "type": "mcq",
            "question_text": "Capital of France?",
            "options": [{"id": "a", "text": "Paris"}, {"id": "b", "text": "London"}],
            "correct_answer": "a",
            "marks": 2
        },
        {
            "id": "q2",
            "type": "true_false",
            "question_text": "The earth is round.",
            "correct_answer": True,
            "marks": 1
        },
        {
            "id": "q3",
            "type": "essay",
            "question_text": "Describe Paris.",
            "marks": 3
        }
    ]

@pytest.fixture
def exam_factory(db_session, sample_questions):
    from gradebook.crud.exam import exam as crud_exam

    def _exam_factory(questions=None, course_id=1, **kwargs):
        data = {
            "title": "Geography Exam",
            "course_id": course_id,
            "questions": sample_questions if questions is None else questions,
        }
        data.update(kwargs)
        return crud_exam.create(db_session, obj_in=data)
    return _exam_factory
