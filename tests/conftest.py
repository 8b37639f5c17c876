import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from talentgate.core.auth import create_token
from talentgate.core.database import get_db, init_db
from talentgate.main import app
from talentgate.models.orm import (
    Application, ApplicationAssessment, Assessment, AssessmentQuestion, Membership, Organization, User,
)

CANDIDATE = "x@uni.edu"
OTHER_CANDIDATE = "y@uni.edu"
RECRUITER = "recruiter@acme.com"
OUTSIDER = "someone@globex.com"


@pytest.fixture()
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool, future=True)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(email):
    return {"Authorization": f"Bearer {create_token(email, email)}"}


@pytest.fixture()
def world(session_factory):
    """Acme owns assessment 7 (questions 12, 13, 14) and 8 (21, then 20 with no position); the candidate was assigned 7."""
    with session_factory() as s:
        s.add_all([
            Organization(id=1, name="Acme", slug="acme", type="employer"),
            Organization(id=2, name="Globex", slug="globex", type="employer"),
            User(id=1, email=RECRUITER, name="Rita Recruiter", account_type="employer"),
            User(id=2, email=OUTSIDER, name="Otto Outsider", account_type="employer"),
            User(id=3, email=CANDIDATE, name="Xena Student"),
            User(id=4, email=OTHER_CANDIDATE, name="Yuri Student"),
        ])
        s.flush()
        s.add_all([
            Membership(user_id=1, org_id=1, role="owner"),
            Membership(user_id=2, org_id=2, role="owner"),
            Assessment(id=7, org_id=1, title="Backend screening", type="MCQ", duration="1 hour 30 min", is_published=True),
            Assessment(id=8, org_id=1, title="Other screening", type="MCQ", duration="20", is_published=True),
        ])
        s.flush()
        s.add_all([
            AssessmentQuestion(id=14, assessment_id=7, prompt="Explain indexing", kind="short", order_index=3),
            AssessmentQuestion(id=12, assessment_id=7, prompt="Pick the B", kind="mcq",
                               options_json=[{"id": "A", "label": "A"}, {"id": "B", "label": "B"}], correct_answer="B", order_index=1),
            AssessmentQuestion(id=13, assessment_id=7, prompt="Pick the C", kind="mcq",
                               options_json='[{"id": "C", "label": "C"}]', correct_answer="C", order_index=2),
            AssessmentQuestion(id=21, assessment_id=8, prompt="Other", kind="mcq", correct_answer="A", order_index=1),
            AssessmentQuestion(id=20, assessment_id=8, prompt="Unordered", kind="short", order_index=None),
        ])
        s.add_all([
            Application(id=100, job_id=1, applicant_user_id=3, applicant_email=CANDIDATE, applicant_name="Xena Student"),
            Application(id=101, job_id=1, applicant_user_id=4, applicant_email=OTHER_CANDIDATE, applicant_name="Yuri Student"),
        ])
        s.flush()
        s.add_all([
            ApplicationAssessment(id=500, application_id=100, assessment_id=7, status="assigned"),
            ApplicationAssessment(id=501, application_id=101, assessment_id=7, status="assigned"),
        ])
        s.commit()
    return {"assessment_id": 7, "other_assessment_id": 8}


@pytest.fixture()
def start(client, world):
    def _start(email=CANDIDATE, assessment_id=7):
        r = client.post(f"/v1/assessments/{assessment_id}/attempts/start", headers=auth(email))
        assert r.status_code == 200, r.text
        return r.json()["attemptId"]
    return _start
