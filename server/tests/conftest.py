from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from certhub.main import create_app
from certhub.models import Level, Question
from certhub.services.platform import CertHubService

ADMIN = "admin-principal"
STUDENT = "student-principal"


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def tick(self, seconds=60):
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


def sample_questions():
    return [
        Question(text="What is the capital of France?", choices=["Paris", "London", "Berlin"],
                 correct_answer_index=0, score=10),
        Question(text="2 + 2 = ?", choices=["3", "4", "5"], correct_answer_index=1, score=10),
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(clock):
    svc = CertHubService(clock=clock, bootstrap_admins=[ADMIN])
    svc.register_or_refresh(ADMIN, "Ada Admin")
    svc.register_or_refresh(STUDENT, "Sam Student")
    return svc


@pytest.fixture
def exam_id(service):
    return service.create_exam(ADMIN, "General Knowledge Test", "Testers", sample_questions(), Level.BEGINNER)


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def as_caller(principal):
    return {"X-Caller-Principal": principal}
