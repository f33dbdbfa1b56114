import os
import pytest

# Set testing environment before the app is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from fastapi.testclient import TestClient

from app.main import app
from app.core.database import Base, SessionLocal, engine, get_redis
from app.models.practitioner import Practitioner
from app.models.appointment import Appointment, AppointmentStatus

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    get_redis().flushdb()
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture
def practitioner(db_session):
    practitioner = Practitioner(
        first_name="Asha",
        last_name="Rao",
        email="asha.rao@example.com",
        specialization="Panchakarma"
    )
    db_session.add(practitioner)
    db_session.commit()
    db_session.refresh(practitioner)
    return practitioner

@pytest.fixture
def book_appointment(db_session):
    def _book(practitioner_id, start, end, status=AppointmentStatus.SCHEDULED):
        appointment = Appointment(
            practitioner_id=practitioner_id,
            patient_name="Test Patient",
            appointment_date=start,
            end_time=end,
            status=status
        )
        db_session.add(appointment)
        db_session.commit()
        return appointment
    return _book
