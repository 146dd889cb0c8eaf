from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.security import create_access_token, get_password_hash
from app.database import Base, get_db
from app.main import app
from app.models import AdminUser, Barber
from app.services.email import EmailService
from app.services.working_hours_service import WorkingHoursService

# 2030-01-07 is a Monday; the shop is open 08:00-18:00
MONDAY = datetime(2030, 1, 7)


def at(hour, minute=0, day=MONDAY):
    return day.replace(hour=hour, minute=minute)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    WorkingHoursService.seed_defaults(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Record outbound email instead of calling SendGrid."""
    outbox = []

    def fake_send(to_email, subject, html_content):
        outbox.append({"to": to_email, "subject": subject, "html": html_content})
        return True

    monkeypatch.setattr(EmailService, "send_email", staticmethod(fake_send))
    monkeypatch.setattr(settings, "GLOBAL_SLOT_LOCK", False)
    return outbox


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: the lifespan (table creation, sweep loop) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(db):
    admin = AdminUser(
        username="owner",
        email="owner@example.com",
        password_hash=get_password_hash("s3cret-pass"),
    )
    db.add(admin)
    db.commit()
    token = create_access_token({"admin_id": admin.id, "username": admin.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_barber(db):
    def _make(name, phone, badge, email=None, **fields):
        barber = Barber(name=name, phone=phone, identity_badge_number=badge, email=email, **fields)
        db.add(barber)
        db.commit()
        db.refresh(barber)
        return barber
    return _make


@pytest.fixture
def barbers(make_barber):
    return [
        make_barber("Alex", "0711000001", "B001", email="alex@example.com"),
        make_barber("Brian", "0711000002", "B002", email="brian@example.com"),
        make_barber("Chris", "0711000003", "B003"),
    ]


def booking_payload(**overrides):
    payload = {
        "customer_name": "Jane Wanjiku",
        "customer_email": "jane@example.com",
        "customer_phone": "0722000001",
        "address": "12 Riverside Drive, Nairobi",
        "preferred_datetime": at(10).isoformat(),
        "service_type": "Haircut",
        "service_price": 1500,
        "payment_method": "cash",
    }
    payload.update(overrides)
    return payload
