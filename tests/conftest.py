import os
from datetime import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('SEED_DATABASE', 'false')

from visitation.core.database import Base  # noqa: E402
from visitation.core.init_db import seed_statuses  # noqa: E402
from visitation.models import CustodiedPerson, Facility, Visitor  # noqa: E402
from visitation.services.appointment_scheduler import AppointmentScheduler  # noqa: E402

# 2026-01-07 is a Wednesday
WEDNESDAY = datetime(2026, 1, 7)
THURSDAY = datetime(2026, 1, 8)
MONDAY = datetime(2026, 1, 5)
NOW = datetime(2026, 1, 1, 8, 0)


def at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_statuses(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def refs(db):
    facility = Facility(name='Federal District Penitentiary I', acronym='PDF I')
    db.add(facility)
    db.flush()

    c1 = CustodiedPerson(name='João da Silva', record_number='C12345', facility_id=facility.id)
    c2 = CustodiedPerson(name='Pedro Oliveira', record_number='C67890', facility_id=facility.id)
    v1 = Visitor(visitor_name='Maria Santos', document_number='333.444.555-66')
    v2 = Visitor(visitor_name='Ana Souza', document_number='444.555.666-77')
    v3 = Visitor(visitor_name='Carla Lima', document_number='555.666.777-88')
    db.add_all([c1, c2, v1, v2, v3])
    db.commit()

    return SimpleNamespace(facility=facility, c1=c1.id, c2=c2.id, v1=v1.id, v2=v2.id, v3=v3.id)


@pytest.fixture
def scheduler(db):
    return AppointmentScheduler(db, clock=lambda: NOW)
