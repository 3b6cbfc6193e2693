"""
Database initialization script.
Creates all tables, seeds the status lookup and optionally sample reference data.
"""

from sqlalchemy import inspect
from sqlalchemy.orm import Session
from visitation.core.database import engine, Base, SessionLocal
from visitation.core.config import settings
from visitation.models import AppointmentStatus, CustodiedPerson, Facility, Status, Visitor
import logging

logger = logging.getLogger(__name__)

SAMPLE_FACILITIES = [
    ("Federal District Penitentiary I", "PDF I"),
    ("Federal District Penitentiary II", "PDF II"),
    ("Provisional Detention Center", "CDP"),
]

SAMPLE_CUSTODIED_PERSONS = [
    # name, record number, alias, facility index
    ("João da Silva", "C12345", "Careca", 0),
    ("Pedro Oliveira", "C67890", "Magrão", 1),
]

SAMPLE_VISITORS = [
    ("Maria Santos", "333.444.555-66"),
    ("Ana Souza", "444.555.666-77"),
]


def init_db(bind=None):
    """
    Initialize the database by creating all tables.
    """
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created successfully!")


def seed_statuses(db: Session) -> int:
    """
    Make sure every AppointmentStatus has a lookup row.
    Returns the number of rows inserted.
    """
    existing = {code for (code,) in db.query(Status.code).all()}
    missing = [s for s in AppointmentStatus if s.value not in existing]
    for status in missing:
        db.add(Status(code=status.value))
    if missing:
        db.commit()
        logger.info(f"Seeded statuses: {', '.join(s.value for s in missing)}")
    return len(missing)


def seed_sample_data(db: Session) -> None:
    """
    Seed facilities, custodied persons and visitors for development.
    Skipped when any facility already exists.
    """
    existing_facilities = db.query(Facility).count()
    if existing_facilities:
        logger.info(f"Database already has {existing_facilities} facility(ies). Skipping sample data.")
        return

    facilities = [Facility(name=name, acronym=acronym) for name, acronym in SAMPLE_FACILITIES]
    db.add_all(facilities)
    db.flush()

    for name, record_number, alias, facility_index in SAMPLE_CUSTODIED_PERSONS:
        db.add(CustodiedPerson(
            name=name,
            record_number=record_number,
            alias=alias,
            facility_id=facilities[facility_index].id,
        ))
    for name, document_number in SAMPLE_VISITORS:
        db.add(Visitor(visitor_name=name, document_number=document_number))

    db.commit()
    logger.info(
        f"Sample data created: {len(SAMPLE_FACILITIES)} facilities, "
        f"{len(SAMPLE_CUSTODIED_PERSONS)} custodied persons, {len(SAMPLE_VISITORS)} visitors"
    )


def seed_initial_data(db: Session = None, include_samples: bool = None):
    """
    Seed the status lookup, plus sample references when enabled.
    """
    if include_samples is None:
        include_samples = settings.seed_database

    owns_session = db is None
    db = db or SessionLocal()

    try:
        seed_statuses(db)
        if include_samples:
            seed_sample_data(db)
    except Exception as e:
        logger.error(f"Error seeding initial data: {e}")
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()


def check_tables():
    """
    Check which tables exist in the database.
    """
    inspector = inspect(engine)
    tables = inspector.get_table_names()

    logger.info("Existing tables in database:")
    for table in tables:
        logger.info(f"  - {table}")

    return tables


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("=" * 50)
    logger.info("Database Initialization Script")
    logger.info("=" * 50)

    check_tables()
    init_db()
    seed_initial_data()
    check_tables()

    logger.info("=" * 50)
    logger.info("Database initialization complete!")
    logger.info("=" * 50)
