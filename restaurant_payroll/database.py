from __future__ import annotations

import logging
from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from restaurant_payroll.models import Base, Employee, Restaurant

logger = logging.getLogger(__name__)

DEMO_RESTAURANTS = [
    {"name": "Frida's Collierville", "location": "Collierville", "theme_color": "rose"},
    {"name": "Frida's Midtown", "location": "Midtown", "theme_color": "amber"},
    {"name": "Guac Downtown", "location": "Downtown", "theme_color": "emerald"},
]
# weekly figures
DEMO_EMPLOYEES = [
    {"name": "Diego Rivera", "hourly_wage": 25.50, "hours_worked": 40, "overtime_hours": 5, "tips": 200.00, "is_active": True},
    {"name": "Cristina Kahlo", "hourly_wage": 18.00, "hours_worked": 35, "overtime_hours": 0, "tips": 180.50, "is_active": True},
    {"name": "Maria Izquierdo", "hourly_wage": 20.00, "hours_worked": 42, "overtime_hours": 2, "tips": 250.00, "is_active": True},
    {"name": "Chavela Vargas", "hourly_wage": 22.00, "hours_worked": 20, "overtime_hours": 0, "tips": 300.00, "is_active": True},
    {"name": "Juan O Gorman", "hourly_wage": 16.50, "hours_worked": 45, "overtime_hours": 3, "tips": 100.00, "is_active": False},
]


def build_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, connect_args=connect_args)

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(database_url: str) -> sessionmaker:
    engine = build_engine(database_url)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def reset_demo_roster(db: Session, restaurant: Restaurant) -> list[Employee]:
    """Replace a restaurant's employees with the weekly demo roster and reset its time frame."""
    restaurant.employees = _demo_roster()
    restaurant.time_frame = "week"
    db.commit()
    logger.info("Reset %s to the demo roster (%s employees)", restaurant.name, len(restaurant.employees))
    return restaurant.employees


def seed_demo_restaurants(db: Session) -> int:
    """Create the demo locations on an empty database; returns how many were added."""
    if db.query(Restaurant).first() is not None:
        return 0
    db.add_all(Restaurant(employees=_demo_roster(), **values) for values in DEMO_RESTAURANTS)
    db.commit()
    logger.info("Seeded %s demo restaurants", len(DEMO_RESTAURANTS))
    return len(DEMO_RESTAURANTS)


def _demo_roster() -> list[Employee]:
    return [Employee(role="FOH", **values) for values in DEMO_EMPLOYEES]
