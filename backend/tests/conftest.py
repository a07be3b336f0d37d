"""
Pytest configuration and shared fixtures
"""
import os

# The app under test never touches a database file
os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from hms.database import Base
from hms.dependencies import get_store
from hms.models.ontology import BookingType
from hms.models.schemas import CreateStayRequest, GuestCreate
from hms.services.store import HotelStore
from hms.services.booking_service import BookingService
from hms.services.folio_service import FolioService
from hms.services.availability_service import AvailabilityService
from hms.services.room_service import RoomService
from hms.services.report_service import ReportService
from hms.services.audit_service import AuditService
from hms.services.guest_service import GuestService
from hms.storage.backends import MemoryBackend, SqlBackend
from hms.main import app


# ============== Storage Fixtures ==============

@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def sql_backend(db_engine):
    """Key-value backend on the in-memory database"""
    return SqlBackend(session_factory=sessionmaker(autocommit=False, autoflush=False, bind=db_engine))


@pytest.fixture(scope="function")
def store():
    """Fresh seeded store on a memory backend"""
    return HotelStore(MemoryBackend(), audit_retention=500, initial_sequence=0)


@pytest.fixture(scope="function")
def client(store):
    """Test client wired to the fixture store"""
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== Service Fixtures ==============

@pytest.fixture
def booking_service(store):
    return BookingService(store)


@pytest.fixture
def folio_service(store):
    return FolioService(store)


@pytest.fixture
def availability_service(store):
    return AvailabilityService(store)


@pytest.fixture
def room_service(store):
    return RoomService(store)


@pytest.fixture
def report_service(store):
    return ReportService(store)


@pytest.fixture
def audit_service(store):
    return AuditService(store)


@pytest.fixture
def guest_service(store):
    return GuestService(store)


# ============== Entity Fixtures ==============

@pytest.fixture
def today():
    return date.today()


def make_stay_request(room_id="r-101", check_in=None, nights=2, guests_count=2,
                      booking_type=BookingType.WALK_IN, name="Ravi Kumar", phone="9876543210",
                      daily_rate=None, **kwargs) -> CreateStayRequest:
    """Staff booking request with sensible defaults"""
    check_in = check_in or date.today()
    return CreateStayRequest(
        room_id=room_id,
        check_in=check_in,
        check_out=check_in + timedelta(days=nights),
        guests_count=guests_count,
        guest=GuestCreate(name=name, phone=phone),
        booking_type=booking_type,
        daily_rate=daily_rate,
        **kwargs
    )


@pytest.fixture
def walk_in(booking_service):
    """Walk-in in room 101 for two nights starting today"""
    return booking_service.create_stay(make_stay_request())


@pytest.fixture
def in_house(booking_service, walk_in):
    """The walk-in, checked in"""
    return booking_service.check_in(walk_in.id)


@pytest.fixture
def walk_in_folio(folio_service, walk_in):
    return folio_service.get_folio_by_booking(walk_in.id)


@pytest.fixture
def reservation(booking_service, today):
    """Future reservation in room 201"""
    return booking_service.create_stay(make_stay_request(
        room_id="r-201",
        check_in=today + timedelta(days=5),
        nights=3,
        booking_type=BookingType.RESERVATION,
        name="Lakshmi Devi",
        phone="9123456780",
    ))


@pytest.fixture
def stay_request():
    """Factory for staff booking requests"""
    return make_stay_request
