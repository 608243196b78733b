# tests/test_sa/conftest.py
import os
import sys
import pytest
from pathlib import Path
from sqlalchemy.sql import text

# Add project root to Python path
project_root = str(Path(__file__).parent.parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sqlalchemy.orm import Session
from bookswap.sa.database import Database
from bookswap.sa.models import (
    Base, Listing, SharingMode, ListingStatus
)
from bookswap.sa.repositories import ExchangeRequestRepository
from bookswap.services import ListingStore, ConversationStore, ExchangeCoordinator, OrchestrationFacade

OWNER_ID = 1
REQUESTER_ID = 2
OTHER_USER_ID = 3

@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_bookswap.db")

@pytest.fixture(scope="session")
def database_url(test_db_path):
    return f"sqlite:///{test_db_path}"

@pytest.fixture(scope="session")
def database(database_url, test_db_path):
    """Create a test database instance"""
    db = Database(database_url)

    # Drop all tables and recreate schema
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)

    yield db

    db.engine.dispose()
    try:
        os.remove(test_db_path)
    except OSError:
        pass  # Ignore errors if file doesn't exist

@pytest.fixture(autouse=True)
def cleanup_db(db_session):
    """Clean up database tables before each test"""
    # Delete all data from tables in reverse order of dependencies
    db_session.execute(text("DELETE FROM message"))
    db_session.execute(text("DELETE FROM conversation"))
    db_session.execute(text("DELETE FROM exchange_request"))
    db_session.execute(text("DELETE FROM listing"))
    db_session.commit()
    yield
    # Clean up after test as well
    db_session.rollback()

@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session: Session = database.get_session()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def listing_store(db_session):
    return ListingStore(db_session)

@pytest.fixture
def coordinator(db_session, listing_store):
    return ExchangeCoordinator(db_session, listing_store)

@pytest.fixture
def conversation_store(db_session):
    return ConversationStore(db_session)

@pytest.fixture
def facade(db_session, coordinator, conversation_store):
    return OrchestrationFacade(db_session, coordinator, conversation_store)

@pytest.fixture
def make_listing(listing_store):
    """Factory creating AVAILABLE listings through the store."""
    def _make(owner_id=OWNER_ID, sharing_mode=SharingMode.GIVE_AWAY, title="Test Book", **kwargs):
        kwargs.setdefault("author", "Test Author")
        kwargs.setdefault("condition", "Good")
        if sharing_mode == SharingMode.LEND:
            kwargs.setdefault("max_lending_days", 14)
        return listing_store.create(
            owner_id=owner_id,
            title=title,
            sharing_mode=sharing_mode,
            **kwargs
        )
    return _make

@pytest.fixture
def give_away_listing(make_listing):
    return make_listing(sharing_mode=SharingMode.GIVE_AWAY, title="Give Away Book")

@pytest.fixture
def lend_listing(make_listing):
    return make_listing(sharing_mode=SharingMode.LEND, title="Lend Book", max_lending_days=14)

@pytest.fixture
def swap_listing(make_listing):
    return make_listing(sharing_mode=SharingMode.SWAP, title="Wanted Swap Book")

@pytest.fixture
def offered_listing(make_listing):
    """A swap listing owned by the requester."""
    return make_listing(owner_id=REQUESTER_ID, sharing_mode=SharingMode.SWAP, title="Offered Swap Book")

@pytest.fixture
def check_invariants(db_session):
    """Assert the listing/request invariants over the whole database."""
    requests = ExchangeRequestRepository(db_session)

    def _check():
        db_session.expire_all()
        for listing in db_session.query(Listing).all():
            assert listing.status in ListingStatus
            holders = len(requests.get_active_holding(listing.id))
            if listing.status == ListingStatus.AVAILABLE:
                assert holders == 0, f"{listing!r} is available but held by {holders} request(s)"
            else:
                assert holders <= 1, f"{listing!r} is held by {holders} requests"
    return _check
