import pytest
from typing import List
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.database import Base, get_db
from app.core.tenant import TenantContext
from app.db.models import Listing, ListingImage, ListingRoom

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

ORG_ID = "11111111-1111-1111-1111-111111111111"
OTHER_ORG_ID = "22222222-2222-2222-2222-222222222222"
USER_ID = "33333333-3333-3333-3333-333333333333"


class FakeObjectStorage:
    """In-memory ObjectStorage recording uploads and removals"""

    def __init__(self, fail_uploads: bool = False):
        self.objects = {}
        self.removed: List[str] = []
        self.fail_uploads = fail_uploads

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        if self.fail_uploads:
            raise RuntimeError("storage unavailable")
        self.objects[path] = (data, content_type)

    async def remove(self, paths: List[str]) -> None:
        for path in paths:
            self.objects.pop(path, None)
            self.removed.append(path)

    def public_url(self, path: str) -> str:
        return f"https://cdn.example.com/property-images/{path}"


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return engine

@pytest.fixture(scope="function")
def test_db_session(test_engine):
    """Create a test database session"""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)

@pytest.fixture(scope="function")
def override_get_db(test_db_session):
    """Override the get_db dependency for testing"""
    def _override_get_db():
        try:
            yield test_db_session
        finally:
            pass
    return _override_get_db

@pytest.fixture
def tenant():
    return TenantContext(organisation_id=ORG_ID, user_id=USER_ID)

@pytest.fixture
def fake_storage():
    return FakeObjectStorage()

@pytest.fixture
def springfield_portfolio(test_db_session):
    """
    50 listings for ORG_ID: 12 three-bedroom houses in Springfield (even ones
    with a primary image), plus 38 others that each miss on at least one of
    suburb, type or bedrooms. OTHER_ORG_ID owns 5 matching listings that must
    never leak into ORG_ID's results.
    """
    matching_ids = []
    for i in range(12):
        listing = Listing(
            id=f"springfield-house-{i:02d}",
            organisation_id=ORG_ID,
            suburb="Springfield",
            property_type="house",
            bedrooms=3,
            bathrooms=2,
            rent_weekly=550.0,
            address_line_1=f"{i + 1} Evergreen Terrace",
        )
        if i % 2 == 0:
            listing.images = [
                ListingImage(storage_path=f"{ORG_ID}/cover-{i}.jpg", display_order=0, is_primary=True),
                ListingImage(storage_path=f"{ORG_ID}/extra-{i}.jpg", display_order=1, is_primary=False),
            ]
        test_db_session.add(listing)
        matching_ids.append(listing.id)

    others = (
        [("Springfield", "apartment", 3)] * 10
        + [("Springfield", "house", 4)] * 8
        + [("Shelbyville", "house", 3)] * 10
        + [("Capital City", "unit", 1)] * 10
    )
    for i, (suburb, property_type, bedrooms) in enumerate(others):
        test_db_session.add(Listing(
            id=f"other-{i:02d}",
            organisation_id=ORG_ID,
            suburb=suburb,
            property_type=property_type,
            bedrooms=bedrooms,
        ))

    for i in range(5):
        test_db_session.add(Listing(
            id=f"foreign-{i}",
            organisation_id=OTHER_ORG_ID,
            suburb="Springfield",
            property_type="house",
            bedrooms=3,
        ))

    test_db_session.commit()
    return matching_ids

@pytest.fixture
def persisted_listing(test_db_session):
    """A listing with rooms and two images, as saved by a previous wizard run"""
    listing = Listing(
        id="listing-edit",
        organisation_id=ORG_ID,
        created_by=USER_ID,
        status="draft",
        address_line_1="742 Evergreen Terrace",
        suburb="Springfield",
        bedrooms=4,
        bathrooms=0,
        rent_weekly=650.0,
        floor_area_sqm=182.5,
        property_type="house",
        amenity_pool=True,
        amenity_gym=False,
    )
    listing.rooms = [ListingRoom(id="room-1", room_type="kitchen", name="Kitchen", width_m=3.5, length_m=4.0)]
    listing.images = [
        ListingImage(id="img-a", storage_path=f"{ORG_ID}/a.jpg", display_order=0, is_primary=True),
        ListingImage(id="img-b", storage_path=f"{ORG_ID}/b.jpg", display_order=1, is_primary=False, caption="Yard"),
    ]
    test_db_session.add(listing)
    test_db_session.commit()
    return listing
