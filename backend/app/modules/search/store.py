from typing import Any, Dict, List, Protocol, Sequence
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement
from app.core.storage import ObjectStorage
from app.db.models import Listing, ListingImage
import logging

logger = logging.getLogger(__name__)


class ListingStore(Protocol):
    """Read access to an organisation's listings"""

    async def count(self, organisation_id: str, predicate: ColumnElement) -> int: ...

    async def query(
        self, organisation_id: str, predicate: ColumnElement, columns: Sequence[ColumnElement]
    ) -> List[Dict[str, Any]]: ...

    async def distinct_location_tags(self, organisation_id: str) -> List[str]: ...

    async def total_count(self, organisation_id: str) -> int: ...


class ImageStore(Protocol):
    async def batch_fetch_primary_images(self, listing_ids: List[str]) -> Dict[str, str]: ...

    def resolve_public_url(self, storage_path: str) -> str: ...


class SqlListingStore:
    """ListingStore backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    async def count(self, organisation_id: str, predicate: ColumnElement) -> int:
        return (
            self.db.query(func.count(Listing.id))
            .filter(Listing.organisation_id == organisation_id)
            .filter(predicate)
            .scalar()
        ) or 0

    async def query(
        self, organisation_id: str, predicate: ColumnElement, columns: Sequence[ColumnElement]
    ) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(*columns)
            .filter(Listing.organisation_id == organisation_id)
            .filter(predicate)
            .order_by(Listing.created_at.desc(), Listing.id)
            .all()
        )
        return [dict(row._mapping) for row in rows]

    async def distinct_location_tags(self, organisation_id: str) -> List[str]:
        rows = (
            self.db.query(Listing.suburb)
            .filter(Listing.organisation_id == organisation_id)
            .filter(Listing.suburb.isnot(None))
            .filter(Listing.suburb != "")
            .distinct()
            .all()
        )
        return sorted(row.suburb for row in rows)

    async def total_count(self, organisation_id: str) -> int:
        return (
            self.db.query(func.count(Listing.id))
            .filter(Listing.organisation_id == organisation_id)
            .scalar()
        ) or 0


class SqlImageStore:
    """ImageStore reading primary image rows and resolving them through object storage"""

    def __init__(self, db: Session, storage: ObjectStorage):
        self.db = db
        self.storage = storage

    async def batch_fetch_primary_images(self, listing_ids: List[str]) -> Dict[str, str]:
        if not listing_ids:
            return {}

        rows = (
            self.db.query(ListingImage.property_id, ListingImage.storage_path)
            .filter(ListingImage.property_id.in_(listing_ids))
            .filter(ListingImage.is_primary.is_(True))
            .all()
        )
        return {row.property_id: row.storage_path for row in rows}

    def resolve_public_url(self, storage_path: str) -> str:
        return self.storage.public_url(storage_path)
