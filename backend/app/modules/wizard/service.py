from typing import Any, Dict, List, Optional
from datetime import date
from sqlalchemy.orm import Session
from app.core.storage import ObjectStorage
from app.core.tenant import TenantContext
from app.db.models import Listing, ListingImage, ListingRoom, AMENITY_COLUMNS
from app.models.property import (
    ExistingImage, ListingFormData, ListingStatus, LocalImage, Room
)
import math
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingNotFoundError(LookupError):
    pass


class ListingPersistenceError(RuntimeError):
    """Saving a listing failed; the message is safe to show to the user"""


INTEGER_FIELDS = (
    "bedrooms", "bathrooms", "parking_spaces", "floors",
    "lease_min_months", "lease_max_months", "max_occupants",
)
DECIMAL_FIELDS = ("floor_area_sqm", "land_area_sqm", "rent_weekly", "rent_monthly", "bond")
TEXT_FIELDS = (
    "address_line_1", "address_line_2", "suburb", "city", "state", "postcode", "country",
    "landlord_name", "landlord_contact_number", "title", "description", "internal_notes",
)
CHOICE_FIELDS = ("property_type", "furnished", "pets_allowed", "smokers_allowed")


def _to_int(value: str) -> Optional[int]:
    value = value.strip()
    if not value:
        return None
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        logger.debug(f"Discarding non-numeric value {value!r}")
        return None


def _to_float(value: str) -> Optional[float]:
    value = value.strip()
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        logger.debug(f"Discarding non-numeric value {value!r}")
        return None
    if not math.isfinite(number):
        logger.debug(f"Discarding non-finite value {value!r}")
        return None
    return number


def _to_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value.strip()) if value.strip() else None
    except ValueError:
        return None


def _to_text(value: Any) -> str:
    """Stage a stored value for a text input, with None as the empty string"""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def form_to_record(form: ListingFormData) -> Dict[str, Any]:
    """Convert staged form values into listing column values"""
    record: Dict[str, Any] = {}
    for name in TEXT_FIELDS:
        record[name] = getattr(form, name) or None
    for name in INTEGER_FIELDS:
        record[name] = _to_int(getattr(form, name))
    for name in DECIMAL_FIELDS:
        record[name] = _to_float(getattr(form, name))
    for name in CHOICE_FIELDS:
        choice = getattr(form, name)
        record[name] = choice.value if choice is not None else None

    record["elevator"] = form.elevator
    record["available_from"] = _to_date(form.available_from)
    for amenity, column in AMENITY_COLUMNS.items():
        record[column.key] = form.amenities.get(amenity)
    return record


def record_to_form(
    listing: Listing, rooms: List[ListingRoom], images: List[ListingImage], storage: ObjectStorage
) -> ListingFormData:
    """Stage a persisted listing for editing"""
    values: Dict[str, Any] = {}
    for name in (*TEXT_FIELDS, *INTEGER_FIELDS, *DECIMAL_FIELDS, "available_from"):
        values[name] = _to_text(getattr(listing, name))
    for name in CHOICE_FIELDS:
        values[name] = getattr(listing, name) or None

    values["elevator"] = listing.elevator
    values["amenities"] = {
        amenity: getattr(listing, column.key) for amenity, column in AMENITY_COLUMNS.items()
    }
    values["rooms"] = [
        Room(
            id=room.id,
            room_type=room.room_type,
            name=room.name,
            width_m=room.width_m,
            length_m=room.length_m,
            notes=room.notes,
        )
        for room in rooms
    ]
    values["existing_images"] = [
        ExistingImage(
            id=image.id,
            storage_path=image.storage_path,
            url=storage.public_url(image.storage_path),
            display_order=image.display_order,
            is_primary=bool(image.is_primary),
            caption=image.caption or "",
        )
        for image in sorted(images, key=lambda img: img.display_order)
    ]
    return ListingFormData.model_validate(values)


def _settle_primary(
    kept: List[ListingImage], unlisted: List[ListingImage], uploaded: List[ListingImage]
) -> None:
    """
    Leave exactly one primary row among a listing's images.

    The form decides when it marks one of its images (kept or uploaded)
    primary. Otherwise a row the form did not mention keeps the flag, and
    failing that the first image in gallery order is promoted: stored
    images by display order, then new uploads.
    """
    existing = sorted([*kept, *unlisted], key=lambda img: img.display_order or 0)
    gallery = [*existing, *sorted(uploaded, key=lambda img: img.display_order or 0)]
    if not gallery:
        return

    primary = (
        next((img for img in [*kept, *uploaded] if img.is_primary), None)
        or next((img for img in unlisted if img.is_primary), None)
        or gallery[0]
    )
    for img in gallery:
        img.is_primary = img is primary


class ListingWizardService:
    """Loads listings into wizard form data and persists submitted forms"""

    def __init__(self, db: Session, storage: ObjectStorage):
        self.db = db
        self.storage = storage

    def _get_listing(self, tenant: TenantContext, listing_id: str) -> Listing:
        listing = (
            self.db.query(Listing)
            .filter(Listing.id == listing_id, Listing.organisation_id == tenant.organisation_id)
            .first()
        )
        if listing is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        return listing

    async def load_form(self, tenant: TenantContext, listing_id: str) -> ListingFormData:
        listing = self._get_listing(tenant, listing_id)
        rooms = (
            self.db.query(ListingRoom)
            .filter(ListingRoom.property_id == listing_id)
            .order_by(ListingRoom.created_at, ListingRoom.id)
            .all()
        )
        images = self.db.query(ListingImage).filter(ListingImage.property_id == listing_id).all()
        return record_to_form(listing, rooms, images, self.storage)

    async def _upload_images(self, tenant: TenantContext, images: List[LocalImage]) -> List[ListingImage]:
        uploaded = []
        for image in images:
            extension = image.filename.rsplit(".", 1)[-1] if "." in image.filename else "jpg"
            storage_path = f"{tenant.organisation_id}/{uuid.uuid4()}.{extension}"
            try:
                await self.storage.upload(storage_path, image.data, image.content_type)
            except Exception as e:
                await self._discard_uploads([img.storage_path for img in uploaded])
                raise ListingPersistenceError(f"Failed to upload image: {e}") from e

            uploaded.append(ListingImage(
                storage_path=storage_path,
                display_order=image.display_order,
                is_primary=image.is_primary,
                caption=image.caption or None,
            ))
        return uploaded

    async def _discard_uploads(self, paths: List[str]):
        try:
            await self.storage.remove(paths)
        except Exception as e:
            logger.warning(f"Could not remove {len(paths)} orphaned uploads: {e}")

    def _rooms_from_form(self, form: ListingFormData) -> List[ListingRoom]:
        return [
            ListingRoom(
                room_type=room.room_type.value,
                name=room.name or None,
                width_m=room.width_m,
                length_m=room.length_m,
                notes=room.notes or None,
            )
            for room in form.rooms
        ]

    async def create_listing(self, tenant: TenantContext, form: ListingFormData) -> str:
        """Persist a new draft listing with its images, rooms and amenities"""
        uploaded = await self._upload_images(tenant, form.images)

        try:
            listing = Listing(
                organisation_id=tenant.organisation_id,
                created_by=tenant.user_id,
                status=ListingStatus.DRAFT.value,
                **form_to_record(form),
            )
            listing.rooms = self._rooms_from_form(form)
            _settle_primary([], [], uploaded)
            listing.images = uploaded
            self.db.add(listing)
            self.db.commit()
            self.db.refresh(listing)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create listing: {e}")
            await self._discard_uploads([img.storage_path for img in uploaded])
            raise ListingPersistenceError(f"Failed to create property: {e}") from e

        logger.info(f"Created listing {listing.id} for organisation {tenant.organisation_id}")
        return listing.id

    async def update_listing(self, tenant: TenantContext, listing_id: str, form: ListingFormData) -> str:
        """Apply an edited form: fields, rooms, image deletions, flags and new uploads"""
        listing = self._get_listing(tenant, listing_id)
        uploaded = await self._upload_images(tenant, form.images)

        removed_paths = []
        try:
            for name, value in form_to_record(form).items():
                setattr(listing, name, value)
            listing.rooms = self._rooms_from_form(form)

            staged = {img.id: img for img in form.existing_images}
            kept, unlisted = [], []
            for row in listing.images:
                existing = staged.get(row.id)
                if existing is None:
                    unlisted.append(row)
                    continue
                if existing.marked_for_deletion:
                    removed_paths.append(row.storage_path)
                    continue
                row.display_order = existing.display_order
                row.is_primary = existing.is_primary
                row.caption = existing.caption or None
                kept.append(row)
            _settle_primary(kept, unlisted, uploaded)
            listing.images = kept + unlisted + uploaded

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update listing {listing_id}: {e}")
            await self._discard_uploads([img.storage_path for img in uploaded])
            raise ListingPersistenceError(f"Failed to update property: {e}") from e

        if removed_paths:
            await self._discard_uploads(removed_paths)

        logger.info(f"Updated listing {listing_id} for organisation {tenant.organisation_id}")
        return listing_id

    async def toggle_status(self, tenant: TenantContext, listing_id: str) -> ListingStatus:
        """Flip a listing between draft and active"""
        listing = self._get_listing(tenant, listing_id)
        new_status = ListingStatus.DRAFT if listing.status == ListingStatus.ACTIVE.value else ListingStatus.ACTIVE

        try:
            listing.status = new_status.value
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update status of listing {listing_id}: {e}")
            raise ListingPersistenceError(f"Failed to update status: {e}") from e

        return new_status
