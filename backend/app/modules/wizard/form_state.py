"""
Patch application and image bookkeeping for ListingFormData.

Scalar fields in a patch replace the current value and keys that are not
form fields are ignored. Collection fields (amenities, rooms, images,
existing_images) are replaced wholesale: callers read the collection,
modify it and send the whole thing back.

Across new uploads and non-deleted existing images exactly one image is
primary whenever at least one image is visible. Every function here
returns a new ListingFormData and leaves its input untouched.
"""
from typing import Any, Iterable, List, Mapping, Optional, Union
from app.core.config import settings
from app.models.property import AmenityKey, ExistingImage, ListingFormData, LocalImage
import logging

logger = logging.getLogger(__name__)

COLLECTION_FIELDS = frozenset({"amenities", "rooms", "images", "existing_images"})
IMAGE_FIELDS = frozenset({"images", "existing_images"})

AnyImage = Union[LocalImage, ExistingImage]


def apply_patch(form: ListingFormData, patch: Mapping[str, Any]) -> ListingFormData:
    unknown = set(patch) - set(ListingFormData.model_fields)
    if unknown:
        logger.debug(f"Ignoring unknown form fields: {', '.join(sorted(unknown))}")

    merged = form.model_dump()
    for key, value in patch.items():
        if key in unknown:
            continue
        if key in COLLECTION_FIELDS:
            value = dict(value) if key == "amenities" else list(value)
        merged[key] = value

    updated = ListingFormData.model_validate(merged)
    if IMAGE_FIELDS & set(patch):
        updated = normalize_primary(updated)
    return updated


def visible_images(form: ListingFormData) -> List[AnyImage]:
    """Images shown in the gallery: kept existing images first, then new uploads"""
    existing = sorted(
        (img for img in form.existing_images if not img.marked_for_deletion),
        key=lambda img: img.display_order,
    )
    new = sorted(form.images, key=lambda img: img.display_order)
    return [*existing, *new]


def primary_image(form: ListingFormData) -> Optional[AnyImage]:
    return next((img for img in visible_images(form) if img.is_primary), None)


def _with_primary(form: ListingFormData, primary_id: Optional[str]) -> ListingFormData:
    images = [img.model_copy(update={"is_primary": img.id == primary_id}) for img in form.images]
    existing = [
        img.model_copy(update={"is_primary": img.id == primary_id and not img.marked_for_deletion})
        for img in form.existing_images
    ]
    return form.model_copy(update={"images": images, "existing_images": existing})


def normalize_primary(form: ListingFormData) -> ListingFormData:
    """Keep the first primary in gallery order, or promote the first image if none is primary"""
    gallery = visible_images(form)
    if not gallery:
        return _with_primary(form, None)

    current = next((img for img in gallery if img.is_primary), gallery[0])
    return _with_primary(form, current.id)


def set_primary(form: ListingFormData, image_id: str) -> ListingFormData:
    if image_id not in {img.id for img in visible_images(form)}:
        return form
    return _with_primary(form, image_id)


def _first_by_order(images: Iterable[AnyImage]) -> Optional[AnyImage]:
    return min(images, key=lambda img: img.display_order, default=None)


def _reassign_after_removal(
    form: ListingFormData, same_collection: Iterable[AnyImage], other_collection: Iterable[AnyImage]
) -> ListingFormData:
    """Promote the first remaining image of the same collection, else of the other one"""
    successor = _first_by_order(same_collection) or _first_by_order(other_collection)
    return _with_primary(form, successor.id if successor else None)


def _renumber(images: List[LocalImage]) -> List[LocalImage]:
    return [img.model_copy(update={"display_order": index}) for index, img in enumerate(images)]


def add_images(
    form: ListingFormData, new_images: Iterable[LocalImage], max_images: Optional[int] = None
) -> ListingFormData:
    """Append picked files; non-image content is skipped and the gallery is capped"""
    limit = max_images if max_images is not None else settings.MAX_LISTING_IMAGES
    room = limit - len(visible_images(form))
    start = len(form.images)

    accepted = []
    for img in new_images:
        if len(accepted) >= room:
            break
        if not img.content_type.startswith("image/"):
            continue
        accepted.append(img.model_copy(update={"display_order": start + len(accepted), "is_primary": False}))

    if not accepted:
        return form

    updated = form.model_copy(update={"images": [*form.images, *accepted]})
    return normalize_primary(updated)


def remove_image(form: ListingFormData, image_id: str) -> ListingFormData:
    """Drop a new upload, renumbering the rest"""
    removed = next((img for img in form.images if img.id == image_id), None)
    if removed is None:
        return form

    remaining = _renumber([img for img in form.images if img.id != image_id])
    updated = form.model_copy(update={"images": remaining})
    if not removed.is_primary:
        return updated

    kept_existing = [img for img in updated.existing_images if not img.marked_for_deletion]
    return _reassign_after_removal(updated, remaining, kept_existing)


def mark_for_deletion(form: ListingFormData, image_id: str) -> ListingFormData:
    """Flag an existing image for deletion on submit"""
    target = next((img for img in form.existing_images if img.id == image_id), None)
    if target is None or target.marked_for_deletion:
        return form

    existing = [
        img.model_copy(update={"marked_for_deletion": True, "is_primary": False}) if img.id == image_id else img
        for img in form.existing_images
    ]
    updated = form.model_copy(update={"existing_images": existing})
    if not target.is_primary:
        return updated

    kept_existing = [img for img in existing if not img.marked_for_deletion]
    return _reassign_after_removal(updated, kept_existing, updated.images)


def restore_image(form: ListingFormData, image_id: str) -> ListingFormData:
    existing = [
        img.model_copy(update={"marked_for_deletion": False}) if img.id == image_id else img
        for img in form.existing_images
    ]
    updated = form.model_copy(update={"existing_images": existing})
    current = primary_image(form)
    if current is not None:
        return _with_primary(updated, current.id)
    return normalize_primary(updated)


def move_image(form: ListingFormData, from_index: int, to_index: int) -> ListingFormData:
    """Reorder new uploads (drag and drop)"""
    images = list(form.images)
    if not (0 <= from_index < len(images) and 0 <= to_index < len(images)) or from_index == to_index:
        return form

    images.insert(to_index, images.pop(from_index))
    return form.model_copy(update={"images": _renumber(images)})


def set_caption(form: ListingFormData, image_id: str, caption: str) -> ListingFormData:
    images = [img.model_copy(update={"caption": caption}) if img.id == image_id else img for img in form.images]
    existing = [
        img.model_copy(update={"caption": caption}) if img.id == image_id else img
        for img in form.existing_images
    ]
    return form.model_copy(update={"images": images, "existing_images": existing})


def set_amenity(form: ListingFormData, amenity: AmenityKey, value: Optional[bool]) -> ListingFormData:
    amenities = dict(form.amenities)
    amenities[amenity] = value
    return form.model_copy(update={"amenities": amenities})
