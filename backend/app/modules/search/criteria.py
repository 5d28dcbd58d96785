"""Toggle operations over SearchCriteria.

Every operation returns a new criteria object; the input is never mutated.
"""
from typing import FrozenSet, TypeVar
from app.models.property import PropertyType, AmenityKey
from app.models.search import SearchCriteria

T = TypeVar("T")


def toggle(values: FrozenSet[T], value: T) -> FrozenSet[T]:
    """Remove value if present, otherwise add it"""
    if value in values:
        return values - {value}
    return values | {value}


def toggle_location(criteria: SearchCriteria, suburb: str) -> SearchCriteria:
    return criteria.model_copy(update={"location_tags": toggle(criteria.location_tags, suburb)})


def toggle_property_type(criteria: SearchCriteria, property_type: PropertyType) -> SearchCriteria:
    return criteria.model_copy(update={"property_types": toggle(criteria.property_types, property_type)})


def toggle_bedroom(criteria: SearchCriteria, bedrooms: int) -> SearchCriteria:
    return criteria.model_copy(update={"bedroom_buckets": toggle(criteria.bedroom_buckets, bedrooms)})


def toggle_amenity(criteria: SearchCriteria, amenity: AmenityKey) -> SearchCriteria:
    return criteria.model_copy(update={"amenity_flags": toggle(criteria.amenity_flags, amenity)})


def set_elevator_required(criteria: SearchCriteria, required: bool) -> SearchCriteria:
    return criteria.model_copy(update={"elevator_required": required})


def empty_criteria() -> SearchCriteria:
    return SearchCriteria()
