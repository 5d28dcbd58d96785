# Pydantic models for API contracts and wizard state

from .property import (
    # Enums
    ListingStatus, PropertyType, FurnishedOption, YesNoUnspecified, RoomType, AmenityKey, WizardStep,
    
    # Reference data
    AmenityInfo, AMENITIES, WIZARD_STEPS, WIZARD_STEP_LABELS,
    
    # Wizard form
    Room, LocalImage, ExistingImage, ListingFormData
)
from .search import (
    SearchStep, SearchPhase, SEARCH_STEPS, SEARCH_STEP_LABELS, BEDROOM_OPTIONS, FIVE_PLUS_BEDROOMS,
    SearchCriteria, SearchResult, CountState, LocationSummary, CountResponse, SearchResponse
)

__all__ = [
    # Property models
    "ListingStatus", "PropertyType", "FurnishedOption", "YesNoUnspecified", "RoomType", "AmenityKey",
    "WizardStep", "AmenityInfo", "AMENITIES", "WIZARD_STEPS", "WIZARD_STEP_LABELS",
    "Room", "LocalImage", "ExistingImage", "ListingFormData",
    
    # Search models
    "SearchStep", "SearchPhase", "SEARCH_STEPS", "SEARCH_STEP_LABELS", "BEDROOM_OPTIONS",
    "FIVE_PLUS_BEDROOMS", "SearchCriteria", "SearchResult", "CountState", "LocationSummary",
    "CountResponse", "SearchResponse"
]
