from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, FrozenSet, Dict
from enum import Enum
from app.models.property import PropertyType, AmenityKey


# Bedroom bucket standing in for "5 or more"
FIVE_PLUS_BEDROOMS = 5

BEDROOM_OPTIONS: Dict[int, str] = {1: "1", 2: "2", 3: "3", 4: "4", FIVE_PLUS_BEDROOMS: "5+"}


class SearchStep(str, Enum):
    SUBURB = "suburb"
    PROPERTY_TYPE = "property_type"
    BEDROOMS = "bedrooms"
    AMENITIES = "amenities"


SEARCH_STEPS: List[SearchStep] = list(SearchStep)

SEARCH_STEP_LABELS: Dict[SearchStep, str] = {
    SearchStep.SUBURB: "Location",
    SearchStep.PROPERTY_TYPE: "Type",
    SearchStep.BEDROOMS: "Bedrooms",
    SearchStep.AMENITIES: "Amenities",
}


class SearchPhase(str, Enum):
    FILTERING = "filtering"
    SEARCHING = "searching"
    RESULTS = "results"


class SearchCriteria(BaseModel):
    """Active search filter selections. Empty criteria means no filtering."""
    model_config = ConfigDict(frozen=True)
    
    location_tags: FrozenSet[str] = frozenset()
    property_types: FrozenSet[PropertyType] = frozenset()
    bedroom_buckets: FrozenSet[int] = frozenset()
    amenity_flags: FrozenSet[AmenityKey] = frozenset()
    elevator_required: bool = False
    
    @property
    def has_filters(self) -> bool:
        return bool(
            self.location_tags
            or self.property_types
            or self.bedroom_buckets
            or self.amenity_flags
            or self.elevator_required
        )
    
    @property
    def is_empty(self) -> bool:
        return not self.has_filters


class SearchResult(BaseModel):
    """Result card projection of a listing"""
    model_config = ConfigDict(frozen=True)
    
    id: str
    address_line_1: Optional[str] = None
    suburb: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    rent_weekly: Optional[float] = None
    property_type: Optional[PropertyType] = None
    available_from: Optional[str] = None
    primary_image_url: Optional[str] = None


class CountState(BaseModel):
    total: int = 0
    matching: int = 0
    matching_loading: bool = False


class LocationSummary(BaseModel):
    suburbs: List[str] = []
    total: int = 0


class CountResponse(BaseModel):
    matching: int
    total: int


class SearchResponse(BaseModel):
    results: List[SearchResult]
    total_count: int
    search_time_ms: int = Field(..., ge=0)
    filters_applied: SearchCriteria
