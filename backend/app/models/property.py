from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from enum import Enum


class ListingStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class PropertyType(str, Enum):
    HOUSE = "house"
    APARTMENT = "apartment"
    UNIT = "unit"
    TOWNHOUSE = "townhouse"
    VILLA = "villa"
    STUDIO = "studio"
    DUPLEX = "duplex"
    GRANNY_FLAT = "granny_flat"
    OTHER = "other"


class FurnishedOption(str, Enum):
    FURNISHED = "furnished"
    UNFURNISHED = "unfurnished"
    PARTIALLY_FURNISHED = "partially_furnished"


class YesNoUnspecified(str, Enum):
    YES = "yes"
    NO = "no"
    UNSPECIFIED = "unspecified"


class RoomType(str, Enum):
    BEDROOM = "bedroom"
    BATHROOM = "bathroom"
    KITCHEN = "kitchen"
    LIVING_ROOM = "living_room"
    DINING_ROOM = "dining_room"
    LAUNDRY = "laundry"
    GARAGE = "garage"
    STUDY = "study"
    STORAGE = "storage"
    BALCONY = "balcony"
    COURTYARD = "courtyard"
    OTHER = "other"


class AmenityKey(str, Enum):
    AIR_CONDITIONING = "air_conditioning"
    HEATING = "heating"
    DISHWASHER = "dishwasher"
    BUILT_IN_WARDROBES = "built_in_wardrobes"
    FLOORBOARDS = "floorboards"
    INTERNAL_LAUNDRY = "internal_laundry"
    BATH = "bath"
    ENSUITE = "ensuite"
    POOL = "pool"
    GYM = "gym"
    BALCONY = "balcony"
    COURTYARD = "courtyard"
    GARDEN = "garden"
    OUTDOOR_AREA = "outdoor_area"
    SECURE_PARKING = "secure_parking"
    GARAGE = "garage"
    CARPORT = "carport"
    ALARM_SYSTEM = "alarm_system"
    INTERCOM = "intercom"
    NBN = "nbn"
    SOLAR_PANELS = "solar_panels"
    WATER_TANK = "water_tank"


class AmenityInfo(BaseModel):
    key: AmenityKey
    label: str
    category: str


AMENITIES: List[AmenityInfo] = [
    AmenityInfo(key=AmenityKey.AIR_CONDITIONING, label="Air Conditioning", category="climate"),
    AmenityInfo(key=AmenityKey.HEATING, label="Heating", category="climate"),
    AmenityInfo(key=AmenityKey.DISHWASHER, label="Dishwasher", category="kitchen"),
    AmenityInfo(key=AmenityKey.BUILT_IN_WARDROBES, label="Built-in Wardrobes", category="interior"),
    AmenityInfo(key=AmenityKey.FLOORBOARDS, label="Floorboards", category="interior"),
    AmenityInfo(key=AmenityKey.INTERNAL_LAUNDRY, label="Internal Laundry", category="interior"),
    AmenityInfo(key=AmenityKey.BATH, label="Bath", category="bathroom"),
    AmenityInfo(key=AmenityKey.ENSUITE, label="Ensuite", category="bathroom"),
    AmenityInfo(key=AmenityKey.POOL, label="Pool", category="outdoor"),
    AmenityInfo(key=AmenityKey.GYM, label="Gym", category="facilities"),
    AmenityInfo(key=AmenityKey.BALCONY, label="Balcony", category="outdoor"),
    AmenityInfo(key=AmenityKey.COURTYARD, label="Courtyard", category="outdoor"),
    AmenityInfo(key=AmenityKey.GARDEN, label="Garden", category="outdoor"),
    AmenityInfo(key=AmenityKey.OUTDOOR_AREA, label="Outdoor Area", category="outdoor"),
    AmenityInfo(key=AmenityKey.SECURE_PARKING, label="Secure Parking", category="parking"),
    AmenityInfo(key=AmenityKey.GARAGE, label="Garage", category="parking"),
    AmenityInfo(key=AmenityKey.CARPORT, label="Carport", category="parking"),
    AmenityInfo(key=AmenityKey.ALARM_SYSTEM, label="Alarm System", category="security"),
    AmenityInfo(key=AmenityKey.INTERCOM, label="Intercom", category="security"),
    AmenityInfo(key=AmenityKey.NBN, label="NBN", category="utilities"),
    AmenityInfo(key=AmenityKey.SOLAR_PANELS, label="Solar Panels", category="utilities"),
    AmenityInfo(key=AmenityKey.WATER_TANK, label="Water Tank", category="utilities"),
]


class WizardStep(str, Enum):
    MEDIA = "media"
    LOCATION = "location"
    ROOMS = "rooms"
    RENTAL_TERMS = "rental_terms"
    AMENITIES = "amenities"
    RULES = "rules"
    LANDLORD = "landlord"
    REVIEW = "review"


WIZARD_STEPS: List[WizardStep] = list(WizardStep)

WIZARD_STEP_LABELS: Dict[WizardStep, str] = {
    WizardStep.MEDIA: "Media",
    WizardStep.LOCATION: "Location",
    WizardStep.ROOMS: "Rooms",
    WizardStep.RENTAL_TERMS: "Rental Terms",
    WizardStep.AMENITIES: "Amenities",
    WizardStep.RULES: "Rules",
    WizardStep.LANDLORD: "Landlord",
    WizardStep.REVIEW: "Review",
}


class Room(BaseModel):
    id: Optional[str] = None
    room_type: RoomType
    name: Optional[str] = None
    width_m: Optional[float] = Field(None, gt=0)
    length_m: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = None


class LocalImage(BaseModel):
    """Image picked during the wizard, not yet uploaded"""
    id: str
    filename: str
    content_type: str = "image/jpeg"
    data: bytes = Field(b"", repr=False)
    display_order: int = 0
    is_primary: bool = False
    caption: str = ""


class ExistingImage(BaseModel):
    """Image already persisted for a listing (edit mode)"""
    id: str
    storage_path: str
    url: Optional[str] = None
    display_order: int = 0
    is_primary: bool = False
    caption: str = ""
    marked_for_deletion: bool = False


class ListingFormData(BaseModel):
    """
    Draft-tolerant aggregate of every wizard field.

    Numeric inputs are staged as strings so that "" (untouched) stays
    distinct from "0". Every field is optional.
    """
    # Location
    address_line_1: str = ""
    address_line_2: str = ""
    suburb: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    
    # Dimensions
    bedrooms: str = ""
    bathrooms: str = ""
    parking_spaces: str = ""
    floor_area_sqm: str = ""
    land_area_sqm: str = ""
    floors: str = ""
    
    # Type
    property_type: Optional[PropertyType] = None
    furnished: Optional[FurnishedOption] = None
    elevator: Optional[bool] = None
    
    # Pricing
    rent_weekly: str = ""
    rent_monthly: str = ""
    bond: str = ""
    available_from: str = ""
    lease_min_months: str = ""
    lease_max_months: str = ""
    
    # Rules
    max_occupants: str = ""
    pets_allowed: Optional[YesNoUnspecified] = None
    smokers_allowed: Optional[YesNoUnspecified] = None
    
    # Landlord
    landlord_name: str = ""
    landlord_contact_number: str = ""
    
    # Content
    title: str = ""
    description: str = ""
    internal_notes: str = ""
    
    # Collections, always replaced wholesale
    amenities: Dict[AmenityKey, Optional[bool]] = {}
    rooms: List[Room] = []
    images: List[LocalImage] = []
    existing_images: List[ExistingImage] = []
