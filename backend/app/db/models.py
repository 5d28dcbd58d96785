from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, Text, Date, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.models.property import AmenityKey
import uuid


def _uuid() -> str:
    return str(uuid.uuid4())


class Listing(Base):
    """Rental property asset owned by an organisation"""
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=_uuid)
    organisation_id = Column(String(36), nullable=False)
    created_by = Column(String(36))
    status = Column(String(20), nullable=False, default="draft")
    
    # Location
    address_line_1 = Column(String(500))
    address_line_2 = Column(String(500))
    suburb = Column(String(200))
    city = Column(String(200))
    state = Column(String(50))
    postcode = Column(String(20))
    country = Column(String(100))
    
    # Dimensions
    bedrooms = Column(Integer)
    bathrooms = Column(Integer)
    parking_spaces = Column(Integer)
    floor_area_sqm = Column(Float)
    land_area_sqm = Column(Float)
    floors = Column(Integer)
    
    # Type
    property_type = Column(String(50))
    furnished = Column(String(50))
    elevator = Column(Boolean)
    
    # Pricing
    rent_weekly = Column(Float)
    rent_monthly = Column(Float)
    bond = Column(Float)
    available_from = Column(Date)
    lease_min_months = Column(Integer)
    lease_max_months = Column(Integer)
    
    # Rules
    max_occupants = Column(Integer)
    pets_allowed = Column(String(20))
    smokers_allowed = Column(String(20))
    
    # Landlord
    landlord_name = Column(String(200))
    landlord_contact_number = Column(String(50))
    
    # Content
    title = Column(String(500))
    description = Column(Text)
    internal_notes = Column(Text)
    
    # Amenities
    amenity_air_conditioning = Column(Boolean)
    amenity_heating = Column(Boolean)
    amenity_dishwasher = Column(Boolean)
    amenity_built_in_wardrobes = Column(Boolean)
    amenity_floorboards = Column(Boolean)
    amenity_internal_laundry = Column(Boolean)
    amenity_bath = Column(Boolean)
    amenity_ensuite = Column(Boolean)
    amenity_pool = Column(Boolean)
    amenity_gym = Column(Boolean)
    amenity_balcony = Column(Boolean)
    amenity_courtyard = Column(Boolean)
    amenity_garden = Column(Boolean)
    amenity_outdoor_area = Column(Boolean)
    amenity_secure_parking = Column(Boolean)
    amenity_garage = Column(Boolean)
    amenity_carport = Column(Boolean)
    amenity_alarm_system = Column(Boolean)
    amenity_intercom = Column(Boolean)
    amenity_nbn = Column(Boolean)
    amenity_solar_panels = Column(Boolean)
    amenity_water_tank = Column(Boolean)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    # Relationships
    rooms = relationship("ListingRoom", back_populates="listing", cascade="all, delete-orphan")
    images = relationship("ListingImage", back_populates="listing", cascade="all, delete-orphan")
    
    # Indexes for performance
    __table_args__ = (
        Index('idx_properties_organisation', 'organisation_id'),
        Index('idx_properties_suburb', 'organisation_id', 'suburb'),
        Index('idx_properties_bedrooms', 'bedrooms'),
        Index('idx_properties_property_type', 'property_type'),
    )


class ListingRoom(Base):
    __tablename__ = "property_rooms"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey('properties.id'), nullable=False)
    
    room_type = Column(String(50), nullable=False)
    name = Column(String(200))
    width_m = Column(Float)
    length_m = Column(Float)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    listing = relationship("Listing", back_populates="rooms")
    
    __table_args__ = (
        Index('idx_property_rooms_property_id', 'property_id'),
    )


class ListingImage(Base):
    __tablename__ = "property_images"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey('properties.id'), nullable=False)
    
    storage_path = Column(String(1000), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    is_primary = Column(Boolean, nullable=False, default=False)
    caption = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    listing = relationship("Listing", back_populates="images")
    
    __table_args__ = (
        Index('idx_property_images_property_id', 'property_id'),
        Index('idx_property_images_primary', 'property_id', 'is_primary'),
    )


# Listing column holding each amenity flag
AMENITY_COLUMNS = {
    AmenityKey.AIR_CONDITIONING: Listing.amenity_air_conditioning,
    AmenityKey.HEATING: Listing.amenity_heating,
    AmenityKey.DISHWASHER: Listing.amenity_dishwasher,
    AmenityKey.BUILT_IN_WARDROBES: Listing.amenity_built_in_wardrobes,
    AmenityKey.FLOORBOARDS: Listing.amenity_floorboards,
    AmenityKey.INTERNAL_LAUNDRY: Listing.amenity_internal_laundry,
    AmenityKey.BATH: Listing.amenity_bath,
    AmenityKey.ENSUITE: Listing.amenity_ensuite,
    AmenityKey.POOL: Listing.amenity_pool,
    AmenityKey.GYM: Listing.amenity_gym,
    AmenityKey.BALCONY: Listing.amenity_balcony,
    AmenityKey.COURTYARD: Listing.amenity_courtyard,
    AmenityKey.GARDEN: Listing.amenity_garden,
    AmenityKey.OUTDOOR_AREA: Listing.amenity_outdoor_area,
    AmenityKey.SECURE_PARKING: Listing.amenity_secure_parking,
    AmenityKey.GARAGE: Listing.amenity_garage,
    AmenityKey.CARPORT: Listing.amenity_carport,
    AmenityKey.ALARM_SYSTEM: Listing.amenity_alarm_system,
    AmenityKey.INTERCOM: Listing.amenity_intercom,
    AmenityKey.NBN: Listing.amenity_nbn,
    AmenityKey.SOLAR_PANELS: Listing.amenity_solar_panels,
    AmenityKey.WATER_TANK: Listing.amenity_water_tank,
}
