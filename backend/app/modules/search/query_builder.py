from typing import List
from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement
from app.db.models import Listing, AMENITY_COLUMNS
from app.models.search import SearchCriteria, FIVE_PLUS_BEDROOMS
import logging

logger = logging.getLogger(__name__)


class ListingQueryBuilder:
    """
    Translates SearchCriteria into SQLAlchemy predicates against the
    listings table.

    The live matching count and the executed search both go through
    build_predicate so the two can never disagree.
    """
    
    def build_predicate(self, organisation_id: str, criteria: SearchCriteria) -> ColumnElement:
        """Build the full conjunction, always scoped to the organisation"""
        clauses: List[ColumnElement] = [Listing.organisation_id == organisation_id]
        
        self._add_location_filter(clauses, criteria)
        self._add_type_filter(clauses, criteria)
        self._add_elevator_filter(clauses, criteria)
        self._add_bedroom_filter(clauses, criteria)
        self._add_amenity_filters(clauses, criteria)
        
        predicate = and_(*clauses)
        logger.debug(f"Built predicate with {len(clauses)} clauses for organisation {organisation_id}")
        return predicate
    
    def _add_location_filter(self, clauses: List[ColumnElement], criteria: SearchCriteria):
        if criteria.location_tags:
            clauses.append(Listing.suburb.in_(sorted(criteria.location_tags)))
    
    def _add_type_filter(self, clauses: List[ColumnElement], criteria: SearchCriteria):
        if criteria.property_types:
            clauses.append(Listing.property_type.in_(sorted(pt.value for pt in criteria.property_types)))
    
    def _add_elevator_filter(self, clauses: List[ColumnElement], criteria: SearchCriteria):
        # Not requiring an elevator applies no filter at all
        if criteria.elevator_required:
            clauses.append(Listing.elevator.is_(True))
    
    def _add_bedroom_filter(self, clauses: List[ColumnElement], criteria: SearchCriteria):
        """Exact buckets are alternatives; the 5+ bucket is an open range"""
        if not criteria.bedroom_buckets:
            return
        
        if FIVE_PLUS_BEDROOMS not in criteria.bedroom_buckets:
            clauses.append(Listing.bedrooms.in_(sorted(criteria.bedroom_buckets)))
            return
        
        exact = sorted(b for b in criteria.bedroom_buckets if b < FIVE_PLUS_BEDROOMS)
        five_plus = Listing.bedrooms >= FIVE_PLUS_BEDROOMS
        if exact:
            clauses.append(or_(Listing.bedrooms.in_(exact), five_plus))
        else:
            clauses.append(five_plus)
    
    def _add_amenity_filters(self, clauses: List[ColumnElement], criteria: SearchCriteria):
        # Every selected amenity must be present
        for amenity in sorted(criteria.amenity_flags, key=lambda a: a.value):
            clauses.append(AMENITY_COLUMNS[amenity].is_(True))
