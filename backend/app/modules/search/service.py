from typing import List, Optional, Dict, Any
from datetime import date
from app.core.tenant import TenantContext
from app.db.models import Listing
from app.models.search import SearchCriteria, SearchResult, LocationSummary
from app.modules.search.query_builder import ListingQueryBuilder
from app.modules.search.store import ListingStore, ImageStore
import logging

logger = logging.getLogger(__name__)


# Fields needed for a result card
RESULT_COLUMNS = (
    Listing.id,
    Listing.address_line_1,
    Listing.suburb,
    Listing.city,
    Listing.state,
    Listing.bedrooms,
    Listing.bathrooms,
    Listing.rent_weekly,
    Listing.property_type,
    Listing.available_from,
)


class SearchService:
    """Service for executing listing searches scoped to one organisation"""

    def __init__(
        self,
        listing_store: ListingStore,
        image_store: ImageStore,
        query_builder: Optional[ListingQueryBuilder] = None,
    ):
        self.listing_store = listing_store
        self.image_store = image_store
        self.query_builder = query_builder or ListingQueryBuilder()

    async def get_location_summary(self, tenant: TenantContext) -> LocationSummary:
        """Distinct suburbs and total listing count, used to seed the search wizard"""
        total = await self.listing_store.total_count(tenant.organisation_id)
        suburbs = await self.listing_store.distinct_location_tags(tenant.organisation_id)
        return LocationSummary(suburbs=suburbs, total=total)

    async def count_matching(self, tenant: TenantContext, criteria: SearchCriteria) -> int:
        """Count listings matching criteria; empty criteria never issues a filtered query"""
        if criteria.is_empty:
            return await self.listing_store.total_count(tenant.organisation_id)

        predicate = self.query_builder.build_predicate(tenant.organisation_id, criteria)
        return await self.listing_store.count(tenant.organisation_id, predicate)

    async def search_properties(self, tenant: TenantContext, criteria: SearchCriteria) -> List[SearchResult]:
        """
        Run the full search and project each hit onto a SearchResult.

        Primary images are fetched in one batch for every returned id and
        joined back by listing id. A failed search yields an empty list.
        """
        try:
            predicate = self.query_builder.build_predicate(tenant.organisation_id, criteria)
            rows = await self.listing_store.query(tenant.organisation_id, predicate, RESULT_COLUMNS)
            image_urls = await self._resolve_primary_images([row["id"] for row in rows])
            results = [self._to_search_result(row, image_urls.get(row["id"])) for row in rows]
        except Exception as e:
            logger.error(f"Search failed for organisation {tenant.organisation_id}: {e}")
            return []

        logger.info(f"Search returned {len(results)} listings for organisation {tenant.organisation_id}")
        return results

    async def _resolve_primary_images(self, listing_ids: List[str]) -> Dict[str, str]:
        if not listing_ids:
            return {}

        try:
            paths = await self.image_store.batch_fetch_primary_images(listing_ids)
            return {
                listing_id: self.image_store.resolve_public_url(path)
                for listing_id, path in paths.items()
            }
        except Exception as e:
            logger.warning(f"Primary image lookup failed: {e}")
            return {}

    def _to_search_result(self, row: Dict[str, Any], image_url: Optional[str]) -> SearchResult:
        available_from = row.get("available_from")
        if isinstance(available_from, date):
            available_from = available_from.isoformat()

        return SearchResult(
            id=row["id"],
            address_line_1=row.get("address_line_1"),
            suburb=row.get("suburb"),
            city=row.get("city"),
            state=row.get("state"),
            bedrooms=row.get("bedrooms"),
            bathrooms=row.get("bathrooms"),
            rent_weekly=row.get("rent_weekly"),
            property_type=row.get("property_type"),
            available_from=available_from,
            primary_image_url=image_url,
        )
