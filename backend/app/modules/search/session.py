from typing import List, Optional, Tuple
from app.core.tenant import TenantContext
from app.models.property import AmenityKey, PropertyType
from app.models.search import SearchCriteria, SearchPhase, SearchResult, SearchStep, SEARCH_STEPS
from app.modules.search import criteria as criteria_ops
from app.modules.search.count_oracle import CountOracle
from app.modules.search.service import SearchService
from app.modules.search.store import ListingStore
from app.modules.wizard.steps import StepSequencer
import logging

logger = logging.getLogger(__name__)


class PropertySearchSession:
    """
    Guided search flow: FILTERING -> SEARCHING -> RESULTS -> FILTERING.

    While filtering, each criteria change feeds the CountOracle so the
    matching count stays live. execute_search runs the full query once;
    reset_search returns to the first step with empty criteria.
    """

    def __init__(
        self,
        search_service: SearchService,
        listing_store: ListingStore,
        tenant: TenantContext,
        debounce_seconds: Optional[float] = None,
    ):
        self.search_service = search_service
        self.tenant = tenant
        self.steps: StepSequencer[SearchStep] = StepSequencer(SEARCH_STEPS)
        self.criteria = SearchCriteria()
        self.count_oracle = CountOracle(
            listing_store, tenant, search_service.query_builder, debounce_seconds=debounce_seconds
        )
        self.suburbs: List[str] = []
        self.suburbs_loading = False
        self.results: Tuple[SearchResult, ...] = ()
        self.phase = SearchPhase.FILTERING
        self._search_generation = 0

    # Counts
    @property
    def total(self) -> int:
        return self.count_oracle.state.total

    @property
    def matching(self) -> int:
        return self.count_oracle.state.matching

    @property
    def matching_loading(self) -> bool:
        return self.count_oracle.state.matching_loading

    @property
    def has_filters(self) -> bool:
        return self.criteria.has_filters

    @property
    def has_searched(self) -> bool:
        return self.phase != SearchPhase.FILTERING

    async def fetch_locations(self):
        """Load the suburb choices and the unfiltered total"""
        self.suburbs_loading = True
        try:
            summary = await self.search_service.get_location_summary(self.tenant)
        except Exception as e:
            logger.error(f"Error fetching suburbs: {e}")
            return
        finally:
            self.suburbs_loading = False

        self.suburbs = summary.suburbs
        self.count_oracle.set_total(summary.total)

    # Criteria
    def _set_criteria(self, criteria: SearchCriteria) -> SearchCriteria:
        self.criteria = criteria
        self.count_oracle.criteria_changed(criteria)
        return criteria

    def toggle_suburb(self, suburb: str) -> SearchCriteria:
        return self._set_criteria(criteria_ops.toggle_location(self.criteria, suburb))

    def toggle_property_type(self, property_type: PropertyType) -> SearchCriteria:
        return self._set_criteria(criteria_ops.toggle_property_type(self.criteria, property_type))

    def toggle_bedroom(self, bedrooms: int) -> SearchCriteria:
        return self._set_criteria(criteria_ops.toggle_bedroom(self.criteria, bedrooms))

    def toggle_amenity(self, amenity: AmenityKey) -> SearchCriteria:
        return self._set_criteria(criteria_ops.toggle_amenity(self.criteria, amenity))

    def set_elevator_required(self, required: bool) -> SearchCriteria:
        return self._set_criteria(criteria_ops.set_elevator_required(self.criteria, required))

    def reset_criteria(self) -> SearchCriteria:
        return self._set_criteria(criteria_ops.empty_criteria())

    # Navigation
    def next(self) -> SearchStep:
        return self.steps.next()

    def previous(self) -> SearchStep:
        return self.steps.previous()

    def jump_to(self, step: SearchStep) -> SearchStep:
        return self.steps.jump_to(step)

    async def advance(self):
        """Continue or Skip: move to the next step, or search from the last one"""
        if self.steps.is_last:
            await self.execute_search()
        else:
            self.steps.skip()

    # Execution
    async def execute_search(self) -> Tuple[SearchResult, ...]:
        """Run the search; only available from the last step"""
        if not self.steps.is_last:
            logger.debug(f"Ignoring search request from step {self.steps.current_step}")
            return self.results

        self._search_generation += 1
        generation = self._search_generation
        self.phase = SearchPhase.SEARCHING

        results = await self.search_service.search_properties(self.tenant, self.criteria)
        if generation != self._search_generation:
            logger.debug("Dropping results of a superseded search")
            return self.results

        self.results = tuple(results)
        self.phase = SearchPhase.RESULTS
        return self.results

    def reset_search(self):
        """Start a new search from the first step"""
        self._search_generation += 1
        self.count_oracle.cancel()
        self.steps.reset()
        self.criteria = SearchCriteria()
        self.results = ()
        self.phase = SearchPhase.FILTERING

    def close(self):
        self._search_generation += 1
        self.count_oracle.close()
