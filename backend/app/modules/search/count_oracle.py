from typing import Optional
from app.core.config import settings
from app.core.tenant import TenantContext
from app.models.search import CountState, SearchCriteria
from app.modules.search.debounce import Debouncer
from app.modules.search.query_builder import ListingQueryBuilder
from app.modules.search.store import ListingStore
import logging

logger = logging.getLogger(__name__)


class CountOracle:
    """
    Keeps CountState.matching in line with the latest criteria.

    Criteria changes are debounced so a burst of toggles issues a single
    count query. Every change bumps a generation number; a query result is
    only applied if its generation is still current, so a slow older
    request can never overwrite a newer one.
    """

    def __init__(
        self,
        store: ListingStore,
        tenant: TenantContext,
        query_builder: Optional[ListingQueryBuilder] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.store = store
        self.tenant = tenant
        self.query_builder = query_builder or ListingQueryBuilder()
        self.state = CountState()
        self._debouncer = Debouncer(
            delay=debounce_seconds if debounce_seconds is not None else settings.COUNT_DEBOUNCE_SECONDS
        )
        self._criteria = SearchCriteria()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def set_total(self, total: int):
        """Record the unfiltered count, which is also the answer for empty criteria"""
        self.state.total = total
        if self._criteria.is_empty:
            self.state.matching = total

    def criteria_changed(self, criteria: SearchCriteria):
        """Schedule a refresh for new criteria, superseding anything older"""
        self._criteria = criteria
        self._generation += 1

        if criteria.is_empty:
            self._debouncer.cancel()
            self.state.matching = self.state.total
            self.state.matching_loading = False
            return

        self._debouncer.schedule(self._refresh, criteria, self._generation)

    async def _refresh(self, criteria: SearchCriteria, generation: int):
        self.state.matching_loading = True
        try:
            predicate = self.query_builder.build_predicate(self.tenant.organisation_id, criteria)
            count = await self.store.count(self.tenant.organisation_id, predicate)
        except Exception as e:
            logger.warning(f"Matching count refresh failed: {e}")
            if generation == self._generation:
                self.state.matching_loading = False
            return

        if generation != self._generation:
            logger.debug(f"Dropping stale matching count from generation {generation}")
            return

        self.state.matching = count
        self.state.matching_loading = False

    def cancel(self):
        """Forget pending and in-flight work without closing the oracle"""
        self._debouncer.cancel()
        self._generation += 1
        self._criteria = SearchCriteria()
        self.state.matching = self.state.total
        self.state.matching_loading = False

    def close(self):
        self._debouncer.close()
        self._generation += 1
        self.state.matching_loading = False

    async def wait_idle(self):
        await self._debouncer.wait_idle()
