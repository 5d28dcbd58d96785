import pytest
import asyncio
from unittest.mock import AsyncMock, MagicMock
from app.models.property import AmenityKey, PropertyType
from app.models.search import SearchCriteria
from app.modules.search.count_oracle import CountOracle
from app.modules.search.debounce import Debouncer
from conftest import ORG_ID

DEBOUNCE = 0.01
QUIET = 0.05


def passthrough_builder():
    """Query builder whose predicate is the criteria itself, so tests can see what was counted"""
    builder = MagicMock()
    builder.build_predicate.side_effect = lambda organisation_id, criteria: criteria
    return builder


async def settle():
    for _ in range(5):
        await asyncio.sleep(0)


class GatedStore:
    """Listing store whose count calls block until the test resolves them"""

    def __init__(self):
        self.calls = []

    async def count(self, organisation_id, predicate):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((predicate, future))
        return await future

    def resolve(self, predicate, value):
        for criteria, future in self.calls:
            if criteria == predicate and not future.done():
                future.set_result(value)
                return
        raise AssertionError(f"No pending count for {predicate}")

    def fail(self, predicate, error):
        for criteria, future in self.calls:
            if criteria == predicate and not future.done():
                future.set_exception(error)
                return
        raise AssertionError(f"No pending count for {predicate}")


class TestDebouncer:
    """Test the cancellable scheduled call"""

    @pytest.mark.asyncio
    async def test_reschedule_replaces_pending_call(self):
        calls = []

        async def record(value):
            calls.append(value)

        debouncer = Debouncer(delay=DEBOUNCE)
        for value in range(5):
            debouncer.schedule(record, value)

        await asyncio.sleep(QUIET)
        await debouncer.wait_idle()
        assert calls == [4]

    @pytest.mark.asyncio
    async def test_close_stops_pending_call(self):
        record = AsyncMock()
        debouncer = Debouncer(delay=DEBOUNCE)
        debouncer.schedule(record, 1)
        debouncer.close()

        await asyncio.sleep(QUIET)
        record.assert_not_awaited()

        debouncer.schedule(record, 2)
        await asyncio.sleep(QUIET)
        record.assert_not_awaited()


class TestCountOracle:
    """Test debounced, race-safe matching counts"""

    @pytest.mark.asyncio
    async def test_empty_criteria_short_circuits_to_total(self, tenant):
        store = MagicMock()
        store.count = AsyncMock(return_value=3)
        oracle = CountOracle(store, tenant, passthrough_builder(), debounce_seconds=DEBOUNCE)
        oracle.set_total(50)

        oracle.criteria_changed(SearchCriteria())
        await asyncio.sleep(QUIET)

        assert oracle.state.matching == 50
        assert oracle.state.matching_loading is False
        store.count.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_burst_of_changes_issues_one_query_for_final_criteria(self, tenant):
        store = MagicMock()
        store.count = AsyncMock(return_value=7)
        oracle = CountOracle(store, tenant, passthrough_builder(), debounce_seconds=DEBOUNCE)
        oracle.set_total(50)

        criteria = SearchCriteria()
        for bedrooms in range(1, 11):
            criteria = SearchCriteria(bedroom_buckets={bedrooms})
            oracle.criteria_changed(criteria)

        await asyncio.sleep(QUIET)
        await oracle.wait_idle()

        store.count.assert_awaited_once_with(ORG_ID, criteria)
        assert criteria == SearchCriteria(bedroom_buckets={10})
        assert oracle.state.matching == 7
        assert oracle.state.matching_loading is False

    @pytest.mark.asyncio
    async def test_late_stale_result_is_dropped(self, tenant):
        """Request A finishes after request B; B's count must stay displayed"""
        store = GatedStore()
        oracle = CountOracle(store, tenant, passthrough_builder(), debounce_seconds=DEBOUNCE)
        oracle.set_total(50)
        criteria_x = SearchCriteria(location_tags={"Springfield"})
        criteria_y = SearchCriteria(location_tags={"Springfield"}, property_types={PropertyType.HOUSE})

        oracle.criteria_changed(criteria_x)
        await asyncio.sleep(QUIET)
        assert oracle.state.matching_loading is True

        oracle.criteria_changed(criteria_y)
        await asyncio.sleep(QUIET)
        assert len(store.calls) == 2

        store.resolve(criteria_y, 12)
        await settle()
        assert oracle.state.matching == 12
        assert oracle.state.matching_loading is False

        store.resolve(criteria_x, 30)
        await settle()
        assert oracle.state.matching == 12

    @pytest.mark.asyncio
    async def test_stale_result_dropped_after_clearing_filters(self, tenant):
        store = GatedStore()
        oracle = CountOracle(store, tenant, passthrough_builder(), debounce_seconds=DEBOUNCE)
        oracle.set_total(50)
        criteria = SearchCriteria(amenity_flags={AmenityKey.POOL})

        oracle.criteria_changed(criteria)
        await asyncio.sleep(QUIET)
        oracle.criteria_changed(SearchCriteria())
        assert oracle.state.matching == 50

        store.resolve(criteria, 4)
        await settle()
        assert oracle.state.matching == 50
        assert oracle.state.matching_loading is False

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_count(self, tenant):
        store = GatedStore()
        oracle = CountOracle(store, tenant, passthrough_builder(), debounce_seconds=DEBOUNCE)
        oracle.set_total(50)
        first = SearchCriteria(bedroom_buckets={2})
        second = SearchCriteria(bedroom_buckets={2, 3})

        oracle.criteria_changed(first)
        await asyncio.sleep(QUIET)
        store.resolve(first, 9)
        await settle()

        oracle.criteria_changed(second)
        await asyncio.sleep(QUIET)
        store.fail(second, RuntimeError("connection reset"))
        await settle()

        assert oracle.state.matching == 9
        assert oracle.state.matching_loading is False

    @pytest.mark.asyncio
    async def test_cancel_prevents_late_update(self, tenant):
        """A timer pending when the wizard resets must not resurrect a stale count"""
        store = MagicMock()
        store.count = AsyncMock(return_value=3)
        oracle = CountOracle(store, tenant, passthrough_builder(), debounce_seconds=DEBOUNCE)
        oracle.set_total(50)

        oracle.criteria_changed(SearchCriteria(location_tags={"Springfield"}))
        assert oracle.pending
        oracle.cancel()

        await asyncio.sleep(QUIET)
        store.count.assert_not_awaited()
        assert oracle.state.matching == 50

    @pytest.mark.asyncio
    async def test_set_total_updates_matching_for_empty_criteria(self, tenant):
        oracle = CountOracle(MagicMock(), tenant, passthrough_builder(), debounce_seconds=DEBOUNCE)
        oracle.set_total(42)

        assert oracle.state.total == 42
        assert oracle.state.matching == 42
