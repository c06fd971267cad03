"""
Tests for the Result type and the concurrent record fetcher.

Testing philosophy:
- Real in-memory store instead of mocks
- Failure isolation: one failing read never cancels its siblings
- Results never depend on completion order
"""

import asyncio
import time
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from adapters.memory import InMemoryClinicalStore
from clinical_core.domain.models import Alert
from clinical_core.services.record_sources import (
    FetchConfig,
    RecordFetcher,
    Result,
    records_or_none,
)


class TestResult:
    """Test the Result type for explicit error handling."""

    def test_result_ok_creates_successful_result(self) -> None:
        result: Result[list[int], Exception] = Result.ok([1, 2])
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == [1, 2]

    def test_empty_records_are_still_ok(self) -> None:
        result: Result[list[int], Exception] = Result.ok([])
        assert result.is_ok()
        assert records_or_none(result) == []

    def test_result_error_creates_failed_result(self) -> None:
        error = ConnectionError("store down")
        result: Result[list[int], ConnectionError] = Result.err(error)
        assert result.is_err()
        assert result.unwrap_or("default") == "default"
        assert result.unwrap_err() is error
        assert records_or_none(result) is None

    def test_unwrap_raises_on_error_result(self) -> None:
        result: Result[str, ValueError] = Result.err(ValueError("test error"))

        with pytest.raises(ValueError, match="test error"):
            result.unwrap()

    def test_result_requires_exactly_one_side(self) -> None:
        with pytest.raises(ValueError):
            Result()
        with pytest.raises(ValueError):
            Result(value=[1], error=ValueError("both"))


class TestFetchConfig:
    def test_defaults(self) -> None:
        config = FetchConfig()
        assert config.timeout_seconds == 10.0
        assert config.max_concurrent_fetches == 8

    def test_invalid_config_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            FetchConfig(timeout_seconds=-1)
        with pytest.raises(ValidationError):
            FetchConfig(max_concurrent_fetches=0)


class TestRecordFetcher:
    """Fan-out behavior of RecordFetcher.gather and fetch_each."""

    @pytest.fixture
    def store(self) -> InMemoryClinicalStore:
        return InMemoryClinicalStore(
            alerts=[
                Alert(id="a1", severity="critical", created_at=datetime(2025, 1, 1, tzinfo=UTC)),
                Alert(id="a2", severity="low", created_at=datetime(2025, 1, 2, tzinfo=UTC)),
            ],
            fail_on={"fetch_beds"},
        )

    async def test_failed_read_does_not_cancel_siblings(self, store: InMemoryClinicalStore) -> None:
        fetcher = RecordFetcher()

        results = await fetcher.gather(
            {
                "alerts": lambda: store.fetch_unresolved_alerts(),
                "beds": lambda: store.fetch_beds(),
                "supplies": lambda: store.fetch_supplies(),
            }
        )

        assert set(results) == {"alerts", "beds", "supplies"}
        assert [a.id for a in results["alerts"].unwrap()] == ["a2", "a1"]
        assert results["beds"].is_err()
        assert isinstance(results["beds"].unwrap_err(), ConnectionError)
        assert results["supplies"].unwrap() == []

    async def test_slow_read_times_out(self) -> None:
        store = InMemoryClinicalStore(delay_seconds=0.5)
        fetcher = RecordFetcher(FetchConfig(timeout_seconds=0.05))

        results = await fetcher.gather({"beds": lambda: store.fetch_beds()})

        assert results["beds"].is_err()
        assert isinstance(results["beds"].unwrap_err(), TimeoutError)

    async def test_fetch_each_keeps_input_order(self) -> None:
        fetcher = RecordFetcher()

        def delayed(value: int, delay: float):
            async def _fetch() -> list[int]:
                await asyncio.sleep(delay)
                return [value]

            return _fetch

        results = await fetcher.fetch_each(
            "numbers", [delayed(1, 0.03), delayed(2, 0.0), delayed(3, 0.01)]
        )

        assert [r.unwrap() for r in results] == [[1], [2], [3]]

    async def test_fetch_each_with_no_factories(self) -> None:
        assert await RecordFetcher().fetch_each("nothing", []) == []

    async def test_concurrency_is_capped(self) -> None:
        fetcher = RecordFetcher(FetchConfig(max_concurrent_fetches=2))
        in_flight = 0
        peak = 0

        async def tracked() -> list[int]:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return []

        await fetcher.gather({f"read-{i}": tracked for i in range(6)})

        assert peak == 2

    @pytest.mark.performance
    async def test_reads_run_concurrently(self) -> None:
        store = InMemoryClinicalStore(delay_seconds=0.1)
        fetcher = RecordFetcher()

        start = time.perf_counter()
        await fetcher.gather(
            {
                "beds": lambda: store.fetch_beds(),
                "alerts": lambda: store.fetch_unresolved_alerts(),
                "supplies": lambda: store.fetch_supplies(),
                "equipment": lambda: store.fetch_equipment(),
            }
        )
        duration = time.perf_counter() - start

        assert duration < 0.3, f"Reads appear sequential: {duration:.3f}s"
