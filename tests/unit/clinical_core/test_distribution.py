"""Tests for regional distribution with top-N truncation."""

from hypothesis import given
from hypothesis import strategies as st

from clinical_core.services.distribution import (
    UNKNOWN_PATIENT_REGION,
    count_by_label,
    distribute_by_region,
)

REGIONS = ["Nairobi", "Kiambu", "Mombasa", "Kisumu", "Nakuru", "Machakos", "Kajiado", None, ""]


class TestDistributeByRegion:
    def test_shares_of_full_total_without_renormalizing(self) -> None:
        regions = ["A"] * 4 + ["B"] * 3 + ["C", "D", "E", "F"] + [None]

        shares = distribute_by_region(regions, top_n=3)

        assert [(s.region_name, s.count, s.percentage) for s in shares] == [
            ("A", 4, 33.3),
            ("B", 3, 25.0),
            ("C", 1, 8.3),
        ]
        assert sum(s.percentage for s in shares) < 100

    def test_missing_regions_use_given_label(self) -> None:
        shares = distribute_by_region([None, " ", "Nairobi"], unknown_label=UNKNOWN_PATIENT_REGION)

        assert shares[0].region_name == "Unknown Region"
        assert shares[0].count == 2
        assert shares[0].percentage == 66.7

    def test_ties_keep_first_seen_order(self) -> None:
        shares = distribute_by_region(["Kisumu", "Nairobi", "Nairobi", "Kisumu", "Embu"])
        assert [s.region_name for s in shares] == ["Kisumu", "Nairobi", "Embu"]

    def test_empty_input(self) -> None:
        assert distribute_by_region([]) == []

    def test_count_by_label_first_seen_order(self) -> None:
        assert list(count_by_label(["b", None, "a", "b"], "?").items()) == [
            ("b", 2),
            ("?", 1),
            ("a", 1),
        ]

    @given(st.lists(st.sampled_from(REGIONS), max_size=80), st.integers(min_value=1, max_value=8))
    def test_truncated_shares_never_exceed_whole(
        self, regions: list[str | None], top_n: int
    ) -> None:
        shares = distribute_by_region(regions, top_n=top_n)

        assert len(shares) <= top_n
        assert [s.count for s in shares] == sorted((s.count for s in shares), reverse=True)
        # One-decimal half-up rounding can add at most 0.05 per region
        assert sum(s.percentage for s in shares) <= 100 + 0.05 * len(shares) + 1e-9
        assert sum(s.count for s in shares) <= len(regions)
