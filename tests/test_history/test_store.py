"""Tests for HistoryStore: load/save, trimming, and rolling averages."""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from gas_tracker.history.store import HistoryStore
from gas_tracker.models import HistoryRecord


def _record(i: int, with_usd: bool = True) -> HistoryRecord:
    return HistoryRecord(
        timestamp=f"2024-01-01T00:{i % 60:02d}:00+00:00",
        safe=Decimal(i),
        standard=Decimal(i) + Decimal("0.5"),
        fast=Decimal(i) + Decimal("1"),
        eth_price=Decimal("3000"),
        safe_fee_usd=Decimal("0.10") if with_usd else None,
        standard_fee_usd=Decimal("0.20") if with_usd else None,
        fast_fee_usd=Decimal("0.30") if with_usd else None,
    )


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    return tmp_path / "gas_history.json"


@pytest.fixture
def store(history_path: Path) -> HistoryStore:
    return HistoryStore(history_path)


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------


class TestLoad:
    def test_missing_file_is_empty(self, store: HistoryStore) -> None:
        assert store.load() == []
        assert store.records == []

    def test_malformed_json_is_empty(self, store: HistoryStore, history_path: Path) -> None:
        history_path.write_text("{not json", encoding="utf-8")
        assert store.load() == []

    def test_non_array_is_empty(self, store: HistoryStore, history_path: Path) -> None:
        history_path.write_text('{"timestamp": "x"}', encoding="utf-8")
        assert store.load() == []

    def test_entry_missing_field_is_empty(
        self, store: HistoryStore, history_path: Path
    ) -> None:
        history_path.write_text('[{"timestamp": "x", "safe": 1}]', encoding="utf-8")
        assert store.load() == []

    def test_loads_entries_without_usd_fields(
        self, store: HistoryStore, history_path: Path
    ) -> None:
        history_path.write_text(
            json.dumps(
                [{"timestamp": "t", "safe": 1.5, "standard": 2, "fast": 3, "ethPrice": 3000}]
            ),
            encoding="utf-8",
        )

        records = store.load()

        assert len(records) == 1
        assert records[0].safe == Decimal("1.5")
        assert records[0].has_usd_fees is False


# ---------------------------------------------------------------------------
# save
# ---------------------------------------------------------------------------


class TestSave:
    def test_writes_pretty_camel_case_json(
        self, store: HistoryStore, history_path: Path
    ) -> None:
        store.append(_record(1))
        assert store.save() is True

        text = history_path.read_text(encoding="utf-8")
        assert text.startswith("[\n  {")
        entry = json.loads(text)[0]
        assert entry == {
            "timestamp": "2024-01-01T00:01:00+00:00",
            "safe": 1.0,
            "standard": 1.5,
            "fast": 2.0,
            "ethPrice": 3000.0,
            "safeFeeUsd": 0.1,
            "standardFeeUsd": 0.2,
            "fastFeeUsd": 0.3,
        }

    def test_trims_to_most_recent_entries(
        self, store: HistoryStore, history_path: Path
    ) -> None:
        for i in range(105):
            store.append(_record(i))
        store.save()

        data = json.loads(history_path.read_text(encoding="utf-8"))
        assert len(data) == 100
        assert data[0]["safe"] == 5.0
        assert data[-1]["safe"] == 104.0
        assert len(store.records) == 100

    def test_custom_max_entries(self, history_path: Path) -> None:
        store = HistoryStore(history_path, max_entries=3)
        for i in range(5):
            store.append(_record(i))
        store.save()

        assert [r.safe for r in store.records] == [Decimal(2), Decimal(3), Decimal(4)]

    def test_round_trip(self, store: HistoryStore, history_path: Path) -> None:
        store.append(_record(7))
        store.append(_record(8, with_usd=False))
        store.save()

        reloaded = HistoryStore(history_path).load()

        assert [r.safe for r in reloaded] == [Decimal("7.0"), Decimal("8.0")]
        assert reloaded[0].standard_fee_usd == Decimal("0.2")
        assert reloaded[1].has_usd_fees is False

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "history.json"
        store = HistoryStore(path)
        store.append(_record(1))

        assert store.save() is True
        assert path.exists()

    def test_unwritable_path_returns_false(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        store = HistoryStore(blocker / "history.json")
        store.append(_record(1))

        assert store.save() is False


# ---------------------------------------------------------------------------
# summarize
# ---------------------------------------------------------------------------


class TestSummarize:
    def test_empty_history(self, store: HistoryStore) -> None:
        assert store.summarize() is None

    def test_averages_last_ten(self, store: HistoryStore) -> None:
        for i in range(1, 21):
            store.append(_record(i))

        summary = store.summarize()

        assert summary is not None
        assert summary.count == 10
        # mean of 11..20
        assert summary.avg_safe == Decimal("15.50")
        assert summary.avg_standard == Decimal("16.00")
        assert summary.avg_fast == Decimal("16.50")
        assert summary.avg_standard_fee_usd == Decimal("0.20")

    def test_fewer_records_than_window(self, store: HistoryStore) -> None:
        store.append(_record(1))
        store.append(_record(2))

        summary = store.summarize()

        assert summary is not None
        assert summary.count == 2
        assert summary.avg_safe == Decimal("1.50")

    def test_usd_average_over_subset(self, store: HistoryStore) -> None:
        store.append(_record(1, with_usd=False))
        store.append(
            HistoryRecord(
                timestamp="t",
                safe=Decimal("3"),
                standard=Decimal("3"),
                fast=Decimal("3"),
                eth_price=Decimal("3000"),
                safe_fee_usd=Decimal("0.40"),
                standard_fee_usd=Decimal("0.50"),
                fast_fee_usd=Decimal("0.60"),
            )
        )

        summary = store.summarize()

        assert summary is not None
        assert summary.count == 2
        assert summary.avg_safe == Decimal("2.00")
        # only the second record carries USD fees
        assert summary.avg_safe_fee_usd == Decimal("0.40")
        assert summary.avg_fast_fee_usd == Decimal("0.60")

    def test_no_usd_fields(self, store: HistoryStore) -> None:
        store.append(_record(1, with_usd=False))

        summary = store.summarize()

        assert summary is not None
        assert summary.avg_safe_fee_usd is None
        assert summary.avg_standard_fee_usd is None
        assert summary.avg_fast_fee_usd is None

    def test_explicit_records_argument(self, store: HistoryStore) -> None:
        summary = store.summarize([_record(4)])

        assert summary is not None
        assert summary.avg_safe == Decimal("4.00")
        assert store.records == []
