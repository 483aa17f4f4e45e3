"""Bounded JSON history of past query results.

The history file is a pretty-printed JSON array, oldest first, capped at the
most recent max_entries records. The history is advisory: read and write
failures are logged and degrade to an empty history or a skipped save.
"""

import json
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path

from gas_tracker.logging import get_logger
from gas_tracker.models import HistoryRecord, HistorySummary

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES = 100
DEFAULT_SUMMARY_WINDOW = 10

_TWO_PLACES = Decimal("0.01")


def _mean(values: list[Decimal]) -> Decimal:
    return (sum(values, Decimal("0")) / Decimal(len(values))).quantize(
        _TWO_PLACES, rounding=ROUND_HALF_UP
    )


class HistoryStore:
    """In-memory history list backed by a JSON file.

    Args:
        path: Location of the history file.
        max_entries: Records kept on save (most recent win).
        summary_window: Number of recent records averaged by summarize().
    """

    def __init__(
        self,
        path: str | Path,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        summary_window: int = DEFAULT_SUMMARY_WINDOW,
    ) -> None:
        self._path = Path(path)
        self._max_entries = max_entries
        self._summary_window = summary_window
        self._records: list[HistoryRecord] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def records(self) -> list[HistoryRecord]:
        return list(self._records)

    def load(self) -> list[HistoryRecord]:
        """Load the history file into memory.

        Returns an empty history if the file does not exist, cannot be read,
        or does not contain a valid array of records.
        """
        self._records = []
        if not self._path.exists():
            logger.debug("history_file_missing", path=str(self._path))
            return []

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                raise ValueError("history file does not contain a JSON array")
            records = [HistoryRecord.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.error("history_load_failed", path=str(self._path), error=str(e))
            return []

        self._records = records
        logger.info("history_loaded", path=str(self._path), count=len(records))
        return list(records)

    def append(self, record: HistoryRecord) -> None:
        """Add a record to the in-memory history. Call save() to persist."""
        self._records.append(record)

    def save(self) -> bool:
        """Trim to the most recent max_entries and overwrite the file.

        Returns:
            True if the file was written, False on a write error.
        """
        if len(self._records) > self._max_entries:
            self._records = self._records[-self._max_entries :]

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(
                    [r.to_dict() for r in self._records],
                    indent=2,
                    ensure_ascii=False,
                ),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error("history_save_failed", path=str(self._path), error=str(e))
            return False

        logger.debug("history_saved", path=str(self._path), count=len(self._records))
        return True

    def summarize(
        self, records: list[HistoryRecord] | None = None
    ) -> HistorySummary | None:
        """Average the most recent summary_window records.

        USD fee averages only cover the records that carry USD fee fields
        and are None when none of them do.

        Args:
            records: History to summarize; defaults to the in-memory history.

        Returns:
            HistorySummary, or None when there is no history.
        """
        history = self._records if records is None else records
        recent = history[-self._summary_window :]
        if not recent:
            return None

        with_usd = [r for r in recent if r.has_usd_fees]
        usd_means: dict[str, Decimal | None] = {
            "avg_safe_fee_usd": None,
            "avg_standard_fee_usd": None,
            "avg_fast_fee_usd": None,
        }
        if with_usd:
            usd_means = {
                "avg_safe_fee_usd": _mean([r.safe_fee_usd or Decimal("0") for r in with_usd]),
                "avg_standard_fee_usd": _mean(
                    [r.standard_fee_usd or Decimal("0") for r in with_usd]
                ),
                "avg_fast_fee_usd": _mean([r.fast_fee_usd or Decimal("0") for r in with_usd]),
            }

        return HistorySummary(
            count=len(recent),
            avg_safe=_mean([r.safe for r in recent]),
            avg_standard=_mean([r.standard for r in recent]),
            avg_fast=_mean([r.fast for r in recent]),
            **usd_means,
        )
