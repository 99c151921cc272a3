"""Fan out fetch-and-store work units one date at a time."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import date
from typing import Callable, Sequence

from fx_export.storage import destination_path, encode_payload
from fx_export.storage.base_backend import StorageBackend
from fx_export.utils.logger import get_logger

LOGGER = get_logger(__name__)

FetchFn = Callable[[date, str], bytes]


@dataclass(frozen=True, slots=True)
class WorkUnit:
    """One (date, base) pair: a single fetch, transform and write."""

    rate_date: date
    base: str

    @property
    def destination(self) -> str:
        return destination_path(self.rate_date, self.base)


def plan_units(window: Sequence[date], bases: Sequence[str]) -> list[WorkUnit]:
    """Return every work unit for ``window`` x ``bases`` in execution order."""

    return [WorkUnit(rate_date=day, base=base) for day in window for base in bases]


class FanOutScheduler:
    """Run one concurrent unit per base, with a join barrier after each date.

    At most ``len(bases)`` units are in flight at any time. When a unit
    fails, the remaining units of that date still finish, the first failure
    is re-raised, and no later date is started. Blobs already written stay.
    """

    def __init__(
        self,
        fetch: FetchFn,
        storage: StorageBackend,
        *,
        compress: bool = False,
    ) -> None:
        self.fetch = fetch
        self.storage = storage
        self.compress = compress

    def run(self, window: Sequence[date], bases: Sequence[str]) -> list[str]:
        """Process ``window`` in order and return the written destination paths."""

        written: list[str] = []
        for day in window:
            written.extend(self.run_date(day, bases))
        return written

    def run_date(self, day: date, bases: Sequence[str]) -> list[str]:
        units = plan_units([day], bases)
        if not units:
            return []
        LOGGER.info("Exporting %s for %s base(s)", day.isoformat(), len(units))
        first_error: BaseException | None = None
        with ThreadPoolExecutor(
            max_workers=len(units), thread_name_prefix=f"export-{day.isoformat()}"
        ) as executor:
            futures: dict[Future[str], WorkUnit] = {
                executor.submit(self.run_unit, unit): unit for unit in units
            }
            for future in as_completed(futures):
                error = future.exception()
                if error is None:
                    continue
                unit = futures[future]
                LOGGER.error("Work unit %s/%s failed: %s", unit.rate_date, unit.base, error)
                if first_error is None:
                    first_error = error
        if first_error is not None:
            raise first_error
        return [unit.destination for unit in units]

    def run_unit(self, unit: WorkUnit) -> str:
        payload = self.fetch(unit.rate_date, unit.base)
        self.storage.put(unit.destination, encode_payload(payload, compress=self.compress))
        return unit.destination


__all__ = ["FanOutScheduler", "WorkUnit", "plan_units"]
