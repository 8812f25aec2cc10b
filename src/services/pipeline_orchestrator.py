# src/services/pipeline_orchestrator.py

"""Runs adapters through normalize → validate → group → diff → persist."""

import asyncio
import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.adapters.site_adapter import SiteAdapter
from src.config.filter_config import FilterConfig
from src.config.settings import Settings
from src.filters.aggregator import OfferAggregator
from src.filters.offer_normalizer import OfferNormalizer
from src.filters.offer_validator import OfferValidator
from src.models.diff_result import DiffResult
from src.models.offer import Offer, RawOfferFields
from src.models.offer_group import OfferGroup
from src.models.snapshot import Snapshot
from src.services.history_differ import HistoryDiffer
from src.storage.run_history import RunHistory
from src.storage.snapshot_store import (
    PersistenceError,
    SnapshotError,
    SnapshotStore,
    offer_to_dict,
)

logger = logging.getLogger("lease_digest.orchestrator")


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class RunStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AdapterFailure:
    """One site whose fetch or processing raised, or whose fetch timed out."""

    site: str
    error_type: str
    message: str


@dataclass
class RunResult:
    """Container for a completed (or refused) pipeline run."""

    status: RunStatus
    started_at: datetime = field(default_factory=datetime.now)
    snapshot: Snapshot | None = None
    groups: dict[tuple[str, str], OfferGroup] = field(
        default_factory=lambda: dict[tuple[str, str], OfferGroup]()
    )
    diffs: list[DiffResult] = field(
        default_factory=lambda: list[DiffResult]()
    )
    site_counts: dict[str, int] = field(
        default_factory=lambda: dict[str, int]()
    )
    total_offers: int = 0
    raw_count: int = 0
    rejected_count: int = 0
    invalid_count: int = 0
    failures: list[AdapterFailure] = field(
        default_factory=lambda: list[AdapterFailure]()
    )
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.OK

    def digest(self) -> dict[str, Any]:
        """Plain-data view of the best offers and price movements."""
        return {
            "grouped_best_offers": [
                {
                    "brand": group.brand,
                    "model": group.model,
                    "lowest_price": group.lowest_price,
                    "cheapest_site": group.cheapest_site,
                    "best_offer": offer_to_dict(group.best),
                    "offers": [offer_to_dict(o) for o in group.offers],
                }
                for group in self.groups.values()
            ],
            "diff_results": [
                {
                    "brand": d.offer.brand,
                    "model": d.offer.model,
                    "site": d.offer.site,
                    "price": d.offer.price,
                    "change": d.change.value,
                    "delta": d.delta,
                    "previous_price": d.previous_price,
                }
                for d in self.diffs
            ],
        }


class PipelineOrchestrator:
    """Coordinates adapters, the offer pipeline, and snapshot storage.

    Only one run may be active at a time; a concurrent ``run()`` is
    refused immediately rather than queued.
    """

    def __init__(
        self,
        store: SnapshotStore | None = None,
        history: RunHistory | None = None,
        max_concurrency: int | None = None,
        adapter_timeout: float | None = None,
    ) -> None:
        self.settings = Settings()
        self._store = store or SnapshotStore()
        self._history = history or RunHistory()
        self._max_concurrency = max(
            1, max_concurrency or self.settings.MAX_CONCURRENT_ADAPTERS
        )
        self._adapter_timeout = (
            adapter_timeout or self.settings.ADAPTER_TIMEOUT
        )
        self._run_lock = threading.Lock()
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        return self._state

    # ── Private helpers ──────────────────────────────────

    async def _fetch_all(
        self, adapters: Sequence[SiteAdapter],
    ) -> tuple[list[tuple[str, list[RawOfferFields]]], list[AdapterFailure]]:
        """Fetch every adapter under the concurrency cap.

        ``gather`` is the barrier: nothing downstream starts until all
        adapters have settled. Results keep the caller's order.

        A timed-out fetch is abandoned, not stopped: its worker thread
        keeps running and its semaphore slot is released, so the next
        adapter may overlap it even at a cap of 1. ``asyncio.run`` also
        joins that thread when it shuts down the default executor, so
        ``ADAPTER_TIMEOUT`` bounds the run result, not process exit.
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fetch_one(adapter: SiteAdapter) -> list[RawOfferFields]:
            async with semaphore:
                logger.info("Fetching offers from %s", adapter.site)
                records = await asyncio.wait_for(
                    asyncio.to_thread(adapter.fetch),
                    timeout=self._adapter_timeout,
                )
                return list(records)

        batches = await asyncio.gather(
            *(fetch_one(a) for a in adapters),
            return_exceptions=True,
        )

        fetched: list[tuple[str, list[RawOfferFields]]] = []
        failures: list[AdapterFailure] = []
        for adapter, batch in zip(adapters, batches):
            if isinstance(batch, BaseException):
                message = (
                    f"timed out after {self._adapter_timeout:.0f}s"
                    if isinstance(batch, asyncio.TimeoutError)
                    else str(batch)
                )
                failures.append(AdapterFailure(
                    site=adapter.site,
                    error_type=type(batch).__name__,
                    message=message,
                ))
                logger.error(
                    "Adapter %s failed: %s",
                    adapter.site,
                    message,
                    exc_info=batch,
                )
            else:
                logger.info(
                    "Adapter %s returned %d raw offers",
                    adapter.site,
                    len(batch),
                )
                fetched.append((adapter.site, batch))

        return fetched, failures

    def _load_previous(self) -> Snapshot | None:
        """Read the baseline snapshot; an unreadable one counts as empty."""
        try:
            return self._store.load_latest()
        except SnapshotError as exc:
            logger.error(
                "Previous snapshot unreadable, diffing against empty: %s",
                exc,
                exc_info=True,
            )
            return None

    async def _execute(
        self,
        adapters: Sequence[SiteAdapter],
        filter_config: FilterConfig,
    ) -> RunResult:
        result = RunResult(status=RunStatus.OK)
        started = time.monotonic()
        result.site_counts = {a.site: 0 for a in adapters}

        fetched, result.failures = await self._fetch_all(adapters)

        pool: list[Offer] = []
        for site, raws in fetched:
            try:
                offers, rejected = OfferNormalizer.normalize_all(
                    raws, result.started_at
                )
                valid, invalid = OfferValidator.validate(
                    offers, filter_config
                )
            except Exception as exc:
                # Site contributes zero offers; the others still count
                result.failures.append(AdapterFailure(
                    site=site,
                    error_type=type(exc).__name__,
                    message=f"processing failed: {exc}",
                ))
                logger.error(
                    "Processing offers from %s failed: %s",
                    site,
                    exc,
                    exc_info=True,
                )
                continue
            result.raw_count += len(raws)
            result.rejected_count += len(rejected)
            result.invalid_count += invalid
            result.site_counts[site] = (
                result.site_counts.get(site, 0) + len(valid)
            )
            pool.extend(valid)

        result.total_offers = len(pool)
        result.groups = OfferAggregator.build_groups(pool)

        if adapters and len(result.failures) == len(adapters):
            result.status = RunStatus.FAILED
            result.errors.append("every adapter failed")
            logger.error(
                "All %d adapters failed; snapshot left untouched",
                len(adapters),
            )
            return result

        previous = self._load_previous()
        result.diffs = HistoryDiffer.diff(
            pool, previous.offers if previous else ()
        )

        if not pool:
            logger.warning(
                "No offers passed validation; keeping previous snapshot"
            )
            return result

        snapshot = Snapshot(timestamp=result.started_at, offers=tuple(pool))
        try:
            await asyncio.to_thread(self._store.save, snapshot)
        except PersistenceError as exc:
            result.status = RunStatus.FAILED
            result.errors.append(str(exc))
            logger.error(
                "Snapshot persistence failed: %s", exc, exc_info=True,
            )
            return result
        result.snapshot = snapshot

        try:
            await asyncio.to_thread(
                self._history.record_run, snapshot, result.site_counts,
            )
        except (OSError, ValueError) as exc:
            result.errors.append(f"run history not updated: {exc}")
            logger.error(
                "Run history update failed: %s", exc, exc_info=True,
            )

        logger.info(
            "Run completed in %.1fs: %d offers in %d groups "
            "(%d raw, %d rejected, %d invalid, %d adapter failures)",
            time.monotonic() - started,
            result.total_offers,
            len(result.groups),
            result.raw_count,
            result.rejected_count,
            result.invalid_count,
            len(result.failures),
        )
        return result

    # ── Entry point ──────────────────────────────────────

    async def run(
        self,
        adapters: Sequence[SiteAdapter],
        filter_config: FilterConfig,
    ) -> RunResult:
        """Run the full pipeline over *adapters* in the given order.

        Never raises: adapter, persistence and unexpected failures are
        reported through :attr:`RunResult.status` and the error lists.
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning(
                "Run requested while another run is active — rejected"
            )
            return RunResult(
                status=RunStatus.REJECTED,
                errors=["a run is already in progress"],
            )

        self._state = RunState.RUNNING
        try:
            return await self._execute(adapters, filter_config)
        except Exception as exc:
            logger.critical("Pipeline run crashed", exc_info=True)
            return RunResult(
                status=RunStatus.FAILED,
                errors=[f"{type(exc).__name__}: {exc}"],
            )
        finally:
            self._state = RunState.IDLE
            self._run_lock.release()
