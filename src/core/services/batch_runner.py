"""Batch orchestration: extract, validate and look up IPs group by group.

The candidate list is cut into consecutive groups of `batch_size`. Each
group's lookups run concurrently; the runner waits for the whole group,
folds the results into the run state, publishes a snapshot and then pauses
before the next group. At most `batch_size` lookups are ever in flight.

Nothing that goes wrong for one IP, or even for a whole group, ends the run:
every candidate gets exactly one outcome.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

import structlog

from core.config import AppSettings
from core.domain.models import (
    INVALID_IP_FORMAT,
    NO_CANDIDATES_MESSAGE,
    LookupFailure,
    LookupSuccess,
    RunSnapshot,
)
from core.interfaces.lookup import ReputationLookup
from core.services.ip_extraction import extract_candidates, is_valid_ipv4
from core.services.result_aggregator import ResultAggregator

logger = structlog.get_logger(__name__)


@dataclass
class BatchOptions:
    """Tunables for one run."""

    batch_size: int = 5
    delay_ms: int = 500

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "BatchOptions":
        return cls(batch_size=settings.batch_size, delay_ms=settings.batch_delay_ms)


@dataclass
class BatchHooks:
    """Optional callbacks for UI layers.

    `snapshot` fires once per finished group (and once for an empty input);
    never per item. `group_start` receives (group_index, group_count).
    """

    snapshot: Callable[[RunSnapshot], None] | None = None
    group_start: Callable[[int, int], None] | None = None


def partition(candidates: Sequence[str], size: int) -> list[list[str]]:
    return [list(candidates[i : i + size]) for i in range(0, len(candidates), size)]


class BatchRunner:
    """Drives lookups for one text input at a time.

    Each call to `run` builds a fresh run state; nothing carries over between
    runs.
    """

    def __init__(
        self,
        lookup: ReputationLookup,
        *,
        options: BatchOptions | None = None,
        hooks: BatchHooks | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._lookup = lookup
        self._options = options or BatchOptions()
        self._hooks = hooks or BatchHooks()
        self._sleep = sleep

    @property
    def options(self) -> BatchOptions:
        return self._options

    async def run(self, text: str) -> RunSnapshot:
        """Extract candidates from `text` and resolve all of them."""

        return await self.run_candidates(extract_candidates(text))

    async def run_candidates(self, candidates: Sequence[str]) -> RunSnapshot:
        state = ResultAggregator(total=len(candidates))

        if not candidates:
            state.add_error(NO_CANDIDATES_MESSAGE)
            snapshot = state.finish()
            self._publish(snapshot)
            logger.info("batch.empty_input")
            return snapshot

        groups = partition(candidates, self._options.batch_size)
        logger.info(
            "batch.start",
            total=len(candidates),
            groups=len(groups),
            batch_size=self._options.batch_size,
        )

        for index, group in enumerate(groups):
            if self._hooks.group_start:
                self._hooks.group_start(index, len(groups))

            try:
                outcomes = await self._run_group(group)
            except Exception as exc:
                message = f"Batch processing error: {exc}"
                logger.exception("batch.group_failed", group=index, size=len(group))
                state.add_error(message)
                state.add_group(
                    [LookupFailure(ip_address=ip, reason=message) for ip in group],
                    record_errors=False,
                )
            else:
                state.add_group(outcomes)

            self._publish(state.snapshot())
            logger.debug(
                "batch.group_done",
                group=index,
                completed=state.completed,
                progress=state.progress,
            )

            if index < len(groups) - 1 and self._options.delay_ms > 0:
                await self._sleep(self._options.delay_ms / 1000)

        snapshot = state.finish()
        logger.info(
            "batch.done",
            total=snapshot.total,
            failures=len(snapshot.failures),
        )
        return snapshot

    async def _run_group(self, group: Sequence[str]) -> list[LookupSuccess | LookupFailure]:
        # gather keeps results index-aligned with `group`
        results = await asyncio.gather(*(self._check_one(ip) for ip in group))
        return list(results)

    async def _check_one(self, ip: str) -> LookupSuccess | LookupFailure:
        if not is_valid_ipv4(ip):
            return LookupFailure(ip_address=ip, reason=INVALID_IP_FORMAT)
        try:
            return await self._lookup.lookup(ip)
        except Exception as exc:
            logger.warning("lookup.unhandled_error", ip=ip, error=repr(exc))
            return LookupFailure(ip_address=ip, reason=str(exc) or exc.__class__.__name__)

    def _publish(self, snapshot: RunSnapshot) -> None:
        if self._hooks.snapshot:
            self._hooks.snapshot(snapshot)


async def check_text(
    *,
    text: str,
    lookup: ReputationLookup,
    settings: AppSettings,
    hooks: BatchHooks | None = None,
) -> RunSnapshot:
    """Convenience entry point using the configured batch tunables."""

    runner = BatchRunner(lookup, options=BatchOptions.from_settings(settings), hooks=hooks)
    return await runner.run(text)
