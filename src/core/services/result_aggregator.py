"""Run state for one query and the rules for mutating it.

One `ResultAggregator` exists per run. The batch runner feeds it whole groups
of outcomes (already index-aligned with the group's input slice); it keeps
outcome order equal to candidate order and hands out frozen snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from core.domain.models import LookupFailure, LookupSuccess, RunSnapshot


def format_item_error(failure: LookupFailure) -> str:
    return f"Error processing {failure.ip_address}: {failure.reason}"


def compute_progress(completed: int, total: int) -> float:
    """Percent done, clamped to 100 and rounded to two decimals."""

    if total <= 0:
        return 100.0
    return round(min(100.0, completed / total * 100), 2)


@dataclass
class ResultAggregator:
    """Mutable run state owned by the batch runner's control coroutine."""

    total: int
    outcomes: list[LookupSuccess | LookupFailure] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    progress: float = 0.0
    done: bool = False

    @property
    def completed(self) -> int:
        return len(self.outcomes)

    def add_group(
        self,
        group_outcomes: Sequence[LookupSuccess | LookupFailure],
        *,
        record_errors: bool = True,
    ) -> None:
        """Append one finished group, in group-index order.

        With `record_errors` each failure also adds an `Error processing ...`
        line; the runner turns it off when the whole group already produced a
        single aggregate message.
        """

        if self.done:
            raise RuntimeError("run already finished")
        if self.completed + len(group_outcomes) > self.total:
            raise ValueError(
                f"group of {len(group_outcomes)} overflows run of {self.total} "
                f"({self.completed} already collected)"
            )

        self.outcomes.extend(group_outcomes)
        for outcome in group_outcomes if record_errors else ():
            if isinstance(outcome, LookupFailure):
                self.errors.append(format_item_error(outcome))
        self.progress = max(self.progress, compute_progress(self.completed, self.total))

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def finish(self) -> RunSnapshot:
        self.done = True
        self.progress = 100.0
        return self.snapshot()

    def snapshot(self) -> RunSnapshot:
        return RunSnapshot(
            total=self.total,
            completed=self.completed,
            progress=self.progress,
            outcomes=tuple(self.outcomes),
            errors=tuple(self.errors),
            done=self.done,
        )
