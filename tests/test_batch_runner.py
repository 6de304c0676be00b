"""Tests for group-by-group orchestration."""

from __future__ import annotations

from typing import Sequence

import pytest

from core.domain.models import (
    INVALID_IP_FORMAT,
    NO_CANDIDATES_MESSAGE,
    LookupFailure,
    LookupSuccess,
    RunSnapshot,
)
from core.services.batch_runner import BatchHooks, BatchOptions, BatchRunner, check_text, partition


def _ips(count: int) -> list[str]:
    return [f"10.0.0.{i}" for i in range(1, count + 1)]


def _runner(lookup, *, batch_size: int = 5, delay_ms: int = 0, published=None, sleep=None):
    hooks = BatchHooks(snapshot=published.append if published is not None else None)
    kwargs = {"sleep": sleep} if sleep is not None else {}
    return BatchRunner(
        lookup,
        options=BatchOptions(batch_size=batch_size, delay_ms=delay_ms),
        hooks=hooks,
        **kwargs,
    )


def test_partition_keeps_order_and_remainder() -> None:
    assert partition(["a", "b", "c", "d", "e", "f", "g"], 3) == [["a", "b", "c"], ["d", "e", "f"], ["g"]]
    assert partition([], 5) == []


def test_batch_options_reject_bad_values() -> None:
    with pytest.raises(ValueError):
        BatchOptions(batch_size=0)
    with pytest.raises(ValueError):
        BatchOptions(delay_ms=-1)


@pytest.mark.asyncio
async def test_twelve_ips_publish_three_group_snapshots(make_lookup) -> None:
    published: list[RunSnapshot] = []
    lookup = make_lookup()
    runner = _runner(lookup, published=published)

    final = await runner.run("\n".join(_ips(12)))

    assert len(published) == 3
    assert [s.completed for s in published] == [5, 10, 12]
    assert [s.progress for s in published] == [41.67, 83.33, 100.0]
    assert final.done
    assert final.progress == 100.0
    assert final.total == 12
    assert len(final.outcomes) == 12
    assert all(isinstance(o, LookupSuccess) for o in final.outcomes)
    assert final.errors == ()


@pytest.mark.asyncio
async def test_order_follows_input_despite_latency(make_lookup) -> None:
    ips = _ips(7)
    # earlier items in each group answer last
    latency = {ip: 0.005 * (len(ips) - i) for i, ip in enumerate(ips)}
    lookup = make_lookup(latency=latency)

    final = await _runner(lookup, batch_size=4).run("\n".join(ips))

    assert [o.ip_address for o in final.outcomes] == ips


@pytest.mark.asyncio
async def test_concurrency_is_bounded_by_group_size(make_lookup) -> None:
    ips = _ips(11)
    lookup = make_lookup(latency={ip: 0.01 for ip in ips})

    await _runner(lookup, batch_size=4).run("\n".join(ips))

    assert lookup.max_in_flight == 4
    assert lookup.calls == ips


@pytest.mark.asyncio
async def test_invalid_token_never_reaches_lookup(make_lookup) -> None:
    lookup = make_lookup()

    final = await _runner(lookup).run("1.2.3.4\nnot an ip\n999.999.999.999")

    assert lookup.calls == ["1.2.3.4"]
    assert final.total == 2
    assert isinstance(final.outcomes[0], LookupSuccess)
    assert final.outcomes[1] == LookupFailure(ip_address="999.999.999.999", reason=INVALID_IP_FORMAT)
    assert final.errors == ("Error processing 999.999.999.999: Invalid IP Format",)


@pytest.mark.asyncio
async def test_out_of_range_octet_is_format_failure(make_lookup) -> None:
    lookup = make_lookup()

    final = await _runner(lookup).run("999.1.1.1")

    assert lookup.calls == []
    assert final.outcomes == (LookupFailure(ip_address="999.1.1.1", reason="Invalid IP Format"),)


@pytest.mark.asyncio
async def test_repeated_ip_is_looked_up_twice(make_lookup) -> None:
    lookup = make_lookup()

    final = await _runner(lookup).run("10.0.0.1\nsomething 10.0.0.1")

    assert lookup.calls == ["10.0.0.1", "10.0.0.1"]
    assert [o.ip_address for o in final.outcomes] == ["10.0.0.1", "10.0.0.1"]


@pytest.mark.asyncio
async def test_unreachable_provider_still_completes(make_lookup) -> None:
    published: list[RunSnapshot] = []
    ips = _ips(8)
    lookup = make_lookup(fail_all="All connection attempts failed")

    final = await _runner(lookup, batch_size=3, published=published).run("\n".join(ips))

    assert final.done
    assert len(final.outcomes) == final.total == 8
    assert all(isinstance(o, LookupFailure) for o in final.outcomes)
    assert len(final.errors) == 8
    assert final.errors[0] == "Error processing 10.0.0.1: All connection attempts failed"
    progress = [s.progress for s in published]
    assert progress == sorted(progress)
    assert progress[-1] == 100.0


@pytest.mark.asyncio
async def test_lookup_exception_becomes_failure(make_lookup) -> None:
    lookup = make_lookup(raise_for={"10.0.0.2"})

    final = await _runner(lookup).run("\n".join(_ips(3)))

    assert [o.ok for o in final.outcomes] == [True, False, True]
    assert final.outcomes[1].reason == "lookup exploded for 10.0.0.2"


class _ExplodingRunner(BatchRunner):
    async def _run_group(self, group: Sequence[str]):
        if group[0] == "10.0.0.1":
            raise RuntimeError("gather broke")
        return await super()._run_group(group)


@pytest.mark.asyncio
async def test_group_fault_is_recorded_and_run_continues(make_lookup) -> None:
    published: list[RunSnapshot] = []
    lookup = make_lookup()
    runner = _ExplodingRunner(
        lookup,
        options=BatchOptions(batch_size=2, delay_ms=0),
        hooks=BatchHooks(snapshot=published.append),
    )

    final = await runner.run("\n".join(_ips(5)))

    assert len(published) == 3
    assert len(final.outcomes) == 5
    assert final.errors == ("Batch processing error: gather broke",)
    assert [o.ok for o in final.outcomes] == [False, False, True, True, True]
    assert final.outcomes[0].reason == "Batch processing error: gather broke"
    assert lookup.calls == ["10.0.0.3", "10.0.0.4", "10.0.0.5"]


@pytest.mark.asyncio
async def test_delay_only_between_groups(make_lookup) -> None:
    pauses: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        pauses.append(seconds)

    runner = _runner(make_lookup(), delay_ms=500, sleep=fake_sleep)
    await runner.run("\n".join(_ips(12)))

    assert pauses == [0.5, 0.5]


@pytest.mark.asyncio
async def test_zero_delay_skips_sleep(make_lookup) -> None:
    pauses: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        pauses.append(seconds)

    await _runner(make_lookup(), delay_ms=0, sleep=fake_sleep).run("\n".join(_ips(12)))

    assert pauses == []


@pytest.mark.asyncio
async def test_empty_input_short_circuits(make_lookup) -> None:
    published: list[RunSnapshot] = []
    lookup = make_lookup()

    final = await _runner(lookup, published=published).run("no addresses\nat all")

    assert lookup.calls == []
    assert final.total == 0
    assert final.outcomes == ()
    assert final.errors == (NO_CANDIDATES_MESSAGE,)
    assert final.done
    assert final.progress == 100.0
    assert published == [final]


@pytest.mark.asyncio
async def test_each_run_starts_fresh(make_lookup) -> None:
    runner = _runner(make_lookup())

    first = await runner.run("1.1.1.1\n2.2.2.2")
    second = await runner.run("3.3.3.3")

    assert first.total == 2
    assert second.total == 1
    assert [o.ip_address for o in second.outcomes] == ["3.3.3.3"]


@pytest.mark.asyncio
async def test_group_start_hook(make_lookup) -> None:
    starts: list[tuple[int, int]] = []
    runner = BatchRunner(
        make_lookup(),
        options=BatchOptions(batch_size=5, delay_ms=0),
        hooks=BatchHooks(group_start=lambda index, count: starts.append((index, count))),
    )

    await runner.run("\n".join(_ips(6)))

    assert starts == [(0, 2), (1, 2)]


@pytest.mark.asyncio
async def test_check_text_uses_settings(make_lookup, settings) -> None:
    published: list[RunSnapshot] = []
    configured = settings.model_copy(update={"batch_size": 2})

    await check_text(
        text="\n".join(_ips(5)),
        lookup=make_lookup(),
        settings=configured,
        hooks=BatchHooks(snapshot=published.append),
    )

    assert [s.completed for s in published] == [2, 4, 5]
