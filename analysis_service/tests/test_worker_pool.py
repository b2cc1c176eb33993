"""
Tests for the bounded worker pool: ordering, concurrency bound,
backpressure, failure isolation and shutdown semantics.
"""

import asyncio
import os
import threading
import time

import pytest

from app.domain.errors import PoolClosedError, PoolSaturatedError
from app.infrastructure.worker_pool import WorkerPool


def sleep_and_return(value, seconds):
    time.sleep(seconds)
    return value


def fail(message):
    raise RuntimeError(message)


# ============================================================================
# Ordering
# ============================================================================


def test_results_follow_submission_order_not_completion_order(pool):
    """f1=50ms, f2=10ms, f3=30ms complete out of order but come back as [f1, f2, f3]."""
    completed = []

    def task(name, seconds):
        time.sleep(seconds)
        completed.append(name)
        return name

    async def scenario():
        handles = [
            pool.submit(task, "f1", 0.05),
            pool.submit(task, "f2", 0.01),
            pool.submit(task, "f3", 0.03),
        ]
        return await pool.await_all(handles)

    batch = asyncio.run(scenario())

    assert batch.results == ["f1", "f2", "f3"]
    assert completed == ["f2", "f3", "f1"]


def test_await_all_on_empty_batch(pool):
    batch = asyncio.run(pool.await_all([]))

    assert len(batch) == 0
    assert batch.succeeded
    assert batch.first_error is None


# ============================================================================
# Concurrency bound
# ============================================================================


@pytest.mark.slow
@pytest.mark.parametrize("size", [1, 2, 3])
def test_never_runs_more_than_max_workers(size):
    intervals = []
    lock = threading.Lock()

    def task():
        start = time.perf_counter()
        time.sleep(0.02)
        with lock:
            intervals.append((start, time.perf_counter()))

    with WorkerPool(max_workers=size) as pool:
        async def scenario():
            return await pool.await_all([pool.submit(task) for _ in range(10)])

        batch = asyncio.run(scenario())
        peak = pool.peak_running

    assert batch.succeeded
    assert peak <= size

    # overlap computed from recorded start/end timestamps
    events = sorted([(s, 1) for s, _ in intervals] + [(e, -1) for _, e in intervals])
    active = max_overlap = 0
    for _, delta in events:
        active += delta
        max_overlap = max(max_overlap, active)
    assert max_overlap <= size


def test_default_size_is_available_parallelism():
    with WorkerPool() as pool:
        assert pool.max_workers == (os.cpu_count() or 1)


@pytest.mark.parametrize("kwargs", [{"max_workers": 0}, {"max_queue_size": -1}])
def test_invalid_configuration_is_rejected(kwargs):
    with pytest.raises(ValueError):
        WorkerPool(**kwargs)


# ============================================================================
# Failures
# ============================================================================


def test_failure_does_not_cancel_siblings(pool):
    async def scenario():
        handles = [
            pool.submit(sleep_and_return, "a", 0.02),
            pool.submit(fail, "b exploded"),
            pool.submit(sleep_and_return, "c", 0.04),
        ]
        batch = await pool.await_all(handles)
        return handles, batch

    handles, batch = asyncio.run(scenario())

    assert all(h.done() and not h.cancelled() for h in handles)
    assert batch.results == ["a", "c"]
    assert not batch.succeeded
    assert [index for index, _ in batch.errors] == [1]
    assert str(batch.first_error) == "b exploded"


def test_first_error_follows_submission_order(pool):
    async def scenario():
        handles = [
            pool.submit(lambda: sleep_and_return(None, 0.05) or fail("slow failure")),
            pool.submit(fail, "fast failure"),
        ]
        return await pool.await_all(handles)

    batch = asyncio.run(scenario())

    assert str(batch.first_error) == "slow failure"
    assert len(batch.errors) == 2


# ============================================================================
# Backpressure
# ============================================================================


def test_bounded_queue_rejects_when_full():
    gate = threading.Event()

    with WorkerPool(max_workers=1, max_queue_size=1) as pool:
        running = pool.submit(gate.wait, 5)
        queued = pool.submit(lambda: "queued")

        with pytest.raises(PoolSaturatedError):
            pool.submit(lambda: "rejected")

        gate.set()
        assert running.result(timeout=5) is True
        assert queued.result(timeout=5) == "queued"

        # capacity is released once tasks finish
        assert pool.submit(lambda: "accepted").result(timeout=5) == "accepted"


def test_unbounded_queue_accepts_everything():
    gate = threading.Event()

    with WorkerPool(max_workers=1) as pool:
        handles = [pool.submit(gate.wait, 5) for _ in range(50)]
        assert pool.in_flight == 50
        gate.set()
        assert all(h.result(timeout=5) for h in handles)


def test_counters_track_queued_running_and_peak_work():
    gate = threading.Event()

    with WorkerPool(max_workers=2) as pool:
        handles = [pool.submit(gate.wait, 5) for _ in range(3)]
        while pool.running < 2:
            time.sleep(0.005)

        assert pool.in_flight == 3
        assert pool.running == 2

        gate.set()
        assert all(h.result(timeout=5) for h in handles)

    assert pool.in_flight == 0
    assert pool.running == 0
    assert pool.peak_running == 2


# ============================================================================
# Cancellation
# ============================================================================


def test_cancelled_wait_cancels_pending_tasks_and_pool_keeps_running():
    gate = threading.Event()

    with WorkerPool(max_workers=1) as pool:
        async def scenario():
            handles = [pool.submit(gate.wait, 5) for _ in range(3)]
            waiter = asyncio.ensure_future(pool.await_all(handles))
            await asyncio.sleep(0.05)
            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter
            return handles

        handles = asyncio.run(scenario())
        gate.set()

        assert handles[0].result(timeout=5) is True
        assert handles[1].cancelled()
        assert handles[2].cancelled()
        assert pool.submit(lambda: 7).result(timeout=5) == 7


# ============================================================================
# Shutdown
# ============================================================================


def test_submit_after_shutdown_raises_pool_closed():
    pool = WorkerPool(max_workers=2)
    pool.shutdown()

    assert pool.closed
    with pytest.raises(PoolClosedError):
        pool.submit(lambda: None)


def test_shutdown_is_idempotent_and_waits_for_in_flight_work():
    pool = WorkerPool(max_workers=2)
    handle = pool.submit(sleep_and_return, "done", 0.05)

    pool.shutdown()
    pool.shutdown()

    assert handle.done()
    assert handle.result() == "done"
    assert pool.in_flight == 0
