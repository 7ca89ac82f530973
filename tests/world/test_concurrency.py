"""Tests for borrow atomicity under threads.

Critical Invariants:
- Threads racing for an exclusive borrow: exactly one wins
- A writer is never live alongside another writer or any reader
- No update made under an exclusive guard is lost
"""

import random
import threading
from dataclasses import dataclass

from borrowkit import BorrowConflictError

THREADS = 8


@dataclass(frozen=True)
class Counter:
    n: int


def _run(workers):
    threads = [threading.Thread(target=w) for w in workers]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)


def test_exactly_one_exclusive_winner(resources):
    """CRITICAL: Two contexts racing for exclusive access never both succeed."""
    resources.register(Counter(0))
    start = threading.Barrier(THREADS)
    done = threading.Barrier(THREADS)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def worker():
        start.wait()
        try:
            guard = resources.fetch_exclusive(Counter)
        except BorrowConflictError:
            guard = None
        with outcomes_lock:
            outcomes.append("won" if guard is not None else "lost")
        # Hold the borrow until every thread has tried
        done.wait()
        if guard is not None:
            guard.release()

    _run([worker] * THREADS)

    assert outcomes.count("won") == 1
    assert outcomes.count("lost") == THREADS - 1


def test_concurrent_shared_borrows_all_succeed(resources):
    resources.register(Counter(0))
    start = threading.Barrier(THREADS)
    done = threading.Barrier(THREADS)
    values: list[int] = []
    values_lock = threading.Lock()

    def worker():
        start.wait()
        guard = resources.fetch_shared(Counter)
        with values_lock:
            values.append(guard.value.n)
        done.wait()
        guard.release()

    _run([worker] * THREADS)

    assert values == [0] * THREADS
    resources.fetch_exclusive(Counter).release()


def test_writer_never_aliased(resources):
    """CRITICAL: Mixed random traffic never overlaps a writer with anyone else.

    Why: This is the container's central safety contract.
    """
    resources.register(Counter(0))
    active = {"readers": 0, "writers": 0}
    violations: list[str] = []
    writes_done = [0]
    lock = threading.Lock()

    def worker(seed):
        rng = random.Random(seed)
        for _ in range(300):
            try:
                if rng.random() < 0.3:
                    with resources.fetch_exclusive(Counter) as counter:
                        with lock:
                            active["writers"] += 1
                            if active["writers"] != 1 or active["readers"]:
                                violations.append(f"writer overlapped: {active}")
                        counter.value = Counter(counter.value.n + 1)
                        with lock:
                            active["writers"] -= 1
                            writes_done[0] += 1
                else:
                    with resources.fetch_shared(Counter):
                        with lock:
                            active["readers"] += 1
                            if active["writers"]:
                                violations.append(f"reader overlapped writer: {active}")
                        with lock:
                            active["readers"] -= 1
            except BorrowConflictError:
                pass

    _run([lambda s=seed: worker(s) for seed in range(THREADS)])

    assert violations == []
    assert resources.fetch_shared(Counter).value.n == writes_done[0]
