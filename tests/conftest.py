import os

import matplotlib
import pytest

matplotlib.use("Agg")

from core.process import Process
from core.scheduler_base import EventType


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture
def repo_root():
    return REPO_ROOT


@pytest.fixture
def run_checked():
    """Run a scheduler tick by tick, checking the invariants after every tick"""
    def _run(scheduler, limit=10000):
        halted = set()
        for _ in range(limit):
            if scheduler.is_simulation_complete():
                break
            for event in scheduler.execute_one_step():
                if event.event_type == EventType.TRANSITION:
                    assert event.pid not in halted, f"halted P{event.pid} moved again: {event}"
                    if event.description.endswith("-> Halted"):
                        halted.add(event.pid)
            scheduler.check_invariants()
        else:
            pytest.fail("simulation did not finish")
        return scheduler.get_results()
    return _run


@pytest.fixture
def blocking_pair():
    """Priority 5 process that blocks on the network, priority 3 process that just works"""
    return [
        Process(1, 5, ["work", "SYSCALL NETWORK 3", "work"]),
        Process(2, 3, ["work"]),
    ]
