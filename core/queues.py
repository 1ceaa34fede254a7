"""
Ready queue and blocked set
"""

import heapq
import itertools
from typing import Dict, Iterator, List, Tuple

from .errors import EmptyQueueError
from .process import Process, ProcessState


class ReadyQueue:
    """
    Priority-ordered collection of Ready processes

    Entries are kept in a binary heap keyed by ``(-priority, sequence)``,
    where ``sequence`` grows with every push. The highest priority wins;
    equal priorities leave in the order they were pushed.
    """

    def __init__(self):
        self._heap: List[Tuple[int, int, Process]] = []
        self._sequence = itertools.count()
        self._pids = set()

    def push(self, process: Process):
        if process.state != ProcessState.READY:
            raise ValueError(f"Cannot queue P{process.pid} in state {process.state.value}")
        if process.pid in self._pids:
            raise ValueError(f"P{process.pid} is already in the ready queue")
        heapq.heappush(self._heap, (-process.priority, next(self._sequence), process))
        self._pids.add(process.pid)

    def pop_highest_priority(self) -> Process:
        if not self._heap:
            raise EmptyQueueError("pop from an empty ready queue")
        _, _, process = heapq.heappop(self._heap)
        self._pids.discard(process.pid)
        return process

    def peek(self) -> Process:
        if not self._heap:
            raise EmptyQueueError("peek into an empty ready queue")
        return self._heap[0][2]

    def __len__(self):
        return len(self._heap)

    def __bool__(self):
        return bool(self._heap)

    def __contains__(self, process: Process):
        return process.pid in self._pids

    def __iter__(self) -> Iterator[Process]:
        """Processes in dispatch order"""
        return (entry[2] for entry in sorted(self._heap))


class BlockedSet:
    """Blocked processes with their remaining wait counters"""

    def __init__(self):
        self._members: Dict[int, Process] = {}

    def add(self, process: Process, cycles: int):
        if process.state != ProcessState.BLOCKED:
            raise ValueError(f"Cannot block P{process.pid} in state {process.state.value}")
        process.blocked_cycles = cycles
        self._members[process.pid] = process

    def tick(self) -> List[Process]:
        """
        Count one tick down for every member

        Returns:
            Members whose counter reached zero, removed from the set,
            in ascending pid order
        """
        released = []
        for pid in sorted(self._members):
            process = self._members[pid]
            process.blocked_cycles -= 1
            if process.blocked_cycles <= 0:
                process.blocked_cycles = 0
                released.append(process)
        for process in released:
            del self._members[process.pid]
        return released

    def remaining(self, pid: int) -> int:
        return self._members[pid].blocked_cycles

    def __len__(self):
        return len(self._members)

    def __bool__(self):
        return bool(self._members)

    def __contains__(self, process: Process):
        return process.pid in self._members

    def __iter__(self) -> Iterator[Process]:
        return (self._members[pid] for pid in sorted(self._members))
