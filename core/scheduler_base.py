"""
Scheduler framework and event bookkeeping
"""

from typing import Callable, Dict, List, Optional
from dataclasses import dataclass
from enum import Enum

from .errors import InvariantViolation
from .process import Process, ProcessState, create_process_copy
from .queues import BlockedSet, ReadyQueue

# Timer interrupt interval (ticks)
TIME_QUANTUM = 5


class EventType(Enum):
    """Event type"""
    TRANSITION = "Transition"
    HARDWARE_INTERRUPT = "Hardware Interrupt"
    SOFTWARE_INTERRUPT = "Software Interrupt"


@dataclass
class Event:
    """Simulation event"""
    time: int
    event_type: EventType
    description: str
    pid: Optional[int] = None

    def __str__(self):
        return self.description


@dataclass
class GanttEntry:
    """Gantt chart entry"""
    pid: int
    start_time: int
    end_time: int
    state: ProcessState  # Running or Blocked


class SchedulerStats:
    """Scheduling statistics"""

    def __init__(self):
        self.total_waiting_time = 0
        self.total_turnaround_time = 0
        self.total_response_time = 0
        self.context_switches = 0
        self.timer_interrupts = 0
        self.software_interrupts = 0
        self.cpu_busy_time = 0
        self.total_simulation_time = 0
        self.process_count = 0

    def calculate_averages(self):
        """Compute averages"""
        if self.process_count == 0:
            return {
                'avg_waiting_time': 0,
                'avg_turnaround_time': 0,
                'avg_response_time': 0,
                'cpu_utilization': 0,
                'context_switches': 0,
                'timer_interrupts': 0,
                'software_interrupts': 0,
                'total_time': self.total_simulation_time
            }

        return {
            'avg_waiting_time': self.total_waiting_time / self.process_count,
            'avg_turnaround_time': self.total_turnaround_time / self.process_count,
            'avg_response_time': self.total_response_time / self.process_count,
            'cpu_utilization': (self.cpu_busy_time / self.total_simulation_time * 100)
                               if self.total_simulation_time > 0 else 0,
            'context_switches': self.context_switches,
            'timer_interrupts': self.timer_interrupts,
            'software_interrupts': self.software_interrupts,
            'total_time': self.total_simulation_time
        }


EventListener = Callable[[Event], None]


class BaseScheduler:
    """
    Base scheduler
    Owns the whole simulation state: the live process registry, the ready
    queue, the blocked set, the running slot and the interrupt-relative tick.

    Time is tracked twice. ``tick`` counts ticks since the last interrupt
    and drives the timer; ``current_time`` is the absolute clock used for
    statistics and the Gantt chart. Work done during tick ``n`` occupies
    the interval ``[n - 1, n)``.
    """

    def __init__(self, processes: List[Process], name: str = "Base Scheduler",
                 time_quantum: int = TIME_QUANTUM):
        if time_quantum < 1:
            raise ValueError(f"time_quantum must be positive: {time_quantum}")

        self.processes = [create_process_copy(p) for p in processes]
        self.name = name
        self.time_quantum = time_quantum
        self.tick = 0
        self.current_time = 0

        # Live processes by pid. A pid leaves the table when its process halts.
        self.process_table: Dict[int, Process] = {}
        self.ready_queue = ReadyQueue()
        self.blocked_set = BlockedSet()
        self.running_process: Optional[Process] = None
        self.previous_process: Optional[Process] = None
        self.halted_processes: List[Process] = []

        # Gantt chart data
        self.gantt_chart: List[GanttEntry] = []
        self._run_start: Optional[int] = None
        self._block_start: Dict[int, int] = {}

        self.stats = SchedulerStats()

        # Event log
        self.events: List[Event] = []
        self.event_log: List[str] = []
        self.warnings: List[str] = []
        self.listeners: List[EventListener] = []

        for process in self.processes:
            self.admit_process(process)

    def admit_process(self, process: Process):
        """Register a freshly loaded process and queue it"""
        if process.pid in self.process_table:
            raise ValueError(f"Duplicate process id: {process.pid}")
        if process.state != ProcessState.READY:
            raise ValueError(f"P{process.pid} must be Ready when admitted, not {process.state.value}")
        self.process_table[process.pid] = process
        self.ready_queue.push(process)

    def add_listener(self, listener: EventListener):
        """Subscribe to events as they are produced"""
        self.listeners.append(listener)

    def log_event(self, event_type: EventType, message: str, pid: Optional[int] = None) -> Event:
        """Record an event and forward it to the listeners"""
        event = Event(self.current_time, event_type, message, pid)
        self.events.append(event)
        self.event_log.append(message)
        for listener in self.listeners:
            listener(event)
        return event

    def warn(self, message: str):
        self.warnings.append(f"[T={self.current_time:3d}] {message}")

    def change_state(self, process: Process, new_state: ProcessState):
        """Apply a transition and log it"""
        message = process.transition(new_state)
        self.log_event(EventType.TRANSITION, message, process.pid)

    def add_to_gantt_chart(self, pid: int, start: int, end: int, state: ProcessState):
        """Append a Gantt chart entry; a zero-length Blocked entry marks a NETWORK 0/1 wait"""
        if start < end or (state == ProcessState.BLOCKED and start == end):
            self.gantt_chart.append(GanttEntry(pid, start, end, state))

    def dispatch(self, process: Process):
        """Ready -> Running"""
        if self.previous_process is not None and self.previous_process.pid != process.pid:
            self.stats.context_switches += 1
        self.previous_process = process

        self.change_state(process, ProcessState.RUNNING)
        self.running_process = process
        self._run_start = self.current_time - 1
        if process.start_time is None:
            process.start_time = self.current_time - 1
            process.response_time = process.start_time

    def release_cpu(self, process: Process, new_state: ProcessState, end: int):
        """
        Take ``process`` off the CPU

        Args:
            process: the running process
            new_state: Ready, Blocked or Halted
            end: clock value at which its Running interval ends
        """
        if self._run_start is not None:
            self.add_to_gantt_chart(process.pid, self._run_start, end, ProcessState.RUNNING)
        self._run_start = None
        self.running_process = None
        self.change_state(process, new_state)

    def preempt_process(self, process: Process):
        """Running -> Ready on a timer interrupt"""
        self.release_cpu(process, ProcessState.READY, self.current_time - 1)
        self.ready_queue.push(process)

    def block_process(self, process: Process, cycles: int):
        """Running -> Blocked for ``cycles`` ticks"""
        self.release_cpu(process, ProcessState.BLOCKED, self.current_time)
        self.blocked_set.add(process, cycles)
        self._block_start[process.pid] = self.current_time

    def unblock_process(self, process: Process):
        """Blocked -> Ready"""
        start = self._block_start.pop(process.pid, self.current_time - 1)
        self.add_to_gantt_chart(process.pid, start, self.current_time - 1, ProcessState.BLOCKED)
        self.change_state(process, ProcessState.READY)
        self.ready_queue.push(process)

    def halt_process(self, process: Process, reason: str, end: int):
        """Running -> Halted; the process leaves the registry"""
        self.release_cpu(process, ProcessState.HALTED, end)
        process.exit_reason = reason
        process.finish_time = end
        process.turnaround_time = process.finish_time
        del self.process_table[process.pid]
        self.halted_processes.append(process)

    def update_statistics(self):
        """Final statistics"""
        self.stats.total_simulation_time = self.current_time
        self.stats.process_count = len(self.halted_processes)
        self.stats.total_waiting_time = 0
        self.stats.total_turnaround_time = 0
        self.stats.total_response_time = 0

        for process in self.halted_processes:
            self.stats.total_waiting_time += process.waiting_time
            self.stats.total_turnaround_time += process.turnaround_time
            if process.response_time is not None:
                self.stats.total_response_time += process.response_time

    def select_next_process(self) -> Optional[Process]:
        """
        Choose the next process to run (implemented by subclasses)

        Returns:
            The selected process, already removed from the ready queue
        """
        raise NotImplementedError("Subclasses must implement select_next_process()")

    def execute_one_step(self) -> List[Event]:
        """
        Advance the simulation by one tick (implemented by subclasses)

        Returns:
            Events produced during that tick
        """
        raise NotImplementedError("Subclasses must implement execute_one_step()")

    def is_simulation_complete(self) -> bool:
        """Ready queue, blocked set and running slot are all empty"""
        return not self.ready_queue and not self.blocked_set and self.running_process is None

    def check_invariants(self):
        """
        Verify the structural invariants of the simulation state

        Raises:
            InvariantViolation: on the first broken invariant
        """
        holders: Dict[int, str] = {}

        def hold(process: Process, holder: str, expected: ProcessState):
            if process.state != expected:
                raise InvariantViolation(
                    f"P{process.pid} in {holder} has state {process.state.value}")
            if process.pid in holders:
                raise InvariantViolation(
                    f"P{process.pid} held by both {holders[process.pid]} and {holder}")
            holders[process.pid] = holder

        for process in self.ready_queue:
            hold(process, "ready queue", ProcessState.READY)
        for process in self.blocked_set:
            hold(process, "blocked set", ProcessState.BLOCKED)
        if self.running_process is not None:
            hold(self.running_process, "running slot", ProcessState.RUNNING)

        running = [p for p in self.processes if p.state == ProcessState.RUNNING]
        if len(running) > 1:
            raise InvariantViolation(f"More than one running process: {running}")

        if set(holders) != set(self.process_table):
            raise InvariantViolation(
                f"Registry {sorted(self.process_table)} does not match holders {sorted(holders)}")

        for process in self.halted_processes:
            if process.state != ProcessState.HALTED or process.pid in holders:
                raise InvariantViolation(f"Halted P{process.pid} is still live")

        if len(holders) + len(self.halted_processes) != len(self.processes):
            raise InvariantViolation("Loaded processes are missing from the simulation")

        for process in self.processes:
            if process.cursor > len(process.script) + 1:
                raise InvariantViolation(f"P{process.pid} cursor ran past the end sentinel")

    def get_current_snapshot(self) -> Dict:
        """
        Snapshot of the current simulation state (for the realtime view)

        Returns:
            State dictionary
        """
        return {
            'time': self.current_time,
            'tick': self.tick,
            'running': self.running_process,
            'ready_queue': list(self.ready_queue),
            'blocked': [(p, p.blocked_cycles) for p in self.blocked_set],
            'halted': list(self.halted_processes),
            'context_switches': self.stats.context_switches,
            'cpu_busy_time': self.stats.cpu_busy_time,
            'latest_gantt_entry': self.gantt_chart[-1] if self.gantt_chart else None,
            'latest_log': self.event_log[-1] if self.event_log else ""
        }

    def run(self, verbose: bool = False) -> Dict:
        """
        Run the simulation to completion

        Args:
            verbose: print the event log when done

        Returns:
            Result dictionary
        """
        while not self.is_simulation_complete():
            self.execute_one_step()

        if verbose:
            for log in self.event_log:
                print(log)

        return self.get_results()

    def get_results(self) -> Dict:
        """
        Simulation results

        Returns:
            Result dictionary (statistics, Gantt chart, log, ...)
        """
        self.update_statistics()

        return {
            'algorithm': self.name,
            'statistics': self.stats.calculate_averages(),
            'gantt_chart': self.gantt_chart,
            'event_log': self.event_log,
            'processes': sorted(self.halted_processes, key=lambda p: p.pid),
            'warnings': self.warnings
        }
