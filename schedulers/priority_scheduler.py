"""
Preemptive priority scheduler
- Highest static priority is dispatched first, FIFO among equals
- A hardware timer preempts the running process every ``time_quantum`` ticks
  since the last interrupt
- System calls terminate, fail or block the running process
"""

from typing import List, Optional

from core.instruction import InstructionType
from core.process import Process, ProcessState
from core.scheduler_base import BaseScheduler, Event, EventType, TIME_QUANTUM


class PriorityScheduler(BaseScheduler):
    """
    Preemptive priority scheduler with a timer interrupt
    Higher priority value means higher precedence
    """

    def __init__(self, processes: List[Process], time_quantum: int = TIME_QUANTUM):
        super().__init__(processes, "Preemptive Priority", time_quantum=time_quantum)

    def select_next_process(self) -> Optional[Process]:
        """Highest priority Ready process"""
        if not self.ready_queue:
            return None
        return self.ready_queue.pop_highest_priority()

    def execute_one_step(self) -> List[Event]:
        """
        Run one tick

        Sub-steps always run in this order: unblock, timer preemption,
        dispatch, execute.
        """
        if self.is_simulation_complete():
            return []

        first_event = len(self.events)
        self.tick += 1
        self.current_time += 1

        # 1. Blocked processes whose wait ran out
        for process in self.blocked_set.tick():
            self.unblock_process(process)

        # 2. Timer interrupt
        if self.running_process and self.tick % self.time_quantum == 0:
            self.log_event(EventType.HARDWARE_INTERRUPT, "Hardware Interrupt: Timer Interval")
            self.stats.timer_interrupts += 1
            self.preempt_process(self.running_process)
            self.tick = 0

        # 3. Dispatch
        if self.running_process is None:
            next_process = self.select_next_process()
            if next_process:
                self.dispatch(next_process)

        for process in self.ready_queue:
            process.waiting_time += 1

        # 4. Execute
        if self.running_process:
            self.execute_instruction(self.running_process)

        return self.events[first_event:]

    def execute_instruction(self, process: Process):
        """Execute the next instruction of the running process"""
        instruction = process.next_instruction()

        # Script exhausted without an explicit TERMINATE
        if instruction is None:
            self.halt_process(process, "END", self.current_time - 1)
            self.tick = 0
            return

        process.cpu_time += 1
        self.stats.cpu_busy_time += 1

        if instruction.malformed:
            self.warn(f"P{process.pid}: unrecognized system call '{instruction.text}' treated as work")

        if instruction.kind == InstructionType.GENERIC:
            return

        self.log_event(EventType.SOFTWARE_INTERRUPT, instruction.interrupt_message, process.pid)
        self.stats.software_interrupts += 1

        if instruction.kind == InstructionType.TERMINATE:
            self.halt_process(process, "TERMINATE", self.current_time)
        elif instruction.kind == InstructionType.RUNTIME_ERROR:
            self.halt_process(process, "ERROR", self.current_time)
        elif instruction.kind == InstructionType.NETWORK_WAIT:
            self.block_process(process, instruction.cycles)

        self.tick = 0

    def state_of(self, pid: int) -> ProcessState:
        """Current state of any loaded process"""
        for process in self.processes:
            if process.pid == pid:
                return process.state
        raise KeyError(pid)
