"""
Process and PCB (Process Control Block) management
"""

from enum import Enum
from typing import List, Optional, Sequence
from copy import deepcopy

from .errors import IllegalTransitionError
from .instruction import Instruction, decode_instruction


class ProcessState(Enum):
    """Process state"""
    READY = "Ready"
    RUNNING = "Running"
    BLOCKED = "Blocked"
    HALTED = "Halted"


# Edges of the state diagram. HALTED has no outgoing edge.
ALLOWED_TRANSITIONS = {
    ProcessState.READY: {ProcessState.RUNNING},
    ProcessState.RUNNING: {ProcessState.READY, ProcessState.BLOCKED, ProcessState.HALTED},
    ProcessState.BLOCKED: {ProcessState.READY},
    ProcessState.HALTED: set(),
}


class Process:
    """
    Process control block (PCB)
    Holds the static definition of a simulated task and its execution cursor
    """

    def __init__(self, pid: int, priority: int, script: Sequence[str]):
        """
        Initialize a process

        Args:
            pid: process id, unique within a run
            priority: static priority (higher value runs first)
            script: instruction lines, executed in order
        """
        self.pid = pid
        self.priority = priority
        self.script = tuple(script)
        self.instructions: List[Instruction] = [decode_instruction(line) for line in self.script]

        # Execution state
        self.state = ProcessState.READY
        self.cursor = 0
        self.blocked_cycles = 0

        # Statistics
        self.start_time: Optional[int] = None  # first dispatch
        self.finish_time: Optional[int] = None  # halt
        self.response_time: Optional[int] = None
        self.turnaround_time = 0
        self.waiting_time = 0  # ticks spent in the ready queue
        self.cpu_time = 0  # ticks spent executing instructions
        self.exit_reason: Optional[str] = None

    def has_more_instructions(self) -> bool:
        return self.cursor < len(self.instructions)

    def next_instruction(self) -> Optional[Instruction]:
        """
        Fetch the instruction under the cursor and advance past it

        Returns:
            The instruction, or None once the script is exhausted. The
            cursor then sits on the end sentinel ``len(script) + 1``.
        """
        if self.has_more_instructions():
            instruction = self.instructions[self.cursor]
            self.cursor += 1
            return instruction
        self.cursor = len(self.instructions) + 1
        return None

    def transition(self, new_state: ProcessState) -> str:
        """
        Move to ``new_state``

        Returns:
            The transition line for the event log

        Raises:
            IllegalTransitionError: the edge is not part of the state diagram
        """
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise IllegalTransitionError(
                f"Process {self.pid}: {self.state.value} -> {new_state.value} is not allowed")
        old_state = self.state
        self.state = new_state
        return f"Process {self.pid}: {old_state.value} -> {new_state.value}"

    def is_halted(self) -> bool:
        return self.state == ProcessState.HALTED

    def __repr__(self):
        return f"P{self.pid}[{self.state.value}]"

    def __str__(self):
        return f"Process {self.pid}: State={self.state.value}, Priority={self.priority}, " \
               f"Cursor={self.cursor}/{len(self.script)}"


def create_process_copy(process: Process) -> Process:
    """
    Deep copy of a process
    Each simulation run works on its own copies so the loaded set can be reused
    """
    return deepcopy(process)
