"""
Core modules for the priority scheduler simulator
"""

from .errors import (SchedulerError, ConfigurationError, LoadError, EmptyQueueError,
                     IllegalTransitionError, InvariantViolation)
from .instruction import Instruction, InstructionType, decode_instruction, SYSCALL_MARKER
from .process import Process, ProcessState, create_process_copy
from .queues import ReadyQueue, BlockedSet
from .scheduler_base import (BaseScheduler, SchedulerStats, GanttEntry, EventType, Event,
                             TIME_QUANTUM)

__all__ = [
    'SchedulerError',
    'ConfigurationError',
    'LoadError',
    'EmptyQueueError',
    'IllegalTransitionError',
    'InvariantViolation',
    'Instruction',
    'InstructionType',
    'decode_instruction',
    'SYSCALL_MARKER',
    'Process',
    'ProcessState',
    'create_process_copy',
    'ReadyQueue',
    'BlockedSet',
    'BaseScheduler',
    'SchedulerStats',
    'GanttEntry',
    'EventType',
    'Event',
    'TIME_QUANTUM'
]
