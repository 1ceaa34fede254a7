"""
Exception types shared by the scheduler core, the loader and the CLI
"""


class SchedulerError(Exception):
    """Base class for every error raised by this package"""


class ConfigurationError(SchedulerError):
    """Invalid or missing run parameter (e.g. the process count)"""


class LoadError(SchedulerError):
    """A single process definition could not be loaded"""

    def __init__(self, pid: int, path: str, reason: str):
        super().__init__(f"Could not load process {pid} from '{path}': {reason}")
        self.pid = pid
        self.path = path
        self.reason = reason


class EmptyQueueError(SchedulerError, IndexError):
    """Pop from an empty ready queue"""


class IllegalTransitionError(SchedulerError):
    """A process was asked to move along an edge not in the state diagram"""


class InvariantViolation(SchedulerError):
    """The simulation state no longer satisfies the scheduler invariants"""
