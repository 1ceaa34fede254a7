"""
Instruction interpreter

Process scripts are plain text, one instruction per line. Anything that
is not a system call is opaque work that costs one tick. System calls are
introduced by the ``SYS_CALL`` marker (``SYSCALL`` is accepted too):

    SYS_CALL TERMINATE
    SYS_CALL ERROR_DIVIDE_BY_ZERO
    SYS_CALL NETWORK 3
    SYS_CALL NETWORK_IO NETWORK 3

Lines are decoded once, when the owning process is built.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


SYSCALL_MARKER = "SYS_CALL"
# The marker must be a whole word: SYS_CALLER and SYS_CALL_NETWORK are plain work
SYSCALL_PATTERN = re.compile(r'\bSYS_?CALL\b')


class InstructionType(Enum):
    """Decoded instruction kinds"""
    GENERIC = "Generic"
    TERMINATE = "Terminate"
    RUNTIME_ERROR = "RuntimeError"
    NETWORK_WAIT = "NetworkWait"


@dataclass(frozen=True)
class Instruction:
    """One decoded line of a process script"""
    text: str
    kind: InstructionType
    cycles: int = 0
    malformed: bool = False

    @property
    def is_system_call(self) -> bool:
        return self.kind != InstructionType.GENERIC

    @property
    def interrupt_message(self) -> Optional[str]:
        """Software interrupt line emitted before the resulting transition"""
        if self.kind == InstructionType.TERMINATE:
            return "Software Interrupt: TERMINATE"
        if self.kind == InstructionType.RUNTIME_ERROR:
            return "Software Interrupt: ERROR Runtime Error"
        if self.kind == InstructionType.NETWORK_WAIT:
            return f"Software Interrupt: NETWORK {self.cycles}"
        return None

    def __str__(self):
        if self.kind == InstructionType.NETWORK_WAIT:
            return f"{self.kind.value}({self.cycles})"
        return self.kind.value


def _last_int(tokens) -> Optional[int]:
    for token in reversed(tokens):
        try:
            return int(token)
        except ValueError:
            continue
    return None


def decode_instruction(text: str, pattern: re.Pattern = SYSCALL_PATTERN) -> Instruction:
    """
    Decode one script line

    Args:
        text: raw instruction line
        pattern: regex locating the system-call marker

    Returns:
        The decoded instruction. A line carrying the marker whose subtype
        cannot be understood (no subtype, no cycle count, negative cycle
        count) decodes as GENERIC with ``malformed`` set.
    """
    text = text.rstrip('\r\n')
    match = pattern.search(text)
    if match is None:
        return Instruction(text, InstructionType.GENERIC)

    tokens = text[match.end():].split()
    if not tokens:
        return Instruction(text, InstructionType.GENERIC, malformed=True)

    subtype = tokens[0]
    if subtype == "TERMINATE":
        return Instruction(text, InstructionType.TERMINATE)
    if "ERROR" in subtype:
        return Instruction(text, InstructionType.RUNTIME_ERROR)

    cycles = _last_int(tokens[1:])
    if cycles is None or cycles < 0:
        return Instruction(text, InstructionType.GENERIC, malformed=True)
    return Instruction(text, InstructionType.NETWORK_WAIT, cycles=cycles)
