import pytest

from core.instruction import Instruction, InstructionType, decode_instruction


@pytest.mark.parametrize("text", ["work", "compute 3", "", "   ",
                                  "SYS_CALLER TERMINATE", "SYS_CALL_NETWORK 3", "syscall TERMINATE"])
def test_plain_lines_are_generic(text):
    instruction = decode_instruction(text)
    assert instruction.kind == InstructionType.GENERIC
    assert not instruction.malformed
    assert not instruction.is_system_call


@pytest.mark.parametrize("text", ["SYS_CALL TERMINATE", "SYSCALL TERMINATE", "  SYS_CALL   TERMINATE  "])
def test_terminate(text):
    instruction = decode_instruction(text)
    assert instruction.kind == InstructionType.TERMINATE
    assert instruction.interrupt_message == "Software Interrupt: TERMINATE"


@pytest.mark.parametrize("text", ["SYS_CALL ERROR", "SYS_CALL ERROR_SEGFAULT", "SYS_CALL DIV_ERROR 3"])
def test_runtime_error(text):
    instruction = decode_instruction(text)
    assert instruction.kind == InstructionType.RUNTIME_ERROR
    assert instruction.interrupt_message == "Software Interrupt: ERROR Runtime Error"


@pytest.mark.parametrize("text,cycles", [
    ("SYS_CALL NETWORK 3", 3),
    ("SYSCALL NETWORK 3", 3),
    ("SYS_CALL NETWORK_IO NETWORK 7", 7),
    ("SYS_CALL NETWORK 0", 0),
])
def test_network_wait(text, cycles):
    instruction = decode_instruction(text)
    assert instruction.kind == InstructionType.NETWORK_WAIT
    assert instruction.cycles == cycles
    assert instruction.interrupt_message == f"Software Interrupt: NETWORK {cycles}"


def test_marker_may_appear_after_a_label():
    assert decode_instruction("step7: SYS_CALL TERMINATE").kind == InstructionType.TERMINATE


def test_terminate_must_match_exactly():
    # TERMINATED is not TERMINATE and has no cycle count either
    instruction = decode_instruction("SYS_CALL TERMINATED")
    assert instruction.kind == InstructionType.GENERIC
    assert instruction.malformed


@pytest.mark.parametrize("text", [
    "SYS_CALL",
    "SYS_CALL NETWORK",
    "SYS_CALL NETWORK soon",
    "SYS_CALL NETWORK -2",
    "SYS_CALL 5",
])
def test_unrecognized_system_calls_decode_as_malformed_work(text):
    instruction = decode_instruction(text)
    assert instruction.kind == InstructionType.GENERIC
    assert instruction.malformed
    assert instruction.interrupt_message is None


def test_instruction_keeps_its_text():
    instruction = decode_instruction("SYS_CALL NETWORK 2\n")
    assert instruction == Instruction("SYS_CALL NETWORK 2", InstructionType.NETWORK_WAIT, cycles=2)
    assert str(instruction) == "NetworkWait(2)"
