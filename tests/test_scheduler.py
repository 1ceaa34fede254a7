import pytest

from core.errors import InvariantViolation
from core.process import Process, ProcessState
from core.scheduler_base import EventType, GanttEntry
from schedulers.priority_scheduler import PriorityScheduler
from utils.input_parser import InputParser


def event_times(scheduler, description):
    return [e.time for e in scheduler.events if e.description == description]


class TestScenarios:

    def test_blocking_pair(self, blocking_pair, run_checked):
        scheduler = PriorityScheduler(blocking_pair)
        result = run_checked(scheduler)

        assert result['event_log'] == [
            "Process 1: Ready -> Running",
            "Software Interrupt: NETWORK 3",
            "Process 1: Running -> Blocked",
            "Process 2: Ready -> Running",
            "Process 2: Running -> Halted",
            "Process 1: Blocked -> Ready",
            "Process 1: Ready -> Running",
            "Process 1: Running -> Halted",
        ]
        assert scheduler.current_time == 6

    def test_blocking_pair_gantt_and_statistics(self, blocking_pair):
        scheduler = PriorityScheduler(blocking_pair)
        result = scheduler.run()

        assert result['gantt_chart'] == [
            GanttEntry(1, 0, 2, ProcessState.RUNNING),
            GanttEntry(2, 2, 3, ProcessState.RUNNING),
            GanttEntry(1, 2, 4, ProcessState.BLOCKED),
            GanttEntry(1, 4, 5, ProcessState.RUNNING),
        ]
        stats = result['statistics']
        assert stats['context_switches'] == 2
        assert stats['software_interrupts'] == 1
        assert stats['timer_interrupts'] == 0
        assert stats['total_time'] == 6

        first, second = result['processes']
        assert (first.pid, first.exit_reason, first.cpu_time, first.waiting_time) == (1, "END", 3, 0)
        assert (second.pid, second.exit_reason, second.cpu_time, second.waiting_time) == (2, "END", 1, 2)

    def test_single_process_preempted_once(self, run_checked):
        scheduler = PriorityScheduler([Process(1, 1, ["work"] * 6)])
        result = run_checked(scheduler)

        assert result['event_log'] == [
            "Process 1: Ready -> Running",
            "Hardware Interrupt: Timer Interval",
            "Process 1: Running -> Ready",
            "Process 1: Ready -> Running",
            "Process 1: Running -> Halted",
        ]
        assert event_times(scheduler, "Hardware Interrupt: Timer Interval") == [5]
        assert result['gantt_chart'] == [
            GanttEntry(1, 0, 4, ProcessState.RUNNING),
            GanttEntry(1, 4, 6, ProcessState.RUNNING),
        ]
        assert result['statistics']['context_switches'] == 0


class TestPolicy:

    def test_higher_priority_dispatched_first_regardless_of_arrival(self):
        scheduler = PriorityScheduler([Process(1, 1, ["SYS_CALL TERMINATE"]),
                                       Process(2, 9, ["SYS_CALL TERMINATE"])])
        events = scheduler.execute_one_step()
        assert events[0].description == "Process 2: Ready -> Running"

    def test_equal_priorities_dispatched_first_in_first_out(self):
        scheduler = PriorityScheduler([Process(pid, 4, ["SYS_CALL TERMINATE"]) for pid in (3, 1, 2)])
        result = scheduler.run()
        dispatched = [line for line in result['event_log'] if line.endswith("Ready -> Running")]
        assert dispatched == ["Process 3: Ready -> Running",
                              "Process 1: Ready -> Running",
                              "Process 2: Ready -> Running"]

    def test_preempted_process_yields_to_equal_priority(self):
        scheduler = PriorityScheduler([Process(1, 2, ["w"] * 6), Process(2, 2, ["w"])])
        result = scheduler.run()
        assert result['event_log'][:5] == [
            "Process 1: Ready -> Running",
            "Hardware Interrupt: Timer Interval",
            "Process 1: Running -> Ready",
            "Process 2: Ready -> Running",
            "Process 2: Running -> Halted",
        ]

    def test_timer_fires_every_quantum_since_last_interrupt(self):
        scheduler = PriorityScheduler([Process(1, 1, ["work"] * 20)])
        scheduler.run()
        assert event_times(scheduler, "Hardware Interrupt: Timer Interval") == [5, 10, 15, 20]
        assert scheduler.stats.cpu_busy_time == 20
        assert scheduler.halted_processes[0].finish_time == 20

    def test_custom_quantum(self):
        scheduler = PriorityScheduler([Process(1, 1, ["work"] * 7)], time_quantum=3)
        scheduler.run()
        assert event_times(scheduler, "Hardware Interrupt: Timer Interval") == [3, 6]

    def test_invalid_quantum(self):
        with pytest.raises(ValueError):
            PriorityScheduler([], time_quantum=0)

    @pytest.mark.parametrize("cycles", [1, 2, 4, 7])
    def test_blocked_for_exactly_k_ticks(self, cycles):
        scheduler = PriorityScheduler([Process(1, 1, [f"SYS_CALL NETWORK {cycles}"])])
        scheduler.run()
        blocked_at = event_times(scheduler, "Process 1: Running -> Blocked")
        ready_at = event_times(scheduler, "Process 1: Blocked -> Ready")
        assert ready_at[0] - blocked_at[0] == cycles

    @pytest.mark.parametrize("cycles", [0, 1])
    def test_shortest_waits_still_appear_in_gantt_chart(self, cycles):
        scheduler = PriorityScheduler([Process(1, 1, ["w", f"SYS_CALL NETWORK {cycles}", "w"])])
        result = scheduler.run()
        assert result['gantt_chart'] == [
            GanttEntry(1, 0, 2, ProcessState.RUNNING),
            GanttEntry(1, 2, 2, ProcessState.BLOCKED),
            GanttEntry(1, 2, 3, ProcessState.RUNNING),
        ]

    def test_unblocked_process_waits_for_timer_even_with_higher_priority(self):
        scheduler = PriorityScheduler([Process(1, 9, ["SYS_CALL NETWORK 2", "work"]),
                                       Process(2, 1, ["w"] * 10)])
        result = scheduler.run()
        assert result['event_log'] == [
            "Process 1: Ready -> Running",
            "Software Interrupt: NETWORK 2",
            "Process 1: Running -> Blocked",
            "Process 2: Ready -> Running",
            "Process 1: Blocked -> Ready",
            "Hardware Interrupt: Timer Interval",
            "Process 2: Running -> Ready",
            "Process 1: Ready -> Running",
            "Process 1: Running -> Halted",
            "Process 2: Ready -> Running",
            "Hardware Interrupt: Timer Interval",
            "Process 2: Running -> Ready",
            "Process 2: Ready -> Running",
            "Process 2: Running -> Halted",
        ]

    def test_system_call_resets_the_timer(self):
        # Without the reset the timer would fire at tick 5 while P2 runs
        scheduler = PriorityScheduler([Process(1, 9, ["w", "w", "SYS_CALL TERMINATE"]),
                                       Process(2, 1, ["w"] * 3)])
        scheduler.run()
        assert event_times(scheduler, "Hardware Interrupt: Timer Interval") == []


class TestTermination:

    def test_explicit_and_implicit_termination_differ_only_by_interrupt(self):
        explicit = PriorityScheduler([Process(1, 1, ["SYS_CALL TERMINATE"])]).run()
        implicit = PriorityScheduler([Process(1, 1, [])]).run()

        assert explicit['event_log'] == ["Process 1: Ready -> Running",
                                         "Software Interrupt: TERMINATE",
                                         "Process 1: Running -> Halted"]
        assert implicit['event_log'] == ["Process 1: Ready -> Running",
                                         "Process 1: Running -> Halted"]
        assert explicit['processes'][0].exit_reason == "TERMINATE"
        assert implicit['processes'][0].exit_reason == "END"

    def test_terminate_skips_remaining_instructions(self):
        scheduler = PriorityScheduler([Process(1, 1, ["a", "SYS_CALL TERMINATE", "b", "c"])])
        result = scheduler.run()
        assert result['processes'][0].cursor == 2
        assert scheduler.current_time == 2

    def test_runtime_error_halts_with_distinct_label(self):
        scheduler = PriorityScheduler([Process(1, 1, ["w", "SYS_CALL ERROR_SEGFAULT", "never"]),
                                       Process(2, 0, ["w"])])
        result = scheduler.run()
        assert result['event_log'][:3] == ["Process 1: Ready -> Running",
                                           "Software Interrupt: ERROR Runtime Error",
                                           "Process 1: Running -> Halted"]
        assert result['processes'][0].exit_reason == "ERROR"
        assert result['event_log'][-1] == "Process 2: Running -> Halted"

    def test_malformed_system_call_is_work_and_warned(self):
        scheduler = PriorityScheduler([Process(1, 1, ["SYS_CALL FOO", "SYS_CALL"])])
        result = scheduler.run()
        assert result['event_log'] == ["Process 1: Ready -> Running",
                                       "Process 1: Running -> Halted"]
        assert len(result['warnings']) == 2
        assert "SYS_CALL FOO" in result['warnings'][0]

    def test_empty_run(self):
        scheduler = PriorityScheduler([])
        assert scheduler.is_simulation_complete()
        assert scheduler.execute_one_step() == []
        assert scheduler.run()['event_log'] == []


class TestState:

    def test_halted_processes_leave_the_registry(self, blocking_pair):
        scheduler = PriorityScheduler(blocking_pair)
        assert sorted(scheduler.process_table) == [1, 2]
        for _ in range(4):
            scheduler.execute_one_step()
        assert sorted(scheduler.process_table) == [1]
        assert scheduler.state_of(2) == ProcessState.HALTED
        assert scheduler.state_of(1) == ProcessState.BLOCKED

    def test_non_contiguous_ids(self, run_checked):
        processes = [Process(pid, pid % 3, ["w", "SYS_CALL NETWORK 2", "w"]) for pid in (2, 5, 11)]
        result = run_checked(PriorityScheduler(processes))
        assert [p.pid for p in result['processes']] == [2, 5, 11]

    def test_input_processes_are_not_mutated(self, blocking_pair):
        PriorityScheduler(blocking_pair).run()
        assert all(p.state == ProcessState.READY and p.cursor == 0 for p in blocking_pair)

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            PriorityScheduler([Process(1, 1, []), Process(1, 2, [])])

    def test_snapshot(self, blocking_pair):
        scheduler = PriorityScheduler(blocking_pair)
        scheduler.execute_one_step()
        scheduler.execute_one_step()
        snapshot = scheduler.get_current_snapshot()
        assert snapshot['time'] == 2
        assert snapshot['tick'] == 0
        assert snapshot['running'] is None
        assert [p.pid for p in snapshot['ready_queue']] == [2]
        assert [(p.pid, left) for p, left in snapshot['blocked']] == [(1, 3)]
        assert snapshot['latest_log'] == "Process 1: Running -> Blocked"

    def test_step_returns_only_that_ticks_events(self, blocking_pair):
        scheduler = PriorityScheduler(blocking_pair)
        scheduler.execute_one_step()
        events = scheduler.execute_one_step()
        assert [(e.event_type, e.time) for e in events] == [
            (EventType.SOFTWARE_INTERRUPT, 2),
            (EventType.TRANSITION, 2),
        ]

    def test_listeners_receive_events_in_order(self, blocking_pair):
        scheduler = PriorityScheduler(blocking_pair)
        seen = []
        scheduler.add_listener(lambda event: seen.append(str(event)))
        result = scheduler.run()
        assert seen == result['event_log']

    def test_invariant_check_detects_corruption(self, blocking_pair):
        scheduler = PriorityScheduler(blocking_pair)
        scheduler.execute_one_step()
        scheduler.check_invariants()
        scheduler.running_process.state = ProcessState.READY
        with pytest.raises(InvariantViolation):
            scheduler.check_invariants()

    @pytest.mark.parametrize("seed", range(6))
    def test_random_workloads_keep_invariants(self, seed, run_checked):
        processes = InputParser.generate_random_processes(8, seed=seed)
        result = run_checked(PriorityScheduler(processes))
        assert sorted(p.pid for p in result['processes']) == list(range(1, 9))
        transitions = [line for line in result['event_log'] if line.endswith("-> Halted")]
        assert len(transitions) == 8
