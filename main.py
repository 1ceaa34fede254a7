#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Priority scheduler simulator - command line entry point

Usage:
    python main.py N [--dir DIR] [--log LOG.txt] [--chart gantt.png] [--stats] [--quiet]

Loads ``process1`` .. ``processN`` from DIR, runs the preemptive priority
scheduler and writes every transition/interrupt to the console and LOG.txt.
"""

import argparse
import sys
from typing import List, Optional

from core.errors import ConfigurationError
from core.scheduler_base import TIME_QUANTUM
from schedulers.priority_scheduler import PriorityScheduler
from utils.event_sink import EventSink, LOG_FILE
from utils.input_parser import InputParser
from utils.visualization import Visualizer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Preemptive priority scheduler simulator')
    parser.add_argument('count', nargs='?', metavar='N', help='Number of process files to load')
    parser.add_argument('--dir', default='.', help='Directory holding process1..processN')
    parser.add_argument('--log', default=LOG_FILE, help='Event log path')
    parser.add_argument('--quantum', type=int, default=TIME_QUANTUM, help='Timer interrupt interval')
    parser.add_argument('--chart', default=None, help='Save a Gantt chart PNG to this path')
    parser.add_argument('--stats', action='store_true', help='Print statistics tables')
    parser.add_argument('--quiet', action='store_true', help='Do not echo events to the console')
    return parser


def parse_process_count(value: Optional[str]) -> int:
    """
    Validate the process count

    Raises:
        ConfigurationError: missing, non-numeric or smaller than 1
    """
    if value is None:
        raise ConfigurationError("missing process count N")
    try:
        count = int(value)
    except ValueError:
        raise ConfigurationError(f"process count must be an integer, got '{value}'") from None
    if count < 1:
        raise ConfigurationError(f"process count must be at least 1, got {count}")
    return count


def run_simulation(count: int, directory: str = '.', log_path: Optional[str] = LOG_FILE,
                   echo: bool = True, time_quantum: int = TIME_QUANTUM):
    """Load the processes and run them; returns the result dictionary"""
    processes = InputParser.load_processes(count, directory)
    scheduler = PriorityScheduler(processes, time_quantum=time_quantum)

    with EventSink(log_path, echo=echo) as sink:
        scheduler.add_listener(sink)
        result = scheduler.run()

    for warning in result['warnings']:
        print(f"Warning: {warning}", file=sys.stderr)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        count = parse_process_count(args.count)
        if args.quantum < 1:
            raise ConfigurationError(f"quantum must be at least 1, got {args.quantum}")
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Usage: {parser.prog} N", file=sys.stderr)
        return 1

    result = run_simulation(count, args.dir, args.log, echo=not args.quiet,
                            time_quantum=args.quantum)

    if args.stats or args.chart:
        visualizer = Visualizer()
        if args.stats:
            visualizer.print_statistics_table([result])
            visualizer.print_process_details(result)
        if args.chart:
            visualizer.draw_gantt_chart(result['gantt_chart'], result['algorithm'],
                                        save_path=args.chart, show=False)

    return 0


if __name__ == "__main__":
    sys.exit(main())
