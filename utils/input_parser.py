"""
Process definition loader and workload generator
"""

import os
import random
import sys
from typing import List, Optional

from core.errors import LoadError
from core.instruction import SYSCALL_MARKER
from core.process import Process

PROCESS_FILE_PREFIX = "process"


class InputParser:
    """Process definition file parser"""

    @staticmethod
    def process_path(pid: int, directory: str = ".", prefix: str = PROCESS_FILE_PREFIX) -> str:
        return os.path.join(directory, f"{prefix}{pid}")

    @staticmethod
    def parse_process_file(filename: str, pid: int) -> Process:
        """
        Read one process definition

        File format: the first line holds the integer priority, every
        following non-blank line is one instruction
        e.g.
            3
            compute
            SYS_CALL NETWORK_IO NETWORK 4
            SYS_CALL TERMINATE

        Args:
            filename: path of the definition file
            pid: id given to the loaded process

        Returns:
            The loaded process

        Raises:
            LoadError: missing/unreadable file or bad priority line
        """
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise LoadError(pid, filename, e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise LoadError(pid, filename, "not a text file") from e

        # Skip leading blank lines before the priority
        while lines and not lines[0].strip():
            lines.pop(0)
        if not lines:
            raise LoadError(pid, filename, "file is empty")

        priority_token = lines[0].split()[0]
        try:
            priority = int(priority_token)
        except ValueError as e:
            raise LoadError(pid, filename, f"invalid priority '{priority_token}'") from e

        script = [line.strip() for line in lines[1:] if line.strip()]
        return Process(pid, priority, script)

    @staticmethod
    def load_processes(num_processes: int, directory: str = ".",
                       prefix: str = PROCESS_FILE_PREFIX) -> List[Process]:
        """
        Load ``process1`` .. ``process<N>`` from ``directory``

        A definition that cannot be loaded is reported and skipped; the
        remaining processes keep their ids.

        Args:
            num_processes: number of ids to try
            directory: directory holding the definition files
            prefix: file name prefix

        Returns:
            Loaded processes, in id order
        """
        processes = []

        for pid in range(1, num_processes + 1):
            filename = InputParser.process_path(pid, directory, prefix)
            try:
                processes.append(InputParser.parse_process_file(filename, pid))
            except LoadError as e:
                print(f"Error: {e}", file=sys.stderr)
                continue

        return processes

    @staticmethod
    def generate_random_processes(num_processes: int = 5,
                                  max_priority: int = 10,
                                  max_length: int = 12,
                                  max_network: int = 6,
                                  seed: Optional[int] = None) -> List[Process]:
        """
        Generate a random workload

        Args:
            num_processes: number of processes
            max_priority: priorities are drawn from 1..max_priority
            max_length: maximum script length
            max_network: maximum NETWORK wait
            seed: random seed

        Returns:
            Process list
        """
        rng = random.Random(seed)

        processes = []

        for pid in range(1, num_processes + 1):
            priority = rng.randint(1, max_priority)
            script = []

            for _ in range(rng.randint(1, max_length)):
                roll = rng.random()
                if roll < 0.15:
                    cycles = rng.randint(1, max_network)
                    script.append(f"{SYSCALL_MARKER} NETWORK_IO NETWORK {cycles}")
                else:
                    script.append(f"instruction_{rng.randint(1, 99)}")

            # Most processes end explicitly; some fail, the rest run off the end
            ending = rng.random()
            if ending < 0.6:
                script.append(f"{SYSCALL_MARKER} TERMINATE")
            elif ending < 0.75:
                script.append(f"{SYSCALL_MARKER} ERROR_SEGFAULT")

            processes.append(Process(pid, priority, script))

        return processes

    @staticmethod
    def save_processes_to_directory(processes: List[Process], directory: str,
                                    prefix: str = PROCESS_FILE_PREFIX) -> List[str]:
        """
        Write processes as ``<prefix><pid>`` definition files

        Args:
            processes: processes to save
            directory: output directory (created if missing)
            prefix: file name prefix

        Returns:
            Written paths
        """
        os.makedirs(directory, exist_ok=True)
        paths = []

        for process in processes:
            path = InputParser.process_path(process.pid, directory, prefix)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(f"{process.priority}\n")
                for line in process.script:
                    f.write(f"{line}\n")
            paths.append(path)

        return paths

    @staticmethod
    def print_process_summary(processes: List[Process]):
        """Print a summary of the loaded processes"""
        print("\n" + "="*72)
        print("Process summary")
        print("="*72)
        print(f"{'PID':<6} {'Priority':>10} {'Instructions':>14} {'Syscalls':>10} {'Ending':>12}")
        print("-"*72)

        for p in sorted(processes, key=lambda x: x.pid):
            syscalls = sum(1 for i in p.instructions if i.is_system_call)
            last = p.instructions[-1] if p.instructions else None
            ending = last.kind.value if last is not None and last.is_system_call else 'End'

            print(f"{p.pid:<6} {p.priority:>10} {len(p.script):>14} {syscalls:>10} {ending:>12}")

        print("="*72 + "\n")
