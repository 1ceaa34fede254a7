"""
Event sink: echoes scheduler events to the console and a log file
"""

import sys
from typing import Optional, TextIO

from core.scheduler_base import Event

LOG_FILE = "LOG.txt"


class EventSink:
    """
    Writes one line per event, in the order the scheduler produces them

    Usage:
        with EventSink("LOG.txt") as sink:
            scheduler.add_listener(sink)
            scheduler.run()
    """

    def __init__(self, log_path: Optional[str] = LOG_FILE, echo: bool = True,
                 stream: Optional[TextIO] = None):
        self.log_path = log_path
        self.echo = echo
        self.stream = stream
        self.count = 0
        self._file: Optional[TextIO] = None

    def open(self):
        if self.log_path and self._file is None:
            self._file = open(self.log_path, 'w', encoding='utf-8')
        return self

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __call__(self, event: Event):
        line = str(event)
        if self.echo:
            print(line, file=self.stream or sys.stdout)
        if self._file is not None:
            self._file.write(line + "\n")
        self.count += 1
