"""
Utility modules
"""

from .input_parser import InputParser
from .event_sink import EventSink
from .visualization import Visualizer

__all__ = ['InputParser', 'EventSink', 'Visualizer']
