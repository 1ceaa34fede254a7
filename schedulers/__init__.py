"""
CPU scheduling policies
"""

from .priority_scheduler import PriorityScheduler

__all__ = [
    'PriorityScheduler'
]
