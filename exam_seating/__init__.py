"""
exam_seating
Seat and question-paper allocation for university exam halls.
"""

from .allocator import POLICIES, allocate, get_strategy
from .formatter import build_seat_arrangement, format_register_list, format_register_ranges
from .models import Exam, Hall, Paper
from .seating import run_allocation, run_exam
from .validators import ConfigurationError, validate

__all__ = [
    "POLICIES",
    "ConfigurationError",
    "Exam",
    "Hall",
    "Paper",
    "allocate",
    "build_seat_arrangement",
    "format_register_list",
    "format_register_ranges",
    "get_strategy",
    "run_allocation",
    "run_exam",
    "validate",
]
