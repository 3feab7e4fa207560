"""
exam_seating/formatter.py
Compresses a hall's register numbers into 'CS001 to CS003, CS005' ranges
and the flat roster form 'CS001, 002, 003, 005'.
"""

from typing import Dict, Iterable, List, Sequence, Tuple, Union
from .models import HallUsage, SeatArrangementEntry, StudentRecord
from . import utils

Registrant = Union[StudentRecord, str]


def _register_number(item: Registrant) -> str:
    return item.register_number if isinstance(item, StudentRecord) else str(item)


def group_by_prefix(students: Iterable[Registrant]) -> List[Tuple[str, List[int], int]]:
    """
    Groups register numbers by alphabetic prefix, first-seen order.
    Each group carries the widest zero-padded digit run seen in it, so
    CS0001 keeps its four digits. A number without trailing digits gets
    a group of its own with the whole value as prefix and no numbers.
    """
    groups: Dict[Tuple[str, bool, int], Tuple[List[int], List[int]]] = {}
    for position, item in enumerate(students):
        register_number = _register_number(item)
        prefix, number, conforming = utils.split_register_number(register_number)
        if conforming:
            numbers, widths = groups.setdefault((prefix, True, 0), ([], []))
            numbers.append(number)
            width = utils.digit_width(register_number)
            if width > len(str(number)):
                widths.append(width)
        else:
            groups[(prefix, False, position)] = ([], [])
    return [
        (prefix, sorted(numbers), max(widths, default=utils.MIN_DIGITS))
        for (prefix, _, _), (numbers, widths) in groups.items()
    ]


def compress_runs(numbers: Sequence[int]) -> List[Tuple[int, int]]:
    """[1, 2, 3, 5] -> [(1, 3), (5, 5)]. Input must already be sorted."""
    if not numbers:
        return []
    runs = []
    start = end = numbers[0]
    for number in numbers[1:]:
        if number == end + 1:
            end = number
        else:
            runs.append((start, end))
            start = end = number
    runs.append((start, end))
    return runs


def format_register_ranges(students: Iterable[Registrant]) -> str:
    """The rangeDisplay string for a hall."""
    formatted_groups = []
    for prefix, numbers, width in group_by_prefix(students):
        if not numbers:
            formatted_groups.append(prefix)
            continue
        ranges = []
        for start, end in compress_runs(numbers):
            if start == end:
                ranges.append(f"{prefix}{utils.pad_number(start, width)}")
            else:
                ranges.append(
                    f"{prefix}{utils.pad_number(start, width)}{utils.RANGE_SEPARATOR}"
                    f"{prefix}{utils.pad_number(end, width)}"
                )
        formatted_groups.append(utils.LIST_SEPARATOR.join(ranges))
    return utils.LIST_SEPARATOR.join(formatted_groups)


def format_register_list(students: Iterable[Registrant]) -> str:
    """The flatList string: only the first number of a group keeps its prefix."""
    formatted_groups = []
    for prefix, numbers, width in group_by_prefix(students):
        if not numbers:
            formatted_groups.append(prefix)
            continue
        entries = [f"{prefix}{utils.pad_number(numbers[0], width)}"]
        entries.extend(utils.pad_number(n, width) for n in numbers[1:])
        formatted_groups.append(utils.LIST_SEPARATOR.join(entries))
    return utils.LIST_SEPARATOR.join(formatted_groups)


def expand_register_ranges(range_display: str) -> List[str]:
    """Inverse of format_register_ranges for zero-padded register numbers."""
    expanded: List[str] = []
    if not range_display.strip():
        return expanded
    for part in range_display.split(utils.LIST_SEPARATOR):
        part = part.strip()
        if utils.RANGE_SEPARATOR not in part:
            expanded.append(part)
            continue
        low, high = (s.strip() for s in part.split(utils.RANGE_SEPARATOR, 1))
        prefix, start, _ = utils.split_register_number(low)
        _, end, _ = utils.split_register_number(high)
        width = utils.digit_width(low)
        expanded.extend(f"{prefix}{utils.pad_number(n, width)}" for n in range(start, end + 1))
    return expanded


def build_seat_arrangement(hall_usages: Sequence[HallUsage]) -> Tuple[SeatArrangementEntry, ...]:
    """One entry per hall that received students, numbered from 1."""
    entries = []
    for usage in hall_usages:
        if usage.assigned <= 0:
            continue
        entries.append(SeatArrangementEntry(
            serial=len(entries) + 1,
            hall_name=usage.hall.name,
            total_assigned=usage.assigned,
            range_display=format_register_ranges(usage.students),
            flat_list=format_register_list(usage.students),
        ))
    return tuple(entries)
