"""
tests/test_formatter.py

Unit tests for register-number range compression.
Requires 'pytest' to run.
"""
import pytest
from exam_seating.allocator import allocate
from exam_seating.formatter import (
    build_seat_arrangement,
    compress_runs,
    expand_register_ranges,
    format_register_list,
    format_register_ranges,
    group_by_prefix,
)
from exam_seating.models import StudentRecord


def test_contiguous_run_and_gap():
    """CS001..CS003 collapse into one range, CS005 stays on its own."""
    numbers = ["CS001", "CS002", "CS003", "CS005"]
    assert format_register_ranges(numbers) == "CS001 to CS003, CS005"
    assert format_register_list(numbers) == "CS001, 002, 003, 005"


def test_accepts_student_records():
    students = [StudentRecord("CS002", "P", 0), StudentRecord("CS001", "P", 1)]
    assert format_register_ranges(students) == "CS001 to CS002"


def test_prefix_groups_keep_first_seen_order():
    numbers = ["EC010", "CS002", "EC011", "CS001"]
    assert group_by_prefix(numbers) == [("EC", [10, 11], 3), ("CS", [1, 2], 3)]
    assert format_register_ranges(numbers) == "EC010 to EC011, CS001 to CS002"
    assert format_register_list(numbers) == "EC010, 011, CS001, 002"


def test_numbers_are_padded_to_three_digits():
    assert format_register_ranges(["CS7"]) == "CS007"
    assert format_register_ranges(["CS1000", "CS1001"]) == "CS1000 to CS1001"
    assert format_register_ranges(["CS999", "CS1000"]) == "CS999 to CS1000"


def test_wider_zero_padding_is_kept():
    """CS0001 keeps its four digits in both forms and expands back unchanged."""
    numbers = ["CS0001", "CS0002", "CS0004"]
    assert format_register_ranges(numbers) == "CS0001 to CS0002, CS0004"
    assert format_register_list(numbers) == "CS0001, 0002, 0004"
    assert expand_register_ranges(format_register_ranges(numbers)) == numbers


def test_repeated_number_does_not_start_a_run():
    assert format_register_ranges(["CS001", "CS001", "CS002"]) == "CS001, CS001 to CS002"


def test_non_conforming_numbers_rendered_verbatim():
    assert format_register_ranges(["ABC", "CS001", "CS002"]) == "ABC, CS001 to CS002"
    assert format_register_list(["ABC", "XYZ"]) == "ABC, XYZ"


def test_empty_input():
    assert format_register_ranges([]) == ""
    assert format_register_list([]) == ""
    assert expand_register_ranges("") == []


def test_input_list_is_not_reordered():
    numbers = ["CS003", "CS001"]
    format_register_ranges(numbers)
    assert numbers == ["CS003", "CS001"]


@pytest.mark.parametrize("numbers, expected", [
    ([], []),
    ([4], [(4, 4)]),
    ([1, 2, 3, 5], [(1, 3), (5, 5)]),
    ([1, 3, 5], [(1, 1), (3, 3), (5, 5)]),
])
def test_compress_runs(numbers, expected):
    assert compress_runs(numbers) == expected


def test_expand_inverts_range_display():
    assert expand_register_ranges("CS001 to CS003, CS005") == ["CS001", "CS002", "CS003", "CS005"]


def test_seat_arrangement_lists_halls_with_students():
    subjects = [
        ("MATH101", ["ABC001", "ABC002", "ABC003"]),
        ("PHY101", ["XYZ001", "XYZ002"]),
    ]
    halls = [
        {"name": "H1", "strength": 3},
        {"name": "BIG", "strength": 10},
        {"name": "H2", "strength": 2},
    ]
    result = allocate(subjects, halls)
    entries = build_seat_arrangement(result.hall_usages)

    assert [(e.serial, e.hall_name, e.total_assigned) for e in entries] == [(1, "H1", 3), (2, "BIG", 2)]
    assert entries[0].range_display == "ABC001 to ABC002, XYZ001"
    assert entries[0].flat_list == "ABC001, 002, XYZ001"


def test_seat_arrangement_skips_unused_halls():
    result = allocate([("CS", ["CS001", "CS002"])], [{"name": "H1", "strength": 4}, {"name": "H2", "strength": 4}])
    entries = build_seat_arrangement(result.hall_usages)
    assert [e.hall_name for e in entries] == ["H1"]
    assert entries[0].range_display == "CS001 to CS002"


def test_every_hall_roster_round_trips():
    subjects = [
        ("A", [f"CS{i:03d}" for i in range(1, 23)]),
        ("B", [f"EC{i:03d}" for i in range(40, 55)]),
        ("C", [f"CS{i:03d}" for i in range(30, 38)]),
    ]
    halls = [{"name": f"H{i}", "strength": s} for i, s in enumerate([10, 7, 12, 9, 5], start=1)]
    result = allocate(subjects, halls)

    for usage in result.hall_usages:
        expected = sorted(s.register_number for s in usage.students)
        assert sorted(expand_register_ranges(format_register_ranges(usage.students))) == expected
