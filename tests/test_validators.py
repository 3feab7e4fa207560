"""
tests/test_validators.py

Unit tests for the capacity and consistency checks that gate exporting.
Requires 'pytest' to run.
"""
import pytest
from exam_seating.allocator import allocate
from exam_seating.models import Hall, Paper
from exam_seating.seating import run_allocation
from exam_seating.validators import (
    NO_HALLS_MESSAGE,
    NO_STUDENTS_MESSAGE,
    ConfigurationError,
    capacity_message,
    check_session_mismatches,
    print_report,
    validate,
)


def _students(count, prefix="CS"):
    return [f"{prefix}{i:03d}" for i in range(1, count + 1)]


def test_capacity_shortfall_blocks_export():
    """10 students, 7 seats: shortfall of 3."""
    result = validate([("CS", _students(10))], [{"name": "H1", "strength": 4}, {"name": "H2", "strength": 3}])

    assert result.capacity_error == "Insufficient capacity! Need 3 more seats"
    assert result.capacity_error in result.errors
    assert result.can_export is False
    assert result.total_students == 10
    assert result.total_capacity == 7


def test_exact_capacity_passes():
    result = validate([("CS", _students(5))], [{"name": "H1", "strength": 5}])
    assert result.capacity_error is None
    assert result.errors == ()
    assert result.advisories == ()
    assert result.can_export is True


def test_excess_capacity_is_an_advisory():
    result = validate([("CS", _students(10))], [{"name": "H1", "strength": 50}])
    assert result.can_export is True
    assert "Excess capacity! 40 extra seats" in result.advisories


def test_excess_capacity_threshold_uses_default_strength():
    at_limit = validate([("CS", _students(10))], [{"name": "H1", "strength": 40}])
    assert not any(a.startswith("Excess capacity") for a in at_limit.advisories)

    smaller_default = validate([("CS", _students(10))], [{"name": "H1", "strength": 40}], default_strength=20)
    assert "Excess capacity! 30 extra seats" in smaller_default.advisories


def test_no_halls():
    result = validate([("CS", _students(3))], [])
    assert NO_HALLS_MESSAGE in result.errors
    assert result.capacity_error == "Insufficient capacity! Need 3 more seats"
    assert result.can_export is False


def test_no_students():
    result = validate([("CS", [])], [{"name": "H1", "strength": 30}])
    assert NO_STUDENTS_MESSAGE in result.errors
    assert result.capacity_error is None
    assert result.can_export is False


def test_zero_strength_hall_advisory():
    result = validate([("CS", _students(3))], [{"name": "H1", "strength": 5}, {"name": "LAB", "strength": 0}])
    assert result.can_export is True
    assert "Hall 'LAB' has no seats and will be skipped" in result.advisories
    assert result.total_capacity == 5


def test_placeholder_names_advisory():
    result = validate([("CS", _students(3))], [Hall(name="", strength=5)])
    assert any("default names" in a for a in result.advisories)
    assert result.can_export is True


def test_hall_named_like_a_placeholder_is_not_flagged():
    result = validate([("CS", _students(3))], [{"name": "HALL-2", "strength": 5}])
    assert not any("default names" in a for a in result.advisories)


def test_mixing_advisory_after_allocation():
    subjects = [("A", ["A001"]), ("B", ["B001"]), ("C", ["C001", "C002"])]
    halls = [{"name": "H1", "strength": 4}]
    allocation = allocate(subjects, halls)
    result = validate(subjects, halls, allocation=allocation)
    assert "Hall 'H1' mixes 3 papers (more than 2)" in result.advisories
    assert result.can_export is True


def test_unassigned_despite_enough_capacity():
    """A one-seat hall cannot take the only subject's student under half-capacity."""
    subjects = [("A", ["A001"])]
    halls = [{"name": "H1", "strength": 1}]
    allocation = allocate(subjects, halls)
    result = validate(subjects, halls, allocation=allocation)

    assert allocation.unassigned_count == 1
    assert result.capacity_error is None
    assert any("could not be seated" in a for a in result.advisories)


def test_capacity_message():
    assert capacity_message(10, 7) == "Insufficient capacity! Need 3 more seats"
    assert capacity_message(7, 7) is None


def test_session_and_date_mismatches():
    papers = [
        Paper(course="MATH101", register_numbers=["A001"], date_time="04-11-2025 AN"),
        Paper(course="PHY101", register_numbers=["B001"], date_time="05-11-2025 FN"),
        Paper(course="CHEM101", register_numbers=["C001"], date_time="04-11-2025 FN"),
        Paper(course="BIO101", register_numbers=["D001"]),
    ]
    problems = check_session_mismatches(papers, "2025-11-04", "FN")

    assert problems == [
        "Session mismatch in paper 'MATH101': expected FN, got AN",
        "Date mismatch in paper 'PHY101': expected 2025-11-04, got '05-11-2025 FN'",
    ]


def test_mismatches_are_advisories():
    """A date/session mismatch is reported but does not close the export gate."""
    mismatch = "Session mismatch in paper 'CS': expected FN, got AN"
    result = validate([("CS", _students(3))], [{"name": "H1", "strength": 3}], mismatches=[mismatch])
    assert result.can_export is True
    assert mismatch in result.advisories
    assert result.errors == ()


def test_run_allocation_without_usable_halls():
    with pytest.raises(ConfigurationError, match="at least one hall"):
        run_allocation([("CS", _students(3))], [{"name": "H1", "strength": 0}])


def test_print_report(capsys):
    blocked = validate([("CS", _students(10))], [{"name": "H1", "strength": 7}])
    assert print_report(blocked) is False
    assert "CANNOT EXPORT" in capsys.readouterr().out

    clean = validate([("CS", _students(5))], [{"name": "H1", "strength": 5}])
    assert print_report(clean) is True
    assert "ALL CHECKS PASSED" in capsys.readouterr().out
