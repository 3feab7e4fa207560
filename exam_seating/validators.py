"""
exam_seating/validators.py
Capacity and consistency checks that gate exporting.
Blocking problems go to `errors`; everything else is an advisory.
"""

from typing import Any, List, Optional, Sequence
from .models import AllocationResult, Paper, ValidationResult
from .pool_builder import normalise_halls, snapshot_subjects
from . import utils


class ConfigurationError(ValueError):
    """Raised when a run cannot start, e.g. no hall has any seats."""


NO_HALLS_MESSAGE = "Please add at least one hall with positive strength"
NO_STUDENTS_MESSAGE = "No students found in the selected papers"


def capacity_message(total_students: int, total_capacity: int) -> Optional[str]:
    if total_capacity < total_students:
        return f"Insufficient capacity! Need {total_students - total_capacity} more seats"
    return None


def check_session_mismatches(papers: Sequence[Paper], exam_date: str, session: str) -> List[str]:
    """
    Papers whose own date/session text disagrees with the exam sitting.
    Papers without date text are skipped.
    """
    problems = []
    for index, paper in enumerate(papers, start=1):
        if not paper.date_time:
            continue
        name = paper.course or utils.paper_placeholder(index)
        if session and paper.session != session:
            problems.append(f"Session mismatch in paper '{name}': expected {session}, got {paper.session}")
        if exam_date and not utils.date_matches(paper.date_time, exam_date):
            problems.append(f"Date mismatch in paper '{name}': expected {exam_date}, got '{paper.date_time}'")
    return problems


def validate(subjects: Sequence[Any],
             halls: Sequence[Any],
             default_strength: int = utils.DEFAULT_STRENGTH,
             allocation: Optional[AllocationResult] = None,
             mismatches: Sequence[str] = ()) -> ValidationResult:
    """
    Runs every check for one category and returns the export verdict.
    `allocation`, when given, adds advisories about the finished run.
    """
    total_students = sum(len(numbers) for _, numbers in snapshot_subjects(subjects))
    all_halls = normalise_halls(halls)
    active_halls = [h for h in all_halls if h.strength > 0]
    total_capacity = sum(h.strength for h in active_halls)

    errors: List[str] = []
    advisories: List[str] = []

    if not active_halls:
        errors.append(NO_HALLS_MESSAGE)

    capacity_error = capacity_message(total_students, total_capacity) if total_students > 0 else None
    if capacity_error:
        errors.append(capacity_error)
    elif total_capacity > total_students + default_strength:
        advisories.append(f"Excess capacity! {total_capacity - total_students} extra seats")

    if total_students == 0:
        errors.append(NO_STUDENTS_MESSAGE)

    for hall in all_halls:
        if hall.strength <= 0:
            advisories.append(f"Hall '{hall.name}' has no seats and will be skipped")

    if any(h.auto_named for h in active_halls):
        advisories.append(
            "Some halls are using default names (e.g., HALL-1). "
            "Please consider assigning proper names for better clarity."
        )

    advisories.extend(mismatches)

    if allocation is not None:
        for usage in allocation.hall_usages:
            if usage.subject_count > utils.MAX_SUBJECTS_PER_HALL:
                advisories.append(
                    f"Hall '{usage.hall.name}' mixes {usage.subject_count} papers "
                    f"(more than {utils.MAX_SUBJECTS_PER_HALL})"
                )
        if not capacity_error and allocation.unassigned_count > 0:
            advisories.append(
                f"{allocation.unassigned_count} students could not be seated by the "
                f"'{allocation.policy}' policy although total capacity is sufficient"
            )

    return ValidationResult(
        capacity_error=capacity_error,
        advisories=tuple(advisories),
        errors=tuple(errors),
        can_export=not errors,
        total_students=total_students,
        total_capacity=total_capacity,
    )


def print_report(result: ValidationResult, title: str = "SEATING VALIDATION") -> bool:
    """Prints the verdict the way the CLI shows it. Returns can_export."""
    print("\n" + "=" * 90)
    print(title.center(90))
    print("=" * 90)
    print(f"  Students: {result.total_students} | Capacity: {result.total_capacity}")

    if not result.errors and not result.advisories:
        print("\n✅ ALL CHECKS PASSED!")
        return True

    if result.advisories:
        print(f"\n⚠️  {len(result.advisories)} WARNING(S):")
        for i, advisory in enumerate(result.advisories, 1):
            print(f"  {i}. {advisory}")

    if result.errors:
        print(f"\n❌ {len(result.errors)} CRITICAL ISSUE(S):")
        for i, error in enumerate(result.errors, 1):
            print(f"  {i}. {error}")
        print("\n❌ CANNOT EXPORT - Please fix critical issues first!")
        return False

    print("\n⚠️  You can proceed, but address warnings for better results.")
    return True
