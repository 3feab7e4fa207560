"""
exam_seating/seating.py
Runs one allocation end to end: snapshot inputs, allocate, format the
seat arrangement, build the hall previews and validate.
REG and SDE papers are separate invocations that never share halls.
"""

from math import floor
from typing import Any, Dict, List, Sequence
from .allocator import get_strategy
from .formatter import build_seat_arrangement
from .models import AllocationResult, Exam, Hall, HallPreview, Paper, PaperShare, SeatingPlan
from .pool_builder import build_hall_table, normalise_halls, snapshot_subjects
from .validators import NO_HALLS_MESSAGE, ConfigurationError, check_session_mismatches, validate
from . import utils


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(floor(part * 100 / whole + 0.5))


def build_previews(allocation: AllocationResult) -> tuple:
    previews = []
    for usage in allocation.hall_usages:
        strength = usage.hall.strength
        previews.append(HallPreview(
            hall_name=usage.hall.name,
            invigilator=usage.hall.invigilator,
            papers=tuple(
                PaperShare(paper=subject, count=len(students), percentage=_percent(len(students), strength))
                for subject, students in usage.paper_distribution
            ),
            remaining=usage.remaining,
            utilization=_percent(usage.assigned, strength),
            students=usage.students,
        ))
    return tuple(previews)


def run_allocation(subjects: Sequence[Any],
                   halls: Sequence[Any],
                   policy: str = utils.DEFAULT_POLICY,
                   category: str = utils.CATEGORY_REGULAR,
                   default_strength: int = utils.DEFAULT_STRENGTH,
                   mismatches: Sequence[str] = ()) -> SeatingPlan:
    """
    Allocates one category. Raises ConfigurationError when no hall has
    seats; a capacity shortfall still completes with UNASSIGNED rows.
    """
    subject_snapshot = snapshot_subjects(subjects)
    all_halls = normalise_halls(halls)
    hall_table = build_hall_table(all_halls)
    if not hall_table:
        raise ConfigurationError(f"[{category}] {NO_HALLS_MESSAGE}")

    strategy = get_strategy(policy)
    total = sum(len(numbers) for _, numbers in subject_snapshot)
    print(f"\n🔄 [{category}] Allocating {total} students across {len(hall_table)} halls ({strategy.name})...")

    allocation = strategy.allocate(subject_snapshot, hall_table)

    for usage in allocation.hall_usages:
        print(f"    ✓ {usage.hall.name}: {usage.assigned}/{usage.hall.strength} seats, "
              f"{usage.subject_count} paper(s)")
    if allocation.unassigned_count:
        print(f"    ⚠ {allocation.unassigned_count} students UNASSIGNED - no halls left")

    return SeatingPlan(
        category=category,
        allocation=allocation,
        seat_arrangement=build_seat_arrangement(allocation.hall_usages),
        previews=build_previews(allocation),
        validation=validate(subject_snapshot, all_halls, default_strength, allocation, mismatches),
        subjects=tuple((name, len(numbers)) for name, numbers in subject_snapshot),
    )


def auto_setup_halls(total_students: int,
                     category: str = utils.CATEGORY_REGULAR,
                     default_strength: int = utils.DEFAULT_STRENGTH) -> List[Hall]:
    """Blank halls of default strength, enough to seat everyone."""
    count = utils.suggest_hall_count(total_students, default_strength)
    return [Hall(name="", strength=default_strength, category=category) for _ in range(count)]


def split_papers_by_category(papers: Sequence[Paper]) -> Dict[str, List[Paper]]:
    """Groups papers by category, REG first, then SDE, then anything else."""
    grouped: Dict[str, List[Paper]] = {c: [] for c in utils.CATEGORIES}
    for paper in papers:
        grouped.setdefault(paper.category, []).append(paper)
    return {category: items for category, items in grouped.items() if items}


def apply_auto_setup(exam: Exam) -> Dict[str, List[Hall]]:
    """
    Gives every category that has students but no halls the auto-setup
    suggestion. Only runs when the caller asks for it; returns what was added.
    """
    added: Dict[str, List[Hall]] = {}
    for category, papers in split_papers_by_category(exam.papers).items():
        if exam.halls_for(category):
            continue
        students = sum(len(p.register_numbers) for p in papers)
        halls = auto_setup_halls(students, category, exam.default_strength)
        if halls:
            exam.halls[category] = halls
            added[category] = halls
            print(f"  ⚠ [{category}] Auto setup created {len(halls)} halls of {exam.default_strength} seats.")
    return added


def run_exam(exam: Exam) -> Dict[str, SeatingPlan]:
    """
    Runs every category of an exam independently.
    A category without usable halls raises ConfigurationError.
    """
    plans: Dict[str, SeatingPlan] = {}
    for category, papers in split_papers_by_category(exam.papers).items():
        students = sum(len(p.register_numbers) for p in papers)
        if students == 0:
            print(f"  ⚠ [{category}] No register numbers found. Skipping.")
            continue

        mismatches = check_session_mismatches(papers, exam.date, exam.session)
        plans[category] = run_allocation(
            papers, exam.halls_for(category),
            policy=exam.policy,
            category=category,
            default_strength=exam.default_strength,
            mismatches=mismatches,
        )
    return plans


def summarise(plan: SeatingPlan) -> Dict[str, Any]:
    """Table data for the exam-chief summary."""
    halls = plan.halls
    return {
        "total_students": plan.validation.total_students,
        "total_halls": len(halls),
        "invigilation": [
            (i, hall.invigilator, hall.name, hall.strength)
            for i, hall in enumerate(halls, start=1)
        ],
        "papers": [
            (i, name, count)
            for i, (name, count) in enumerate(plan.subjects, start=1)
        ],
        "distribution": [
            (row.serial, row.subject_name, row.count, row.hall_name, row.overflow)
            for row in plan.rows
        ],
    }
