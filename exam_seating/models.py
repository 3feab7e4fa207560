"""
exam_seating/models.py
Data models for papers, halls and the seat/question-paper allocation results.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple
from . import utils


@dataclass(frozen=True)
class StudentRecord:
    """One student sitting one paper. Created once per run, never copied."""
    register_number: str
    subject: str
    original_index: int


@dataclass
class Paper:
    """
    Input form of a subject: a course with its ordered register numbers.
    """
    course: str
    register_numbers: List[str] = field(default_factory=list)
    date_time: str = ""
    category: str = utils.CATEGORY_REGULAR

    def __post_init__(self):
        self.course = (self.course or "").strip()
        self.date_time = (self.date_time or "").strip()
        self.category = (self.category or utils.CATEGORY_REGULAR).strip().upper()
        self.register_numbers = [str(r).strip() for r in self.register_numbers if str(r).strip()]

    @property
    def session(self) -> str:
        return utils.session_from_datetime(self.date_time)


@dataclass
class Hall:
    """
    Represents a physical exam hall.
    A blank name is resolved to HALL-<n> by the pool builder, which then
    sets `auto_named`.
    """
    name: str
    strength: int
    invigilator: str = ""
    category: str = utils.CATEGORY_REGULAR
    auto_named: bool = False

    def __post_init__(self):
        self.name = (self.name or "").strip()
        self.invigilator = (self.invigilator or "").strip()
        self.category = (self.category or utils.CATEGORY_REGULAR).strip().upper()
        try:
            self.strength = int(self.strength)
        except (ValueError, TypeError):
            print(f"⚠ Warning: Invalid strength '{self.strength}' for hall '{self.name}'. Defaulting to 0.")
            self.strength = 0

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "strength": self.strength,
            "invigilator": self.invigilator,
            "category": self.category,
        }


class SubjectPool:
    """
    FIFO queue of one subject's students.
    distributed_count + len(students) always equals total.
    """

    def __init__(self, subject_name: str, students: List[StudentRecord]):
        self.subject_name = subject_name
        self.students: Deque[StudentRecord] = deque(students)
        self.total = len(students)
        self.distributed_count = 0

    def __len__(self) -> int:
        return len(self.students)

    def __bool__(self) -> bool:
        return bool(self.students)

    def take(self, count: int) -> List[StudentRecord]:
        """Removes up to `count` students from the front of the queue."""
        taken = []
        while self.students and len(taken) < count:
            taken.append(self.students.popleft())
        self.distributed_count += len(taken)
        return taken

    def __repr__(self):
        return f"SubjectPool({self.subject_name}, {len(self.students)}/{self.total} left)"


@dataclass(frozen=True)
class HallUsage:
    """Final state of one hall after a run."""
    hall: Hall
    remaining: int
    students: Tuple[StudentRecord, ...]
    paper_distribution: Tuple[Tuple[str, Tuple[StudentRecord, ...]], ...]

    @property
    def assigned(self) -> int:
        return self.hall.strength - self.remaining

    @property
    def per_subject_counts(self) -> Dict[str, int]:
        return {subject: len(students) for subject, students in self.paper_distribution}

    @property
    def subject_count(self) -> int:
        return len(self.paper_distribution)


@dataclass(frozen=True)
class DistributionRow:
    """One (subject, hall, count) line of the paper-distribution report."""
    serial: int
    subject_name: str
    count: int
    hall_name: str
    students: Tuple[StudentRecord, ...]
    overflow: bool = False

    @property
    def is_unassigned(self) -> bool:
        return self.hall_name == utils.UNASSIGNED_HALL

    def to_dict(self) -> Dict:
        return {
            "serial": self.serial,
            "subject_name": self.subject_name,
            "count": self.count,
            "hall_name": self.hall_name,
            "overflow": self.overflow,
            "register_numbers": [s.register_number for s in self.students],
        }


@dataclass(frozen=True)
class AllocationResult:
    """Immutable output of one allocation strategy run."""
    policy: str
    rows: Tuple[DistributionRow, ...]
    hall_usages: Tuple[HallUsage, ...]

    @property
    def ran_out(self) -> bool:
        return any(row.overflow for row in self.rows)

    @property
    def unassigned_rows(self) -> List[DistributionRow]:
        return [row for row in self.rows if row.is_unassigned]

    @property
    def unassigned_count(self) -> int:
        return sum(row.count for row in self.unassigned_rows)

    @property
    def total_assigned(self) -> int:
        return sum(usage.assigned for usage in self.hall_usages)

    @property
    def total_students(self) -> int:
        return sum(row.count for row in self.rows)

    def rows_for_hall(self, hall_name: str) -> List[DistributionRow]:
        return [row for row in self.rows if row.hall_name == hall_name]


@dataclass(frozen=True)
class SeatArrangementEntry:
    """Per-hall roster rendered as compressed register-number ranges."""
    serial: int
    hall_name: str
    total_assigned: int
    range_display: str
    flat_list: str

    def to_dict(self) -> Dict:
        return {
            "serial": self.serial,
            "hall_name": self.hall_name,
            "total_assigned": self.total_assigned,
            "range_display": self.range_display,
            "flat_list": self.flat_list,
        }


@dataclass(frozen=True)
class PaperShare:
    paper: str
    count: int
    percentage: int


@dataclass(frozen=True)
class HallPreview:
    """What the preview screen shows for one hall."""
    hall_name: str
    invigilator: str
    papers: Tuple[PaperShare, ...]
    remaining: int
    utilization: int
    students: Tuple[StudentRecord, ...]

    @property
    def paper_count(self) -> int:
        return len(self.papers)

    def to_dict(self) -> Dict:
        return {
            "hall_name": self.hall_name,
            "invigilator": self.invigilator,
            "papers": [
                {"paper": p.paper, "count": p.count, "percentage": p.percentage}
                for p in self.papers
            ],
            "remaining": self.remaining,
            "utilization": self.utilization,
            "paper_count": self.paper_count,
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Capacity/consistency verdict for one category.
    `errors` holds every blocking message, `capacity_error` only the shortfall.
    """
    capacity_error: Optional[str]
    advisories: Tuple[str, ...]
    errors: Tuple[str, ...]
    can_export: bool
    total_students: int
    total_capacity: int

    def to_dict(self) -> Dict:
        return {
            "capacity_error": self.capacity_error,
            "advisories": list(self.advisories),
            "errors": list(self.errors),
            "can_export": self.can_export,
            "total_students": self.total_students,
            "total_capacity": self.total_capacity,
        }


@dataclass(frozen=True)
class SeatingPlan:
    """Everything produced for one exam category in one run."""
    category: str
    allocation: AllocationResult
    seat_arrangement: Tuple[SeatArrangementEntry, ...]
    previews: Tuple[HallPreview, ...]
    validation: ValidationResult
    subjects: Tuple[Tuple[str, int], ...]

    @property
    def rows(self) -> Tuple[DistributionRow, ...]:
        return self.allocation.rows

    @property
    def halls(self) -> List[Hall]:
        return [usage.hall for usage in self.allocation.hall_usages]

    def to_dict(self) -> Dict:
        return {
            "category": self.category,
            "policy": self.allocation.policy,
            "ran_out": self.allocation.ran_out,
            "subjects": [{"subject_name": name, "count": count} for name, count in self.subjects],
            "halls": [hall.to_dict() for hall in self.halls],
            "distribution": [row.to_dict() for row in self.rows],
            "seat_arrangement": [entry.to_dict() for entry in self.seat_arrangement],
            "previews": [preview.to_dict() for preview in self.previews],
            "validation": self.validation.to_dict(),
        }


@dataclass
class Exam:
    """
    Represents one exam sitting (date + session) with its papers and halls.
    Halls are kept per category; REG and SDE never share seats.
    """
    name: str
    date: str = ""
    session: str = "FN"
    papers: List[Paper] = field(default_factory=list)
    halls: Dict[str, List[Hall]] = field(default_factory=dict)
    default_strength: int = utils.DEFAULT_STRENGTH
    policy: str = utils.DEFAULT_POLICY

    def __post_init__(self):
        self.session = (self.session or "FN").strip().upper()
        if self.session not in utils.SESSIONS:
            print(f"⚠ Warning: Unknown session '{self.session}' for {self.name}. Defaulting to FN.")
            self.session = "FN"

    def papers_for(self, category: str) -> List[Paper]:
        return [p for p in self.papers if p.category == category]

    def halls_for(self, category: str) -> List[Hall]:
        return list(self.halls.get(category, []))

    def __repr__(self):
        return f"Exam({self.name}, {self.date} {self.session}, {len(self.papers)} papers)"
