"""
exam_seating/allocator.py
Seat/question-paper allocation engine.

Halls are filled greedily in input order. Each strategy only decides how a
hall draws students from the subject pools; pool building, row bookkeeping,
the UNASSIGNED overflow and the display sort are shared.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from .models import AllocationResult, DistributionRow, Hall, HallUsage, StudentRecord, SubjectPool
from .pool_builder import build_hall_table, build_subject_pools
from . import utils


def _sort_students(students: List[StudentRecord]) -> List[StudentRecord]:
    return sorted(students, key=lambda s: utils.register_sort_key(s.register_number))


class _HallState:
    """Mutable per-run usage of one hall."""

    def __init__(self, hall: Hall):
        self.hall = hall
        self.remaining = hall.strength
        self.students: List[StudentRecord] = []
        self.paper_distribution: Dict[str, List[StudentRecord]] = {}

    @property
    def subject_count(self) -> int:
        return len(self.paper_distribution)

    def seat(self, subject: str, students: List[StudentRecord]):
        if len(students) > self.remaining:
            raise ValueError(f"Hall {self.hall.name} cannot seat {len(students)} more students")
        self.remaining -= len(students)
        self.students.extend(students)
        self.paper_distribution.setdefault(subject, []).extend(students)

    def freeze(self) -> HallUsage:
        # Display order only; seating decisions are already final.
        return HallUsage(
            hall=self.hall,
            remaining=self.remaining,
            students=tuple(_sort_students(self.students)),
            paper_distribution=tuple(
                (subject, tuple(_sort_students(students)))
                for subject, students in self.paper_distribution.items()
            ),
        )


class _RowBook:
    """Distribution rows keyed by (subject, hall), serials in creation order."""

    def __init__(self):
        self._rows: Dict[Tuple[str, str], Dict[str, Any]] = {}

    def record(self, subject: str, hall_name: str, students: List[StudentRecord], overflow: bool = False):
        key = (subject, hall_name)
        row = self._rows.get(key)
        if row is None:
            row = {"serial": len(self._rows) + 1, "students": [], "overflow": False}
            self._rows[key] = row
        row["students"].extend(students)
        row["overflow"] = row["overflow"] or overflow

    def flag_hall(self, hall_name: str):
        for (_, name), row in self._rows.items():
            if name == hall_name:
                row["overflow"] = True

    def freeze(self) -> Tuple[DistributionRow, ...]:
        return tuple(
            DistributionRow(
                serial=row["serial"],
                subject_name=subject,
                count=len(row["students"]),
                hall_name=hall_name,
                students=tuple(row["students"]),
                overflow=row["overflow"],
            )
            for (subject, hall_name), row in self._rows.items()
        )


class AllocationStrategy:
    """
    Base class for allocation policies.
    Subclasses implement `_fill`, which moves students from pools into halls.
    """
    name = ""

    def allocate(self, subjects: Sequence[Any], halls: Sequence[Any]) -> AllocationResult:
        pools = build_subject_pools(subjects)
        states = [_HallState(hall) for hall in build_hall_table(halls)]
        book = _RowBook()

        self._fill(pools, states, book)

        for pool in pools:
            if pool:
                book.record(pool.subject_name, utils.UNASSIGNED_HALL, pool.take(len(pool)), overflow=True)

        return AllocationResult(
            policy=self.name,
            rows=book.freeze(),
            hall_usages=tuple(state.freeze() for state in states),
        )

    def _fill(self, pools: List[SubjectPool], states: List[_HallState], book: _RowBook):
        raise NotImplementedError

    @staticmethod
    def _move(pool: SubjectPool, state: _HallState, book: _RowBook, count: int) -> int:
        taken = pool.take(count)
        if taken:
            state.seat(pool.subject_name, taken)
            book.record(pool.subject_name, state.hall.name, taken)
        return len(taken)

    @staticmethod
    def _check_mixing(state: _HallState, book: _RowBook):
        if state.subject_count > utils.MAX_SUBJECTS_PER_HALL:
            book.flag_hall(state.hall.name)


class HalfCapacityInterleave(AllocationStrategy):
    """
    Canonical policy. The first subject with students left gets up to half
    of the hall (floor(S/2), no lower bound), every later subject up to
    max(1, floor(S/2)), until the hall is full or the pools run dry.
    """
    name = "half_capacity"

    def _fill(self, pools, states, book):
        hall_index = 0
        while hall_index < len(states) and any(pools):
            state = states[hall_index]
            if state.remaining <= 0:
                hall_index += 1
                continue

            placed = self._fill_pass(pools, state, book)

            # A pass that seats nobody cannot make progress on this hall.
            if state.remaining <= 0 or not any(pools) or placed == 0:
                hall_index += 1

    def _fill_pass(self, pools: List[SubjectPool], state: _HallState, book: _RowBook) -> int:
        strength = state.hall.strength
        target = strength // 2
        seats = min(state.remaining, strength)

        first_index = self._first_available(pools)
        if first_index is None:
            return 0

        first_pool = pools[first_index]
        placed = self._move(first_pool, state, book, min(len(first_pool), target, seats))
        seats -= placed

        cap = max(1, target)
        for pool in pools[first_index + 1:]:
            if seats <= 0:
                break
            if not pool:
                continue
            moved = self._move(pool, state, book, min(len(pool), seats, cap))
            seats -= moved
            placed += moved

        self._check_mixing(state, book)
        return placed

    @staticmethod
    def _first_available(pools: List[SubjectPool]) -> Optional[int]:
        for i, pool in enumerate(pools):
            if pool:
                return i
        return None


class RoundRobinFill(AllocationStrategy):
    """
    Alternative policy. A hall facing a single remaining subject is filled
    wholly from it; otherwise the hall takes one student from each
    non-empty pool in turn until it is full.
    """
    name = "round_robin"

    def _fill(self, pools, states, book):
        for state in states:
            if not any(pools):
                break
            available = [pool for pool in pools if pool]
            if len(available) == 1:
                pool = available[0]
                self._move(pool, state, book, min(len(pool), state.remaining))
                continue

            while state.remaining > 0 and any(pools):
                for pool in pools:
                    if state.remaining <= 0:
                        break
                    if pool:
                        self._move(pool, state, book, 1)

            self._check_mixing(state, book)


POLICIES = {
    HalfCapacityInterleave.name: HalfCapacityInterleave,
    RoundRobinFill.name: RoundRobinFill,
}


def get_strategy(policy: str = utils.DEFAULT_POLICY) -> AllocationStrategy:
    key = (policy or utils.DEFAULT_POLICY).strip().lower().replace("-", "_")
    if key not in POLICIES:
        raise ValueError(f"Unknown allocation policy '{policy}'. Choose one of: {', '.join(POLICIES)}")
    return POLICIES[key]()


def allocate(subjects: Sequence[Any], halls: Sequence[Any], policy: str = utils.DEFAULT_POLICY) -> AllocationResult:
    """Runs one allocation with the named policy."""
    return get_strategy(policy).allocate(subjects, halls)
