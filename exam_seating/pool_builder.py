"""
exam_seating/pool_builder.py
Turns caller-owned paper and hall lists into per-run snapshots:
subject pools (FIFO queues of StudentRecords) and the hall capacity table.
"""

from typing import Any, Dict, List, Sequence, Tuple
from .models import Hall, Paper, StudentRecord, SubjectPool
from . import utils

_NAME_KEYS = ("course", "subject_name", "subjectName", "name")
_NUMBER_KEYS = ("register_numbers", "registerNumbers", "students")


def _coerce_subject(item: Any) -> Tuple[str, List[str]]:
    """Accepts a Paper, a dict or a (name, numbers) pair."""
    if isinstance(item, Paper):
        return item.course, list(item.register_numbers)
    if isinstance(item, dict):
        name = next((item[k] for k in _NAME_KEYS if k in item), "")
        numbers = next((item[k] for k in _NUMBER_KEYS if k in item), [])
        return str(name or ""), [str(n) for n in numbers]
    if isinstance(item, (tuple, list)) and len(item) == 2:
        name, numbers = item
        return str(name or ""), [str(n) for n in numbers]
    raise ValueError(f"Unsupported subject entry: {item!r}")


def _coerce_hall(item: Any) -> Hall:
    if isinstance(item, Hall):
        return Hall(item.name, item.strength, item.invigilator, item.category, item.auto_named)
    if isinstance(item, dict):
        return Hall(
            name=str(item.get("name") or ""),
            strength=item.get("strength", 0),
            invigilator=str(item.get("invigilator") or ""),
            category=str(item.get("category") or utils.CATEGORY_REGULAR),
        )
    raise ValueError(f"Unsupported hall entry: {item!r}")


def snapshot_subjects(subjects: Sequence[Any]) -> List[Tuple[str, List[str]]]:
    """
    Copies the subject list, resolving blank names to Paper-<n>.
    Register numbers keep their input order; blanks are dropped.
    """
    snapshot: List[Tuple[str, List[str]]] = []
    seen: Dict[str, int] = {}
    for position, item in enumerate(subjects, start=1):
        name, numbers = _coerce_subject(item)
        name = name.strip() or utils.paper_placeholder(position)
        if name in seen:
            seen[name] += 1
            renamed = f"{name} ({seen[name]})"
            print(f"⚠ Warning: Duplicate subject name '{name}'. Using '{renamed}'.")
            name = renamed
        else:
            seen[name] = 1
        cleaned = [n.strip() for n in numbers if n and n.strip()]
        snapshot.append((name, cleaned))
    return snapshot


def build_subject_pools(subjects: Sequence[Any]) -> List[SubjectPool]:
    """
    Builds one pool per subject in input order.
    Register numbers repeated across subjects stay independent records.
    """
    pools = []
    for name, numbers in snapshot_subjects(subjects):
        records = [
            StudentRecord(register_number=reg_no, subject=name, original_index=i)
            for i, reg_no in enumerate(numbers)
        ]
        pools.append(SubjectPool(name, records))
    return pools


def normalise_halls(halls: Sequence[Any]) -> List[Hall]:
    """
    Copies every hall and names blank ones HALL-<position>.
    Hall names are unique afterwards: a repeated name becomes 'name (k)'.
    """
    normalised = []
    seen: Dict[str, int] = {}
    for position, item in enumerate(halls, start=1):
        hall = _coerce_hall(item)
        if not hall.name:
            hall.name = utils.hall_placeholder(position)
            hall.auto_named = True
        if hall.name in seen:
            renamed = hall.name
            while renamed in seen:
                seen[hall.name] += 1
                renamed = f"{hall.name} ({seen[hall.name]})"
            print(f"⚠ Warning: Duplicate hall name '{hall.name}'. Using '{renamed}'.")
            hall.name = renamed
        seen[hall.name] = 1
        normalised.append(hall)
    return normalised


def build_hall_table(halls: Sequence[Any]) -> List[Hall]:
    """Only halls with a positive strength take part in a run."""
    return [hall for hall in normalise_halls(halls) if hall.strength > 0]
