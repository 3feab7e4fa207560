"""
exam_seating/utils.py
Shared constants and register-number helpers.
"""
import re
from math import ceil
from typing import List, Tuple

# --- Hall Defaults ---
DEFAULT_STRENGTH: int = 30
HALL_NAME_FORMAT: str = "HALL-{}"
PAPER_NAME_FORMAT: str = "Paper-{}"
UNASSIGNED_HALL: str = "UNASSIGNED — NO HALLS LEFT"

# --- Mixing Policy ---
MAX_SUBJECTS_PER_HALL: int = 2
DEFAULT_POLICY: str = "half_capacity"

# --- Exam Categories / Sessions ---
CATEGORY_REGULAR: str = "REG"
CATEGORY_DISTANCE: str = "SDE"
CATEGORIES: List[str] = [CATEGORY_REGULAR, CATEGORY_DISTANCE]
SESSIONS: List[str] = ["FN", "AN"]

# --- Formatting ---
MIN_DIGITS: int = 3
RANGE_SEPARATOR: str = " to "
LIST_SEPARATOR: str = ", "

_TRAILING_DIGITS = re.compile(r"\d+$")
_REGISTER_TOKEN = re.compile(r"[A-Z]{2,}[A-Z0-9]*\d{2,}")


def split_register_number(register_number: str) -> Tuple[str, int, bool]:
    """
    Splits 'CS005' into ('CS', 5, True).
    Numbers without a trailing digit run come back as (whole, 0, False).
    """
    match = _TRAILING_DIGITS.search(register_number)
    if not match:
        return register_number, 0, False
    return register_number[:match.start()], int(match.group(0)), True


def register_sort_key(register_number: str) -> Tuple[str, int]:
    prefix, number, _ = split_register_number(register_number)
    return (prefix, number)


def digit_width(register_number: str) -> int:
    """Length of the trailing digit run, 0 when there is none."""
    match = _TRAILING_DIGITS.search(register_number)
    return len(match.group(0)) if match else 0


def pad_number(number: int, width: int = MIN_DIGITS) -> str:
    return str(number).zfill(max(width, MIN_DIGITS))


def hall_placeholder(position: int) -> str:
    return HALL_NAME_FORMAT.format(position)


def paper_placeholder(position: int) -> str:
    return PAPER_NAME_FORMAT.format(position)


def suggest_hall_count(total_students: int, default_strength: int = DEFAULT_STRENGTH) -> int:
    if total_students <= 0 or default_strength <= 0:
        return 0
    return ceil(total_students / default_strength)


def session_from_datetime(date_time: str) -> str:
    """'04-11-2025 AN' -> 'AN'. Anything without 'AN' counts as forenoon."""
    return "AN" if "AN" in (date_time or "").upper() else "FN"


def date_matches(date_time: str, exam_date: str) -> bool:
    """
    Checks a paper's free-form date against the exam date (YYYY-MM-DD).
    Accepts DD-MM-YYYY or digits-only forms in the paper text.
    """
    if not exam_date:
        return True
    text = date_time or ""
    day_first = "-".join(reversed(exam_date.split("-")))
    digits_only = re.sub(r"[^\d-]", "", text)
    return day_first in text or exam_date in text or exam_date.replace("-", "") in digits_only.replace("-", "")


def extract_register_numbers(text: str) -> List[str]:
    """
    Pulls register numbers out of pasted text, keeping first-seen order
    and dropping repeats.
    """
    text = re.sub(r"\s+", " ", (text or "").replace("\r", "")).strip()
    text = re.sub(r"(\d)(?=[A-Z])", r"\1 ", text)
    text = re.sub(r"([a-z])(?=[A-Z]{2,})", r"\1 ", text)

    seen = set()
    cleaned = []
    for raw in _REGISTER_TOKEN.findall(text):
        reg = raw.strip()
        if reg not in seen:
            seen.add(reg)
            cleaned.append(reg)
    return cleaned
