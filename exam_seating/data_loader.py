"""
exam_seating/data_loader.py
Loads papers, halls and exam settings from CSV files (or one Excel workbook).
"""

import os
from typing import Dict, List, Optional, Tuple
import pandas as pd
from .models import Exam, Hall, Paper
from . import utils

DEFAULT_EXAM_CONFIG: Dict[str, str] = {
    "exam_name": "Exam",
    "exam_date": "",
    "session": "FN",
    "default_strength": str(utils.DEFAULT_STRENGTH),
    "policy": utils.DEFAULT_POLICY,
}


def _clean(value) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def _strip_frame(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = df.columns.str.strip().str.lower()
    return df.fillna("")


def papers_from_frame(df: pd.DataFrame) -> List[Paper]:
    """
    One row per student. Papers and students keep their order of first
    appearance; (category, course) identifies a paper.
    """
    df = _strip_frame(df)
    papers: Dict[Tuple[str, str], Paper] = {}
    for _, row in df.iterrows():
        reg_no = _clean(row.get("register_number", ""))
        if not reg_no:
            continue
        course = _clean(row.get("course", ""))
        category = _clean(row.get("category", "")).upper() or utils.CATEGORY_REGULAR
        key = (category, course)
        if key not in papers:
            papers[key] = Paper(
                course=course,
                register_numbers=[],
                date_time=_clean(row.get("date_time", "")),
                category=category,
            )
        papers[key].register_numbers.append(reg_no)
    return list(papers.values())


def halls_from_frame(df: pd.DataFrame) -> Dict[str, List[Hall]]:
    df = _strip_frame(df)
    halls: Dict[str, List[Hall]] = {}
    for _, row in df.iterrows():
        hall = Hall(
            name=_clean(row.get("name", "")),
            strength=_clean(row.get("strength", "")) or 0,
            invigilator=_clean(row.get("invigilator", "")),
            category=_clean(row.get("category", "")) or utils.CATEGORY_REGULAR,
        )
        halls.setdefault(hall.category, []).append(hall)
    return halls


def config_from_frame(df: pd.DataFrame) -> Dict[str, str]:
    df = _strip_frame(df)
    config = dict(DEFAULT_EXAM_CONFIG)
    for _, row in df.iterrows():
        param = _clean(row.get("parameter", ""))
        if param:
            config[param] = _clean(row.get("value", ""))
    return config


def paper_from_text(course: str, text: str, date_time: str = "",
                    category: str = utils.CATEGORY_REGULAR) -> Paper:
    """Builds a paper from register numbers pasted as free text."""
    return Paper(
        course=course,
        register_numbers=utils.extract_register_numbers(text),
        date_time=date_time,
        category=category,
    )


class ExamDataLoader:
    """Loads all input data for one exam sitting."""

    def __init__(self, data_dir='data'):
        self.data_dir = data_dir
        self.papers: List[Paper] = []
        self.halls: Dict[str, List[Hall]] = {}
        self.exam_config: Dict[str, str] = dict(DEFAULT_EXAM_CONFIG)

    def load_all_data(self):
        """Load all data from CSV files."""
        self.load_papers()
        self.load_halls()
        self.load_exam_config()
        self._report()

    def load_papers(self):
        """Load students per paper from papers.csv"""
        try:
            df = pd.read_csv(os.path.join(self.data_dir, 'papers.csv'), dtype=str)
            self.papers = papers_from_frame(df)
        except FileNotFoundError:
            print(f"⚠ Warning: papers.csv not found in {self.data_dir}")
        except (KeyError, ValueError, pd.errors.ParserError) as e:
            print(f"⚠ Error loading papers: {e}")

    def load_halls(self):
        """Load halls from halls.csv"""
        try:
            df = pd.read_csv(os.path.join(self.data_dir, 'halls.csv'), dtype=str)
            self.halls = halls_from_frame(df)
        except FileNotFoundError:
            print(f"⚠ Warning: halls.csv not found in {self.data_dir}")
        except (KeyError, ValueError, pd.errors.ParserError) as e:
            print(f"⚠ Error loading halls: {e}")

    def load_exam_config(self):
        """Load exam settings from exam_config.csv"""
        try:
            df = pd.read_csv(os.path.join(self.data_dir, 'exam_config.csv'), dtype=str)
            self.exam_config = config_from_frame(df)
        except FileNotFoundError:
            print(f"⚠ Warning: exam_config.csv not found in {self.data_dir}. Using defaults.")
            self.exam_config = dict(DEFAULT_EXAM_CONFIG)
        except (KeyError, ValueError, pd.errors.ParserError) as e:
            print(f"⚠ Error loading exam config: {e}")

    def load_workbook(self, path: str):
        """Load Papers / Halls / Config sheets from a single Excel file."""
        try:
            sheets = pd.read_excel(path, sheet_name=None, dtype=str)
        except FileNotFoundError:
            print(f"⚠ Warning: workbook not found at {path}")
            return
        if 'Papers' in sheets:
            self.papers = papers_from_frame(sheets['Papers'])
        else:
            print(f"⚠ Warning: {path} has no 'Papers' sheet")
        if 'Halls' in sheets:
            self.halls = halls_from_frame(sheets['Halls'])
        if 'Config' in sheets:
            self.exam_config = config_from_frame(sheets['Config'])
        self._report()

    def _report(self):
        students = sum(len(p.register_numbers) for p in self.papers)
        hall_count = sum(len(h) for h in self.halls.values())
        print(f"✓ Loaded {len(self.papers)} papers ({students} students)")
        print(f"✓ Loaded {hall_count} halls")

    def _default_strength(self) -> int:
        try:
            return int(self.exam_config.get('default_strength') or utils.DEFAULT_STRENGTH)
        except ValueError:
            print(f"⚠ Warning: Invalid default_strength '{self.exam_config.get('default_strength')}'. "
                  f"Using {utils.DEFAULT_STRENGTH}.")
            return utils.DEFAULT_STRENGTH

    def build_exam(self, policy: Optional[str] = None) -> Exam:
        return Exam(
            name=self.exam_config.get('exam_name') or DEFAULT_EXAM_CONFIG['exam_name'],
            date=self.exam_config.get('exam_date', ''),
            session=self.exam_config.get('session', 'FN'),
            papers=list(self.papers),
            halls={category: list(halls) for category, halls in self.halls.items()},
            default_strength=self._default_strength(),
            policy=policy or self.exam_config.get('policy') or utils.DEFAULT_POLICY,
        )
