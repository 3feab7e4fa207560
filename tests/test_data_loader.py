"""
tests/test_data_loader.py

Unit tests for loading papers, halls and exam settings.
Requires 'pytest' to run.
"""
import pandas as pd
import pytest
from exam_seating.data_loader import DEFAULT_EXAM_CONFIG, ExamDataLoader, paper_from_text
from exam_seating import utils


def write_csv(path, text):
    path.write_text(text.strip() + "\n", encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path):
    """A data folder with two REG papers, one SDE paper and three halls."""
    write_csv(tmp_path / "papers.csv", """
course,register_number,category,date_time
MATH101,ABC001,REG,04-11-2025 FN
MATH101, ABC002 ,REG,04-11-2025 FN
PHY101,XYZ001,REG,04-11-2025 FN
MATH101,ABC003,REG,04-11-2025 FN
DIST201,SDE001,sde,04-11-2025 FN
PHY101,,REG,04-11-2025 FN
""")
    write_csv(tmp_path / "halls.csv", """
name,strength,invigilator,category
H1,3,Dr. A,REG
H2,abc,Dr. B,REG
S1,10,Dr. C,SDE
""")
    write_csv(tmp_path / "exam_config.csv", """
parameter,value
exam_name,End Semester
exam_date,2025-11-04
session,FN
default_strength,25
policy,round_robin
""")
    return tmp_path


def test_load_papers_groups_students_by_course(data_dir):
    loader = ExamDataLoader(data_dir=str(data_dir))
    loader.load_papers()

    assert [(p.category, p.course) for p in loader.papers] == [
        ("REG", "MATH101"), ("REG", "PHY101"), ("SDE", "DIST201"),
    ]
    assert loader.papers[0].register_numbers == ["ABC001", "ABC002", "ABC003"]
    # the row with a blank register number is dropped
    assert loader.papers[1].register_numbers == ["XYZ001"]


def test_load_halls_by_category(data_dir, capsys):
    loader = ExamDataLoader(data_dir=str(data_dir))
    loader.load_halls()

    assert [h.name for h in loader.halls["REG"]] == ["H1", "H2"]
    assert loader.halls["REG"][1].strength == 0
    assert "Invalid strength" in capsys.readouterr().out
    assert loader.halls["SDE"][0].invigilator == "Dr. C"


def test_build_exam(data_dir):
    loader = ExamDataLoader(data_dir=str(data_dir))
    loader.load_all_data()
    exam = loader.build_exam()

    assert exam.name == "End Semester"
    assert exam.date == "2025-11-04"
    assert exam.session == "FN"
    assert exam.default_strength == 25
    assert exam.policy == "round_robin"
    assert len(exam.papers_for("REG")) == 2


def test_policy_override(data_dir):
    loader = ExamDataLoader(data_dir=str(data_dir))
    loader.load_all_data()
    assert loader.build_exam(policy="half_capacity").policy == "half_capacity"


def test_missing_files_use_defaults(tmp_path, capsys):
    loader = ExamDataLoader(data_dir=str(tmp_path))
    loader.load_all_data()

    assert loader.papers == []
    assert loader.halls == {}
    assert loader.exam_config == DEFAULT_EXAM_CONFIG
    assert "papers.csv not found" in capsys.readouterr().out

    exam = loader.build_exam()
    assert exam.default_strength == utils.DEFAULT_STRENGTH
    assert exam.policy == utils.DEFAULT_POLICY


def test_invalid_default_strength(tmp_path):
    write_csv(tmp_path / "exam_config.csv", """
parameter,value
default_strength,lots
""")
    loader = ExamDataLoader(data_dir=str(tmp_path))
    loader.load_exam_config()
    assert loader.build_exam().default_strength == utils.DEFAULT_STRENGTH


def test_load_workbook(tmp_path):
    path = tmp_path / "exam.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame({
            "course": ["MATH101", "MATH101"],
            "register_number": ["ABC001", "ABC002"],
            "category": ["REG", "REG"],
            "date_time": ["04-11-2025 FN", "04-11-2025 FN"],
        }).to_excel(writer, sheet_name="Papers", index=False)
        pd.DataFrame({
            "name": ["H1"], "strength": [30], "invigilator": ["Dr. A"], "category": ["REG"],
        }).to_excel(writer, sheet_name="Halls", index=False)
        pd.DataFrame({
            "parameter": ["exam_name"], "value": ["Workbook Exam"],
        }).to_excel(writer, sheet_name="Config", index=False)

    loader = ExamDataLoader()
    loader.load_workbook(str(path))

    assert loader.papers[0].register_numbers == ["ABC001", "ABC002"]
    assert loader.halls["REG"][0].strength == 30
    assert loader.build_exam().name == "Workbook Exam"


def test_paper_from_text():
    paper = paper_from_text("CS201", "CS001CS002\n cs ME101,  CS001")
    assert paper.course == "CS201"
    assert paper.register_numbers == ["CS001", "CS002", "ME101"]
    assert paper.category == utils.CATEGORY_REGULAR


def test_extract_register_numbers_keeps_first_seen_order():
    assert utils.extract_register_numbers("EC010 CS001 EC010") == ["EC010", "CS001"]
    assert utils.extract_register_numbers("") == []
