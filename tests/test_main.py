"""
tests/test_main.py

Command-line run over a small data folder.
Requires 'pytest' to run.
"""
import os
import pytest
from main import generate_seating


@pytest.fixture
def data_dir(tmp_path):
    folder = tmp_path / "data"
    folder.mkdir()
    (folder / "papers.csv").write_text(
        "course,register_number,category,date_time\n"
        "MATH101,ABC001,REG,04-11-2025 FN\n"
        "MATH101,ABC002,REG,04-11-2025 FN\n"
        "PHY101,XYZ001,REG,04-11-2025 FN\n",
        encoding="utf-8",
    )
    (folder / "halls.csv").write_text(
        "name,strength,invigilator,category\n"
        "H1,3,Dr. A,REG\n",
        encoding="utf-8",
    )
    (folder / "exam_config.csv").write_text(
        "parameter,value\nexam_name,Test Exam\nexam_date,2025-11-04\nsession,FN\n",
        encoding="utf-8",
    )
    return folder


def test_generate_seating_writes_workbook(data_dir, tmp_path):
    output = tmp_path / "output"
    status = generate_seating(["--data-dir", str(data_dir), "--output-dir", str(output)])

    assert status == 0
    assert os.path.exists(output / "Seating_REG_04-11-2025_FN.xlsx")


def test_preview_exports_nothing(data_dir, tmp_path, capsys):
    output = tmp_path / "output"
    status = generate_seating(["--data-dir", str(data_dir), "--output-dir", str(output), "--preview"])

    assert status == 0
    assert not output.exists()
    out = capsys.readouterr().out
    assert "ABC001 to ABC002, XYZ001" in out


def test_missing_papers(tmp_path):
    assert generate_seating(["--data-dir", str(tmp_path)]) == 1


def test_missing_halls_need_auto_setup(data_dir, tmp_path):
    (data_dir / "halls.csv").unlink()
    output = tmp_path / "output"

    assert generate_seating(["--data-dir", str(data_dir), "--output-dir", str(output)]) == 1
    assert not output.exists()

    status = generate_seating(["--data-dir", str(data_dir), "--output-dir", str(output), "--auto-setup"])
    assert status == 0
    assert os.path.exists(output / "Seating_REG_04-11-2025_FN.xlsx")
