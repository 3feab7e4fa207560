"""
exam_seating/exporter.py
Exports a seating plan to Excel: the exam-chief summary, one invigilator
sheet per hall and the seat arrangement.
"""

import io
import os
import re
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet
from .models import Exam, HallPreview, SeatingPlan
from .seating import summarise
from . import utils

# --- Styling Constants ---
HEADER_FILL = PatternFill(start_color="4F81BD", end_color="4F81BD", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
TITLE_FONT = Font(size=14, bold=True)
SECTION_FONT = Font(size=12, bold=True)
WARNING_FILL = PatternFill(start_color="FFE699", end_color="FFE699", fill_type="solid")
CENTER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)
LEFT_ALIGN = Alignment(horizontal="left", vertical="top", wrap_text=True)
THIN_SIDE = Side(style="thin", color="000000")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)

_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def _sheet_title(name: str, used: set) -> str:
    base = _INVALID_SHEET_CHARS.sub("-", name).strip() or "Sheet"
    title = base[:31]
    n = 2
    while title.lower() in used:
        suffix = f" ({n})"
        title = base[:31 - len(suffix)] + suffix
        n += 1
    used.add(title.lower())
    return title


class SeatingExporter:
    """Exports seating plans (one workbook per exam category)."""

    def __init__(self, exam: Exam, plans: Dict[str, SeatingPlan]):
        self.exam = exam
        self.plans = plans

    @property
    def exam_label(self) -> str:
        if not self.exam.date:
            return self.exam.session
        try:
            date_obj = datetime.strptime(self.exam.date, '%Y-%m-%d')
            return f"{date_obj.strftime('%d-%m-%Y')} {self.exam.session}"
        except ValueError:
            return f"{self.exam.date} {self.exam.session}"

    def export_all(self, output_dir='output') -> List[str]:
        """Writes one workbook per category that is allowed to export."""
        os.makedirs(output_dir, exist_ok=True)
        written = []
        for category, plan in self.plans.items():
            if not plan.validation.can_export:
                print(f"  ⚠ Skipped {category}: export is blocked")
                continue
            stamp = self.exam_label.replace(' ', '_')
            filename = os.path.join(output_dir, f"Seating_{category}_{stamp}.xlsx")
            self.build_workbook(plan).save(filename)
            print(f"  ✓ Exported: {filename}")
            written.append(filename)
        return written

    def export_to_bytes(self, category: str = utils.CATEGORY_REGULAR) -> io.BytesIO:
        buffer = io.BytesIO()
        self.build_workbook(self.plans[category]).save(buffer)
        buffer.seek(0)
        return buffer

    def build_workbook(self, plan: SeatingPlan) -> Workbook:
        wb = Workbook()
        wb.remove(wb.active)
        used: set = set()

        self._write_summary(wb.create_sheet(title=_sheet_title("Summary", used)), plan)
        self._write_seat_arrangement(wb.create_sheet(title=_sheet_title("Seat Arrangement", used)), plan)
        for preview in plan.previews:
            if not preview.students:
                continue
            ws = wb.create_sheet(title=_sheet_title(preview.hall_name, used))
            self._write_hall_sheet(ws, preview, plan)
        return wb

    # --- Sheet writers ---

    def _write_title(self, ws: Worksheet, row: int, text: str, font: Font = SECTION_FONT, width: int = 4) -> int:
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
        cell = ws.cell(row, 1, text)
        cell.font = font
        cell.alignment = CENTER_ALIGN
        return row + 1

    def _write_table(self, ws: Worksheet, row: int, headers: Sequence[str], body: Sequence[Sequence],
                     highlight: Optional[Sequence[bool]] = None) -> int:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row, col, header)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = CENTER_ALIGN
            cell.border = THIN_BORDER
        row += 1
        for index, values in enumerate(body):
            for col, value in enumerate(values, 1):
                cell = ws.cell(row, col, value)
                cell.border = THIN_BORDER
                cell.alignment = LEFT_ALIGN if isinstance(value, str) and len(value) > 30 else CENTER_ALIGN
                if highlight and highlight[index]:
                    cell.fill = WARNING_FILL
            row += 1
        return row + 1

    def _write_summary(self, ws: Worksheet, plan: SeatingPlan):
        summary = summarise(plan)
        row = self._write_title(ws, 1, f"EXAM SUMMARY - TO: EXAM CHIEF ({plan.category})", TITLE_FONT)
        row = self._write_title(ws, row, f"{self.exam.name} | Date of Exam : {self.exam_label}")
        row += 1

        row = self._write_table(ws, row, ["", "Count"], [
            ["Total Number of Students :", summary["total_students"]],
            ["Total Number of Halls :", summary["total_halls"]],
        ])

        row = self._write_title(ws, row, "INVIGILATION AND ROOM DETAILS")
        row = self._write_table(ws, row, ["HALL", "NAME OF INVIGILATOR", "ROOM", "STRENGTH"],
                                summary["invigilation"])

        row = self._write_title(ws, row, "QUESTION PAPERS TO BE PRINTED")
        row = self._write_table(ws, row, ["SL", "SUBJECT NAME", "COUNT"], summary["papers"])

        row = self._write_title(ws, row, "QUESTION PAPER DISTRIBUTION TABLE")
        distribution = summary["distribution"]
        self._write_table(
            ws, row, ["SL", "SUBJECT NAME", "COUNT", "ROOM"],
            [values[:4] for values in distribution],
            highlight=[values[4] for values in distribution],
        )

        for col, width in enumerate([8, 40, 30, 12], 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    def _write_seat_arrangement(self, ws: Worksheet, plan: SeatingPlan):
        row = self._write_title(ws, 1, "SEAT ARRANGEMENT", TITLE_FONT)
        row = self._write_title(ws, row, f"Date of Examination: {self.exam_label}")
        total = sum(entry.total_assigned for entry in plan.seat_arrangement)
        row = self._write_title(ws, row, f"Total Students: {total}")
        row += 1
        self._write_table(ws, row, ["SL", "ROOM", "REG NO RANGE", "REGISTER NUMBERS"], [
            [entry.serial, entry.hall_name, entry.range_display, entry.flat_list]
            for entry in plan.seat_arrangement
        ])
        for col, width in enumerate([6, 18, 50, 70], 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    def _write_hall_sheet(self, ws: Worksheet, preview: HallPreview, plan: SeatingPlan):
        """Invigilator sheet: hall details, then each paper's sorted students."""
        row = self._write_title(ws, 1, "EXAM DETAILS - TO: INVIGILATOR", TITLE_FONT)
        row += 1
        row = self._write_table(ws, row, ["Field", "Value"], [
            ["Name of Invigilator", preview.invigilator],
            ["Room", preview.hall_name],
            ["Category", plan.category],
            ["Exam Date", self.exam_label],
            ["Total Students", len(preview.students)],
        ])

        usage = next(u for u in plan.allocation.hall_usages if u.hall.name == preview.hall_name)
        for subject, students in usage.paper_distribution:
            row = self._write_title(ws, row, f"{subject} ({len(students)})")
            row = self._write_table(ws, row, ["SL", "REGISTER NUMBER"], [
                [i, student.register_number] for i, student in enumerate(students, 1)
            ])

        for col, width in enumerate([22, 30, 12, 12], 1):
            ws.column_dimensions[get_column_letter(col)].width = width
