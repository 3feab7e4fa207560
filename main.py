"""
main.py

Main entry point for exam seat and question-paper allocation.
REG and SDE papers are allocated as separate runs over their own halls.
"""

import argparse
import sys
from typing import Dict, List, Optional
from exam_seating.data_loader import ExamDataLoader
from exam_seating.exporter import SeatingExporter
from exam_seating.models import SeatingPlan
from exam_seating.seating import apply_auto_setup, run_exam
from exam_seating.validators import ConfigurationError, print_report
from exam_seating.allocator import POLICIES

# --- Configuration ---
DATA_DIR = "data"
OUTPUT_DIR = "output"


def print_distribution(plan: SeatingPlan):
    print(f"\n📋 QUESTION PAPER DISTRIBUTION ({plan.category})")
    print(f"  {'SL':<4} {'SUBJECT NAME':<30} {'COUNT':>5}  ROOM")
    for row in plan.rows:
        marker = " ⚠" if row.overflow else ""
        print(f"  {row.serial:<4} {row.subject_name[:30]:<30} {row.count:>5}  {row.hall_name}{marker}")


def print_seat_arrangement(plan: SeatingPlan):
    print(f"\n🪑 SEAT ARRANGEMENT ({plan.category})")
    for entry in plan.seat_arrangement:
        print(f"  {entry.serial}. {entry.hall_name} ({entry.total_assigned}): {entry.range_display}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Allocate exam halls and question papers.")
    parser.add_argument("--data-dir", default=DATA_DIR, help="folder with papers.csv, halls.csv, exam_config.csv")
    parser.add_argument("--workbook", default=None, help="Excel file with Papers/Halls/Config sheets")
    parser.add_argument("--output-dir", default=OUTPUT_DIR)
    parser.add_argument("--policy", choices=sorted(POLICIES), default=None,
                        help="allocation policy (defaults to exam_config.csv, then half_capacity)")
    parser.add_argument("--preview", action="store_true", help="show the allocation without exporting")
    parser.add_argument("--auto-setup", action="store_true",
                        help="create default halls for categories that have none")
    return parser.parse_args(argv)


def generate_seating(argv: Optional[List[str]] = None) -> int:
    """Loads data, allocates every category and exports. Returns the exit status."""
    args = parse_args(argv)
    print("=" * 90)
    print("EXAM HALL & QUESTION PAPER ALLOCATION".center(90))
    print("=" * 90)

    print("\n📂 Loading data...")
    loader = ExamDataLoader(data_dir=args.data_dir)
    if args.workbook:
        loader.load_workbook(args.workbook)
    else:
        loader.load_all_data()

    if not loader.papers:
        print("\n❌ No papers found! Please create data/papers.csv")
        return 1

    exam = loader.build_exam(policy=args.policy)
    if args.auto_setup:
        apply_auto_setup(exam)
    try:
        plans: Dict[str, SeatingPlan] = run_exam(exam)
    except ConfigurationError as e:
        print(f"\n❌ {e}")
        return 1

    can_export = True
    for category, plan in plans.items():
        print_distribution(plan)
        print_seat_arrangement(plan)
        if not print_report(plan.validation, f"{category} VALIDATION"):
            can_export = False

    if args.preview:
        print("\n✓ Preview complete (nothing exported).")
        return 0 if can_export else 1

    print("\n📊 Exporting to Excel...")
    SeatingExporter(exam, plans).export_all(args.output_dir)

    print("\n" + "=" * 90)
    status = "✓ SEATING GENERATION COMPLETE!" if can_export else "⚠ SEATING GENERATED WITH BLOCKED CATEGORIES"
    print(status.center(90))
    print("=" * 90)
    print(f"\nLocation: {args.output_dir}/")
    return 0 if can_export else 1


if __name__ == "__main__":
    sys.exit(generate_seating())
