"""
Flask web interface for exam seat and question-paper allocation.

Run: python web_app.py
Visit: http://localhost:5000
"""

import threading
from typing import Any, Dict, Optional
from flask import Flask, jsonify, render_template_string, request, send_file

from exam_seating.allocator import POLICIES
from exam_seating.data_loader import paper_from_text
from exam_seating.exporter import SeatingExporter
from exam_seating.models import Exam, Hall, Paper
from exam_seating.seating import auto_setup_halls, run_exam, split_papers_by_category
from exam_seating.validators import ConfigurationError, check_session_mismatches, validate
from exam_seating import utils


app = Flask(__name__)

# --- Latest Completed Run ---
# Replaced as a whole under the lock; readers never see a half-built run.
_g_lock = threading.Lock()
_g_latest: Optional[Dict[str, Any]] = None


INDEX_HTML = """
<!doctype html>
<html>
<head><title>Exam Hall Allocation</title></head>
<body style="font-family: sans-serif; max-width: 900px; margin: 2em auto;">
  <h1>Exam Hall Allocation</h1>
  <p>POST JSON to <code>/api/preview</code>, <code>/api/validate</code> or <code>/api/export</code>:</p>
  <pre>{"exam": {"name": "Exam 1", "date": "2025-11-04", "session": "FN"},
 "papers": [{"course": "MATH101", "register_numbers": ["ABC001", "ABC002"]}],
 "halls": [{"name": "H1", "strength": 30, "invigilator": "Dr. A"}],
 "policy": "half_capacity"}</pre>
  <p>Policies: {{ policies|join(", ") }}</p>
  <p>Latest run: <code>GET /api/latest</code></p>
</body>
</html>
"""


def _paper_from_payload(item: Dict[str, Any]) -> Paper:
    category = item.get("category") or utils.CATEGORY_REGULAR
    course = item.get("course") or item.get("name") or ""
    date_time = item.get("date_time") or item.get("dateTime") or ""
    numbers = item.get("register_numbers") or item.get("registerNumbers")
    if numbers is None and item.get("text"):
        return paper_from_text(course, item["text"], date_time, category)
    return Paper(course=course, register_numbers=list(numbers or []), date_time=date_time, category=category)


def _exam_from_payload(payload: Dict[str, Any]) -> Exam:
    exam_info = payload.get("exam") or {}
    halls: Dict[str, list] = {}
    for item in payload.get("halls") or []:
        hall = Hall(
            name=item.get("name") or "",
            strength=item.get("strength", 0),
            invigilator=item.get("invigilator") or "",
            category=item.get("category") or utils.CATEGORY_REGULAR,
        )
        halls.setdefault(hall.category, []).append(hall)
    return Exam(
        name=exam_info.get("name") or "Exam",
        date=exam_info.get("date") or "",
        session=exam_info.get("session") or "FN",
        papers=[_paper_from_payload(p) for p in payload.get("papers") or []],
        halls=halls,
        default_strength=int(payload.get("default_strength") or utils.DEFAULT_STRENGTH),
        policy=payload.get("policy") or utils.DEFAULT_POLICY,
    )


def _error(message: str, status: int = 400, **extra):
    body = {'success': False, 'error': message}
    body.update(extra)
    return jsonify(body), status


@app.route('/')
def index():
    return render_template_string(INDEX_HTML, policies=sorted(POLICIES))


@app.route('/api/preview', methods=['POST'])
def api_preview():
    global _g_latest
    payload = request.get_json(silent=True)
    if not payload:
        return _error('No JSON body provided.')
    try:
        exam = _exam_from_payload(payload)
        plans = run_exam(exam)
    except (ConfigurationError, ValueError) as e:
        return _error(str(e))

    snapshot = {
        'exam': {'name': exam.name, 'date': exam.date, 'session': exam.session},
        'plans': {category: plan.to_dict() for category, plan in plans.items()},
    }
    with _g_lock:
        _g_latest = snapshot
    return jsonify({'success': True, **snapshot})


@app.route('/api/validate', methods=['POST'])
def api_validate():
    payload = request.get_json(silent=True)
    if not payload:
        return _error('No JSON body provided.')
    try:
        exam = _exam_from_payload(payload)
    except ValueError as e:
        return _error(str(e))

    results = {}
    for category, papers in split_papers_by_category(exam.papers).items():
        mismatches = check_session_mismatches(papers, exam.date, exam.session)
        result = validate(papers, exam.halls_for(category), exam.default_strength, mismatches=mismatches)
        results[category] = result.to_dict()
    return jsonify({'success': True, 'validation': results})


@app.route('/api/latest')
def api_latest():
    with _g_lock:
        snapshot = _g_latest
    if snapshot is None:
        return _error('No allocation generated yet.', status=404)
    return jsonify({'success': True, **snapshot})


@app.route('/api/auto-setup', methods=['POST'])
def api_auto_setup():
    payload = request.get_json(silent=True) or {}
    try:
        total = int(payload.get('total_students', 0))
        strength = int(payload.get('default_strength') or utils.DEFAULT_STRENGTH)
    except (TypeError, ValueError):
        return _error('total_students and default_strength must be integers.')
    category = payload.get('category') or utils.CATEGORY_REGULAR
    halls = auto_setup_halls(total, category, strength)
    return jsonify({'success': True, 'halls': [h.to_dict() for h in halls]})


@app.route('/api/export', methods=['POST'])
def api_export():
    payload = request.get_json(silent=True)
    if not payload:
        return _error('No JSON body provided.')
    category = (request.args.get('category') or utils.CATEGORY_REGULAR).upper()
    try:
        exam = _exam_from_payload(payload)
        plans = run_exam(exam)
    except (ConfigurationError, ValueError) as e:
        return _error(str(e))

    plan = plans.get(category)
    if plan is None:
        return _error(f'No {category} papers to export.', status=404)
    if not plan.validation.can_export:
        return _error('Export is blocked.', validation=plan.validation.to_dict())

    buffer = SeatingExporter(exam, plans).export_to_bytes(category)
    return send_file(
        buffer,
        as_attachment=True,
        download_name=f"Seating_{category}.xlsx",
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    )


# --- Main Execution ---
if __name__ == '__main__':
    print("=" * 70)
    print("🌐 Starting Exam Hall Allocation Web Interface".center(70))
    print("=" * 70)
    print("\n📍 Open your browser and visit: http://localhost:5000")
    print("⚡ Press Ctrl+C to stop the server\n")
    app.run(debug=False, port=5000)
