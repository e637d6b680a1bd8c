# app.py — web front end; answers rendered as HTML or JSON, progress no-cache
from __future__ import annotations
import os
from typing import Any, Dict, List, Optional

from flask import Flask, request, render_template, send_from_directory, jsonify, url_for

from io_files import write_layout
from models import CapacityError, PuzzleInputError, RegionResult
from puzzle_parser import decode_input, parse_points
from render import render_result
from solver.cp_sat import CpSatUndecided
from solver.mst import solve_day08
from solver.orchestrator import solve_day12

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer as progress_start,
    set_status, set_done, set_result_url,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Rendering every region of a large input would make the page unusable.
MAX_SVG_REGIONS = 20

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "day": "",
    "answer_lines": [],
    "message": "",
    "elapsed_str": "0s",
    "regions": [],
    "layout_path": "",
}

app = Flask(__name__, template_folder="templates")


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress3":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return send_from_directory(BASE_DIR, "puzzle_form.html")


@app.route("/result/latest")
def result_latest():
    return render_template("result.html", **LAST_RESULT)


def _request_fields() -> Dict[str, Any]:
    """JSON body first, then form fields, then an uploaded ``puzzle_file`` (raw bytes)."""
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)
    for k, v in request.form.items():
        merged.setdefault(k, v)
    upload = request.files.get("puzzle_file")
    if upload is not None and upload.filename and not (merged.get("puzzle") or "").strip():
        merged["puzzle"] = upload.read()
    return merged


def _truthy(v: Any) -> bool:
    return str(v).strip().lower() in {"1", "true", "on", "yes"}


def _region_rows(results: List[RegionResult]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for idx, res in enumerate(results):
        svg = ""
        if res.ok and res.placed and idx < MAX_SVG_REGIONS:
            svg, _legend = render_result(res.placed, res.region.W, res.region.H)
        rows.append({
            "label": res.region.label(),
            "ok": res.ok,
            "reason": res.reason,
            "svg": svg,
        })
    return rows


def _respond(status: int = 200):
    set_result_url(url_for("result_latest"))
    if request.is_json:
        body = {k: v for k, v in LAST_RESULT.items() if k != "layout_path"}
        return jsonify(body), status
    return render_template("result.html", **LAST_RESULT), status


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    progress_start()
    set_status("Solving")

    fields = _request_fields()
    day = str(fields.get("day") or "day12").strip().lower()
    puzzle = fields.get("puzzle") or ""

    regions: List[Dict[str, Any]] = []
    layout_path: Optional[str] = None
    try:
        text = decode_input(puzzle) if isinstance(puzzle, bytes) else str(puzzle)
        if day == "day12":
            count, results = solve_day12(
                text.splitlines(),
                allow_gaps=True if _truthy(fields.get("allow_gaps", "")) else None,
            )
            answer_lines = [str(count)]
            regions = _region_rows(results)
            layout_path = write_layout(results, BASE_DIR)
        elif day == "day08":
            p1, p2 = solve_day08(parse_points(text.splitlines()))
            answer_lines = [f"Part1: {p1}", f"Part2: {p2}"]
        else:
            raise PuzzleInputError(f"Unknown day {day!r}")
    except (PuzzleInputError, CapacityError, CpSatUndecided, MemoryError) as e:
        reason = f"{type(e).__name__}: {e}"
        set_done(False, reason=reason)
        LAST_RESULT.update({
            "ok": False,
            "day": day,
            "answer_lines": [],
            "message": reason,
            "elapsed_str": progress_json()["elapsed_str"],
            "regions": [],
            "layout_path": "",
        })
        return _respond(400)

    message = f"{day}: " + " / ".join(answer_lines)
    set_done(True, reason=message)
    LAST_RESULT.update({
        "ok": True,
        "day": day,
        "answer_lines": answer_lines,
        "message": message,
        "elapsed_str": progress_json()["elapsed_str"],
        "regions": regions,
        "layout_path": layout_path or "",
    })
    return _respond(200)


@app.route("/download/layout")
def download_layout():
    path = LAST_RESULT.get("layout_path") or ""
    if not path:
        return jsonify({"error": "no layout written yet"}), 404
    return send_from_directory(os.path.dirname(path), os.path.basename(path), as_attachment=True)


@app.route("/progress3")
def progress3():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
