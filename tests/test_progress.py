import json
import logging
import os
import time

import progress
from progress import reset, set_done, set_result_url, set_status, snapshot, update


def test_set_done_no_args_defaults_to_solved():
    reset()
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["percent"] == 100.0
    assert snap["done"] is True
    assert snap["ok"] is True
    assert snap["result_url"] == ""


def test_set_done_failure_carries_reason():
    reset()
    set_status("Solving")
    set_done(False, reason="boom")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["percent"] == 100.0
    assert snap["message"] == "boom"
    assert snap["done"] is True
    assert snap["ok"] is False


def test_set_result_url_tracks_navigation_target():
    reset()
    set_result_url("/foo")
    snap = snapshot()
    assert snap["result_url"] == "/foo"
    assert snap["done"] is False


def test_reset_increments_run_identifier_and_clears_fields():
    reset()
    update(day="day12", solved=4)
    first = snapshot()["run_id"]
    reset()
    snap = snapshot()
    assert snap["run_id"] == first + 1
    assert snap["day"] == ""
    assert snap["solved"] == 0


def test_update_coerces_and_ignores_unknown_keys():
    reset()
    update(regions_total="7", percent=250, solved=-3, board=None, strategy="S0")
    snap = snapshot()
    assert snap["regions_total"] == 7
    assert snap["percent"] == 100.0
    assert snap["solved"] == 0
    assert snap["board"] == ""
    assert "strategy" not in snap
    assert "elapsed_start" not in snap
    assert snap["elapsed_str"] == "0s"


def test_region_log_records_transitions(caplog):
    caplog.set_level(logging.INFO, logger="solver.region_log")
    reset()
    update(day="day12")
    update(region="#1 2x2: 2")
    update(region="#2 3x3: 4")
    set_done(True)

    messages = [r.getMessage() for r in caplog.records if r.name == "solver.region_log"]
    assert "Day started | day=day12" in messages
    assert "Region started | day=day12 region=#1 2x2: 2" in messages
    assert any(m.startswith("Region finished | day=day12 region=#1 2x2: 2") and m.endswith("why=next")
               for m in messages)
    assert any(m.startswith("Region finished | day=day12 region=#2 3x3: 4") and m.endswith("why=run_complete")
               for m in messages)
    assert any(m.startswith("Run finished | status=Solved ok=True") for m in messages)


def test_snapshot_reads_state_written_by_other_process(tmp_path, monkeypatch):
    state_path = tmp_path / "state.json"
    monkeypatch.setattr(progress, "STATE_FILE", state_path)

    progress.reset()
    progress.update(day="day12")
    first = progress.snapshot()
    assert first["day"] == "day12"
    assert state_path.exists()

    data = dict(first)
    data["day"] = "day08"
    data["regions_total"] = 9
    state_path.write_text(json.dumps(data))
    os.utime(state_path, None)

    with progress.PROGRESS_LOCK:
        progress.PROGRESS["day"] = ""
        progress.PROGRESS["regions_total"] = 0
        progress._LAST_STATE_MTIME = 0.0

    time.sleep(0.01)
    updated = progress.snapshot()
    assert updated["day"] == "day08"
    assert updated["regions_total"] == 9
