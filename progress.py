"""
progress.py - shared run state for the CLI summary and the web poller.

One lock-guarded ``PROGRESS`` dict per process.  Day and region transitions are
also written to the ``solver.region_log`` logger as ``event | key=value``
records; a file handler is attached only when ``AOC_REGION_LOG`` is set.  When
``PROGRESS_STATE_FILE`` is set the dict is mirrored to JSON after each update so
a poller in another process sees the same run.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from config import CFG

log = logging.getLogger(__name__)

PROGRESS_LOCK = threading.Lock()

STATE_FILE: Optional[Path] = Path(CFG.PROGRESS_STATE_FILE.strip()) if CFG.PROGRESS_STATE_FILE.strip() else None
_LAST_STATE_MTIME: float = 0.0


def _init_region_logger() -> logging.Logger:
    logger = logging.getLogger("solver.region_log")
    target = CFG.REGION_LOG.strip()
    if logger.handlers or not target:
        return logger
    path = Path(target)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        log.warning("region log %s not opened: %s", path, exc)
        return logger
    handler.setFormatter(logging.Formatter("%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


REGION_LOGGER = _init_region_logger()


def log_event(event: str, **fields: Any) -> None:
    """``event | k=v ...`` on the region log; empty values are left out."""
    if not REGION_LOGGER.isEnabledFor(logging.INFO):
        return
    pairs = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None and v != "")
    if pairs:
        REGION_LOGGER.info("%s | %s", event, pairs)
    else:
        REGION_LOGGER.info("%s", event)


PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Solved | Error
    "day": "",                 # day12 | day08
    "regions_total": 0,
    "region": "",              # region being solved, e.g. "#3 12x5: 1 0 1"
    "board": "",               # e.g. "12 × 5"
    "percent": 0.0,
    "regions_done": 0,
    "solved": 0,               # tileable regions so far
    "elapsed_start": None,
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "ok": None,
    "result_url": "",
    "run_id": 0,
}

_BLANK = dict(PROGRESS)

# wall-clock marks for the region log, never exposed to pollers
_TIMING: Dict[str, Any] = {"run": None, "day": "", "day_start": None, "region": "", "region_start": None}


def _now() -> float:
    return time.time()


def _since(start: Optional[float], now: float) -> Optional[str]:
    if start is None:
        return None
    return f"{max(0.0, now - start):.2f}s"


def _fmt_elapsed(seconds: float) -> str:
    total = int(max(0.0, float(seconds)))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}h {m}m"
    if m:
        return f"{m}m {s}s"
    return f"{s}s"


# ---------- persistence ----------

def _mirror_locked() -> None:
    global _LAST_STATE_MTIME
    if STATE_FILE is None:
        return
    tmp = STATE_FILE.with_name(STATE_FILE.name + ".tmp")
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(json.dumps(PROGRESS, separators=(",", ":")), encoding="utf-8")
        tmp.replace(STATE_FILE)
        _LAST_STATE_MTIME = STATE_FILE.stat().st_mtime
    except OSError as exc:
        log.warning("progress state not mirrored to %s: %s", STATE_FILE, exc)


def _refresh_locked(force: bool = False) -> None:
    """Pull in a newer state file written by another process."""
    global _LAST_STATE_MTIME
    if STATE_FILE is None:
        return
    try:
        mtime = STATE_FILE.stat().st_mtime
        if not force and mtime <= _LAST_STATE_MTIME:
            return
        data = json.loads(STATE_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return
    if isinstance(data, dict):
        PROGRESS.update({k: data[k] for k in PROGRESS if k in data})
        _LAST_STATE_MTIME = mtime


# ---------- region log transitions ----------

def _close_region_locked(now: float, why: str) -> None:
    label = _TIMING["region"]
    if not label:
        return
    log_event("Region finished", day=_TIMING["day"], region=label,
              duration=_since(_TIMING["region_start"], now), why=why)
    _TIMING.update(region="", region_start=None)


def _enter_region_locked(label: str) -> None:
    if label == _TIMING["region"]:
        return
    now = _now()
    _close_region_locked(now, "next")
    if label:
        _TIMING.update(region=label, region_start=now)
        log_event("Region started", day=_TIMING["day"], region=label)


def _enter_day_locked(day: str) -> None:
    if day == _TIMING["day"]:
        return
    now = _now()
    _close_region_locked(now, "day_change")
    if _TIMING["day"]:
        log_event("Day finished", day=_TIMING["day"], duration=_since(_TIMING["day_start"], now))
    _TIMING.update(day=day, day_start=now if day else None)
    if day:
        log_event("Day started", day=day)


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS["elapsed_start"]
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)


# ---------- run lifecycle ----------

def reset() -> None:
    with PROGRESS_LOCK:
        _close_region_locked(_now(), "reset")
        run_id = int(PROGRESS.get("run_id") or 0) + 1
        PROGRESS.update(_BLANK, run_id=run_id)
        _TIMING.update(run=None, day="", day_start=None, region="", region_start=None)
        log_event("Progress reset", run_id=run_id)
        _mirror_locked()


def start_timer() -> None:
    with PROGRESS_LOCK:
        now = _now()
        PROGRESS.update(elapsed_start=now, elapsed=0.0)
        _TIMING["run"] = now
        _mirror_locked()


def _clamp_pct(v: Any) -> float:
    try:
        return max(0.0, min(100.0, float(v)))
    except (TypeError, ValueError):
        return 0.0


def _count(v: Any) -> int:
    try:
        return max(0, int(v))
    except (TypeError, ValueError):
        return 0


def _text(v: Any) -> str:
    return "" if v is None else str(v)


_COERCE: Dict[str, Callable[[Any], Any]] = {
    "status": _text,
    "day": _text,
    "regions_total": _count,
    "region": _text,
    "board": _text,
    "percent": _clamp_pct,
    "regions_done": _count,
    "solved": _count,
    "elapsed": lambda v: max(0.0, float(v or 0.0)),
    "message": _text,
    "result_url": _text,
}


def update(**fields: Any) -> None:
    """Set several fields at once; unknown keys are ignored."""
    with PROGRESS_LOCK:
        for key, value in fields.items():
            coerce = _COERCE.get(key)
            if coerce is None:
                continue
            PROGRESS[key] = coerce(value)
            if key == "day":
                _enter_day_locked(PROGRESS["day"])
            elif key == "region":
                _enter_region_locked(PROGRESS["region"])
        if "percent" in fields:
            _touch_elapsed_locked()
        _mirror_locked()


def set_status(v: Any) -> None:
    update(status=v)


def set_result_url(v: Any) -> None:
    update(result_url=v)


def set_done(ok: Any = None, *, reason: Any = None) -> None:
    """Mark the run complete.

    ``ok`` decides the final status when given; otherwise a run still marked
    Idle or Solving is taken as solved.  ``reason`` lands in ``message``.
    """
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        now = _now()
        if ok is not None:
            PROGRESS["ok"] = bool(ok)
            PROGRESS["status"] = "Solved" if ok else "Error"
        elif PROGRESS["status"] in ("", "Idle", "Solving"):
            PROGRESS.update(status="Solved", ok=True)
        if reason is not None:
            PROGRESS["message"] = str(reason)
        PROGRESS.update(percent=100.0, done=True)

        _close_region_locked(now, "run_complete")
        log_event(
            "Run finished",
            status=PROGRESS["status"],
            ok=PROGRESS["ok"],
            duration=_since(_TIMING["run"], now),
            regions=PROGRESS["regions_done"],
            solved=PROGRESS["solved"],
            message=PROGRESS["message"],
        )
        _TIMING.update(run=None, day_start=None)
        _mirror_locked()


# ---------- snapshots ----------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _refresh_locked()
        _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
        snap["elapsed_str"] = _fmt_elapsed(PROGRESS["elapsed"])
        return snap


# /progress3 serves this
as_json = snapshot


with PROGRESS_LOCK:
    _refresh_locked(force=True)
