"""
Linalyze — Local JSON storage for settings and saved solving sessions.

Data is persisted in ``<project>/data/linalyze.json``.  A session is stored
as its initial matrix plus the ordered row operations of its timeline and
is rebuilt by replaying them, which reproduces every snapshot exactly.
"""

import json
import logging
import os
import time
import uuid
from datetime import datetime
from typing import Optional

from linalyze.models import VARIABLE_NAMES, EliminationMode, SolverConfig
from linalyze.timeline import TimelineStateMachine, session_from_dict, session_to_dict

logger = logging.getLogger(__name__)

_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "data")
_DATA_FILE = os.path.join(_DATA_DIR, "linalyze.json")

_MAX_SESSIONS = 100

# ── Default settings ────────────────────────────────────────────────────
DEFAULT_SETTINGS = {
    "partial_pivoting": True,
    "mode": "rref",                # "ref" or "rref"
    "step_delay_ms": 1200,         # auto-solve cadence at speed 1
    "speed": 1.0,
    "variables": list(VARIABLE_NAMES),
}


def _empty_db() -> dict:
    return {"settings": dict(DEFAULT_SETTINGS), "sessions": []}


def _ensure_dir() -> None:
    os.makedirs(_DATA_DIR, exist_ok=True)


def _load_db() -> dict:
    _ensure_dir()
    if os.path.exists(_DATA_FILE):
        try:
            with open(_DATA_FILE, "r", encoding="utf-8") as f:
                db = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("discarding unreadable data file %s: %s", _DATA_FILE, e)
            return _empty_db()
        if isinstance(db, dict):
            db.setdefault("settings", dict(DEFAULT_SETTINGS))
            db.setdefault("sessions", [])
            return db
        logger.warning("discarding malformed data file %s", _DATA_FILE)
    return _empty_db()


def _save_db(db: dict) -> None:
    _ensure_dir()
    with open(_DATA_FILE, "w", encoding="utf-8") as f:
        json.dump(db, f, indent=2, ensure_ascii=False)


# ── Settings ─────────────────────────────────────────────────────────────

def get_settings() -> dict:
    """Return stored settings merged over the defaults."""
    merged = dict(DEFAULT_SETTINGS)
    merged.update(_load_db().get("settings", {}))
    return merged


def save_settings(settings: dict) -> None:
    mode = settings.get("mode", DEFAULT_SETTINGS["mode"])
    if mode not in ("ref", "rref"):
        raise ValueError(f"Unknown elimination mode: {mode!r}")
    if float(settings.get("speed", 1.0)) <= 0:
        raise ValueError("Playback speed must be positive.")
    db = _load_db()
    db["settings"] = settings
    _save_db(db)


def get_solver_config(settings: Optional[dict] = None) -> SolverConfig:
    if settings is None:
        settings = get_settings()
    return SolverConfig(
        partial_pivoting=bool(settings.get("partial_pivoting", True)),
        mode=EliminationMode(settings.get("mode", "rref")),
    )


# ── Sessions ─────────────────────────────────────────────────────────────

def save_session(name: str, timeline: TimelineStateMachine) -> str:
    """Store *timeline* under *name* and return the new session id."""
    name = name.strip()
    if not name:
        raise ValueError("Session name cannot be empty.")
    db = _load_db()
    record = {
        "id": uuid.uuid4().hex,
        "name": name,
        "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "epoch": time.time(),
        **session_to_dict(timeline),
    }
    db["sessions"].insert(0, record)  # newest first
    db["sessions"] = db["sessions"][:_MAX_SESSIONS]
    _save_db(db)
    logger.info("saved session %s (%d operations)", record["id"], len(record["operations"]))
    return record["id"]


def list_sessions() -> list[dict]:
    """Summaries of the saved sessions, newest first."""
    return [
        {
            "id": s["id"],
            "name": s["name"],
            "timestamp": s["timestamp"],
            "steps": len(s.get("operations", [])),
        }
        for s in _load_db()["sessions"]
    ]


def load_session(session_id: str) -> Optional[TimelineStateMachine]:
    """Rebuild a saved session's timeline, or ``None`` if the id is unknown."""
    for record in _load_db()["sessions"]:
        if record["id"] == session_id:
            return session_from_dict(record)
    return None


def delete_session(session_id: str) -> bool:
    db = _load_db()
    before = len(db["sessions"])
    db["sessions"] = [s for s in db["sessions"] if s["id"] != session_id]
    if len(db["sessions"]) == before:
        return False
    _save_db(db)
    return True


def clear_all_data() -> None:
    _save_db(_empty_db())
