import json
from pathlib import Path

import pytest

from linalyze import storage
from linalyze.models import AddMultiple, EliminationMode, Scale, Swap
from linalyze.timeline import TimelineStateMachine

M = [[1, 2, 3, 14], [2, 5, 6, 30], [3, 1, 1, 10]]


def _configure_tmp_db(monkeypatch, tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    data_file = data_dir / "linalyze.json"
    monkeypatch.setattr(storage, "_DATA_DIR", str(data_dir))
    monkeypatch.setattr(storage, "_DATA_FILE", str(data_file))
    return data_file


def _timeline() -> TimelineStateMachine:
    timeline = TimelineStateMachine(M)
    for op in (Swap(0, 2), Scale(0, 1 / 3), AddMultiple(1, 0, -2)):
        timeline.apply_operation(op)
    return timeline


def test_settings_get_and_save(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)

    settings = storage.get_settings()
    assert settings == storage.DEFAULT_SETTINGS

    storage.save_settings({"mode": "ref", "speed": 2.0})
    settings = storage.get_settings()
    assert settings["mode"] == "ref"
    assert settings["speed"] == 2.0
    # untouched keys fall back to the defaults
    assert settings["partial_pivoting"] is True


@pytest.mark.parametrize("bad", [{"mode": "lu"}, {"speed": 0}])
def test_save_settings_validates(monkeypatch, tmp_path: Path, bad) -> None:
    data_file = _configure_tmp_db(monkeypatch, tmp_path)
    with pytest.raises(ValueError):
        storage.save_settings(bad)
    assert not data_file.exists()


def test_get_solver_config(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)
    assert storage.get_solver_config().mode is EliminationMode.RREF

    storage.save_settings({"mode": "ref", "partial_pivoting": False})
    config = storage.get_solver_config()
    assert config.mode is EliminationMode.REF
    assert config.partial_pivoting is False


def test_save_and_load_session(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)
    timeline = _timeline()
    timeline.undo()

    sid = storage.save_session("  homework 3 ", timeline)
    restored = storage.load_session(sid)

    assert restored.state == timeline.state
    assert restored.can_redo


def test_list_sessions_newest_first(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)
    first = storage.save_session("first", TimelineStateMachine(M))
    second = storage.save_session("second", _timeline())

    sessions = storage.list_sessions()
    assert [s["id"] for s in sessions] == [second, first]
    assert sessions[0]["name"] == "second"
    assert sessions[0]["steps"] == 3
    assert sessions[1]["steps"] == 0
    assert "timestamp" in sessions[0]


def test_session_limit(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)
    monkeypatch.setattr(storage, "_MAX_SESSIONS", 3)
    for i in range(5):
        storage.save_session(f"s{i}", TimelineStateMachine(M))
    assert [s["name"] for s in storage.list_sessions()] == ["s4", "s3", "s2"]


def test_session_name_required(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)
    with pytest.raises(ValueError):
        storage.save_session("   ", TimelineStateMachine(M))


def test_unknown_session(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)
    assert storage.load_session("missing") is None
    assert storage.delete_session("missing") is False


def test_delete_session(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)
    sid1 = storage.save_session("a", TimelineStateMachine(M))
    sid2 = storage.save_session("b", TimelineStateMachine(M))

    assert storage.delete_session(sid1) is True
    sessions = storage.list_sessions()
    assert len(sessions) == 1
    assert sessions[0]["id"] == sid2


def test_clear_all_data(monkeypatch, tmp_path: Path) -> None:
    _configure_tmp_db(monkeypatch, tmp_path)

    storage.save_settings({"mode": "ref"})
    storage.save_session("a", TimelineStateMachine(M))
    storage.clear_all_data()

    assert storage.get_settings()["mode"] == "rref"
    assert storage.list_sessions() == []


def test_load_db_handles_invalid_json(monkeypatch, tmp_path: Path) -> None:
    data_file = _configure_tmp_db(monkeypatch, tmp_path)
    data_file.parent.mkdir(parents=True, exist_ok=True)
    data_file.write_text("{not-json", encoding="utf-8")

    db = storage._load_db()
    assert "settings" in db
    assert db["sessions"] == []


def test_load_db_handles_non_object(monkeypatch, tmp_path: Path) -> None:
    data_file = _configure_tmp_db(monkeypatch, tmp_path)
    data_file.parent.mkdir(parents=True, exist_ok=True)
    data_file.write_text("[1, 2, 3]", encoding="utf-8")
    assert storage._load_db() == storage._empty_db()


def test_save_db_persists_content(monkeypatch, tmp_path: Path) -> None:
    data_file = _configure_tmp_db(monkeypatch, tmp_path)
    sid = storage.save_session("persisted", _timeline())
    content = json.loads(data_file.read_text(encoding="utf-8"))
    record = content["sessions"][0]
    assert record["id"] == sid
    assert record["initial_matrix"] == M
    assert record["operations"][0] == {"type": "swap", "row1": 0, "row2": 2}
    assert record["cursor"] == 3
