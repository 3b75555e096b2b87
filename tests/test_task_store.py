# tests/test_task_store.py

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from task_tracker.tasks import task_store as task_store_mod
from task_tracker.tasks.task_models import CorruptStoreError, Task, TaskStatus
from task_tracker.tasks.task_service import TaskService
from task_tracker.tasks.task_store import TaskStore

T0 = datetime(2026, 10, 19, 8, 30, 0, tzinfo=UTC)


def _task(task_id: int, description: str = "x", status: TaskStatus = TaskStatus.TODO) -> Task:
    return Task(
        id=task_id,
        description=description,
        status=status,
        created_at=T0,
        updated_at=T0 + timedelta(minutes=task_id),
    )


def test_missing_file_loads_empty(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "nope.json")
    assert store.load() == {}
    assert store.load_state() == ({}, 1)
    assert not (tmp_path / "nope.json").exists()


def test_save_then_load_returns_equal_tasks(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    tasks = {1: _task(1, "Buy groceries"), 2: _task(2, "Cook", TaskStatus.DONE)}

    store.save(tasks)

    assert store.load() == tasks
    assert list(store.load()) == [1, 2]


def test_file_format(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    TaskStore(path).save({1: _task(1, "Buy groceries")}, next_id=4)

    data = json.loads(path.read_text("utf-8"))
    assert data == {
        "next_id": 4,
        "tasks": [
            {
                "id": 1,
                "description": "Buy groceries",
                "status": "todo",
                "createdAt": "2026-10-19T08:30:00+00:00",
                "updatedAt": "2026-10-19T08:31:00+00:00",
            }
        ],
    }


def test_persistence_is_idempotent(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    # Hand-written legacy file: bare list, naive timestamps, unusual order.
    path.write_text(
        json.dumps(
            [
                {
                    "id": 5,
                    "description": "Пить чай",
                    "status": "in-progress",
                    "createdAt": "2026-01-02T03:04:05",
                    "updatedAt": "2026-01-02T03:04:05.250000",
                },
                {
                    "id": 2,
                    "description": "Second",
                    "status": "done",
                    "createdAt": "2026-01-01T00:00:00+02:00",
                    "updatedAt": "2026-01-01T00:00:00+02:00",
                },
            ]
        ),
        "utf-8",
    )
    store = TaskStore(path)

    store.save(store.load())
    first = path.read_text("utf-8")
    store.save(store.load())
    second = path.read_text("utf-8")

    assert first == second
    assert list(store.load()) == [5, 2]


def test_order_of_file_is_preserved(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    store.save({3: _task(3), 1: _task(1), 2: _task(2)})
    assert list(store.load()) == [3, 1, 2]


def test_next_id_high_water_mark(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")

    store.save({}, next_id=7)
    assert store.load_state() == ({}, 7)

    # next_id can never fall behind the existing ids.
    store.save({10: _task(10)}, next_id=3)
    _, next_id = store.load_state()
    assert next_id == 11


def test_save_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "a" / "b" / "tasks.json"
    TaskStore(path).save({1: _task(1)})
    assert path.exists()


def test_save_leaves_no_temp_file(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    store.save({1: _task(1)})
    assert sorted(p.name for p in tmp_path.iterdir()) == ["tasks.json"]


def test_failed_replace_keeps_old_content(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    store.save({1: _task(1, "old")})
    before = path.read_text("utf-8")

    def boom(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(task_store_mod.os, "replace", boom)

    with pytest.raises(OSError):
        store.save({1: _task(1, "new")})

    assert path.read_text("utf-8") == before
    assert not (tmp_path / "tasks.json.tmp").exists()


def test_read_failure_is_os_error(tmp_path: Path) -> None:
    # A directory where the file should be: reading fails with an OSError.
    path = tmp_path / "tasks.json"
    path.mkdir()
    with pytest.raises(OSError):
        TaskStore(path).load()


def _record(**overrides):
    rec = {
        "id": 1,
        "description": "ok",
        "status": "todo",
        "createdAt": "2026-10-19T08:30:00+00:00",
        "updatedAt": "2026-10-19T08:30:00+00:00",
    }
    rec.update(overrides)
    return rec


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '"just a string"',
        '{"tasks": {}}',
        '{"next_id": 0, "tasks": []}',
        json.dumps([_record(), _record()]),
        json.dumps([_record(id=0)]),
        json.dumps([_record(id="1")]),
        json.dumps([_record(id=True)]),
        json.dumps([_record(description="   ")]),
        json.dumps([_record(status="blocked")]),
        json.dumps([_record(createdAt="yesterday")]),
        json.dumps([_record(updatedAt=None)]),
        json.dumps([_record(updatedAt="2026-10-19T08:00:00+00:00")]),
        json.dumps([42]),
    ],
)
def test_malformed_content_is_corrupt(tmp_path: Path, content: str) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(content, "utf-8")

    with pytest.raises(CorruptStoreError) as excinfo:
        TaskStore(path).load()

    assert excinfo.value.path == path


def test_non_utf8_file_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(CorruptStoreError):
        TaskStore(path).load()


def test_round_trip_keeps_next_id_after_deleting_newest(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    service = TaskService(store)
    service.add("a")
    service.add("b")
    assert service.delete(2)
    before = store.path.read_text("utf-8")
    assert json.loads(before)["next_id"] == 3

    store.save(store.load())

    assert store.path.read_text("utf-8") == before
    assert service.add("c") == 3


def test_save_without_next_id_never_lowers_stored_mark(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    store.save({1: _task(1)}, next_id=9)

    store.save({})

    assert store.load_state() == ({}, 9)


def test_save_without_next_id_refuses_to_overwrite_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("{broken", "utf-8")

    with pytest.raises(CorruptStoreError):
        TaskStore(path).save({})

    assert path.read_text("utf-8") == "{broken"
