# tests/test_resource.py

from __future__ import annotations

from pathlib import Path

import pytest

from pragmatic_tasks.storage.resource import FileResource, ResourceStore


def test_missing_file(tmp_path: Path) -> None:
    resource = FileResource(tmp_path / "nope.xml")
    assert resource.exists() is False
    assert resource.last_modified() is None
    assert resource.key == str(tmp_path / "nope.xml")


def test_write_creates_parents_and_changes_stamp(tmp_path: Path) -> None:
    resource = FileResource(tmp_path / "a" / "b" / "log.xml")
    resource.write_bytes(b"<tasklog/>")

    first = resource.last_modified()
    assert first is not None
    assert resource.read_bytes() == b"<tasklog/>"

    resource.write_bytes(b"<tasklog></tasklog>\n")
    assert resource.last_modified() != first
    # No temp files left behind.
    assert sorted(p.name for p in (tmp_path / "a" / "b").iterdir()) == ["log.xml"]


def test_store_normalizes_keys(tmp_path: Path) -> None:
    store = ResourceStore(tmp_path)

    resource = store.resource("/projects\\home/./backup.tasklog.xml")
    assert resource.key == "projects/home/backup.tasklog.xml"
    assert resource.path == tmp_path / "projects" / "home" / "backup.tasklog.xml"
    assert store.resource("projects/home/backup.tasklog.xml") == resource


@pytest.mark.parametrize("key", ["", "   ", "../x.xml", "a/../../x.xml", "/"])
def test_store_rejects_escaping_keys(tmp_path: Path, key: str) -> None:
    with pytest.raises(ValueError):
        ResourceStore(tmp_path).resource(key)
