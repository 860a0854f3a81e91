# tests/test_bootstrap.py

from __future__ import annotations

import re
from unittest.mock import MagicMock

import pytest

import pb_bootstrap
from pb_bootstrap import spec_tasks, upsert_collection


def test_tasks_schema_fields() -> None:
    spec = spec_tasks("tasks")
    fields = {f["name"]: f for f in spec["schema"]}
    assert set(fields) == {"text", "completed", "deadline"}
    assert fields["text"]["required"] is True
    assert fields["completed"]["type"] == "bool"
    assert spec["listRule"] == ""


@pytest.mark.parametrize("value", ["2026-10-21T14:30", "2026-10-21 14:30", "2026-10-21T14:30:15"])
def test_deadline_pattern_accepts_stored_format(value: str) -> None:
    pattern = next(f for f in spec_tasks()["schema"] if f["name"] == "deadline")["options"]["pattern"]
    assert re.match(pattern, value)


def test_upsert_creates_missing_collection() -> None:
    pb = MagicMock()
    pb.get_collection.return_value = None
    pb.create_collection.return_value = {"id": "pbc_1", "name": "tasks"}

    assert upsert_collection(pb, spec_tasks()) == {"id": "pbc_1", "name": "tasks"}
    pb.update_collection.assert_not_called()


def test_upsert_patches_existing_by_id() -> None:
    pb = MagicMock()
    pb.get_collection.return_value = {"id": "pbc_1", "name": "tasks"}

    upsert_collection(pb, spec_tasks())

    cid, payload = pb.update_collection.call_args.args
    assert cid == "pbc_1"
    assert payload["id"] == "pbc_1" and payload["name"] == "tasks"


def test_main_requires_admin_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PB_ADMIN_EMAIL", raising=False)
    monkeypatch.delenv("PB_ADMIN_PASSWORD", raising=False)
    monkeypatch.setattr(pb_bootstrap, "setup_logging", lambda **kw: None)
    with pytest.raises(SystemExit):
        pb_bootstrap.main()
