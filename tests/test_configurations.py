import json
import threading
import time

import pytest
from sqlalchemy.exc import OperationalError

from teamroles.errors import ConfigurationNotFound, StorageError, ValidationCode, ValidationError
from teamroles.extensions import db
from teamroles.models import BlobEntry
from teamroles.roster import Participant, Role
from teamroles.services.configurations import (
    STORAGE_KEY,
    ConfigurationStore,
    JsonFileBlobStore,
    MemoryBlobStore,
    SqlBlobStore,
)
from tests.utils import make_participants, make_roles


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def store(blobs):
    return ConfigurationStore(blobs)


def test_save_then_load_round_trip(store):
    participants = make_participants("Alice", "Bob")
    roles = make_roles("Lead", "Dev")

    saved = store.save("  Sprint team ", participants, roles)
    assert saved.name == "Sprint team"
    assert saved.saved_at

    members, loaded_roles = store.load(saved.id)
    assert members == participants
    assert loaded_roles == roles


def test_saved_copy_is_independent_of_live_lists(store):
    participants = make_participants("Alice")
    roles = make_roles("Lead")
    saved = store.save("A", participants, roles)

    participants.append(Participant(id="x", name="Mallory"))
    roles.clear()

    members, loaded_roles = store.load(saved.id)
    assert [m.name for m in members] == ["Alice"]
    assert [r.name for r in loaded_roles] == ["Lead"]

    # the lists handed out by load are copies too
    members.append(Participant(id="y", name="Eve"))
    assert len(store.load(saved.id)[0]) == 1


@pytest.mark.parametrize("name", ["", "   ", None])
def test_save_requires_name(store, blobs, name):
    with pytest.raises(ValidationError) as excinfo:
        store.save(name, make_participants("A"), make_roles("X"))
    assert excinfo.value.code is ValidationCode.EMPTY_NAME
    assert store.list() == []
    assert blobs.data == {}


@pytest.mark.parametrize(
    "participants,roles",
    [([], make_roles("X")), (make_participants("A"), []), ([], [])],
)
def test_save_requires_members_and_roles(store, participants, roles):
    with pytest.raises(ValidationError) as excinfo:
        store.save("Team", participants, roles)
    assert excinfo.value.code is ValidationCode.EMPTY_CONFIGURATION


def test_list_in_save_order_and_names_may_repeat(store):
    for name in ("One", "Two", "One"):
        store.save(name, make_participants("A"), make_roles("X"))
    assert [c.name for c in store.list()] == ["One", "Two", "One"]
    assert len({c.id for c in store.list()}) == 3


def test_delete_removes_only_target(store):
    first = store.save("First", make_participants("A"), make_roles("X"))
    second = store.save("Second", make_participants("B"), make_roles("Y"))
    third = store.save("Third", make_participants("C"), make_roles("Z"))

    store.delete(second.id)
    assert [c.id for c in store.list()] == [first.id, third.id]

    store.delete("missing")
    assert [c.id for c in store.list()] == [first.id, third.id]


def test_load_unknown_id(store):
    with pytest.raises(ConfigurationNotFound):
        store.load("nope")
    assert store.get("nope") is None


def test_persisted_layout(store, blobs):
    alice = Participant(id="1", name="Alice", assigned_role="Lead")
    saved = store.save("Team", [alice], [Role(id="2", name="Lead")])

    records = json.loads(blobs.data[STORAGE_KEY])
    assert records == [
        {
            "id": saved.id,
            "name": "Team",
            "teamMembers": [{"id": "1", "name": "Alice", "assignedRole": "Lead"}],
            "roles": [{"id": "2", "name": "Lead"}],
            "date": saved.saved_at,
        }
    ]


def test_reads_existing_blob_on_first_access():
    raw = json.dumps(
        [
            {
                "id": "1700000000000",
                "name": "Legacy",
                "teamMembers": [{"id": "a", "name": "Ann"}],
                "roles": [{"id": "b", "name": "Scribe"}],
                "date": "11/14/2023",
            }
        ]
    )
    store = ConfigurationStore(MemoryBlobStore({STORAGE_KEY: raw}))

    (legacy,) = store.list()
    assert legacy.name == "Legacy"
    assert legacy.saved_at == "11/14/2023"
    assert legacy.participants[0].assigned_role is None


def test_blob_read_once_then_flushed_in_full(blobs):
    store = ConfigurationStore(blobs)
    store.list()
    # outside writes after the first read are not picked up
    blobs.put(STORAGE_KEY, json.dumps([{"id": "z", "name": "Outside", "teamMembers": [], "roles": []}]))
    assert store.list() == []

    store.save("Mine", make_participants("A"), make_roles("X"))
    assert [r["name"] for r in json.loads(blobs.data[STORAGE_KEY])] == ["Mine"]

    store.reload()
    assert [c.name for c in store.list()] == ["Mine"]


def test_unreadable_blob_treated_as_empty():
    store = ConfigurationStore(MemoryBlobStore({STORAGE_KEY: "{not json"}))
    assert store.list() == []


class FailingBlobStore(MemoryBlobStore):
    def put(self, key, value):
        raise OSError("quota exceeded")


def test_write_failure_keeps_previous_state():
    blobs = FailingBlobStore()
    store = ConfigurationStore(blobs)

    with pytest.raises(StorageError):
        store.save("Team", make_participants("A"), make_roles("X"))
    assert store.list() == []


def test_json_file_blob_store(tmp_path):
    path = tmp_path / "data" / "saved.json"
    store = ConfigurationStore(JsonFileBlobStore(path))
    saved = store.save("Team", make_participants("A", "B"), make_roles("X"))

    reopened = ConfigurationStore(JsonFileBlobStore(path))
    assert [c.id for c in reopened.list()] == [saved.id]
    assert STORAGE_KEY in json.loads(path.read_text(encoding="utf-8"))


def test_sql_blob_store(app):
    with app.app_context():
        store = ConfigurationStore(SqlBlobStore())
        saved = store.save("Team", make_participants("A"), make_roles("X"))

        entry = db.session.get(BlobEntry, STORAGE_KEY)
        assert json.loads(entry.value)[0]["id"] == saved.id
        assert ConfigurationStore(SqlBlobStore()).list()[0].name == "Team"


def test_sql_write_failure_maps_to_storage_error(app, monkeypatch):
    def boom(key, value):
        raise OperationalError("UPDATE blob_entries", {}, Exception("database is locked"))

    with app.app_context():
        store = ConfigurationStore(SqlBlobStore())
        monkeypatch.setattr(BlobEntry, "write", boom)
        with pytest.raises(StorageError):
            store.save("Team", make_participants("A"), make_roles("X"))
        assert store.list() == []


class SlowBlobStore(MemoryBlobStore):
    def put(self, key, value):
        time.sleep(0.05)
        super().put(key, value)


def test_concurrent_saves_are_all_kept():
    store = ConfigurationStore(SlowBlobStore())
    start = threading.Barrier(4)

    def save(n):
        start.wait()
        store.save(f"T{n}", make_participants("A"), make_roles("X"))

    threads = [threading.Thread(target=save, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(c.name for c in store.list()) == ["T0", "T1", "T2", "T3"]
    assert len(json.loads(store.blob_store.data[STORAGE_KEY])) == 4


def test_concurrent_save_and_delete():
    blobs = SlowBlobStore()
    store = ConfigurationStore(blobs)
    doomed = store.save("Doomed", make_participants("A"), make_roles("X"))
    start = threading.Barrier(2)

    def save():
        start.wait()
        store.save("Kept", make_participants("B"), make_roles("Y"))

    def delete():
        start.wait()
        store.delete(doomed.id)

    threads = [threading.Thread(target=save), threading.Thread(target=delete)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert [c.name for c in store.list()] == ["Kept"]
    assert [r["name"] for r in json.loads(blobs.data[STORAGE_KEY])] == ["Kept"]


def test_json_file_holding_a_list_reads_as_empty(tmp_path):
    path = tmp_path / "saved.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    store = ConfigurationStore(JsonFileBlobStore(path))
    assert store.list() == []


def test_json_file_holding_a_list_fails_save_cleanly(tmp_path):
    path = tmp_path / "saved.json"
    path.write_text('["not", "an", "object"]', encoding="utf-8")
    store = ConfigurationStore(JsonFileBlobStore(path))

    with pytest.raises(StorageError):
        store.save("Team", make_participants("A"), make_roles("X"))
    assert store.list() == []
    assert json.loads(path.read_text(encoding="utf-8")) == ["not", "an", "object"]
