import json
from pathlib import Path

import pytest

from courier_desk.models.domain import CourierEntry, CourierStatus, GoogleDriveTokens, SteadfastCredentials
from courier_desk.persistence.filesystem import FileStorage
from courier_desk.persistence.store import EntryStore, entry_from_dict, entry_to_dict


def _entry(entry_id: str, **overrides) -> CourierEntry:
    values = dict(
        id=entry_id,
        invoice=f"INV-{entry_id}",
        recipient_name="Rahim",
        recipient_phone="01712345678",
        recipient_address="Dhaka",
        cod_amount=500,
        note="",
        status=CourierStatus.PENDING,
        created_at="2024-01-10T10:00:00Z",
    )
    values.update(overrides)
    return CourierEntry(**values)


@pytest.fixture
def store(tmp_path: Path) -> EntryStore:
    return EntryStore(path=tmp_path / "state.json", storage=FileStorage(root=tmp_path)).hydrate()


def test_file_storage_round_trips_json(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    target = storage.path_for("state.json")

    storage.write_json(target, {"hello": "world"})

    assert target.read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert storage.read_json(target) == {"hello": "world"}
    assert not (tmp_path / ".state.json.tmp").exists()


def test_file_storage_missing_file_reads_as_none(tmp_path: Path) -> None:
    assert FileStorage(root=tmp_path).read_json(tmp_path / "absent.json") is None


def test_hydrate_missing_file_gives_empty_state(store: EntryStore) -> None:
    assert store.entries == []
    assert store.credentials is None
    assert store.google_tokens is None


def test_hydrate_corrupt_file_gives_empty_state(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    store = EntryStore(path=path, storage=FileStorage(root=tmp_path)).hydrate()

    assert store.entries == []


def test_hydrate_skips_malformed_entries(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps({"entries": [{"invoice": "no id"}, entry_to_dict(_entry("ok"))], "credentials": "bad"}),
        encoding="utf-8",
    )

    store = EntryStore(path=path, storage=FileStorage(root=tmp_path)).hydrate()

    assert [entry.id for entry in store.entries] == ["ok"]
    assert store.credentials is None


def test_mutations_persist_immediately(store: EntryStore, tmp_path: Path) -> None:
    store.set_credentials(SteadfastCredentials(api_key="k", secret_key="s"))
    store.add_entry(_entry("1"))
    store.add_entry(_entry("2"))
    store.set_google_tokens(GoogleDriveTokens(access_token="a", refresh_token="r", expiry_date=123))

    reloaded = EntryStore(path=store.path, storage=FileStorage(root=tmp_path)).hydrate()

    assert [entry.id for entry in reloaded.entries] == ["2", "1"]
    assert reloaded.credentials == SteadfastCredentials(api_key="k", secret_key="s")
    assert reloaded.google_tokens == GoogleDriveTokens(access_token="a", refresh_token="r", expiry_date=123)
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["credentials"] == {"apiKey": "k", "secretKey": "s"}


def test_update_entry(store: EntryStore) -> None:
    store.add_entry(_entry("1"))

    updated = store.update_entry("1", status=CourierStatus.DELIVERED)

    assert updated is not None
    assert updated.status == CourierStatus.DELIVERED
    assert store.get_entry("1").status == CourierStatus.DELIVERED
    assert store.update_entry("missing", status="cancelled") is None


@pytest.mark.parametrize("field", ["note", "invoice", "cod_amount", "consignment_id"])
def test_update_entry_only_changes_status(store: EntryStore, field: str) -> None:
    store.add_entry(_entry("1"))

    with pytest.raises(ValueError):
        store.update_entry("1", **{field: "changed"})
    assert store.get_entry("1") == _entry("1")


def test_delete_and_clear_entries(store: EntryStore) -> None:
    store.add_entry(_entry("1"))
    store.add_entry(_entry("2"))

    assert store.delete_entry("1") is True
    assert store.delete_entry("1") is False
    store.clear_entries()
    assert store.entries == []


def test_import_entries_keeps_existing_unmodified(store: EntryStore) -> None:
    store.add_entry(_entry("1", note="original"))

    added = store.import_entries([_entry("1", note="from backup"), _entry("2"), _entry("2")])

    assert added == 1
    assert store.get_entry("1").note == "original"
    assert [entry.id for entry in store.entries] == ["2", "1"]


def test_entry_from_dict_coerces_fields() -> None:
    entry = entry_from_dict({"id": 7, "cod_amount": "250", "status": "Delivered", "consignment_id": 99})

    assert entry.id == "7"
    assert entry.cod_amount == 250
    assert entry.status == CourierStatus.DELIVERED
    assert entry.consignment_id == "99"
    with pytest.raises(ValueError):
        entry_from_dict({"invoice": "x"})
