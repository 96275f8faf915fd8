import json
import threading

from loguru import logger

from conftest import make_record
from core.wallet.storage import SecretRecord, WalletStorage


def test_missing_file_reads_as_empty(storage):
    assert storage.list_all() == []
    assert storage.find_by_id("nope") is None


def test_append_keeps_insertion_order(storage):
    for wallet_id in ["c", "a", "b"]:
        storage.append(make_record(wallet_id))

    assert [r.id for r in storage.list_all()] == ["c", "a", "b"]
    assert storage.find_by_id("a").id == "a"
    assert storage.find_by_id("z") is None


def test_persisted_record_format(storage):
    record = make_record("w1", name="Main")
    storage.append(record)

    data = json.loads(storage.path.read_text())
    assert data == [
        {
            "id": "w1",
            "name": "Main",
            "encryptedSecret": "AAAA",
            "publicAddresses": record.public_addresses,
            "createdAt": record.created_at,
        }
    ]
    # Survives a fresh store instance
    assert WalletStorage(storage.path).list_all() == [record]


def test_corrupted_file_reads_as_empty_and_is_left_alone(storage):
    storage.path.write_text("{not json")
    levels = []
    sink_id = logger.add(lambda message: levels.append(message.record["level"].name))
    try:
        assert storage.list_all() == []
    finally:
        logger.remove(sink_id)

    assert storage.path.read_text() == "{not json"
    assert levels == ["WARNING"]


def test_append_over_corrupted_file_keeps_earlier_records(storage):
    storage.append(make_record("w1"))
    storage.append(make_record("w2"))
    original = storage.path.read_text()
    storage.path.write_text(original[:-1])

    storage.append(make_record("w3"))

    assert [r.id for r in storage.list_all()] == ["w3"]
    moved = list(storage.path.parent.glob("wallets.json.corrupt-*"))
    assert len(moved) == 1
    assert moved[0].read_text() == original[:-1]
    assert '"w1"' in moved[0].read_text()
    assert '"w2"' in moved[0].read_text()


def test_record_round_trips_through_dict():
    record = make_record("w1")
    assert SecretRecord.from_dict(record.to_dict()) == record


def test_public_view_has_no_secret():
    view = make_record("w1").public_view()
    assert "encryptedSecret" not in view
    assert "encrypted_secret" not in view
    assert view["addresses"]["ethereum"].startswith("0x")


def test_concurrent_appends_are_not_lost(storage):
    threads = [
        threading.Thread(target=storage.append, args=(make_record(f"w{i}"),))
        for i in range(20)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(storage.list_all()) == 20
