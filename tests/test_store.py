import logging

import pytest

from trafficreg.data.store import (
    DuplicateIdError,
    NotFoundError,
    SignalStore,
    open_store,
)
from trafficreg.records.models import SignalRecord


def test_distinct_registrations_are_all_retrievable(store):
    ids = [5, 3, 11, 8, 1]
    for n, signal_id in enumerate(ids):
        store.register(signal_id, f"Loc {signal_id}", n * 20, 30 + n)

    assert len(store) == len(ids)
    assert [r.id for r in store.list()] == ids
    for signal_id in ids:
        assert store.find(signal_id).location == f"Loc {signal_id}"


def test_register_persists_full_collection(store, data_file):
    store.register(1, "Main St", 50, 30)
    store.register(2, "Oak Ave", 90, 45)

    assert data_file.read_text(encoding="utf-8") == (
        "1,Main St,50,30,0\n"
        "2,Oak Ave,90,45,1\n"
    )


def test_duplicate_registration_leaves_store_unchanged(store, data_file):
    store.register(1, "A", 10, 10)
    before = data_file.read_text(encoding="utf-8")

    with pytest.raises(DuplicateIdError) as info:
        store.register(1, "B", 20, 20)

    assert info.value.signal_id == 1
    assert store.list() == [SignalRecord(id=1, location="A", density=10, timing=10)]
    assert data_file.read_text(encoding="utf-8") == before


def test_main_street_lifecycle(store):
    record = store.register(1, "Main St", 50, 30)
    assert record.congested is False

    store.update_density(1, 90)
    record = store.find(1)
    assert record.congested is True
    assert record.timing == 30

    store.update_timing(1, 45)
    record = store.find(1)
    assert record.density == 90
    assert record.timing == 45

    store.delete(1)
    assert store.find(1) is None
    assert 1 not in store


@pytest.mark.parametrize("density", [-1, 0, 80, 81, 100, 1000])
def test_density_update_recomputes_congestion(store, density):
    store.register(1, "X", 0, 10)

    record = store.update_density(1, density)

    assert record.congested is (density > 80)


def test_updates_accept_out_of_range_values(store, data_file):
    store.register(1, "X", 0, 10)

    store.update_density(1, 150)
    store.update_timing(1, -5)

    assert data_file.read_text(encoding="utf-8") == "1,X,150,-5,1\n"


def test_updates_against_absent_id_raise(seeded_store):
    before = seeded_store.list()

    with pytest.raises(NotFoundError):
        seeded_store.update_density(99, 10)
    with pytest.raises(NotFoundError):
        seeded_store.update_timing(99, 10)

    assert seeded_store.list() == before


def test_delete_preserves_order_of_remaining(seeded_store, data_file):
    removed = seeded_store.delete(2)

    assert removed.id == 2
    assert [r.id for r in seeded_store.list()] == [1, 3]
    assert data_file.read_text(encoding="utf-8").splitlines() == [
        "1,Main St,50,30,0",
        "3,5th & Pine,20,25,0",
    ]


def test_delete_absent_id_changes_nothing(seeded_store):
    before = seeded_store.list()

    with pytest.raises(NotFoundError) as info:
        seeded_store.delete(42)

    assert info.value.signal_id == 42
    assert seeded_store.list() == before


def test_deleting_last_record_truncates_file(store, data_file):
    store.register(1, "Only", 10, 10)
    store.delete(1)

    assert data_file.exists()
    assert data_file.read_text(encoding="utf-8") == ""


def test_list_returns_a_copy(seeded_store):
    snapshot = seeded_store.list()
    snapshot.clear()

    assert len(seeded_store) == 3


def test_persist_then_load_round_trip(seeded_store, data_file):
    seeded_store.register(4, "Bridge St, east ramp", 99, 12)

    reloaded = open_store(data_file)

    assert reloaded.list() == seeded_store.list()
    assert [r.congested for r in reloaded] == [r.congested for r in seeded_store]


def test_missing_file_loads_empty(tmp_path):
    store = SignalStore(tmp_path / "nope.txt")

    assert store.load() == 0
    assert store.list() == []
    assert not (tmp_path / "nope.txt").exists()


def test_malformed_line_is_skipped_silently(data_file, caplog):
    data_file.write_text("1,Main St,50,30\n", encoding="utf-8")
    store = SignalStore(data_file)

    with caplog.at_level(logging.DEBUG, logger="trafficreg"):
        loaded = store.load()

    assert loaded == 0
    assert len(store) == 0
    skipped = [rec for rec in caplog.records if "malformed line" in rec.msg]
    assert skipped
    assert skipped[0].args[0] == 1
    assert skipped[0].line_number == 1
    assert "malformed line 1" in skipped[0].getMessage()


def test_load_keeps_good_lines_around_bad_ones(data_file):
    data_file.write_text(
        "1,Main St,50,30,0\n"
        "garbage\n"
        "2,Oak Ave,90,45,1\n",
        encoding="utf-8",
    )

    store = open_store(data_file)

    assert [r.id for r in store] == [1, 2]


def test_load_accepts_duplicate_ids(data_file):
    data_file.write_text("1,A,10,10,0\n1,B,20,20,0\n", encoding="utf-8")

    store = open_store(data_file)

    assert [r.location for r in store] == ["A", "B"]


def test_load_has_no_trailing_phantom_record(data_file):
    data_file.write_text("1,A,10,10,0\n2,B,20,20,0\n\n", encoding="utf-8")

    store = SignalStore(data_file)

    assert store.load() == 2


def test_load_replaces_in_memory_records(seeded_store, data_file):
    data_file.write_text("9,Fresh,1,1,0\n", encoding="utf-8")

    seeded_store.load()

    assert [r.id for r in seeded_store] == [9]


def test_registration_after_load_appends(data_file):
    data_file.write_text("1,A,10,10,0\n", encoding="utf-8")
    store = open_store(data_file)

    store.register(2, "B", 20, 20)

    assert [r.id for r in store] == [1, 2]
    with pytest.raises(DuplicateIdError):
        store.register(1, "again", 0, 0)


def test_undecodable_line_is_skipped_and_good_lines_load(data_file):
    data_file.write_bytes(b"1,Main St,50,30,0\n2,Caf\xe9 Sq,90,45,1\n3,Oak Ave,20,25,0\n")

    store = SignalStore(data_file)

    assert store.load() == 2
    assert [r.id for r in store] == [1, 3]


def test_location_with_line_break_survives_later_writes(store, data_file):
    store.register(1, "Main St\nNorth", 50, 30)
    store.register(2, "Oak", 50, 30)

    reloaded = open_store(data_file)

    assert [r.id for r in reloaded] == [1, 2]
    assert reloaded.find(1).location == "Main St\nNorth"

    reloaded.register(3, "Elm", 10, 10)
    assert [r.id for r in open_store(data_file)] == [1, 2, 3]


def test_stray_quote_does_not_swallow_following_lines(data_file):
    data_file.write_text(
        '1,"Main St,50,30,0\n'
        "2,Oak Ave,90,45,1\n"
        "3,Elm,20,25,0\n",
        encoding="utf-8",
    )

    store = open_store(data_file)

    assert [r.id for r in store] == [2, 3]


def _failing_write(*args, **kwargs):
    raise OSError(28, "No space left on device")


def test_failed_write_undoes_each_mutation(seeded_store, data_file, monkeypatch):
    before = seeded_store.list()
    on_disk = data_file.read_text(encoding="utf-8")
    monkeypatch.setattr(seeded_store, "persist", _failing_write)

    with pytest.raises(OSError):
        seeded_store.register(9, "New", 10, 10)
    with pytest.raises(OSError):
        seeded_store.update_density(1, 99)
    with pytest.raises(OSError):
        seeded_store.update_timing(2, 99)
    with pytest.raises(OSError):
        seeded_store.delete(3)

    assert seeded_store.list() == before
    assert seeded_store.find(1).congested is False
    assert data_file.read_text(encoding="utf-8") == on_disk
