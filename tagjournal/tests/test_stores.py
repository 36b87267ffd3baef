"""Store contract tests, run against both the in-memory and the SQL stores.

Every operation is owner-scoped, and every write that depends on an event
type's tags either fully applies or leaves the rows untouched.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

pytestmark = pytest.mark.integration

from tagjournal.core.errors import Conflict, EventTypeInUse, EventTypeValidation, TagsStillUsed
from tagjournal.domains.journal.schemas.journal_schemas import SearchFilter
from tagjournal.domains.journal.stores import (
    MemoryBackend,
    MemoryEventTypeStore,
    MemoryJournalEntryStore,
    SqlEventTypeStore,
    SqlJournalEntryStore,
)

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


# ==================== Fixtures ====================


@pytest.fixture(params=["memory", "sql"])
def stores(request):
    if request.param == "memory":
        backend = MemoryBackend()
        return MemoryEventTypeStore(backend), MemoryJournalEntryStore(backend)
    request.getfixturevalue("app")
    return SqlEventTypeStore(), SqlJournalEntryStore()


@pytest.fixture
def owner(request, stores):
    if isinstance(stores[0], SqlEventTypeStore):
        return request.getfixturevalue("user").id
    return uuid.uuid4()


@pytest.fixture
def stranger(request, stores):
    if isinstance(stores[0], SqlEventTypeStore):
        return request.getfixturevalue("other_user").id
    return uuid.uuid4()


@pytest.fixture
def event_types(stores):
    return stores[0]


@pytest.fixture
def entries(stores):
    return stores[1]


# ==================== Event Types ====================


def test_create_get_list_event_type(event_types, owner):
    run_id = event_types.create(owner, "Run", ["outdoor", "cardio"])
    event_types.create(owner, "Lift", ["gym"])

    record = event_types.get(owner, run_id)
    assert record.name == "Run"
    assert record.tags == ["outdoor", "cardio"]
    assert [r.name for r in event_types.list(owner)] == ["Lift", "Run"]


def test_event_types_are_owner_scoped(event_types, owner, stranger):
    run_id = event_types.create(owner, "Run", ["outdoor"])

    assert event_types.get(stranger, run_id) is None
    assert event_types.list(stranger) == []
    assert event_types.rename_and_retag(stranger, run_id, "Mine", []) is False
    assert event_types.delete(stranger, run_id) is False
    assert event_types.get(owner, run_id).name == "Run"


def test_duplicate_name_per_owner_conflicts(event_types, owner, stranger):
    event_types.create(owner, "Run", [])
    with pytest.raises(Conflict):
        event_types.create(owner, "Run", ["x"])
    # Other users may reuse the name.
    event_types.create(stranger, "Run", [])


def test_retag_widening_and_unused_removal(event_types, entries, owner):
    et_id = event_types.create(owner, "Run", ["a", "b"])
    entries.create(owner, et_id, "morning", ["a"], T0)

    assert event_types.rename_and_retag(owner, et_id, "Jog", ["a", "c"]) is True
    record = event_types.get(owner, et_id)
    assert record.name == "Jog"
    assert record.tags == ["a", "c"]


def test_retag_removing_used_tag_is_rejected_and_leaves_row(event_types, entries, owner):
    et_id = event_types.create(owner, "Run", ["a", "b", "c"])
    entries.create(owner, et_id, None, ["a"], T0)
    entries.create(owner, et_id, None, ["c"], T0 + timedelta(minutes=1))

    with pytest.raises(TagsStillUsed) as excinfo:
        event_types.rename_and_retag(owner, et_id, "Renamed", ["b"])

    assert excinfo.value.tags == ["a", "c"]
    record = event_types.get(owner, et_id)
    assert record.name == "Run"
    assert record.tags == ["a", "b", "c"]


def test_delete_blocked_while_referenced(event_types, entries, owner):
    et_id = event_types.create(owner, "Run", ["a"])
    entry_id = entries.create(owner, et_id, None, [], T0)

    with pytest.raises(EventTypeInUse):
        event_types.delete(owner, et_id)
    assert event_types.get(owner, et_id) is not None

    assert entries.delete(owner, entry_id) is True
    assert event_types.delete(owner, et_id) is True
    assert event_types.get(owner, et_id) is None


# ==================== Journal Entries ====================


def test_create_and_get_entry(event_types, entries, owner):
    et_id = event_types.create(owner, "Run", ["a", "b"])
    entry_id = entries.create(owner, et_id, "easy 5k", ["a"], T0)

    record = entries.get(owner, entry_id)
    assert record.event_type_id == et_id
    assert record.description == "easy 5k"
    assert record.tags == ["a"]
    assert record.created_at == T0


def test_create_entry_defaults_created_at(event_types, entries, owner):
    et_id = event_types.create(owner, "Run", [])
    before = datetime.now(timezone.utc) - timedelta(seconds=1)
    entry_id = entries.create(owner, et_id, None, [])
    assert entries.get(owner, entry_id).created_at >= before


def test_entry_with_disallowed_tag_persists_nothing(event_types, entries, owner):
    et_id = event_types.create(owner, "Run", ["a"])
    with pytest.raises(EventTypeValidation):
        entries.create(owner, et_id, None, ["a", "zzz"], T0)
    assert entries.search(owner, SearchFilter()) == []


def test_entry_against_foreign_or_missing_event_type(event_types, entries, owner, stranger):
    foreign_id = event_types.create(stranger, "Theirs", ["a"])
    with pytest.raises(EventTypeValidation):
        entries.create(owner, foreign_id, None, [], T0)
    with pytest.raises(EventTypeValidation):
        entries.create(owner, uuid.uuid4(), None, [], T0)


def test_update_entry_validates_against_current_tags(event_types, entries, owner):
    et_id = event_types.create(owner, "Run", ["a", "b"])
    entry_id = entries.create(owner, et_id, "first", ["a"], T0)

    assert entries.update(owner, entry_id, "second", ["b"]) is True
    record = entries.get(owner, entry_id)
    assert record.description == "second"
    assert record.tags == ["b"]

    with pytest.raises(EventTypeValidation):
        entries.update(owner, entry_id, "third", ["nope"])
    assert entries.get(owner, entry_id).description == "second"


def test_entries_are_owner_scoped(event_types, entries, owner, stranger):
    et_id = event_types.create(owner, "Run", [])
    entry_id = entries.create(owner, et_id, None, [], T0)

    assert entries.get(stranger, entry_id) is None
    assert entries.update(stranger, entry_id, "hijack", []) is False
    assert entries.delete(stranger, entry_id) is False
    assert entries.search(stranger, SearchFilter()) == []
    assert entries.get(owner, entry_id).description is None


def test_delete_missing_entry(entries, owner):
    assert entries.delete(owner, uuid.uuid4()) is False


# ==================== Search ====================


@pytest.fixture
def seeded(event_types, entries, owner):
    run_id = event_types.create(owner, "Run", ["a", "b", "c"])
    lift_id = event_types.create(owner, "Lift", ["a"])
    ids = [
        entries.create(owner, run_id, "r0", ["a", "b"], T0),
        entries.create(owner, lift_id, "l1", ["a"], T0 + timedelta(hours=1)),
        entries.create(owner, run_id, "r2", ["b", "c"], T0 + timedelta(hours=2)),
        entries.create(owner, run_id, "r3", ["a", "b", "c"], T0 + timedelta(hours=3)),
    ]
    return {"run": run_id, "lift": lift_id, "ids": ids}


def _descriptions(records):
    return [r.description for r in records]


def test_search_default_is_ascending(entries, owner, seeded):
    assert _descriptions(entries.search(owner, SearchFilter())) == ["r0", "l1", "r2", "r3"]


def test_search_descending(entries, owner, seeded):
    result = entries.search(owner, SearchFilter(sort="desc"))
    assert _descriptions(result) == ["r3", "r2", "l1", "r0"]


def test_search_by_event_type(entries, owner, seeded):
    result = entries.search(owner, SearchFilter(event_type_id=seeded["lift"]))
    assert _descriptions(result) == ["l1"]


def test_search_tags_are_superset_match(entries, owner, seeded):
    assert _descriptions(entries.search(owner, SearchFilter(tags=["b"]))) == ["r0", "r2", "r3"]
    assert _descriptions(entries.search(owner, SearchFilter(tags=["a", "c"]))) == ["r3"]


def test_search_time_bounds_are_inclusive(entries, owner, seeded):
    result = entries.search(
        owner,
        SearchFilter(after=T0 + timedelta(hours=1), before=T0 + timedelta(hours=2)),
    )
    assert _descriptions(result) == ["l1", "r2"]


def test_search_pagination(entries, owner, seeded):
    page = entries.search(owner, SearchFilter(offset=1, limit=2))
    assert _descriptions(page) == ["l1", "r2"]
    assert entries.search(owner, SearchFilter(offset=10)) == []


def test_search_tags_match_case_sensitively(event_types, entries, owner):
    et_id = event_types.create(owner, "Race", ["5K", "5k"])
    entries.create(owner, et_id, "upper", ["5K"], T0)
    lower_id = entries.create(owner, et_id, "lower", ["5k"], T0 + timedelta(minutes=1))

    result = entries.search(owner, SearchFilter(tags=["5k"]))
    assert [r.id for r in result] == [lower_id]
    assert _descriptions(entries.search(owner, SearchFilter(tags=["5K"]))) == ["upper"]
