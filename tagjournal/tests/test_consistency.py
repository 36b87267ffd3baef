"""Pure tag-subset rules."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.unit

from tagjournal.core.errors import EventTypeValidation, TagsStillUsed
from tagjournal.domains.journal.consistency import (
    check_retag,
    ensure_tags_permitted,
    removed_tags,
    tags_still_used,
)


def test_removed_tags_is_set_difference():
    assert removed_tags(["a", "b", "c"], ["b", "d"]) == ["a", "c"]
    assert removed_tags(["a"], ["a", "b"]) == []


def test_tags_still_used_is_sorted_intersection():
    used = tags_still_used(["z", "a", "m"], [["x", "z"], ["a"], []])
    assert used == ["a", "z"]


def test_tags_still_used_with_nothing_removed():
    assert tags_still_used([], [["a"]]) == []


def test_check_retag_allows_widening_and_unused_removal():
    check_retag(["a", "b"], ["a", "b", "c"], [["a"]])
    check_retag(["a", "b"], ["a"], [["a"], []])


def test_check_retag_reports_every_offending_tag():
    with pytest.raises(TagsStillUsed) as excinfo:
        check_retag(["a", "b", "c"], [], [["c"], ["a", "c"]])
    assert excinfo.value.tags == ["a", "c"]
    assert excinfo.value.to_dict()["tags"] == ["a", "c"]


def test_ensure_tags_permitted():
    ensure_tags_permitted([], ["a"])
    ensure_tags_permitted(["a"], ["a", "b"])
    with pytest.raises(EventTypeValidation):
        ensure_tags_permitted(["c"], ["a", "b"])


def test_missing_event_type_looks_like_disallowed_tag():
    with pytest.raises(EventTypeValidation) as missing:
        ensure_tags_permitted([], None)
    with pytest.raises(EventTypeValidation) as disallowed:
        ensure_tags_permitted(["x"], [])
    assert missing.value.to_dict() == disallowed.value.to_dict()
