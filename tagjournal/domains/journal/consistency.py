"""Tag-subset rules shared by every store implementation.

An entry's tags must always be a subset of its event type's tags. Stores call
these helpers while holding the event type's row lock, so the check and the
write that follows it cannot interleave with a concurrent retag or entry write.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from tagjournal.core.errors import EventTypeValidation, TagsStillUsed


def removed_tags(current: Iterable[str], proposed: Iterable[str]) -> List[str]:
    """Tags present in ``current`` but dropped from ``proposed`` (C - N)."""
    keep = set(proposed)
    return [tag for tag in dict.fromkeys(current) if tag not in keep]


def tags_still_used(removed: Iterable[str], entry_tag_lists: Iterable[Iterable[str]]) -> List[str]:
    """Subset of ``removed`` that at least one entry still carries, sorted."""
    pending = set(removed)
    used: set[str] = set()
    if not pending:
        return []
    for tags in entry_tag_lists:
        used.update(pending.intersection(tags))
        if used == pending:
            break
    return sorted(used)


def check_retag(
    current: Iterable[str],
    proposed: Iterable[str],
    entry_tag_lists: Iterable[Iterable[str]],
) -> None:
    """Raise ``TagsStillUsed`` if narrowing to ``proposed`` orphans entry tags."""
    removed = removed_tags(current, proposed)
    if not removed:
        return
    used = tags_still_used(removed, entry_tag_lists)
    if used:
        raise TagsStillUsed(used)


def ensure_tags_permitted(tags: Iterable[str], allowed: Optional[Iterable[str]]) -> None:
    """Raise ``EventTypeValidation`` unless ``tags`` is a subset of ``allowed``.

    ``allowed`` is ``None`` when the event type is missing or owned by someone
    else; that case is deliberately indistinguishable from a disallowed tag.
    """
    if allowed is None or not set(tags).issubset(set(allowed)):
        raise EventTypeValidation()


__all__ = ["check_retag", "ensure_tags_permitted", "removed_tags", "tags_still_used"]
