"""Input validation helpers."""

from __future__ import annotations

from typing import Iterable, List

from pydantic import ValidationError

from tagjournal.core.errors import InvalidInput


def jsonable_errors(exc: ValidationError) -> list[dict]:
    errors = exc.errors(include_url=False)
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        if "input" in err:
            err["input"] = str(err["input"])
    return errors


def invalid_input(exc: ValidationError) -> InvalidInput:
    return InvalidInput("invalid request", details=jsonable_errors(exc))


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Strip tags and reject blank ones; order is kept for display."""
    normalized = []
    for tag in tags:
        value = (tag or "").strip()
        if not value:
            raise ValueError("tags must not be blank")
        normalized.append(value)
    return normalized
