"""Journal JSON API: event types and journal entries of the calling user."""

from __future__ import annotations

import uuid

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from tagjournal.core.utils.decorators import current_caller_id, session_required
from tagjournal.core.utils.validation import invalid_input
from tagjournal.domains.journal.mappers import map_entry, map_event_type
from tagjournal.domains.journal.schemas.journal_schemas import (
    EventTypeData,
    JournalEntryCreate,
    JournalEntryUpdate,
    SearchFilter,
)
from tagjournal.domains.journal.services.journal_service import get_journal_service

journal_api_bp = Blueprint("journal_api", __name__)


def _parse(schema, payload):
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise invalid_input(exc) from exc


def _search_args() -> dict:
    args = request.args.to_dict()
    if "tags" in request.args:
        args["tags"] = request.args.getlist("tags")
    return args


# --- event types ---


@journal_api_bp.get("/event-types")
@session_required
def list_event_types():
    event_types = get_journal_service().find_all_event_types(current_caller_id())
    return jsonify({"ok": True, "items": [map_event_type(et) for et in event_types]})


@journal_api_bp.get("/event-types/<uuid:event_type_id>")
@session_required
def get_event_type(event_type_id: uuid.UUID):
    event_type = get_journal_service().find_event_type(current_caller_id(), event_type_id)
    return jsonify({"ok": True, "event_type": map_event_type(event_type)})


@journal_api_bp.post("/event-types")
@session_required
def create_event_type():
    data = _parse(EventTypeData, request.get_json(silent=True) or {})
    event_type_id = get_journal_service().create_event_type(current_caller_id(), data)
    return jsonify({"ok": True, "id": str(event_type_id)}), 201


@journal_api_bp.put("/event-types/<uuid:event_type_id>")
@session_required
def update_event_type(event_type_id: uuid.UUID):
    data = _parse(EventTypeData, request.get_json(silent=True) or {})
    get_journal_service().update_event_type(current_caller_id(), event_type_id, data)
    return jsonify({"ok": True})


@journal_api_bp.delete("/event-types/<uuid:event_type_id>")
@session_required
def delete_event_type(event_type_id: uuid.UUID):
    get_journal_service().delete_event_type(current_caller_id(), event_type_id)
    return jsonify({"ok": True})


# --- journal entries ---


@journal_api_bp.get("/entries")
@session_required
def search_entries():
    filters = _parse(SearchFilter, _search_args())
    entries = get_journal_service().find_journal_entries(current_caller_id(), filters)
    return jsonify({"ok": True, "items": [map_entry(e) for e in entries]})


@journal_api_bp.get("/entries/<uuid:entry_id>")
@session_required
def get_entry(entry_id: uuid.UUID):
    entry = get_journal_service().find_journal_entry(current_caller_id(), entry_id)
    return jsonify({"ok": True, "entry": map_entry(entry)})


@journal_api_bp.post("/entries")
@session_required
def create_entry():
    data = _parse(JournalEntryCreate, request.get_json(silent=True) or {})
    entry_id = get_journal_service().create_journal_entry(current_caller_id(), data)
    return jsonify({"ok": True, "id": str(entry_id)}), 201


@journal_api_bp.put("/entries/<uuid:entry_id>")
@session_required
def update_entry(entry_id: uuid.UUID):
    data = _parse(JournalEntryUpdate, request.get_json(silent=True) or {})
    get_journal_service().update_journal_entry(current_caller_id(), entry_id, data)
    return jsonify({"ok": True})


@journal_api_bp.delete("/entries/<uuid:entry_id>")
@session_required
def delete_entry(entry_id: uuid.UUID):
    get_journal_service().delete_journal_entry(current_caller_id(), entry_id)
    return jsonify({"ok": True})
