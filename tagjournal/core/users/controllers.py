"""User API: registration, login and password updates."""

from __future__ import annotations

import uuid

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from tagjournal.core.auth import auth_service
from tagjournal.core.errors import InfrastructureError
from tagjournal.core.users.schemas import LoginRequest, RegisterRequest, UpdatePasswordRequest
from tagjournal.core.utils.decorators import same_user_required, session_required
from tagjournal.core.utils.validation import invalid_input
from tagjournal.extensions import limiter

user_api_bp = Blueprint("user_api", __name__)


def _login_limit() -> str:
    return current_app.config.get("RATELIMIT_LOGIN", "10/minute")


@user_api_bp.post("")
def register():
    payload = request.get_json(silent=True) or {}
    try:
        data = RegisterRequest.model_validate(payload)
    except ValidationError as exc:
        raise invalid_input(exc) from exc
    user_id = auth_service.register_user(data)
    return jsonify({"ok": True, "id": str(user_id)}), 201


@user_api_bp.post("/login")
@limiter.limit(_login_limit)
def login():
    payload = request.get_json(silent=True) or {}
    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as exc:
        raise invalid_input(exc) from exc
    session = auth_service.login(data.username, data.password)
    resp = jsonify({"ok": True, **session.model_dump()})
    resp.headers["Cache-Control"] = "no-store"
    return resp


@user_api_bp.put("/<uuid:user_id>")
@session_required
@same_user_required
def update_password(user_id: uuid.UUID):
    payload = request.get_json(silent=True) or {}
    try:
        data = UpdatePasswordRequest.model_validate(payload)
    except ValidationError as exc:
        raise invalid_input(exc) from exc
    if not auth_service.update_password(user_id, data.password):
        raise InfrastructureError("password update did not match any user")
    return jsonify({"ok": True})
