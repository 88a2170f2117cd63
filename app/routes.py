from __future__ import annotations

import logging
from typing import Optional

from flask import Blueprint, jsonify, request

from models import StorageError
from app.services.assess_type import (
    AssessTypeIntegrityError,
    AssessTypeKind,
    AssessTypeStore,
    build_store,
    can_be_summative,
    parse_type,
)
from app.services.rendering import Activity, render_activity

logger = logging.getLogger(__name__)

bp = Blueprint("core", __name__)


@bp.errorhandler(StorageError)
def handle_storage_error(exc: StorageError):
    logger.exception("Assess type storage failure: %s", exc)
    return jsonify({"error": "Assess type storage is unavailable."}), 503


@bp.errorhandler(AssessTypeIntegrityError)
def handle_integrity_error(exc: AssessTypeIntegrityError):
    logger.exception("Assess type integrity failure: %s", exc)
    return jsonify({"error": str(exc)}), 500


@bp.get("/health")
def health():
    return jsonify({"status": "ok", "service": "assess-type"}), 200


def _parse_optional_int(
    value: object,
    field_name: str,
    *,
    min_value: Optional[int] = None,
) -> Optional[int]:
    """Parse optional integer from query or JSON payload."""
    if value in (None, "", "null"):
        return None
    if isinstance(value, (bool, float)):
        raise ValueError(f"{field_name} must be an integer.")
    try:
        result = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be an integer.")
    if min_value is not None and result < min_value:
        raise ValueError(f"{field_name} must be ≥ {min_value}.")
    return result


def _parse_required_int(
    value: object,
    field_name: str,
    *,
    min_value: Optional[int] = None,
) -> int:
    """Parse required integer enforcing optional minimum."""
    parsed = _parse_optional_int(value, field_name, min_value=min_value)
    if parsed is None:
        raise ValueError(f"{field_name} is required.")
    return parsed


def _parse_bool(value: object, field_name: str) -> bool:
    """Parse a boolean value from payload."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "y"}:
            return True
        if normalized in {"false", "0", "no", "n"}:
            return False
    if isinstance(value, (int, float)) and value in {0, 1}:
        return bool(value)
    raise ValueError(f"{field_name} must be a boolean value.")


def _classification_payload(store: AssessTypeStore, cmid: int) -> dict[str, object]:
    kind = store.get_type_int(cmid)
    return {
        "cmid": cmid,
        "type": int(kind) if kind is not None else None,
        "name": store.get_type_name(cmid),
        "summative": kind == AssessTypeKind.SUMMATIVE,
        "locked": store.is_locked(cmid),
    }


@bp.get("/api/modules/<modname>/can-be-summative")
def api_can_be_summative(modname: str):
    return jsonify({"modname": modname, "can_be_summative": can_be_summative(modname)})


@bp.get("/api/activities/<int:cmid>/assess-type")
def api_get_assess_type(cmid: int):
    store = build_store()
    return jsonify(_classification_payload(store, cmid))


@bp.post("/api/activities/<int:cmid>/assess-type")
def api_update_assess_type(cmid: int):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "JSON object body required."}), 400
    try:
        courseid = _parse_required_int(payload.get("courseid"), "courseid", min_value=1)
        kind = parse_type(payload.get("type"))
        gradeitemid = _parse_optional_int(payload.get("gradeitemid"), "gradeitemid", min_value=0) or 0
        locked_raw = payload.get("locked")
        locked = _parse_bool(locked_raw, "locked") if locked_raw is not None else False
        modname = str(payload.get("modname", "")).strip()
        if modname and kind == AssessTypeKind.SUMMATIVE and not can_be_summative(modname):
            raise ValueError(f"Activities of type {modname!r} cannot be summative.")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    store = build_store()
    store.update_type(courseid, kind, cmid=cmid, gradeitemid=gradeitemid, locked=locked)
    return jsonify(_classification_payload(store, cmid))


@bp.get("/api/courses/<int:courseid>/assess-types")
def api_course_assess_types(courseid: int):
    try:
        type_raw = request.args.get("type")
        kind = parse_type(type_raw) if type_raw not in (None, "") else None
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    records = build_store().get_records_by_course(courseid, kind)
    return jsonify(
        {
            "items": [record.to_dict() for record in records],
            "total": len(records),
        }
    )


@bp.post("/api/activities/<int:cmid>/render")
def api_render_activity(cmid: int):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "JSON object body required."}), 400
    activity = Activity(
        id=cmid,
        content=str(payload.get("content", "")),
        after_link=str(payload.get("after_link", "")),
    )
    render_activity(activity, build_store())
    return jsonify(
        {
            "cmid": cmid,
            "content": activity.content,
            "after_link": activity.after_link,
        }
    )
