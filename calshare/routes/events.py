"""Routes for managing a company's events."""
from __future__ import annotations

from flask import Blueprint, jsonify, request

from calshare.feed import CompanyNotFoundError
from calshare.routes.dependencies import get_event_service
from calshare.routes.utils import error_response, json_payload
from calshare.services.events import EventNotFoundError, ValidationError

events_bp = Blueprint("events", __name__)


@events_bp.get("/companies/<company_id>/events")
def list_events(company_id: str):
    public_only = request.args.get("public", "false").lower() == "true"
    try:
        events = get_event_service().list_events(
            company_id,
            public_only=public_only,
            after=request.args.get("after"),
            before=request.args.get("before"),
        )
    except CompanyNotFoundError:
        return error_response(404, "Company not found.")
    except ValidationError as exc:
        return error_response(422, exc.message, exc.errors)
    return jsonify({"events": events})


@events_bp.post("/companies/<company_id>/events")
def create_event(company_id: str):
    """Create an event for a company.

    Expected JSON payload:
        {
            "title": str (required),
            "start": ISO 8601 date-time (required),
            "end": ISO 8601 date-time (required),
            "description": str (optional),
            "location": str (optional),
            "is_public": bool (optional, default true)
        }
    """
    data, error = json_payload()
    if error is not None:
        return error

    try:
        event = get_event_service().create_event(company_id, data)
    except CompanyNotFoundError:
        return error_response(404, "Company not found.")
    except ValidationError as exc:
        return error_response(422, exc.message, exc.errors)

    return jsonify({"message": "Event created", "event_id": event["id"], "event": event}), 201


@events_bp.get("/companies/<company_id>/events/<event_id>")
def get_event(company_id: str, event_id: str):
    try:
        event = get_event_service().get_event(company_id, event_id)
    except EventNotFoundError:
        return error_response(404, "Event not found.")
    return jsonify({"event": event})


@events_bp.patch("/companies/<company_id>/events/<event_id>")
def update_event(company_id: str, event_id: str):
    data, error = json_payload()
    if error is not None:
        return error

    try:
        event = get_event_service().update_event(company_id, event_id, data)
    except EventNotFoundError:
        return error_response(404, "Event not found.")
    except ValidationError as exc:
        return error_response(422, exc.message, exc.errors)
    return jsonify({"message": "Event updated", "event": event})


@events_bp.delete("/companies/<company_id>/events/<event_id>")
def delete_event(company_id: str, event_id: str):
    try:
        get_event_service().delete_event(company_id, event_id)
    except EventNotFoundError:
        return error_response(404, "Event not found.")
    return jsonify({"message": "Event deleted", "event_id": event_id})
