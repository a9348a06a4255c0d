"""Routes serving subscription feeds and managing the feed cache."""
from __future__ import annotations

from flask import Blueprint, Response, jsonify, request

from calshare.feed import CompanyNotFoundError as FeedCompanyNotFoundError
from calshare.feed import feed_filename
from calshare.routes.dependencies import (
    get_app_config,
    get_company_service,
    get_event_service,
    get_feed_orchestrator,
)
from calshare.routes.utils import error_response
from calshare.services.companies import CompanyNotFoundError
from calshare.services.events import ValidationError

calendar_bp = Blueprint("calendar", __name__)

CALENDAR_CONTENT_TYPE = "text/calendar; charset=utf-8"


@calendar_bp.get("/calendar/<share_token>/feed.ics")
@calendar_bp.get("/calendar/<share_token>/feed")
def calendar_feed(share_token: str):
    try:
        company = get_company_service().get_by_share_token(share_token)
    except CompanyNotFoundError:
        return error_response(404, "Calendar not found.")

    try:
        result = get_feed_orchestrator().get_feed(company["id"])
    except FeedCompanyNotFoundError:
        return error_response(404, "Calendar not found.")

    max_age = get_app_config().feed.http_max_age
    response = Response(result.content, content_type=CALENDAR_CONTENT_TYPE)
    response.headers["Content-Disposition"] = (
        f'attachment; filename="{feed_filename(company["name"])}"'
    )
    response.headers["Cache-Control"] = f"public, max-age={max_age}"
    response.headers["X-Cache"] = "HIT" if result.served_from_cache else "MISS"
    return response


@calendar_bp.get("/calendar/<share_token>/events")
def public_events(share_token: str):
    try:
        company = get_company_service().get_by_share_token(share_token)
    except CompanyNotFoundError:
        return error_response(404, "Calendar not found.")

    try:
        events = get_event_service().list_events(
            company["id"],
            public_only=True,
            after=request.args.get("after"),
            before=request.args.get("before"),
        )
    except ValidationError as exc:
        return error_response(422, exc.message, exc.errors)

    for event in events:
        event.pop("is_public", None)
    return jsonify({"company": {"name": company["name"]}, "events": events})


@calendar_bp.post("/companies/<company_id>/calendar/invalidate-cache")
def invalidate_cache(company_id: str):
    try:
        get_company_service().get_company(company_id)
    except CompanyNotFoundError:
        return error_response(404, "Company not found.")
    get_feed_orchestrator().invalidate(company_id)
    return jsonify({"message": "Cache invalidated", "company_id": company_id})


@calendar_bp.get("/calendar/cache-stats")
def cache_stats():
    return jsonify({"cache": get_feed_orchestrator().cache_stats().as_dict()})
