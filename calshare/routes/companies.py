"""Routes for registering companies and exposing their share links."""
from __future__ import annotations

from flask import Blueprint, jsonify

from calshare.routes.dependencies import get_app_config, get_company_service
from calshare.routes.utils import error_response, json_payload
from calshare.services.companies import CompanyNotFoundError, build_subscription_urls
from calshare.services.events import ValidationError

companies_bp = Blueprint("companies", __name__)


@companies_bp.post("/companies")
def create_company():
    data, error = json_payload()
    if error is not None:
        return error

    try:
        company = get_company_service().create_company(data)
    except ValidationError as exc:
        return error_response(422, exc.message, exc.errors)
    return jsonify({"message": "Company created", "company": company}), 201


@companies_bp.get("/companies/<company_id>")
def get_company(company_id: str):
    try:
        company = get_company_service().get_company(company_id)
    except CompanyNotFoundError:
        return error_response(404, "Company not found.")
    return jsonify({"company": company})


@companies_bp.get("/companies/<company_id>/share-urls")
def share_urls(company_id: str):
    try:
        company = get_company_service().get_company(company_id)
    except CompanyNotFoundError:
        return error_response(404, "Company not found.")

    urls = build_subscription_urls(get_app_config().public_base_url, company["shareable_url"])
    return jsonify({"shareable_url": company["shareable_url"], "calendar_urls": urls})


@companies_bp.post("/companies/<company_id>/share-url")
def rotate_share_url(company_id: str):
    try:
        company = get_company_service().rotate_share_token(company_id)
    except CompanyNotFoundError:
        return error_response(404, "Company not found.")
    return jsonify({"message": "Share URL regenerated", "company": company})
