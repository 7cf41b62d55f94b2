# Overview: Flask routes for the stock dashboard and usage reports; returns JSON.

from flask import Blueprint, current_app, jsonify, request

from app.extensions import get_store
from app.services import reporting_service
from app.services.reporting_service import ReportFilter
from app.validation import parse_flag


reports_bp = Blueprint("reports", __name__)


def report_filter_from_request() -> ReportFilter:
    return ReportFilter.from_args(
        request.args.get("mode"),
        request.args.get("from"),
        request.args.get("to"),
    )


@reports_bp.get("/")
def dashboard():
    return jsonify(reporting_service.build_stock_dashboard(get_store())), 200


@reports_bp.get("/reports/usage")
def usage_report():
    config = current_app.config
    include_all = request.args.get("includeAll")
    if include_all is None:
        include_users = config["INCLUDE_USERS_WITH_NO_USAGE"]
    else:
        include_users = parse_flag(include_all)

    report = reporting_service.build_usage_report(
        get_store(),
        report_filter_from_request(),
        include_users_with_no_usage=include_users,
        tz=config["TIMEZONE"],
        date_format=config["DATE_FORMAT"],
        time_format=config["TIME_FORMAT"],
    )
    return jsonify(report), 200
