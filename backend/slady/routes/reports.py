from flask import Blueprint, jsonify, request

from ..decorators import api_errors
from ..services import reporting_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/daily-sales")
@api_errors("build daily sales report")
def daily_sales():
    report = reporting_service.daily_sales(
        store=request.args.get("store"),
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(report), 200


@reports_bp.get("/payment-methods")
@api_errors("build payment method report")
def payment_methods():
    report = reporting_service.payment_method_sales(
        store=request.args.get("store"),
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(report), 200


@reports_bp.get("/drawer-summary")
@api_errors("build drawer summary")
def drawer_summary():
    report = reporting_service.drawer_summary(
        store=request.args.get("store"),
        business_date=request.args.get("date"),
    )
    return jsonify(report), 200
