# Overview: Flask API routes for labels and reports sent to the store printer.

from flask import Blueprint, jsonify, request

from ..decorators import api_errors
from ..services import print_service

print_bp = Blueprint("print", __name__, url_prefix="/api/print")


@print_bp.post("/label")
@api_errors("print label")
def print_label():
    """Body: {"store", "code", "color", "size", "sale_price"}"""
    payload = request.get_json(silent=True) or {}
    job = print_service.print_label(
        store=payload.get("store"),
        code=payload.get("code"),
        color=payload.get("color"),
        size=payload.get("size"),
        sale_price=payload.get("sale_price"),
    )
    return jsonify({"job": job.to_dict()}), 201


@print_bp.post("/daily-report")
@api_errors("print daily report")
def print_daily_report():
    """Body: {"store", "cashier", "date"}"""
    payload = request.get_json(silent=True) or {}
    job = print_service.print_daily_report(
        store=payload.get("store"),
        cashier=payload.get("cashier"),
        business_date=payload.get("date"),
    )
    return jsonify({"job": job.to_dict()}), 201
