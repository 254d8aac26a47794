# Overview: Flask API routes for the cash drawer; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import api_errors
from ..services import cash_service
from ..validation import CASH_ENTRY_POLICY, DRAWER_BALANCE_POLICY, validate_payload

cash_bp = Blueprint("cash", __name__, url_prefix="/api/cash")


@cash_bp.post("/entries")
@api_errors("create cash entry")
def create_entry():
    """Body: {"store", "type": 1 | 2 | "IN" | "OUT", "amount", "remark"?}"""
    payload = validate_payload(payload=request.get_json(silent=True), policy=CASH_ENTRY_POLICY, partial=False)
    entry = cash_service.create_entry(
        store=payload["store"],
        entry_type=payload["type"],
        amount=payload["amount"],
        remark=payload.get("remark"),
    )
    return jsonify({"entry": entry.to_dict()}), 201


@cash_bp.get("/entries")
@api_errors("list cash entries")
def list_entries():
    entries = cash_service.list_entries(
        store=request.args.get("store"),
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify({"entries": [e.to_dict() for e in entries]}), 200


@cash_bp.delete("/entries/<int:entry_id>")
@api_errors("delete cash entry")
def delete_entry(entry_id: int):
    cash_service.delete_entry(entry_id)
    return jsonify({"deleted": entry_id}), 200


@cash_bp.post("/drawer-balances")
@api_errors("create drawer balance")
def create_balance():
    """Body: {"store", "type": 1 | 2 | "OPENING" | "CLOSING", "amount", "date", "remark"?}"""
    payload = validate_payload(payload=request.get_json(silent=True), policy=DRAWER_BALANCE_POLICY, partial=False)
    balance = cash_service.create_balance(
        store=payload["store"],
        balance_type=payload["type"],
        amount=payload["amount"],
        business_date=payload["date"],
        remark=payload.get("remark"),
    )
    return jsonify({"balance": balance.to_dict()}), 201


@cash_bp.get("/drawer-balances")
@api_errors("list drawer balances")
def list_balances():
    balances = cash_service.list_balances(
        store=request.args.get("store"),
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify({"balances": [b.to_dict() for b in balances]}), 200


@cash_bp.delete("/drawer-balances/<int:balance_id>")
@api_errors("delete drawer balance")
def delete_balance(balance_id: int):
    cash_service.delete_balance(balance_id)
    return jsonify({"deleted": balance_id}), 200


@cash_bp.post("/drawer/open")
@api_errors("open cash drawer")
def open_drawer():
    payload = request.get_json(silent=True) or {}
    event = cash_service.open_drawer(store=payload.get("store"), reason=payload.get("reason"))
    return jsonify({"event": event.to_dict()}), 201
