# Overview: Flask API routes for receipts; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import api_errors
from ..errors import ValidationError
from ..services import receipt_service

receipts_bp = Blueprint("receipts", __name__, url_prefix="/api/receipts")


@receipts_bp.post("/print")
@api_errors("print receipt")
def print_receipt():
    """
    Assemble and print a receipt.

    Body: {"store", "cashier", "items": [...], "payments": [...], "total_price"?}
    409 PaymentMismatchError when payments do not equal the computed total.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    receipt = receipt_service.assemble_receipt(payload)
    return jsonify({"receipt": receipt.to_dict()}), 201


@receipts_bp.get("")
@api_errors("list receipts")
def list_receipts():
    receipts = receipt_service.list_receipts(
        store=request.args.get("store"),
        ref_no=request.args.get("ref_no"),
        start=request.args.get("start"),
        end=request.args.get("end"),
        include_voided=request.args.get("include_voided", "true").lower() != "false",
    )
    return jsonify({"receipts": [r.to_dict() for r in receipts]}), 200


@receipts_bp.get("/<int:receipt_id>")
@api_errors("get receipt")
def get_receipt(receipt_id: int):
    return jsonify({"receipt": receipt_service.get_receipt(receipt_id).to_dict()}), 200


@receipts_bp.post("/<int:receipt_id>/reprint")
@api_errors("reprint receipt")
def reprint_receipt(receipt_id: int):
    receipt = receipt_service.reprint_receipt(receipt_id)
    return jsonify({"receipt": receipt.to_dict()}), 200


@receipts_bp.put("/<int:receipt_id>/voided")
@api_errors("void receipt")
def set_voided(receipt_id: int):
    """Body: {"voided": 1}. Voiding is one-way."""
    payload = request.get_json(silent=True) or {}
    receipt = receipt_service.set_voided(receipt_id, payload.get("voided"))
    return jsonify({"receipt": receipt.to_dict()}), 200


@receipts_bp.delete("/<int:receipt_id>")
@api_errors("delete receipt")
def delete_receipt(receipt_id: int):
    receipt_service.delete_receipt(receipt_id)
    return jsonify({"deleted": receipt_id}), 200
