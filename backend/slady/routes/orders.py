# Overview: Flask API routes for adjustment orders; parses input and returns JSON responses.

from flask import Blueprint, Response, jsonify, request

from ..decorators import api_errors
from ..errors import ValidationError
from ..models import ORDER_KIND_STORE
from ..services import order_service
from ..time_utils import utcnow
from ..validation import ORDER_POLICY, parse_id_list, parse_int, validate_payload

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _filters_from_args() -> dict:
    return {
        "warehouse": request.args.get("warehouse"),
        "status": request.args.getlist("status") or None,
        "design_code": request.args.get("design_code"),
        "remark": request.args.get("remark"),
        "start": request.args.get("start"),
        "end": request.args.get("end"),
    }


@orders_bp.post("")
@api_errors("create order")
def create_order():
    """
    Create an order and take its quantity out of stock.

    Body: {"item_id", "quantity", "remark"?, "kind"?: "STORE" | "CUSTOMER"}
    """
    payload = validate_payload(payload=request.get_json(silent=True), policy=ORDER_POLICY, partial=False)
    order = order_service.create_order(
        parse_int(payload["item_id"], "item_id"),
        payload["quantity"],
        remark=payload.get("remark"),
        kind=payload.get("kind") or ORDER_KIND_STORE,
    )
    return jsonify({"order": order.to_dict()}), 201


@orders_bp.get("")
@api_errors("list orders")
def list_orders():
    orders = order_service.list_orders(_filters_from_args())
    return jsonify({"orders": [o.to_dict() for o in orders]}), 200


@orders_bp.get("/<int:order_id>")
@api_errors("get order")
def get_order(order_id: int):
    return jsonify({"order": order_service.get_order(order_id).to_dict()}), 200


@orders_bp.patch("/<int:order_id>")
@api_errors("edit order")
def edit_order(order_id: int):
    """Record-only edit of quantity, remark, color, size."""
    payload = validate_payload(payload=request.get_json(silent=True), policy=ORDER_POLICY, partial=True)
    payload.pop("item_id", None)
    payload.pop("kind", None)
    order = order_service.edit_order(order_id, payload)
    return jsonify({"order": order.to_dict()}), 200


@orders_bp.post("/<int:order_id>/transition")
@api_errors("transition order")
def transition_order(order_id: int):
    """Body: {"status": "shipped" | 1 | ..., "shipped_date"?: "YYYY-MM-DD"}"""
    payload = request.get_json(silent=True) or {}
    order = order_service.transition_order(order_id, payload.get("status"), payload.get("shipped_date"))
    return jsonify({"order": order.to_dict()}), 200


@orders_bp.post("/<int:order_id>/reset")
@api_errors("reset order")
def reset_order(order_id: int):
    order = order_service.reset_order(order_id)
    return jsonify({"order": order.to_dict()}), 200


@orders_bp.delete("")
@api_errors("delete orders")
def delete_orders():
    payload = request.get_json(silent=True) or {}
    deleted = order_service.delete_orders(parse_id_list(payload.get("ids")))
    return jsonify({"deleted": deleted}), 200


@orders_bp.post("/export")
@api_errors("export orders")
def export_orders():
    """Same filters as the listing, in the JSON body; answers with an .xlsx file."""
    filters = request.get_json(silent=True) or {}
    if not isinstance(filters, dict):
        raise ValidationError("Invalid JSON payload")
    content = order_service.export_orders(filters)
    filename = f"orders-{utcnow().strftime('%Y%m%d-%H%M%S')}.xlsx"
    return Response(
        content,
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
