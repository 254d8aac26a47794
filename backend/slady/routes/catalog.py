# Overview: Flask API routes for designs and items; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import api_errors
from ..services import catalog_service, stock_service
from ..validation import DESIGN_POLICY, ITEMS_POLICY, parse_id_list, parse_int, validate_payload

designs_bp = Blueprint("designs", __name__, url_prefix="/api/designs")
items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@designs_bp.post("")
@api_errors("create design")
def create_design():
    payload = validate_payload(payload=request.get_json(silent=True), policy=DESIGN_POLICY, partial=False)
    design = catalog_service.create_design(payload)
    return jsonify({"design": design.to_dict()}), 201


@designs_bp.get("/lookup")
@api_errors("look up design")
def lookup_design():
    """Scanner flow: exact (case-insensitive) code -> design with its sale price."""
    design = catalog_service.find_design_by_code(request.args.get("code", ""))
    return jsonify({"design": design.to_dict()}), 200


@designs_bp.get("/<int:design_id>")
@api_errors("get design")
def get_design(design_id: int):
    design = catalog_service.get_design(design_id)
    items = stock_service.list_items(design_id=design_id)
    return jsonify({"design": design.to_dict(), "items": [i.to_dict() for i in items]}), 200


@designs_bp.patch("/<int:design_id>")
@api_errors("update design")
def update_design(design_id: int):
    payload = validate_payload(payload=request.get_json(silent=True), policy=DESIGN_POLICY, partial=True)
    design = catalog_service.update_design(design_id, payload)
    return jsonify({"design": design.to_dict()}), 200


@designs_bp.delete("")
@api_errors("delete designs")
def delete_designs():
    payload = request.get_json(silent=True) or {}
    deleted = catalog_service.delete_designs(parse_id_list(payload.get("ids")))
    return jsonify({"deleted": deleted}), 200


@items_bp.post("")
@api_errors("create items")
def create_items():
    """
    Fan out one item per warehouse x color x size.

    Body: {"design_id", "warehouses": [...], "colors": [...], "sizes": [...], "stock": 0}
    """
    payload = validate_payload(payload=request.get_json(silent=True), policy=ITEMS_POLICY, partial=False)
    items = stock_service.create_items(
        parse_int(payload["design_id"], "design_id"),
        payload["warehouses"],
        payload["colors"],
        payload["sizes"],
        payload.get("stock", 0),
    )
    return jsonify({"items": [i.to_dict() for i in items]}), 201


@items_bp.get("")
@api_errors("list items")
def list_items():
    items = stock_service.list_items(
        design_id=request.args.get("design_id", type=int),
        warehouse=request.args.get("warehouse"),
    )
    return jsonify({"items": [i.to_dict() for i in items]}), 200


@items_bp.get("/<int:item_id>")
@api_errors("get item")
def get_item(item_id: int):
    item = stock_service.get_item(item_id)
    movements = stock_service.list_movements(item_id)
    return jsonify({"item": item.to_dict(), "movements": [m.to_dict() for m in movements]}), 200


@items_bp.put("/<int:item_id>/stock")
@api_errors("set item stock")
def set_item_stock(item_id: int):
    """Manual correction to an absolute count: {"stock": 7, "note": "..."}"""
    payload = request.get_json(silent=True) or {}
    stock = stock_service.set_stock(item_id, payload.get("stock"), note=payload.get("note"))
    return jsonify({"item_id": item_id, "stock": stock}), 200


@items_bp.post("/<int:item_id>/adjust")
@api_errors("adjust item stock")
def adjust_item_stock(item_id: int):
    """Relative change: {"delta": -2, "note": "..."}"""
    payload = request.get_json(silent=True) or {}
    stock = stock_service.apply_delta(item_id, payload.get("delta"), note=payload.get("note"))
    return jsonify({"item_id": item_id, "stock": stock}), 200
