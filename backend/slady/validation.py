from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationError


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Request-body policy for one endpoint:
    - writable_fields: what clients are allowed to send
    - required_on_create: fields that must be present on create
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = field(default_factory=frozenset)


DESIGN_POLICY = PayloadPolicy(
    writable_fields=frozenset({
        "code", "type_tags", "purchase_price", "sale_price", "fabric",
        "fabric_list", "colors", "sizes", "remark",
    }),
    required_on_create=frozenset({"code"}),
)

ITEMS_POLICY = PayloadPolicy(
    writable_fields=frozenset({"design_id", "warehouses", "colors", "sizes", "stock"}),
    required_on_create=frozenset({"design_id", "warehouses", "colors", "sizes"}),
)

ORDER_POLICY = PayloadPolicy(
    writable_fields=frozenset({"item_id", "quantity", "remark", "kind", "color", "size"}),
    required_on_create=frozenset({"item_id", "quantity"}),
)

CASH_ENTRY_POLICY = PayloadPolicy(
    writable_fields=frozenset({"store", "type", "amount", "remark"}),
    required_on_create=frozenset({"store", "type", "amount"}),
)

DRAWER_BALANCE_POLICY = PayloadPolicy(
    writable_fields=frozenset({"store", "type", "amount", "date", "remark"}),
    required_on_create=frozenset({"store", "type", "amount", "date"}),
)


def validate_payload(*, payload: Any, policy: PayloadPolicy, partial: bool) -> dict:
    """
    Reject non-object bodies and fields outside the allowlist.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", field=missing[0])

    for key in payload:
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}", field=key)

    if partial and not payload:
        raise ValidationError("Nothing to update")

    return dict(payload)


def parse_int(value: Any, field_name: str) -> int:
    """Strict integer: no floats, no decimals, no scientific notation."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    raise ValidationError(f"{field_name} must be an integer", field=field_name)


def parse_id_list(value: Any, field_name: str = "ids") -> list[int]:
    if not isinstance(value, list) or not value:
        raise ValidationError(f"{field_name} must be a non-empty list", field=field_name)
    return [parse_int(v, field_name) for v in value]
