# Overview: HTTP client used by the desktop and mobile front ends to drive the backend.

"""
SladyClient

Both front ends run the same engine: drafts are validated locally with
ReceiptDraft.validate() before any request is made, so a field error or a
payment mismatch never reaches the network.

The client never assumes success. Nothing is applied locally before the
backend confirms it, and a failed request leaves the caller's state as it
was. Network failures and 5xx answers become BackendUnavailableError and
are not retried: re-sending a stock mutation blindly could apply it twice.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable

import httpx

from .engine.draft import ReceiptDraft
from .engine.order_states import OrderStatus
from .errors import BackendUnavailableError, error_from_payload

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class SladyClient:
    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._http = httpx.Client(base_url=base_url, transport=transport, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SladyClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- transport ---------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise BackendUnavailableError(
                f"Backend unreachable: {e}", details={"method": method, "path": path}
            ) from e

        if response.status_code >= 500:
            logger.warning("%s %s answered %s", method, path, response.status_code)
            raise BackendUnavailableError(
                f"Backend error {response.status_code}",
                details={"method": method, "path": path, "status": response.status_code},
            )
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            if not isinstance(payload, dict):
                payload = {}
            raise error_from_payload(payload, response.status_code)
        return response

    def _json(self, method: str, path: str, **kwargs) -> dict:
        return self._send(method, path, **kwargs).json()

    # --- health ------------------------------------------------------------

    def health(self) -> dict:
        return self._json("GET", "/api/health")

    # --- catalog -----------------------------------------------------------

    def lookup_design(self, code: str) -> dict:
        return self._json("GET", "/api/designs/lookup", params={"code": code})["design"]

    def create_design(self, **fields: Any) -> dict:
        return self._json("POST", "/api/designs", json=fields)["design"]

    # --- stock -------------------------------------------------------------

    def create_items(
        self,
        design_id: int,
        warehouses: Iterable[str],
        colors: Iterable[str],
        sizes: Iterable[str],
        stock: int = 0,
    ) -> list[dict]:
        body = {
            "design_id": design_id,
            "warehouses": list(warehouses),
            "colors": list(colors),
            "sizes": list(sizes),
            "stock": stock,
        }
        return self._json("POST", "/api/items", json=body)["items"]

    def list_items(self, design_id: int | None = None, warehouse: str | None = None) -> list[dict]:
        params = {k: v for k, v in (("design_id", design_id), ("warehouse", warehouse)) if v is not None}
        return self._json("GET", "/api/items", params=params)["items"]

    def adjust_stock(self, item_id: int, delta: int, note: str | None = None) -> int:
        body = {"delta": delta, "note": note}
        return self._json("POST", f"/api/items/{item_id}/adjust", json=body)["stock"]

    def set_stock(self, item_id: int, stock: int, note: str | None = None) -> int:
        """Manual correction only; everything else sends deltas."""
        body = {"stock": stock, "note": note}
        return self._json("PUT", f"/api/items/{item_id}/stock", json=body)["stock"]

    # --- orders ------------------------------------------------------------

    def create_order(self, item_id: int, quantity: int, remark: str | None = None, kind: str = "STORE") -> dict:
        body = {"item_id": item_id, "quantity": quantity, "remark": remark, "kind": kind}
        return self._json("POST", "/api/orders", json=body)["order"]

    def list_orders(self, **filters: Any) -> list[dict]:
        params = {k: v for k, v in filters.items() if v is not None}
        return self._json("GET", "/api/orders", params=params)["orders"]

    def transition_order(self, order_id: int, status: Any, shipped_date: date | str | None = None) -> dict:
        if isinstance(shipped_date, date):
            shipped_date = shipped_date.isoformat()
        body = {"status": int(OrderStatus.parse(status)), "shipped_date": shipped_date}
        return self._json("POST", f"/api/orders/{order_id}/transition", json=body)["order"]

    def ship_order(self, order_id: int, shipped_date: date | str) -> dict:
        return self.transition_order(order_id, OrderStatus.SHIPPED, shipped_date)

    def complete_order(self, order_id: int) -> dict:
        return self.transition_order(order_id, OrderStatus.COMPLETED)

    def mark_out_of_stock(self, order_id: int) -> dict:
        return self.transition_order(order_id, OrderStatus.OUT_OF_STOCK)

    def mark_damaged(self, order_id: int) -> dict:
        return self.transition_order(order_id, OrderStatus.DAMAGED)

    def reset_order(self, order_id: int) -> dict:
        return self._json("POST", f"/api/orders/{order_id}/reset")["order"]

    def edit_order(self, order_id: int, **fields: Any) -> dict:
        return self._json("PATCH", f"/api/orders/{order_id}", json=fields)["order"]

    def delete_orders(self, order_ids: Iterable[int]) -> int:
        return self._json("DELETE", "/api/orders", json={"ids": list(order_ids)})["deleted"]

    def export_orders(self, **filters: Any) -> bytes:
        body = {k: v for k, v in filters.items() if v is not None}
        return self._send("POST", "/api/orders/export", json=body).content

    # --- receipts ----------------------------------------------------------

    def print_receipt(self, draft: ReceiptDraft) -> dict:
        """
        Validate locally, then print. ValidationError and PaymentMismatchError
        are raised before any request is sent.
        """
        draft.validate()
        return self._json("POST", "/api/receipts/print", json=draft.to_payload())["receipt"]

    def get_receipt(self, receipt_id: int) -> dict:
        return self._json("GET", f"/api/receipts/{receipt_id}")["receipt"]

    def list_receipts(self, **filters: Any) -> list[dict]:
        params = {k: v for k, v in filters.items() if v is not None}
        return self._json("GET", "/api/receipts", params=params)["receipts"]

    def reprint_receipt(self, receipt_id: int) -> dict:
        return self._json("POST", f"/api/receipts/{receipt_id}/reprint")["receipt"]

    def void_receipt(self, receipt_id: int) -> dict:
        return self._json("PUT", f"/api/receipts/{receipt_id}/voided", json={"voided": 1})["receipt"]

    def delete_receipt(self, receipt_id: int) -> None:
        self._send("DELETE", f"/api/receipts/{receipt_id}")

    # --- reports -----------------------------------------------------------

    def daily_sales(self, store: int | None = None, start: str | None = None, end: str | None = None) -> dict:
        params = {k: v for k, v in (("store", store), ("start", start), ("end", end)) if v is not None}
        return self._json("GET", "/api/reports/daily-sales", params=params)

    def payment_method_sales(self, store: int | None = None, start: str | None = None, end: str | None = None) -> dict:
        params = {k: v for k, v in (("store", store), ("start", start), ("end", end)) if v is not None}
        return self._json("GET", "/api/reports/payment-methods", params=params)

    def drawer_summary(self, store: int, business_date: str) -> dict:
        return self._json("GET", "/api/reports/drawer-summary", params={"store": store, "date": business_date})

    # --- cash drawer -------------------------------------------------------

    def create_cash_entry(self, store: int, entry_type: Any, amount: Any, remark: str | None = None) -> dict:
        body = {"store": store, "type": entry_type, "amount": str(amount), "remark": remark}
        return self._json("POST", "/api/cash/entries", json=body)["entry"]

    def delete_cash_entry(self, entry_id: int) -> None:
        self._send("DELETE", f"/api/cash/entries/{entry_id}")

    def create_drawer_balance(
        self, store: int, balance_type: Any, amount: Any, business_date: str, remark: str | None = None
    ) -> dict:
        body = {"store": store, "type": balance_type, "amount": str(amount), "date": business_date, "remark": remark}
        return self._json("POST", "/api/cash/drawer-balances", json=body)["balance"]

    def delete_drawer_balance(self, balance_id: int) -> None:
        self._send("DELETE", f"/api/cash/drawer-balances/{balance_id}")

    def open_drawer(self, store: int, reason: str | None = None) -> dict:
        return self._json("POST", "/api/cash/drawer/open", json={"store": store, "reason": reason})["event"]

    # --- printing ----------------------------------------------------------

    def print_label(self, store: int, code: str, color: str, size: str, sale_price: Any) -> dict:
        body = {"store": store, "code": code, "color": color, "size": size, "sale_price": str(sale_price)}
        return self._json("POST", "/api/print/label", json=body)["job"]

    def print_daily_report(self, store: int, cashier: str, business_date: str) -> dict:
        body = {"store": store, "cashier": cashier, "date": business_date}
        return self._json("POST", "/api/print/daily-report", json=body)["job"]

