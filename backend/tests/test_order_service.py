# Overview: Pytest coverage for adjustment/customer orders.

from datetime import date
from io import BytesIO

import pytest
from openpyxl import load_workbook

from slady.engine.order_states import OrderStatus
from slady.errors import InsufficientStockError, InvalidTransitionError, NotFoundError, ValidationError
from slady.models import AdjustmentOrder, Item, StockMovement
from slady.services import order_service, stock_service


def _stock(db_session, item_id):
    db_session.expire_all()
    return db_session.get(Item, item_id).stock


class TestCreate:
    def test_decrements_stock_in_same_transaction(self, db_session, item):
        order = order_service.create_order(item.id, 2, remark="window display")

        assert order.status == OrderStatus.PENDING
        assert order.remark == "window display"
        assert _stock(db_session, item.id) == 1
        movement = db_session.query(StockMovement).filter_by(kind="ORDER").one()
        assert (movement.delta, movement.order_id) == (-2, order.id)

    def test_store_order_gets_default_remark(self, db_session, item):
        assert order_service.create_order(item.id, 1).remark == "Store adjustment"

    def test_customer_order_keeps_blank_remark(self, db_session, item):
        order = order_service.create_order(item.id, 1, kind="customer")
        assert order.kind == "CUSTOMER"
        assert order.remark is None

    def test_insufficient_stock_creates_nothing(self, db_session, item):
        with pytest.raises(InsufficientStockError):
            order_service.create_order(item.id, 4)

        assert db_session.query(AdjustmentOrder).count() == 0
        assert _stock(db_session, item.id) == 3

    @pytest.mark.parametrize("quantity", [0, -1, "two", 1.5, True])
    def test_rejects_bad_quantity(self, db_session, item, quantity):
        with pytest.raises(ValidationError) as exc:
            order_service.create_order(item.id, quantity)
        assert exc.value.field == "quantity"

    def test_rejects_unknown_kind(self, db_session, item):
        with pytest.raises(ValidationError):
            order_service.create_order(item.id, 1, kind="GIFT")

    def test_unknown_item(self, db_session):
        with pytest.raises(NotFoundError):
            order_service.create_order(999, 1)


class TestLifecycle:
    def test_ship_then_complete(self, db_session, item):
        order = order_service.create_order(item.id, 1)

        order = order_service.transition_order(order.id, "shipped", "2024-05-01")
        assert order.pending_date == date(2024, 5, 1)

        order = order_service.transition_order(order.id, OrderStatus.COMPLETED)
        assert order.status == OrderStatus.COMPLETED
        assert order.pending_date is None

    def test_transitions_do_not_touch_stock(self, db_session, item):
        order = order_service.create_order(item.id, 2)
        order_service.transition_order(order.id, "damaged")
        assert _stock(db_session, item.id) == 1

    def test_completed_cannot_ship(self, db_session, item):
        order = order_service.create_order(item.id, 1)
        order_service.transition_order(order.id, "completed")
        with pytest.raises(InvalidTransitionError):
            order_service.transition_order(order.id, "shipped", "2024-05-01")

    def test_reset_clears_date(self, db_session, item):
        order = order_service.create_order(item.id, 1)
        order_service.transition_order(order.id, 1, "2024-05-01")
        order = order_service.reset_order(order.id)
        assert (order.status, order.pending_date) == (OrderStatus.PENDING, None)

    def test_resend_same_status(self, db_session, item):
        order = order_service.create_order(item.id, 1)
        order_service.transition_order(order.id, "shipped", "2024-05-01")
        order = order_service.transition_order(order.id, "shipped", "2024-05-02")
        assert order.pending_date == date(2024, 5, 2)


class TestEditAndDelete:
    def test_edit_quantity_and_remark_only(self, db_session, item):
        order = order_service.create_order(item.id, 1)
        order = order_service.edit_order(order.id, {"quantity": 3, "remark": "  recount "})
        assert (order.quantity, order.remark) == (3, "recount")
        assert _stock(db_session, item.id) == 2

    def test_edit_color_moves_to_sibling(self, db_session, item, sibling):
        order = order_service.create_order(item.id, 1)
        order = order_service.edit_order(order.id, {"color": "White"})
        assert order.item_id == sibling.id
        assert _stock(db_session, item.id) == 2
        assert _stock(db_session, sibling.id) == 5

    def test_edit_to_missing_sibling(self, db_session, item):
        order = order_service.create_order(item.id, 1)
        with pytest.raises(ValidationError) as exc:
            order_service.edit_order(order.id, {"size": "L"})
        assert exc.value.field == "size"

    def test_delete_does_not_restock(self, db_session, item):
        first = order_service.create_order(item.id, 1)
        second = order_service.create_order(item.id, 1)
        assert order_service.delete_orders([first.id, second.id]) == 2
        assert db_session.query(AdjustmentOrder).count() == 0
        assert _stock(db_session, item.id) == 1

    def test_restock_is_an_explicit_adjustment(self, db_session, item):
        order = order_service.create_order(item.id, 2)
        order_service.transition_order(order.id, "outOfStock")
        stock_service.apply_delta(item.id, 2, note=f"return from order {order.id}")
        assert _stock(db_session, item.id) == 3

    def test_delete_requires_ids(self, db_session):
        with pytest.raises(ValidationError):
            order_service.delete_orders([])


class TestListing:
    @pytest.fixture
    def orders(self, db_session, item, sibling):
        a = order_service.create_order(item.id, 1, remark="gift for VIP")
        b = order_service.create_order(sibling.id, 2)
        order_service.transition_order(b.id, "completed")
        return a, b

    def test_filter_by_status(self, orders):
        a, b = orders
        assert [o.id for o in order_service.list_orders({"status": ["pending"]})] == [a.id]
        assert {o.id for o in order_service.list_orders({"status": "0,2"})} == {a.id, b.id}

    def test_filter_by_code_substring(self, orders):
        assert len(order_service.list_orders({"design_code": "d10"})) == 2
        assert order_service.list_orders({"design_code": "X9"}) == []

    def test_filter_by_remark_and_warehouse(self, orders):
        a, _ = orders
        assert [o.id for o in order_service.list_orders({"remark": "VIP"})] == [a.id]
        assert order_service.list_orders({"warehouse": "LIVE"}) == []

    def test_newest_first(self, orders):
        a, b = orders
        assert [o.id for o in order_service.list_orders()] == [b.id, a.id]

    def test_bad_dates_and_statuses(self, orders):
        with pytest.raises(ValidationError):
            order_service.list_orders({"start": "05/01/2024"})
        with pytest.raises(ValidationError):
            order_service.list_orders({"status": "lost"})

    def test_export_workbook(self, orders):
        content = order_service.export_orders({"status": ["pending"]})
        assert content[:2] == b"PK"

        sheet = load_workbook(BytesIO(content)).active
        rows = list(sheet.iter_rows(values_only=True))
        assert sheet.title == "Orders"
        assert rows[0] == order_service.EXPORT_HEADERS
        assert rows[1][2:7] == ("D1001", "SLADY", "Black", "M", 1)
        assert rows[1][8] == "pending"
        assert len(rows) == 2

    def test_export_row_cap(self, app, db_session, item):
        stock_service.apply_delta(item.id, 100)
        for _ in range(app.config["ORDER_EXPORT_MAX_ROWS"] + 1):
            order_service.create_order(item.id, 1)
        with pytest.raises(ValidationError) as exc:
            order_service.export_orders()
        assert exc.value.details["limit"] == 50
