# Overview: Pytest coverage for the flask CLI command groups.

import pytest

from conftest import receipt_payload
from slady.models import Design, Item
from slady.services import receipt_service


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_add_design(runner, db_session):
    result = runner.invoke(args=[
        "catalog", "add-design", "--code", "D5005", "--sale-price", "59.9", "--color", "Red", "--size", "M",
    ])
    assert result.exit_code == 0, result.output
    assert "sale_price=59.90" in result.output
    assert db_session.query(Design).filter_by(code="D5005").one().colors == ["Red"]


def test_add_duplicate_design_fails(runner, design):
    result = runner.invoke(args=["catalog", "add-design", "--code", "D1001"])
    assert result.exit_code != 0
    assert "ConflictError" in result.output


def test_stock_set_and_adjust(runner, db_session, item):
    result = runner.invoke(args=["stock", "set", str(item.id), "7", "--note", "shelf count"])
    assert "stock=7" in result.output

    result = runner.invoke(args=["stock", "adjust", str(item.id), "--", "-2"])
    assert result.exit_code == 0, result.output
    db_session.expire_all()
    assert db_session.get(Item, item.id).stock == 5


def test_stock_adjust_below_zero(runner, item):
    result = runner.invoke(args=["stock", "adjust", str(item.id), "--", "-9"])
    assert result.exit_code != 0
    assert "InsufficientStockError" in result.output


def test_void_and_report(runner, db_session):
    receipt = receipt_service.assemble_receipt(receipt_payload())
    report = runner.invoke(args=["reports", "daily-sales", "--store", "1"])
    assert "205.00" in report.output

    result = runner.invoke(args=["receipts", "void", str(receipt.id)])
    assert "S1-000001 voided" in result.output
