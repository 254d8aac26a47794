# Overview: Flask CLI command groups for bootstrap and day-to-day stock maintenance.

# backend/slady/cli.py
# Commands Legend (run from the backend directory):
# - flask --app slady system init-db
#   Create all tables (idempotent).
# - flask --app slady system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - flask --app slady catalog add-design --code D1001 --sale-price 59.90 --color Black --size M
#   Create a design.
# - flask --app slady stock set 12 7 --note "shelf count"
#   Manual correction: set item 12 to exactly 7.
# - flask --app slady stock adjust 12 -- -2
#   Relative change to item 12.
# - flask --app slady receipts void 42
#   Void receipt 42 (one-way).
# - flask --app slady reports daily-sales --store 1 --start 2024-05-01 --end 2024-05-31

import click
from flask.cli import with_appcontext

from .errors import EngineError
from .extensions import db
from .services import catalog_service, receipt_service, reporting_service, stock_service


def _click_error(e: EngineError) -> click.ClickException:
    return click.ClickException(f"{type(e).__name__}: {e.message}")


@click.group('system')
def system_group():
    """Database bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("OK  Tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("OK  Database reset")


@click.group('catalog')
def catalog_group():
    """Design catalog commands."""


@catalog_group.command('add-design')
@click.option('--code', required=True)
@click.option('--sale-price', default="0")
@click.option('--purchase-price', default="0")
@click.option('--color', 'colors', multiple=True, help='Repeat for each color')
@click.option('--size', 'sizes', multiple=True, help='Repeat for each size')
@with_appcontext
def add_design(code, sale_price, purchase_price, colors, sizes):
    """Create a design."""
    try:
        design = catalog_service.create_design({
            "code": code,
            "sale_price": sale_price,
            "purchase_price": purchase_price,
            "colors": list(colors),
            "sizes": list(sizes),
        })
    except EngineError as e:
        raise _click_error(e) from e
    click.echo(f"OK  Design {design.id} {design.code} sale_price={design.to_dict()['sale_price']}")


@click.group('stock')
def stock_group():
    """Item stock commands."""


@stock_group.command('set')
@click.argument('item_id', type=int)
@click.argument('value', type=int)
@click.option('--note', default=None)
@with_appcontext
def stock_set(item_id, value, note):
    """Set an item's stock to an absolute count."""
    try:
        stock = stock_service.set_stock(item_id, value, note=note)
    except EngineError as e:
        raise _click_error(e) from e
    click.echo(f"OK  Item {item_id} stock={stock}")


@stock_group.command('adjust')
@click.argument('item_id', type=int)
@click.argument('delta', type=int)
@click.option('--note', default=None)
@with_appcontext
def stock_adjust(item_id, delta, note):
    """Add to (or with a negative delta, take from) an item's stock."""
    try:
        stock = stock_service.apply_delta(item_id, delta, note=note)
    except EngineError as e:
        raise _click_error(e) from e
    click.echo(f"OK  Item {item_id} stock={stock}")


@click.group('receipts')
def receipts_group():
    """Receipt maintenance commands."""


@receipts_group.command('void')
@click.argument('receipt_id', type=int)
@with_appcontext
def void_receipt(receipt_id):
    """Void a receipt. There is no un-void."""
    try:
        receipt = receipt_service.void_receipt(receipt_id)
    except EngineError as e:
        raise _click_error(e) from e
    click.echo(f"OK  Receipt {receipt.ref_no} voided")


@click.group('reports')
def reports_group():
    """Sales rollups."""


@reports_group.command('daily-sales')
@click.option('--store', type=int, default=None)
@click.option('--start', default=None, help='YYYY-MM-DD')
@click.option('--end', default=None, help='YYYY-MM-DD')
@with_appcontext
def daily_sales(store, start, end):
    """Print sales per date and cashier."""
    try:
        report = reporting_service.daily_sales(store=store, start=start, end=end)
    except EngineError as e:
        raise _click_error(e) from e

    click.echo(f"{'Date':<12} {'Cashier':<20} {'Total':>12}")
    click.echo("-" * 46)
    for row in report["rows"]:
        click.echo(f"{row['date']:<12} {row['cashier']:<20} {row['total']:>12}")
    click.echo("-" * 46)
    click.echo(f"{'TOTAL':<33} {report['total']:>12}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(stock_group)
    app.cli.add_command(receipts_group)
    app.cli.add_command(reports_group)
