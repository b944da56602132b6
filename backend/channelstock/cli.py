# Overview: Flask CLI command groups for bootstrap, inspection, and stock maintenance.

# backend/channelstock/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Products:
# - python -m flask products list [--search TK] [--color denim] [--stock low]
# - python -m flask products create --price 150000 --stock 100 --color denim [--code TK101] [--prefix TK]
#
# Stock:
# - python -m flask stock add 1 20
# - python -m flask stock reduce 1 5
# - python -m flask stock distribute 1 --tiktok 30 --shopee 10
#
# Activity log:
# - python -m flask logs list --limit 20

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import inventory_service
from .services.activity_log_service import list_log_entries
from .services.inventory_service import CapacityExceededError
from .services.products_service import filter_products, stock_status
from .validation import ConflictError, NotFoundError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables (idempotent)."""
    db.create_all()
    click.echo("PASS Database tables created")


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
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@click.group('products')
def products_group():
    """Product catalog commands."""


@products_group.command('list')
@click.option('--search', default=None, help='Substring of the product code')
@click.option('--color', default=None, help='Palette key')
@click.option('--stock', 'stock_filter', default='all',
              type=click.Choice(['all', 'available', 'low', 'out']))
@with_appcontext
def list_products(search, color, stock_filter):
    """List products, newest first."""
    try:
        products = filter_products(
            inventory_service.list_products(),
            search=search,
            color=color,
            stock_filter=stock_filter,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<5} {'Code':<14} {'Price':>12} {'Total':>7} {'TikTok':>7} {'Shopee':>7} {'Toko':>7}  Color / Status")
    click.echo("-" * 90)
    for p in products:
        click.echo(
            f"{p.id:<5} {p.product_code:<14} {p.price:>12} {p.total_stock:>7} "
            f"{p.tiktok_stock:>7} {p.shopee_stock:>7} {p.toko_stock:>7}  "
            f"{p.color} / {stock_status(p.total_stock)}"
        )


@products_group.command('create')
@click.option('--price', required=True, type=int)
@click.option('--stock', 'total_stock', required=True, type=int)
@click.option('--color', required=True)
@click.option('--code', 'product_code', default=None, help='Explicit product code')
@click.option('--prefix', 'code_prefix', default='', help='Series prefix for generated codes')
@with_appcontext
def create_product(price, total_stock, color, product_code, code_prefix):
    """Create a product with all channel stocks at 0."""
    try:
        product = inventory_service.create_product(
            price=price,
            total_stock=total_stock,
            color=color,
            product_code=product_code,
            code_prefix=code_prefix,
        )
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created product {product.product_code} (ID: {product.id})")


@click.group('stock')
def stock_group():
    """Warehouse and channel stock commands."""


@stock_group.command('add')
@click.argument('product_id', type=int)
@click.argument('amount', type=int)
@with_appcontext
def add_stock(product_id, amount):
    """Add AMOUNT units to a product's warehouse stock."""
    try:
        product = inventory_service.add_stock(product_id, amount)
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS {product.product_code}: total stock {product.total_stock}")


@stock_group.command('reduce')
@click.argument('product_id', type=int)
@click.argument('amount', type=int)
@with_appcontext
def reduce_stock(product_id, amount):
    """Take AMOUNT units out of a product's warehouse stock."""
    try:
        product = inventory_service.reduce_stock(product_id, amount)
    except CapacityExceededError as e:
        raise click.ClickException(
            f"{e} (requested {e.details['requested']}, available {e.details['available']})"
        )
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS {product.product_code}: total stock {product.total_stock}")


@stock_group.command('distribute')
@click.argument('product_id', type=int)
@click.option('--tiktok', default=0, type=int)
@click.option('--shopee', default=0, type=int)
@click.option('--toko', default=0, type=int)
@with_appcontext
def distribute_stock(product_id, tiktok, shopee, toko):
    """Move warehouse stock into channel allocations."""
    try:
        product = inventory_service.distribute_stock(
            product_id, {"tiktok": tiktok, "shopee": shopee, "toko": toko}
        )
    except CapacityExceededError as e:
        raise click.ClickException(
            f"{e} (requested {e.details['requested']}, available {e.details['available']})"
        )
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))

    stocks = product.channel_stocks()
    click.echo(
        f"PASS {product.product_code}: total {product.total_stock}, "
        f"tiktok {stocks['tiktok']}, shopee {stocks['shopee']}, toko {stocks['toko']}"
    )


@click.group('logs')
def logs_group():
    """Activity log inspection."""


@logs_group.command('list')
@click.option('--limit', default=20, type=int)
@with_appcontext
def list_logs(limit):
    """Show the most recent activity log entries."""
    try:
        entries = list_log_entries(limit=limit)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--limit")
    if not entries:
        click.echo("No activity recorded.")
        return
    for entry in entries:
        click.echo(f"{entry.created_at:%Y-%m-%d %H:%M:%S}  {entry.action:<22} {entry.description}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(products_group)
    app.cli.add_command(stock_group)
    app.cli.add_command(logs_group)
