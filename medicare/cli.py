import datetime as dt
import json
import click
from flask.cli import with_appcontext

from medicare.services.storage import STORAGE_KEYS
from medicare.services.storefront import current_storefront


@click.command("reminders-dispatch")
@click.option("--window-minutes", default=15, show_default=True, type=click.IntRange(min=1), help="How far ahead to look for due doses")
@with_appcontext
def reminders_dispatch(window_minutes):
    """Queue alerts for reminder doses due in the coming window."""
    start = dt.datetime.now().replace(second=0, microsecond=0)
    end = start + dt.timedelta(minutes=window_minutes)
    sent = current_storefront().reminders.dispatch_due(start, end)
    click.echo(f"{sent} reminder alert(s) queued for {start:%H:%M}-{end:%H:%M}.")


@click.command("orders-history")
@with_appcontext
def orders_history():
    """Print placed orders, most recent first."""
    orders = current_storefront().ledger.list()
    if not orders:
        click.echo("No orders yet.")
        return
    for order in orders:
        click.echo(
            f"{order.order_id}  {order.order_date:%Y-%m-%d %H:%M}  "
            f"{order.unit_count} item(s)  total {order.total}  {order.status}"
        )


@click.command("storage-dump")
@click.argument("key", type=click.Choice(STORAGE_KEYS))
@with_appcontext
def storage_dump(key):
    """Print one persisted storefront blob as JSON."""
    value = current_storefront().storage.get(key)
    click.echo(json.dumps(value, indent=2))


def register_cli(app):
    app.cli.add_command(reminders_dispatch)
    app.cli.add_command(orders_history)
    app.cli.add_command(storage_dump)
