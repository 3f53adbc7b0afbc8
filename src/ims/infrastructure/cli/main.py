import click

from ims.infrastructure.cli.inventory_commands import (
    inventory_adjust,
    inventory_bulk_update,
    inventory_history,
    inventory_low_stock,
    inventory_recalculate,
    inventory_restock,
)
from ims.infrastructure.cli.order_commands import order_cancel, order_place, order_show
from ims.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    variation_add,
    variation_list,
)
from ims.infrastructure.config import get_settings
from ims.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """IMS: storefront inventory management"""
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)


@cli.group()
def order() -> None:
    """Place and manage orders."""


@cli.group()
def product() -> None:
    """Manage catalog products."""


@cli.group()
def variation() -> None:
    """Manage product variations."""


@cli.group()
def inventory() -> None:
    """Manage stock."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_place)
order.add_command(order_show)
product.add_command(product_add)
product.add_command(product_list)
variation.add_command(variation_add)
variation.add_command(variation_list)
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_bulk_update)
inventory.add_command(inventory_history)
inventory.add_command(inventory_low_stock)
inventory.add_command(inventory_recalculate)
inventory.add_command(inventory_restock)
